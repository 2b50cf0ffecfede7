"""
In-Memory Storage

Test doubles for the storage interfaces. The ledger repository keeps the
serialized JSON rather than the objects, so what a test reads back is
exactly what would have been written to disk.
"""

from typing import Optional, Sequence
from uuid import UUID

from credit_ledger.models.audit import AuditEvent
from credit_ledger.models.ledger import Entity
from credit_ledger.portability.codec import parse_collection, serialize_collection
from credit_ledger.services.storage.interface import (
    AuditStorageInterface,
    LedgerRepository,
)


class InMemoryLedgerRepository(LedgerRepository):
    """Ledger repository backed by a string in memory."""

    def __init__(self, entity_type: type[Entity], storage_key: str):
        self._entity_type = entity_type
        self._storage_key = storage_key
        self._payload: Optional[str] = None
        self.save_count = 0

    @property
    def storage_key(self) -> str:
        return self._storage_key

    async def load(self) -> list[Entity]:
        if self._payload is None:
            return []
        return parse_collection(self._payload, self._entity_type)

    async def save(self, collection: Sequence[Entity]) -> bool:
        self._payload = serialize_collection(collection)
        self.save_count += 1
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
