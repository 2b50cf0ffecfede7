"""
JSON File Storage Implementation

DESIGN DECISION: Each ledger is one JSON file named after its storage
key (e.g. `data/customer_credit_data.json`), in the same shape as an
export. The user can open, copy or back up the file directly.

Writes go to a temporary file first and are then renamed over the old
one, so a crash mid-write never leaves a half-written ledger behind.
The audit log is a separate append-only JSON-lines file.
"""

import os
from pathlib import Path
from typing import Sequence
from uuid import UUID

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from credit_ledger.engine.errors import FormatError
from credit_ledger.models.audit import AuditEvent
from credit_ledger.models.ledger import Entity
from credit_ledger.portability.codec import parse_collection, serialize_collection
from credit_ledger.services.storage.interface import (
    AuditStorageInterface,
    LedgerRepository,
    StorageConnectionError,
    StorageError,
)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type(OSError),
    reraise=True,
)
def _replace_file(path: Path, text: str) -> None:
    """Write `text` to `path` atomically."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class JsonFileLedgerRepository(LedgerRepository):
    """
    Ledger repository backed by `<data_dir>/<storage_key>.json`.

    A missing file is an empty ledger.
    """

    def __init__(
        self,
        entity_type: type[Entity],
        data_dir: Path,
        storage_key: str,
    ):
        self._entity_type = entity_type
        self._storage_key = storage_key
        self._path = Path(data_dir) / f"{storage_key}.json"

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> list[Entity]:
        """Load the ledger file."""
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageConnectionError(f"Failed to read {self._path}: {e}") from e
        if not text.strip():
            return []
        try:
            return parse_collection(text, self._entity_type)
        except FormatError as e:
            raise StorageError(f"Stored ledger {self._path} is corrupt: {e}") from e

    async def save(self, collection: Sequence[Entity]) -> bool:
        """Rewrite the ledger file."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            _replace_file(self._path, serialize_collection(collection))
            return True
        except OSError as e:
            raise StorageError(f"Failed to save ledger to {self._path}: {e}") from e


class JsonLinesAuditStorage(AuditStorageInterface):
    """Append-only audit log, one JSON event per line."""

    def __init__(self, path: Path):
        self._path = Path(path)

    def _read_all(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        events = []
        with self._path.open(encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    events.append(AuditEvent.model_validate_json(line))
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(event.model_dump_json() + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}") from e

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._read_all() if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._read_all()))[:limit]
