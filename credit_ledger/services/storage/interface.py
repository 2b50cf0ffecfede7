"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger engine free of I/O
2. Use in-memory storage for testing
3. Swap the JSON files for a real database later

A ledger is stored whole: one fixed key per ledger (receivables,
payables), loaded at startup and rewritten after every change.
"""

from abc import ABC, abstractmethod
from typing import Sequence
from uuid import UUID

from credit_ledger.models.audit import AuditEvent
from credit_ledger.models.ledger import Entity


class LedgerRepository(ABC):
    """
    Abstract interface for ledger persistence.

    One repository holds one ledger under one storage key.
    """

    @property
    @abstractmethod
    def storage_key(self) -> str:
        """Fixed logical name this ledger is stored under."""
        pass

    @abstractmethod
    async def load(self) -> list[Entity]:
        """
        Load the stored ledger.

        Returns:
            The stored collection, or an empty list if nothing was saved yet

        Raises:
            StorageError: If the stored data can't be read
        """
        pass

    @abstractmethod
    async def save(self, collection: Sequence[Entity]) -> bool:
        """
        Replace the stored ledger with `collection`.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one import).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
