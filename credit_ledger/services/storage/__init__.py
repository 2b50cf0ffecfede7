"""
Storage Services Package

Provides abstract interfaces and concrete implementations for ledger and
audit storage. JSON files are the default backend; in-memory versions
are used in tests.
"""

from credit_ledger.services.storage.interface import (
    AuditStorageInterface,
    LedgerRepository,
    StorageConnectionError,
    StorageError,
)
from credit_ledger.services.storage.json_files import (
    JsonFileLedgerRepository,
    JsonLinesAuditStorage,
)
from credit_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryLedgerRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "LedgerRepository",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryLedgerRepository",
    "JsonFileLedgerRepository",
    "JsonLinesAuditStorage",
]
