"""Services package."""

from credit_ledger.services.cloud import (
    CloudBackupError,
    CloudBackupInterface,
    CloudNotConnectedError,
    DirectoryCloudBackup,
    InMemoryCloudBackup,
)
from credit_ledger.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryLedgerRepository,
    JsonFileLedgerRepository,
    JsonLinesAuditStorage,
    LedgerRepository,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Cloud backup
    "CloudBackupError",
    "CloudBackupInterface",
    "CloudNotConnectedError",
    "DirectoryCloudBackup",
    "InMemoryCloudBackup",
    # Storage
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryLedgerRepository",
    "JsonFileLedgerRepository",
    "JsonLinesAuditStorage",
    "LedgerRepository",
    "StorageConnectionError",
    "StorageError",
]
