"""Cloud backup package."""

from credit_ledger.services.cloud.backup import (
    CloudBackupError,
    CloudBackupInterface,
    CloudNotConnectedError,
    DirectoryCloudBackup,
    InMemoryCloudBackup,
)

__all__ = [
    "CloudBackupError",
    "CloudBackupInterface",
    "CloudNotConnectedError",
    "DirectoryCloudBackup",
    "InMemoryCloudBackup",
]
