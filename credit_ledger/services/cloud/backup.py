"""
Cloud Backup Service

Backs a ledger up to a remote drive and restores it later. A restore
does NOT replace local data: the caller parses the payload and feeds it
to the Merge Reconciler, exactly like a file import.

DESIGN DECISION: The remote drive sits behind an interface. Real
providers are out of scope; `DirectoryCloudBackup` uses a local folder
(e.g. a synced Drive/Dropbox folder) and `InMemoryCloudBackup` is the
test double.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from credit_ledger.config import CloudSettings
from credit_ledger.models.ledger import utc_now


logger = structlog.get_logger(__name__)


class CloudBackupError(Exception):
    """Backup or restore failed on the remote side."""
    pass


class CloudNotConnectedError(CloudBackupError):
    """Backup or restore attempted before connecting."""
    pass


class CloudBackupInterface(ABC):
    """
    Abstract interface for a remote backup location.

    Payloads are serialized ledgers; one slot per ledger key.
    """

    def __init__(self):
        self._connected = False
        self._last_backup: Optional[datetime] = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    def last_backup_time(self) -> Optional[datetime]:
        """When the most recent successful backup finished, if any."""
        return self._last_backup

    def _require_connection(self) -> None:
        if not self._connected:
            raise CloudNotConnectedError("Not connected to cloud storage")

    @abstractmethod
    async def connect(self) -> bool:
        """
        Connect to the remote drive.

        Returns:
            True once connected
        """
        pass

    async def disconnect(self) -> None:
        """Forget the connection and the last backup time."""
        self._connected = False
        self._last_backup = None

    @abstractmethod
    async def backup(self, ledger_key: str, payload: str) -> bool:
        """
        Store `payload` as the latest backup of `ledger_key`.

        Raises:
            CloudNotConnectedError: If not connected
            CloudBackupError: If the upload fails
        """
        pass

    @abstractmethod
    async def restore(self, ledger_key: str) -> Optional[str]:
        """
        Fetch the latest backup of `ledger_key`.

        Returns:
            The serialized ledger, or None if there is no backup yet

        Raises:
            CloudNotConnectedError: If not connected
            CloudBackupError: If the download fails
        """
        pass


class InMemoryCloudBackup(CloudBackupInterface):
    """Cloud double that keeps backups in a dict."""

    def __init__(self):
        super().__init__()
        self.slots: dict[str, str] = {}

    async def connect(self) -> bool:
        self._connected = True
        return True

    async def backup(self, ledger_key: str, payload: str) -> bool:
        self._require_connection()
        self.slots[ledger_key] = payload
        self._last_backup = utc_now()
        return True

    async def restore(self, ledger_key: str) -> Optional[str]:
        self._require_connection()
        return self.slots.get(ledger_key)


class DirectoryCloudBackup(CloudBackupInterface):
    """
    Cloud backup into a folder, one `<ledger_key>.backup.json` per ledger.

    File operations are retried with exponential backoff, since synced
    folders are routinely locked for a moment by the sync client.
    """

    def __init__(self, settings: Optional[CloudSettings] = None):
        super().__init__()
        settings = settings or CloudSettings()
        self._root = Path(settings.backup_dir)
        self._retrying = Retrying(
            stop=stop_after_attempt(settings.retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def _slot(self, ledger_key: str) -> Path:
        return self._root / f"{ledger_key}.backup.json"

    async def connect(self) -> bool:
        try:
            self._retrying(self._root.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise CloudBackupError(f"Cannot reach backup folder {self._root}: {e}") from e
        self._connected = True
        logger.info("cloud_connected", backup_dir=str(self._root))
        return True

    async def backup(self, ledger_key: str, payload: str) -> bool:
        self._require_connection()
        try:
            self._retrying(self._slot(ledger_key).write_text, payload, encoding="utf-8")
        except OSError as e:
            raise CloudBackupError(f"Backup of {ledger_key} failed: {e}") from e
        self._last_backup = utc_now()
        logger.info("cloud_backup_written", ledger=ledger_key, size=len(payload))
        return True

    async def restore(self, ledger_key: str) -> Optional[str]:
        self._require_connection()
        slot = self._slot(ledger_key)
        if not slot.exists():
            return None
        try:
            return self._retrying(slot.read_text, encoding="utf-8")
        except OSError as e:
            raise CloudBackupError(f"Restore of {ledger_key} failed: {e}") from e
