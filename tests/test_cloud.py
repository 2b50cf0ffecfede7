"""Tests for the cloud backup services."""

import pytest

from credit_ledger.config import CloudSettings
from credit_ledger.services.cloud import (
    CloudNotConnectedError,
    DirectoryCloudBackup,
    InMemoryCloudBackup,
)


class TestInMemoryCloudBackup:
    """Tests for the in-memory cloud double."""

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        cloud = InMemoryCloudBackup()
        assert not cloud.is_connected
        with pytest.raises(CloudNotConnectedError):
            await cloud.backup("customer_credit_data", "[]")
        with pytest.raises(CloudNotConnectedError):
            await cloud.restore("customer_credit_data")

    @pytest.mark.asyncio
    async def test_backup_then_restore(self):
        cloud = InMemoryCloudBackup()
        await cloud.connect()
        assert await cloud.restore("customer_credit_data") is None
        assert cloud.last_backup_time() is None

        await cloud.backup("customer_credit_data", '[{"mobile": "1"}]')
        assert await cloud.restore("customer_credit_data") == '[{"mobile": "1"}]'
        assert cloud.last_backup_time() is not None

    @pytest.mark.asyncio
    async def test_disconnect_clears_state(self):
        cloud = InMemoryCloudBackup()
        await cloud.connect()
        await cloud.backup("k", "[]")
        await cloud.disconnect()
        assert not cloud.is_connected
        assert cloud.last_backup_time() is None


class TestDirectoryCloudBackup:
    """Tests for the folder-backed cloud."""

    @pytest.mark.asyncio
    async def test_backup_writes_slot_file(self, tmp_path):
        cloud = DirectoryCloudBackup(CloudSettings(backup_dir=tmp_path / "drive"))
        assert await cloud.connect()
        await cloud.backup("customer_credit_creditors", "[]")

        slot = tmp_path / "drive" / "customer_credit_creditors.backup.json"
        assert slot.read_text(encoding="utf-8") == "[]"
        assert await cloud.restore("customer_credit_creditors") == "[]"

    @pytest.mark.asyncio
    async def test_restore_without_backup(self, tmp_path):
        cloud = DirectoryCloudBackup(CloudSettings(backup_dir=tmp_path))
        await cloud.connect()
        assert await cloud.restore("customer_credit_data") is None
