"""Tests for configuration."""

import pytest
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from credit_ledger.config import (
    AppSettings,
    CloudSettings,
    get_settings,
    validate_all_settings,
)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATA_DIR", raising=False)
        settings = AppSettings()
        assert settings.receivables_storage_key == "customer_credit_data"
        assert settings.payables_storage_key == "customer_credit_creditors"
        assert settings.data_dir == Path("./data")
        assert settings.max_import_size_bytes == 10 * 1024 * 1024
        assert settings.receivable_overdue_days == 30

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RECEIVABLE_OVERDUE_DAYS", "45")
        assert AppSettings().receivable_overdue_days == 45

    def test_storage_key_must_be_file_safe(self):
        with pytest.raises(PydanticValidationError):
            AppSettings(receivables_storage_key="../escape")

    def test_cloud_prefix(self, monkeypatch):
        monkeypatch.setenv("CLOUD_RETRY_ATTEMPTS", "5")
        assert CloudSettings().retry_attempts == 5


class TestValidateAllSettings:
    """Tests for validate_all_settings()."""

    def test_reports_bad_group(self, monkeypatch):
        get_settings.cache_clear()
        monkeypatch.setenv("NOTIFY_REMINDER_DAYS", "99")
        results = validate_all_settings()
        assert results["app"] is True
        assert results["notifications"] is False
        assert "notifications_error" in results
        get_settings.cache_clear()
