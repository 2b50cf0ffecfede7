"""
Configuration Management for Credit Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see where data lives on disk and which
thresholds drive reminders and overdue flags.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NotificationSettings(BaseSettings):
    """Payment reminder preferences."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_",
        extra="ignore"
    )

    enabled: bool = Field(
        default=False,
        description="Send reminders at all"
    )
    reminder_days: int = Field(
        default=3,
        ge=0,
        le=30,
        description="Days before a payable's due date to start reminding"
    )
    overdue_reminders: bool = Field(
        default=True,
        description="Remind about payables past their due date"
    )
    weekly_reports: bool = Field(
        default=False,
        description="Send a weekly receivables/payables summary"
    )
    receivable_reminder_interval_days: int = Field(
        default=7,
        ge=1,
        description="Repeat interval for old-receivable reminders"
    )


class CloudSettings(BaseSettings):
    """Cloud backup configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUD_",
        extra="ignore"
    )

    backup_dir: Path = Field(
        default=Path("./cloud"),
        description="Folder standing in for the remote drive"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per backup/restore call"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Storage
    data_dir: Path = Field(
        default=Path("./data"),
        description="Folder holding the ledger files"
    )
    receivables_storage_key: str = Field(
        default="customer_credit_data",
        description="Storage key for the customers ledger"
    )
    payables_storage_key: str = Field(
        default="customer_credit_creditors",
        description="Storage key for the creditors ledger"
    )

    # Import limits
    max_import_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum import file size in MB"
    )

    # Display and thresholds
    currency_symbol: str = Field(default="₹")
    receivable_overdue_days: int = Field(
        default=30,
        ge=1,
        description="Days without activity before an unpaid customer counts as overdue"
    )

    @field_validator("receivables_storage_key", "payables_storage_key")
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """Keys become file names, so keep them to a safe alphabet."""
        if not v or not all(c.isalnum() or c in "_-" for c in v):
            raise ValueError(f"Invalid storage key: {v!r}")
        return v

    @property
    def max_import_size_bytes(self) -> int:
        return self.max_import_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def notifications(self) -> NotificationSettings:
        return NotificationSettings()

    @property
    def cloud(self) -> CloudSettings:
        return CloudSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an `<name>_error`
    entry for each group that failed. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("app", "notifications", "cloud"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
