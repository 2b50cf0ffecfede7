"""Configuration package."""

from credit_ledger.config.settings import (
    AppSettings,
    CloudSettings,
    NotificationSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CloudSettings",
    "NotificationSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
