"""Reminders and their delivery."""

from credit_ledger.notifications.notifier import (
    LoggingNotifier,
    NotificationError,
    NotifierInterface,
    RecordingNotifier,
    dispatch,
)
from credit_ledger.notifications.reminders import (
    Reminder,
    ReminderKind,
    plan_reminders,
    weekly_report,
)

__all__ = [
    "LoggingNotifier",
    "NotificationError",
    "NotifierInterface",
    "RecordingNotifier",
    "dispatch",
    "Reminder",
    "ReminderKind",
    "plan_reminders",
    "weekly_report",
]
