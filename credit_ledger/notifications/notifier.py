"""
Reminder delivery.

Delivery is best effort: a notifier that fails for one reminder does not
stop the rest from going out.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import structlog

from credit_ledger.audit import AuditLogger
from credit_ledger.models.audit import AuditEventBuilder
from credit_ledger.notifications.reminders import Reminder


logger = structlog.get_logger(__name__)


class NotificationError(Exception):
    """A reminder could not be delivered."""
    pass


class NotifierInterface(ABC):
    """Somewhere reminders can be shown to the user."""

    @abstractmethod
    async def send(self, reminder: Reminder) -> bool:
        """
        Deliver one reminder.

        Raises:
            NotificationError: If delivery failed
        """
        pass


class LoggingNotifier(NotifierInterface):
    """Writes reminders to the structured log."""

    async def send(self, reminder: Reminder) -> bool:
        logger.info(
            "reminder",
            kind=reminder.kind.value,
            title=reminder.title,
            body=reminder.body,
            tag=reminder.tag,
        )
        return True


class RecordingNotifier(NotifierInterface):
    """Keeps sent reminders, latest per tag, like a notification tray."""

    def __init__(self):
        self.sent: list[Reminder] = []

    @property
    def tray(self) -> dict[str, Reminder]:
        return {r.tag: r for r in self.sent}

    async def send(self, reminder: Reminder) -> bool:
        self.sent.append(reminder)
        return True


async def dispatch(
    reminders: Iterable[Reminder],
    notifier: NotifierInterface,
    audit_logger: Optional[AuditLogger] = None,
) -> int:
    """
    Send every reminder through `notifier`.

    Returns:
        How many reminders were delivered
    """
    delivered = 0
    for reminder in reminders:
        try:
            ok = await notifier.send(reminder)
        except NotificationError as e:
            logger.warning("reminder_failed", tag=reminder.tag, error=str(e))
            continue
        if not ok:
            continue
        delivered += 1
        if audit_logger:
            await audit_logger.log(AuditEventBuilder.reminder_sent(
                kind=reminder.kind.value,
                title=reminder.title,
                tag=reminder.tag,
            ))
    return delivered
