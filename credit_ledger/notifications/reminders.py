"""
Payment Reminders

Decides which reminders are due, from the derived ledger fields only
(status, outstanding totals, due dates, last activity). Nothing here
changes a ledger.

Three kinds of reminder:
- due soon: an unpaid payable falls due within `reminder_days`
- overdue: an unpaid payable is past its due date
- receivable: a customer has owed us money, untouched, for
  `receivable_overdue_days`; repeated every
  `receivable_reminder_interval_days` after that
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from credit_ledger.config import NotificationSettings
from credit_ledger.engine.money import format_money
from credit_ledger.engine.status import line_item_remaining
from credit_ledger.models.ledger import (
    Creditor,
    Customer,
    LedgerStatus,
    LineItemStatus,
)


class ReminderKind(str, Enum):
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    RECEIVABLE = "receivable_reminder"
    WEEKLY_REPORT = "weekly_report"


class Reminder(BaseModel):
    """A single notification ready to be shown to the user."""

    kind: ReminderKind
    title: str
    body: str
    tag: str = Field(
        ...,
        description="Stable key; a newer reminder with the same tag replaces the old one"
    )
    entity_id: Optional[str] = None
    line_item_id: Optional[str] = None
    amount: Optional[Decimal] = None


def _plural(n: int, word: str = "day") -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def _payable_reminders(
    creditors: Sequence[Creditor],
    preferences: NotificationSettings,
    today: dt.date,
    currency: str,
) -> list[Reminder]:
    reminders = []
    horizon = today + dt.timedelta(days=preferences.reminder_days)

    for creditor in creditors:
        for payable in creditor.payables:
            if payable.status != LineItemStatus.UNPAID or payable.due_date is None:
                continue
            owed = line_item_remaining(payable)
            due = payable.due_date

            if today < due <= horizon:
                days = (due - today).days
                reminders.append(Reminder(
                    kind=ReminderKind.DUE_SOON,
                    title="Payment Due Soon!",
                    body=f"{creditor.name}: {format_money(owed, currency)} due in {_plural(days)}",
                    tag=f"due-soon-{payable.id}",
                    entity_id=creditor.id,
                    line_item_id=payable.id,
                    amount=owed,
                ))
            elif preferences.overdue_reminders and due < today:
                days = (today - due).days
                reminders.append(Reminder(
                    kind=ReminderKind.OVERDUE,
                    title="Payment Overdue!",
                    body=f"{creditor.name}: {format_money(owed, currency)} overdue by {_plural(days)}",
                    tag=f"overdue-{payable.id}",
                    entity_id=creditor.id,
                    line_item_id=payable.id,
                    amount=owed,
                ))

    return reminders


def _receivable_reminders(
    customers: Sequence[Customer],
    preferences: NotificationSettings,
    today: dt.date,
    overdue_days: int,
    currency: str,
) -> list[Reminder]:
    reminders = []
    interval = preferences.receivable_reminder_interval_days

    for customer in customers:
        if customer.status != LedgerStatus.UNPAID:
            continue
        idle_days = (today - customer.last_activity_date).days
        # Day 30, 37, 44, ... with the defaults.
        if idle_days >= overdue_days and (idle_days - overdue_days) % interval == 0:
            reminders.append(Reminder(
                kind=ReminderKind.RECEIVABLE,
                title="Outstanding Receivable",
                body=(
                    f"{customer.name}: {format_money(customer.total_due, currency)} "
                    f"pending for {_plural(idle_days)}"
                ),
                tag=f"receivable-{customer.id}",
                entity_id=customer.id,
                amount=customer.total_due,
            ))

    return reminders


def plan_reminders(
    customers: Sequence[Customer],
    creditors: Sequence[Creditor],
    preferences: NotificationSettings,
    today: dt.date,
    overdue_days: int = 30,
    currency: str = "₹",
) -> list[Reminder]:
    """All reminders due today. Empty when reminders are switched off."""
    if not preferences.enabled:
        return []
    return [
        *_payable_reminders(creditors, preferences, today, currency),
        *_receivable_reminders(customers, preferences, today, overdue_days, currency),
    ]


def weekly_report(
    customers: Sequence[Customer],
    creditors: Sequence[Creditor],
    preferences: NotificationSettings,
    currency: str = "₹",
) -> Optional[Reminder]:
    """Summary of both ledgers, if weekly reports are switched on."""
    if not (preferences.enabled and preferences.weekly_reports):
        return None

    receivables = sum((c.outstanding_total for c in customers), Decimal("0"))
    payables = sum((c.outstanding_total for c in creditors), Decimal("0"))
    unpaid_customers = sum(1 for c in customers if c.status == LedgerStatus.UNPAID)
    unpaid_creditors = sum(1 for c in creditors if c.status == LedgerStatus.UNPAID)

    return Reminder(
        kind=ReminderKind.WEEKLY_REPORT,
        title="Weekly Financial Report",
        body=(
            f"Receivables: {format_money(receivables, currency)} ({unpaid_customers} pending) | "
            f"Payables: {format_money(payables, currency)} ({unpaid_creditors} pending)"
        ),
        tag="weekly-report",
    )
