"""
Status Deriver

Pure functions that compute a party's summary fields from its line items.

DESIGN DECISION: `recompute()` is the ONLY place the denormalized fields
(`outstanding_total`, `status`, `last_activity_date`) are written. Every
mutation and every merge ends by calling it, so no code path can leave
the summary out of step with the line items.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Sequence, TypeVar

from credit_ledger.engine import money
from credit_ledger.models.ledger import (
    Entity,
    LedgerStatus,
    LineItem,
    LineItemStatus,
    utc_now,
)

E = TypeVar("E", bound=Entity)


def line_item_paid_total(item: LineItem) -> Decimal:
    """Sum of all payments recorded against a line item."""
    return money.total(payment.amount for payment in item.payments)


def line_item_remaining(item: LineItem) -> Decimal:
    """
    What is still owed on one line item.

    Zero once the item is marked paid, whatever the recorded payments say.
    """
    if item.status == LineItemStatus.PAID:
        return money.ZERO
    return money.remaining(item.amount, (payment.amount for payment in item.payments))


def entity_outstanding(items: Sequence[LineItem]) -> Decimal:
    return money.total(line_item_remaining(item) for item in items)


def entity_status(items: Sequence[LineItem]) -> LedgerStatus:
    """
    Aggregate status:
    - paid: nothing outstanding
    - partial: something outstanding and an unpaid item has payments
    - unpaid: otherwise
    """
    if entity_outstanding(items) == money.ZERO:
        return LedgerStatus.PAID
    has_partial_payments = any(
        item.status == LineItemStatus.UNPAID and item.payments
        for item in items
    )
    return LedgerStatus.PARTIAL if has_partial_payments else LedgerStatus.UNPAID


def entity_last_activity_date(
    items: Sequence[LineItem],
    now: Optional[dt.datetime] = None,
) -> dt.date:
    """Latest business date among the line items, or today if there are none."""
    if not items:
        return (now or utc_now()).date()
    return max(item.date for item in items)


def recompute(entity: E, now: Optional[dt.datetime] = None) -> E:
    """Return a copy of `entity` with every derived field refreshed."""
    items = entity.line_items
    return entity.model_copy(update={
        "outstanding_total": entity_outstanding(items),
        "status": entity_status(items),
        "last_activity_date": entity_last_activity_date(items, now),
    })
