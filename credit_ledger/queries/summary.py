"""
Ledger Queries

Read-only views over the two ledgers: the dashboard figures, the overdue
lists, recent activity and the filtered/sorted party lists.

DESIGN DECISION: Queries are DETERMINISTIC and work only on what the
ledger stores. They read the derived fields (`outstanding_total`,
`status`, `last_activity_date`) and never recompute or change them.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from credit_ledger.engine import money
from credit_ledger.models.ledger import (
    Creditor,
    CreditorCategory,
    Customer,
    Entity,
    LedgerStatus,
    LineItemStatus,
)

E = TypeVar("E", bound=Entity)


class SortOrder(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    AMOUNT_LOW = "amount-low"
    AMOUNT_HIGH = "amount-high"
    DATE = "date"


class FinancialSummary(BaseModel):
    """Dashboard totals across both ledgers."""

    total_receivables: Decimal = Field(..., description="Owed to us")
    total_payables: Decimal = Field(..., description="Owed by us")
    net_position: Decimal = Field(
        ...,
        description="Receivables minus payables; negative when we owe more"
    )
    customer_count: int = 0
    creditor_count: int = 0
    unpaid_customer_count: int = 0
    unpaid_creditor_count: int = 0
    overdue_receivables: int = 0
    overdue_payables: int = 0


class ActivityEntry(BaseModel):
    """One line item in the recent-activity feed."""

    kind: str = Field(..., pattern="^(receivable|payable)$")
    entity_id: str
    entity_name: str
    line_item_id: str
    amount: Decimal
    date: dt.date
    status: LineItemStatus
    description: Optional[str] = None


def overdue_customers(
    customers: Sequence[Customer],
    today: dt.date,
    overdue_days: int = 30,
) -> list[Customer]:
    """Unpaid customers with no activity for more than `overdue_days`."""
    return [
        c for c in customers
        if c.status == LedgerStatus.UNPAID
        and (today - c.last_activity_date).days > overdue_days
    ]


def overdue_creditors(
    creditors: Sequence[Creditor],
    today: dt.date,
) -> list[Creditor]:
    """Creditors with at least one unpaid payable past its due date."""
    return [
        c for c in creditors
        if any(
            p.status != LineItemStatus.PAID
            and p.due_date is not None
            and p.due_date < today
            for p in c.payables
        )
    ]


def financial_summary(
    customers: Sequence[Customer],
    creditors: Sequence[Creditor],
    today: dt.date,
    overdue_days: int = 30,
) -> FinancialSummary:
    receivables = money.total(c.outstanding_total for c in customers)
    payables = money.total(c.outstanding_total for c in creditors)

    return FinancialSummary(
        total_receivables=receivables,
        total_payables=payables,
        net_position=receivables - payables,
        customer_count=len(customers),
        creditor_count=len(creditors),
        unpaid_customer_count=sum(1 for c in customers if c.status == LedgerStatus.UNPAID),
        unpaid_creditor_count=sum(1 for c in creditors if c.status == LedgerStatus.UNPAID),
        overdue_receivables=len(overdue_customers(customers, today, overdue_days)),
        overdue_payables=len(overdue_creditors(creditors, today)),
    )


def recent_activity(
    customers: Sequence[Customer],
    creditors: Sequence[Creditor],
    limit: int = 8,
) -> list[ActivityEntry]:
    """Newest line items from both ledgers, by business date."""
    entries = [
        ActivityEntry(
            kind=kind,
            entity_id=entity.id,
            entity_name=entity.name,
            line_item_id=item.id,
            amount=item.amount,
            date=item.date,
            status=item.status,
            description=item.description,
        )
        for kind, entities in (("receivable", customers), ("payable", creditors))
        for entity in entities
        for item in entity.line_items
    ]
    # Stable sort keeps receivables ahead of payables on the same date.
    entries.sort(key=lambda e: e.date, reverse=True)
    return entries[:limit]


def _matches_term(entity: Entity, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return (
        needle in entity.name.lower()
        or term in entity.mobile
        or bool(entity.email and needle in entity.email.lower())
    )


def search_entities(
    entities: Sequence[E],
    term: str = "",
    status: Optional[LedgerStatus] = None,
    street: Optional[str] = None,
    category: Optional[CreditorCategory] = None,
    sort: SortOrder = SortOrder.NAME_ASC,
) -> list[E]:
    """
    Filter and sort a party list.

    Args:
        term: Case-insensitive match on name or email, substring on mobile
        status: Only parties with this aggregate status
        street: Only parties on this street (exact match)
        category: Only creditors of this category
        sort: Ordering; `date` is newest activity first
    """
    found = [
        e for e in entities
        if _matches_term(e, term)
        and (status is None or e.status == status)
        and (not street or e.address.street == street)
        and (category is None or getattr(e, "category", None) == category)
    ]

    sort = SortOrder(sort)
    if sort == SortOrder.NAME_ASC:
        found.sort(key=lambda e: e.name.lower())
    elif sort == SortOrder.NAME_DESC:
        found.sort(key=lambda e: e.name.lower(), reverse=True)
    elif sort == SortOrder.AMOUNT_LOW:
        found.sort(key=lambda e: e.outstanding_total)
    elif sort == SortOrder.AMOUNT_HIGH:
        found.sort(key=lambda e: e.outstanding_total, reverse=True)
    else:
        found.sort(key=lambda e: e.last_activity_date, reverse=True)

    return found


def list_streets(entities: Sequence[Entity]) -> list[str]:
    """Distinct non-empty streets, in first-seen order."""
    return list(dict.fromkeys(e.address.street for e in entities if e.address.street))
