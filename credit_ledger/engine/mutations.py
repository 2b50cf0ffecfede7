"""
Mutation Operations

Every operation takes the current collection and returns a NEW list.
Neither the input list nor any entity in it is modified, so a reader
holding the previous snapshot (e.g. a screen mid-render) never sees a
half-applied change.

Validation happens first and raises before anything is built:
- ValidationError: bad form input
- NotFoundError: stale customer/creditor/line-item id
"""

import datetime as dt
from typing import Any, Optional, Sequence, TypeVar, Union

import pydantic

from credit_ledger.engine import money
from credit_ledger.engine.errors import NotFoundError, ValidationError
from credit_ledger.engine.status import recompute
from credit_ledger.models.ledger import (
    Entity,
    EntityIdentity,
    LineItem,
    LineItemInput,
    LineItemStatus,
    PaymentInput,
    utc_now,
)

E = TypeVar("E", bound=Entity)
M = TypeVar("M", bound=pydantic.BaseModel)


# =============================================================================
# INPUT HANDLING
# =============================================================================

def _validated(
    model: type[M],
    data: Union[M, dict[str, Any]],
    subject: str,
) -> M:
    """Accept either a validated input model or a raw form dict."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e, subject) from e


# =============================================================================
# LOOKUPS
# =============================================================================

def find_entity(collection: Sequence[E], entity_id: str) -> E:
    for entity in collection:
        if entity.id == entity_id:
            return entity
    raise NotFoundError("Entity", entity_id)


def find_line_item(entity: Entity, item_id: str) -> LineItem:
    for item in entity.line_items:
        if item.id == item_id:
            return item
    raise NotFoundError("Line item", item_id)


def _replace(collection: Sequence[E], updated: E) -> list[E]:
    return [updated if entity.id == updated.id else entity for entity in collection]


def _with_line_items(
    entity: E,
    line_items: list[LineItem],
    now: Optional[dt.datetime],
) -> E:
    return recompute(entity.model_copy(update={"line_items": line_items}), now)


# =============================================================================
# PARTIES
# =============================================================================

def create_entity(
    entity_type: type[E],
    identity: Union[EntityIdentity, dict[str, Any]],
    first_line_item: Union[LineItemInput, dict[str, Any]],
    *,
    now: Optional[dt.datetime] = None,
) -> E:
    """
    Build a new customer or creditor with its first line item.

    A party always starts with exactly one line item; the identity and
    the item are both validated before anything is built.

    Raises:
        ValidationError: missing mobile, non-positive amount, bad date, ...
    """
    identity = _validated(EntityIdentity, identity, "identity")
    item_input = _validated(LineItemInput, first_line_item, "line item")
    item = entity_type.line_item_type.from_input(item_input)
    entity = entity_type.from_identity(identity, [item])
    return recompute(entity, now)


def append_entity(collection: Sequence[E], entity: E) -> list[E]:
    """Add an already-built party to the end of the collection."""
    return [*collection, entity]


def delete_entity(collection: Sequence[E], entity_id: str) -> list[E]:
    """Remove a party together with all its line items and payments."""
    find_entity(collection, entity_id)
    return [entity for entity in collection if entity.id != entity_id]


# =============================================================================
# LINE ITEMS
# =============================================================================

def add_line_item(
    collection: Sequence[E],
    entity_id: str,
    item_data: Union[LineItemInput, dict[str, Any]],
    *,
    now: Optional[dt.datetime] = None,
) -> list[E]:
    """Append a new unpaid line item (no payments yet) to a party."""
    entity = find_entity(collection, entity_id)
    item_input = _validated(LineItemInput, item_data, "line item")
    item = entity.line_item_type.from_input(item_input)
    updated = _with_line_items(entity, [*entity.line_items, item], now)
    return _replace(collection, updated)


def delete_line_item(
    collection: Sequence[E],
    entity_id: str,
    item_id: str,
    *,
    now: Optional[dt.datetime] = None,
) -> list[E]:
    """
    Remove a line item and its payments.

    Removing the last one leaves the party with no line items; its last
    activity date then falls back to today.
    """
    entity = find_entity(collection, entity_id)
    find_line_item(entity, item_id)
    kept = [item for item in entity.line_items if item.id != item_id]
    return _replace(collection, _with_line_items(entity, kept, now))


def _update_line_item(
    collection: Sequence[E],
    entity_id: str,
    item_id: str,
    changed: LineItem,
    now: Optional[dt.datetime],
) -> list[E]:
    entity = find_entity(collection, entity_id)
    items = [changed if item.id == item_id else item for item in entity.line_items]
    return _replace(collection, _with_line_items(entity, items, now))


# =============================================================================
# PAYMENTS
# =============================================================================

def add_payment(
    collection: Sequence[E],
    entity_id: str,
    item_id: str,
    payment_data: Union[PaymentInput, dict[str, Any]],
    *,
    now: Optional[dt.datetime] = None,
) -> list[E]:
    """
    Record a payment against one line item.

    The payment is stored exactly as given. Paying more than is due is
    allowed; the remaining balance simply bottoms out at zero. When the
    payments reach the line item amount the item becomes paid, with
    `paid_date` set to the date of the payment that settled it. An item
    that is already paid stays paid.
    """
    entity = find_entity(collection, entity_id)
    item = find_line_item(entity, item_id)
    payment = _validated(PaymentInput, payment_data, "payment").to_payment()

    payments = [*item.payments, payment]
    update: dict[str, Any] = {"payments": payments}
    if item.status != LineItemStatus.PAID:
        if money.total(p.amount for p in payments) >= item.amount:
            update["status"] = LineItemStatus.PAID
            update["paid_date"] = payment.date

    changed = item.model_copy(update=update)
    return _update_line_item(collection, entity_id, item_id, changed, now)


def mark_line_item_paid(
    collection: Sequence[E],
    entity_id: str,
    item_id: str,
    *,
    now: Optional[dt.datetime] = None,
) -> list[E]:
    """
    Force a line item to paid, e.g. when it was settled outside the app.

    Recorded payments are left as they are.
    """
    entity = find_entity(collection, entity_id)
    item = find_line_item(entity, item_id)
    changed = item.model_copy(update={
        "status": LineItemStatus.PAID,
        "paid_date": now or utc_now(),
    })
    return _update_line_item(collection, entity_id, item_id, changed, now)
