"""
Merge Reconciler

Combines an incoming ledger (an imported file or a cloud restore) into
the local one without duplicating parties or losing payment history.

For each incoming party, in order:
1. Find the FIRST local party that `same_entity()` matches. The local list
   grows as we go, so a party appended earlier in the same merge can be
   matched by a later incoming record.
2. Matched: union the line items by id (local wins on an id clash), fill
   empty identity fields from the incoming record (first non-empty wins,
   local first), then re-derive the summary fields.
3. Not matched: append it under a freshly minted id. The incoming id is
   never reused.

CONFLICT POLICY: conflicts are resolved by local precedence, never by
raising. Merge is therefore not commutative, and when several records
tie on identity the outcome depends on their order.
"""

import datetime as dt
from typing import Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from credit_ledger.engine.matching import same_entity
from credit_ledger.engine.status import recompute
from credit_ledger.models.ledger import Address, Entity, LineItem, new_id

E = TypeVar("E", bound=Entity)


class MergeResult(BaseModel):
    """Outcome of a merge, with counts for the audit trail."""

    entities: list[Entity] = Field(default_factory=list)
    matched: int = Field(default=0, ge=0, description="Incoming parties merged into existing ones")
    added: int = Field(default=0, ge=0, description="Incoming parties appended as new")
    line_items_added: int = Field(default=0, ge=0)


def _first_match(collection: Sequence[Entity], candidate: Entity) -> Optional[int]:
    for index, entity in enumerate(collection):
        if same_entity(entity, candidate):
            return index
    return None


def _union_line_items(
    local: Sequence[LineItem],
    incoming: Sequence[LineItem],
) -> list[LineItem]:
    seen = {item.id for item in local}
    combined = list(local)
    for item in incoming:
        if item.id not in seen:
            seen.add(item.id)
            combined.append(item)
    return combined


def _merge_entity(local: E, incoming: Entity, now: Optional[dt.datetime]) -> E:
    line_items = _union_line_items(local.line_items, incoming.line_items)
    address = Address(
        street=local.address.street or incoming.address.street,
        city=local.address.city or incoming.address.city,
    )
    merged = local.model_copy(update={
        "line_items": line_items,
        "email": local.email or incoming.email,
        "photo": local.photo or incoming.photo,
        "address": address,
    })
    return recompute(merged, now)


def _adopt_entity(incoming: E, now: Optional[dt.datetime]) -> E:
    adopted = incoming.model_copy(update={
        "id": new_id(),
        "line_items": _union_line_items([], incoming.line_items),
    })
    return recompute(adopted, now)


def reconcile(
    local: Sequence[E],
    incoming: Sequence[E],
    *,
    now: Optional[dt.datetime] = None,
) -> MergeResult:
    """Merge `incoming` into `local` and report what happened."""
    merged: list[E] = list(local)
    result = MergeResult()

    for candidate in incoming:
        index = _first_match(merged, candidate)
        if index is None:
            merged.append(_adopt_entity(candidate, now))
            result.added += 1
            continue

        before = len(merged[index].line_items)
        merged[index] = _merge_entity(merged[index], candidate, now)
        result.matched += 1
        result.line_items_added += len(merged[index].line_items) - before

    result.entities = merged
    return result


def merge(
    local: Sequence[E],
    incoming: Sequence[E],
    *,
    now: Optional[dt.datetime] = None,
) -> list[E]:
    """Merge `incoming` into `local`; neither input is modified."""
    return reconcile(local, incoming, now=now).entities
