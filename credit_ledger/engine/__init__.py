"""
Ledger Engine

Pure, synchronous operations over in-memory collections of customers or
creditors. Nothing in this package performs I/O; persistence, import and
cloud backup are the caller's job (see `credit_ledger.orchestrator`).
"""

from credit_ledger.engine.errors import (
    FormatError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from credit_ledger.engine.matching import same_entity
from credit_ledger.engine.merge import MergeResult, merge, reconcile
from credit_ledger.engine.mutations import (
    add_line_item,
    add_payment,
    append_entity,
    create_entity,
    delete_entity,
    delete_line_item,
    find_entity,
    find_line_item,
    mark_line_item_paid,
)
from credit_ledger.engine.status import (
    entity_last_activity_date,
    entity_outstanding,
    entity_status,
    line_item_paid_total,
    line_item_remaining,
    recompute,
)

__all__ = [
    # Errors
    "FormatError",
    "LedgerError",
    "NotFoundError",
    "ValidationError",
    # Status deriver
    "entity_last_activity_date",
    "entity_outstanding",
    "entity_status",
    "line_item_paid_total",
    "line_item_remaining",
    "recompute",
    # Mutations
    "add_line_item",
    "add_payment",
    "append_entity",
    "create_entity",
    "delete_entity",
    "delete_line_item",
    "find_entity",
    "find_line_item",
    "mark_line_item_paid",
    # Matching and merge
    "MergeResult",
    "merge",
    "reconcile",
    "same_entity",
]
