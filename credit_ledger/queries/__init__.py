"""Read-only ledger queries."""

from credit_ledger.queries.summary import (
    ActivityEntry,
    FinancialSummary,
    SortOrder,
    financial_summary,
    list_streets,
    overdue_creditors,
    overdue_customers,
    recent_activity,
    search_entities,
)

__all__ = [
    "ActivityEntry",
    "FinancialSummary",
    "SortOrder",
    "financial_summary",
    "list_streets",
    "overdue_creditors",
    "overdue_customers",
    "recent_activity",
    "search_entities",
]
