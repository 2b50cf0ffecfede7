"""
Ledger Engine Errors

Every engine error is raised synchronously, before any state changes.
None of them is fatal: the caller re-prompts, refreshes its view, or
rejects the file, and carries on.
"""

from typing import Optional

import pydantic

from credit_ledger.models.ledger import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger engine operations."""
    pass


class ValidationError(LedgerError):
    """
    Input was missing a required field or had an out-of-range value.

    Carries the individual issues so the UI can point at each field.
    """

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []

    @classmethod
    def from_pydantic(
        cls,
        error: pydantic.ValidationError,
        subject: str,
    ) -> "ValidationError":
        issues = []
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ())) or subject
            issues.append(ValidationIssue(
                field=location,
                issue_type=detail.get("type", "invalid_value"),
                message=detail.get("msg", "Invalid value"),
            ))
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        return cls(f"Invalid {subject}: {summary}", issues)


class NotFoundError(LedgerError):
    """A referenced customer, creditor or line item does not exist."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class FormatError(LedgerError):
    """An import or restore payload is not a ledger in the expected shape."""
    pass
