"""
Data Models Package

This package contains all Pydantic models used in Credit Ledger.
Everything stored, exported or backed up conforms to these schemas.
"""

from credit_ledger.models.ledger import (
    Address,
    Creditor,
    CreditorCategory,
    Customer,
    Entity,
    EntityIdentity,
    LedgerStatus,
    LineItem,
    LineItemInput,
    LineItemStatus,
    Payable,
    PayableCategory,
    Payment,
    PaymentInput,
    PaymentMethod,
    Transaction,
    ValidationIssue,
)
from credit_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Address",
    "Creditor",
    "CreditorCategory",
    "Customer",
    "Entity",
    "EntityIdentity",
    "LedgerStatus",
    "LineItem",
    "LineItemInput",
    "LineItemStatus",
    "Payable",
    "PayableCategory",
    "Payment",
    "PaymentInput",
    "PaymentMethod",
    "Transaction",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
