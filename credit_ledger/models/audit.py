"""
Audit Models for Credit Ledger

Every change to a ledger is logged for audit purposes.
This provides:
1. Complete traceability of who-owes-what changes
2. Debugging information when an import or restore goes wrong
3. A history the user can review

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from credit_ledger.models.ledger import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger operation has its own event type.
    """
    # Parties
    ENTITY_CREATED = "entity_created"
    ENTITY_DELETED = "entity_deleted"

    # Line items and payments
    LINE_ITEM_ADDED = "line_item_added"
    LINE_ITEM_DELETED = "line_item_deleted"
    PAYMENT_RECORDED = "payment_recorded"
    LINE_ITEM_MARKED_PAID = "line_item_marked_paid"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SAVED = "ledger_saved"

    # Portability
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    IMPORT_REJECTED = "import_rejected"
    BACKUP_COMPLETED = "backup_completed"
    BACKUP_FAILED = "backup_failed"
    RESTORE_COMPLETED = "restore_completed"

    # Notifications
    REMINDER_SENT = "reminder_sent"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which ledger and which record is this about?
    ledger: Optional[str] = Field(
        default=None,
        description="Storage key of the ledger (receivables or payables)"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'customer', 'payable', 'payment')"
    )
    entity_id: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "ledger": self.ledger,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created(ledger, "customer", id, name, correlation_id)
        event = AuditEventBuilder.payment_recorded(ledger, item_id, amount, correlation_id)
    """

    @staticmethod
    def entity_created(
        ledger: str,
        entity_type: str,
        entity_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            ledger=ledger,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(
        ledger: str,
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            severity=AuditSeverity.WARNING,
            ledger=ledger,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} deleted with all line items",
            is_user_action=True,
        )

    @staticmethod
    def line_item_added(
        ledger: str,
        entity_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LINE_ITEM_ADDED,
            ledger=ledger,
            entity_type="line_item",
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Line item added: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def line_item_deleted(
        ledger: str,
        entity_id: str,
        item_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LINE_ITEM_DELETED,
            severity=AuditSeverity.WARNING,
            ledger=ledger,
            entity_type="line_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description="Line item deleted with its payments",
            details={"owner_id": entity_id},
            is_user_action=True,
        )

    @staticmethod
    def payment_recorded(
        ledger: str,
        item_id: str,
        amount: str,
        method: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            ledger=ledger,
            entity_type="line_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"Payment recorded: {amount} ({method})",
            details={"amount": amount, "method": method},
            is_user_action=True,
        )

    @staticmethod
    def line_item_marked_paid(
        ledger: str,
        item_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LINE_ITEM_MARKED_PAID,
            ledger=ledger,
            entity_type="line_item",
            entity_id=item_id,
            correlation_id=correlation_id,
            description="Line item marked as paid",
            is_user_action=True,
        )

    @staticmethod
    def ledger_loaded(
        ledger: str,
        entity_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            ledger=ledger,
            description=f"Ledger loaded with {entity_count} records",
            details={"entity_count": entity_count},
        )

    @staticmethod
    def ledger_saved(
        ledger: str,
        entity_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            ledger=ledger,
            correlation_id=correlation_id,
            description=f"Ledger saved with {entity_count} records",
            details={"entity_count": entity_count},
        )

    @staticmethod
    def data_exported(
        ledger: str,
        file_name: str,
        entity_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_EXPORTED,
            ledger=ledger,
            correlation_id=correlation_id,
            description=f"Exported {entity_count} records to {file_name}",
            details={"file_name": file_name, "entity_count": entity_count},
            is_user_action=True,
        )

    @staticmethod
    def data_merged(
        ledger: str,
        source: str,
        matched: int,
        added: int,
        line_items_added: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.RESTORE_COMPLETED
            if source == "cloud"
            else AuditEventType.DATA_IMPORTED
        )
        return AuditEvent(
            event_type=event_type,
            ledger=ledger,
            correlation_id=correlation_id,
            description=(
                f"Merged {source} data: {matched} matched, {added} added, "
                f"{line_items_added} new line items"
            ),
            details={
                "source": source,
                "matched": matched,
                "added": added,
                "line_items_added": line_items_added,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        ledger: str,
        source: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            ledger=ledger,
            correlation_id=correlation_id,
            description=f"Rejected {source} data: not a valid ledger file",
            error_message=reason,
            details={"source": source},
        )

    @staticmethod
    def backup_completed(
        ledger: str,
        entity_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_COMPLETED,
            ledger=ledger,
            correlation_id=correlation_id,
            description=f"Backed up {entity_count} records to the cloud",
            details={"entity_count": entity_count},
            is_user_action=True,
        )

    @staticmethod
    def backup_failed(
        ledger: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_FAILED,
            severity=AuditSeverity.ERROR,
            ledger=ledger,
            correlation_id=correlation_id,
            description="Cloud backup failed",
            error_message=error_message,
        )

    @staticmethod
    def reminder_sent(
        kind: str,
        title: str,
        tag: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_SENT,
            entity_type="reminder",
            entity_id=tag,
            description=title,
            details={"kind": kind},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
