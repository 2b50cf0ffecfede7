"""
Tests for Credit Ledger models

Test strategy:
1. Unit tests for individual components (models, engine, codec)
2. Integration tests for the ledger book (with in-memory storage)
3. No real file system outside pytest's tmp_path
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from credit_ledger.models.ledger import (
    Address,
    Creditor,
    CreditorCategory,
    Customer,
    EntityIdentity,
    LedgerStatus,
    LineItemInput,
    LineItemStatus,
    Payable,
    PayableCategory,
    Payment,
    PaymentInput,
    PaymentMethod,
    Transaction,
)
from credit_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_transaction_defaults(self):
        """A new transaction is unpaid with no payments."""
        item = Transaction(amount=Decimal("250"), date=date(2024, 1, 5))
        assert item.status == LineItemStatus.UNPAID
        assert item.payments == []
        assert item.paid_date is None
        assert item.id

    def test_line_item_rejects_non_positive_amount(self):
        """Zero and negative amounts are rejected."""
        with pytest.raises(PydanticValidationError):
            Transaction(amount=Decimal("0"), date=date(2024, 1, 5))
        with pytest.raises(PydanticValidationError):
            Transaction(amount=Decimal("-10"), date=date(2024, 1, 5))

    def test_payment_rejects_negative_amount(self):
        """Payments must be positive."""
        with pytest.raises(PydanticValidationError):
            Payment(amount=Decimal("-1"))

    def test_records_are_frozen(self):
        """Stored records cannot be changed in place."""
        item = Transaction(amount=Decimal("100"), date=date(2024, 1, 5))
        with pytest.raises(PydanticValidationError):
            item.amount = Decimal("200")

    def test_business_date_accepts_iso_timestamp(self):
        """Full timestamps on date fields keep only the date part."""
        item = Transaction(amount=100, date="2024-01-05T18:30:00.000Z")
        assert item.date == date(2024, 1, 5)

    def test_timestamp_accepts_bare_date(self):
        """A bare date on a timestamp field means midnight."""
        payment = Payment(amount=50, date="2024-01-05")
        assert payment.date == datetime(2024, 1, 5, 0, 0)

    def test_null_payments_become_empty(self):
        """Older files write payments as null."""
        item = Transaction.model_validate({"amount": 10, "date": "2024-01-05", "payments": None})
        assert item.payments == []

    def test_customer_wire_aliases(self):
        """Customers serialize with transactions/totalDue/lastTransactionDate."""
        customer = Customer(
            name="Asha",
            mobile="9000000001",
            line_items=[Transaction(amount=Decimal("1000"), date=date(2024, 1, 1))],
            outstanding_total=Decimal("1000"),
            last_activity_date=date(2024, 1, 1),
        )
        data = customer.model_dump(mode="json", by_alias=True)
        assert data["totalDue"] == 1000
        assert data["lastTransactionDate"] == "2024-01-01"
        assert data["transactions"][0]["amount"] == 1000
        assert customer.transactions == customer.line_items
        assert customer.total_due == Decimal("1000")

    def test_creditor_wire_aliases(self):
        """Creditors serialize with payables/totalOwed/lastPayableDate."""
        creditor = Creditor(
            name="Ravi Traders",
            mobile="9100000001",
            category=CreditorCategory.SUPPLIER,
            line_items=[Payable(amount=Decimal("99.5"), date=date(2024, 2, 1))],
        )
        data = creditor.model_dump(mode="json", by_alias=True)
        assert "payables" in data
        assert data["payables"][0]["amount"] == 99.5
        assert data["category"] == "supplier"
        assert "totalOwed" in data
        assert "lastPayableDate" in data

    def test_entity_requires_mobile(self):
        """Mobile is the identity key and cannot be empty."""
        with pytest.raises(PydanticValidationError):
            Customer(name="Asha", mobile="")

    def test_identity_strips_whitespace(self):
        """Form input is trimmed."""
        identity = EntityIdentity(name="  Asha  ", mobile=" 9000000001 ")
        assert identity.name == "Asha"
        assert identity.mobile == "9000000001"

    def test_identity_maps_to_creditor_fields(self):
        """Creditor identity carries a category and address."""
        identity = EntityIdentity(
            name="Ravi", mobile="9100000001", street="MG Road",
            category=CreditorCategory.LENDER,
        )
        fields = Creditor.identity_fields(identity)
        assert fields["category"] == CreditorCategory.LENDER
        assert fields["address"] == Address(street="MG Road")

    def test_line_item_input_due_date_validation(self):
        """Due date cannot precede the bill date."""
        with pytest.raises(PydanticValidationError):
            LineItemInput(amount=100, date=date(2024, 3, 1), due_date=date(2024, 2, 1))

    def test_payable_from_input(self):
        """Payables keep category and due date from the form."""
        data = LineItemInput(
            amount=100,
            date=date(2024, 3, 1),
            due_date=date(2024, 3, 15),
            category=PayableCategory.RENT,
        )
        payable = Payable.from_input(data)
        assert payable.category == PayableCategory.RENT
        assert payable.due_date == date(2024, 3, 15)
        assert payable.status == LineItemStatus.UNPAID

    def test_payment_input_to_payment(self):
        """Payment input defaults to cash."""
        payment = PaymentInput(amount="400").to_payment()
        assert payment.method == PaymentMethod.CASH
        assert payment.amount == Decimal("400")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            description="Customer created",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo == timezone.utc

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            ledger="customer_credit_data",
            description="Payment recorded",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "payment_recorded"
        assert log_dict["ledger"] == "customer_credit_data"
        assert log_dict["correlation_id"] is None

    def test_builder_entity_deleted_is_warning(self):
        """Deletions are logged as warnings."""
        event = AuditEventBuilder.entity_deleted("customer_credit_data", "customer", "abc")
        assert event.event_type == AuditEventType.ENTITY_DELETED
        assert event.severity == AuditSeverity.WARNING
        assert event.is_user_action

    def test_builder_data_merged_by_source(self):
        """Cloud merges are restores, file merges are imports."""
        restore = AuditEventBuilder.data_merged("k", "cloud", 1, 2, 3)
        imported = AuditEventBuilder.data_merged("k", "file", 1, 2, 3)
        assert restore.event_type == AuditEventType.RESTORE_COMPLETED
        assert imported.event_type == AuditEventType.DATA_IMPORTED
        assert imported.details["line_items_added"] == 3


class TestLedgerEnums:
    """Tests for the status and category enums."""

    def test_status_values(self):
        """Status values match the stored strings."""
        assert LedgerStatus.PAID.value == "paid"
        assert LedgerStatus.UNPAID.value == "unpaid"
        assert LedgerStatus.PARTIAL.value == "partial"
        assert [s.value for s in LineItemStatus] == ["paid", "unpaid"]

    def test_payment_methods(self):
        """Test payment method values."""
        assert PaymentMethod("bank_transfer") == PaymentMethod.BANK_TRANSFER
        assert len(PaymentMethod) == 5
