"""Tests for the mutation operations."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from credit_ledger.engine import (
    NotFoundError,
    ValidationError,
    add_line_item,
    add_payment,
    append_entity,
    create_entity,
    delete_entity,
    delete_line_item,
    find_line_item,
    mark_line_item_paid,
)
from credit_ledger.engine.money import total
from credit_ledger.engine.status import line_item_remaining
from credit_ledger.models.ledger import (
    Creditor,
    Customer,
    EntityIdentity,
    LedgerStatus,
    LineItemInput,
    LineItemStatus,
    PaymentMethod,
)


def _assert_consistent(entity):
    """Derived fields agree with the line items."""
    assert entity.outstanding_total == total(line_item_remaining(i) for i in entity.line_items)
    if entity.outstanding_total == 0:
        assert entity.status == LedgerStatus.PAID


class TestCreateEntity:
    """Tests for create_entity()."""

    def test_new_customer_owes_first_bill(self, make_customer):
        customer = make_customer()
        assert customer.outstanding_total == Decimal("1000")
        assert customer.status == LedgerStatus.UNPAID
        assert customer.last_activity_date == date(2024, 1, 1)
        assert len(customer.transactions) == 1

    def test_accepts_validated_input_models(self, now):
        creditor = create_entity(
            Creditor,
            EntityIdentity(name="Ravi", mobile="9100000001", street="MG Road"),
            LineItemInput(amount=500, date=date(2024, 3, 1), due_date=date(2024, 3, 20)),
            now=now,
        )
        assert creditor.payables[0].due_date == date(2024, 3, 20)
        assert creditor.address.street == "MG Road"
        assert creditor.total_owed == Decimal("500")

    def test_missing_mobile_is_rejected(self, now):
        with pytest.raises(ValidationError) as exc_info:
            create_entity(Customer, {"name": "Asha", "mobile": ""}, {"amount": 10}, now=now)
        assert any(issue.field == "mobile" for issue in exc_info.value.issues)

    def test_malformed_date_is_rejected(self, now):
        with pytest.raises(ValidationError) as exc_info:
            create_entity(
                Customer, {"name": "Asha", "mobile": "1"},
                {"amount": 10, "date": "2024-01-01-garbage"}, now=now,
            )
        assert any(issue.field == "date" for issue in exc_info.value.issues)

    def test_iso_timestamp_keeps_its_date(self, now):
        customer = create_entity(
            Customer, {"name": "Asha", "mobile": "1"},
            {"amount": 10, "date": "2024-01-05T18:30:00.000Z"}, now=now,
        )
        assert customer.line_items[0].date == date(2024, 1, 5)

    def test_blank_due_date_means_none(self, now):
        creditor = create_entity(
            Creditor, {"name": "Ravi", "mobile": "1"},
            {"amount": 10, "date": "2024-03-01", "due_date": ""}, now=now,
        )
        assert creditor.payables[0].due_date is None

    def test_fractional_paise_are_rejected(self, now):
        with pytest.raises(ValidationError):
            create_entity(
                Customer, {"name": "Asha", "mobile": "1"},
                {"amount": "1234567890.123456789"}, now=now,
            )

    def test_non_positive_amount_is_rejected(self, now):
        with pytest.raises(ValidationError):
            create_entity(Customer, {"name": "Asha", "mobile": "1"}, {"amount": 0}, now=now)
        with pytest.raises(ValidationError):
            create_entity(Customer, {"name": "Asha", "mobile": "1"}, {"amount": -5}, now=now)


class TestSimplePaymentFlow:
    """Asha pays a 1000 bill in two instalments."""

    def test_two_instalments(self, make_customer, now):
        customer = make_customer()
        ledger = append_entity([], customer)
        item_id = customer.line_items[0].id

        ledger = add_payment(ledger, customer.id, item_id, {"amount": 400, "method": "cash"}, now=now)
        asha = ledger[0]
        assert asha.outstanding_total == Decimal("600")
        assert asha.line_items[0].status == LineItemStatus.UNPAID
        assert asha.status == LedgerStatus.PARTIAL

        ledger = add_payment(ledger, customer.id, item_id, {"amount": 600}, now=now)
        asha = ledger[0]
        assert asha.outstanding_total == Decimal("0")
        assert asha.line_items[0].status == LineItemStatus.PAID
        assert asha.status == LedgerStatus.PAID
        _assert_consistent(asha)


class TestPayments:
    """Tests for add_payment() and mark_line_item_paid()."""

    def test_overpayment_clamps_to_zero(self, make_customer, now):
        customer = make_customer(amount="100")
        ledger = add_payment([customer], customer.id, customer.line_items[0].id, {"amount": 150}, now=now)
        assert ledger[0].outstanding_total == Decimal("0")
        assert ledger[0].line_items[0].status == LineItemStatus.PAID
        assert ledger[0].line_items[0].payments[0].amount == Decimal("150")

    def test_settling_payment_sets_paid_date(self, make_customer, now):
        customer = make_customer(amount="100")
        paid_at = datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc)
        ledger = add_payment(
            [customer], customer.id, customer.line_items[0].id,
            {"amount": 100, "date": paid_at, "method": PaymentMethod.ONLINE},
            now=now,
        )
        item = ledger[0].line_items[0]
        assert item.paid_date == paid_at
        assert item.payments[0].method == PaymentMethod.ONLINE

    def test_payment_on_paid_item_keeps_it_paid(self, make_customer, now):
        customer = make_customer(amount="100")
        item_id = customer.line_items[0].id
        ledger = mark_line_item_paid([customer], customer.id, item_id, now=now)
        ledger = add_payment(ledger, customer.id, item_id, {"amount": 10}, now=now)
        item = find_line_item(ledger[0], item_id)
        assert item.status == LineItemStatus.PAID
        assert item.paid_date == now
        assert len(item.payments) == 1

    def test_mark_paid_keeps_payments(self, make_customer, now):
        customer = make_customer(amount="100")
        item_id = customer.line_items[0].id
        ledger = add_payment([customer], customer.id, item_id, {"amount": 30}, now=now)
        ledger = mark_line_item_paid(ledger, customer.id, item_id, now=now)
        assert ledger[0].status == LedgerStatus.PAID
        assert ledger[0].line_items[0].payments[0].amount == Decimal("30")

    def test_invalid_payment_is_rejected(self, make_customer, now):
        customer = make_customer()
        with pytest.raises(ValidationError):
            add_payment([customer], customer.id, customer.line_items[0].id, {"amount": -1}, now=now)
        with pytest.raises(ValidationError):
            add_payment([customer], customer.id, customer.line_items[0].id, {"amount": "10.005"}, now=now)

    def test_unknown_line_item(self, make_customer, now):
        customer = make_customer()
        with pytest.raises(NotFoundError):
            add_payment([customer], customer.id, "missing", {"amount": 1}, now=now)


class TestLineItems:
    """Tests for adding and deleting line items."""

    def test_add_line_item_updates_totals(self, make_customer, now):
        customer = make_customer(amount="100")
        ledger = add_line_item([customer], customer.id, {"amount": 50, "date": date(2024, 2, 1)}, now=now)
        assert ledger[0].outstanding_total == Decimal("150")
        assert ledger[0].last_activity_date == date(2024, 2, 1)
        assert ledger[0].line_items[-1].payments == []
        _assert_consistent(ledger[0])

    def test_delete_last_line_item(self, make_customer, now):
        customer = make_customer()
        ledger = delete_line_item([customer], customer.id, customer.line_items[0].id, now=now)
        assert ledger[0].line_items == []
        assert ledger[0].outstanding_total == Decimal("0")
        assert ledger[0].status == LedgerStatus.PAID
        assert ledger[0].last_activity_date == now.date()

    def test_unknown_entity(self, now):
        with pytest.raises(NotFoundError) as exc_info:
            add_line_item([], "nobody", {"amount": 1}, now=now)
        assert "nobody" in str(exc_info.value)


class TestCopyOnWrite:
    """Mutations never change their inputs."""

    def test_input_collection_untouched(self, make_customer, now):
        customer = make_customer()
        ledger = [customer]
        updated = add_payment(ledger, customer.id, customer.line_items[0].id, {"amount": 10}, now=now)
        assert updated is not ledger
        assert ledger[0] is customer
        assert customer.line_items[0].payments == []
        assert customer.outstanding_total == Decimal("1000")

    def test_other_entities_are_shared(self, make_customer, now):
        first = make_customer()
        second = make_customer(name="Bina", mobile="9000000002")
        updated = add_line_item([first, second], first.id, {"amount": 1}, now=now)
        assert updated[1] is second


class TestDeleteEntity:
    """Tests for delete_entity()."""

    def test_delete(self, make_customer):
        first = make_customer()
        second = make_customer(name="Bina", mobile="9000000002")
        assert delete_entity([first, second], first.id) == [second]

    def test_delete_unknown(self, make_customer):
        with pytest.raises(NotFoundError):
            delete_entity([make_customer()], "missing")
