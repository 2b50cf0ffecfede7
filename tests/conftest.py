"""Shared fixtures for the ledger tests."""

from datetime import date, datetime, timezone

import pytest

from credit_ledger.engine import create_entity
from credit_ledger.models.ledger import Creditor, Customer


NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_customer(now):
    """Build a customer with one transaction through the engine."""

    def _make(name="Asha", mobile="9000000001", amount="1000", when=date(2024, 1, 1), **identity):
        return create_entity(
            Customer,
            {"name": name, "mobile": mobile, **identity},
            {"amount": amount, "date": when},
            now=now,
        )

    return _make


@pytest.fixture
def make_creditor(now):
    """Build a creditor with one payable through the engine."""

    def _make(name="Ravi Traders", mobile="9100000001", amount="2000",
              when=date(2024, 3, 1), due=None, **identity):
        return create_entity(
            Creditor,
            {"name": name, "mobile": mobile, **identity},
            {"amount": amount, "date": when, "due_date": due},
            now=now,
        )

    return _make
