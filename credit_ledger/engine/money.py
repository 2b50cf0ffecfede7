"""
Money Arithmetic

All amounts are `Decimal`; conversion from user input happens in the
pydantic input models, so everything here already works on Decimals.
"""

from decimal import Decimal
from typing import Iterable

ZERO = Decimal("0")


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum of amounts. Negative contributions count as zero."""
    return sum((a for a in amounts if a > ZERO), ZERO)


def remaining(amount: Decimal, payments: Iterable[Decimal]) -> Decimal:
    """What is still owed on `amount` after `payments`, never below zero."""
    return max(ZERO, amount - total(payments))


def format_money(amount: Decimal, symbol: str = "₹") -> str:
    """Human-readable amount for messages, e.g. ₹1,500 or ₹1,250.50."""
    if amount == amount.to_integral_value():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"
