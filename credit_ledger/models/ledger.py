"""
Core Ledger Models for Credit Ledger

These models define the schemas for everything the ledger stores:
parties (customers and creditors), their line items (transactions and
payables) and the payments recorded against each line item.

They are designed to:
1. Enforce type safety at runtime
2. Be immutable once built (every change produces a new value)
3. Serialize to the same camelCase JSON shape used for storage,
   export and cloud backup

DESIGN DECISION: Receivables and payables share one set of base models.
The wire names differ (`transactions`/`totalDue` vs `payables`/`totalOwed`)
but the Python attributes are identical, so the ledger engine is written
once against `Entity` and `LineItem`.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Mint a fresh opaque identifier."""
    return str(uuid4())


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _money_to_json(value: Decimal) -> Any:
    """JSON numbers for money: integral values as int, others as float."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _coerce_business_date(value: Any) -> Any:
    """
    Accept full ISO timestamps for date fields by keeping the date part.

    Anything that is not a well-formed ISO timestamp is passed through
    untouched for pydantic to reject.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            return dt.datetime.fromisoformat(text).date()
        except ValueError:
            return value
    return value


def _blank_as_none(value: Any) -> Any:
    # Older files and forms write "" for a date that was never filled in.
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _coerce_timestamp(value: Any) -> Any:
    """Accept bare dates for timestamp fields (midnight of that day)."""
    if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return dt.datetime.combine(value, dt.time.min)
    if isinstance(value, str) and len(value) == 10:
        try:
            return dt.datetime.combine(dt.date.fromisoformat(value), dt.time.min)
        except ValueError:
            return value
    return value


BusinessDate = Annotated[dt.date, BeforeValidator(_coerce_business_date)]
Timestamp = Annotated[dt.datetime, BeforeValidator(_coerce_timestamp)]

# Optional dates; blank strings mean "not set".
OptionalBusinessDate = Annotated[Optional[BusinessDate], BeforeValidator(_blank_as_none)]
OptionalTimestamp = Annotated[Optional[Timestamp], BeforeValidator(_blank_as_none)]

# Rupees and paise: at most 2 decimal places and 15 digits, which a JSON
# number carries exactly.
Money = Annotated[Decimal, Field(gt=0, max_digits=15, decimal_places=2)]


# Shared configuration for everything that is persisted.
_RECORD_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)

_INPUT_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class LedgerStatus(str, Enum):
    """
    Aggregate status of a customer or creditor.

    Always derived from the line items, never set by hand.
    """
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"


class LineItemStatus(str, Enum):
    """Local status of a single transaction or payable."""
    PAID = "paid"
    UNPAID = "unpaid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    OTHER = "other"


class CreditorCategory(str, Enum):
    """What kind of party we owe money to."""
    SUPPLIER = "supplier"
    LENDER = "lender"
    SERVICE = "service"
    OTHER = "other"


class PayableCategory(str, Enum):
    """What a single payable is for."""
    PURCHASE = "purchase"
    LOAN = "loan"
    SERVICE = "service"
    RENT = "rent"
    OTHER = "other"


# =============================================================================
# PAYMENTS AND LINE ITEMS
# =============================================================================

class Payment(BaseModel):
    """
    A full or partial settlement recorded against one line item.

    Payments are append-only: created once, never edited or removed.
    """
    model_config = _RECORD_CONFIG

    id: str = Field(default_factory=new_id, min_length=1)
    amount: Money = Field(
        ...,
        description="Amount settled (may exceed what was still due)"
    )
    date: Timestamp = Field(
        default_factory=utc_now,
        description="When the payment was received (may be backdated)"
    )
    method: PaymentMethod = PaymentMethod.CASH
    description: Optional[str] = None
    receipt_photo: Optional[str] = Field(
        default=None,
        description="Opaque reference to a receipt image"
    )

    @field_serializer("amount", when_used="json")
    def _serialize_amount(self, value: Decimal) -> Any:
        return _money_to_json(value)


class LineItem(BaseModel):
    """
    A single bill or charge.

    `amount` is fixed at creation. `status` is local to this line item and
    is distinct from the aggregate status of the owning party.
    """
    model_config = _RECORD_CONFIG

    id: str = Field(default_factory=new_id, min_length=1)
    amount: Money = Field(
        ...,
        description="Amount billed, fixed at creation"
    )
    date: BusinessDate = Field(
        ...,
        description="Business date of the bill (not the creation date)"
    )
    description: Optional[str] = None
    bill_photo: Optional[str] = None
    status: LineItemStatus = LineItemStatus.UNPAID
    paid_date: OptionalTimestamp = None
    payments: list[Payment] = Field(default_factory=list)

    @field_validator("payments", mode="before")
    @classmethod
    def _missing_payments_are_empty(cls, v: Any) -> Any:
        # Older exports write `payments: null` for items never paid against.
        return [] if v is None else v

    @field_serializer("amount", when_used="json")
    def _serialize_amount(self, value: Decimal) -> Any:
        return _money_to_json(value)

    @classmethod
    def from_input(cls, data: "LineItemInput") -> "LineItem":
        """Build a fresh, unpaid line item from validated form input."""
        return cls(
            amount=data.amount,
            date=data.date,
            description=data.description,
            bill_photo=data.bill_photo,
        )


class Transaction(LineItem):
    """A receivable: money a customer owes us."""


class Payable(LineItem):
    """A payable: money we owe a creditor."""

    category: PayableCategory = PayableCategory.OTHER
    due_date: OptionalBusinessDate = None

    @classmethod
    def from_input(cls, data: "LineItemInput") -> "Payable":
        return cls(
            amount=data.amount,
            date=data.date,
            description=data.description,
            bill_photo=data.bill_photo,
            category=data.category or PayableCategory.OTHER,
            due_date=data.due_date,
        )


# =============================================================================
# PARTIES
# =============================================================================

class Address(BaseModel):
    model_config = _RECORD_CONFIG

    street: str = ""
    city: Optional[str] = None


class Entity(BaseModel):
    """
    A party we track a running balance with.

    `outstanding_total`, `last_activity_date` and `status` are derived
    from `line_items` and are refreshed by the engine after every change.
    They are stored alongside the source data for fast reads only.
    """
    model_config = _RECORD_CONFIG

    # Which line-item model this kind of party owns.
    line_item_type: ClassVar[type[LineItem]] = LineItem
    # Short name used for export file names and audit records.
    kind: ClassVar[str] = "entity"

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = ""
    mobile: str = Field(
        ...,
        min_length=1,
        description="Mobile number, the primary identity key"
    )
    email: Optional[str] = None
    photo: Optional[str] = None
    address: Address = Field(default_factory=Address)
    line_items: list[LineItem] = Field(default_factory=list)
    outstanding_total: Decimal = Field(default=Decimal("0"), ge=0)
    last_activity_date: BusinessDate = Field(default_factory=dt.date.today)
    status: LedgerStatus = LedgerStatus.UNPAID

    @field_serializer("outstanding_total", when_used="json")
    def _serialize_outstanding(self, value: Decimal) -> Any:
        return _money_to_json(value)

    @classmethod
    def identity_fields(cls, identity: "EntityIdentity") -> dict[str, Any]:
        """Map form identity fields onto this model's fields."""
        return {
            "name": identity.name,
            "mobile": identity.mobile,
            "email": identity.email or None,
            "photo": identity.photo or None,
            "address": Address(street=identity.street, city=identity.city or None),
        }

    @classmethod
    def from_identity(
        cls,
        identity: "EntityIdentity",
        line_items: list[LineItem],
    ) -> "Entity":
        return cls(line_items=line_items, **cls.identity_fields(identity))


class Customer(Entity):
    """Someone who owes us money (receivables side)."""

    line_item_type: ClassVar[type[LineItem]] = Transaction
    kind: ClassVar[str] = "customer"

    line_items: list[Transaction] = Field(
        default_factory=list,
        alias="transactions",
    )
    outstanding_total: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        alias="totalDue",
    )
    last_activity_date: BusinessDate = Field(
        default_factory=dt.date.today,
        alias="lastTransactionDate",
    )

    @property
    def transactions(self) -> list[Transaction]:
        return self.line_items

    @property
    def total_due(self) -> Decimal:
        return self.outstanding_total


class Creditor(Entity):
    """Someone we owe money to (payables side)."""

    line_item_type: ClassVar[type[LineItem]] = Payable
    kind: ClassVar[str] = "creditor"

    line_items: list[Payable] = Field(
        default_factory=list,
        alias="payables",
    )
    outstanding_total: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        alias="totalOwed",
    )
    last_activity_date: BusinessDate = Field(
        default_factory=dt.date.today,
        alias="lastPayableDate",
    )
    category: CreditorCategory = CreditorCategory.OTHER

    @property
    def payables(self) -> list[Payable]:
        return self.line_items

    @property
    def total_owed(self) -> Decimal:
        return self.outstanding_total

    @classmethod
    def identity_fields(cls, identity: "EntityIdentity") -> dict[str, Any]:
        fields = super().identity_fields(identity)
        fields["category"] = identity.category or CreditorCategory.OTHER
        return fields


# =============================================================================
# INPUT MODELS - raw form payloads before they enter the ledger
# =============================================================================

class EntityIdentity(BaseModel):
    """
    Identity fields of a new customer or creditor, as typed into a form.

    `category` is only used for creditors.
    """
    model_config = _INPUT_CONFIG

    name: str = Field(..., min_length=1, max_length=200)
    mobile: str = Field(..., min_length=1, max_length=20)
    email: Optional[str] = Field(default=None, max_length=200)
    photo: Optional[str] = None
    street: str = Field(default="", max_length=300)
    city: Optional[str] = Field(default=None, max_length=100)
    category: Optional[CreditorCategory] = None


class LineItemInput(BaseModel):
    """
    A new transaction or payable, as typed into a form.

    `category` and `due_date` are only used for payables.
    """
    model_config = _INPUT_CONFIG

    amount: Money = Field(..., description="Bill amount")
    date: BusinessDate = Field(default_factory=dt.date.today)
    description: Optional[str] = Field(default=None, max_length=500)
    bill_photo: Optional[str] = None
    category: Optional[PayableCategory] = None
    due_date: OptionalBusinessDate = None

    @model_validator(mode="after")
    def validate_dates(self) -> "LineItemInput":
        if self.due_date and self.due_date < self.date:
            raise ValueError("Due date cannot be before bill date")
        return self


class PaymentInput(BaseModel):
    """A payment as entered by the user."""
    model_config = _INPUT_CONFIG

    amount: Money = Field(..., description="Amount received or paid")
    date: Timestamp = Field(default_factory=utc_now)
    method: PaymentMethod = PaymentMethod.CASH
    description: Optional[str] = Field(default=None, max_length=500)
    receipt_photo: Optional[str] = None

    def to_payment(self) -> Payment:
        return Payment(
            amount=self.amount,
            date=self.date,
            method=self.method,
            description=self.description,
            receipt_photo=self.receipt_photo,
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user-supplied input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )
    suggested_fix: Optional[str] = None
