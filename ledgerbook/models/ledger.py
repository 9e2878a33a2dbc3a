"""
Debt Ledger Models

Debtors (customers and suppliers) and the debt transactions recorded
against them.

CRITICAL: A debtor's balance is not a field of the Debtor model.
It is recomputed from the transaction log every time it is needed
(see ledgerbook.ledger.balance) and is never persisted.

Persisted records keep the field names of the storage format
(``debtorId``, ``type``), exposed here under Python names through
aliases. Always serialize with ``to_storage_dict()``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from ledgerbook.models.validation import ActionResult


# =============================================================================
# ENUMS
# =============================================================================

class DebtorType(str, Enum):
    """Role of a debtor relative to the business."""
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class Polarity(str, Enum):
    """
    Direction of a ledger entry before the debtor's role is applied.

    DEBT: goods/services given or received on credit.
    PAYMENT: money received from a customer or paid to a supplier.
    """
    DEBT = "debt"
    PAYMENT = "payment"


def new_debtor_id() -> str:
    return f"debtor-{uuid4().hex}"


def new_transaction_id() -> str:
    return f"trans-{uuid4().hex}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Debtor(BaseModel):
    """
    A customer or supplier tracked in the ledger.

    Any ``balance`` key found in stored data is dropped on load.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(
        default_factory=new_debtor_id,
        min_length=1,
        description="Unique debtor ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    debtor_type: DebtorType = Field(
        ...,
        alias="type",
        description="customer or supplier"
    )
    phone: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Contact phone number"
    )

    @field_validator('phone')
    @classmethod
    def blank_phone_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def to_storage_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DebtTransaction(BaseModel):
    """
    One immutable entry in the debt ledger.

    ``amount`` is always an unsigned magnitude. Whether it raises or
    lowers a balance depends on the debtor's role and the polarity,
    and is decided at read time by the balance reducer.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str = Field(
        default_factory=new_transaction_id,
        min_length=1,
        description="Unique across the whole log"
    )
    debtor_id: str = Field(
        ...,
        alias="debtorId",
        min_length=1,
        description="Debtor this entry belongs to"
    )
    date: datetime = Field(
        default_factory=utc_now,
        description="When the entry happened (UTC when no offset was given)"
    )
    description: str = Field(
        default="",
        max_length=1000,
        description="Free-text note"
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Unsigned magnitude"
    )
    polarity: Polarity = Field(
        ...,
        alias="type",
        description="debt or payment"
    )

    @field_validator('date')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are interpreted as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_debt(self) -> bool:
        return self.polarity == Polarity.DEBT

    @property
    def is_payment(self) -> bool:
        return self.polarity == Polarity.PAYMENT

    def to_storage_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# DERIVED VIEWS (never persisted)
# =============================================================================

class SettlementProgress(BaseModel):
    """How much of the debt ever recorded has been paid off."""

    total_debt: float = Field(
        default=0.0,
        description="Sum of magnitudes of debt entries"
    )
    total_payments: float = Field(
        default=0.0,
        description="Sum of magnitudes of payment entries"
    )
    progress_percent: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Payments against total debt, clamped to [0, 100]"
    )
    is_settled: bool = Field(
        ...,
        description="Nothing is owed in the direction that hurts the business"
    )


class SubjectView(BaseModel):
    """Everything a presentation layer needs to show one debtor."""

    debtor: Debtor
    balance: float
    transactions: list[DebtTransaction] = Field(
        default_factory=list,
        description="Newest first"
    )
    progress: SettlementProgress


class DebtorBalance(BaseModel):
    """A debtor paired with its freshly computed balance (list rows)."""

    debtor: Debtor
    balance: float


class DebtSummary(BaseModel):
    """Totals across every debtor."""

    total_receivables: float = Field(
        default=0.0,
        description="Sum of positive customer balances"
    )
    total_payables: float = Field(
        default=0.0,
        description="Sum of absolute negative supplier balances"
    )

    @property
    def net_position(self) -> float:
        """Positive when more is owed to the business than by it."""
        return self.total_receivables - self.total_payables


# =============================================================================
# ACTION RESULTS
# =============================================================================

class DebtorResult(ActionResult):
    debtor: Optional[Debtor] = None


class RecordTransactionResult(ActionResult):
    transaction: Optional[DebtTransaction] = None
    view: Optional[SubjectView] = None
