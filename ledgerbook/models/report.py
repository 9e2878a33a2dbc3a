"""
Report Models

A ReportQuery names the period to report on; a ReportResult holds the
figures computed from stored data for that period.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ledgerbook.models.ledger import utc_now


class DateRange(str, Enum):
    """Reporting period."""
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    ALL_TIME = "all_time"


class ReportQuery(BaseModel):
    """What to report on."""

    query_id: UUID = Field(default_factory=uuid4)
    date_range: DateRange = DateRange.THIS_MONTH
    now: Optional[datetime] = Field(
        default=None,
        description="Reference instant for relative ranges (defaults to the current time)"
    )
    top_products_limit: int = Field(default=5, ge=1, le=50)
    inventory_breakdown_limit: int = Field(default=10, ge=1, le=100)


class DailySales(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    total_sales: float


class ProductSales(BaseModel):
    product_id: str
    name: str
    quantity: float
    value: float


class ProductValue(BaseModel):
    name: str
    value: float


class ReportResult(BaseModel):
    """Figures for one reporting period."""

    query_id: UUID
    executed_at: datetime = Field(default_factory=utc_now)
    date_range: DateRange

    success: bool
    error_message: Optional[str] = None

    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None

    # Sales
    invoice_count: int = 0
    total_sales: float = 0.0
    total_items_sold: float = 0.0
    average_invoice_value: float = 0.0
    sales_by_day: list[DailySales] = Field(default_factory=list)
    top_products: list[ProductSales] = Field(default_factory=list)

    # Inventory (always current, not period-bound)
    inventory_value: float = 0.0
    inventory_units: float = 0.0
    inventory_by_product: list[ProductValue] = Field(default_factory=list)

    # Debts (balances over the full log)
    total_receivables: float = 0.0
    total_payables: float = 0.0
    debt_transaction_count: int = Field(
        default=0,
        description="Debt ledger entries dated inside the period"
    )

    @property
    def net_debt_position(self) -> float:
        return self.total_receivables - self.total_payables

    @property
    def data_found(self) -> bool:
        return bool(
            self.invoice_count
            or self.debt_transaction_count
            or self.inventory_units
        )
