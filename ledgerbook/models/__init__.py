"""
Data Models Package

All Pydantic models used in ledgerbook. Data loaded from storage or
entered by the user is turned into these models before any business
logic sees it.
"""

from ledgerbook.models.validation import (
    ActionResult,
    ValidationIssue,
)
from ledgerbook.models.ledger import (
    DebtSummary,
    DebtTransaction,
    Debtor,
    DebtorBalance,
    DebtorResult,
    DebtorType,
    Polarity,
    RecordTransactionResult,
    SettlementProgress,
    SubjectView,
)
from ledgerbook.models.inventory import (
    BusinessProfile,
    Invoice,
    InvoiceItem,
    InvoiceResult,
    Product,
    ProductResult,
)
from ledgerbook.models.report import (
    DailySales,
    DateRange,
    ProductSales,
    ProductValue,
    ReportQuery,
    ReportResult,
)
from ledgerbook.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Validation
    "ActionResult",
    "ValidationIssue",
    # Ledger models
    "DebtSummary",
    "DebtTransaction",
    "Debtor",
    "DebtorBalance",
    "DebtorResult",
    "DebtorType",
    "Polarity",
    "RecordTransactionResult",
    "SettlementProgress",
    "SubjectView",
    # Inventory models
    "BusinessProfile",
    "Invoice",
    "InvoiceItem",
    "InvoiceResult",
    "Product",
    "ProductResult",
    # Report models
    "DailySales",
    "DateRange",
    "ProductSales",
    "ProductValue",
    "ReportQuery",
    "ReportResult",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
