"""
Report Execution

Computes business figures for a period straight from stored data:
sales from invoices, stock value from the catalogue, and receivables
and payables from the debt ledger.

Nothing here is estimated or cached. Debt balances go through the
same balance reducer as the ledger screens, over the full log, so the
report always agrees with the per-debtor views.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Optional

from ledgerbook.activity import ActivityLogger
from ledgerbook.ledger.service import summarize_debts
from ledgerbook.models.activity import ActivityEventBuilder
from ledgerbook.models.inventory import Invoice, Product
from ledgerbook.models.report import (
    DailySales,
    DateRange,
    ProductSales,
    ProductValue,
    ReportQuery,
    ReportResult,
)
from ledgerbook.models.ledger import utc_now
from ledgerbook.services.storage.repositories import (
    DebtorRepository,
    InvoiceRepository,
    ProductRepository,
    TransactionRepository,
)


class ReportExecutionError(Exception):
    """Error during report execution."""
    pass


def _month_start(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1, tzinfo=timezone.utc)


def _previous_month_start(moment: datetime) -> datetime:
    if moment.month == 1:
        return datetime(moment.year - 1, 12, 1, tzinfo=timezone.utc)
    return datetime(moment.year, moment.month - 1, 1, tzinfo=timezone.utc)


def _next_day_start(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc) + timedelta(days=1)


def resolve_period(
    date_range: DateRange,
    now: datetime,
) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn a DateRange into [start, end) bounds in UTC.

    ``this_month`` runs from the first of the month to the end of today,
    so entries dated later in the month are not counted yet. ``all_time``
    has no bounds (None, None).
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    if date_range == DateRange.ALL_TIME:
        return None, None
    if date_range == DateRange.THIS_MONTH:
        return _month_start(now), _next_day_start(now)
    if date_range == DateRange.LAST_MONTH:
        end = _month_start(now)
        return _previous_month_start(end), end
    raise ReportExecutionError(f"Unknown date range: {date_range!r}")


def _in_period(
    moment: datetime,
    start: Optional[datetime],
    end: Optional[datetime],
) -> bool:
    if start is not None and moment < start:
        return False
    if end is not None and moment >= end:
        return False
    return True


class ReportExecutor:
    """
    Executes report queries against stored data.

    GUARANTEES:
    - Only returns figures computed from storage
    - Never raises; a failure comes back as ``success=False``
    """

    def __init__(
        self,
        products: ProductRepository,
        invoices: InvoiceRepository,
        debtors: DebtorRepository,
        transactions: TransactionRepository,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._products = products
        self._invoices = invoices
        self._debtors = debtors
        self._transactions = transactions
        self._activity = activity_logger or ActivityLogger()

    def execute(self, query: ReportQuery) -> ReportResult:
        """Compute the report for the query's period."""
        try:
            result = self._execute(query)
        except Exception as e:
            self._activity.log(ActivityEventBuilder.report_failed(
                date_range=str(getattr(query.date_range, "value", query.date_range)),
                error_message=str(e),
            ))
            return ReportResult(
                query_id=query.query_id,
                date_range=query.date_range,
                success=False,
                error_message=str(e),
            )

        self._activity.log(ActivityEventBuilder.report_generated(
            date_range=query.date_range.value,
            invoice_count=result.invoice_count,
            transaction_count=result.debt_transaction_count,
        ))
        return result

    def _execute(self, query: ReportQuery) -> ReportResult:
        start, end = resolve_period(query.date_range, query.now or utc_now())

        invoices = [
            inv for inv in self._invoices.load_all()
            if _in_period(inv.date, start, end)
        ]
        products = self._products.load_all()
        transactions = self._transactions.load_all()
        summary = summarize_debts(self._debtors.load_all(), transactions)

        total_sales = sum((inv.total for inv in invoices), 0.0)

        return ReportResult(
            query_id=query.query_id,
            date_range=query.date_range,
            success=True,
            period_start=start,
            period_end=end,
            invoice_count=len(invoices),
            total_sales=total_sales,
            total_items_sold=sum((inv.items_sold for inv in invoices), 0.0),
            average_invoice_value=total_sales / len(invoices) if invoices else 0.0,
            sales_by_day=self._sales_by_day(invoices),
            top_products=self._top_products(invoices, query.top_products_limit),
            inventory_value=sum((p.stock_value for p in products), 0.0),
            inventory_units=sum((p.quantity for p in products), 0.0),
            inventory_by_product=self._inventory_breakdown(
                products, query.inventory_breakdown_limit,
            ),
            total_receivables=summary.total_receivables,
            total_payables=summary.total_payables,
            debt_transaction_count=sum(
                1 for t in transactions if _in_period(t.date, start, end)
            ),
        )

    def _sales_by_day(self, invoices: list[Invoice]) -> list[DailySales]:
        """Daily totals, oldest day first."""
        by_day: dict[str, float] = defaultdict(float)
        for inv in invoices:
            day = inv.date.astimezone(timezone.utc).strftime("%Y-%m-%d")
            by_day[day] += inv.total
        return [
            DailySales(date=day, total_sales=total)
            for day, total in sorted(by_day.items())
        ]

    def _top_products(self, invoices: list[Invoice], limit: int) -> list[ProductSales]:
        """Best sellers by sales value."""
        totals: dict[str, dict] = {}
        for inv in invoices:
            for item in inv.items:
                entry = totals.setdefault(
                    item.product_id,
                    {"name": item.name, "quantity": 0.0, "value": 0.0},
                )
                entry["quantity"] += item.sale_quantity
                entry["value"] += item.line_total

        ranked = sorted(totals.items(), key=lambda kv: kv[1]["value"], reverse=True)
        return [
            ProductSales(product_id=product_id, **entry)
            for product_id, entry in ranked[:limit]
        ]

    def _inventory_breakdown(self, products: list[Product], limit: int) -> list[ProductValue]:
        """Products holding the most stock value (zero-value products left out)."""
        valued = [p for p in products if p.stock_value > 0]
        valued.sort(key=lambda p: p.stock_value, reverse=True)
        return [ProductValue(name=p.name, value=p.stock_value) for p in valued[:limit]]
