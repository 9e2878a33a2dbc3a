"""
Tests for report execution.

All reports run against a fixed "now" of 2024-03-15 12:00 UTC.
"""

from datetime import datetime, timezone

import pytest

from ledgerbook.models.report import DateRange, ReportQuery
from ledgerbook.reports import ReportExecutionError, resolve_period


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def sell(app, product_id, quantity, when, price=None):
    draft = app.invoicing.new_draft()
    assert draft.add_item(product_id, quantity, price).success
    result = app.invoicing.finalize(draft, date=when)
    assert result.success
    return result.invoice


@pytest.fixture
def trading_history(app, stocked_catalog):
    """
    Sales in February and March, and some debts.

    After the sales below, stock is 4 x Rice and 1 x Oil.
    """
    rice, oil = stocked_catalog
    sell(app, rice.id, 2, utc(2024, 2, 20, 10))
    sell(app, rice.id, 3, utc(2024, 3, 1, 9))
    sell(app, oil.id, 2, utc(2024, 3, 1, 17), price=110)
    sell(app, rice.id, 1, utc(2024, 3, 14, 8))
    sell(app, oil.id, 1, utc(2024, 3, 14, 9))

    customer = app.ledger.add_debtor("Amina", "customer").debtor
    supplier = app.ledger.add_debtor("Wholesale", "supplier").debtor
    app.ledger.record_transaction(customer.id, "debt", 300, "a", date=utc(2024, 2, 10))
    app.ledger.record_transaction(customer.id, "payment", 100, "b", date=utc(2024, 3, 2))
    app.ledger.record_transaction(supplier.id, "debt", 500, "c", date=utc(2024, 3, 5))
    return rice, oil


class TestResolvePeriod:
    """Tests for date range bounds."""

    def test_this_month(self, fixed_now):
        assert resolve_period(DateRange.THIS_MONTH, fixed_now) == (utc(2024, 3, 1), utc(2024, 3, 16))

    def test_last_month(self, fixed_now):
        assert resolve_period(DateRange.LAST_MONTH, fixed_now) == (utc(2024, 2, 1), utc(2024, 3, 1))

    def test_year_boundaries(self):
        assert resolve_period(DateRange.LAST_MONTH, utc(2024, 1, 5)) == (utc(2023, 12, 1), utc(2024, 1, 1))
        assert resolve_period(DateRange.THIS_MONTH, utc(2023, 12, 31, 23)) == (utc(2023, 12, 1), utc(2024, 1, 1))

    def test_all_time(self, fixed_now):
        assert resolve_period(DateRange.ALL_TIME, fixed_now) == (None, None)

    def test_naive_now_is_utc(self):
        assert resolve_period(DateRange.THIS_MONTH, datetime(2024, 3, 15))[0] == utc(2024, 3, 1)

    def test_unknown_range(self, fixed_now):
        with pytest.raises(ReportExecutionError):
            resolve_period("fortnight", fixed_now)


class TestReportExecutor:
    """Tests for the figures in a report."""

    def test_this_month_sales(self, app, trading_history, fixed_now):
        result = app.reports.execute(ReportQuery(date_range=DateRange.THIS_MONTH, now=fixed_now))
        assert result.success
        assert result.invoice_count == 4
        assert result.total_sales == 150 + 220 + 50 + 120
        assert result.total_items_sold == 7
        assert result.average_invoice_value == pytest.approx(540 / 4)
        assert [(d.date, d.total_sales) for d in result.sales_by_day] == [
            ("2024-03-01", 370),
            ("2024-03-14", 170),
        ]

    def test_this_month_stops_at_end_of_today(self, app, trading_history, fixed_now):
        """Entries dated later this month are left out until their day comes."""
        rice, _ = trading_history
        sell(app, rice.id, 1, utc(2024, 3, 15, 23, 30))
        sell(app, rice.id, 1, utc(2024, 3, 20, 9))
        result = app.reports.execute(ReportQuery(date_range=DateRange.THIS_MONTH, now=fixed_now))
        assert result.invoice_count == 5
        assert result.sales_by_day[-1].date == "2024-03-15"

    def test_top_products_by_value(self, app, trading_history, fixed_now):
        rice, oil = trading_history
        result = app.reports.execute(ReportQuery(date_range=DateRange.THIS_MONTH, now=fixed_now))
        assert [(p.product_id, p.quantity, p.value) for p in result.top_products] == [
            (oil.id, 3, 340),
            (rice.id, 4, 200),
        ]

    def test_last_month(self, app, trading_history, fixed_now):
        result = app.reports.execute(ReportQuery(date_range=DateRange.LAST_MONTH, now=fixed_now))
        assert result.invoice_count == 1
        assert result.total_sales == 100
        assert result.debt_transaction_count == 1

    def test_all_time(self, app, trading_history, fixed_now):
        result = app.reports.execute(ReportQuery(date_range=DateRange.ALL_TIME, now=fixed_now))
        assert result.invoice_count == 5
        assert result.period_start is None
        assert result.debt_transaction_count == 3

    def test_inventory_figures(self, app, trading_history, fixed_now):
        """Inventory is the current stock whatever the period."""
        result = app.reports.execute(ReportQuery(date_range=DateRange.LAST_MONTH, now=fixed_now))
        assert result.inventory_units == 5
        assert result.inventory_value == 4 * 50 + 1 * 120
        assert [(p.name, p.value) for p in result.inventory_by_product] == [
            ("Rice 1kg", 200),
            ("Cooking Oil", 120),
        ]

    def test_zero_value_stock_left_out_of_breakdown(self, app, stocked_catalog, fixed_now):
        app.catalog.add_product("1003", "Free Sample", 5, 0)
        result = app.reports.execute(ReportQuery(date_range=DateRange.ALL_TIME, now=fixed_now))
        assert "Free Sample" not in [p.name for p in result.inventory_by_product]

    def test_debts_use_full_log(self, app, trading_history, fixed_now):
        """Balances count every entry, not just the period's."""
        result = app.reports.execute(ReportQuery(date_range=DateRange.THIS_MONTH, now=fixed_now))
        assert result.total_receivables == 200
        assert result.total_payables == 500
        assert result.net_debt_position == -300
        assert result.debt_transaction_count == 2

    def test_empty_store(self, app, fixed_now):
        result = app.reports.execute(ReportQuery(now=fixed_now))
        assert result.success
        assert result.average_invoice_value == 0
        assert result.sales_by_day == []
        assert not result.data_found

    def test_top_products_limit(self, app, trading_history, fixed_now):
        result = app.reports.execute(
            ReportQuery(date_range=DateRange.ALL_TIME, now=fixed_now, top_products_limit=1)
        )
        assert len(result.top_products) == 1

    def test_failure_is_a_result(self, app, fixed_now, monkeypatch):
        """Test that an error while reading comes back as success=False."""
        def broken():
            raise RuntimeError("disk on fire")
        monkeypatch.setattr(app.invoices, "load_all", broken)

        result = app.reports.execute(ReportQuery(now=fixed_now))

        assert not result.success
        assert result.error_message == "disk on fire"
