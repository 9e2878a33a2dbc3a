"""
Tests for LedgerService: recording transactions, debtor registration,
views and summaries against an in-memory store.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from ledgerbook.models.ledger import DebtorType, Polarity
from ledgerbook.orchestrator import BookkeepingApp
from ledgerbook.services.storage import DEBT_TRANSACTIONS_KEY, DEBTORS_KEY


def stored_log(store) -> list:
    raw = store.get_item(DEBT_TRANSACTIONS_KEY)
    return json.loads(raw) if raw else []


class TestRecordTransaction:
    """Recording debts and payments."""

    def test_records_and_returns_view(self, ledger, customer):
        """Test that a valid entry is stored and the view is recomputed."""
        result = ledger.record_transaction(customer.id, "debt", 100, "  Sugar on credit ")
        assert result.success
        assert result.issues == []
        assert result.transaction.id.startswith("trans-")
        assert result.transaction.description == "Sugar on credit"
        assert result.transaction.polarity == Polarity.DEBT
        assert result.view.balance == 100
        assert result.view.transactions == [result.transaction]

    def test_numeric_string_amount_is_accepted(self, ledger, customer):
        """Test that an amount typed as text is parsed."""
        result = ledger.record_transaction(customer.id, "payment", "12.5", "Cash")
        assert result.success
        assert result.transaction.amount == 12.5

    def test_full_log_is_rewritten(self, ledger, customer, supplier, store):
        """Test that every record keeps the entries of other debtors."""
        ledger.record_transaction(customer.id, "debt", 10, "a")
        ledger.record_transaction(supplier.id, "debt", 20, "b")
        ledger.record_transaction(customer.id, "payment", 5, "c")

        log = stored_log(store)
        assert [t["description"] for t in log] == ["a", "b", "c"]
        assert {t["debtorId"] for t in log} == {customer.id, supplier.id}
        assert all("balance" not in t for t in log)

    def test_ids_are_unique(self, ledger, customer):
        """Test that each entry gets a fresh id."""
        ids = {
            ledger.record_transaction(customer.id, "debt", 1, f"n{i}").transaction.id
            for i in range(20)
        }
        assert len(ids) == 20

    def test_explicit_date_is_kept(self, ledger, customer):
        """Test that a back-dated entry keeps its date."""
        when = datetime(2023, 5, 1, 9, 30, tzinfo=timezone.utc)
        result = ledger.record_transaction(customer.id, "debt", 5, "old", date=when)
        assert result.transaction.date == when


class TestRecordTransactionRejection:
    """Rejected input never touches the log."""

    @pytest.mark.parametrize("amount", [
        0, -5, "0", "-1", "abc", None, float("nan"), float("inf"), True, 10 ** 400, "1e400",
    ])
    def test_bad_amount_is_rejected(self, ledger, customer, store, amount):
        """Test zero, negative and non-numeric amounts."""
        ledger.record_transaction(customer.id, "debt", 10, "seed")
        before = store.get_item(DEBT_TRANSACTIONS_KEY)

        result = ledger.record_transaction(customer.id, "debt", amount, "note")

        assert not result.success
        assert result.transaction is None
        assert any(issue.field == "amount" for issue in result.issues)
        assert store.get_item(DEBT_TRANSACTIONS_KEY) == before

    @pytest.mark.parametrize("note", ["", "   ", "\n\t", None])
    def test_blank_note_is_rejected(self, ledger, customer, store, note):
        """Test that a note is required."""
        result = ledger.record_transaction(customer.id, "debt", 10, note)
        assert not result.success
        assert [i.field for i in result.issues] == ["note"]
        assert store.get_item(DEBT_TRANSACTIONS_KEY) is None

    def test_unknown_polarity_is_rejected(self, ledger, customer):
        """Test a polarity other than debt or payment."""
        result = ledger.record_transaction(customer.id, "refund", 10, "x")
        assert not result.success
        assert result.issues[0].field == "polarity"

    def test_unknown_debtor_is_rejected(self, ledger, store):
        """Test recording against a debtor that does not exist."""
        result = ledger.record_transaction("debtor-missing", "debt", 10, "x")
        assert not result.success
        assert result.issues[0].issue_type == "not_found"
        assert store.get_item(DEBT_TRANSACTIONS_KEY) is None

    def test_all_problems_reported_together(self, ledger):
        """Test that every failing field shows up in one result."""
        result = ledger.record_transaction("nobody", "oops", 0, "")
        assert {i.field for i in result.issues} == {"debtor_id", "polarity", "amount", "note"}
        assert result.error_count == 4

    def test_write_failure_is_reported(self, read_only_app):
        """Test that a failing store gives a result, not an exception."""
        app = read_only_app({
            DEBTORS_KEY: json.dumps([{"id": "d1", "name": "A", "type": "customer"}]),
        })
        result = app.ledger.record_transaction("d1", "debt", 10, "x")
        assert not result.success
        assert result.issues[0].issue_type == "write_failed"


class TestSubjectView:
    """Building the per-debtor view."""

    def test_unknown_debtor_returns_none(self, ledger):
        assert ledger.get_subject_view("debtor-nope") is None

    def test_newest_first(self, ledger, customer):
        """Test ordering by date, newest first."""
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for day in (3, 1, 2):
            ledger.record_transaction(
                customer.id, "debt", day, f"day {day}", date=base + timedelta(days=day),
            )
        view = ledger.get_subject_view(customer.id)
        assert [t.description for t in view.transactions] == ["day 3", "day 2", "day 1"]

    def test_same_date_keeps_insertion_order(self, ledger, customer):
        """Test that ties keep the order in which entries were recorded."""
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for name in ("first", "second", "third"):
            ledger.record_transaction(customer.id, "debt", 1, name, date=when)
        view = ledger.get_subject_view(customer.id)
        assert [t.description for t in view.transactions] == ["first", "second", "third"]

    def test_only_own_transactions(self, ledger, customer, supplier):
        """Test that other debtors' entries are filtered out."""
        ledger.record_transaction(customer.id, "debt", 10, "mine")
        ledger.record_transaction(supplier.id, "debt", 99, "theirs")
        view = ledger.get_subject_view(customer.id)
        assert [t.description for t in view.transactions] == ["mine"]
        assert view.balance == 10

    def test_supplier_view(self, ledger, supplier):
        """Test the supplier sign convention through the service."""
        ledger.record_transaction(supplier.id, "debt", 200, "stock")
        result = ledger.record_transaction(supplier.id, "payment", 50, "part payment")
        assert result.view.balance == -150
        assert result.view.progress.progress_percent == pytest.approx(25)
        assert not result.view.progress.is_settled

    def test_new_debtor_view(self, ledger, customer):
        """Test the view of a debtor with no transactions."""
        view = ledger.get_subject_view(customer.id)
        assert view.balance == 0
        assert view.transactions == []
        assert view.progress.progress_percent == 0
        assert view.progress.is_settled

    def test_stored_balance_is_ignored(self, store):
        """Test that a balance field in stored debtors has no effect."""
        store.set_item(DEBTORS_KEY, json.dumps([
            {"id": "d1", "name": "A", "type": "customer", "balance": 999},
        ]))
        view = BookkeepingApp(store).ledger.get_subject_view("d1")
        assert view.balance == 0

    def test_survives_new_service_instance(self, store, customer):
        """Test that a fresh service over the same store sees the same data."""
        first = BookkeepingApp(store).ledger
        first.record_transaction(customer.id, "debt", 70, "x")
        other = BookkeepingApp(store).ledger
        assert other.get_subject_view(customer.id).balance == 70


class TestDebtorRegistry:
    """Adding debtors and importing contacts."""

    def test_add_debtor(self, ledger, store):
        """Test that a debtor is persisted with trimmed fields."""
        result = ledger.add_debtor("  Juma  ", "customer", phone=" 0711 ")
        assert result.success
        assert result.debtor.name == "Juma"
        assert result.debtor.phone == "0711"
        assert result.debtor.debtor_type == DebtorType.CUSTOMER

        stored = json.loads(store.get_item(DEBTORS_KEY))
        assert stored == [{"id": result.debtor.id, "name": "Juma", "type": "customer", "phone": "0711"}]

    def test_add_without_phone(self, ledger, store):
        result = ledger.add_debtor("Juma", "supplier")
        assert result.debtor.phone is None
        assert "phone" not in json.loads(store.get_item(DEBTORS_KEY))[0]

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_name_required(self, ledger, name):
        result = ledger.add_debtor(name, "customer")
        assert not result.success
        assert result.issues[0].issue_type == "missing"

    def test_unknown_role(self, ledger):
        result = ledger.add_debtor("Juma", "partner")
        assert not result.success
        assert result.issues[0].field == "debtor_type"

    def test_duplicate_name_ignores_case(self, ledger, customer):
        """Test that 'AMINA STORES' clashes with 'Amina Stores'."""
        result = ledger.add_debtor("AMINA STORES", "supplier")
        assert not result.success
        assert result.issues[0].issue_type == "duplicate"
        assert len(ledger.list_debtors()) == 1

    def test_import_contact_defaults_to_customer(self, ledger):
        result = ledger.import_contact("Baraka", "0722000111")
        assert result.success
        assert result.debtor.debtor_type == DebtorType.CUSTOMER

    def test_import_contact_with_role(self, ledger):
        result = ledger.import_contact("Baraka", "0722000111", debtor_type="supplier")
        assert result.debtor.debtor_type == DebtorType.SUPPLIER

    def test_import_contact_rejects_known_phone(self, ledger, customer):
        """Test that an imported contact with a phone on file is rejected."""
        result = ledger.import_contact("Someone Else", customer.phone)
        assert not result.success
        assert result.issues[0].field == "phone"

    def test_manual_add_allows_shared_phone(self, ledger, customer):
        """Test that only imports check phone numbers."""
        assert ledger.add_debtor("Someone Else", "customer", phone=customer.phone).success

    def test_long_phone_is_rejected(self, ledger, store):
        """Test that an over-long phone number gives a result, not an exception."""
        for result in (
            ledger.add_debtor("Long Phone", "customer", phone="0" * 60),
            ledger.import_contact("Long Phone", "0" * 60),
        ):
            assert not result.success
            assert [(i.field, i.issue_type) for i in result.issues] == [("phone", "too_long")]
        assert store.get_item(DEBTORS_KEY) is None

    def test_long_name_is_rejected(self, ledger):
        result = ledger.add_debtor("N" * 201, "customer")
        assert not result.success
        assert result.issues[0].issue_type == "too_long"


class TestListingAndSummary:
    """Debtor lists and totals."""

    def test_list_debtors_with_balances(self, ledger, customer, supplier):
        ledger.record_transaction(customer.id, "debt", 60, "x")
        ledger.record_transaction(supplier.id, "debt", 30, "y")
        rows = {row.debtor.id: row.balance for row in ledger.list_debtors()}
        assert rows == {customer.id: 60, supplier.id: -30}

    @pytest.mark.parametrize("term,expected", [
        ("amina", ["Amina Stores"]),
        ("LTD", ["Wholesale Ltd"]),
        ("0700999", ["Wholesale Ltd"]),
        ("", ["Amina Stores", "Wholesale Ltd"]),
        ("zzz", []),
    ])
    def test_search(self, ledger, customer, supplier, term, expected):
        """Test name and phone search."""
        assert [row.debtor.name for row in ledger.list_debtors(term)] == expected

    def test_debt_summary(self, ledger, customer, supplier):
        """Test receivables, payables and the net position."""
        prepaid = ledger.add_debtor("Prepaid Co", "customer").debtor
        ledger.record_transaction(customer.id, "debt", 100, "a")
        ledger.record_transaction(customer.id, "payment", 40, "b")
        ledger.record_transaction(supplier.id, "debt", 200, "c")
        ledger.record_transaction(prepaid.id, "payment", 25, "d")

        summary = ledger.debt_summary()
        assert summary.total_receivables == 60
        assert summary.total_payables == 200
        assert summary.net_position == -140

    def test_empty_summary(self, ledger):
        summary = ledger.debt_summary()
        assert summary.total_receivables == 0
        assert summary.total_payables == 0
