"""
Ledger Service

The entry point for everything debt-related: registering debtors,
recording transactions, and building the per-debtor view.

Flow for a new transaction:
1. Validate input (EntryValidator); on failure return issues, write nothing
2. Create an immutable DebtTransaction with a fresh id
3. Append it to the FULL log and persist the whole log
4. Recompute the debtor's view from the log and return it

Balances are always recomputed here, never read from storage.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Optional

import structlog

from ledgerbook.activity import ActivityLogger
from ledgerbook.ledger.balance import calculate_balance, calculate_progress
from ledgerbook.models.activity import ActivityEventBuilder
from ledgerbook.models.ledger import (
    DebtorBalance,
    DebtorResult,
    DebtorType,
    DebtSummary,
    DebtTransaction,
    Debtor,
    RecordTransactionResult,
    SubjectView,
    utc_now,
)
from ledgerbook.models.validation import ValidationIssue
from ledgerbook.services.storage.repositories import (
    DebtorRepository,
    TransactionRepository,
)
from ledgerbook.validation.validator import EntryValidator


logger = structlog.get_logger(__name__)


def _storage_issue(what: str) -> ValidationIssue:
    return ValidationIssue(
        field="storage",
        issue_type="write_failed",
        message=f"Could not save the {what}",
        suggested_fix="Check that the data directory is writable and try again",
    )


class LedgerService:
    """Debtor registry and debt ledger on top of the repositories."""

    def __init__(
        self,
        debtors: DebtorRepository,
        transactions: TransactionRepository,
        validator: Optional[EntryValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._debtors = debtors
        self._transactions = transactions
        self._validator = validator or EntryValidator()
        self._activity = activity_logger or ActivityLogger()

    # =========================================================================
    # VIEWS
    # =========================================================================

    def get_subject_view(self, debtor_id: str) -> Optional[SubjectView]:
        """
        Build the view of one debtor from the current log.

        Transactions are ordered newest first. Entries sharing a date
        keep the order in which they were recorded.

        Returns:
            SubjectView, or None if no debtor has this id
        """
        debtor = self._debtors.get(debtor_id)
        if debtor is None:
            return None
        return self._build_view(debtor, self._transactions.for_debtor(debtor_id))

    def _build_view(
        self,
        debtor: Debtor,
        transactions: list[DebtTransaction],
    ) -> SubjectView:
        ordered = sorted(transactions, key=lambda t: t.date, reverse=True)
        balance = calculate_balance(debtor.debtor_type, ordered)
        return SubjectView(
            debtor=debtor,
            balance=balance,
            transactions=ordered,
            progress=calculate_progress(debtor.debtor_type, ordered, balance),
        )

    def list_debtors(self, search: Optional[str] = None) -> list[DebtorBalance]:
        """
        All debtors with their current balances, in stored order.

        Args:
            search: Optional case-insensitive filter on name or phone
        """
        by_debtor = self._group_transactions()
        term = search.strip().lower() if search else ""

        rows = []
        for debtor in self._debtors.load_all():
            if term and term not in debtor.name.lower() and term not in (debtor.phone or ""):
                continue
            rows.append(DebtorBalance(
                debtor=debtor,
                balance=calculate_balance(debtor.debtor_type, by_debtor[debtor.id]),
            ))
        return rows

    def debt_summary(self) -> DebtSummary:
        """Receivables (customers owing us) and payables (suppliers we owe)."""
        return summarize_debts(self._debtors.load_all(), self._transactions.load_all())

    def _group_transactions(self) -> dict[str, list[DebtTransaction]]:
        grouped: dict[str, list[DebtTransaction]] = defaultdict(list)
        for t in self._transactions.load_all():
            grouped[t.debtor_id].append(t)
        return grouped

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def record_transaction(
        self,
        debtor_id: str,
        polarity: Any,
        amount: Any,
        note: Any,
        date: Optional[datetime] = None,
    ) -> RecordTransactionResult:
        """
        Record a debt or payment against a debtor.

        Rejected input leaves the log untouched and comes back as a
        result with ``success=False`` and the validation issues.

        Args:
            debtor_id: Debtor to record against
            polarity: "debt" or "payment"
            amount: Positive magnitude (number or numeric string)
            note: Description, required
            date: When it happened; defaults to now (UTC)
        """
        debtor = self._debtors.get(debtor_id)
        issues = self._validator.validate_transaction(debtor, polarity, amount, note)
        if issues:
            return self._reject_transaction(debtor_id, issues)

        transaction = DebtTransaction(
            debtor_id=debtor.id,
            date=date or utc_now(),
            description=note.strip(),
            amount=self._validator.as_number(amount),
            polarity=self._validator.parse_polarity(polarity),
        )

        if not self._transactions.append(transaction):
            return self._reject_transaction(debtor_id, [_storage_issue("transaction")])

        view = self.get_subject_view(debtor.id)
        self._activity.log(ActivityEventBuilder.transaction_recorded(
            transaction_id=transaction.id,
            debtor_id=debtor.id,
            polarity=transaction.polarity.value,
            amount=transaction.amount,
            balance=view.balance,
        ))
        return RecordTransactionResult(success=True, transaction=transaction, view=view)

    def _reject_transaction(
        self,
        debtor_id: str,
        issues: list[ValidationIssue],
    ) -> RecordTransactionResult:
        self._activity.log(ActivityEventBuilder.transaction_rejected(
            debtor_id=str(debtor_id),
            issues=[i.model_dump() for i in issues],
        ))
        return RecordTransactionResult(success=False, issues=issues)

    # =========================================================================
    # DEBTORS
    # =========================================================================

    def add_debtor(
        self,
        name: Any,
        debtor_type: Any,
        phone: Optional[str] = None,
    ) -> DebtorResult:
        """Register a customer or supplier. Names are unique, ignoring case."""
        return self._create_debtor(name, debtor_type, phone, imported=False)

    def import_contact(
        self,
        name: Any,
        phone: Optional[str],
        debtor_type: Any = DebtorType.CUSTOMER,
    ) -> DebtorResult:
        """
        Register a debtor from a phone contact.

        Besides the name check, a contact whose phone number is already
        on file is rejected.
        """
        return self._create_debtor(name, debtor_type, phone, imported=True)

    def _create_debtor(
        self,
        name: Any,
        debtor_type: Any,
        phone: Optional[str],
        imported: bool,
    ) -> DebtorResult:
        existing = self._debtors.load_all()
        issues = self._validator.validate_debtor(
            name, debtor_type, phone, existing, match_phone=imported,
        )
        if issues:
            self._activity.log(ActivityEventBuilder.debtor_rejected(
                name=name if isinstance(name, str) else repr(name),
                issues=[i.model_dump() for i in issues],
            ))
            return DebtorResult(success=False, issues=issues)

        debtor = Debtor(
            name=name.strip(),
            debtor_type=self._validator.parse_debtor_type(debtor_type),
            phone=phone.strip() if isinstance(phone, str) else None,
        )
        if not self._debtors.replace_all(existing + [debtor]):
            return DebtorResult(success=False, issues=[_storage_issue("debtor")])

        self._activity.log(ActivityEventBuilder.debtor_added(
            debtor_id=debtor.id,
            name=debtor.name,
            debtor_type=debtor.debtor_type.value,
            imported=imported,
        ))
        return DebtorResult(success=True, debtor=debtor)


def summarize_debts(
    debtors: list[Debtor],
    transactions: list[DebtTransaction],
) -> DebtSummary:
    """Totals over every debtor, from the full transaction log."""
    grouped: dict[str, list[DebtTransaction]] = defaultdict(list)
    for t in transactions:
        grouped[t.debtor_id].append(t)

    receivables = 0.0
    payables = 0.0
    for debtor in debtors:
        balance = calculate_balance(debtor.debtor_type, grouped[debtor.id])
        if debtor.debtor_type == DebtorType.CUSTOMER and balance > 0:
            receivables += balance
        elif debtor.debtor_type == DebtorType.SUPPLIER and balance < 0:
            payables += -balance

    return DebtSummary(total_receivables=receivables, total_payables=payables)
