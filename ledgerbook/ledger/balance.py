"""
Balance Reducer and Settlement Progress

Pure functions over a debtor's transactions. They never touch storage,
never raise for any list of valid DebtTransaction models, and give the
same answer for any ordering of the list.

Sign convention (positive means the other party owes the business):

    customer: debt +amount, payment -amount
    supplier: debt -amount, payment +amount
"""

from typing import Iterable, Optional

from ledgerbook.models.ledger import (
    DebtTransaction,
    DebtorType,
    Polarity,
    SettlementProgress,
)


_SIGNS = {
    (DebtorType.CUSTOMER, Polarity.DEBT): 1.0,
    (DebtorType.CUSTOMER, Polarity.PAYMENT): -1.0,
    (DebtorType.SUPPLIER, Polarity.DEBT): -1.0,
    (DebtorType.SUPPLIER, Polarity.PAYMENT): 1.0,
}


def signed_amount(debtor_type: DebtorType, transaction: DebtTransaction) -> float:
    """The amount of one entry with the sign the debtor's role gives it."""
    return _SIGNS[(DebtorType(debtor_type), transaction.polarity)] * transaction.amount


def calculate_balance(
    debtor_type: DebtorType,
    transactions: Iterable[DebtTransaction],
) -> float:
    """
    Reduce a debtor's transactions to a balance.

    Args:
        debtor_type: Role of the debtor the transactions belong to
        transactions: Entries for that debtor, in any order

    Returns:
        The signed balance; 0.0 for no transactions
    """
    return sum(
        (signed_amount(debtor_type, t) for t in transactions),
        0.0,
    )


def sum_by_polarity(transactions: Iterable[DebtTransaction]) -> tuple[float, float]:
    """(total_debt, total_payments) as unsigned sums."""
    total_debt = 0.0
    total_payments = 0.0
    for t in transactions:
        if t.is_debt:
            total_debt += t.amount
        else:
            total_payments += t.amount
    return total_debt, total_payments


def is_settled(debtor_type: DebtorType, balance: float) -> bool:
    """
    Whether nothing is owed in the direction that matters for the role.

    A customer is settled at a zero or credit balance; a supplier is
    settled when the business owes it nothing.
    """
    if DebtorType(debtor_type) == DebtorType.CUSTOMER:
        return balance <= 0
    return balance >= 0


def calculate_progress(
    debtor_type: DebtorType,
    transactions: Iterable[DebtTransaction],
    balance: Optional[float] = None,
) -> SettlementProgress:
    """
    How much of the recorded debt has been paid off.

    Rules, in order:
    - No transactions: 0%
    - Some debt recorded: payments / debt * 100
    - Payments but no debt (prepayment): 100%
    - Neither (only zero amounts): 100% if settled, else 0%

    The percentage is clamped to [0, 100] in every case.

    Args:
        debtor_type: Role of the debtor
        transactions: Entries for that debtor
        balance: Precomputed balance; recomputed when omitted
    """
    entries = list(transactions)
    if balance is None:
        balance = calculate_balance(debtor_type, entries)

    total_debt, total_payments = sum_by_polarity(entries)
    settled = is_settled(debtor_type, balance)

    if not entries:
        percent = 0.0
    elif total_debt > 0:
        percent = total_payments / total_debt * 100
    elif total_payments > 0:
        percent = 100.0
    else:
        percent = 100.0 if settled else 0.0

    return SettlementProgress(
        total_debt=total_debt,
        total_payments=total_payments,
        progress_percent=min(100.0, max(0.0, percent)),
        is_settled=settled,
    )
