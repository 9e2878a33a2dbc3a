"""
Debt Ledger Package

Balance reducer and settlement progress (pure functions), the ledger
service that records transactions and registers debtors, and plain-text
account statements.
"""

from ledgerbook.ledger.balance import (
    calculate_balance,
    calculate_progress,
    is_settled,
    signed_amount,
    sum_by_polarity,
)
from ledgerbook.ledger.service import LedgerService, summarize_debts
from ledgerbook.ledger.statement import balance_label, balance_text, render_statement

__all__ = [
    "calculate_balance",
    "calculate_progress",
    "is_settled",
    "signed_amount",
    "sum_by_polarity",
    "LedgerService",
    "summarize_debts",
    "balance_label",
    "balance_text",
    "render_statement",
]
