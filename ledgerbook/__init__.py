"""
ledgerbook - Source Package

Small-business bookkeeping: inventory, sales invoices, customer and
supplier debt ledgers, and aggregate reports, all kept in a local
key-value store.

DESIGN PRINCIPLES:
1. Balances are derived from the transaction log, never stored
2. Garbage from storage is tolerated at the load boundary only
3. Invalid user input is reported, not raised
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "ledgerbook Team"
