"""
Inventory Package

Product catalogue and sales invoicing.
"""

from ledgerbook.inventory.catalog import CatalogService
from ledgerbook.inventory.invoicing import InvoiceDraft, InvoicingService

__all__ = [
    "CatalogService",
    "InvoiceDraft",
    "InvoicingService",
]
