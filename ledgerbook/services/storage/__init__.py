"""
Storage Services Package

Abstract key-value interface, two backends (in-memory and a directory
of files), JSON encoding with corruption recovery, and the repositories
built on top.
"""

from ledgerbook.services.storage.interface import (
    ALL_KEYS,
    BUSINESS_NAME_KEY,
    BUSINESS_PHONE_KEY,
    DEBT_TRANSACTIONS_KEY,
    DEBTORS_KEY,
    INVOICES_KEY,
    PRODUCTS_KEY,
    KeyValueStore,
    StorageError,
    StorageWriteError,
)
from ledgerbook.services.storage.memory import InMemoryKeyValueStore
from ledgerbook.services.storage.file_store import FileKeyValueStore
from ledgerbook.services.storage.json_storage import JsonStorage
from ledgerbook.services.storage.repositories import (
    BusinessProfileRepository,
    CollectionRepository,
    DebtorRepository,
    InvoiceRepository,
    ProductRepository,
    TransactionRepository,
)

__all__ = [
    # Keys
    "ALL_KEYS",
    "BUSINESS_NAME_KEY",
    "BUSINESS_PHONE_KEY",
    "DEBT_TRANSACTIONS_KEY",
    "DEBTORS_KEY",
    "INVOICES_KEY",
    "PRODUCTS_KEY",
    # Interface
    "KeyValueStore",
    # Exceptions
    "StorageError",
    "StorageWriteError",
    # Backends
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    # JSON layer and repositories
    "JsonStorage",
    "BusinessProfileRepository",
    "CollectionRepository",
    "DebtorRepository",
    "InvoiceRepository",
    "ProductRepository",
    "TransactionRepository",
]
