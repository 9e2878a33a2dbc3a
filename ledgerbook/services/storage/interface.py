"""
Abstract Storage Interface

The application keeps all of its state in a flat key-value store of
strings, the same shape as browser local storage. Each key holds one
JSON document that is replaced in full on every write.

Any backend (in-memory, a directory of files, something else later)
implements KeyValueStore. Nothing above this layer knows which one
is in use.
"""

from abc import ABC, abstractmethod
from typing import Optional


# Logical keys
DEBTORS_KEY = "debtors"
DEBT_TRANSACTIONS_KEY = "debtTransactions"
PRODUCTS_KEY = "inventoryProducts"
INVOICES_KEY = "salesInvoices"
BUSINESS_NAME_KEY = "businessName"
BUSINESS_PHONE_KEY = "businessPhone"

ALL_KEYS = (
    PRODUCTS_KEY,
    INVOICES_KEY,
    DEBTORS_KEY,
    DEBT_TRANSACTIONS_KEY,
    BUSINESS_NAME_KEY,
    BUSINESS_PHONE_KEY,
)


class KeyValueStore(ABC):
    """
    Abstract interface for raw string storage.

    There are no transactions and no partial writes: ``set_item``
    replaces the whole value under a key.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the raw value stored under a key.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently present."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written to the backend."""
    pass
