"""
Repositories

One repository per stored collection. Each exposes ``load_all()`` and
``replace_all()``: the whole collection is read, and the whole
collection is written back. Reads go through RecordParser, so callers
only ever see typed models.

CRITICAL: Debtor balances are never written. They are recomputed
from the transaction log on demand.

Concurrency: writes inside one process are serialized by a lock, and
``TransactionRepository.append`` re-reads the log under that lock before
writing, so no in-process append is lost. Separate processes sharing a
store are last-writer-wins.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

from ledgerbook.models.inventory import BusinessProfile, Invoice, Product
from ledgerbook.models.ledger import DebtTransaction, Debtor
from ledgerbook.services.storage.interface import (
    BUSINESS_NAME_KEY,
    BUSINESS_PHONE_KEY,
    DEBT_TRANSACTIONS_KEY,
    DEBTORS_KEY,
    INVOICES_KEY,
    PRODUCTS_KEY,
)
from ledgerbook.services.storage.json_storage import JsonStorage
from ledgerbook.validation.parser import LoadResult, RecordParser


T = TypeVar("T")

_WRITE_LOCK = threading.RLock()


class CollectionRepository(ABC, Generic[T]):
    """Full-replace persistence for one list of records."""

    key: str = ""

    def __init__(
        self,
        storage: JsonStorage,
        parser: Optional[RecordParser] = None,
    ):
        self._storage = storage
        self._parser = parser or RecordParser()

    @abstractmethod
    def _parse(self, raw) -> LoadResult:
        """Turn the decoded stored value into typed records."""
        pass

    def _serialize(self, item: T) -> dict:
        return item.to_storage_dict()

    def load(self) -> LoadResult:
        """Load with parse diagnostics (skipped/coerced counts)."""
        return self._parse(self._storage.load(self.key))

    def load_all(self) -> list[T]:
        return list(self.load().items)

    def replace_all(self, items: list[T]) -> bool:
        """Write the whole collection. Returns False if the write failed."""
        payload = [self._serialize(item) for item in items]
        with _WRITE_LOCK:
            return self._storage.save(self.key, payload)

    def update(self, mutate: Callable[[list[T]], list[T]]) -> tuple[bool, list[T]]:
        """
        Read, transform and write the collection under the write lock.

        Returns:
            (write_succeeded, new_items)
        """
        with _WRITE_LOCK:
            items = mutate(self.load_all())
            return self.replace_all(items), items


class DebtorRepository(CollectionRepository[Debtor]):
    key = DEBTORS_KEY

    def _parse(self, raw) -> LoadResult:
        return self._parser.parse_debtors(raw)

    def get(self, debtor_id: str) -> Optional[Debtor]:
        for debtor in self.load_all():
            if debtor.id == debtor_id:
                return debtor
        return None


class TransactionRepository(CollectionRepository[DebtTransaction]):
    key = DEBT_TRANSACTIONS_KEY

    def _parse(self, raw) -> LoadResult:
        return self._parser.parse_transactions(raw)

    def append(self, transaction: DebtTransaction) -> bool:
        """
        Add one entry to the full log and rewrite it.

        Appending an entry whose id is already in the log writes nothing
        and reports success.
        """
        with _WRITE_LOCK:
            current = self.load_all()
            if any(t.id == transaction.id for t in current):
                return True
            return self.replace_all(current + [transaction])

    def for_debtor(self, debtor_id: str) -> list[DebtTransaction]:
        return [t for t in self.load_all() if t.debtor_id == debtor_id]


class ProductRepository(CollectionRepository[Product]):
    key = PRODUCTS_KEY

    def _parse(self, raw) -> LoadResult:
        return self._parser.parse_products(raw)

    def get(self, product_id: str) -> Optional[Product]:
        for product in self.load_all():
            if product.id == product_id:
                return product
        return None


class InvoiceRepository(CollectionRepository[Invoice]):
    """Invoices are kept newest first."""

    key = INVOICES_KEY

    def _parse(self, raw) -> LoadResult:
        return self._parser.parse_invoices(raw)

    def prepend(self, invoice: Invoice) -> bool:
        with _WRITE_LOCK:
            return self.replace_all([invoice] + self.load_all())


class BusinessProfileRepository:
    """Business name and phone, stored as two plain string keys."""

    def __init__(self, storage: JsonStorage, default_name: str = ""):
        self._storage = storage
        self._default_name = default_name

    def load(self) -> BusinessProfile:
        name = self._storage.load(BUSINESS_NAME_KEY)
        phone = self._storage.load(BUSINESS_PHONE_KEY)
        return BusinessProfile(
            name=name if isinstance(name, str) and name.strip() else self._default_name,
            phone=phone if isinstance(phone, str) else "",
        )

    def save(self, profile: BusinessProfile) -> bool:
        with _WRITE_LOCK:
            saved_name = self._storage.save(BUSINESS_NAME_KEY, profile.name.strip())
            saved_phone = self._storage.save(BUSINESS_PHONE_KEY, profile.phone.strip())
        return saved_name and saved_phone
