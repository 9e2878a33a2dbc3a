"""Shared fixtures: an in-memory store and the services built on it."""

from datetime import datetime, timezone

import pytest

from ledgerbook.orchestrator import BookkeepingApp
from ledgerbook.services.storage import (
    InMemoryKeyValueStore,
    KeyValueStore,
    StorageWriteError,
)


FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class ReadOnlyStore(InMemoryKeyValueStore):
    """Accepts reads; every write fails."""

    def set_item(self, key: str, value: str) -> None:
        raise StorageWriteError(f"read-only store: {key}")


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def app(store: KeyValueStore) -> BookkeepingApp:
    return BookkeepingApp(store, default_business_name="Corner Shop")


@pytest.fixture
def ledger(app):
    return app.ledger


@pytest.fixture
def customer(ledger):
    result = ledger.add_debtor("Amina Stores", "customer", phone="0700111222")
    assert result.success
    return result.debtor


@pytest.fixture
def supplier(ledger):
    result = ledger.add_debtor("Wholesale Ltd", "supplier", phone="0700999888")
    assert result.success
    return result.debtor


@pytest.fixture
def stocked_catalog(app):
    """Two products: 10 x Rice at 50 and 4 x Oil at 120."""
    rice = app.catalog.add_product("1001", "Rice 1kg", 10, 50).product
    oil = app.catalog.add_product("1002", "Cooking Oil", 4, 120).product
    return rice, oil


@pytest.fixture
def read_only_app():
    """Factory for an app whose store starts with ``initial`` and rejects writes."""
    def build(initial=None) -> BookkeepingApp:
        return BookkeepingApp(ReadOnlyStore(initial))
    return build


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
