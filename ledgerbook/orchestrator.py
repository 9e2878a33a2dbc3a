"""
Application Wiring for ledgerbook

Builds every service on top of ONE key-value store and ONE activity
logger, so all of them see the same data:

- LedgerService: debtors, debt transactions, per-debtor views
- CatalogService / InvoicingService: products and sales invoices
- ReportExecutor: period reports
- BackupService: export and restore of every key
- BusinessProfileRepository: business name and phone

Presentation layers (a web page, a CLI) talk to a BookkeepingApp and
never to storage directly.
"""

from typing import Optional

import structlog

from ledgerbook.activity import ActivityLogger, configure_logging
from ledgerbook.config import Settings, get_settings
from ledgerbook.inventory import CatalogService, InvoicingService
from ledgerbook.ledger import LedgerService, render_statement
from ledgerbook.reports import ReportExecutor
from ledgerbook.services.backup import BackupService
from ledgerbook.services.storage import (
    BusinessProfileRepository,
    DebtorRepository,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    InvoiceRepository,
    JsonStorage,
    KeyValueStore,
    ProductRepository,
    TransactionRepository,
)
from ledgerbook.validation import EntryValidator, RecordParser


logger = structlog.get_logger(__name__)


class BookkeepingApp:
    """All application services, sharing one store."""

    def __init__(
        self,
        store: KeyValueStore,
        activity_logger: Optional[ActivityLogger] = None,
        default_business_name: str = "",
        statement_recent_limit: int = 10,
    ):
        self.store = store
        self.activity_logger = activity_logger or ActivityLogger()
        self.storage = JsonStorage(store, self.activity_logger)

        parser = RecordParser()
        validator = EntryValidator()

        self.debtors = DebtorRepository(self.storage, parser)
        self.transactions = TransactionRepository(self.storage, parser)
        self.products = ProductRepository(self.storage, parser)
        self.invoices = InvoiceRepository(self.storage, parser)
        self.profile = BusinessProfileRepository(self.storage, default_business_name)

        self.ledger = LedgerService(
            self.debtors, self.transactions, validator, self.activity_logger,
        )
        self.catalog = CatalogService(self.products, validator, self.activity_logger)
        self.invoicing = InvoicingService(
            self.products, self.invoices, self.activity_logger,
        )
        self.reports = ReportExecutor(
            self.products,
            self.invoices,
            self.debtors,
            self.transactions,
            self.activity_logger,
        )
        self.backup = BackupService(self.storage, self.activity_logger)
        self._statement_recent_limit = statement_recent_limit

    def statement_for(self, debtor_id: str) -> Optional[str]:
        """Plain-text account statement, or None for an unknown debtor."""
        view = self.ledger.get_subject_view(debtor_id)
        if view is None:
            return None
        return render_statement(
            view,
            self.profile.load(),
            recent_limit=self._statement_recent_limit,
        )


def create_store(settings: Settings) -> KeyValueStore:
    """The key-value backend named in the storage settings."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return FileKeyValueStore(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
) -> BookkeepingApp:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from; the cached settings if omitted
        store: Use this store instead of the configured backend (tests)

    Returns:
        BookkeepingApp
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(app_settings.log_level, app_settings.log_format)

    if store is None:
        store = create_store(settings)

    logger.info(
        "app_components_created",
        backend=type(store).__name__,
        environment=app_settings.app_environment,
    )

    return BookkeepingApp(
        store,
        default_business_name=app_settings.default_business_name,
        statement_recent_limit=app_settings.statement_recent_limit,
    )
