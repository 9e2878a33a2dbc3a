"""
Sales Invoicing

An InvoiceDraft collects lines in memory. Finalizing it writes an
Invoice, draws the sold quantities out of stock, and empties the draft.

Stock is checked when a line is added, against everything already in
the draft for that product. At finalize time the stock is decremented
and floored at zero.
"""

from datetime import datetime
from typing import Any, Optional

import structlog

from ledgerbook.activity import ActivityLogger
from ledgerbook.models.activity import ActivityEventBuilder
from ledgerbook.models.inventory import Invoice, InvoiceItem, InvoiceResult
from ledgerbook.models.ledger import utc_now
from ledgerbook.models.validation import ActionResult, ValidationIssue
from ledgerbook.services.storage.repositories import (
    InvoiceRepository,
    ProductRepository,
)
from ledgerbook.validation.validator import EntryValidator


logger = structlog.get_logger(__name__)


class InvoiceDraft:
    """Lines of an invoice that has not been finalized yet."""

    def __init__(self, products: ProductRepository):
        self._products = products
        self._items: list[InvoiceItem] = []

    @property
    def items(self) -> list[InvoiceItem]:
        return list(self._items)

    @property
    def total(self) -> float:
        return sum((item.line_total for item in self._items), 0.0)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def quantity_of(self, product_id: str) -> float:
        """Units of a product already on the draft, across all its lines."""
        return sum(
            (item.sale_quantity for item in self._items if item.product_id == product_id),
            0.0,
        )

    def add_item(
        self,
        product_id: str,
        quantity: Any,
        sale_price: Any = None,
    ) -> ActionResult:
        """
        Add units of a product to the draft.

        A line for the same product at the same sale price is merged
        into the existing one.

        Args:
            product_id: Product to sell
            quantity: Units, greater than zero
            sale_price: Price charged per unit; the catalogue price if omitted
        """
        issues = []
        product = self._products.get(product_id)
        if product is None:
            issues.append(ValidationIssue(
                field="product_id",
                issue_type="not_found",
                message="Product not found",
            ))

        units = EntryValidator.as_number(quantity)
        if units is None or units <= 0:
            issues.append(ValidationIssue(
                field="quantity",
                issue_type="invalid_value",
                message="Quantity must be greater than zero",
            ))

        if sale_price is None and product is not None:
            price = product.price
        else:
            price = EntryValidator.as_number(sale_price)
        if price is None or price < 0:
            issues.append(ValidationIssue(
                field="sale_price",
                issue_type="invalid_value",
                message="Sale price must be a number of zero or more",
            ))

        if issues:
            return ActionResult(success=False, issues=issues)

        requested = self.quantity_of(product_id) + units
        if requested > product.quantity:
            return ActionResult(success=False, issues=[ValidationIssue(
                field="quantity",
                issue_type="insufficient_stock",
                message=f"Only {product.quantity:g} of {product.name} in stock",
                suggested_fix="Lower the quantity or restock the product",
            )])

        for index, item in enumerate(self._items):
            if item.product_id == product_id and item.sale_price == price:
                self._items[index] = item.model_copy(
                    update={"sale_quantity": item.sale_quantity + units}
                )
                break
        else:
            self._items.append(InvoiceItem(
                product_id=product.id,
                barcode=product.barcode,
                name=product.name,
                price=product.price,
                sale_quantity=units,
                sale_price=price,
            ))
        return ActionResult(success=True)

    def remove_item(self, product_id: str, sale_price: Optional[float] = None) -> bool:
        """
        Drop lines for a product. With ``sale_price`` only the line at
        that price is removed.
        """
        kept = [
            item for item in self._items
            if not (
                item.product_id == product_id
                and (sale_price is None or item.sale_price == sale_price)
            )
        ]
        removed = len(kept) != len(self._items)
        self._items = kept
        return removed

    def clear(self) -> None:
        self._items = []


class InvoicingService:
    """Creates drafts and turns them into stored invoices."""

    def __init__(
        self,
        products: ProductRepository,
        invoices: InvoiceRepository,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._products = products
        self._invoices = invoices
        self._activity = activity_logger or ActivityLogger()

    def new_draft(self) -> InvoiceDraft:
        return InvoiceDraft(self._products)

    def list_invoices(self) -> list[Invoice]:
        """Stored invoices, newest first."""
        return self._invoices.load_all()

    def finalize(
        self,
        draft: InvoiceDraft,
        date: Optional[datetime] = None,
    ) -> InvoiceResult:
        """
        Store the draft as an invoice and take its items out of stock.

        The draft is cleared only when both writes succeeded.
        """
        if draft.is_empty:
            return self._reject([ValidationIssue(
                field="items",
                issue_type="missing",
                message="The invoice has no items",
            )])

        invoice = Invoice(
            date=date or utc_now(),
            items=draft.items,
            total=draft.total,
        )

        sold: dict[str, float] = {}
        for item in invoice.items:
            sold[item.product_id] = sold.get(item.product_id, 0.0) + item.sale_quantity

        def take_from_stock(products):
            return [
                p.model_copy(update={"quantity": max(0.0, p.quantity - sold[p.id])})
                if p.id in sold else p
                for p in products
            ]

        stock_saved, _ = self._products.update(take_from_stock)
        if not stock_saved:
            return self._reject([ValidationIssue(
                field="storage",
                issue_type="write_failed",
                message="Could not update stock levels",
            )])

        if not self._invoices.prepend(invoice):
            logger.error("invoice_save_failed_after_stock_update", invoice_id=invoice.id)
            return self._reject([ValidationIssue(
                field="storage",
                issue_type="write_failed",
                message="Stock was updated but the invoice could not be saved",
            )])

        draft.clear()
        self._activity.log(ActivityEventBuilder.invoice_finalized(
            invoice_id=invoice.id,
            total=invoice.total,
            item_count=len(invoice.items),
        ))
        return InvoiceResult(success=True, invoice=invoice)

    def _reject(self, issues: list[ValidationIssue]) -> InvoiceResult:
        self._activity.log(ActivityEventBuilder.invoice_rejected(
            [i.model_dump() for i in issues],
        ))
        return InvoiceResult(success=False, issues=issues)
