"""
Product Catalogue

Add, edit, delete and search stocked products. Every change rewrites
the full product list.
"""

from typing import Any, Optional

from ledgerbook.activity import ActivityLogger
from ledgerbook.models.activity import ActivityEventBuilder, ActivityEventType
from ledgerbook.models.inventory import Product, ProductResult
from ledgerbook.models.validation import ValidationIssue
from ledgerbook.services.storage.repositories import ProductRepository
from ledgerbook.validation.validator import EntryValidator


class CatalogService:
    """Product catalogue operations."""

    def __init__(
        self,
        products: ProductRepository,
        validator: Optional[EntryValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._products = products
        self._validator = validator or EntryValidator()
        self._activity = activity_logger or ActivityLogger()

    def list_products(self) -> list[Product]:
        return self._products.load_all()

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def add_product(
        self,
        barcode: Any,
        name: Any,
        quantity: Any,
        price: Any,
    ) -> ProductResult:
        """Add a product. The barcode must not be in use."""
        existing = self._products.load_all()
        issues = self._validator.validate_product(barcode, name, quantity, price, existing)
        if issues:
            return self._reject(issues)

        product = Product(
            barcode=barcode.strip(),
            name=name.strip(),
            quantity=self._validator.as_number(quantity),
            price=self._validator.as_number(price),
        )
        if not self._products.replace_all(existing + [product]):
            return self._reject([_write_failed()])

        self._activity.log(ActivityEventBuilder.product_changed(
            ActivityEventType.PRODUCT_ADDED, product.id, product.name,
        ))
        return ProductResult(success=True, product=product)

    def update_product(
        self,
        product_id: str,
        barcode: Any,
        name: Any,
        quantity: Any,
        price: Any,
    ) -> ProductResult:
        """Replace every field of an existing product."""
        existing = self._products.load_all()
        if not any(p.id == product_id for p in existing):
            return self._reject([ValidationIssue(
                field="product_id",
                issue_type="not_found",
                message="Product not found",
            )])

        issues = self._validator.validate_product(
            barcode, name, quantity, price, existing, product_id=product_id,
        )
        if issues:
            return self._reject(issues)

        updated = Product(
            id=product_id,
            barcode=barcode.strip(),
            name=name.strip(),
            quantity=self._validator.as_number(quantity),
            price=self._validator.as_number(price),
        )
        products = [updated if p.id == product_id else p for p in existing]
        if not self._products.replace_all(products):
            return self._reject([_write_failed()])

        self._activity.log(ActivityEventBuilder.product_changed(
            ActivityEventType.PRODUCT_UPDATED, updated.id, updated.name,
        ))
        return ProductResult(success=True, product=updated)

    def delete_product(self, product_id: str) -> bool:
        """Returns False if there was no such product or the write failed."""
        existing = self._products.load_all()
        target = next((p for p in existing if p.id == product_id), None)
        if target is None:
            return False
        if not self._products.replace_all([p for p in existing if p.id != product_id]):
            return False

        self._activity.log(ActivityEventBuilder.product_changed(
            ActivityEventType.PRODUCT_DELETED, target.id, target.name,
        ))
        return True

    def search(self, term: Optional[str]) -> list[Product]:
        """Case-insensitive match on name, or substring of the barcode."""
        products = self._products.load_all()
        text = (term or "").strip()
        if not text:
            return products
        lowered = text.lower()
        return [
            p for p in products
            if lowered in p.name.lower() or text in p.barcode
        ]

    def total_value(self, products: Optional[list[Product]] = None) -> float:
        """Sum of quantity * price over the catalogue."""
        if products is None:
            products = self._products.load_all()
        return sum((p.stock_value for p in products), 0.0)

    def _reject(self, issues: list[ValidationIssue]) -> ProductResult:
        self._activity.log(ActivityEventBuilder.product_rejected(
            [i.model_dump() for i in issues],
        ))
        return ProductResult(success=False, issues=issues)


def _write_failed() -> ValidationIssue:
    return ValidationIssue(
        field="storage",
        issue_type="write_failed",
        message="Could not save the product list",
    )
