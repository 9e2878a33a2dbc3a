"""
Storage Load Boundary

Everything read back from storage passes through RecordParser before
any business logic sees it. This is the only place where garbage is
tolerated:

- A value that is not a list fails the load (empty collection, reason set)
- A record without the fields that identify it is skipped and counted
- A non-numeric, non-finite, oversized or negative money/quantity field
  becomes 0.0
- A missing or unparseable date becomes the Unix epoch (UTC)

Downstream code receives typed models only and never needs to defend
against bad input itself.

NOTE: Skipped records are not written back. The next full-list write
for that key drops them.
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel, Field, ValidationError

from ledgerbook.models.inventory import Invoice, Product
from ledgerbook.models.ledger import DebtTransaction, Debtor, DebtorType, Polarity


logger = structlog.get_logger(__name__)

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DEBTOR_TYPES = {t.value for t in DebtorType}
_POLARITIES = {p.value for p in Polarity}


class LoadResult(BaseModel, Generic[T]):
    """Typed outcome of parsing one stored collection."""

    success: bool = Field(
        ...,
        description="False when the stored value had the wrong shape altogether"
    )
    items: list[T] = Field(default_factory=list)
    skipped: int = Field(
        default=0,
        ge=0,
        description="Records dropped because they could not be identified"
    )
    coerced: int = Field(
        default=0,
        ge=0,
        description="Records kept after replacing garbage field values"
    )
    reason: Optional[str] = None


class _SkipRecord(Exception):
    """Internal: the record cannot be used."""


def coerce_number(value: Any) -> tuple[float, bool]:
    """
    Turn a stored number into a non-negative finite float.

    Returns:
        (number, was_coerced). Anything that is not a real, finite,
        non-negative number becomes (0.0, True).
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0, True
    try:
        number = float(value)
    except OverflowError:
        return 0.0, True
    if not math.isfinite(number) or number < 0:
        return 0.0, True
    return number, False


def coerce_datetime(value: Any) -> tuple[datetime, bool]:
    """Parse an ISO-8601 string into UTC; anything else becomes the epoch."""
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return EPOCH, True
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc), False
        try:
            return parsed.astimezone(timezone.utc), False
        except OverflowError:
            return EPOCH, True
    return EPOCH, True


def _required_str(record: dict, key: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        raise _SkipRecord(f"missing {key}")
    return value.strip()


def _optional_str(record: dict, key: str, max_length: int) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    return value.strip()[:max_length] or None


class RecordParser:
    """
    Parses stored collections into typed models.

    Each ``parse_*`` method accepts whatever ``JsonStorage.load`` returned
    (None for an absent key) and never raises.
    """

    def parse_debtors(self, raw: Any) -> LoadResult[Debtor]:
        return self._parse_list(raw, "debtors", self._parse_debtor)

    def parse_transactions(self, raw: Any) -> LoadResult[DebtTransaction]:
        return self._parse_list(raw, "debtTransactions", self._parse_transaction)

    def parse_products(self, raw: Any) -> LoadResult[Product]:
        return self._parse_list(raw, "inventoryProducts", self._parse_product)

    def parse_invoices(self, raw: Any) -> LoadResult[Invoice]:
        return self._parse_list(raw, "salesInvoices", self._parse_invoice)

    def _parse_list(
        self,
        raw: Any,
        collection: str,
        parse_one: Callable[[Any], tuple[Any, bool]],
    ) -> LoadResult:
        if raw is None:
            return LoadResult(success=True)

        if not isinstance(raw, list):
            reason = f"{collection}: expected a list, got {type(raw).__name__}"
            logger.warning("stored_collection_malformed", collection=collection, reason=reason)
            return LoadResult(success=False, reason=reason)

        items = []
        skipped = 0
        coerced = 0
        for index, record in enumerate(raw):
            try:
                item, was_coerced = parse_one(record)
            except (_SkipRecord, ValidationError) as e:
                skipped += 1
                logger.warning(
                    "stored_record_skipped",
                    collection=collection,
                    index=index,
                    error=str(e).splitlines()[0],
                )
                continue
            if was_coerced:
                coerced += 1
            items.append(item)

        if coerced:
            logger.warning("stored_records_coerced", collection=collection, count=coerced)

        return LoadResult(success=True, items=items, skipped=skipped, coerced=coerced)

    def _parse_debtor(self, record: Any) -> tuple[Debtor, bool]:
        if not isinstance(record, dict):
            raise _SkipRecord("not an object")

        debtor_type = record.get("type")
        if not isinstance(debtor_type, str) or debtor_type not in _DEBTOR_TYPES:
            raise _SkipRecord(f"unknown debtor type {debtor_type!r}")

        name = _required_str(record, "name")
        debtor = Debtor(
            id=_required_str(record, "id"),
            name=name[:200],
            debtor_type=DebtorType(debtor_type),
            phone=_optional_str(record, "phone", 50),
        )
        return debtor, len(name) > 200

    def _parse_transaction(self, record: Any) -> tuple[DebtTransaction, bool]:
        if not isinstance(record, dict):
            raise _SkipRecord("not an object")

        polarity = record.get("type")
        if not isinstance(polarity, str) or polarity not in _POLARITIES:
            raise _SkipRecord(f"unknown polarity {polarity!r}")

        amount, amount_coerced = coerce_number(record.get("amount"))
        date, date_coerced = coerce_datetime(record.get("date"))
        description = record.get("description")
        description_coerced = not isinstance(description, str)
        if description_coerced:
            description = ""

        transaction = DebtTransaction(
            id=_required_str(record, "id"),
            debtor_id=_required_str(record, "debtorId"),
            date=date,
            description=description.strip()[:1000],
            amount=amount,
            polarity=Polarity(polarity),
        )
        return transaction, amount_coerced or date_coerced or description_coerced

    def _parse_product(self, record: Any) -> tuple[Product, bool]:
        if not isinstance(record, dict):
            raise _SkipRecord("not an object")

        quantity, quantity_coerced = coerce_number(record.get("quantity"))
        price, price_coerced = coerce_number(record.get("price"))
        barcode = _optional_str(record, "barcode", 64)
        if barcode is None:
            raise _SkipRecord("missing barcode")

        product = Product(
            id=_required_str(record, "id"),
            barcode=barcode,
            name=_required_str(record, "name")[:200],
            quantity=quantity,
            price=price,
        )
        return product, quantity_coerced or price_coerced

    def _parse_invoice(self, record: Any) -> tuple[Invoice, bool]:
        if not isinstance(record, dict):
            raise _SkipRecord("not an object")

        date, coerced = coerce_datetime(record.get("date"))
        total, total_coerced = coerce_number(record.get("total"))
        coerced = coerced or total_coerced

        items = []
        raw_items = record.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
            coerced = True
        for raw_item in raw_items:
            if not isinstance(raw_item, dict):
                coerced = True
                continue
            sale_quantity, _ = coerce_number(raw_item.get("saleQuantity"))
            sale_price, price_coerced = coerce_number(raw_item.get("salePrice"))
            catalogue_price, _ = coerce_number(raw_item.get("price"))
            product_id = raw_item.get("id")
            if sale_quantity <= 0 or not isinstance(product_id, str) or not product_id:
                coerced = True
                continue
            items.append({
                "id": product_id,
                "barcode": _optional_str(raw_item, "barcode", 64) or "",
                "name": _optional_str(raw_item, "name", 200) or "",
                "price": catalogue_price,
                "saleQuantity": sale_quantity,
                "salePrice": sale_price,
            })
            coerced = coerced or price_coerced

        invoice = Invoice(
            id=_required_str(record, "id"),
            date=date,
            items=items,
            total=total,
        )
        return invoice, coerced
