"""
Inventory and Sales Models

Products in stock and the sales invoices that draw them down.
Field names follow the storage format (``saleQuantity``,
``salePrice``) through aliases.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledgerbook.models.ledger import utc_now
from ledgerbook.models.validation import ActionResult


def new_product_id() -> str:
    return f"prod-{uuid4().hex}"


def new_invoice_id() -> str:
    return f"INV-{uuid4().hex[:12].upper()}"


class Product(BaseModel):
    """A stocked product."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(
        default_factory=new_product_id,
        min_length=1
    )
    barcode: str = Field(
        ...,
        min_length=1,
        max_length=64
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    quantity: float = Field(
        default=0,
        ge=0,
        allow_inf_nan=False,
        description="Units in stock"
    )
    price: float = Field(
        default=0,
        ge=0,
        allow_inf_nan=False,
        description="Unit price"
    )

    @property
    def stock_value(self) -> float:
        return self.quantity * self.price

    def to_storage_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class InvoiceItem(BaseModel):
    """
    A product line on an invoice.

    Keeps a snapshot of the product (``price`` is the catalogue price at
    the time of sale) plus the quantity and price actually charged.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    product_id: str = Field(
        ...,
        alias="id",
        min_length=1
    )
    barcode: str = ""
    name: str = ""
    price: float = Field(
        default=0,
        ge=0,
        allow_inf_nan=False,
        description="Catalogue price when sold"
    )
    sale_quantity: float = Field(
        ...,
        alias="saleQuantity",
        gt=0,
        allow_inf_nan=False
    )
    sale_price: float = Field(
        ...,
        alias="salePrice",
        ge=0,
        allow_inf_nan=False
    )

    @property
    def line_total(self) -> float:
        return self.sale_quantity * self.sale_price


class Invoice(BaseModel):
    """A finalized sales invoice."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=new_invoice_id)
    date: datetime = Field(default_factory=utc_now)
    items: list[InvoiceItem] = Field(default_factory=list)
    total: float = Field(
        default=0,
        ge=0,
        allow_inf_nan=False
    )

    @field_validator('date')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def items_sold(self) -> float:
        return sum(item.sale_quantity for item in self.items)

    def to_storage_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class BusinessProfile(BaseModel):
    """Business details printed on invoices and statements."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    phone: str = ""


class ProductResult(ActionResult):
    product: Optional[Product] = None


class InvoiceResult(ActionResult):
    invoice: Optional[Invoice] = None
