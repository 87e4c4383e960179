"""Product DTOs.

Framework-agnostic, immutable (``frozen=True``) pydantic models.

- ``ProductDTO``: catalog snapshot of one product (price + stock).
- ``StockDecrementDTO``: one entry of a reservation / release request.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.products.models import Product


class ProductDTO(BaseModel):
    """Snapshot of a product as observed at read time."""

    model_config = ConfigDict(frozen=True)

    id: str
    price: Decimal
    quantity: int
    name: str = ""

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @classmethod
    def from_entity(cls, product: Product) -> ProductDTO:
        return cls(
            id=str(product.id),
            price=product.price,
            quantity=product.stock_quantity,
            name=product.name,
        )


class StockDecrementDTO(BaseModel):
    """Amount of stock to take from (or give back to) one product."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    amount: int

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Amount must be at least 1.")
        return v
