"""Order DTOs.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one requested line (product id + quantity).
- ``CreateOrderDTO``: an admission request.
- ``PricedOrderLineDTO``: a line with its unit price fixed at admission.
- ``OrderDraftDTO``: what the Order Store is asked to persist.
- ``OrderOutputDTO``: the persisted order.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.orders.models import Order


def _normalise_id(value: Any) -> Any:
    if value is None:
        return value
    return str(value).strip()


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single requested order line.

    ``unit_price`` is never accepted from the caller; it is resolved
    from the catalog during admission.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int

    @field_validator("product_id", mode="before")
    @classmethod
    def product_id_to_str(cls, v: Any) -> Any:
        return _normalise_id(v)

    @field_validator("product_id")
    @classmethod
    def product_id_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Product id must not be empty.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for admission requests.

    Validates:
    - ``customer_id`` is a non-empty identifier (UUIDs are accepted).
    - ``items`` contains at least one line.

    Duplicate product ids are allowed here; admission merges them.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: str
    items: List[CreateOrderItemDTO]

    @field_validator("customer_id", mode="before")
    @classmethod
    def customer_id_to_str(cls, v: Any) -> Any:
        return _normalise_id(v)

    @field_validator("customer_id")
    @classmethod
    def customer_id_must_not_be_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Customer id must not be empty.")
        return v

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


# ---------------------------------------------------------------------------
# Admission DTOs
# ---------------------------------------------------------------------------


class PricedOrderLineDTO(BaseModel):
    """Order line with the unit price captured at admission time."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price


class OrderDraftDTO(BaseModel):
    """Validated, priced order handed to the Order Store."""

    model_config = ConfigDict(frozen=True)

    customer_id: str
    lines: List[PricedOrderLineDTO]

    @property
    def total_amount(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderOutputDTO(BaseModel):
    """Immutable DTO for a persisted order."""

    model_config = ConfigDict(frozen=True)

    id: str
    order_number: str
    customer_id: str
    lines: List[PricedOrderLineDTO]
    total_amount: Decimal
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``items`` are prefetched.
        """
        lines = [
            PricedOrderLineDTO(
                product_id=str(item.product_id),
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items.all()
        ]
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            lines=lines,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )
