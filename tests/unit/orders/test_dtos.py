"""Unit tests for Order DTOs.

Covers:
- CreateOrderItemDTO: quantity and product id validation, immutability.
- CreateOrderDTO: customer id and items validation, UUID normalisation.
- PricedOrderLineDTO / OrderDraftDTO: subtotal and total arithmetic.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderItemDTO,
    OrderDraftDTO,
    PricedOrderLineDTO,
)

pytestmark = pytest.mark.unit


# ===========================================================================
# CreateOrderItemDTO
# ===========================================================================


class TestCreateOrderItemDTO:
    def test_valid_item(self):
        dto = CreateOrderItemDTO(product_id="P1", quantity=3)
        assert dto.quantity == 3

    def test_zero_quantity_raises(self):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            CreateOrderItemDTO(product_id="P1", quantity=0)

    def test_negative_quantity_raises(self):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            CreateOrderItemDTO(product_id="P1", quantity=-1)

    def test_blank_product_id_raises(self):
        with pytest.raises(ValidationError, match="Product id must not be empty"):
            CreateOrderItemDTO(product_id="   ", quantity=1)

    def test_uuid_product_id_is_normalised_to_str(self):
        product_id = uuid4()
        dto = CreateOrderItemDTO(product_id=product_id, quantity=1)
        assert dto.product_id == str(product_id)

    def test_is_immutable(self):
        dto = CreateOrderItemDTO(product_id="P1", quantity=2)
        with pytest.raises(ValidationError):
            dto.quantity = 5


# ===========================================================================
# CreateOrderDTO
# ===========================================================================


class TestCreateOrderDTO:
    def test_valid_order(self):
        dto = CreateOrderDTO(
            customer_id="C1",
            items=[CreateOrderItemDTO(product_id="P1", quantity=1)],
        )
        assert dto.customer_id == "C1"
        assert len(dto.items) == 1

    def test_empty_items_raises(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(customer_id="C1", items=[])

    def test_empty_customer_id_raises(self):
        with pytest.raises(ValidationError, match="Customer id must not be empty"):
            CreateOrderDTO(
                customer_id="",
                items=[CreateOrderItemDTO(product_id="P1", quantity=1)],
            )

    def test_duplicate_products_are_accepted(self):
        dto = CreateOrderDTO(
            customer_id="C1",
            items=[
                CreateOrderItemDTO(product_id="P1", quantity=1),
                CreateOrderItemDTO(product_id="P1", quantity=2),
            ],
        )
        assert len(dto.items) == 2

    def test_items_from_dicts(self):
        dto = CreateOrderDTO(
            customer_id=uuid4(),
            items=[{"product_id": "P1", "quantity": 2}],
        )
        assert dto.items[0] == CreateOrderItemDTO(product_id="P1", quantity=2)


# ===========================================================================
# Priced lines
# ===========================================================================


class TestPricedLines:
    def test_subtotal(self):
        line = PricedOrderLineDTO(product_id="P1", quantity=3, unit_price=Decimal("2.50"))
        assert line.subtotal == Decimal("7.50")

    def test_draft_total_amount(self):
        draft = OrderDraftDTO(
            customer_id="C1",
            lines=[
                PricedOrderLineDTO(product_id="P1", quantity=2, unit_price=Decimal("10")),
                PricedOrderLineDTO(product_id="P2", quantity=3, unit_price=Decimal("20")),
            ],
        )
        assert draft.total_amount == Decimal("80")
