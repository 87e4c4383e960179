from __future__ import annotations

from decimal import Decimal

import pytest

from modules.customers.dtos import CustomerDTO
from modules.orders.providers import get_in_memory_order_admission_service
from modules.products.dtos import ProductDTO

CUSTOMER_ID = "customer-1"


@pytest.fixture()
def customer():
    return CustomerDTO(id=CUSTOMER_ID, name="Ada Lovelace", email="ada@example.com")


@pytest.fixture()
def catalog_products():
    """P1 (price 10, qty 5) and P2 (price 20, qty 3)."""
    return [
        ProductDTO(id="P1", price=Decimal("10"), quantity=5, name="Keyboard"),
        ProductDTO(id="P2", price=Decimal("20"), quantity=3, name="Mouse"),
    ]


@pytest.fixture()
def admission_service(customer, catalog_products):
    """OrderAdmissionService over in-memory collaborators."""
    return get_in_memory_order_admission_service(
        customers=[customer], products=catalog_products
    )
