"""Wiring of ``OrderAdmissionService`` with concrete collaborators.

Everything is passed explicitly to constructors; these functions are the
only places that pick concrete adapters and read the admission settings.
"""

from __future__ import annotations

from typing import Iterable

from django.conf import settings

from modules.customers.dtos import CustomerDTO
from modules.customers.repositories.memory_repository import InMemoryCustomerRepository
from modules.orders.constants import (
    DEFAULT_RESERVATION_MAX_ATTEMPTS,
    DEFAULT_RESERVATION_RETRY_BACKOFF,
)
from modules.orders.repositories.memory_repository import InMemoryOrderRepository
from modules.orders.reservation import StockReservationService
from modules.orders.services import OrderAdmissionService
from modules.products.constants import DEFAULT_RESERVATION_LOCK_TIMEOUT
from modules.products.dtos import ProductDTO
from modules.products.repositories.interfaces import IProductRepository
from modules.products.repositories.memory_repository import InMemoryProductRepository
from shared.infrastructure.bus import event_bus


def _reservation(product_repository: IProductRepository) -> StockReservationService:
    return StockReservationService(
        product_repository,
        max_attempts=getattr(
            settings, "ORDER_RESERVATION_MAX_ATTEMPTS", DEFAULT_RESERVATION_MAX_ATTEMPTS
        ),
        retry_backoff=getattr(
            settings, "ORDER_RESERVATION_RETRY_BACKOFF", DEFAULT_RESERVATION_RETRY_BACKOFF
        ),
    )


def get_order_admission_service() -> OrderAdmissionService:
    """Return an ``OrderAdmissionService`` backed by the Django ORM."""
    from modules.customers.repositories.django_repository import CustomerDjangoRepository
    from modules.orders.repositories.django_repository import OrderDjangoRepository
    from modules.products.repositories.django_repository import ProductDjangoRepository

    product_repository = ProductDjangoRepository()
    return OrderAdmissionService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
        product_repository=product_repository,
        reservation=_reservation(product_repository),
        event_bus=event_bus,
    )


def get_in_memory_order_admission_service(
    customers: Iterable[CustomerDTO] = (),
    products: Iterable[ProductDTO] = (),
) -> OrderAdmissionService:
    """Return an ``OrderAdmissionService`` over process-local stock.

    The repositories stay reachable for seeding and inspection through
    ``service.customer_repository`` / ``product_repository`` /
    ``order_repository``.
    """
    product_repository = InMemoryProductRepository(
        products,
        lock_timeout=getattr(
            settings, "ORDER_RESERVATION_LOCK_TIMEOUT", DEFAULT_RESERVATION_LOCK_TIMEOUT
        ),
    )
    return OrderAdmissionService(
        order_repository=InMemoryOrderRepository(),
        customer_repository=InMemoryCustomerRepository(customers),
        product_repository=product_repository,
        reservation=_reservation(product_repository),
        event_bus=event_bus,
    )
