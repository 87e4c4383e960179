"""Unit tests for OrderAdmissionService with in-memory and mocked collaborators."""

from __future__ import annotations

import logging
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.customers.repositories.memory_repository import InMemoryCustomerRepository
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, PricedOrderLineDTO
from modules.orders.events import OrderAdmitted
from modules.orders.exceptions import (
    CustomerNotFound,
    InsufficientStock,
    PersistenceFailed,
    ProductNotFound,
)
from modules.orders.repositories.memory_repository import InMemoryOrderRepository
from modules.orders.services import OrderAdmissionService
from modules.products.dtos import StockDecrementDTO
from modules.products.repositories.memory_repository import InMemoryProductRepository
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class Cancelled(BaseException):
    """Stands in for a caller cancelling the request mid-flight."""


def _request(customer_id, *lines):
    return CreateOrderDTO(
        customer_id=customer_id,
        items=[CreateOrderItemDTO(product_id=pid, quantity=qty) for pid, qty in lines],
    )


def _stock(service):
    repo = service.product_repository
    return {"P1": repo.get_quantity("P1"), "P2": repo.get_quantity("P2")}


@pytest.fixture()
def failing_order_repo():
    repo = MagicMock()
    repo.create.side_effect = PersistenceFailed("customer-1", "disk full")
    return repo


@pytest.fixture()
def service_with_order_repo(customer, catalog_products):
    def build(order_repo, product_repo=None, event_bus=None):
        return OrderAdmissionService(
            order_repository=order_repo,
            customer_repository=InMemoryCustomerRepository([customer]),
            product_repository=product_repo or InMemoryProductRepository(catalog_products),
            event_bus=event_bus,
        )

    return build


class TestCustomerResolution:
    def test_unknown_customer_raises_before_catalog_access(self):
        order_repo = MagicMock()
        customer_repo = MagicMock()
        customer_repo.get_by_id.return_value = None
        product_repo = MagicMock()
        service = OrderAdmissionService(order_repo, customer_repo, product_repo)

        with pytest.raises(CustomerNotFound) as exc_info:
            service.admit(_request("ghost", ("P1", 1)))

        assert exc_info.value.customer_id == "ghost"
        assert product_repo.method_calls == []
        order_repo.create.assert_not_called()


class TestSuccessPath:
    def test_creates_priced_order_and_decrements_stock(self, admission_service, customer):
        order = admission_service.admit(_request(customer.id, ("P1", 2), ("P2", 3)))

        assert order.customer_id == customer.id
        assert order.lines == [
            PricedOrderLineDTO(product_id="P1", quantity=2, unit_price=Decimal("10")),
            PricedOrderLineDTO(product_id="P2", quantity=3, unit_price=Decimal("20")),
        ]
        assert order.total_amount == Decimal("80")
        assert order.order_number.startswith("ORD-")
        assert _stock(admission_service) == {"P1": 3, "P2": 0}
        assert admission_service.order_repository.get_by_id(order.id) == order

    def test_duplicate_lines_are_merged(self, admission_service, customer):
        order = admission_service.admit(_request(customer.id, ("P1", 1), ("P1", 2)))

        assert order.lines == [
            PricedOrderLineDTO(product_id="P1", quantity=3, unit_price=Decimal("10")),
        ]
        assert _stock(admission_service)["P1"] == 2

    def test_price_change_does_not_affect_admitted_order(self, admission_service, customer):
        order = admission_service.admit(_request(customer.id, ("P1", 2)))

        admission_service.product_repository.set_price("P1", Decimal("99"))

        stored = admission_service.order_repository.get_by_id(order.id)
        assert stored.lines[0].unit_price == Decimal("10")
        assert stored.total_amount == Decimal("20")


class TestRejections:
    def test_unknown_product_leaves_stock_unchanged(self, admission_service, customer):
        with pytest.raises(ProductNotFound) as exc_info:
            admission_service.admit(_request(customer.id, ("P1", 1), ("NOPE", 1)))

        assert exc_info.value.product_ids == ["NOPE"]
        assert _stock(admission_service) == {"P1": 5, "P2": 3}
        assert admission_service.order_repository.list() == []

    def test_insufficient_stock_decrements_nothing(self, admission_service, customer):
        with pytest.raises(InsufficientStock) as exc_info:
            admission_service.admit(_request(customer.id, ("P1", 1), ("P2", 4)))

        assert exc_info.value.product_id == "P2"
        assert exc_info.value.to_dict()["details"] == {
            "product_id": "P2",
            "requested": 4,
            "available": 3,
        }
        assert _stock(admission_service) == {"P1": 5, "P2": 3}
        assert admission_service.order_repository.list() == []

    def test_stock_consumed_between_read_and_reserve(self, customer, catalog_products):
        product_repo = InMemoryProductRepository(catalog_products)
        real_find = product_repo.find_all_by_id

        def find_then_race(ids):
            snapshot = real_find(ids)
            # A concurrent admission takes the last units of P2.
            product_repo.reserve([StockDecrementDTO(product_id="P2", amount=3)])
            return snapshot

        product_repo.find_all_by_id = find_then_race
        order_repo = MagicMock()
        service = OrderAdmissionService(
            order_repo, InMemoryCustomerRepository([customer]), product_repo
        )

        with pytest.raises(InsufficientStock) as exc_info:
            service.admit(_request(customer.id, ("P1", 1), ("P2", 1)))

        assert exc_info.value.available == 0
        assert product_repo.get_quantity("P1") == 5
        order_repo.create.assert_not_called()


class TestCompensation:
    def test_persistence_failure_restores_stock(
        self, service_with_order_repo, failing_order_repo, customer
    ):
        service = service_with_order_repo(failing_order_repo)

        with pytest.raises(PersistenceFailed) as exc_info:
            service.admit(_request(customer.id, ("P1", 2), ("P2", 3)))

        assert exc_info.value.reason == "disk full"
        assert exc_info.value.release_failed is False
        assert _stock(service) == {"P1": 5, "P2": 3}

    def test_unexpected_store_error_is_wrapped(self, service_with_order_repo, customer):
        order_repo = MagicMock()
        order_repo.create.side_effect = RuntimeError("connection reset")
        service = service_with_order_repo(order_repo)

        with pytest.raises(PersistenceFailed) as exc_info:
            service.admit(_request(customer.id, ("P1", 1)))

        assert exc_info.value.reason == "connection reset"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert _stock(service)["P1"] == 5

    def test_cancellation_during_persistence_releases_stock(
        self, service_with_order_repo, customer
    ):
        order_repo = MagicMock()
        order_repo.create.side_effect = Cancelled()
        service = service_with_order_repo(order_repo)

        with pytest.raises(Cancelled):
            service.admit(_request(customer.id, ("P1", 4)))

        assert _stock(service)["P1"] == 5

    def test_failed_release_is_reported_for_reconciliation(
        self, service_with_order_repo, failing_order_repo, customer, catalog_products, caplog
    ):
        product_repo = MagicMock()
        product_repo.find_all_by_id.return_value = catalog_products
        product_repo.release.side_effect = RuntimeError("catalog unavailable")
        service = service_with_order_repo(failing_order_repo, product_repo=product_repo)

        with caplog.at_level(logging.INFO):
            with pytest.raises(PersistenceFailed) as exc_info:
                service.admit(_request(customer.id, ("P1", 1)))

        assert exc_info.value.release_failed is True
        product_repo.reserve.assert_called_once()
        critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert any("order.reservation.release_failed" in r.getMessage() for r in critical)


class TestDomainEvents:
    def test_order_admitted_published(self, service_with_order_repo, customer):
        bus = InMemoryEventBus()
        handler = MagicMock()
        bus.subscribe(OrderAdmitted, handler)
        service = service_with_order_repo(InMemoryOrderRepository(), event_bus=bus)

        order = service.admit(_request(customer.id, ("P2", 1)))

        handler.handle.assert_called_once()
        event = handler.handle.call_args.args[0]
        assert event.aggregate_id == order.id
        assert event.customer_id == customer.id
        assert event.total_amount == Decimal("20")
        assert event.event_name == "OrderAdmitted"

    def test_failing_handler_does_not_undo_admission(self, service_with_order_repo, customer):
        bus = InMemoryEventBus()
        handler = MagicMock()
        handler.handle.side_effect = RuntimeError("subscriber down")
        bus.subscribe(OrderAdmitted, handler)
        order_repo = InMemoryOrderRepository()
        service = service_with_order_repo(order_repo, event_bus=bus)

        order = service.admit(_request(customer.id, ("P1", 1)))

        assert order_repo.get_by_id(order.id) == order
        assert _stock(service)["P1"] == 4

    def test_no_event_on_rejection(self, service_with_order_repo, customer):
        bus = InMemoryEventBus()
        handler = MagicMock()
        bus.subscribe(OrderAdmitted, handler)
        service = service_with_order_repo(InMemoryOrderRepository(), event_bus=bus)

        with pytest.raises(InsufficientStock):
            service.admit(_request(customer.id, ("P2", 10)))

        handler.handle.assert_not_called()
