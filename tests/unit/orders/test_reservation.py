"""Unit tests for StockReservationService (retry policy + decrement building)."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.orders.dtos import PricedOrderLineDTO
from modules.orders.exceptions import (
    InsufficientStock,
    ReservationConflict,
    ReservationFailed,
)
from modules.orders.reservation import StockReservationService, build_decrements
from modules.products.dtos import StockDecrementDTO

pytestmark = pytest.mark.unit


def _line(product_id: str, quantity: int) -> PricedOrderLineDTO:
    return PricedOrderLineDTO(product_id=product_id, quantity=quantity, unit_price=Decimal("1"))


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def product_repo():
    return MagicMock()


@pytest.fixture()
def reservation(product_repo, sleeps):
    return StockReservationService(
        product_repo, max_attempts=3, retry_backoff=0.1, sleep=sleeps.append
    )


class TestBuildDecrements:
    def test_sorted_by_product_id(self):
        decrements = build_decrements([_line("b", 1), _line("a", 2)])
        assert decrements == [
            StockDecrementDTO(product_id="a", amount=2),
            StockDecrementDTO(product_id="b", amount=1),
        ]

    def test_duplicate_products_aggregated(self):
        decrements = build_decrements([_line("a", 1), _line("a", 4)])
        assert decrements == [StockDecrementDTO(product_id="a", amount=5)]


class TestReserve:
    def test_success_on_first_attempt(self, reservation, product_repo, sleeps):
        decrements = reservation.reserve([_line("P2", 3), _line("P1", 2)])

        product_repo.reserve.assert_called_once_with(decrements)
        assert [d.product_id for d in decrements] == ["P1", "P2"]
        assert sleeps == []

    def test_conflict_is_retried_with_linear_backoff(self, reservation, product_repo, sleeps):
        product_repo.reserve.side_effect = [
            ReservationConflict("P1"),
            ReservationConflict("P1"),
            None,
        ]

        reservation.reserve([_line("P1", 1)])

        assert product_repo.reserve.call_count == 3
        assert sleeps == pytest.approx([0.1, 0.2])

    def test_exhausted_attempts_raise_reservation_failed(
        self, reservation, product_repo, sleeps
    ):
        product_repo.reserve.side_effect = ReservationConflict("P1")

        with pytest.raises(ReservationFailed) as exc_info:
            reservation.reserve([_line("P1", 1), _line("P2", 1)])

        assert exc_info.value.attempts == 3
        assert exc_info.value.product_ids == ["P1", "P2"]
        assert isinstance(exc_info.value.__cause__, ReservationConflict)
        assert product_repo.reserve.call_count == 3
        assert len(sleeps) == 2

    def test_insufficient_stock_is_not_retried(self, reservation, product_repo, sleeps):
        product_repo.reserve.side_effect = InsufficientStock("P1", 2, 1)

        with pytest.raises(InsufficientStock):
            reservation.reserve([_line("P1", 2)])

        assert product_repo.reserve.call_count == 1
        assert sleeps == []

    def test_max_attempts_must_be_positive(self, product_repo):
        with pytest.raises(ValueError):
            StockReservationService(product_repo, max_attempts=0)


class TestRelease:
    def test_delegates_to_catalog(self, reservation, product_repo):
        decrements = [StockDecrementDTO(product_id="P1", amount=2)]

        reservation.release(decrements)

        product_repo.release.assert_called_once_with(decrements)
