"""Stock reservation protocol.

Wraps the catalog's all-or-nothing ``reserve`` with the retry policy for
transient lock contention.  Exclusive access, lock ordering and the
re-check of stock under the lock live in the catalog adapters; this
service decides what to reserve and how often to try.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, List, Sequence

import structlog

from modules.orders.constants import (
    DEFAULT_RESERVATION_MAX_ATTEMPTS,
    DEFAULT_RESERVATION_RETRY_BACKOFF,
)
from modules.orders.exceptions import ReservationConflict, ReservationFailed
from modules.products.dtos import StockDecrementDTO
from modules.products.stock import aggregate_decrements

if TYPE_CHECKING:
    from modules.orders.dtos import PricedOrderLineDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def build_decrements(lines: Sequence[PricedOrderLineDTO]) -> List[StockDecrementDTO]:
    """One decrement per distinct product, in lock-acquisition order."""
    return aggregate_decrements(
        StockDecrementDTO(product_id=line.product_id, amount=line.quantity)
        for line in lines
    )


class StockReservationService:
    """Reserves and releases stock for admitted orders."""

    def __init__(
        self,
        product_repository: IProductRepository,
        max_attempts: int = DEFAULT_RESERVATION_MAX_ATTEMPTS,
        retry_backoff: float = DEFAULT_RESERVATION_RETRY_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self._product_repo = product_repository
        self._max_attempts = max_attempts
        self._retry_backoff = retry_backoff
        self._sleep = sleep

    def reserve(self, lines: Sequence[PricedOrderLineDTO]) -> List[StockDecrementDTO]:
        """Reserve stock for every line, or for none.

        ``InsufficientStock`` and ``ProductNotFound`` from the catalog are
        terminal and propagate on the first attempt.

        Returns:
            The decrements that were applied, for a later ``release``.

        Raises:
            ReservationFailed: every attempt hit a ``ReservationConflict``.
        """
        decrements = build_decrements(lines)
        product_ids = [d.product_id for d in decrements]

        for attempt in range(1, self._max_attempts + 1):
            try:
                self._product_repo.reserve(decrements)
            except ReservationConflict as exc:
                logger.warning(
                    "order.reservation_conflict",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    product_id=exc.product_id,
                )
                if attempt < self._max_attempts:
                    self._sleep(self._retry_backoff * attempt)
                last_conflict = exc
                continue
            logger.info(
                "order.stock_reserved",
                product_ids=product_ids,
                attempt=attempt,
            )
            return decrements

        raise ReservationFailed(product_ids, self._max_attempts) from last_conflict

    def release(self, decrements: Sequence[StockDecrementDTO]) -> None:
        """Give back a reservation made by ``reserve``."""
        self._product_repo.release(decrements)
        logger.info(
            "order.stock_released",
            product_ids=[d.product_id for d in decrements],
        )
