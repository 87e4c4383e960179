"""In-memory Product repository for stock kept inside one process.

Each product has its own ``threading.Lock``.  A reservation takes the
locks of every product it touches in ascending product-id order, waits
at most ``lock_timeout`` seconds for each, re-checks stock while holding
all of them, and applies every decrement before letting go.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import structlog

from modules.products.constants import DEFAULT_RESERVATION_LOCK_TIMEOUT
from modules.products.dtos import ProductDTO, StockDecrementDTO
from modules.products.exceptions import (
    InsufficientStock,
    ProductNotFound,
    ReservationConflict,
)
from modules.products.repositories.interfaces import IProductRepository
from modules.products.stock import aggregate_decrements

logger = structlog.get_logger(__name__)


class InMemoryProductRepository(IProductRepository):
    """Dictionary-backed catalog with per-product locks.

    ``lock_timeout=None`` waits forever for a product lock.
    """

    def __init__(
        self,
        products: Iterable[ProductDTO] = (),
        lock_timeout: Optional[float] = DEFAULT_RESERVATION_LOCK_TIMEOUT,
    ) -> None:
        self._products: Dict[str, ProductDTO] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._lock_timeout = lock_timeout
        for product in products:
            self.add(product)

    # ------------------------------------------------------------------
    # Seeding / inspection
    # ------------------------------------------------------------------

    def add(self, product: ProductDTO) -> ProductDTO:
        with self._locked([product.id]):
            self._products[product.id] = product
        return product

    def set_price(self, product_id: str, price: Decimal) -> ProductDTO:
        with self._locked([product_id]):
            current = self._require(product_id)
            updated = current.model_copy(update={"price": price})
            self._products[product_id] = updated
        return updated

    def get_quantity(self, product_id: str) -> int:
        return self._require(product_id).quantity

    # ------------------------------------------------------------------
    # IProductRepository
    # ------------------------------------------------------------------

    def find_all_by_id(self, ids: Iterable[str]) -> List[ProductDTO]:
        found = []
        for product_id in dict.fromkeys(str(i) for i in ids):
            product = self._products.get(product_id)
            if product is not None:
                found.append(product)
        return found

    def reserve(self, decrements: Sequence[StockDecrementDTO]) -> None:
        ordered = aggregate_decrements(decrements)
        with self._locked(d.product_id for d in ordered):
            missing = [d.product_id for d in ordered if d.product_id not in self._products]
            if missing:
                raise ProductNotFound(missing)

            for decrement in ordered:
                available = self._products[decrement.product_id].quantity
                if available < decrement.amount:
                    raise InsufficientStock(decrement.product_id, decrement.amount, available)

            for decrement in ordered:
                current = self._products[decrement.product_id]
                self._products[decrement.product_id] = current.model_copy(
                    update={"quantity": current.quantity - decrement.amount}
                )
                logger.info(
                    "product.stock_reserved",
                    product_id=decrement.product_id,
                    quantity=decrement.amount,
                    remaining=current.quantity - decrement.amount,
                )

    def release(self, decrements: Sequence[StockDecrementDTO]) -> None:
        ordered = aggregate_decrements(decrements)
        with self._locked(d.product_id for d in ordered):
            for decrement in ordered:
                current = self._products.get(decrement.product_id)
                if current is None:
                    logger.warning(
                        "product.release_skipped_missing",
                        product_id=decrement.product_id,
                        quantity=decrement.amount,
                    )
                    continue
                self._products[decrement.product_id] = current.model_copy(
                    update={"quantity": current.quantity + decrement.amount}
                )
                logger.info(
                    "product.stock_released",
                    product_id=decrement.product_id,
                    quantity=decrement.amount,
                    restored_stock=current.quantity + decrement.amount,
                )

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def _lock_for(self, product_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(product_id, threading.Lock())

    @contextmanager
    def _locked(self, product_ids: Iterable[str]) -> Iterator[None]:
        acquired: List[threading.Lock] = []
        try:
            for product_id in sorted(set(product_ids)):
                lock = self._lock_for(product_id)
                if self._lock_timeout is None:
                    lock.acquire()
                elif not lock.acquire(timeout=self._lock_timeout):
                    raise ReservationConflict(product_id, reason="lock wait timed out")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def _require(self, product_id: str) -> ProductDTO:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFound([product_id])
        return product
