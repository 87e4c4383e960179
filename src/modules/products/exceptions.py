"""Product and stock domain exceptions.

Raised by catalog adapters and by the order admission service when
product or stock rules are violated.
"""

from __future__ import annotations

from typing import Iterable

from shared.domain.exceptions import DomainError


class ProductNotFound(DomainError):
    """One or more requested products do not exist in the catalog."""

    code = "product_not_found"

    def __init__(self, product_ids: Iterable[str]) -> None:
        ids = sorted(str(pid) for pid in product_ids)
        super().__init__(f"Products not found: {', '.join(ids)}.", product_ids=ids)
        self.product_ids = ids


class InsufficientStock(DomainError):
    """Not enough stock to fulfil a line of the order."""

    code = "insufficient_stock"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Product {product_id}: requested {requested}, available {available}.",
            product_id=str(product_id),
            requested=requested,
            available=available,
        )
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available


class ReservationConflict(DomainError):
    """Exclusive access to a product's stock could not be obtained in time.

    Transient: the reservation service retries it a bounded number of
    times before giving up.
    """

    code = "reservation_conflict"

    def __init__(self, product_id: str, reason: str = "") -> None:
        message = f"Stock of product {product_id} is locked by a concurrent reservation."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, product_id=str(product_id))
        self.product_id = str(product_id)
