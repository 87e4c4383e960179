"""Order admission exceptions.

The closed set of errors ``OrderAdmissionService.admit`` can raise.
Customer and product errors are defined next to their owning modules
and re-exported here so callers import the whole taxonomy from one
place.
"""

from __future__ import annotations

from typing import Iterable

from modules.customers.exceptions import CustomerNotFound
from modules.products.exceptions import (
    InsufficientStock,
    ProductNotFound,
    ReservationConflict,
)
from shared.domain.exceptions import DomainError

__all__ = [
    "CustomerNotFound",
    "InsufficientStock",
    "PersistenceFailed",
    "ProductNotFound",
    "ReservationConflict",
    "ReservationFailed",
]


class ReservationFailed(DomainError):
    """Stock stayed locked by concurrent reservations for every attempt."""

    code = "reservation_failed"

    def __init__(self, product_ids: Iterable[str], attempts: int) -> None:
        ids = sorted(str(pid) for pid in product_ids)
        super().__init__(
            f"Could not reserve stock for {', '.join(ids)} after {attempts} attempts.",
            product_ids=ids,
            attempts=attempts,
        )
        self.product_ids = ids
        self.attempts = attempts


class PersistenceFailed(DomainError):
    """The Order Store could not durably create the order.

    ``release_failed`` is ``True`` when the compensating stock release
    also failed and the reservation needs manual reconciliation.
    """

    code = "persistence_failed"

    def __init__(self, customer_id: str, reason: str, release_failed: bool = False) -> None:
        super().__init__(
            f"Order for customer {customer_id} could not be persisted: {reason}",
            customer_id=customer_id,
            reason=reason,
            release_failed=release_failed,
        )
        self.customer_id = customer_id
        self.reason = reason
        self.release_failed = release_failed
