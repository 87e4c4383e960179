"""Product repository interface (Product Catalog).

Covers the two things order admission needs from the catalog: a batched
read of price and stock, and an all-or-nothing stock reservation with
its compensating release.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Sequence

if TYPE_CHECKING:
    from modules.products.dtos import ProductDTO, StockDecrementDTO


class IProductRepository(ABC):
    """Repository contract for the Product catalog."""

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[str]) -> List[ProductDTO]:
        """Resolve products in one batched look-up.

        Returns at most one record per id.  Unknown or malformed ids are
        omitted, never fabricated.
        """

    @abstractmethod
    def reserve(self, decrements: Sequence[StockDecrementDTO]) -> None:
        """Atomically decrement stock for every entry, or for none.

        Exclusive access to the touched products is taken in ascending
        product-id order and sufficiency is re-checked under it.

        Raises:
            InsufficientStock: a product no longer has enough stock.
            ProductNotFound: a product disappeared since it was read.
            ReservationConflict: exclusive access could not be obtained.
        """

    @abstractmethod
    def release(self, decrements: Sequence[StockDecrementDTO]) -> None:
        """Give back stock taken by a previous ``reserve`` call."""
