"""Order repository interface (Order Store).

The admission service depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from modules.orders.dtos import OrderDraftDTO, OrderOutputDTO


class IOrderRepository(ABC):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its priced lines; creation is atomic.
    """

    @abstractmethod
    def create(self, draft: OrderDraftDTO) -> OrderOutputDTO:
        """Durably create an order with all of its lines.

        Assigns ``id``, ``order_number`` and ``created_at``.

        Raises:
            PersistenceFailed: the order could not be written.  Nothing of
                it is left behind.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[OrderOutputDTO]:
        """Retrieve an order with its lines; ``None`` if unknown."""
