"""Customer repository interface (Customer Directory).

The order admission core depends exclusively on this contract (DIP);
storage adapters implement it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from modules.customers.dtos import CustomerDTO


class ICustomerRepository(ABC):
    """Read-only customer directory."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[CustomerDTO]:
        """Resolve a customer by identifier.

        Returns ``None`` for unknown or malformed ids instead of raising;
        the caller decides how to report a missing customer.
        """
