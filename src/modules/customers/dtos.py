"""Customer DTOs.

``CustomerDTO`` is the only shape of a customer the order admission
core ever sees; repositories build it from whatever storage they wrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.customers.models import Customer


class CustomerDTO(BaseModel):
    """Immutable customer record."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    email: str = ""

    @classmethod
    def from_entity(cls, customer: Customer) -> CustomerDTO:
        return cls(id=str(customer.id), name=customer.name, email=customer.email)
