"""In-memory Customer repository."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from modules.customers.dtos import CustomerDTO
from modules.customers.repositories.interfaces import ICustomerRepository


class InMemoryCustomerRepository(ICustomerRepository):
    """Dictionary-backed customer directory."""

    def __init__(self, customers: Iterable[CustomerDTO] = ()) -> None:
        self._customers: Dict[str, CustomerDTO] = {}
        for customer in customers:
            self.add(customer)

    def add(self, customer: CustomerDTO) -> CustomerDTO:
        self._customers[customer.id] = customer
        return customer

    def get_by_id(self, id: str) -> Optional[CustomerDTO]:
        return self._customers.get(str(id))
