"""Customer domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError


class CustomerNotFound(DomainError):
    """The customer referenced by an admission request does not exist."""

    code = "customer_not_found"

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer {customer_id} not found.", customer_id=customer_id)
        self.customer_id = customer_id
