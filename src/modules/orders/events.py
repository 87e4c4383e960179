"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderAdmitted(DomainEvent):
    """Raised once an order has been reserved and persisted."""

    customer_id: str = ""
    order_number: str = ""
    total_amount: Decimal = Decimal("0.00")
