"""Django ORM implementation of the Order repository.

The Order aggregate (Order + OrderItems) is written inside one
``transaction.atomic()`` block, and the returned DTO is read back inside
the same block: once the block commits nothing else can fail.  Database
errors and order-number exhaustion surface as ``PersistenceFailed`` after
the block has rolled back.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from modules.orders.dtos import OrderDraftDTO, OrderOutputDTO
from modules.orders.exceptions import PersistenceFailed
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def create(self, draft: OrderDraftDTO) -> OrderOutputDTO:
        try:
            with transaction.atomic():
                order = self._write(draft)
                output = self._load(order.id)
        except (DatabaseError, RuntimeError) as exc:
            logger.error(
                "order.write_failed",
                customer_id=draft.customer_id,
                error=str(exc),
            )
            raise PersistenceFailed(draft.customer_id, str(exc)) from exc

        logger.info("order.created", order_id=output.id, item_count=len(output.lines))
        return output

    def get_by_id(self, id: str) -> Optional[OrderOutputDTO]:
        """Retrieve an order with prefetched items.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            order = Order.objects.prefetch_related("items").filter(id=id).first()
        except (ValueError, ValidationError):
            return None
        if order is None:
            return None
        return OrderOutputDTO.from_entity(order)

    def _load(self, order_id) -> OrderOutputDTO:
        return OrderOutputDTO.from_entity(
            Order.objects.prefetch_related("items").get(id=order_id)
        )

    def _write(self, draft: OrderDraftDTO) -> Order:
        order = Order(customer_id=draft.customer_id)
        order.save()

        total = Decimal("0.00")
        for position, line in enumerate(draft.lines):
            item = OrderItem(
                order=order,
                product_id=line.product_id,
                position=position,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            item.save()
            total += item.subtotal

        order.total_amount = total
        order.save(update_fields=["total_amount"])
        return order
