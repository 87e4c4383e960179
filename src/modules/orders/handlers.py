"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderAdmitted
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderAdmittedHandler(IEventHandler[OrderAdmitted]):
    def handle(self, event: OrderAdmitted) -> None:
        logger.info(
            "order.event.admitted",
            order_id=event.aggregate_id,
            order_number=event.order_number,
            customer_id=event.customer_id,
            total_amount=str(event.total_amount),
        )


order_admitted_handler = OrderAdmittedHandler()
