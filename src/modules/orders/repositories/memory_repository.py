"""In-memory Order repository."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from modules.orders.dtos import OrderDraftDTO, OrderOutputDTO
from modules.orders.numbers import generate_order_number
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class InMemoryOrderRepository(IOrderRepository):
    """Dictionary-backed order store, safe to share between threads."""

    def __init__(self) -> None:
        self._orders: Dict[str, OrderOutputDTO] = {}
        self._lock = threading.Lock()

    def create(self, draft: OrderDraftDTO) -> OrderOutputDTO:
        order = OrderOutputDTO(
            id=str(uuid.uuid4()),
            order_number=generate_order_number(),
            customer_id=draft.customer_id,
            lines=list(draft.lines),
            total_amount=draft.total_amount,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._orders[order.id] = order
        logger.info("order.created", order_id=order.id, item_count=len(order.lines))
        return order

    def get_by_id(self, id: str) -> Optional[OrderOutputDTO]:
        return self._orders.get(str(id))

    def list(self) -> List[OrderOutputDTO]:
        with self._lock:
            return list(self._orders.values())
