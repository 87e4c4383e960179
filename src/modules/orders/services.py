"""Order admission service (Use Case).

Sequences validation & pricing, stock reservation and order persistence
as one logical transaction.  Storage lives behind three collaborators
injected through the constructor; the service never touches a model.

Guarantees:
- The customer is resolved before the catalog is read.
- Prices are snapshotted from the same catalog read that validated stock.
- Stock is reserved all-or-nothing, under exclusive access, in product-id order.
- A reservation never outlives a failed or cancelled persistence step:
  it is released before the failure propagates.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, List, Optional

import structlog

from modules.orders.dtos import OrderDraftDTO
from modules.orders.events import OrderAdmitted
from modules.orders.exceptions import CustomerNotFound, PersistenceFailed
from modules.orders.pricing import price_order
from modules.orders.reservation import StockReservationService
from shared.domain.exceptions import DomainError

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import CreateOrderDTO, OrderOutputDTO, PricedOrderLineDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.dtos import StockDecrementDTO
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class OrderAdmissionService:
    """Application service admitting orders.

    Receives its collaborators via constructor injection (DIP).
    ``reservation`` defaults to a ``StockReservationService`` over
    ``product_repository``; ``event_bus`` is optional.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        reservation: Optional[StockReservationService] = None,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository
        self._reservation = reservation or StockReservationService(product_repository)
        self._event_bus = event_bus

    @property
    def order_repository(self) -> IOrderRepository:
        return self._order_repo

    @property
    def customer_repository(self) -> ICustomerRepository:
        return self._customer_repo

    @property
    def product_repository(self) -> IProductRepository:
        return self._product_repo

    def admit(self, dto: CreateOrderDTO) -> OrderOutputDTO:
        """Admit an order: validate, price, reserve stock, persist.

        Raises:
            CustomerNotFound: the customer does not exist.
            ProductNotFound: a requested product does not exist.
            InsufficientStock: a line asks for more than is available.
            ReservationFailed: stock stayed locked for every retry.
            PersistenceFailed: the Order Store failed; stock was released.
        """
        with structlog.contextvars.bound_contextvars(admission_id=str(uuid.uuid4())):
            log = logger.bind(customer_id=dto.customer_id)
            log.info("order.admission_started", line_count=len(dto.items))

            try:
                customer = self._customer_repo.get_by_id(dto.customer_id)
                if customer is None:
                    raise CustomerNotFound(dto.customer_id)

                lines = price_order(dto, self._product_repo)
                decrements = self._reservation.reserve(lines)
            except DomainError as exc:
                log.warning("order.admission_rejected", code=exc.code, details=exc.details)
                raise

            order = self._persist(customer.id, lines, decrements, log)
            log.info(
                "order.admitted",
                order_id=order.id,
                order_number=order.order_number,
                total_amount=str(order.total_amount),
            )
            self._publish(order, log)
            return order

    # ------------------------------------------------------------------
    # Persistence with compensation
    # ------------------------------------------------------------------

    def _persist(
        self,
        customer_id: str,
        lines: List[PricedOrderLineDTO],
        decrements: List[StockDecrementDTO],
        log: structlog.stdlib.BoundLogger,
    ) -> OrderOutputDTO:
        draft = OrderDraftDTO(customer_id=customer_id, lines=lines)
        try:
            return self._order_repo.create(draft)
        except Exception as exc:
            released = self._compensate(customer_id, decrements, log)
            reason = exc.reason if isinstance(exc, PersistenceFailed) else (
                str(exc) or type(exc).__name__
            )
            log.error("order.persistence_failed", reason=reason, stock_released=released)
            raise PersistenceFailed(customer_id, reason, release_failed=not released) from exc
        except BaseException:
            log.warning("order.admission_cancelled")
            self._compensate(customer_id, decrements, log)
            raise

    def _compensate(
        self,
        customer_id: str,
        decrements: List[StockDecrementDTO],
        log: structlog.stdlib.BoundLogger,
    ) -> bool:
        """Release a reservation whose order was never persisted.

        A failed release leaves stock reserved with no order: it is logged
        for manual reconciliation and not retried.
        """
        try:
            self._reservation.release(decrements)
        except Exception:
            log.critical(
                "order.reservation.release_failed",
                customer_id=customer_id,
                decrements=[d.model_dump() for d in decrements],
                exc_info=True,
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Domain events
    # ------------------------------------------------------------------

    def _publish(self, order: OrderOutputDTO, log: structlog.stdlib.BoundLogger) -> None:
        """Publish ``OrderAdmitted``; the order stands even if a handler fails."""
        if self._event_bus is None:
            return
        event = OrderAdmitted(
            aggregate_id=order.id,
            customer_id=order.customer_id,
            order_number=order.order_number,
            total_amount=order.total_amount,
        )
        try:
            self._event_bus.publish(event)
        except Exception:
            log.exception("order.event_publish_failed", event_name=event.event_name)
