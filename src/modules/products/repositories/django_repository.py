"""Django ORM implementation of the Product repository.

Reads follow the Null Object pattern (malformed or unknown ids are
omitted).  Stock reservation uses row-level locks: ``SELECT FOR UPDATE``
over the touched rows, ordered by primary key, inside one transaction.
Lock wait timeouts and deadlock victims surface from the database as
``OperationalError`` and are reported as ``ReservationConflict`` so the
caller can retry.

Any textual form of a UUID is accepted (upper case, no hyphens, braces).
Rows are matched on the canonical form; results and errors carry the id
as the caller wrote it.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Sequence, Tuple

import structlog

from django.db import OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.dtos import ProductDTO, StockDecrementDTO
from modules.products.exceptions import (
    InsufficientStock,
    ProductNotFound,
    ReservationConflict,
)
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository
from modules.products.stock import aggregate_decrements

logger = structlog.get_logger(__name__)


def _canonical_ids(ids: Iterable[str]) -> Dict[str, str]:
    """Map each well-formed requested id to the canonical text of its UUID."""
    canonical: Dict[str, str] = {}
    for raw in dict.fromkeys(str(i) for i in ids):
        try:
            canonical[raw] = str(uuid.UUID(raw))
        except ValueError:
            logger.debug("product.invalid_id", product_id=raw)
    return canonical


def _canonical_decrements(
    decrements: Sequence[StockDecrementDTO],
) -> Tuple[List[StockDecrementDTO], Dict[str, str], List[str]]:
    """Aggregate ``decrements`` per row.

    Returns the lock-ordered decrements keyed by canonical id, the
    requested spelling of each canonical id, and the malformed ids.
    """
    canonical = _canonical_ids(d.product_id for d in decrements)
    requested: Dict[str, str] = {}
    for raw, key in canonical.items():
        requested.setdefault(key, raw)
    malformed = list(
        dict.fromkeys(d.product_id for d in decrements if d.product_id not in canonical)
    )
    ordered = aggregate_decrements(
        StockDecrementDTO(product_id=canonical[d.product_id], amount=d.amount)
        for d in decrements
        if d.product_id in canonical
    )
    return ordered, requested, malformed


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def find_all_by_id(self, ids: Iterable[str]) -> List[ProductDTO]:
        canonical = _canonical_ids(ids)
        if not canonical:
            return []
        rows = {
            str(product.id): product
            for product in Product.objects.filter(id__in=set(canonical.values()))
        }
        found = []
        for raw, key in canonical.items():
            if key not in rows:
                continue
            dto = ProductDTO.from_entity(rows[key])
            found.append(dto if raw == key else dto.model_copy(update={"id": raw}))
        return found

    @transaction.atomic
    def reserve(self, decrements: Sequence[StockDecrementDTO]) -> None:
        ordered, requested, malformed = _canonical_decrements(decrements)
        locked = self._lock_rows(ordered)

        missing = malformed + [
            requested[d.product_id] for d in ordered if d.product_id not in locked
        ]
        if missing:
            raise ProductNotFound(missing)

        for decrement in ordered:
            product = locked[decrement.product_id]
            if product.stock_quantity < decrement.amount:
                raise InsufficientStock(
                    requested[decrement.product_id],
                    decrement.amount,
                    product.stock_quantity,
                )

        now = timezone.now()
        for decrement in ordered:
            updated = Product.objects.filter(
                id=decrement.product_id, stock_quantity__gte=decrement.amount
            ).update(
                stock_quantity=F("stock_quantity") - decrement.amount,
                updated_at=now,
            )
            if updated != 1:
                # Only reachable on backends without row locks (SQLite).
                current = Product.objects.filter(id=decrement.product_id).first()
                raise InsufficientStock(
                    requested[decrement.product_id],
                    decrement.amount,
                    current.stock_quantity if current else 0,
                )
            logger.info(
                "product.stock_reserved",
                product_id=decrement.product_id,
                quantity=decrement.amount,
                remaining=locked[decrement.product_id].stock_quantity - decrement.amount,
            )

    @transaction.atomic
    def release(self, decrements: Sequence[StockDecrementDTO]) -> None:
        ordered, requested, skipped = _canonical_decrements(decrements)
        locked = self._lock_rows(ordered)

        now = timezone.now()
        for decrement in ordered:
            if decrement.product_id not in locked:
                skipped.append(requested[decrement.product_id])
                continue
            Product.objects.filter(id=decrement.product_id).update(
                stock_quantity=F("stock_quantity") + decrement.amount,
                updated_at=now,
            )
            logger.info(
                "product.stock_released",
                product_id=decrement.product_id,
                quantity=decrement.amount,
                restored_stock=locked[decrement.product_id].stock_quantity
                + decrement.amount,
            )
        for product_id in skipped:
            logger.warning("product.release_skipped_missing", product_id=product_id)

    def _lock_rows(self, ordered: Sequence[StockDecrementDTO]) -> Dict[str, Product]:
        """Lock the product rows touched by ``ordered``, in primary-key order."""
        ids = [d.product_id for d in ordered]
        if not ids:
            return {}
        try:
            rows = list(
                Product.objects.select_for_update().filter(id__in=ids).order_by("id")
            )
        except OperationalError as exc:
            logger.warning("product.lock_failed", product_ids=ids, error=str(exc))
            raise ReservationConflict(ids[0], reason=str(exc)) from exc
        return {str(row.id): row for row in rows}
