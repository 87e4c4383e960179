"""Helpers shared by every stock reservation adapter."""

from __future__ import annotations

from typing import Dict, Iterable, List

from modules.products.dtos import StockDecrementDTO


def aggregate_decrements(decrements: Iterable[StockDecrementDTO]) -> List[StockDecrementDTO]:
    """Collapse decrements per product and sort them by product id.

    The sorted order is the global lock-acquisition order: two
    reservations touching the same products always lock them in the same
    sequence, so they can never wait on each other in a cycle.
    """
    totals: Dict[str, int] = {}
    for decrement in decrements:
        totals[decrement.product_id] = totals.get(decrement.product_id, 0) + decrement.amount
    return [
        StockDecrementDTO(product_id=product_id, amount=totals[product_id])
        for product_id in sorted(totals)
    ]
