"""Request validation and pricing.

Turns the requested lines of an admission into priced lines, or fails
fast.  Read-only: the catalog is only queried, never written.

Duplicate product ids are merged into one line whose quantity is the
sum of the duplicates, kept at the position of the first occurrence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Sequence

import structlog

from modules.orders.dtos import CreateOrderItemDTO, PricedOrderLineDTO
from modules.products.exceptions import InsufficientStock, ProductNotFound

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO
    from modules.products.dtos import ProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def merge_duplicate_lines(items: Sequence[CreateOrderItemDTO]) -> List[CreateOrderItemDTO]:
    """Sum the quantities of lines naming the same product."""
    merged: Dict[str, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    if len(merged) != len(items):
        logger.info(
            "order.duplicate_lines_merged",
            requested_lines=len(items),
            merged_lines=len(merged),
        )
    return [
        CreateOrderItemDTO(product_id=product_id, quantity=quantity)
        for product_id, quantity in merged.items()
    ]


def resolve_products(
    product_repository: IProductRepository, product_ids: Sequence[str]
) -> Dict[str, ProductDTO]:
    """Fetch every requested product in one batched call.

    Raises:
        ProductNotFound: at least one id is unknown to the catalog.
    """
    requested = list(dict.fromkeys(product_ids))
    wanted = set(requested)
    products = {
        product.id: product
        for product in product_repository.find_all_by_id(requested)
        if product.id in wanted
    }
    missing = [product_id for product_id in requested if product_id not in products]
    if missing:
        raise ProductNotFound(missing)
    return products


def check_sufficiency(
    lines: Sequence[CreateOrderItemDTO], products: Dict[str, ProductDTO]
) -> None:
    """Compare each line with observed stock, in request order.

    Raises:
        InsufficientStock: for the first line asking for more than is available.
    """
    for line in lines:
        available = products[line.product_id].quantity
        if line.quantity > available:
            raise InsufficientStock(line.product_id, line.quantity, available)


def snapshot_prices(
    lines: Sequence[CreateOrderItemDTO], products: Dict[str, ProductDTO]
) -> List[PricedOrderLineDTO]:
    return [
        PricedOrderLineDTO(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=products[line.product_id].price,
        )
        for line in lines
    ]


def price_order(
    dto: CreateOrderDTO, product_repository: IProductRepository
) -> List[PricedOrderLineDTO]:
    """Validate the lines of ``dto`` against the catalog and price them.

    Raises:
        ProductNotFound: a requested product does not exist.
        InsufficientStock: a line asks for more than the observed stock.
    """
    lines = merge_duplicate_lines(dto.items)
    products = resolve_products(product_repository, [line.product_id for line in lines])
    check_sufficiency(lines, products)
    return snapshot_prices(lines, products)
