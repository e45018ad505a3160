"""Placement recorder: one order line item and its stock side effects.

Creating a placement takes stock from the ledger *before* the row is
inserted; removing one gives back exactly the recorded quantity.  Both
paths finish by recomputing the order total.  The recorder never opens a
transaction, so a ledger failure inside ``OrderService.place_order``
rolls back the placements recorded before it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from modules.orders.exceptions import InvalidOrder

if TYPE_CHECKING:
    from modules.orders.aggregate import OrderAggregate
    from modules.orders.models import Order, Placement
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.ledger import ProductLedger

logger = structlog.get_logger(__name__)


class PlacementRecorder:
    def __init__(
        self,
        order_repository: IOrderRepository,
        ledger: ProductLedger,
        aggregate: OrderAggregate,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = ledger
        self._aggregate = aggregate

    def create(self, order: Order, product_id: Any, quantity: int) -> Placement:
        """Attach *quantity* units of *product_id* to *order*.

        Raises:
            InvalidOrder: *quantity* is not a positive integer.
            ProductNotFound: the product does not exist.
            InsufficientStock: the product has fewer than *quantity* units.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidOrder(
                f"Quantity for product {product_id} must be a positive integer, "
                f"got {quantity!r}."
            )

        remaining = self._ledger.decrement(product_id, quantity)
        placement = self._order_repo.add_placement(order, product_id, quantity)
        self._aggregate.recompute_total(order)

        logger.info(
            "placement.created",
            order_id=str(order.id),
            placement_id=str(placement.id),
            product_id=str(product_id),
            quantity=quantity,
            remaining=remaining,
        )
        return placement

    def remove(self, placement: Placement) -> None:
        """Delete *placement* and restore its stock."""
        order = placement.order
        restored = self._ledger.increment(placement.product_id, placement.quantity)
        placement_id = placement.id
        self._order_repo.remove_placement(placement)
        self._aggregate.recompute_total(order)

        logger.info(
            "placement.removed",
            order_id=str(order.id),
            placement_id=str(placement_id),
            product_id=str(placement.product_id),
            quantity=placement.quantity,
            restored_stock=restored,
        )
