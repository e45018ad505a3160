"""Order total derivation."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderAggregate:
    """Keeps ``Order.total`` equal to Σ quantity × price of its placements.

    The sum is taken in the database against the current product prices
    and written back immediately, so readers never see a total that lags
    behind the placements of a committed order.
    """

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    def recompute_total(self, order: Order) -> Decimal:
        total = self._order_repo.sum_placements(order)
        previous = order.total
        self._order_repo.update_total(order, total)
        logger.debug(
            "order.total_recomputed",
            order_id=str(order.id),
            previous_total=str(previous),
            total=str(total),
        )
        return total
