"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCancelled, OrderPlaced
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedMailerHandler(IEventHandler[OrderPlaced]):
    """Queues the confirmation email for a freshly placed order.

    Fire-and-forget: a broker outage is logged and never reaches the
    caller that placed the order.
    """

    def handle(self, event: OrderPlaced) -> None:
        from modules.orders.tasks import send_order_confirmation

        order_id = str(event.aggregate_id)
        try:
            send_order_confirmation.delay(order_id)
        except Exception:
            logger.exception("order.confirmation_enqueue_failed", order_id=order_id)
            return
        logger.info("order.confirmation_enqueued", order_id=order_id)


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.cancellation_notified",
            order_id=str(event.aggregate_id),
            user_id=event.user_id,
        )


order_placed_mailer_handler = OrderPlacedMailerHandler()
order_cancelled_handler = OrderCancelledHandler()
