"""Asynchronous order tasks (Celery)."""

from __future__ import annotations

from typing import Optional

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderOutputDTO
from modules.orders.models import Order

logger = structlog.get_logger(__name__)

CONFIRMATION_SUBJECT = "Order Confirmation"


def render_confirmation(order: OrderOutputDTO) -> str:
    """Plain-text confirmation body listing every placement of *order*."""
    lines = [f"Thanks for your order {order.id}.", "", "Products:"]
    for placement in order.placements:
        lines.append(
            f"  - {placement.product_title} x{placement.quantity} "
            f"(${placement.unit_price} each)"
        )
    lines.extend(["", f"Total: ${order.total}"])
    return "\n".join(lines)


@shared_task(
    name="orders.send_order_confirmation",
    autoretry_for=(OSError,),
    retry_backoff=True,
    max_retries=3,
)
def send_order_confirmation(order_id: str) -> Optional[dict]:
    """Email the owner of a live, placed order its confirmation.

    Orders cancelled before the worker picks the task up are skipped.
    """
    log = logger.bind(order_id=order_id)
    order = (
        Order.objects.alive()
        .select_related("user")
        .prefetch_related("placements__product")
        .filter(id=order_id, status=OrderStatus.PLACED)
        .first()
    )
    if order is None:
        reason = (
            "order_cancelled"
            if Order.objects.filter(id=order_id).exists()
            else "order_missing"
        )
        log.warning("order.confirmation_skipped", reason=reason)
        return None

    recipient = getattr(order.user, "email", "")
    if not recipient:
        log.warning("order.confirmation_skipped", reason="no_email")
        return None

    snapshot = OrderOutputDTO.from_entity(order)
    send_mail(
        subject=CONFIRMATION_SUBJECT,
        message=render_confirmation(snapshot),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient],
    )
    log.info("order.confirmation_sent", placement_count=len(snapshot.placements))
    return {"order_id": order_id, "recipient": recipient}
