"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Methods do
not open their own transactions: ``OrderService`` defines the unit of
work, so a failure anywhere in a placement rolls back every row written
by the attempt.

Domain events collected on the aggregate are written to the
transactional outbox by ``save``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import DecimalField, ExpressionWrapper, F, Sum

from modules.core.models import OutboxEvent
from modules.orders.constants import OUTBOX_TOPIC, OrderStatus
from modules.orders.models import Order, Placement
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

CENTS = Decimal("0.01")

_LINE_AMOUNT = ExpressionWrapper(
    F("quantity") * F("product__price"),
    output_field=DecimalField(max_digits=12, decimal_places=2),
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, user_id: int) -> Order:
        order = Order(user_id=user_id, status=OrderStatus.PENDING, total=Decimal("0.00"))
        order.save()
        logger.info("order.row_created", order_id=str(order.id), user_id=user_id)
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any, user_id: Optional[int] = None) -> Optional[Order]:
        """Retrieve a live order with placements and products prefetched.

        Returns ``None`` for missing, cancelled, foreign, or invalid IDs.
        """
        queryset = Order.objects.alive().prefetch_related("placements__product")
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)
        try:
            return queryset.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any, user_id: Optional[int] = None) -> Optional[Order]:
        """Retrieve a live order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Concurrent cancellations of
        the same order queue on this lock, and the loser finds the row
        already soft-deleted.
        """
        queryset = Order.objects.alive().select_for_update()
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)
        try:
            return queryset.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List live orders, newest first.

        Supported filter keys: ``user_id``, ``status``.
        """
        queryset = Order.objects.alive().prefetch_related("placements__product")
        filters = filters or {}
        if filters.get("user_id") is not None:
            queryset = queryset.filter(user_id=filters["user_id"])
        if filters.get("status"):
            queryset = queryset.filter(status=filters["status"])
        return list(queryset.order_by("-created_at", "-id"))

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist the order and flush its domain events to the outbox."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.record(event, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()

        logger.info(
            "order.saved",
            order_id=str(entity.id),
            status=entity.status,
            event_count=len(events),
        )
        return entity

    def delete(self, id: Any) -> bool:
        """Soft-delete an order by ID."""
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.soft_deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Placements
    # ------------------------------------------------------------------

    def add_placement(self, order: Order, product_id: Any, quantity: int) -> Placement:
        placement = Placement(order=order, product_id=product_id, quantity=quantity)
        placement.save()
        return placement

    def remove_placement(self, placement: Placement) -> None:
        placement.delete()

    def list_placements(self, order: Order) -> List[Placement]:
        placements = list(
            Placement.objects.filter(order_id=order.id)
            .select_related("product")
            .order_by("created_at", "id")
        )
        # Share the caller's instance so total updates land on it.
        for placement in placements:
            placement.order = order
        return placements

    def sum_placements(self, order: Order) -> Decimal:
        total = Placement.objects.filter(order_id=order.id).aggregate(
            total=Sum(_LINE_AMOUNT)
        )["total"]
        if total is None:
            return Decimal("0.00")
        return Decimal(total).quantize(CENTS)

    def update_total(self, order: Order, total: Decimal) -> Order:
        order.total = total
        order.save(update_fields=["total"])
        return order
