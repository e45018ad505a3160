"""Order service layer (Use Cases).

The only entry point external callers (HTTP views, tasks, shell) use to
place, inspect, or cancel orders.  It orchestrates ``ProductLedger``,
``PlacementRecorder`` and ``OrderAggregate`` explicitly, inside one
transaction per use case, instead of relying on model signals.

Guarantees:
- ``place_order`` is all-or-nothing: order row, placements, stock
  decrements, total and outbox event commit together or not at all.
- Line items are validated before any write and processed in input
  order; stock is checked per placement, at decrement time.
- Lock/serialization conflicts replay the whole unit of work a bounded
  number of times, then surface as ``TransactionConflictError``.
- ``OrderPlaced`` / ``OrderCancelled`` reach the in-process event bus only
  after commit, and a failing subscriber never fails the use case.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional, Union

import structlog
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from modules.core.transactions import atomic_with_retry
from modules.orders.aggregate import OrderAggregate
from modules.orders.constants import OrderStatus
from modules.orders.dtos import LineItemDTO, PlaceOrderDTO
from modules.orders.events import OrderCancelled, OrderPlaced
from modules.orders.exceptions import InvalidOrder, OrderNotFound, UserNotFound
from modules.orders.placements import PlacementRecorder
from modules.products.ledger import ProductLedger
from shared.domain.exceptions import DomainError
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

LineItem = Union[LineItemDTO, Mapping[str, Any]]


class OrderService:
    """Application service for Order use-cases.

    Receives repositories (and optionally an event bus) via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = ProductLedger(product_repository)
        self._aggregate = OrderAggregate(order_repository)
        self._recorder = PlacementRecorder(order_repository, self._ledger, self._aggregate)
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def place_order(self, user_id: int, line_items: Iterable[LineItem]) -> Order:
        """Create an order for *user_id* with one placement per line item.

        Raises:
            InvalidOrder: no line items, a non-positive quantity, or a
                missing product reference.
            UserNotFound: *user_id* does not exist.
            ProductNotFound: a line item references an unknown product.
            InsufficientStock: a line item asks for more than is left.
            TransactionConflictError: conflicts persisted across retries.
        """
        dto = self._validate(user_id, line_items)
        log = logger.bind(user_id=dto.user_id, line_item_count=len(dto.line_items))
        log.info("order.placement_started")

        if not get_user_model().objects.filter(pk=dto.user_id).exists():
            log.warning("order.user_not_found")
            raise UserNotFound(dto.user_id)

        try:
            order = self._place(dto)
        except DomainError as exc:
            log.warning(
                "order.placement_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        log.info("order.placed", order_id=str(order.id), total=str(order.total))
        return self._order_repo.get_by_id(order.id) or order

    def cancel_order(self, order_id: Any, user_id: Optional[int] = None) -> Order:
        """Cancel an order, giving every placement's stock back.

        When *user_id* is given, only that user's orders can be cancelled.

        Raises:
            OrderNotFound: the order does not exist, was already cancelled,
                or belongs to another user.
            TransactionConflictError: conflicts persisted across retries.
        """
        log = logger.bind(order_id=str(order_id), user_id=user_id)
        log.info("order.cancellation_started")
        try:
            order = self._cancel(order_id, user_id)
        except DomainError as exc:
            log.warning(
                "order.cancellation_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise
        log.info("order.cancelled")
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any, user_id: Optional[int] = None) -> Order:
        """Retrieve a live order, optionally scoped to its owner.

        Raises:
            OrderNotFound: if the order does not exist or is not visible.
        """
        order = self._order_repo.get_by_id(order_id, user_id=user_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def list_orders(
        self, user_id: Optional[int] = None, status: Optional[str] = None
    ) -> List[Order]:
        """Return live orders, newest first."""
        return self._order_repo.list({"user_id": user_id, "status": status})

    # ------------------------------------------------------------------
    # Units of work
    # ------------------------------------------------------------------

    @atomic_with_retry
    def _place(self, dto: PlaceOrderDTO) -> Order:
        order = self._order_repo.create(dto.user_id)
        log = logger.bind(order_id=str(order.id))

        for position, item in enumerate(dto.line_items):
            log.debug(
                "order.line_item",
                position=position,
                product_id=str(item.product_id),
                quantity=item.quantity,
            )
            self._recorder.create(order, item.product_id, item.quantity)

        order.transition_to(OrderStatus.PLACED)
        lines = tuple(
            {
                "product_id": placement.product_id,
                "title": placement.product.title,
                "quantity": placement.quantity,
                "price": placement.product.price,
            }
            for placement in self._order_repo.list_placements(order)
        )
        event = OrderPlaced(
            aggregate_id=order.id,
            user_id=order.user_id,
            total=order.total,
            lines=lines,
        )
        order.add_domain_event(event)
        self._order_repo.save(order)

        transaction.on_commit(lambda: self._publish(event))
        return order

    @atomic_with_retry
    def _cancel(self, order_id: Any, user_id: Optional[int]) -> Order:
        order = self._order_repo.get_for_update(order_id, user_id=user_id)
        if not order:
            raise OrderNotFound(order_id)

        old_status = order.transition_to(OrderStatus.CANCELLED)
        for placement in self._order_repo.list_placements(order):
            self._recorder.remove(placement)

        event = OrderCancelled(aggregate_id=order.id, user_id=order.user_id)
        order.add_domain_event(event)
        order.deleted_at = timezone.now()
        self._order_repo.save(order)

        logger.info(
            "order.status_changed",
            order_id=str(order.id),
            old_status=old_status,
            new_status=order.status,
        )
        transaction.on_commit(lambda: self._publish(event))
        return order

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(user_id: Any, line_items: Optional[Iterable[LineItem]]) -> PlaceOrderDTO:
        try:
            return PlaceOrderDTO(
                user_id=user_id,
                line_items=list(line_items) if line_items is not None else [],
            )
        except (PydanticValidationError, TypeError) as exc:
            logger.warning("order.invalid_request", user_id=user_id, error=str(exc))
            raise InvalidOrder(str(exc)) from exc

    def _publish(self, event: DomainEvent) -> None:
        # Runs after commit: the order exists whatever a subscriber does.
        try:
            self._event_bus.publish(event)
        except Exception:
            logger.exception(
                "order.event_publish_failed",
                event_name=event.event_name,
                order_id=str(event.aggregate_id),
            )
