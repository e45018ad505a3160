"""Unit tests for order event handlers and their bus wiring."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.orders.events import OrderCancelled, OrderPlaced
from modules.orders.exceptions import InsufficientStock
from modules.orders.handlers import (
    OrderCancelledHandler,
    OrderPlacedMailerHandler,
    order_cancelled_handler,
    order_placed_mailer_handler,
)
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit

DELAY = "modules.orders.tasks.send_order_confirmation.delay"


class TestOrderPlacedMailerHandler:
    def test_enqueues_confirmation(self):
        order_id = uuid4()
        event = OrderPlaced(aggregate_id=order_id, user_id=1, total=Decimal("5.00"))

        with patch(DELAY) as delay:
            OrderPlacedMailerHandler().handle(event)

        delay.assert_called_once_with(str(order_id))

    def test_broker_failure_is_swallowed(self, caplog):
        event = OrderPlaced(aggregate_id=uuid4())

        with patch(DELAY, side_effect=ConnectionError("broker down")):
            OrderPlacedMailerHandler().handle(event)

        assert any(
            "order.confirmation_enqueue_failed" in record.getMessage()
            for record in caplog.records
        )


class TestOrderCancelledHandler:
    def test_logs_cancellation(self, caplog):
        order_id = uuid4()

        OrderCancelledHandler().handle(OrderCancelled(aggregate_id=order_id, user_id=1))

        messages = [record.getMessage() for record in caplog.records]
        assert any(
            "order.cancellation_notified" in message and str(order_id) in message
            for message in messages
        )


class TestSubscriptions:
    def test_handlers_registered_on_app_ready(self):
        assert order_placed_mailer_handler in event_bus._handlers[OrderPlaced]
        assert order_cancelled_handler in event_bus._handlers[OrderCancelled]


class TestPublishedAfterCommit:
    def test_place_order_enqueues_mail_on_commit(
        self, order_service, user, make_product, django_capture_on_commit_callbacks
    ):
        product = make_product(quantity=2)

        with patch(DELAY) as delay:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                order = order_service.place_order(
                    user.pk, [{"product_id": product.id, "quantity": 1}]
                )

        assert len(callbacks) == 1
        delay.assert_called_once_with(str(order.id))

    def test_nothing_published_when_placement_fails(
        self, order_service, user, make_product, django_capture_on_commit_callbacks
    ):
        product = make_product(quantity=0)

        with patch(DELAY) as delay:
            with django_capture_on_commit_callbacks(execute=True) as callbacks:
                with pytest.raises(InsufficientStock):
                    order_service.place_order(
                        user.pk, [{"product_id": product.id, "quantity": 1}]
                    )

        assert callbacks == []
        delay.assert_not_called()

    def test_failing_subscriber_does_not_fail_placement(
        self, order_service, user, make_product, django_capture_on_commit_callbacks
    ):
        product = make_product(quantity=2)

        with patch.object(event_bus, "publish", side_effect=RuntimeError("boom")):
            with django_capture_on_commit_callbacks(execute=True):
                order = order_service.place_order(
                    user.pk, [{"product_id": product.id, "quantity": 1}]
                )

        assert order.status == "PLACED"
        product.refresh_from_db()
        assert product.quantity == 1
