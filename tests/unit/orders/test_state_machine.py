"""Unit tests for the Order status state machine.

Covers:
- Model-level FSM helpers (can_transition_to, is_terminal).
- Every valid transition succeeds and returns the previous status.
- Every invalid transition raises InvalidOrderStatus and leaves the
  status untouched.
- Lifecycle driven by OrderService (PENDING -> PLACED -> CANCELLED).
"""

from __future__ import annotations

import pytest

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import InvalidOrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.unit

ALL_STATUSES = [OrderStatus.PENDING, OrderStatus.PLACED, OrderStatus.CANCELLED]

VALID_PAIRS = [
    (source, target)
    for source, targets in VALID_TRANSITIONS.items()
    for target in sorted(targets)
]
INVALID_PAIRS = [
    (source, target)
    for source in ALL_STATUSES
    for target in ALL_STATUSES
    if target not in VALID_TRANSITIONS[source]
]


@pytest.fixture()
def order(user):
    return Order.objects.create(user=user)


# ===========================================================================
# Model-level FSM helpers
# ===========================================================================


class TestHelpers:
    def test_new_order_is_pending(self, order):
        assert order.status == OrderStatus.PENDING
        assert order.is_terminal is False

    def test_cancelled_is_terminal(self, order):
        order.status = OrderStatus.CANCELLED
        assert order.is_terminal is True

    def test_terminal_states_constant(self):
        assert TERMINAL_STATES == {OrderStatus.CANCELLED}
        assert VALID_TRANSITIONS[OrderStatus.CANCELLED] == set()

    @pytest.mark.parametrize("source,target", VALID_PAIRS)
    def test_can_transition_to_valid(self, order, source, target):
        order.status = source
        assert order.can_transition_to(target) is True

    @pytest.mark.parametrize("source,target", INVALID_PAIRS)
    def test_can_transition_to_invalid(self, order, source, target):
        order.status = source
        assert order.can_transition_to(target) is False


# ===========================================================================
# transition_to
# ===========================================================================


class TestTransitionTo:
    @pytest.mark.parametrize("source,target", VALID_PAIRS)
    def test_valid_transition(self, order, source, target):
        order.status = source

        previous = order.transition_to(target)

        assert previous == source
        assert order.status == target

    @pytest.mark.parametrize("source,target", INVALID_PAIRS)
    def test_invalid_transition(self, order, source, target):
        order.status = source

        with pytest.raises(InvalidOrderStatus, match="Cannot transition"):
            order.transition_to(target)

        assert order.status == source

    def test_transition_is_not_persisted(self, order):
        order.transition_to(OrderStatus.PLACED)

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING


# ===========================================================================
# Lifecycle through the service
# ===========================================================================


class TestLifecycle:
    def test_placed_then_cancelled(self, order_service, user, make_product):
        product = make_product(quantity=3)

        order = order_service.place_order(
            user.pk, [{"product_id": product.id, "quantity": 1}]
        )
        assert order.status == OrderStatus.PLACED

        cancelled = order_service.cancel_order(order.id)
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.is_terminal is True
