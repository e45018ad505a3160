"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.

Stock failures surface as ``modules.products.exceptions.InsufficientStock``
and missing products as ``ProductNotFound``; both are re-exported here so
order callers need a single import.
"""

from __future__ import annotations

from typing import Any

from modules.products.exceptions import InsufficientStock, ProductNotFound
from shared.domain.exceptions import NotFoundError, ValidationError

__all__ = [
    "InsufficientStock",
    "InvalidOrder",
    "InvalidOrderStatus",
    "OrderNotFound",
    "ProductNotFound",
    "UserNotFound",
]


class OrderNotFound(NotFoundError):
    """The order does not exist, was cancelled, or belongs to another user."""

    def __init__(self, order_id: Any) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found.")


class InvalidOrder(ValidationError):
    """The line items of an order request are malformed."""


class InvalidOrderStatus(ValidationError):
    """A transition not allowed by the order state machine was attempted."""


class UserNotFound(NotFoundError):
    """The user placing the order does not exist."""

    def __init__(self, user_id: Any) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found.")
