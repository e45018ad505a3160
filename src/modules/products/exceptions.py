"""Product domain exceptions.

Raised by the Service Layer and the ledger when business rules are
violated.  The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Any

from shared.domain.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)


class ProductNotFound(NotFoundError):
    """The requested product does not exist or has been soft-deleted."""

    def __init__(self, product_id: Any, message: str | None = None) -> None:
        self.product_id = product_id
        super().__init__(message or f"Product {product_id} not found.")


class InvalidProduct(ValidationError):
    """Product attributes or a stock adjustment amount are malformed."""


class InsufficientStock(InsufficientStockError):
    """Not enough stock left to satisfy a decrement.

    Carries the offending product and the quantity that was still
    available when the decrement was attempted.
    """

    def __init__(
        self,
        product_id: Any,
        requested: int,
        available: int,
        title: str | None = None,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.title = title
        label = f"'{title}' ({product_id})" if title else str(product_id)
        super().__init__(
            f"Product {label}: requested {requested}, available {available}."
        )
