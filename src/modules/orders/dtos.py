"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``LineItemDTO``: one ``{product_id, quantity}`` pair of a request.
- ``PlaceOrderDTO``: input for order placement (nested line items).
- ``PlacementOutputDTO``: output for a single placement.
- ``OrderOutputDTO``: output with placements, used by the mailer.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class LineItemDTO(BaseModel):
    """Immutable DTO for a single line item in a placement request.

    Prices are never accepted from the client: the total is derived from
    the catalog when placements are recorded.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement requests.

    Validates:
    - ``line_items`` contains at least one item.
    - Each item references a product and has a positive quantity.

    The same product may appear on several line items; each one becomes
    its own placement.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    line_items: List[LineItemDTO]

    @field_validator("line_items")
    @classmethod
    def line_items_must_not_be_empty(cls, v: List[LineItemDTO]) -> List[LineItemDTO]:
        if not v:
            raise ValueError("Order must have at least one line item.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class PlacementOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    product_title: str
    unit_price: Decimal
    quantity: int


class OrderOutputDTO(BaseModel):
    """Immutable snapshot of an order with its placements."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    user_id: int
    status: str
    total: Decimal
    created_at: datetime
    updated_at: datetime
    placements: List[PlacementOutputDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``placements__product`` is prefetched.
        """
        placements = [
            PlacementOutputDTO(
                id=placement.id,
                product_id=placement.product_id,
                product_title=placement.product.title,
                unit_price=placement.product.price,
                quantity=placement.quantity,
            )
            for placement in order.placements.all()
        ]
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
            placements=placements,
        )
