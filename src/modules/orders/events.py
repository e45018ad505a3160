"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when an order has all of its placements and a final total.

    ``lines`` holds one ``{"product_id", "title", "quantity", "price"}``
    mapping per placement so that consumers (the confirmation mailer, the
    outbox relay) do not need to query the catalog again.
    """

    user_id: Optional[int] = None
    total: Decimal = Decimal("0.00")
    lines: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock given back."""

    user_id: Optional[int] = None
