"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the placement workflow
needs: placement rows, total aggregation, row locking, and ownership
scoped look-ups.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, Placement


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its Placement children.  Callers own the
    transaction: none of these methods commits on its own.
    """

    @abstractmethod
    def create(self, user_id: int) -> Order:
        """Insert an empty ``PENDING`` order with a zero total."""

    @abstractmethod
    def get_by_id(self, id: Any, user_id: Optional[int] = None) -> Optional[Order]:
        """Retrieve a live order with prefetched placements and products."""

    @abstractmethod
    def get_for_update(self, id: Any, user_id: Optional[int] = None) -> Optional[Order]:
        """Retrieve a live order holding a row-level lock."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List live orders with optional filters."""

    @abstractmethod
    def add_placement(self, order: Order, product_id: Any, quantity: int) -> Placement:
        """Insert a placement row for *order*."""

    @abstractmethod
    def remove_placement(self, placement: Placement) -> None:
        """Delete a placement row."""

    @abstractmethod
    def list_placements(self, order: Order) -> List[Placement]:
        """Return the order's current placements, oldest first."""

    @abstractmethod
    def sum_placements(self, order: Order) -> Decimal:
        """Return Σ quantity × current product price over the placements."""

    @abstractmethod
    def update_total(self, order: Order, total: Decimal) -> Order:
        """Persist a new total for *order*."""
