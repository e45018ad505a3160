"""Product repository interface.

Extends ``IRepository[Product]`` with the atomic stock primitives used by
``ProductLedger``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List live products with optional filters."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Product]:
        """Retrieve a live product holding a row-level lock."""

    @abstractmethod
    def save(
        self, entity: Product, update_fields: Optional[List[str]] = None
    ) -> Product:
        """Persist a product, optionally writing only *update_fields*."""

    @abstractmethod
    def decrement_if_available(self, id: Any, amount: int) -> bool:
        """Subtract *amount* in one conditional update.

        Returns ``False`` (and changes nothing) when the product is missing
        or holds fewer than *amount* units.
        """

    @abstractmethod
    def increment(self, id: Any, amount: int) -> bool:
        """Add *amount* back to the stock.  ``False`` if the product is missing."""

    @abstractmethod
    def get_quantity(self, id: Any) -> Optional[int]:
        """Read the current quantity straight from the database."""
