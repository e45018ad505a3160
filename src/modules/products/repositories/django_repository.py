"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Look-ups follow the Null Object pattern: they return ``None``/``False``
instead of raising, and the service layer or the ledger decides which
domain error to raise.

Stock adjustments are single ``UPDATE`` statements built from ``F()``
expressions, so the database (not a Python lock) serializes concurrent
writers on the same row.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent, soft-deleted, or invalid IDs.
        """
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List live products, newest first.

        Supported filter keys::

            {"title": "tv"}            # case-insensitive contains
            {"min_price": Decimal(50)}  # price >= 50
            {"max_price": Decimal(90)}  # price <= 90
            {"published": True}
            {"seller_id": 3}
        """
        queryset = Product.objects.alive()
        filters = filters or {}

        if filters.get("title"):
            queryset = queryset.filter(title__icontains=filters["title"])
        if filters.get("min_price") is not None:
            queryset = queryset.filter(price__gte=filters["min_price"])
        if filters.get("max_price") is not None:
            queryset = queryset.filter(price__lte=filters["max_price"])
        if filters.get("published") is not None:
            queryset = queryset.filter(published=filters["published"])
        if filters.get("seller_id") is not None:
            queryset = queryset.filter(seller_id=filters["seller_id"])
        return list(queryset.order_by("-created_at", "-id"))

    def get_for_update(self, id: Any) -> Optional[Product]:
        """Retrieve a live product holding a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.
        """
        try:
            return Product.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @transaction.atomic
    def save(
        self, entity: Product, update_fields: Optional[List[str]] = None
    ) -> Product:
        """Persist a product.

        With *update_fields* only those columns are written, so an edit
        never overwrites a quantity the ledger changed after the read.
        """
        entity.save(update_fields=update_fields)
        logger.info("product.saved", product_id=str(entity.id), title=entity.title)
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Soft-delete a product by ID.

        Returns ``False`` if no live product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Stock primitives
    # ------------------------------------------------------------------

    def decrement_if_available(self, id: Any, amount: int) -> bool:
        try:
            updated = (
                Product.objects.alive()
                .filter(Q(id=id) & Q(quantity__gte=amount))
                .update(quantity=F("quantity") - amount, updated_at=timezone.now())
            )
        except (ValueError, ValidationError):
            return False
        return updated == 1

    def increment(self, id: Any, amount: int) -> bool:
        # Soft-deleted products still take stock back on cancellation.
        try:
            updated = Product.objects.filter(id=id).update(
                quantity=F("quantity") + amount, updated_at=timezone.now()
            )
        except (ValueError, ValidationError):
            return False
        return updated == 1

    def get_quantity(self, id: Any) -> Optional[int]:
        try:
            return (
                Product.objects.filter(id=id)
                .values_list("quantity", flat=True)
                .first()
            )
        except (ValueError, ValidationError):
            return None
