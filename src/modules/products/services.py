"""Product service layer (Use Cases).

Seller-facing catalog management, delegating persistence to the injected
``IProductRepository``.  Stock consumed by orders never flows through
here: order placement uses ``ProductLedger``.

Rules enforced here:
- Price must be greater than zero and quantity non-negative (DTO).
- Only the seller who listed a product may change or delete it.
- Deletion is a soft delete.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.products.exceptions import ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, seller_id: Optional[int], dto: CreateProductDTO) -> Product:
        """List a new product on behalf of *seller_id*."""
        product = Product(
            title=dto.title,
            price=dto.price,
            quantity=dto.quantity,
            published=dto.published,
            seller_id=seller_id,
        )
        product = self._repo.save(product)
        logger.info(
            "product.created",
            product_id=str(product.id),
            seller_id=seller_id,
        )
        return product

    @transaction.atomic
    def update_product(
        self,
        id: Any,
        dto: UpdateProductDTO,
        seller_id: Optional[int] = None,
    ) -> Product:
        """Update an existing product with the supplied fields.

        Only supplied columns are written.  A restock (``quantity``) locks
        the row first so it replaces the quantity current at write time.

        Raises:
            ProductNotFound: the product does not exist, or *seller_id*
                is given and does not own it.
        """
        changes = {
            field: getattr(dto, field)
            for field in ("title", "price", "quantity", "published")
            if getattr(dto, field) is not None
        }
        product = self._get_owned(id, seller_id, lock="quantity" in changes)
        log = logger.bind(product_id=str(id))
        if not changes:
            return product

        for field, value in changes.items():
            setattr(product, field, value)

        product = self._repo.save(product, update_fields=list(changes))
        log.info("product.updated", fields=sorted(changes))
        return product

    @transaction.atomic
    def delete_product(self, id: Any, seller_id: Optional[int] = None) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: the product does not exist or is not owned
                by *seller_id*.
        """
        self._get_owned(id, seller_id)
        self._repo.delete(id)
        logger.info("product.soft_deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """Return live products, optionally filtered (see repository)."""
        return self._repo.list(filters)

    def get_product(self, id: Any) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(id)
        return product

    def _get_owned(
        self, id: Any, seller_id: Optional[int], lock: bool = False
    ) -> Product:
        product = self._repo.get_for_update(id) if lock else self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(id)
        if seller_id is not None and product.seller_id != seller_id:
            logger.warning(
                "product.not_owned",
                product_id=str(id),
                seller_id=seller_id,
            )
            raise ProductNotFound(id)
        return product
