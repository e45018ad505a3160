"""Product stock ledger.

The ledger is the only path through which order placement touches
``Product.quantity``.  Each adjustment is one conditional ``UPDATE``
(see ``ProductDjangoRepository.decrement_if_available``), so two
concurrent requests can never both consume the last unit and drive the
quantity negative, even across service instances.

The ledger does not open transactions: callers own the unit of work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from modules.products.exceptions import InsufficientStock, InvalidProduct, ProductNotFound

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductLedger:
    """Atomic increment/decrement of a product's available quantity."""

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    def decrement(self, product_id: Any, amount: int) -> int:
        """Remove *amount* units and return the remaining quantity.

        Raises:
            InvalidProduct: *amount* is not a positive integer.
            ProductNotFound: the product does not exist or was deleted.
            InsufficientStock: fewer than *amount* units are available.
        """
        _check_amount(amount)
        log = logger.bind(product_id=str(product_id), amount=amount)

        if self._repo.decrement_if_available(product_id, amount):
            remaining = self._quantity_or_raise(product_id)
            log.info("ledger.decremented", remaining=remaining)
            return remaining

        product = self._repo.get_by_id(product_id)
        if product is None:
            log.warning("ledger.product_not_found")
            raise ProductNotFound(product_id)

        log.warning("ledger.insufficient_stock", available=product.quantity)
        raise InsufficientStock(
            product_id=product.id,
            requested=amount,
            available=product.quantity,
            title=product.title,
        )

    def increment(self, product_id: Any, amount: int) -> int:
        """Give *amount* units back and return the new quantity.

        Raises:
            InvalidProduct: *amount* is not a positive integer.
            ProductNotFound: the product row does not exist.
        """
        _check_amount(amount)
        if not self._repo.increment(product_id, amount):
            raise ProductNotFound(product_id)
        quantity = self._quantity_or_raise(product_id)
        logger.info(
            "ledger.incremented",
            product_id=str(product_id),
            amount=amount,
            quantity=quantity,
        )
        return quantity

    def get_quantity(self, product_id: Any) -> int:
        """Return the current quantity.

        Raises:
            ProductNotFound: the product row does not exist.
        """
        return self._quantity_or_raise(product_id)

    def _quantity_or_raise(self, product_id: Any) -> int:
        quantity = self._repo.get_quantity(product_id)
        if quantity is None:
            raise ProductNotFound(product_id)
        return quantity


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvalidProduct(f"Stock adjustment must be a positive integer, got {amount!r}.")
