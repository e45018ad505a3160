"""Error taxonomy shared by every bounded context.

Module-level exceptions (``OrderNotFound``, ``InsufficientStock`` ...)
subclass one of these bases so that callers outside a module can react
to the *kind* of failure without importing module internals.
"""

from __future__ import annotations


class DomainError(Exception):
    """Root of all business-rule failures raised by the service layer."""


class ValidationError(DomainError):
    """Malformed input rejected before any side effect took place."""


class NotFoundError(DomainError):
    """A referenced entity does not exist (or is no longer alive)."""


class InsufficientStockError(DomainError):
    """A requested quantity exceeds the stock available at decrement time."""


class TransactionConflictError(DomainError):
    """The database reported a concurrent-update conflict.

    This is the only error that is safe to retry automatically: the whole
    transaction is replayed from scratch.
    """
