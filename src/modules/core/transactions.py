"""Unit-of-work helpers.

``atomic_with_retry`` runs a callable inside ``transaction.atomic()`` and
replays the *whole* unit of work when the database reports a lock or
serialization conflict.  Every other error propagates on the first attempt.
"""

from __future__ import annotations

import functools
import time
from typing import Callable, Optional, TypeVar

import structlog
from django.conf import settings
from django.db import OperationalError, transaction

from shared.domain.exceptions import TransactionConflictError

logger = structlog.get_logger(__name__)

R = TypeVar("R")

# Lower-cased fragments of driver messages for retryable conflicts
# (MySQL deadlock / lock wait, PostgreSQL serialization failure and
# deadlock, SQLite busy database).
CONFLICT_MARKERS = (
    "deadlock",
    "lock wait timeout",
    "could not serialize",
    "database is locked",
    "database table is locked",
)


def is_conflict(exc: BaseException) -> bool:
    """Return ``True`` if *exc* is a retryable concurrent-update conflict."""
    if isinstance(exc, TransactionConflictError):
        return True
    if not isinstance(exc, OperationalError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in CONFLICT_MARKERS)


def atomic_with_retry(
    func: Optional[Callable[..., R]] = None,
    *,
    max_retries: Optional[int] = None,
    backoff: Optional[float] = None,
):
    """Decorator: run *func* atomically, retrying on conflicts.

    *func* runs once, plus up to ``max_retries`` replays after a conflict
    (``0`` disables replays).  ``max_retries`` and ``backoff`` default to
    the ``ORDER_PLACEMENT_MAX_RETRIES`` / ``ORDER_PLACEMENT_RETRY_BACKOFF``
    settings, read at call time so tests can override them.

    Raises:
        TransactionConflictError: every attempt hit a conflict.
    """

    def decorator(fn: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> R:
            retries = (
                max_retries
                if max_retries is not None
                else getattr(settings, "ORDER_PLACEMENT_MAX_RETRIES", 3)
            )
            attempts = 1 + max(0, retries)
            delay = (
                backoff
                if backoff is not None
                else getattr(settings, "ORDER_PLACEMENT_RETRY_BACKOFF", 0.05)
            )
            last_error: Optional[BaseException] = None

            for attempt in range(1, attempts + 1):
                try:
                    with transaction.atomic():
                        return fn(*args, **kwargs)
                except (OperationalError, TransactionConflictError) as exc:
                    if not is_conflict(exc):
                        raise
                    last_error = exc
                    logger.warning(
                        "transaction.conflict",
                        operation=fn.__qualname__,
                        attempt=attempt,
                        max_attempts=attempts,
                        error=str(exc),
                    )
                    if attempt < attempts and delay:
                        time.sleep(delay * attempt)

            logger.error(
                "transaction.conflict_exhausted",
                operation=fn.__qualname__,
                attempts=attempts,
            )
            raise TransactionConflictError(
                f"{fn.__qualname__} gave up after {attempts} conflicting attempts."
            ) from last_error

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
