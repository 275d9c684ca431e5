"""Bounded retry for transient storage failures.

Only reads and the single-statement stock primitives are decorated.  Inside
an enclosing ``transaction.atomic`` block the error is re-raised at once:
the transaction is already broken and the caller (e.g. checkout) owns the
decision to retry the whole unit of work.
"""

from __future__ import annotations

import functools
import time
from typing import Callable, Optional, TypeVar

import structlog
from django.conf import settings
from django.db import InterfaceError, OperationalError, transaction

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable)

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


def retry_on_transient_errors(
    attempts: Optional[int] = None, backoff: Optional[float] = None
) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            max_attempts = attempts or settings.STORAGE_RETRY_ATTEMPTS
            delay = settings.STORAGE_RETRY_BACKOFF if backoff is None else backoff
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except TRANSIENT_ERRORS as exc:
                    if transaction.get_connection().in_atomic_block:
                        raise
                    if attempt == max_attempts:
                        logger.error(
                            "storage.retry_exhausted",
                            operation=func.__qualname__,
                            attempts=attempt,
                            error=str(exc),
                        )
                        raise
                    logger.warning(
                        "storage.transient_error",
                        operation=func.__qualname__,
                        attempt=attempt,
                        error=str(exc),
                    )
                    time.sleep(delay * attempt)
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper  # type: ignore[return-value]

    return decorator
