"""
Database retry utilities for handling transient failures.

Retries a unit of work that failed with a deadlock, lock-wait timeout or
serialization failure. Anything else, domain errors included, propagates on
the first attempt.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# MySQL error codes
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"

# PostgreSQL SQLSTATE codes
POSTGRES_DEADLOCK_DETECTED = "40P01"
POSTGRES_SERIALIZATION_FAILURE = "40001"

_RETRYABLE_CODES = (
    MYSQL_DEADLOCK_ERROR,
    MYSQL_LOCK_WAIT_TIMEOUT,
    POSTGRES_DEADLOCK_DETECTED,
    POSTGRES_SERIALIZATION_FAILURE,
)


def is_deadlock_error(error: Exception) -> bool:
    """
    Check if an exception is a deadlock or serialization failure.

    Args:
        error: The exception to check

    Returns:
        True if the error is transient and the unit of work should be retried
    """
    if isinstance(error, (OperationalError, DBAPIError)):
        orig = getattr(error, "orig", None)
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate in (POSTGRES_DEADLOCK_DETECTED, POSTGRES_SERIALIZATION_FAILURE):
            return True
        error_str = str(error)
        return any(code in error_str for code in _RETRYABLE_CODES)
    return False


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Retry a function if it fails due to a database deadlock.

    Uses exponential backoff: base_delay * (2 ** attempt)

    Args:
        func: The async function to execute; it must open its own transaction
        max_attempts: Maximum number of attempts (default: 3)
        base_delay: Base delay in seconds for exponential backoff (default: 0.1)

    Raises:
        The original exception if max attempts exceeded or non-deadlock error
    """
    for attempt in range(max_attempts):
        try:
            return await func()
        except Exception as e:
            if not is_deadlock_error(e):
                raise

            if attempt >= max_attempts - 1:
                logger.error(
                    "Database deadlock persists after max retries",
                    extra={
                        "attempts": max_attempts,
                        "error": str(e),
                    }
                )
                raise

            delay = base_delay * (2 ** attempt)
            logger.warning(
                "Database deadlock detected, retrying",
                extra={
                    "attempt": attempt + 1,
                    "max_attempts": max_attempts,
                    "retry_delay": delay,
                    "error": str(e),
                }
            )
            await asyncio.sleep(delay)

    raise RuntimeError("retry_on_deadlock called with max_attempts < 1")

