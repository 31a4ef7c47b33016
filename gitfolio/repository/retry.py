"""Retry mechanisms for emulation store and repository read operations."""

import asyncio
import functools
import sqlite3
import time
from collections.abc import Awaitable
from typing import Any, Callable, TypeVar

from gitfolio.core.logging import get_module_logger
from gitfolio.repository.exceptions import TransportError

logger = get_module_logger("retry")

T = TypeVar("T")


def _delay_for(
    attempt: int, base_delay: float, max_delay: float, backoff_factor: float
) -> float:
    return min(base_delay * (backoff_factor**attempt), max_delay)


def with_db_retry(
    max_retries: int = 5,
    base_delay: float = 0.1,
    max_delay: float = 2.0,
    backoff_factor: float = 2.0,
    retry_on: tuple[type[Exception], ...] = (sqlite3.OperationalError,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator that adds retry logic with exponential backoff for database operations.

    The wrapped call sleeps between attempts, so async callers run it in an
    executor rather than on the event loop.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        retry_on: Tuple of exception types to retry on

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    should_retry = isinstance(e, retry_on)

                    # Only lock contention is worth waiting for
                    if isinstance(e, sqlite3.OperationalError):
                        error_msg = str(e).lower()
                        if (
                            "no such table" in error_msg
                            or "no such column" in error_msg
                            or "syntax error" in error_msg
                        ):
                            should_retry = False

                    if not should_retry or attempt == max_retries:
                        raise

                    delay = _delay_for(attempt, base_delay, max_delay, backoff_factor)
                    logger.debug(
                        "db_operation_retry",
                        operation=func.__name__,
                        attempt=attempt + 1,
                        max_attempts=max_retries + 1,
                        delay=round(delay, 2),
                        error=str(e),
                    )
                    time.sleep(delay)

            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator


def with_connection_retry(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator for SQLite connection operations.

    Uses moderate retry settings for connection-level operations.
    """
    return with_db_retry(
        max_retries=5,
        base_delay=0.1,
        max_delay=2.0,
        backoff_factor=2.0,
        retry_on=(sqlite3.OperationalError,),
    )(func)


async def retry_read(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    base_delay: float,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
    description: str = "read",
) -> T:
    """Run an idempotent repository read, retrying transport failures.

    Only ``TransportError`` is retried. Writes must never go through here:
    a retried write could overwrite a concurrent edit.

    Args:
        operation: Zero-argument coroutine factory
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        description: Operation name for log entries

    Returns:
        Result of the operation
    """
    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except TransportError as e:
            if attempt == max_retries:
                raise
            delay = _delay_for(attempt, base_delay, max_delay, backoff_factor)
            logger.warning(
                "repository_read_retry",
                operation=description,
                attempt=attempt + 1,
                max_attempts=max_retries + 1,
                delay=round(delay, 2),
                error=e.message,
            )
            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
