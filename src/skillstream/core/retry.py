"""Retry with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from . import defaults as D

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable_status(status_code: int) -> bool:
    """5xx and 429 (rate limited) responses are worth retrying."""
    return status_code >= 500 or status_code == 429


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int = D.DEFAULT_RETRY_ATTEMPTS,
    initial_delay: float = D.DEFAULT_RETRY_DELAY,
    max_delay: float = D.DEFAULT_RETRY_MAX_DELAY,
    multiplier: float = 2.0,
    retryable: Callable[[Exception], bool] = lambda e: True,
) -> T:
    """Call ``fn`` until it succeeds or attempts run out.

    Args:
        fn: Zero-argument coroutine factory.
        attempts: Total attempts including the first (minimum 1).
        initial_delay: Delay before the second attempt, in seconds.
        max_delay: Upper bound for the backoff delay.
        multiplier: Backoff growth factor.
        retryable: Predicate; non-retryable errors are raised immediately.

    Raises:
        The last exception once attempts are exhausted.
    """
    attempts = max(1, attempts)
    delay = initial_delay

    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except Exception as e:
            if attempt == attempts or not retryable(e):
                raise
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %.2fs", attempt, attempts, e, delay
            )
            await asyncio.sleep(delay)
            delay = min(delay * multiplier, max_delay)

    raise AssertionError("unreachable")
