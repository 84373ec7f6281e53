"""
Bounded retry helper shared by the skeleton, fill and micro-fill stages.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry(
    fn: Callable[[int], Awaitable[T | None]],
    max_attempts: int,
    delay: float = 0.0,
    accept: Callable[[T], bool] | None = None,
    label: str = "operation",
) -> T | None:
    """
    Call ``fn`` until it produces an acceptable result or attempts run out.

    Args:
        fn: Coroutine factory; receives the 1-based attempt number.
        max_attempts: Upper bound on calls (values below 1 are treated as 1).
        delay: Seconds to sleep between attempts, never after the last one.
        accept: Predicate deciding whether a non-None result is good enough.
            Defaults to accepting any non-None result.
        label: Name used in log messages.

    Returns:
        The first accepted result, or None once every attempt has failed.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        result = await fn(attempt)
        if result is not None and (accept is None or accept(result)):
            return result
        logger.debug("%s attempt %d/%d rejected", label, attempt, attempts)
        if attempt < attempts and delay > 0:
            await asyncio.sleep(delay)
    return None
