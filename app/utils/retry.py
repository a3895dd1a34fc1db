"""Bounded retry helper for idempotent asynchronous reads."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

import anyio

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 2,
    delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Await ``operation`` up to ``attempts`` times, sleeping ``delay`` between tries.

    Only exceptions listed in ``retry_on`` trigger another attempt; the last
    one is re-raised once the attempts are exhausted.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "Attempt %s/%s failed: %s; retrying in %.2fs",
                attempt,
                attempts,
                exc,
                delay,
            )
            await anyio.sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["retry_async"]
