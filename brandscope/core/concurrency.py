"""Bounded fan-out and per-call deadlines for external work."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

from brandscope.core.exceptions import ExternalCallTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_settled(
    awaitables: Iterable[Awaitable[T]],
    *,
    limit: int,
) -> list[T | BaseException]:
    """Wait for every awaitable, running at most ``limit`` at a time.

    Failures are returned in place of results so one branch never cancels
    its siblings. Result order matches input order.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _bounded(awaitable: Awaitable[T]) -> T:
        async with semaphore:
            return await awaitable

    return await asyncio.gather(
        *[_bounded(awaitable) for awaitable in awaitables],
        return_exceptions=True,
    )


async def with_timeout(
    awaitable: Awaitable[T],
    *,
    timeout: float,
    api_name: str,
) -> T:
    """Await with a deadline, raising ``ExternalCallTimeoutError`` on expiry."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(
            "External call timed out",
            extra={"api": api_name, "timeout_s": timeout},
        )
        raise ExternalCallTimeoutError(api_name, timeout) from exc
