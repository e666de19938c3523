"""Shared concurrency helpers for bounded fan-out against upstream services.

Two patterns are exposed:

1. **throttled_gather** -- a drop-in replacement for ``asyncio.gather`` that
   wraps each awaitable in a semaphore acquire/release, so at most ``limit``
   upstream calls are in flight at any moment.

2. **gather_settled** -- the fan-out-then-sort pattern used by the serving
   layer: run lookups in parallel, log failures, and return ``None`` in the
   failed slots so callers keep positional alignment with their inputs.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

import structlog

from transmog_catalog.utils.logging import get_logger

_T = TypeVar("_T")

_DEFAULT_LIMIT = 5

_logger: structlog.BoundLogger = get_logger(__name__)


async def throttled_gather(
    coros: list[Awaitable[_T]],
    limit: int = _DEFAULT_LIMIT,
    semaphore: asyncio.Semaphore | None = None,
    return_exceptions: bool = True,
) -> list[_T | BaseException]:
    """Run awaitables concurrently with semaphore throttling.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    limit:
        Maximum number of awaitables running at once.  Ignored when an
        explicit ``semaphore`` is supplied.
    semaphore:
        Optional shared semaphore, for callers that want several gathers
        to draw from the same concurrency budget.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  Mirrors ``asyncio.gather`` semantics.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input coroutines.
    """
    if semaphore is None:
        # Created per call so the semaphore is bound to the running loop.
        semaphore = asyncio.Semaphore(max(1, limit))

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        async with semaphore:
            return await coro

    tasks = [_wrapped(c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)


async def gather_settled(
    coros: list[Awaitable[_T]],
    limit: int = _DEFAULT_LIMIT,
    logger: structlog.BoundLogger | None = None,
    error_msg: str = "concurrent_lookup_failed",
) -> list[_T | None]:
    """Run lookups in parallel and replace failures with ``None``.

    Parameters
    ----------
    coros:
        The lookups to run.
    limit:
        Maximum number of lookups in flight.
    logger:
        Optional structured logger for warnings on failures.
    error_msg:
        Event name logged for each failed lookup.

    Returns
    -------
    list
        One entry per input: the lookup's result, or ``None`` if it raised.
    """
    if logger is None:
        logger = _logger

    raw_results = await throttled_gather(coros, limit=limit, return_exceptions=True)

    settled: list[_T | None] = []
    for idx, result in enumerate(raw_results):
        if isinstance(result, BaseException):
            logger.warning(error_msg, index=idx, error=str(result))
            settled.append(None)
        else:
            settled.append(result)
    return settled
