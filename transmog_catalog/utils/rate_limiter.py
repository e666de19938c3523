"""Token-bucket rate limiter for outbound upstream requests.

The bucket holds at most ``capacity`` tokens and refills continuously at
``rate`` tokens per second.  Every upstream request calls :meth:`acquire`
first; when the bucket is empty the caller sleeps exactly long enough for
the next token to arrive.  Other coroutines keep running while one waits,
so a throttled hydration run never blocks the HTTP server.

The clock and sleep functions are injectable so tests can drive the bucket
deterministically.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from transmog_catalog.utils.logging import get_logger


class TokenBucketRateLimiter:
    """Async token bucket.

    Parameters
    ----------
    rate:
        Refill rate in tokens per second.  Must be positive.
    capacity:
        Maximum burst size.  Defaults to ``rate`` rounded up (one second
        worth of requests).
    clock:
        Monotonic time source, in seconds.
    sleep:
        Coroutine function used to wait for a token.
    """

    def __init__(
        self,
        rate: float,
        capacity: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        self._rate = float(rate)
        self._capacity = float(capacity) if capacity is not None else max(1.0, float(rate))
        if self._capacity < 1:
            raise ValueError("capacity must allow at least one token")
        self._clock = clock
        self._sleep = sleep
        self._tokens = self._capacity
        self._updated_at = clock()
        self._lock: asyncio.Lock | None = None
        self._logger = get_logger(__name__)

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def capacity(self) -> float:
        return self._capacity

    @property
    def available(self) -> float:
        """Tokens currently in the bucket (after refilling up to now)."""
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._updated_at = now
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)

    async def acquire(self) -> float:
        """Take one token, waiting if necessary.

        Returns the number of seconds spent waiting (0.0 when a token was
        immediately available).
        """
        if self._lock is None:
            self._lock = asyncio.Lock()

        waited = 0.0
        async with self._lock:
            self._refill()
            if self._tokens < 1:
                wait = (1 - self._tokens) / self._rate
                self._logger.debug("rate_limit_wait", seconds=round(wait, 3))
                await self._sleep(wait)
                waited = wait
                self._refill()
                # The sleep may return marginally early; never go negative.
                self._tokens = max(self._tokens, 1.0)
            self._tokens -= 1
        return waited
