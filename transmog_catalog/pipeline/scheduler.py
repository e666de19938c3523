"""Triggers hydration runs on startup and on a fixed interval.

The scheduler owns one background task.  With ``on_startup`` it runs the
pipeline immediately; with a positive ``interval_hours`` it then keeps
triggering a run every interval until :meth:`stop` cancels it.  A trigger
that lands while a run is in flight is dropped by the pipeline itself.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.utils.logging import get_logger


class HydrationScheduler:
    """Startup and periodic hydration trigger.

    Parameters
    ----------
    pipeline:
        The pipeline to trigger.
    enabled:
        ``False`` when credentials are missing; :meth:`start` then only logs.
    on_startup:
        Run once as soon as the scheduler starts.
    interval_hours:
        Hours between periodic runs; ``0`` disables the timer.
    """

    def __init__(
        self,
        pipeline: HydrationPipeline,
        enabled: bool = True,
        on_startup: bool = True,
        interval_hours: float = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._pipeline = pipeline
        self._enabled = enabled
        self._on_startup = on_startup
        self._interval_seconds = max(0.0, interval_hours * 3600)
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self._enabled:
            self._logger.warning("hydration_disabled", reason="missing Blizzard API credentials")
            return
        if not self._on_startup and self._interval_seconds <= 0:
            self._logger.info("hydration_not_scheduled")
            return
        self._task = asyncio.create_task(self._loop())
        self._logger.info(
            "hydration_scheduled",
            on_startup=self._on_startup,
            interval_seconds=self._interval_seconds,
        )

    async def _loop(self) -> None:
        if self._on_startup:
            await self._pipeline.run_safely()
        if self._interval_seconds <= 0:
            return
        while True:
            await self._sleep(self._interval_seconds)
            await self._pipeline.run_safely()

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
