"""Hydration pipeline: index -> details -> classification -> set store.

A run fetches the upstream set index, picks the sets that are new or still
incompletely classified, and hydrates them in small shuffled batches:

    1. Fetch the full index.  If that fails the run aborts (state FAILED)
       and the existing store is left untouched.
    2. Work set = index entries absent from the store, plus entries whose
       stored record still has an Unknown expansion or ``["All"]`` classes.
    3. Shuffle the work set so an interrupted run leaves a representative
       spread of expansions hydrated.
    4. Per batch, fan out one coroutine per set; each returns a SetOutcome
       rather than raising, so one bad set never aborts the batch.
    5. Upsert successes by primary key.
    6. Persist every ``persist_every`` batches and once at the end.
    7. Sleep ``batch_delay_ms`` between batches.  This blocks the pipeline
       only; the HTTP server keeps serving from the store meanwhile.

Failed sets are retried on the next run, never within the same run.  Only
one run can be in flight: a second trigger while RUNNING is dropped.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone

import structlog

from transmog_catalog.config.game_data import CLASS_KEYWORDS, GLADIATOR_HINTS
from transmog_catalog.interfaces.cache_provider import ICacheProvider
from transmog_catalog.interfaces.game_data_provider import IGameDataProvider, SetIndexEntry
from transmog_catalog.interfaces.scrape_provider import ISetScrapeProvider
from transmog_catalog.models.hydration import (
    BatchReport,
    HydrationReport,
    HydrationState,
    SetOutcome,
)
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.services.classification import classify_set
from transmog_catalog.services.payloads import localized_name, set_members
from transmog_catalog.utils.errors import HydrationError, TransmogCatalogError
from transmog_catalog.utils.logging import get_logger


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class HydrationPipeline:
    """Single-flight batch job that keeps the set store hydrated.

    All collaborators are injected.  ``rng`` and ``sleep`` exist so tests
    can make the shuffle deterministic and skip the inter-batch delay.
    """

    def __init__(
        self,
        game_data: IGameDataProvider,
        store: JsonSetStore,
        scraper: ISetScrapeProvider | None = None,
        response_cache: ICacheProvider | None = None,
        batch_size: int = 4,
        batch_delay_ms: int = 750,
        persist_every: int = 5,
        class_keywords: Mapping[str, list[str]] = CLASS_KEYWORDS,
        gladiator_hints: Mapping[str, list[str]] = GLADIATOR_HINTS,
        locale: str = "en_US",
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._game_data = game_data
        self._store = store
        self._scraper = scraper
        self._response_cache = response_cache
        self._batch_size = max(1, batch_size)
        self._batch_delay = max(0, batch_delay_ms) / 1000
        self._persist_every = max(1, persist_every)
        self._keywords = class_keywords
        self._hints = gladiator_hints
        self._locale = locale
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._state = HydrationState.IDLE
        self._last_report: HydrationReport | None = None
        self._current_report: HydrationReport | None = None
        self._task: asyncio.Task | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> HydrationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == HydrationState.RUNNING

    @property
    def last_report(self) -> HydrationReport | None:
        """The most recent finished run, or the in-flight run's progress."""
        return self._current_report or self._last_report

    # ------------------------------------------------------------------
    # Work selection
    # ------------------------------------------------------------------

    def compute_work(self, index: list[SetIndexEntry]) -> list[SetIndexEntry]:
        """Index entries that are new or still need a better classification."""
        work: list[SetIndexEntry] = []
        for entry in index:
            existing = self._store.get_by_id(entry.id)
            if existing is None or existing.needs_refresh():
                work.append(entry)
        return work

    # ------------------------------------------------------------------
    # Per-set unit of work
    # ------------------------------------------------------------------

    async def hydrate_set(self, entry: SetIndexEntry) -> SetOutcome:
        """Fetch, classify and return one set; failures become a failed outcome."""
        try:
            detail = await self._game_data.get_set_detail(entry.id)
            if detail is None:
                return SetOutcome.failure(entry.id, "set not found upstream")

            name = localized_name(detail.get("name"), self._locale) or entry.name
            members = set_members(detail, self._locale)
            if not members and self._scraper is not None:
                scraped = await self._scraper.get_set_items(entry.id)
                members = [{"id": item.id, "name": item.name} for item in scraped]

            item_detail = None
            if members:
                try:
                    item_detail = await self._game_data.get_item_detail(members[0]["id"])
                except TransmogCatalogError as exc:
                    # Name keywords and the id-based expansion still apply.
                    self._logger.warning(
                        "item_detail_failed",
                        set_id=entry.id,
                        item_id=members[0]["id"],
                        error=str(exc),
                    )

            item_set = classify_set(
                entry.id, name, members, item_detail, self._keywords, self._hints
            )
        except TransmogCatalogError as exc:
            self._logger.warning("set_hydration_failed", set_id=entry.id, error=str(exc))
            return SetOutcome.failure(entry.id, str(exc))
        except Exception as exc:
            # Malformed upstream payload; only this set is lost.
            self._logger.exception("set_hydration_crashed", set_id=entry.id, error=str(exc))
            return SetOutcome.failure(entry.id, f"unexpected payload: {exc}")

        self._logger.debug(
            "set_hydrated",
            set_id=item_set.id,
            classes=item_set.classes,
            expansion=item_set.expansion,
        )
        return SetOutcome.success(item_set)

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def run(self, limit: int | None = None) -> HydrationReport | None:
        """Execute one hydration run.

        Returns the run report, or ``None`` when the trigger was dropped
        because a run is already in flight.

        Raises
        ------
        HydrationError
            If an unexpected error (e.g. the store cannot be written)
            interrupts the run.  An index fetch failure is not raised: it
            is reported through a FAILED report.
        """
        # Check-and-set without an await in between: atomic on the event loop.
        if self._state == HydrationState.RUNNING:
            self._logger.info("hydration_already_running")
            return None
        self._state = HydrationState.RUNNING
        report = HydrationReport(started_at=_utcnow())
        self._current_report = report

        try:
            return await self._execute(report, limit)
        except TransmogCatalogError as exc:
            return self._finish(
                self._current_report or report, HydrationState.FAILED, error=str(exc)
            )
        except Exception as exc:
            self._finish(self._current_report or report, HydrationState.FAILED, error=str(exc))
            self._logger.exception("hydration_run_crashed", error=str(exc))
            raise HydrationError(message=f"Hydration run crashed: {exc}") from exc

    async def _execute(self, report: HydrationReport, limit: int | None) -> HydrationReport:
        self._logger.info("hydration_started", cached_sets=len(self._store))
        index = await self._game_data.get_index()

        work = self.compute_work(index)
        self._rng.shuffle(work)
        if limit is not None:
            work = work[: max(0, limit)]

        batches = [
            work[i:i + self._batch_size] for i in range(0, len(work), self._batch_size)
        ]
        report = self._update(report, index_size=len(index), work_size=len(work))
        self._logger.info(
            "hydration_work_computed",
            index_size=len(index),
            work_size=len(work),
            batches=len(batches),
        )

        for batch_index, batch in enumerate(batches):
            outcomes = await asyncio.gather(*(self.hydrate_set(entry) for entry in batch))
            for outcome in outcomes:
                if outcome.ok and outcome.item_set is not None:
                    self._store.upsert(outcome.item_set)

            batch_report = BatchReport.from_outcomes(batch_index, list(outcomes))
            report = self._update(
                report,
                batches=report.batches + 1,
                succeeded=report.succeeded + len(batch_report.succeeded),
                failed=report.failed + len(batch_report.failed),
                failures=[*report.failures, *batch_report.failed],
            )
            self._logger.info(
                "hydration_batch_complete",
                batch=batch_index + 1,
                of=len(batches),
                succeeded=len(batch_report.succeeded),
                failed=len(batch_report.failed),
            )

            if (batch_index + 1) % self._persist_every == 0:
                await self._store.save_async()
                report = self._update(report, persisted_writes=report.persisted_writes + 1)

            if batch_index < len(batches) - 1 and self._batch_delay > 0:
                await self._sleep(self._batch_delay)

        await self._store.save_async()
        report = self._update(report, persisted_writes=report.persisted_writes + 1)

        if self._response_cache is not None:
            await self._response_cache.clear()

        return self._finish(report, HydrationState.IDLE)

    def _update(self, report: HydrationReport, **changes) -> HydrationReport:
        report = report.model_copy(update=changes)
        self._current_report = report
        return report

    def _finish(
        self,
        report: HydrationReport,
        state: HydrationState,
        error: str | None = None,
    ) -> HydrationReport:
        report = report.model_copy(
            update={"state": state, "finished_at": _utcnow(), "error": error}
        )
        self._state = state
        self._last_report = report
        self._current_report = None

        log = self._logger.error if state == HydrationState.FAILED else self._logger.info
        log(
            "hydration_finished",
            state=state.value,
            work_size=report.work_size,
            succeeded=report.succeeded,
            failed=report.failed,
            persisted_writes=report.persisted_writes,
            error=error,
        )
        return report

    # ------------------------------------------------------------------
    # Background execution
    # ------------------------------------------------------------------

    async def run_safely(self, limit: int | None = None) -> HydrationReport | None:
        """Run and log instead of raising; used by background triggers."""
        try:
            return await self.run(limit)
        except HydrationError as exc:
            self._logger.error("hydration_background_failed", error=str(exc))
            return None

    def start_background(self, limit: int | None = None) -> bool:
        """Schedule a run on the event loop; ``False`` if one is in flight."""
        if self.is_running or (self._task is not None and not self._task.done()):
            return False
        self._task = asyncio.create_task(self.run_safely(limit))
        return True

    async def wait(self) -> None:
        """Await the current background run, if any."""
        if self._task is not None:
            await self._task
