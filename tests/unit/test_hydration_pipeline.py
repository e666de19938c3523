"""Unit tests for HydrationPipeline and HydrationScheduler."""

from __future__ import annotations

import asyncio
import random
from pathlib import Path

import pytest

from tests.conftest import (
    FakeGameDataProvider,
    FakeScrapeProvider,
    item_detail,
    set_detail,
)
from transmog_catalog.interfaces.game_data_provider import SetIndexEntry
from transmog_catalog.interfaces.scrape_provider import ScrapedItem
from transmog_catalog.models.hydration import HydrationState
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.pipeline.scheduler import HydrationScheduler
from transmog_catalog.providers.cache.memory_cache import MemoryCacheProvider
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.utils.errors import UpstreamError


def _upstream(set_count: int = 6, **kwargs) -> FakeGameDataProvider:
    """An upstream with ``set_count`` plate sets, ids 1..N, one member each."""
    index = [SetIndexEntry(id=i, name=f"Set {i}") for i in range(1, set_count + 1)]
    sets = {i: set_detail(i, f"Set {i}", [16000 + i]) for i in range(1, set_count + 1)}
    items = {16000 + i: item_detail(16000 + i, subclass="Plate") for i in range(1, set_count + 1)}
    return FakeGameDataProvider(index=index, sets=sets, items=items, **kwargs)


def _pipeline(
    game_data: FakeGameDataProvider,
    store: JsonSetStore,
    sleeps: list[float] | None = None,
    **kwargs,
) -> HydrationPipeline:
    async def _record_sleep(seconds: float) -> None:
        if sleeps is not None:
            sleeps.append(seconds)

    kwargs.setdefault("batch_size", 2)
    kwargs.setdefault("batch_delay_ms", 500)
    kwargs.setdefault("persist_every", 5)
    return HydrationPipeline(
        game_data=game_data,
        store=store,
        rng=random.Random(42),
        sleep=_record_sleep,
        **kwargs,
    )


# ======================================================================
# Work selection
# ======================================================================


class TestComputeWork:
    def test_new_and_incomplete_sets_are_selected(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        store.upsert(ItemSet(id=1, name="done", classes=["Mage"], expansion="Classic"))
        store.upsert(ItemSet(id=2, name="no expansion", classes=["Mage"]))
        store.upsert(ItemSet(id=3, name="unrestricted", expansion="Classic"))
        pipeline = _pipeline(_upstream(), store)

        index = [SetIndexEntry(id=i, name="") for i in (1, 2, 3, 4)]
        assert [e.id for e in pipeline.compute_work(index)] == [2, 3, 4]


# ======================================================================
# Runs
# ======================================================================


class TestRun:
    @pytest.mark.asyncio
    async def test_full_run_hydrates_every_set(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        sleeps: list[float] = []
        pipeline = _pipeline(_upstream(5), store, sleeps=sleeps)

        report = await pipeline.run()

        assert report is not None
        assert report.state == HydrationState.IDLE
        assert (report.index_size, report.work_size, report.batches) == (5, 5, 3)
        assert (report.succeeded, report.failed) == (5, 0)
        assert report.finished_at is not None
        assert sorted(s.id for s in store.get()) == [1, 2, 3, 4, 5]
        assert store.get_by_id(3).classes == ["Warrior", "Paladin", "DeathKnight"]
        assert store.get_by_id(3).expansion == "Classic"
        # Sleeps between batches only, never after the last one.
        assert sleeps == [0.5, 0.5]
        assert store_path.exists()
        assert pipeline.state == HydrationState.IDLE

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, store_path: Path) -> None:
        game_data = _upstream(4)
        store = JsonSetStore(store_path)
        await _pipeline(game_data, store).run()
        first_bytes = store_path.read_bytes()

        second = await _pipeline(game_data, store).run()
        assert second is not None
        assert second.work_size == 0
        assert store_path.read_bytes() == first_bytes

    @pytest.mark.asyncio
    async def test_failed_sets_are_reported_and_skipped(self, store_path: Path) -> None:
        game_data = _upstream(4, failing_sets={2})
        del game_data.sets[3]  # 404 upstream
        store = JsonSetStore(store_path)

        report = await _pipeline(game_data, store).run()

        assert report is not None
        assert report.state == HydrationState.IDLE
        assert report.succeeded == 2
        assert report.failed == 2
        reasons = {f.id: f.reason for f in report.failures}
        assert "timed out" in reasons[2]
        assert reasons[3] == "set not found upstream"
        assert sorted(s.id for s in store.get()) == [1, 4]

    @pytest.mark.asyncio
    async def test_malformed_payload_only_fails_its_own_set(self, store_path: Path) -> None:
        game_data = _upstream(3)
        game_data.sets[2] = ["not", "an", "object"]  # type: ignore[assignment]
        store = JsonSetStore(store_path)

        report = await _pipeline(game_data, store, batch_size=3).run()

        assert report is not None
        assert report.state == HydrationState.IDLE
        assert (report.succeeded, report.failed) == (2, 1)
        assert report.failures[0].id == 2
        assert sorted(s.id for s in store.get()) == [1, 3]
        assert store_path.exists()

    @pytest.mark.asyncio
    async def test_odd_item_payload_still_classifies(self, store_path: Path) -> None:
        game_data = _upstream(3)
        game_data.items[16002] = {"preview_item": ["unexpected"], "requirements": "none"}
        store = JsonSetStore(store_path)

        report = await _pipeline(game_data, store, batch_size=3).run()

        assert report is not None
        assert (report.succeeded, report.failed) == (3, 0)
        assert store.get_by_id(2).classes == ["All"]
        assert store.get_by_id(2).expansion == "Classic"

    @pytest.mark.asyncio
    async def test_work_set_is_shuffled(self, store_path: Path) -> None:
        game_data = _upstream(10)
        expected = list(range(1, 11))
        random.Random(42).shuffle(expected)

        await _pipeline(game_data, JsonSetStore(store_path), batch_size=10).run()

        assert game_data.set_calls == expected
        assert game_data.set_calls != sorted(game_data.set_calls)

    @pytest.mark.asyncio
    async def test_index_failure_keeps_previous_cache(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        store.upsert(ItemSet(id=9, name="kept", classes=["Mage"], expansion="Classic"))
        store.save()
        before = store_path.read_bytes()
        game_data = _upstream(index_error=UpstreamError(message="index down", status_code=503))

        report = await _pipeline(game_data, store).run()

        assert report is not None
        assert report.state == HydrationState.FAILED
        assert "index down" in (report.error or "")
        assert report.finished_at is not None
        assert report.batches == 0
        assert store_path.read_bytes() == before
        assert game_data.set_calls == []

    @pytest.mark.asyncio
    async def test_limit_bounds_the_work_set(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        report = await _pipeline(_upstream(6), store).run(limit=2)
        assert report is not None
        assert report.work_size == 2
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_persists_every_n_batches_and_at_end(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        pipeline = _pipeline(_upstream(6), store, batch_size=1, persist_every=2)
        report = await pipeline.run()
        assert report is not None
        # 6 batches: writes after batches 2, 4, 6 plus the final write.
        assert report.persisted_writes == 4

    @pytest.mark.asyncio
    async def test_empty_member_list_uses_scraped_items(self, store_path: Path) -> None:
        game_data = _upstream(1)
        game_data.sets[1] = set_detail(1, "Set 1", [])
        scraper = FakeScrapeProvider(
            items={1: [ScrapedItem(id=30150, name="Vestments of the Faithful")]}
        )
        store = JsonSetStore(store_path)

        await _pipeline(game_data, store, scraper=scraper).run()

        hydrated = store.get_by_id(1)
        assert [i.id for i in hydrated.items] == [30150]
        assert hydrated.expansion == "Burning Crusade"

    @pytest.mark.asyncio
    async def test_completed_run_clears_response_cache(self, store_path: Path) -> None:
        cache = MemoryCacheProvider()
        await cache.set("list:stale", {"transmogs": []})
        pipeline = _pipeline(_upstream(1), JsonSetStore(store_path), response_cache=cache)

        await pipeline.run()
        assert await cache.exists("list:stale") is False


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_second_trigger_while_running_is_dropped(self, store_path: Path) -> None:
        gate = asyncio.Event()
        game_data = _upstream(2)
        original = game_data.get_index

        async def _slow_index() -> list[SetIndexEntry]:
            await gate.wait()
            return await original()

        game_data.get_index = _slow_index  # type: ignore[method-assign]
        pipeline = _pipeline(game_data, JsonSetStore(store_path))

        first = asyncio.create_task(pipeline.run())
        await asyncio.sleep(0)
        assert pipeline.is_running

        assert await pipeline.run() is None
        assert pipeline.start_background() is False

        gate.set()
        report = await first
        assert report is not None
        assert report.succeeded == 2
        assert game_data.set_calls.count(1) == 1

    @pytest.mark.asyncio
    async def test_start_background_runs_to_completion(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        pipeline = _pipeline(_upstream(3), store)

        assert pipeline.start_background() is True
        await pipeline.wait()

        assert pipeline.state == HydrationState.IDLE
        assert pipeline.last_report is not None
        assert pipeline.last_report.succeeded == 3


class TestScheduler:
    @pytest.mark.asyncio
    async def test_disabled_scheduler_never_runs(self, store_path: Path) -> None:
        game_data = _upstream(1)
        scheduler = HydrationScheduler(
            _pipeline(game_data, JsonSetStore(store_path)), enabled=False
        )
        scheduler.start()
        assert scheduler.running is False
        assert game_data.set_calls == []

    @pytest.mark.asyncio
    async def test_startup_run(self, store_path: Path) -> None:
        store = JsonSetStore(store_path)
        scheduler = HydrationScheduler(_pipeline(_upstream(2), store), on_startup=True)
        scheduler.start()
        for _ in range(500):
            if not scheduler.running:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_stop_cancels_periodic_loop(self, store_path: Path) -> None:
        scheduler = HydrationScheduler(
            _pipeline(_upstream(1), JsonSetStore(store_path)),
            on_startup=False,
            interval_hours=1,
        )
        scheduler.start()
        assert scheduler.running is True
        await scheduler.stop()
        assert scheduler.running is False
