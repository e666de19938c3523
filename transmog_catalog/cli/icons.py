"""``icons`` command: token-free icon resolution from the community wiki.

For every cached set the member list is scraped from its wiki page (the
cached member list is used when the page yields none).  Each distinct
``name + slot`` pair is mapped to an icon file stem, taken from the scraped
row when present and otherwise from a wiki search by item name.  Results
accumulate in ``item_cache.json``, which is loaded first and saved after
every batch so an interrupted run keeps its progress.

With ``--download DIR`` the large icon images are also fetched into
``DIR`` as ``<item id>_<safe name>.jpg``; existing files are skipped.
"""

from __future__ import annotations

import argparse
import asyncio
import re
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

import httpx
from pydantic import BaseModel

from transmog_catalog.config.settings import Settings
from transmog_catalog.interfaces.scrape_provider import ScrapedItem
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.providers.store.json_icon_cache import JsonIconCache, icon_cache_key
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.providers.wowhead.wowhead_scrape_provider import WowheadScrapeProvider
from transmog_catalog.utils.logging import get_logger

logger = get_logger(__name__)

BATCH_SIZE = 20
BATCH_DELAY = 0.2  # seconds
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9]")
_MAX_SAFE_NAME = 50


class IconRunSummary(BaseModel):
    """Counters for one ``icons`` run."""

    items: int = 0
    resolved: int = 0
    unresolved: int = 0
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0


def icon_file_name(item: ScrapedItem) -> str:
    safe_name = _UNSAFE_CHARS_RE.sub("_", item.name)[:_MAX_SAFE_NAME]
    return f"{item.id}_{safe_name}.jpg"


async def collect_items(
    sets: Sequence[ItemSet], scraper: WowheadScrapeProvider
) -> list[ScrapedItem]:
    """Distinct member items across ``sets``, keyed by name and slot."""
    unique: dict[str, ScrapedItem] = {}
    for item_set in sets:
        scraped = await scraper.get_set_items(item_set.id)
        if not scraped:
            scraped = [ScrapedItem(id=item.id, name=item.name) for item in item_set.items]
        for item in scraped:
            if item.name:
                unique.setdefault(icon_cache_key(item.name, item.slot), item)
    return list(unique.values())


async def resolve_item_icon(
    item: ScrapedItem, scraper: WowheadScrapeProvider, cache: JsonIconCache
) -> str | None:
    icon = cache.get(item.name, item.slot) or item.icon
    if icon is None:
        icon = await scraper.find_icon_name(item.name)
    if icon is not None:
        cache.set(item.name, item.slot, icon)
    return icon


async def process_items(
    items: Sequence[ScrapedItem],
    scraper: WowheadScrapeProvider,
    cache: JsonIconCache,
    download_dir: Path | None = None,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> IconRunSummary:
    """Resolve (and optionally download) icons in sequential batches."""
    summary = IconRunSummary(items=len(items))
    if download_dir is not None:
        download_dir.mkdir(parents=True, exist_ok=True)

    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        for item in batch:
            target = download_dir / icon_file_name(item) if download_dir is not None else None
            if target is not None and target.exists():
                summary.skipped += 1
                continue

            icon = await resolve_item_icon(item, scraper, cache)
            if icon is None:
                summary.unresolved += 1
                continue
            summary.resolved += 1

            if target is not None:
                content = await scraper.fetch_icon(icon)
                if content is None:
                    summary.failed += 1
                    continue
                await asyncio.to_thread(target.write_bytes, content)
                summary.downloaded += 1

        cache.save()
        done = min(start + batch_size, len(items))
        logger.info(
            "icon_batch_complete",
            progress=f"{done}/{len(items)}",
            resolved=summary.resolved,
            downloaded=summary.downloaded,
            skipped=summary.skipped,
        )
        if done < len(items) and batch_delay > 0:
            await sleep(batch_delay)

    return summary


async def handle_icons(args: argparse.Namespace, app_settings: Settings) -> int:
    store = JsonSetStore(app_settings.cache_file)
    sets = store.load()
    if not sets:
        print(f"No sets cached in {app_settings.cache_file}; run 'hydrate' first.")
        return 1

    cache = JsonIconCache(app_settings.item_cache_file)
    print(f"Icon cache: {cache.load()} entries loaded from {cache.path}")
    download_dir = Path(args.download) if args.download else None

    async with httpx.AsyncClient(timeout=app_settings.upstream_timeout_seconds) as http_client:
        scraper = WowheadScrapeProvider(http_client=http_client)
        items = await collect_items(sets, scraper)
        print(f"Distinct items: {len(items)}")
        summary = await process_items(items, scraper, cache, download_dir=download_dir)

    print("\nIcon resolution complete:")
    print(f"  Resolved:         {summary.resolved}")
    print(f"  Unresolved:       {summary.unresolved}")
    if download_dir is not None:
        print(f"  Downloaded:       {summary.downloaded}")
        print(f"  Skipped (exists): {summary.skipped}")
        print(f"  Failed:           {summary.failed}")
    print(f"  Cache saved to:   {cache.path}")
    return 0
