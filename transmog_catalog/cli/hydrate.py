"""``hydrate`` command: run one hydration pass from the command line.

Builds the same providers the server uses, loads the cache file, runs the
pipeline once (optionally capped with ``--limit``) and prints the report.
Exit code is 0 for a completed run and 1 for a failed or impossible one.
"""

from __future__ import annotations

import argparse
import sys

import httpx

from transmog_catalog.config.loader import (
    hydration_options,
    load_classification_tables,
    load_config,
)
from transmog_catalog.config.settings import Settings
from transmog_catalog.models.hydration import HydrationReport, HydrationState
from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.providers.blizzard.blizzard_api_provider import BlizzardAPIProvider
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.providers.wowhead.wowhead_scrape_provider import WowheadScrapeProvider
from transmog_catalog.utils.errors import HydrationError
from transmog_catalog.utils.rate_limiter import TokenBucketRateLimiter


def format_report(report: HydrationReport) -> str:
    """Render a run report as indented plain text."""
    lines = [
        "Hydration report",
        "=" * 40,
        f"  State:            {report.state.value}",
        f"  Index size:       {report.index_size}",
        f"  Work set:         {report.work_size}",
        f"  Batches:          {report.batches}",
        f"  Succeeded:        {report.succeeded}",
        f"  Failed:           {report.failed}",
        f"  Disk writes:      {report.persisted_writes}",
    ]
    if report.duration_seconds is not None:
        lines.append(f"  Time:             {report.duration_seconds:.2f}s")
    if report.error:
        lines.append(f"  Error:            {report.error}")
    if report.failures:
        lines.append("\n  Failed sets:")
        for failure in report.failures:
            lines.append(f"    {failure.id:<8} {failure.reason}")
    return "\n".join(lines)


async def run_hydration(app_settings: Settings, limit: int | None = None) -> HydrationReport | None:
    """Build a pipeline against ``app_settings`` and run it once."""
    config = load_config(settings=app_settings)
    class_keywords, gladiator_hints = load_classification_tables(config)
    hydration = hydration_options(config)

    store = JsonSetStore(app_settings.cache_file)
    store.load()

    async with httpx.AsyncClient(timeout=app_settings.upstream_timeout_seconds) as http_client:
        game_data = BlizzardAPIProvider(
            settings=app_settings,
            http_client=http_client,
            rate_limiter=TokenBucketRateLimiter(
                rate=app_settings.upstream_rate_per_second,
                capacity=app_settings.upstream_burst,
            ),
        )
        scraper = (
            WowheadScrapeProvider(http_client=http_client) if app_settings.scrape_enabled else None
        )
        pipeline = HydrationPipeline(
            game_data=game_data,
            store=store,
            scraper=scraper,
            batch_size=hydration["batch_size"],
            batch_delay_ms=hydration["batch_delay_ms"],
            persist_every=hydration["persist_every"],
            class_keywords=class_keywords,
            gladiator_hints=gladiator_hints,
            locale=app_settings.blizzard_locale,
        )
        return await pipeline.run(limit)


async def handle_hydrate(args: argparse.Namespace, app_settings: Settings) -> int:
    if not app_settings.has_credentials:
        print(
            "Error: BLIZZARD_CLIENT_ID and BLIZZARD_CLIENT_SECRET must be set to hydrate.",
            file=sys.stderr,
        )
        return 1

    print(f"Hydrating {app_settings.cache_file}", end="")
    print(f" (limit {args.limit})" if args.limit is not None else "")

    try:
        report = await run_hydration(app_settings, args.limit)
    except HydrationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if report is None:
        print("A hydration run is already in progress.", file=sys.stderr)
        return 1

    print()
    print(format_report(report))
    return 0 if report.state != HydrationState.FAILED else 1
