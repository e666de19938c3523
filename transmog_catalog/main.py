"""Transmog catalog FastAPI application entry point.

Wires providers, services, the hydration pipeline and routes together via
``app.state``.  Settings come from the environment / ``.env``; the YAML
config file contributes hydration tuning and the classification tables.

Startup order:
    1. Load the set store from disk (cold start -> empty store).
    2. Start the hydration scheduler in the background.
    3. Serve requests from the store while hydration improves it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from transmog_catalog.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from transmog_catalog.api.routes import router as api_router
from transmog_catalog.config.loader import (
    hydration_options,
    load_classification_tables,
    load_config,
)
from transmog_catalog.config.settings import APP_VERSION, Settings
from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.pipeline.scheduler import HydrationScheduler
from transmog_catalog.providers.blizzard.blizzard_api_provider import BlizzardAPIProvider
from transmog_catalog.providers.cache.memory_cache import MemoryCacheProvider
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.providers.wowhead.wowhead_scrape_provider import WowheadScrapeProvider
from transmog_catalog.services.icon_service import IconService
from transmog_catalog.utils.logging import configure_logging, get_logger
from transmog_catalog.utils.rate_limiter import TokenBucketRateLimiter

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    app_env=settings.app_env,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    config = load_config(settings=app_settings)
    class_keywords, gladiator_hints = load_classification_tables(config)
    hydration = hydration_options(config)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.upstream_timeout_seconds)
    rate_limiter = TokenBucketRateLimiter(
        rate=app_settings.upstream_rate_per_second,
        capacity=app_settings.upstream_burst,
    )

    # -- Providers --
    game_data = BlizzardAPIProvider(
        settings=app_settings, http_client=http_client, rate_limiter=rate_limiter
    )
    scraper = WowheadScrapeProvider(http_client=http_client) if app_settings.scrape_enabled else None
    response_cache = MemoryCacheProvider(
        max_size=app_settings.response_cache_size, ttl=app_settings.response_cache_ttl
    )
    store = JsonSetStore(app_settings.cache_file)

    # -- Services & pipeline --
    icon_service = IconService(game_data=game_data, scraper=scraper)
    pipeline = HydrationPipeline(
        game_data=game_data,
        store=store,
        scraper=scraper,
        response_cache=response_cache,
        batch_size=hydration["batch_size"],
        batch_delay_ms=hydration["batch_delay_ms"],
        persist_every=hydration["persist_every"],
        class_keywords=class_keywords,
        gladiator_hints=gladiator_hints,
        locale=app_settings.blizzard_locale,
    )
    scheduler = HydrationScheduler(
        pipeline,
        enabled=app_settings.has_credentials,
        on_startup=hydration["on_startup"],
        interval_hours=hydration["interval_hours"],
    )

    return {
        "settings": app_settings,
        "http_client": http_client,
        "game_data": game_data,
        "scraper": scraper,
        "response_cache": response_cache,
        "store": store,
        "icon_service": icon_service,
        "pipeline": pipeline,
        "scheduler": scheduler,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Load the store and start hydration on startup; clean up on shutdown."""
    components = _build_all(application.state.settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    components["store"].load()
    components["scheduler"].start()

    _logger.info(
        "app_startup",
        version=APP_VERSION,
        environment=application.state.settings.app_env,
        sets=len(components["store"]),
        hydration_enabled=application.state.settings.has_credentials,
    )

    yield

    await components["scheduler"].stop()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings
    application = FastAPI(
        title="Transmog Catalog API",
        version=APP_VERSION,
        description=(
            "Browse World of Warcraft transmog sets hydrated from the Blizzard "
            "Game Data API, with search, class/expansion/quality filters and "
            "on-demand item icons."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "transmog_catalog.main:app",
        host=settings.app_host,
        port=settings.port,
        reload=(settings.app_env == "development"),
    )
