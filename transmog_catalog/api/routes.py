"""FastAPI routes for the transmog catalog.

Service dependencies are resolved from ``app.state`` (populated by
``main._build_all``) via ``Depends`` using the ``Annotated`` pattern.

Endpoint                          Method  Description
---------------------------------------------------------------------
/api/transmogs                    GET     Filtered, paginated set list
/api/transmogs/filters            GET     Distinct classes/expansions/qualities
/api/transmogs/batch?ids=1,2      GET     Several sets by id
/api/transmogs/{id}               GET     One set with icons and links
/api/items/{id}                   GET     Summarized upstream item
/api/items/{id}/media             GET     Upstream item icon
/api/test-connection              GET     Can we obtain an API token?
/api/hydration/status             GET     Pipeline state and last report
/api/hydration/run                POST    Trigger a background run
/api/cache/clear                  POST    Drop the response cache
/api/health                       GET     Liveness probe

``/transmogs/filters`` and ``/transmogs/batch`` are declared before
``/transmogs/{id}`` so they are not captured by the id route.

List, detail and batch responses are icon-enriched per request and then
memoized in the response cache until it expires or is cleared.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, Request

from transmog_catalog.api.schemas import (
    CacheClearResponse,
    ConnectionResponse,
    ErrorResponse,
    FiltersResponse,
    HealthResponse,
    HydrationStatusResponse,
    HydrationTriggerResponse,
    ItemMediaResponse,
    ItemSummaryResponse,
    PaginationResponse,
    SetItemResponse,
    TransmogDetailResponse,
    TransmogListResponse,
    TransmogResponse,
)
from transmog_catalog.config.settings import APP_VERSION, Settings
from transmog_catalog.interfaces.cache_provider import ICacheProvider
from transmog_catalog.interfaces.game_data_provider import IGameDataProvider
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.models.query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SetQuery
from transmog_catalog.pipeline.hydration_pipeline import HydrationPipeline
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.services.classification import summarize_item
from transmog_catalog.services.icon_service import IconService
from transmog_catalog.services.payloads import PLACEHOLDER_ICON_URL, icon_url_from_media
from transmog_catalog.services.query_service import filter_options, query_sets, select_by_ids
from transmog_catalog.utils.errors import NotFoundError, TransmogCatalogError
from transmog_catalog.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_MAX_BATCH_IDS = 100


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_store(request: Request) -> JsonSetStore:
    return request.app.state.store


def _get_pipeline(request: Request) -> HydrationPipeline:
    return request.app.state.pipeline


def _get_icon_service(request: Request) -> IconService:
    return request.app.state.icon_service


def _get_response_cache(request: Request) -> ICacheProvider:
    return request.app.state.response_cache


def _get_game_data(request: Request) -> IGameDataProvider:
    return request.app.state.game_data


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


StoreDep = Annotated[JsonSetStore, Depends(_get_store)]
PipelineDep = Annotated[HydrationPipeline, Depends(_get_pipeline)]
IconServiceDep = Annotated[IconService, Depends(_get_icon_service)]
ResponseCacheDep = Annotated[ICacheProvider, Depends(_get_response_cache)]
GameDataDep = Annotated[IGameDataProvider, Depends(_get_game_data)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def _set_response(item_set: ItemSet, icons: dict[int, str]) -> TransmogResponse:
    return TransmogResponse(
        id=item_set.id,
        name=item_set.name,
        classes=item_set.classes,
        expansion=item_set.expansion,
        quality=item_set.quality,
        items=[
            SetItemResponse(
                id=item.id,
                name=item.name,
                icon_url=icons.get(item.id, PLACEHOLDER_ICON_URL),
            )
            for item in item_set.items
        ],
    )


def _dump(model: Any) -> Any:
    if isinstance(model, list):
        return [m.model_dump(by_alias=True) for m in model]
    return model.model_dump(by_alias=True)


def _parse_ids(raw: str) -> list[int]:
    ids: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if token.isascii() and token.isdigit():
            ids.append(int(token))
    return ids[:_MAX_BATCH_IDS]


# ---------------------------------------------------------------------------
# Catalog endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/transmogs",
    response_model=TransmogListResponse,
    summary="List transmog sets with filters and pagination",
)
async def list_transmogs(
    store: StoreDep,
    icons: IconServiceDep,
    cache: ResponseCacheDep,
    page: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    class_name: Annotated[str | None, Query(alias="class")] = None,
    expansion: str | None = None,
    quality: str | None = None,
    search: str | None = None,
) -> Any:
    """Return one page of sets matching every supplied filter."""
    query = SetQuery(
        search=search,
        class_name=class_name,
        expansion=expansion,
        quality=quality,
        page=page,
        limit=limit,
    )
    cache_key = f"list:{query.model_dump_json()}"
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    result = query_sets(store.get(), query)
    icon_map = await icons.resolve_set_icons(result.items)
    response = TransmogListResponse(
        transmogs=[_set_response(s, icon_map) for s in result.items],
        pagination=PaginationResponse(
            current_page=result.current_page,
            total_items=result.total_items,
            total_pages=result.total_pages,
        ),
    )
    body = _dump(response)
    await cache.set(cache_key, body)
    return body


@router.get(
    "/transmogs/filters",
    response_model=FiltersResponse,
    summary="Distinct filter values present in the catalog",
)
async def get_filters(store: StoreDep) -> FiltersResponse:
    return FiltersResponse(**filter_options(store.get()))


@router.get(
    "/transmogs/batch",
    response_model=list[TransmogResponse],
    summary="Fetch several sets by id",
)
async def get_transmogs_batch(
    store: StoreDep,
    icons: IconServiceDep,
    cache: ResponseCacheDep,
    ids: str = "",
) -> Any:
    """Return the sets named in ``ids`` (comma-separated), skipping unknown ids."""
    wanted = _parse_ids(ids)
    cache_key = f"batch:{','.join(map(str, wanted))}"
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    sets = select_by_ids(store.get(), wanted)
    icon_map = await icons.resolve_set_icons(sets)
    body = _dump([_set_response(s, icon_map) for s in sets])
    await cache.set(cache_key, body)
    return body


@router.get(
    "/transmogs/{set_id}",
    response_model=TransmogDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="One set with resolved icons, image and Wowhead link",
)
async def get_transmog(
    set_id: int,
    store: StoreDep,
    icons: IconServiceDep,
    cache: ResponseCacheDep,
) -> Any:
    cache_key = f"detail:{set_id}"
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    item_set = store.get_by_id(set_id)
    if item_set is None:
        raise NotFoundError(message="Set not found")

    icon_map = await icons.resolve_set_icons([item_set])
    base = _set_response(item_set, icon_map)
    response = TransmogDetailResponse(
        **base.model_dump(),
        wowhead_link=item_set.wowhead_link,
        image_url=await icons.set_image(item_set, icon_map),
    )
    body = _dump(response)
    await cache.set(cache_key, body)
    return body


# ---------------------------------------------------------------------------
# Upstream lookups
# ---------------------------------------------------------------------------


@router.get(
    "/items/{item_id}",
    response_model=ItemSummaryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Summarized upstream item detail",
)
async def get_item(item_id: int, game_data: GameDataDep, app_settings: SettingsDep) -> Any:
    detail = await game_data.get_item_detail(item_id)
    if detail is None:
        raise NotFoundError(message="Item not found")
    summary = summarize_item(detail, app_settings.blizzard_locale)
    return ItemSummaryResponse(**{**summary, "id": item_id})


@router.get(
    "/items/{item_id}/media",
    response_model=ItemMediaResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Upstream item icon",
)
async def get_item_media(item_id: int, game_data: GameDataDep) -> ItemMediaResponse:
    media = await game_data.get_item_media(item_id)
    if media is None:
        raise NotFoundError(message="Item not found")
    return ItemMediaResponse(
        id=item_id, icon_url=icon_url_from_media(media) or PLACEHOLDER_ICON_URL
    )


@router.get(
    "/test-connection",
    response_model=ConnectionResponse,
    summary="Check that an API token can be obtained",
)
async def test_connection(game_data: GameDataDep) -> ConnectionResponse:
    try:
        await game_data.get_token()
    except TransmogCatalogError as exc:
        _logger.warning("connection_test_failed", error=str(exc))
        return ConnectionResponse(connected=False)
    return ConnectionResponse(connected=True)


# ---------------------------------------------------------------------------
# Hydration & cache control
# ---------------------------------------------------------------------------


@router.get(
    "/hydration/status",
    response_model=HydrationStatusResponse,
    summary="Hydration state and the most recent run report",
)
async def hydration_status(pipeline: PipelineDep) -> HydrationStatusResponse:
    return HydrationStatusResponse(state=pipeline.state, last_report=pipeline.last_report)


@router.post(
    "/hydration/run",
    response_model=HydrationTriggerResponse,
    status_code=202,
    summary="Trigger a background hydration run",
)
async def trigger_hydration(
    pipeline: PipelineDep,
    game_data: GameDataDep,
) -> HydrationTriggerResponse:
    """Start a run unless one is in flight or credentials are missing."""
    started = game_data.is_available() and pipeline.start_background()
    _logger.info("hydration_trigger", started=started)
    return HydrationTriggerResponse(started=started, state=pipeline.state)


@router.post(
    "/cache/clear",
    response_model=CacheClearResponse,
    summary="Drop the response cache (not the set store)",
)
async def clear_cache(cache: ResponseCacheDep) -> CacheClearResponse:
    dropped = await cache.clear()
    return CacheClearResponse(cleared=True, entries=dropped)


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health(store: StoreDep, pipeline: PipelineDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=APP_VERSION,
        sets=len(store),
        hydration=pipeline.state,
    )
