"""Pydantic response schemas for the transmog catalog API.

Every schema serializes with camelCase keys (``iconUrl``, ``currentPage``)
because that is the contract the frontend consumes.  Python code builds
them with snake_case field names; ``populate_by_name`` allows both.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from transmog_catalog.models.hydration import HydrationReport, HydrationState

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body: ``{"error": ...}`` for 404s, ``{"error", "message"}`` for 500s."""

    error: str
    message: str | None = None


class SetItemResponse(BaseModel):
    model_config = _CAMEL

    id: int
    name: str
    icon_url: str


class TransmogResponse(BaseModel):
    """An item set with per-request icon URLs on its items."""

    model_config = _CAMEL

    id: int
    name: str
    classes: list[str]
    expansion: str
    quality: str
    items: list[SetItemResponse] = Field(default_factory=list)


class TransmogDetailResponse(TransmogResponse):
    wowhead_link: str
    image_url: str | None = None


class PaginationResponse(BaseModel):
    model_config = _CAMEL

    current_page: int
    total_items: int
    total_pages: int


class TransmogListResponse(BaseModel):
    transmogs: list[TransmogResponse]
    pagination: PaginationResponse


class FiltersResponse(BaseModel):
    classes: list[str]
    expansions: list[str]
    qualities: list[str]


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    sets: int
    hydration: HydrationState


class ConnectionResponse(BaseModel):
    connected: bool


class ItemSummaryResponse(BaseModel):
    model_config = _CAMEL

    id: int
    name: str
    quality: str
    item_class: str | None = None
    item_subclass: str | None = None
    classes: list[str]
    expansion: str


class ItemMediaResponse(BaseModel):
    model_config = _CAMEL

    id: int
    icon_url: str


class HydrationStatusResponse(BaseModel):
    model_config = _CAMEL

    state: HydrationState
    last_report: HydrationReport | None = None


class HydrationTriggerResponse(BaseModel):
    started: bool
    state: HydrationState


class CacheClearResponse(BaseModel):
    cleared: bool
    entries: int
