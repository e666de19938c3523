"""Request descriptor and result page for catalog queries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from transmog_catalog.models.item_set import ItemSet

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SetQuery(BaseModel):
    """Filters and pagination for one list request.

    ``None`` or ``"all"`` (any case) for a filter means "do not filter".
    ``page`` is 0-based.
    """

    model_config = ConfigDict(frozen=True)

    search: str | None = None
    class_name: str | None = None
    expansion: str | None = None
    quality: str | None = None
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class SetPage(BaseModel):
    """One page of filtered sets plus pagination metadata."""

    model_config = ConfigDict(frozen=True)

    items: list[ItemSet] = Field(default_factory=list)
    current_page: int = 0
    total_items: int = 0
    total_pages: int = 0
