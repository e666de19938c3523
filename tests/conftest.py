"""Shared pytest fixtures for the transmog catalog test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from transmog_catalog.config.settings import Settings
from transmog_catalog.interfaces.game_data_provider import IGameDataProvider, SetIndexEntry
from transmog_catalog.interfaces.scrape_provider import ISetScrapeProvider, ScrapedItem
from transmog_catalog.models.item_set import ItemSet, SetItem
from transmog_catalog.providers.store.json_set_store import JsonSetStore
from transmog_catalog.utils.errors import UpstreamError

# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------


def set_detail(set_id: int, name: str, item_ids: list[int]) -> dict[str, Any]:
    """Build an upstream item-set payload with wrapped member items."""
    return {
        "id": set_id,
        "name": name,
        "items": [{"item": {"id": i, "name": f"Item {i}"}} for i in item_ids],
    }


def item_detail(
    item_id: int,
    subclass: str | None = None,
    quality: str = "Epic",
    classes: list[str] | None = None,
) -> dict[str, Any]:
    """Build an upstream item payload, optionally with a class restriction."""
    payload: dict[str, Any] = {
        "id": item_id,
        "name": f"Item {item_id}",
        "quality": {"type": quality.upper(), "name": quality},
        "item_class": {"name": "Armor"},
    }
    if subclass is not None:
        payload["item_subclass"] = {"name": subclass}
    if classes is not None:
        payload["preview_item"] = {
            "requirements": {
                "playable_classes": {"links": [{"name": c} for c in classes]},
            }
        }
    return payload


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeGameDataProvider(IGameDataProvider):
    """In-memory upstream: index, set details, item details and media.

    ``failing_sets`` raise UpstreamError from the set detail call;
    ``index_error`` makes the index call raise.
    """

    def __init__(
        self,
        index: list[SetIndexEntry] | None = None,
        sets: dict[int, dict[str, Any]] | None = None,
        items: dict[int, dict[str, Any]] | None = None,
        media: dict[int, dict[str, Any]] | None = None,
        failing_sets: set[int] | None = None,
        index_error: Exception | None = None,
        available: bool = True,
    ) -> None:
        self.index = index or []
        self.sets = sets or {}
        self.items = items or {}
        self.media = media or {}
        self.failing_sets = failing_sets or set()
        self.index_error = index_error
        self.available = available
        self.set_calls: list[int] = []
        self.media_calls: list[int] = []

    async def get_token(self) -> str:
        return "fake-token"

    async def get_index(self) -> list[SetIndexEntry]:
        if self.index_error is not None:
            raise self.index_error
        return list(self.index)

    async def get_set_detail(self, set_id: int) -> dict[str, Any] | None:
        self.set_calls.append(set_id)
        if set_id in self.failing_sets:
            raise UpstreamError(message=f"set {set_id} timed out", provider_name="fake")
        return self.sets.get(set_id)

    async def get_item_detail(self, item_id: int) -> dict[str, Any] | None:
        return self.items.get(item_id)

    async def get_item_media(self, item_id: int) -> dict[str, Any] | None:
        self.media_calls.append(item_id)
        return self.media.get(item_id)

    def get_provider_name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return self.available


class FakeScrapeProvider(ISetScrapeProvider):
    def __init__(
        self,
        images: dict[int, str] | None = None,
        items: dict[int, list[ScrapedItem]] | None = None,
        icons: dict[str, str] | None = None,
    ) -> None:
        self.images = images or {}
        self.items = items or {}
        self.icons = icons or {}
        self.icon_downloads: list[str] = []

    async def get_set_image(self, set_id: int) -> str | None:
        return self.images.get(set_id)

    async def get_set_items(self, set_id: int) -> list[ScrapedItem]:
        return self.items.get(set_id, [])

    async def find_icon_name(self, item_name: str) -> str | None:
        return self.icons.get(item_name)

    async def fetch_icon(self, icon_name: str) -> bytes | None:
        self.icon_downloads.append(icon_name)
        return b"\xff\xd8fakejpeg"

    def get_provider_name(self) -> str:
        return "fake-scraper"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with credentials and file paths under ``tmp_path``."""
    return Settings(
        blizzard_client_id="test-id",
        blizzard_client_secret="test-secret",
        cache_file=str(tmp_path / "transmogs.json"),
        item_cache_file=str(tmp_path / "item_cache.json"),
        config_file=str(tmp_path / "missing.yaml"),
        hydration_on_startup=False,
        _env_file=None,
    )


@pytest.fixture
def sample_sets() -> list[ItemSet]:
    return [
        ItemSet(
            id=1060,
            name="Dreadnaught's Battlegear",
            classes=["Warrior"],
            expansion="Classic",
            quality="Epic",
            items=[SetItem(id=22416, name="Dreadnaught Breastplate")],
        ),
        ItemSet(
            id=2001,
            name="Vestments of Faith",
            classes=["Priest"],
            expansion="Burning Crusade",
            quality="Epic",
            items=[SetItem(id=30150, name="Vestments of the Faithful")],
        ),
        ItemSet(
            id=3002,
            name="Wanderer's Regalia",
            classes=["All"],
            expansion="Legion",
            quality="Rare",
            items=[SetItem(id=140000, name="Wanderer's Robe")],
        ),
        ItemSet(
            id=4003,
            name="Scourgelord Battlegear",
            classes=["DeathKnight"],
            expansion="Wrath of the Lich King",
            quality="Epic",
            items=[SetItem(id=51125, name="Sanctified Scourgelord Helmet")],
        ),
    ]


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "transmogs.json"


@pytest.fixture
def populated_store(store_path: Path, sample_sets: list[ItemSet]) -> JsonSetStore:
    store = JsonSetStore(store_path)
    for item_set in sample_sets:
        store.upsert(item_set)
    return store
