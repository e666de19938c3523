"""Abstract base class for the best-effort community wiki scraper.

Scraping is a fallback: it fills in a set image or a member item list when
the game data API has none.  Implementations never raise from these
methods; an unreachable or reshaped page simply yields an empty result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ScrapedItem:
    """A member item parsed from a set page.

    Attributes
    ----------
    id:
        Item id taken from the item link.
    name:
        Item display name.
    icon:
        Icon file stem (e.g. ``"inv_chest_plate_17"``) when the page lists one.
    slot:
        Equipment slot number when the page lists one.
    """

    id: int
    name: str
    icon: str | None = None
    slot: int | None = None


class ISetScrapeProvider(ABC):
    """Contract for wiki-scraping fallbacks used by hydration and serving."""

    @abstractmethod
    async def get_set_image(self, set_id: int) -> str | None:
        """Return a preview image URL for the set, or ``None``."""

    @abstractmethod
    async def get_set_items(self, set_id: int) -> list[ScrapedItem]:
        """Return the member items listed on the set page (may be empty)."""

    @abstractmethod
    async def find_icon_name(self, item_name: str) -> str | None:
        """Search the wiki for *item_name* and return its icon file stem."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs."""
