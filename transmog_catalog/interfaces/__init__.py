"""Interface definitions for the external services the catalog depends on.

Concrete adapters live in ``transmog_catalog/providers/`` and are wired up
in ``transmog_catalog/main.py``:

    Interface            ->  Concrete implementation
    -------------------------------------------------------------
    IGameDataProvider    ->  BlizzardAPIProvider
    ISetScrapeProvider   ->  WowheadScrapeProvider
    ICacheProvider       ->  MemoryCacheProvider
"""

from transmog_catalog.interfaces.cache_provider import ICacheProvider
from transmog_catalog.interfaces.game_data_provider import IGameDataProvider, SetIndexEntry
from transmog_catalog.interfaces.scrape_provider import ISetScrapeProvider, ScrapedItem

__all__ = [
    "ICacheProvider",
    "IGameDataProvider",
    "ISetScrapeProvider",
    "ScrapedItem",
    "SetIndexEntry",
]
