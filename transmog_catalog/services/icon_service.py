"""On-demand icon resolution for the serving layer.

Icon URLs are looked up from the game data API's item media endpoint every
time a response is built and are never written to the set store.  Rendered
responses are memoized by the response cache, so an icon can be at most
one response-cache TTL out of date.

A failed lookup, or a deployment without API credentials, yields the
placeholder icon rather than an error.
"""

from __future__ import annotations

from collections.abc import Iterable

from transmog_catalog.interfaces.game_data_provider import IGameDataProvider
from transmog_catalog.interfaces.scrape_provider import ISetScrapeProvider
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.services.payloads import PLACEHOLDER_ICON_URL, icon_url_from_media
from transmog_catalog.utils.concurrency import gather_settled
from transmog_catalog.utils.errors import TransmogCatalogError
from transmog_catalog.utils.logging import get_logger

_DEFAULT_CONCURRENCY = 5


class IconService:
    """Resolves item icons and set preview images for API responses.

    Parameters
    ----------
    game_data:
        Upstream API client used for item media lookups.
    scraper:
        Optional scrape fallback for set preview images.
    concurrency:
        Maximum media lookups in flight per response.
    """

    def __init__(
        self,
        game_data: IGameDataProvider,
        scraper: ISetScrapeProvider | None = None,
        concurrency: int = _DEFAULT_CONCURRENCY,
    ) -> None:
        self._game_data = game_data
        self._scraper = scraper
        self._concurrency = concurrency
        self._logger = get_logger(__name__)

    async def icon_for_item(self, item_id: int) -> str:
        if not self._game_data.is_available():
            return PLACEHOLDER_ICON_URL
        try:
            media = await self._game_data.get_item_media(item_id)
        except TransmogCatalogError as exc:
            self._logger.debug("icon_lookup_failed", item_id=item_id, error=str(exc))
            return PLACEHOLDER_ICON_URL
        return icon_url_from_media(media) or PLACEHOLDER_ICON_URL

    async def resolve_icons(self, item_ids: Iterable[int]) -> dict[int, str]:
        """Resolve each distinct item id once; returns ``{item_id: icon_url}``."""
        unique_ids = list(dict.fromkeys(item_ids))
        if not unique_ids:
            return {}
        results = await gather_settled(
            [self.icon_for_item(item_id) for item_id in unique_ids],
            limit=self._concurrency,
            logger=self._logger,
            error_msg="icon_lookup_crashed",
        )
        return {
            item_id: result or PLACEHOLDER_ICON_URL
            for item_id, result in zip(unique_ids, results)
        }

    async def resolve_set_icons(self, sets: Iterable[ItemSet]) -> dict[int, str]:
        return await self.resolve_icons(item.id for s in sets for item in s.items)

    async def set_image(self, item_set: ItemSet, icons: dict[int, str]) -> str | None:
        """First resolved item icon, else the scraped set image, else ``None``."""
        for item in item_set.items:
            icon = icons.get(item.id)
            if icon and icon != PLACEHOLDER_ICON_URL:
                return icon
        if self._scraper is None:
            return None
        return await self._scraper.get_set_image(item_set.id)
