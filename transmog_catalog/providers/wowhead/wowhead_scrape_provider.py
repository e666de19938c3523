"""Wowhead web-scraping fallback provider.

Implements ISetScrapeProvider by scraping public Wowhead pages.  Used only
when the game data API has no image or no member items for a set, and by
the token-free ``icons`` CLI command.

Scraping is best-effort: page layouts change without notice.  Internally a
failed fetch or parse raises :class:`ScrapeError`; the public methods catch
it and return an empty result, so callers never see scrape failures.
Requests are throttled to a minimum interval and parsed with BeautifulSoup.
"""

from __future__ import annotations

import asyncio
import json
import re
import time
from typing import Any
from urllib.parse import quote_plus

import httpx
from bs4 import BeautifulSoup
from cachetools import TTLCache

from transmog_catalog.interfaces.scrape_provider import ISetScrapeProvider, ScrapedItem
from transmog_catalog.services.payloads import wowhead_icon_url
from transmog_catalog.utils.errors import ScrapeError
from transmog_catalog.utils.logging import get_logger

_PROVIDER_NAME = "wowhead"
_BASE_URL = "https://www.wowhead.com"
_SET_URL = _BASE_URL + "/item-set={id}"
_SEARCH_URL = _BASE_URL + "/search?q={query}"
_DRESS_URLS = (
    "https://wow.zamimg.com/images/wow/dress/{id}.jpg",
    "https://wow.zamimg.com/images/wow/dress/{id}.png",
)
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)
_SCRAPE_DELAY = 1.0  # seconds between page fetches
_CACHE_TTL = 3600
_CACHE_SIZE = 2048

_ITEM_HREF_RE = re.compile(r"/item=(\d+)")
_ICON_RE = re.compile(r"/images/wow/icons/(?:tiny|small|medium|large)/([^./\"'\s)]+)\.(?:jpg|png)")
_LISTVIEW_RE = re.compile(r"new Listview\(\{[^;]*?id\s*:\s*['\"]items['\"]", re.DOTALL)
_LISTVIEW_DATA_RE = re.compile(r"\b(?:data|items)\s*:\s*\[")
_G_ITEMS_RE = re.compile(r"var g_items\s*=\s*\[")
_REJECTED_IMAGE_MARKERS = ("share-icon", "logo")
_IMAGE_MARKERS = ("dress", "modelviewer", "screenshots")


# -- Pure parsing helpers (no I/O) ----------------------------------------------

def _decode_array_at(text: str, start: int) -> list[Any]:
    """Decode the JSON array beginning at ``text[start] == '['``."""
    try:
        value, _ = json.JSONDecoder().raw_decode(text, start)
    except ValueError as exc:
        raise ScrapeError(
            message="embedded item data is not valid JSON", provider_name=_PROVIDER_NAME
        ) from exc
    if not isinstance(value, list):
        raise ScrapeError(message="embedded item data is not a list", provider_name=_PROVIDER_NAME)
    return value


def _items_from_json(raw_items: list[Any]) -> list[ScrapedItem]:
    items: list[ScrapedItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict) or not raw.get("id"):
            continue
        try:
            item_id = int(raw["id"])
        except (TypeError, ValueError):
            continue
        slot = raw.get("slot", raw.get("invType"))
        items.append(
            ScrapedItem(
                id=item_id,
                name=str(raw.get("name") or "Unknown Item"),
                icon=str(raw["icon"]).lower() if raw.get("icon") else None,
                slot=int(slot) if isinstance(slot, int) else None,
            )
        )
    return items


def parse_listview_items(html: str) -> list[ScrapedItem]:
    """Parse the ``new Listview({id: "items", data: [...]})`` script block."""
    match = _LISTVIEW_RE.search(html)
    if not match:
        return []
    data_match = _LISTVIEW_DATA_RE.search(html, match.end())
    if not data_match:
        return []
    try:
        return _items_from_json(_decode_array_at(html, data_match.end() - 1))
    except ScrapeError:
        return []


def parse_table_items(soup: BeautifulSoup) -> list[ScrapedItem]:
    """Parse item rows from any table containing ``/item=`` links."""
    items: list[ScrapedItem] = []
    seen: set[int] = set()
    for table in soup.find_all("table"):
        if not table.find("a", href=_ITEM_HREF_RE):
            continue
        for row in table.find_all("tr"):
            if row.find("th"):
                continue
            link = row.find("a", href=_ITEM_HREF_RE)
            if link is None:
                continue
            id_match = _ITEM_HREF_RE.search(link.get("href", ""))
            if not id_match:
                continue
            item_id = int(id_match.group(1))
            if item_id in seen:
                continue
            seen.add(item_id)
            icon_match = _ICON_RE.search(str(row))
            items.append(
                ScrapedItem(
                    id=item_id,
                    name=link.get_text(strip=True) or "Unknown Item",
                    icon=icon_match.group(1).lower() if icon_match else None,
                )
            )
    return items


def parse_g_items(html: str) -> list[ScrapedItem]:
    """Parse a legacy ``var g_items = [...]`` script variable."""
    match = _G_ITEMS_RE.search(html)
    if not match:
        return []
    try:
        return _items_from_json(_decode_array_at(html, match.end() - 1))
    except ScrapeError:
        return []


def parse_set_items(html: str) -> list[ScrapedItem]:
    """Extract member items from a set page, trying each known layout in turn."""
    items = parse_listview_items(html)
    if items:
        return items
    items = parse_table_items(BeautifulSoup(html, "html.parser"))
    if items:
        return items
    return parse_g_items(html)


def parse_set_image(html: str) -> str | None:
    """Return the best preview image on a set page, or ``None``."""
    soup = BeautifulSoup(html, "html.parser")

    og = soup.find("meta", attrs={"property": "og:image"})
    og_url = og.get("content") if og else None
    if og_url and not any(marker in og_url for marker in _REJECTED_IMAGE_MARKERS):
        return og_url

    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src") or ""
        if not src.endswith(".jpg"):
            continue
        if any(marker in src for marker in _REJECTED_IMAGE_MARKERS):
            continue
        if any(marker in src for marker in _IMAGE_MARKERS):
            return src if src.startswith("http") else f"{_BASE_URL}{src}"
    return None


def parse_icon_name(html: str) -> str | None:
    match = _ICON_RE.search(html)
    return match.group(1).lower() if match else None


class WowheadScrapeProvider(ISetScrapeProvider):
    """Fallback set data provider that scrapes Wowhead pages.

    No credentials are required.  Results are memoized in a TTL cache so
    the serving layer can call the fallback on every detail request.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability.
    scrape_delay:
        Minimum seconds between page fetches.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        scrape_delay: float = _SCRAPE_DELAY,
    ) -> None:
        self._http = http_client
        self._scrape_delay = scrape_delay
        self._last_request_time: float = 0.0
        self._images: TTLCache[int, str | None] = TTLCache(maxsize=_CACHE_SIZE, ttl=_CACHE_TTL)
        self._items: TTLCache[int, list[ScrapedItem]] = TTLCache(maxsize=_CACHE_SIZE, ttl=_CACHE_TTL)
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce minimum delay between scrape requests."""
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if self._last_request_time > 0 and elapsed < self._scrape_delay:
            await asyncio.sleep(self._scrape_delay - elapsed)
        self._last_request_time = time.monotonic()

    async def _fetch_page(self, url: str) -> str:
        """Fetch *url* and return its HTML; raises ScrapeError on any failure."""
        await self._throttle()
        try:
            response = await self._http.get(
                url,
                headers={"User-Agent": _USER_AGENT, "Accept": "text/html,application/xhtml+xml"},
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            raise ScrapeError(message=f"{url}: {exc}", provider_name=_PROVIDER_NAME) from exc
        if response.status_code != 200:
            raise ScrapeError(
                message=f"{url}: HTTP {response.status_code}", provider_name=_PROVIDER_NAME
            )
        return response.text

    async def _exists(self, url: str) -> bool:
        try:
            response = await self._http.head(
                url, headers={"User-Agent": _USER_AGENT}, follow_redirects=True
            )
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    # -- ISetScrapeProvider implementation ---------------------------------------

    async def get_set_image(self, set_id: int) -> str | None:
        if set_id in self._images:
            return self._images[set_id]

        image: str | None = None
        for template in _DRESS_URLS:
            url = template.format(id=set_id)
            if await self._exists(url):
                image = url
                break

        if image is None:
            try:
                image = parse_set_image(await self._fetch_page(_SET_URL.format(id=set_id)))
            except ScrapeError as exc:
                self._logger.debug("wowhead_set_image_failed", set_id=set_id, error=str(exc))
                return None

        self._images[set_id] = image
        self._logger.debug("wowhead_set_image", set_id=set_id, found=image is not None)
        return image

    async def get_set_items(self, set_id: int) -> list[ScrapedItem]:
        if set_id in self._items:
            return self._items[set_id]
        try:
            items = parse_set_items(await self._fetch_page(_SET_URL.format(id=set_id)))
        except ScrapeError as exc:
            self._logger.debug("wowhead_set_items_failed", set_id=set_id, error=str(exc))
            return []

        if items:
            self._items[set_id] = items
        self._logger.info("wowhead_set_items", set_id=set_id, count=len(items))
        return items

    async def find_icon_name(self, item_name: str) -> str | None:
        try:
            html = await self._fetch_page(_SEARCH_URL.format(query=quote_plus(item_name)))
        except ScrapeError as exc:
            self._logger.debug("wowhead_search_failed", item=item_name, error=str(exc))
            return None
        return parse_icon_name(html)

    async def fetch_icon(self, icon_name: str) -> bytes | None:
        """Download the large icon image for *icon_name*, or ``None`` on failure."""
        try:
            response = await self._http.get(wowhead_icon_url(icon_name), follow_redirects=True)
        except httpx.HTTPError as exc:
            self._logger.warning("wowhead_icon_download_failed", icon=icon_name, error=str(exc))
            return None
        if response.status_code != 200:
            self._logger.warning(
                "wowhead_icon_download_failed", icon=icon_name, status=response.status_code
            )
            return None
        return response.content

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
