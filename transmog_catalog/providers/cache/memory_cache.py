"""In-memory response cache using cachetools.TTLCache.

Holds icon-enriched list, detail and batch responses for a single-process
deployment.  Can be swapped for a shared backend via ICacheProvider.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from transmog_catalog.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds applied to every entry.
    """

    def __init__(self, max_size: int = 512, ttl: int = 3600) -> None:
        self._default_ttl = ttl
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)

    @property
    def ttl(self) -> int:
        return self._default_ttl

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, key: str) -> Any | None:
        value = self._cache.get(key)
        logger.debug("cache_hit" if value is not None else "cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``TTLCache`` applies one TTL to every entry, so a per-item *ttl* is
        accepted for interface compatibility and ignored.
        """
        self._cache[key] = value
        logger.debug("cache_set", key=key)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return key in self._cache

    async def clear(self) -> int:
        # Expire first so the count reflects only live entries.
        self._cache.expire()
        dropped = len(self._cache)
        self._cache.clear()
        logger.info("cache_cleared", dropped=dropped)
        return dropped
