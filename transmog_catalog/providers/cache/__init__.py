"""Response cache providers.

MemoryCacheProvider is a per-process TTL cache for rendered API responses.
It is distinct from the hydrated set store and is emptied after every
hydration run so new data shows up immediately.
"""

from transmog_catalog.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
