"""Persistent set storage and the item icon-name cache."""

from transmog_catalog.providers.store.json_icon_cache import JsonIconCache, icon_cache_key
from transmog_catalog.providers.store.json_set_store import JsonSetStore

__all__ = ["JsonIconCache", "JsonSetStore", "icon_cache_key"]
