"""Blizzard Game Data API provider."""

from transmog_catalog.providers.blizzard.blizzard_api_provider import BlizzardAPIProvider

__all__ = ["BlizzardAPIProvider"]
