"""Wowhead scrape fallback provider."""

from transmog_catalog.providers.wowhead.wowhead_scrape_provider import WowheadScrapeProvider

__all__ = ["WowheadScrapeProvider"]
