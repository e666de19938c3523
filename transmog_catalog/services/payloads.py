"""Readers for raw game-data API payloads.

The upstream API has shipped several shapes for the same data over time
(wrapped vs. bare member items, plain vs. per-locale names).  These helpers
flatten them so the rest of the code only sees plain values.
"""

from __future__ import annotations

from typing import Any

PLACEHOLDER_ICON_URL = "https://render-eu.worldofwarcraft.com/icons/56/inv_misc_questionmark.jpg"
WOWHEAD_ICON_URL = "https://wow.zamimg.com/images/wow/icons/large/{icon}.jpg"


def localized_name(value: Any, locale: str = "en_US") -> str:
    """Return a display string from a plain or per-locale name field."""
    if isinstance(value, dict):
        if value.get(locale):
            return str(value[locale])
        return str(next(iter(value.values()), ""))
    return "" if value is None else str(value)


def set_members(detail: dict[str, Any] | None, locale: str = "en_US") -> list[dict[str, Any]]:
    """Flatten the member items of a set payload to ``[{id, name}, ...]``.

    Items appear either as ``{"item": {"id", "name"}}`` wrappers or as bare
    ``{"id", "name"}`` entries.  Upstream order is preserved.
    """
    members: list[dict[str, Any]] = []
    for raw in (detail or {}).get("items") or []:
        if not isinstance(raw, dict):
            continue
        ref = raw["item"] if isinstance(raw.get("item"), dict) else raw
        try:
            item_id = int(ref["id"])
        except (KeyError, TypeError, ValueError):
            continue
        members.append({"id": item_id, "name": localized_name(ref.get("name"), locale)})
    return members


def icon_url_from_media(media: dict[str, Any] | None) -> str | None:
    """Pick the ``icon`` asset URL out of an item media payload."""
    if not media:
        return None
    for asset in media.get("assets") or []:
        if isinstance(asset, dict) and asset.get("key") == "icon" and asset.get("value"):
            return str(asset["value"])
    return None


def wowhead_icon_url(icon_name: str) -> str:
    return WOWHEAD_ICON_URL.format(icon=icon_name.lower())
