"""Classification heuristics for transmog sets.

Pure, deterministic functions with no I/O.  Given the raw detail payload of
a set's representative (first) member item and the set's display name,
they decide which classes can wear the set, which expansion it belongs to
and what quality it is.

Class resolution order:
    0. Gladiator disambiguation for "Gladiator's ..." PvP names
    1. Explicit allowed-class list from the item's requirements
    2. Armor-type inference from the item subclass (Plate -> plate wearers)
    3. Keyword match against the set name
First non-empty result wins; when all are empty the set is ``["All"]``.

Keyword and Gladiator tables are passed in, defaulting to the built-in
tables in :mod:`transmog_catalog.config.game_data`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from transmog_catalog.config.game_data import (
    ALL_CLASSES,
    ARMOR_CLASSES,
    CLASS_BY_KEY,
    CLASS_KEYWORDS,
    EXPANSION_BREAKPOINTS,
    GLADIATOR_HINTS,
    LATEST_EXPANSION,
    QUALITIES,
    UNKNOWN,
    class_key,
)
from transmog_catalog.models.item_set import ItemSet, SetItem
from transmog_catalog.services.payloads import localized_name


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


# ---------------------------------------------------------------------------
# Individual heuristics
# ---------------------------------------------------------------------------

def classes_from_allowed_list(api_class_names: Iterable[str]) -> list[str]:
    """Map upstream class display names onto canonical classes.

    ``"Death Knight"`` becomes ``"DeathKnight"``; unknown names are dropped.
    """
    return _dedupe(
        CLASS_BY_KEY[class_key(name)]
        for name in api_class_names
        if name and class_key(name) in CLASS_BY_KEY
    )


def classes_from_armor_type(armor_subclass: str | None) -> list[str]:
    if not armor_subclass:
        return []
    return list(ARMOR_CLASSES.get(armor_subclass.strip().lower(), []))


def classes_from_name(
    set_name: str,
    keywords: Mapping[str, list[str]] = CLASS_KEYWORDS,
) -> list[str]:
    """Return every class with a keyword contained in the lowercased name.

    Classes come back in the table's order, so a keyword shared by two
    classes yields both, the first-listed class first.
    """
    lowered = (set_name or "").lower()
    return [
        cls
        for cls, words in keywords.items()
        if any(word and word.lower() in lowered for word in words)
    ]


def classes_from_gladiator_name(
    set_name: str,
    hints: Mapping[str, list[str]] = GLADIATOR_HINTS,
) -> list[str]:
    """Disambiguate a "Gladiator's ..." set by the first matching name hint."""
    lowered = (set_name or "").lower()
    if "gladiator" not in lowered:
        return []
    for hint, classes in hints.items():
        if hint in lowered:
            return list(classes)
    return []


def expansion_from_item_id(item_id: Any) -> str:
    """Map an item id onto its expansion via the chronological breakpoints."""
    try:
        value = int(item_id)
    except (TypeError, ValueError):
        return UNKNOWN
    if value <= 0:
        return UNKNOWN
    for upper_bound, label in EXPANSION_BREAKPOINTS:
        if value < upper_bound:
            return label
    return LATEST_EXPANSION


# ---------------------------------------------------------------------------
# Payload readers
# ---------------------------------------------------------------------------

def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """A nested object, or an empty mapping when it is missing or not an object."""
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _names_from_links(container: Any) -> list[str]:
    if isinstance(container, dict):
        container = container.get("links")
    if not isinstance(container, list):
        return []
    return [localized_name(entry.get("name")) for entry in container if isinstance(entry, dict)]


def allowed_class_names(item_detail: Mapping[str, Any] | None) -> list[str]:
    """Read the explicit class restriction from any known payload shape."""
    if not isinstance(item_detail, Mapping):
        return []
    preview = _section(item_detail, "preview_item")
    requirements = _section(item_detail, "requirements")
    candidates = (
        _section(preview, "requirements").get("playable_classes"),
        requirements.get("playable_classes"),
        _section(preview, "binding").get("allowable_classes"),
        requirements.get("allowable_classes"),
    )
    for candidate in candidates:
        names = _names_from_links(candidate)
        if names:
            return names
    return []


def armor_subclass(item_detail: Mapping[str, Any] | None) -> str | None:
    if not isinstance(item_detail, Mapping):
        return None
    subclass = item_detail.get("item_subclass") or {}
    name = localized_name(subclass.get("name")) if isinstance(subclass, dict) else ""
    return name or None


def quality_from_item(item_detail: Mapping[str, Any] | None) -> str:
    """Read the rarity label from ``quality.name`` or ``quality.type``."""
    if not isinstance(item_detail, Mapping):
        return UNKNOWN
    quality = item_detail.get("quality")
    if isinstance(quality, str):
        candidates = [quality]
    elif isinstance(quality, dict):
        candidates = [localized_name(quality.get("name")), str(quality.get("type") or "")]
    else:
        return UNKNOWN
    for candidate in candidates:
        label = candidate.strip().title()
        if label in QUALITIES:
            return label
    return UNKNOWN


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_classes(
    item_detail: Mapping[str, Any] | None,
    set_name: str,
    keywords: Mapping[str, list[str]] = CLASS_KEYWORDS,
    hints: Mapping[str, list[str]] = GLADIATOR_HINTS,
) -> list[str]:
    """Run the heuristics in priority order; ``["All"]`` when none match."""
    for classes in (
        classes_from_gladiator_name(set_name, hints),
        classes_from_allowed_list(allowed_class_names(item_detail)),
        classes_from_armor_type(armor_subclass(item_detail)),
        classes_from_name(set_name, keywords),
    ):
        if classes:
            return classes
    return [ALL_CLASSES]


def classify_set(
    set_id: int,
    name: str,
    members: list[dict[str, Any]],
    item_detail: Mapping[str, Any] | None,
    keywords: Mapping[str, list[str]] = CLASS_KEYWORDS,
    hints: Mapping[str, list[str]] = GLADIATOR_HINTS,
) -> ItemSet:
    """Build the catalog record for a set from its members and first item."""
    first_id = members[0]["id"] if members else None
    return ItemSet(
        id=set_id,
        name=name,
        classes=resolve_classes(item_detail, name, keywords, hints),
        expansion=expansion_from_item_id(first_id),
        quality=quality_from_item(item_detail),
        items=[SetItem(id=m["id"], name=m.get("name") or "") for m in members],
    )


def summarize_item(item_detail: Mapping[str, Any], locale: str = "en_US") -> dict[str, Any]:
    """Flatten an upstream item payload for the item lookup endpoint."""
    item_class = item_detail.get("item_class") or {}
    return {
        "id": item_detail.get("id"),
        "name": localized_name(item_detail.get("name"), locale),
        "quality": quality_from_item(item_detail),
        "itemClass": localized_name(item_class.get("name"), locale) or None,
        "itemSubclass": armor_subclass(item_detail),
        "classes": resolve_classes(item_detail, localized_name(item_detail.get("name"), locale)),
        "expansion": expansion_from_item_id(item_detail.get("id")),
    }
