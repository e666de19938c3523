"""Filtering, pagination and filter-option listing over the set snapshot.

Pure functions: they take the in-memory list and a :class:`SetQuery` and
never touch the network or the disk.  All supplied filters combine with
logical AND; an omitted filter, or the value ``"all"``, is a no-op.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from transmog_catalog.config.game_data import (
    ALL_CLASSES,
    CANONICAL_CLASSES,
    CLASS_BY_KEY,
    class_key,
    expansion_rank,
    quality_rank,
)
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.models.query import SetPage, SetQuery


def _is_active(value: str | None) -> bool:
    return bool(value and value.strip() and value.strip().lower() != "all")


def _matches_class(item_set: ItemSet, wanted: str) -> bool:
    """Unrestricted sets always match.

    A full class name matches that class only, so ``hunter`` does not pull in
    DemonHunter sets; anything else falls back to a substring match on class
    keys.
    """
    if ALL_CLASSES in item_set.classes:
        return True
    wanted_key = class_key(wanted)
    if not wanted_key:
        return True
    keys = [class_key(cls) for cls in item_set.classes]
    if wanted_key in CLASS_BY_KEY:
        return wanted_key in keys
    return any(wanted_key in key for key in keys)


def filter_sets(sets: Sequence[ItemSet], query: SetQuery) -> list[ItemSet]:
    """Apply search and class/expansion/quality filters, preserving order."""
    result = list(sets)

    if query.search and query.search.strip():
        needle = query.search.strip().lower()
        result = [s for s in result if needle in s.name.lower()]

    if _is_active(query.class_name):
        result = [s for s in result if _matches_class(s, query.class_name or "")]

    if _is_active(query.expansion):
        result = [s for s in result if s.expansion == query.expansion]

    if _is_active(query.quality):
        result = [s for s in result if s.quality == query.quality]

    return result


def paginate(sets: Sequence[ItemSet], page: int, limit: int) -> SetPage:
    """Slice a filtered list into one 0-based page."""
    total = len(sets)
    start = page * limit
    return SetPage(
        items=list(sets[start:start + limit]),
        current_page=page,
        total_items=total,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def query_sets(sets: Sequence[ItemSet], query: SetQuery) -> SetPage:
    """Filter then paginate; pagination always applies after every filter."""
    return paginate(filter_sets(sets, query), query.page, query.limit)


def select_by_ids(sets: Sequence[ItemSet], ids: Sequence[int]) -> list[ItemSet]:
    """Return the sets whose id is in *ids*, in the order requested."""
    by_id = {s.id: s for s in sets}
    seen: set[int] = set()
    selected: list[ItemSet] = []
    for set_id in ids:
        if set_id in by_id and set_id not in seen:
            seen.add(set_id)
            selected.append(by_id[set_id])
    return selected


def filter_options(sets: Sequence[ItemSet]) -> dict[str, list[str]]:
    """List the distinct classes, expansions and qualities present.

    Classes follow the canonical class order, expansions the chronological
    table, qualities the rarity ladder; unknown labels sort last.
    """
    classes: set[str] = set()
    expansions: set[str] = set()
    qualities: set[str] = set()
    for item_set in sets:
        classes.update(c for c in item_set.classes if c != ALL_CLASSES)
        expansions.add(item_set.expansion)
        qualities.add(item_set.quality)

    return {
        "classes": [c for c in CANONICAL_CLASSES if c in classes],
        "expansions": sorted(expansions, key=lambda e: (expansion_rank(e), e)),
        "qualities": sorted(qualities, key=lambda q: (quality_rank(q), q)),
    }
