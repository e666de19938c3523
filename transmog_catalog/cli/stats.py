"""``stats`` command: summarize the cached sets."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from transmog_catalog.config.game_data import (
    ALL_CLASSES,
    CANONICAL_CLASSES,
    expansion_rank,
    quality_rank,
)
from transmog_catalog.config.settings import Settings
from transmog_catalog.models.item_set import ItemSet
from transmog_catalog.providers.store.json_set_store import JsonSetStore


def collect_stats(sets: Sequence[ItemSet]) -> dict[str, Counter]:
    """Count sets per expansion, quality and class.

    A set restricted to several classes counts once for each of them;
    unrestricted sets are counted under ``"All"``.
    """
    by_class: Counter = Counter()
    for item_set in sets:
        by_class.update(item_set.classes)
    return {
        "expansion": Counter(s.expansion for s in sets),
        "quality": Counter(s.quality for s in sets),
        "class": by_class,
    }


def _class_order(name: str) -> int:
    if name == ALL_CLASSES:
        return len(CANONICAL_CLASSES)
    return CANONICAL_CLASSES.index(name) if name in CANONICAL_CLASSES else len(CANONICAL_CLASSES) + 1


def format_stats(total: int, stats: dict[str, Counter]) -> str:
    lines = ["Catalog statistics", "=" * 40, f"  Total sets:       {total}"]

    sections = (
        ("By expansion", "expansion", expansion_rank),
        ("By quality", "quality", quality_rank),
        ("By class", "class", _class_order),
    )
    for title, key, order in sections:
        counts = stats[key]
        if not counts:
            continue
        lines.append(f"\n  {title}:")
        for label in sorted(counts, key=order):
            lines.append(f"    {label:<26} {counts[label]}")
    return "\n".join(lines)


async def handle_stats(app_settings: Settings) -> int:
    store = JsonSetStore(app_settings.cache_file)
    sets = store.load()
    if not sets:
        print(f"No sets cached in {app_settings.cache_file}.")
        return 0
    print(format_stats(len(sets), collect_stats(sets)))
    return 0
