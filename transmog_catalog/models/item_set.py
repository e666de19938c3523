"""Core catalog entities: transmog item sets and their member items.

Both models are frozen pydantic v2 models.  An update is expressed as a new
instance (``item_set.model_copy(update={...})``), which the set store then
upserts by primary key.  The serialized form of :class:`ItemSet` is exactly
the record written to the cache file:

    {"id": 1060, "name": "Dreadnaught's Battlegear",
     "classes": ["Warrior"], "expansion": "Classic", "quality": "Epic",
     "items": [{"id": 22416, "name": "Dreadnaught Breastplate"}, ...]}

Item icon URLs are intentionally absent: they are resolved per request by
the serving layer and never persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transmog_catalog.config.game_data import (
    ALL_CLASSES,
    CLASS_BY_KEY,
    UNKNOWN,
    class_key,
)

WOWHEAD_SET_URL = "https://www.wowhead.com/item-set={id}"


def normalize_classes(values: list[str] | None) -> list[str]:
    """Map raw class strings onto the canonical enumeration.

    Unknown names are dropped, duplicates collapse onto their first
    occurrence, and an empty result (or any ``"All"``) becomes ``["All"]``.
    """
    resolved: list[str] = []
    for value in values or []:
        if class_key(value) == class_key(ALL_CLASSES):
            return [ALL_CLASSES]
        canonical = CLASS_BY_KEY.get(class_key(value))
        if canonical and canonical not in resolved:
            resolved.append(canonical)
    return resolved or [ALL_CLASSES]


class SetItem(BaseModel):
    """A member item reference inside an item set (upstream order preserved)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""


class ItemSet(BaseModel):
    """A named transmog set as stored in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    # Ordered canonical class names, or ["All"] when unrestricted/undetermined.
    classes: list[str] = Field(default_factory=lambda: [ALL_CLASSES])
    expansion: str = UNKNOWN
    quality: str = UNKNOWN
    items: list[SetItem] = Field(default_factory=list)

    @field_validator("classes", mode="before")
    @classmethod
    def _canonical_classes(cls, value: list[str] | None) -> list[str]:
        if isinstance(value, str):
            value = [value]
        return normalize_classes(value)

    @property
    def is_unrestricted(self) -> bool:
        return self.classes == [ALL_CLASSES]

    @property
    def wowhead_link(self) -> str:
        return WOWHEAD_SET_URL.format(id=self.id)

    def needs_refresh(self) -> bool:
        """True while classification is still incomplete.

        Hydration re-fetches such sets on every run until a later pass
        resolves an expansion and a class list.
        """
        return self.expansion == UNKNOWN or self.is_unrestricted
