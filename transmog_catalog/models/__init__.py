"""Transmog catalog domain models.

Organized by concern:
    - item_set.py   -- ItemSet and SetItem, the persisted catalog records
    - hydration.py  -- run state and per-set / per-batch / per-run reports
    - query.py      -- list request descriptor and result page
"""

from __future__ import annotations

from transmog_catalog.models.hydration import (
    BatchReport,
    HydrationReport,
    HydrationState,
    SetFailure,
    SetOutcome,
)
from transmog_catalog.models.item_set import ItemSet, SetItem, normalize_classes
from transmog_catalog.models.query import SetPage, SetQuery

__all__ = [
    "BatchReport",
    "HydrationReport",
    "HydrationState",
    "ItemSet",
    "SetFailure",
    "SetItem",
    "SetOutcome",
    "SetPage",
    "SetQuery",
    "normalize_classes",
]
