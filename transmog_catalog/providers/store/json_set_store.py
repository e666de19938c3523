"""Disk-backed item set store.

Holds the full ordered list of :class:`ItemSet` records in memory and
mirrors it to a single pretty-printed JSON file.  The store is the only
source the HTTP layer reads from; the hydration pipeline is its only
writer.

Writes go to a sibling temp file which is then renamed over the target,
so a crash mid-write leaves the previous snapshot intact.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import structlog
from pydantic import ValidationError

from transmog_catalog.models.item_set import ItemSet

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_PATH = Path("data/transmogs.json")


class JsonSetStore:
    """In-memory set collection with a JSON file mirror.

    Parameters
    ----------
    path:
        Location of the cache file.  Parent directories are created on save.
    """

    def __init__(self, path: str | Path = _DEFAULT_PATH) -> None:
        self._path = Path(path)
        self._sets: list[ItemSet] = []
        self._positions: dict[int, int] = {}

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._sets)

    def __contains__(self, set_id: object) -> bool:
        return set_id in self._positions

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> list[ItemSet]:
        """Read the cache file into memory.

        A missing or unreadable file is a cold start, not an error: the
        store comes up empty.  Individual malformed records are skipped.
        """
        self._sets = []
        self._positions = {}

        if not self._path.exists():
            logger.info("set_store_cold_start", path=str(self._path))
            return self._sets

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("set_store_unreadable", path=str(self._path), error=str(exc))
            return self._sets

        if not isinstance(raw, list):
            logger.warning("set_store_unexpected_shape", path=str(self._path))
            return self._sets

        skipped = 0
        for record in raw:
            try:
                self.upsert(ItemSet.model_validate(record))
            except ValidationError:
                skipped += 1

        logger.info("set_store_loaded", path=str(self._path), sets=len(self._sets), skipped=skipped)
        return self._sets

    def dumps(self) -> str:
        """Serialize the current snapshot exactly as it is written to disk."""
        return json.dumps(
            [s.model_dump(mode="json") for s in self._sets],
            indent=2,
            ensure_ascii=False,
        )

    def save(self) -> None:
        """Overwrite the cache file with the full in-memory snapshot."""
        self._write(self.dumps())

    async def save_async(self) -> None:
        """Serialize on the event loop, then write the file off-loop."""
        text = self.dumps()
        await asyncio.to_thread(self._write, text)

    def _write(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(text + "\n", encoding="utf-8")
        os.replace(tmp_path, self._path)
        logger.debug("set_store_saved", path=str(self._path), sets=len(self._sets))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self) -> list[ItemSet]:
        """Return the live snapshot.  Callers must treat it as read-only."""
        return self._sets

    def get_by_id(self, set_id: int) -> ItemSet | None:
        position = self._positions.get(set_id)
        return self._sets[position] if position is not None else None

    def upsert(self, item_set: ItemSet) -> bool:
        """Replace the record with the same id in place, or append it.

        Returns ``True`` when the set was new.
        """
        position = self._positions.get(item_set.id)
        if position is not None:
            self._sets[position] = item_set
            return False
        self._positions[item_set.id] = len(self._sets)
        self._sets.append(item_set)
        return True
