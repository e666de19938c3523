"""Item icon-name cache used by the token-free icon tooling.

Maps ``"<item name lowercased>_<slot>"`` to a Wowhead icon name (the file
stem under ``/images/wow/icons/large/``).  The mapping is a flat JSON
object on disk and is saved with the same temp-file-and-rename pattern as
the set store.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_PATH = Path("data/item_cache.json")


def icon_cache_key(item_name: str, slot: int | str | None) -> str:
    return f"{item_name.lower()}_{'unknown' if slot is None else slot}"


class JsonIconCache:
    """Name+slot to icon-name mapping mirrored to a JSON file."""

    def __init__(self, path: str | Path = _DEFAULT_PATH) -> None:
        self._path = Path(path)
        self._icons: dict[str, str] = {}

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._icons)

    def load(self) -> int:
        """Read the cache file; a missing or corrupt file starts empty."""
        self._icons = {}
        if not self._path.exists():
            return 0
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("icon_cache_unreadable", path=str(self._path), error=str(exc))
            return 0
        if isinstance(raw, dict):
            self._icons = {str(k): str(v) for k, v in raw.items() if v}
        logger.info("icon_cache_loaded", path=str(self._path), entries=len(self._icons))
        return len(self._icons)

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(self._icons, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        os.replace(tmp_path, self._path)

    def get(self, item_name: str, slot: int | str | None) -> str | None:
        return self._icons.get(icon_cache_key(item_name, slot))

    def set(self, item_name: str, slot: int | str | None, icon_name: str) -> None:
        self._icons[icon_cache_key(item_name, slot)] = icon_name
