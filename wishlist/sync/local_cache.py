"""Durable client-side cache stored as one JSON document on disk."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

import structlog

from wishlist.schemas import (
    UNCATEGORIZED,
    WishlistItem,
    dump_items,
    parse_stored_items,
)
from wishlist.services.icons import CategoryIcon, normalize_icon_map

ITEMS_KEY = "wishlist-items"
CATEGORIES_KEY = "wishlist-categories"
CATEGORY_ICONS_KEY = "wishlist-category-icons"

_LOGGER = structlog.get_logger(__name__)


class LocalCache:
    """Key/value cache that survives restarts.

    Each write replaces the file atomically (temp file + ``os.replace``), so a
    crash mid-write leaves the previous snapshot intact. Unreadable or
    malformed entries are logged and read back as defaults.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            _LOGGER.warning(
                "local_cache.read_failed", path=str(self._path), error=str(exc)
            )
            return {}
        try:
            data = json.loads(raw)
        except ValueError as exc:
            _LOGGER.warning(
                "local_cache.decode_failed", path=str(self._path), error=str(exc)
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _store(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._load().get(key)

    def set_many(self, values: dict[str, Any]) -> None:
        with self._lock:
            data = self._load()
            data.update(values)
            self._store(data)

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def load_items(self) -> list[WishlistItem]:
        raw = self.get(ITEMS_KEY)
        if not isinstance(raw, list):
            return []
        items, skipped = parse_stored_items(raw)
        if skipped:
            _LOGGER.warning("local_cache.items_skipped", skipped=skipped)
        return items

    def load_categories(self) -> list[str]:
        raw = self.get(CATEGORIES_KEY)
        if not isinstance(raw, list):
            return [UNCATEGORIZED]
        return [str(name) for name in raw]

    def load_category_icons(self) -> dict[str, CategoryIcon]:
        raw = self.get(CATEGORY_ICONS_KEY)
        return normalize_icon_map(raw if isinstance(raw, dict) else None)

    def save_items(self, items: list[WishlistItem]) -> None:
        self.set(ITEMS_KEY, dump_items(items))

    def save_categories(
        self, categories: list[str], icons: dict[str, CategoryIcon]
    ) -> None:
        self.set_many(
            {
                CATEGORIES_KEY: list(categories),
                CATEGORY_ICONS_KEY: {name: str(icon) for name, icon in icons.items()},
            }
        )

    def save_snapshot(
        self,
        items: list[WishlistItem],
        categories: list[str],
        icons: dict[str, CategoryIcon],
    ) -> None:
        self.set_many(
            {
                ITEMS_KEY: dump_items(items),
                CATEGORIES_KEY: list(categories),
                CATEGORY_ICONS_KEY: {name: str(icon) for name, icon in icons.items()},
            }
        )


__all__ = ["CATEGORIES_KEY", "CATEGORY_ICONS_KEY", "ITEMS_KEY", "LocalCache"]
