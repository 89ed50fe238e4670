"""Shared wishlist store backed by one Redis key per collection.

Each collection is a single JSON array read and written wholesale. There is
no versioning: the last successful ``save_*`` call wins.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import structlog
from redis.exceptions import RedisError

from wishlist.core.redis import RedisConnectionPool, StoreUnavailableError
from wishlist.schemas import (
    UNCATEGORIZED,
    WishlistItem,
    dump_items,
    parse_stored_items,
)

ITEMS_KEY = "wishlist:items"
CATEGORIES_KEY = "wishlist:categories"

_LOGGER = structlog.get_logger(__name__)


class StoreError(RuntimeError):
    """Raised when the shared store rejects a write."""


def default_categories() -> list[str]:
    return [UNCATEGORIZED]


class WishlistStore:
    def __init__(self, pool: RedisConnectionPool) -> None:
        self._pool = pool

    def _read(self, key: str) -> Any | None:
        try:
            raw = self._pool.client().get(key)
        except (RedisError, StoreUnavailableError) as exc:
            _LOGGER.warning("store.read_failed", key=key, error=str(exc))
            self._pool.invalidate()
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            _LOGGER.warning("store.decode_failed", key=key, error=str(exc))
            return None

    def _write(self, key: str, value: list[Any]) -> None:
        payload = json.dumps(value)
        try:
            self._pool.client().set(key, payload)
        except (RedisError, StoreUnavailableError) as exc:
            _LOGGER.error("store.save_failed", key=key, error=str(exc))
            self._pool.invalidate()
            raise StoreError(f"Failed to save {key}") from exc
        _LOGGER.info("store.saved", key=key, count=len(value))

    def get_items(self) -> list[WishlistItem]:
        data = self._read(ITEMS_KEY)
        if not isinstance(data, list):
            return []
        items, skipped = parse_stored_items(data)
        if skipped:
            _LOGGER.warning("store.items_skipped", key=ITEMS_KEY, skipped=skipped)
        return items

    def save_items(self, items: Iterable[WishlistItem]) -> None:
        self._write(ITEMS_KEY, dump_items(items))

    def get_categories(self) -> list[str]:
        data = self._read(CATEGORIES_KEY)
        if not isinstance(data, list):
            return default_categories()
        return [str(entry) for entry in data]

    def save_categories(self, categories: Iterable[str]) -> None:
        self._write(CATEGORIES_KEY, list(categories))


__all__ = [
    "CATEGORIES_KEY",
    "ITEMS_KEY",
    "StoreError",
    "WishlistStore",
    "default_categories",
]
