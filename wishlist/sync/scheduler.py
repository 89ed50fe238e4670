"""Client-side wishlist state with local persistence and debounced sync.

``SyncScheduler`` owns the in-memory :class:`WishlistState`. Every mutation
is written to the local cache before the method returns; pushes to the
shared store are debounced per collection and always send the latest
snapshot. :meth:`SyncScheduler.start` performs the load, merge and
write-back sequence used when a client opens the wishlist.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

import structlog

from wishlist.core.config import Settings, settings
from wishlist.schemas import WishlistItem
from wishlist.services import catalog
from wishlist.services.catalog import WishlistState
from wishlist.services.icons import CategoryIcon
from wishlist.services.reconcile import merge_categories, merge_items
from wishlist.sync.debounce import (
    Debouncer,
    DelayedTaskScheduler,
    ThreadingScheduler,
)
from wishlist.sync.local_cache import LocalCache
from wishlist.sync.remote import PreviewRequestError, RemoteWishlistClient

PreviewSource = Callable[[str], Mapping[str, Any]]
Clock = Callable[[], int]

T = TypeVar("T")

_LOGGER = structlog.get_logger(__name__)


class AddItemError(RuntimeError):
    """Raised when a new item cannot be created from its URL."""


def _result_or_default(future: Future[T], default: T, *, source: str) -> T:
    try:
        return future.result()
    except Exception as exc:
        _LOGGER.warning("sync.startup_load_failed", source=source, error=str(exc))
        return default


class SyncScheduler:
    def __init__(
        self,
        cache: LocalCache,
        remote: RemoteWishlistClient,
        *,
        scheduler: DelayedTaskScheduler | None = None,
        debounce_seconds: float = 1.0,
        preview_source: PreviewSource | None = None,
        clock: Clock = catalog.now_millis,
    ) -> None:
        self._cache = cache
        self._remote = remote
        self._preview_source = preview_source or remote.fetch_preview
        self._clock = clock
        self._lock = threading.RLock()
        self._state = WishlistState()
        timer = scheduler or ThreadingScheduler()
        self._items_debouncer = Debouncer(timer, debounce_seconds, name="items")
        self._categories_debouncer = Debouncer(
            timer, debounce_seconds, name="categories"
        )

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        *,
        scheduler: DelayedTaskScheduler | None = None,
        preview_source: PreviewSource | None = None,
    ) -> SyncScheduler:
        config = config or settings
        return cls(
            LocalCache(config.local_cache_path),
            RemoteWishlistClient(config),
            scheduler=scheduler,
            debounce_seconds=config.sync_debounce_seconds,
            preview_source=preview_source,
        )

    @property
    def state(self) -> WishlistState:
        with self._lock:
            return self._state

    @property
    def items(self) -> list[WishlistItem]:
        return list(self.state.items)

    @property
    def categories(self) -> list[str]:
        return list(self.state.categories)

    @property
    def category_icons(self) -> dict[str, CategoryIcon]:
        return dict(self.state.category_icons)

    # Startup flow

    def load_local(self) -> WishlistState:
        """Read the local cache into memory without touching the network."""

        state = WishlistState(
            items=self._cache.load_items(),
            categories=self._cache.load_categories(),
            category_icons=self._cache.load_category_icons(),
        )
        with self._lock:
            self._state = state
        _LOGGER.info(
            "sync.local_loaded",
            items=len(state.items),
            categories=len(state.categories),
        )
        return state

    def start(self) -> WishlistState:
        """Merge the local cache with the shared store and write both back."""

        local = self.load_local()

        with ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="wishlist-load"
        ) as pool:
            items_future = pool.submit(self._remote.load_items)
            categories_future = pool.submit(self._remote.load_categories)
            remote_items: list[WishlistItem] = _result_or_default(
                items_future, [], source="items"
            )
            remote_categories: list[str] = _result_or_default(
                categories_future, [], source="categories"
            )

        with self._lock:
            # Mutations applied while the remote loads were in flight are kept.
            current = self._state
            merged = WishlistState(
                items=merge_items(current.items, remote_items),
                categories=merge_categories(current.categories, remote_categories),
                category_icons=dict(current.category_icons),
            )
            self._state = merged
            self._cache.save_snapshot(
                merged.items, merged.categories, merged.category_icons
            )
        _LOGGER.info(
            "sync.merged",
            local_items=len(local.items),
            remote_items=len(remote_items),
            items=len(merged.items),
            categories=len(merged.categories),
        )

        self._remote.push_items(merged.items)
        self._remote.push_categories(merged.categories)
        return merged

    # Mutation flow

    def _apply(
        self, operation: Callable[..., WishlistState], *args: Any
    ) -> WishlistState:
        with self._lock:
            previous = self._state
            updated = operation(previous, *args)
            if updated is previous:
                return updated
            items_changed = updated.items != previous.items
            categories_changed = updated.categories != previous.categories
            icons_changed = updated.category_icons != previous.category_icons
            self._state = updated

            if items_changed:
                self._cache.save_items(updated.items)
            if categories_changed or icons_changed:
                self._cache.save_categories(
                    updated.categories, updated.category_icons
                )

            if items_changed:
                self._items_debouncer.schedule(self._push_items)
            if categories_changed:
                self._categories_debouncer.schedule(self._push_categories)
            return updated

    def _push_items(self) -> None:
        self._remote.push_items(self.state.items)

    def _push_categories(self) -> None:
        self._remote.push_categories(self.state.categories)

    def add_item(self, url: str, category: str | None = None) -> WishlistItem:
        if not isinstance(url, str) or not url.strip():
            raise AddItemError("A URL is required to add an item")
        url = url.strip()
        try:
            preview = self._preview_source(url)
        except PreviewRequestError as exc:
            _LOGGER.error("sync.add_item_failed", url=url, error=str(exc))
            raise AddItemError(
                "Failed to add item. Please check the URL and try again."
            ) from exc

        with self._lock:
            now_ms = self._clock()
            while self._state.find(str(now_ms)) is not None:
                now_ms += 1
            item = catalog.build_item(url, preview, category=category, now_ms=now_ms)
            self._apply(catalog.add_item, item)
        _LOGGER.info("sync.item_added", item_id=item.id, url=url)
        return item

    def toggle_received(self, item_id: str) -> WishlistState:
        return self._apply(catalog.toggle_received, item_id)

    def update_item(self, item_id: str, **updates: Any) -> WishlistState:
        return self._apply(catalog.update_item, item_id, updates)

    def change_category(self, item_id: str, category: str | None) -> WishlistState:
        return self._apply(catalog.change_item_category, item_id, category)

    def delete_item(self, item_id: str) -> WishlistState:
        return self._apply(catalog.delete_item, item_id)

    def create_category(self, name: str) -> WishlistState:
        return self._apply(catalog.create_category, name)

    def rename_category(self, old_name: str, new_name: str) -> WishlistState:
        return self._apply(catalog.rename_category, old_name, new_name)

    def delete_category(self, name: str) -> WishlistState:
        return self._apply(catalog.delete_category, name)

    def set_category_icon(
        self, name: str, icon: str | CategoryIcon
    ) -> WishlistState:
        return self._apply(catalog.set_category_icon, name, icon)

    # Lifecycle

    @property
    def has_pending_push(self) -> bool:
        return self._items_debouncer.pending or self._categories_debouncer.pending

    def flush(self) -> None:
        """Push pending changes immediately."""

        self._items_debouncer.flush()
        self._categories_debouncer.flush()

    def close(self, *, flush: bool = True) -> None:
        if flush:
            self.flush()
        else:
            self._items_debouncer.cancel_pending()
            self._categories_debouncer.cancel_pending()


__all__ = ["AddItemError", "PreviewSource", "SyncScheduler"]
