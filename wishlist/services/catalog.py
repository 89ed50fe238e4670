"""Wishlist mutations.

Every operation takes a :class:`WishlistState` and returns a new one; the
input is never modified, so callers can hand the previous snapshot to a
pending push without copying it.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from wishlist.schemas import UNCATEGORIZED, WishlistItem
from wishlist.services.icons import CategoryIcon, resolve_icon

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "createdAt"})


@dataclass(slots=True, frozen=True)
class WishlistState:
    items: list[WishlistItem] = field(default_factory=list)
    categories: list[str] = field(default_factory=lambda: [UNCATEGORIZED])
    category_icons: dict[str, CategoryIcon] = field(default_factory=dict)

    def find(self, item_id: str) -> WishlistItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


def order_categories(names: Iterable[str]) -> list[str]:
    unique = {name for name in names if name and name != UNCATEGORIZED}
    return [UNCATEGORIZED, *sorted(unique)]


def _stored_category(category: str | None) -> str | None:
    if not category or category == UNCATEGORIZED:
        return None
    return category


def _with_category(categories: list[str], category: str | None) -> list[str]:
    if category is None or category in categories:
        return categories
    return order_categories([*categories, category])


def _map_item(
    state: WishlistState, item_id: str, changes: Mapping[str, Any]
) -> list[WishlistItem]:
    return [
        item.model_copy(update=dict(changes)) if item.id == item_id else item
        for item in state.items
    ]


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def build_item(
    url: str,
    preview: Mapping[str, Any],
    *,
    category: str | None = None,
    now_ms: int | None = None,
) -> WishlistItem:
    """Create a new item from a link preview payload."""

    created_at = now_ms if now_ms is not None else now_millis()
    images = preview.get("images")
    image = preview.get("image")
    if isinstance(images, list) and images:
        image = images[0]
    return WishlistItem(
        id=str(created_at),
        url=url,
        title=preview.get("title") or "Untitled",
        description=preview.get("description") or None,
        image=image or None,
        site_name=preview.get("siteName") or None,
        category=_stored_category(category),
        received=False,
        created_at=created_at,
    )


def add_item(state: WishlistState, item: WishlistItem) -> WishlistState:
    return replace(
        state,
        items=[item, *state.items],
        categories=_with_category(state.categories, item.category),
    )


def delete_item(state: WishlistState, item_id: str) -> WishlistState:
    return replace(state, items=[item for item in state.items if item.id != item_id])


def toggle_received(state: WishlistState, item_id: str) -> WishlistState:
    item = state.find(item_id)
    if item is None:
        return state
    return replace(
        state, items=_map_item(state, item_id, {"received": not item.received})
    )


def update_item(
    state: WishlistState, item_id: str, updates: Mapping[str, Any]
) -> WishlistState:
    """Apply field updates (attribute names or wire aliases) to one item."""

    current = state.find(item_id)
    if current is None:
        return state
    aliases = {
        info.alias: name
        for name, info in WishlistItem.model_fields.items()
        if info.alias
    }
    changes: dict[str, Any] = {}
    for key, value in updates.items():
        if key in _IMMUTABLE_FIELDS:
            continue
        changes[aliases.get(key, key)] = value
    if "category" in changes:
        changes["category"] = _stored_category(changes["category"])
    validated = WishlistItem.model_validate({**current.model_dump(), **changes})
    items = [validated if item.id == item_id else item for item in state.items]
    return replace(
        state,
        items=items,
        categories=_with_category(state.categories, validated.category),
    )


def change_item_category(
    state: WishlistState, item_id: str, category: str | None
) -> WishlistState:
    if state.find(item_id) is None:
        return state
    stored = _stored_category(category)
    return replace(
        state,
        items=_map_item(state, item_id, {"category": stored}),
        categories=_with_category(state.categories, stored),
    )


def create_category(state: WishlistState, name: str) -> WishlistState:
    cleaned = name.strip()
    if not cleaned or cleaned in state.categories:
        return state
    return replace(state, categories=order_categories([*state.categories, cleaned]))


def rename_category(
    state: WishlistState, old_name: str, new_name: str
) -> WishlistState:
    """Rename a category, carrying its icon and member items along.

    ``Uncategorized`` can be neither source nor target.
    """

    new_name = new_name.strip()
    if not new_name or old_name == new_name:
        return state
    if UNCATEGORIZED in (old_name, new_name):
        return state
    if old_name not in state.categories:
        return state

    icons = dict(state.category_icons)
    if old_name in icons:
        icons[new_name] = icons.pop(old_name)
    items = [
        item.model_copy(update={"category": new_name})
        if item.category == old_name
        else item
        for item in state.items
    ]
    categories = order_categories(
        new_name if name == old_name else name for name in state.categories
    )
    return WishlistState(items=items, categories=categories, category_icons=icons)


def delete_category(state: WishlistState, name: str) -> WishlistState:
    """Remove a category; member items move to ``Uncategorized``."""

    if name == UNCATEGORIZED:
        return state
    items = [
        item.model_copy(update={"category": None})
        if item.category == name
        else item
        for item in state.items
    ]
    icons = {
        key: value for key, value in state.category_icons.items() if key != name
    }
    categories = [category for category in state.categories if category != name]
    return WishlistState(items=items, categories=categories, category_icons=icons)


def set_category_icon(
    state: WishlistState, name: str, icon: str | CategoryIcon
) -> WishlistState:
    icons = {**state.category_icons, name: resolve_icon(str(icon))}
    return replace(state, category_icons=icons)


def category_counts(state: WishlistState) -> dict[str, int]:
    counts = Counter(item.category_name for item in state.items)
    names = order_categories([*state.categories, *counts])
    return {name: counts.get(name, 0) for name in names}


def items_in_category(state: WishlistState, name: str) -> list[WishlistItem]:
    return [item for item in state.items if item.category_name == name]


__all__ = [
    "WishlistState",
    "add_item",
    "build_item",
    "category_counts",
    "change_item_category",
    "create_category",
    "delete_category",
    "delete_item",
    "items_in_category",
    "now_millis",
    "order_categories",
    "rename_category",
    "set_category_icon",
    "toggle_received",
    "update_item",
]
