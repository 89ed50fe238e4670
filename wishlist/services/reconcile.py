"""Merge the local cache with the shared store."""

from __future__ import annotations

from collections.abc import Sequence

from wishlist.schemas import UNCATEGORIZED, WishlistItem


def merge_items(
    local: Sequence[WishlistItem], remote: Sequence[WishlistItem]
) -> list[WishlistItem]:
    """Union both lists by item id, keeping the local copy on collisions.

    When either side is empty the other is returned unchanged (as a new list).
    Otherwise the result is ordered newest first by ``created_at``. Items with
    equal timestamps keep insertion order: remote order first, then items
    that only exist locally. That tie-break is an implementation detail and
    may differ between calls whose inputs are ordered differently.
    """

    if not local:
        return list(remote)
    if not remote:
        return list(local)

    merged: dict[str, WishlistItem] = {}
    for item in remote:
        merged[item.id] = item
    for item in local:
        merged[item.id] = item

    return sorted(merged.values(), key=lambda item: item.created_at, reverse=True)


def merge_categories(local: Sequence[str], remote: Sequence[str]) -> list[str]:
    """Union of both category lists, ``Uncategorized`` first, rest sorted."""

    names = {name for name in (*local, *remote) if name}
    names.discard(UNCATEGORIZED)
    return [UNCATEGORIZED, *sorted(names)]


__all__ = ["merge_categories", "merge_items"]
