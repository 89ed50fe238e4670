from __future__ import annotations

from collections.abc import Callable

from wishlist.schemas import WishlistItem
from wishlist.services.reconcile import merge_categories, merge_items

ItemFactory = Callable[..., WishlistItem]


def test_merge_with_empty_side_returns_other(make_item: ItemFactory) -> None:
    items = [make_item("1", 10), make_item("2", 20)]

    assert merge_items(items, []) == items
    assert merge_items([], items) == items
    assert merge_items([], []) == []


def test_merge_empty_side_keeps_original_order(make_item: ItemFactory) -> None:
    # No sort is applied when only one side has items.
    items = [make_item("old", 1), make_item("new", 2)]

    assert [item.id for item in merge_items([], items)] == ["old", "new"]


def test_merge_returns_new_list(make_item: ItemFactory) -> None:
    items = [make_item("1")]

    merged = merge_items(items, [])

    assert merged is not items


def test_local_wins_on_id_collision(make_item: ItemFactory) -> None:
    local = [make_item("1", 100, title="Local title", received=True)]
    remote = [make_item("1", 100, title="Remote title")]

    merged = merge_items(local, remote)

    assert len(merged) == 1
    assert merged[0].title == "Local title"
    assert merged[0].received is True


def test_union_sorted_newest_first(make_item: ItemFactory) -> None:
    local = [make_item("a", 300), make_item("b", 100)]
    remote = [make_item("c", 200), make_item("a", 300)]

    merged = merge_items(local, remote)

    assert [item.id for item in merged] == ["a", "c", "b"]


def test_merge_unions_ids_without_duplicates(make_item: ItemFactory) -> None:
    local = [make_item(str(n), n) for n in range(0, 10, 2)]
    remote = [make_item(str(n), n) for n in range(0, 10, 3)]

    merged = merge_items(local, remote)

    ids = [item.id for item in merged]
    assert sorted(ids, key=int) == ["0", "2", "3", "4", "6", "8", "9"]
    assert len(ids) == len(set(ids))
    created = [item.created_at for item in merged]
    assert created == sorted(created, reverse=True)


def test_categories_union_with_uncategorized_first() -> None:
    assert merge_categories(["Uncategorized", "B"], ["A"]) == [
        "Uncategorized",
        "A",
        "B",
    ]


def test_categories_always_contain_uncategorized() -> None:
    assert merge_categories([], []) == ["Uncategorized"]
    assert merge_categories(["Shoes"], []) == ["Uncategorized", "Shoes"]


def test_categories_are_deduplicated_and_sorted() -> None:
    merged = merge_categories(
        ["Toys", "Books", "Uncategorized"], ["Books", "Uncategorized", "Art"]
    )

    assert merged == ["Uncategorized", "Art", "Books", "Toys"]


def test_categories_drop_blank_names() -> None:
    assert merge_categories(["", "Games"], [""]) == ["Uncategorized", "Games"]
