from wishlist.schemas.wishlist import (
    UNCATEGORIZED,
    CategoriesResponse,
    ItemsResponse,
    SuccessResponse,
    WishlistItem,
    dump_items,
    parse_items,
    parse_stored_items,
)

__all__ = [
    "UNCATEGORIZED",
    "CategoriesResponse",
    "ItemsResponse",
    "SuccessResponse",
    "WishlistItem",
    "dump_items",
    "parse_items",
    "parse_stored_items",
]
