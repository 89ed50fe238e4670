from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

UNCATEGORIZED = "Uncategorized"


class WishlistItem(BaseModel):
    """A saved product link.

    Attribute names are snake_case; the wire format uses the camelCase keys
    the browser cache has always stored (``siteName``, ``createdAt``). Keys
    this model does not know about are kept so a round trip through the
    server never drops data written by a newer client.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    id: str
    url: str
    title: str = ""
    description: str | None = None
    image: str | None = None
    site_name: str | None = Field(default=None, alias="siteName")
    category: str | None = None
    received: bool = False
    created_at: int = Field(default=0, alias="createdAt")

    @property
    def category_name(self) -> str:
        return self.category or UNCATEGORIZED

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


WISHLIST_ITEMS_ADAPTER: TypeAdapter[list[WishlistItem]] = TypeAdapter(
    list[WishlistItem]
)


def parse_items(raw: Any) -> list[WishlistItem]:
    return WISHLIST_ITEMS_ADAPTER.validate_python(raw)


def parse_stored_items(raw: Iterable[Any]) -> tuple[list[WishlistItem], int]:
    """Validate stored entries one by one.

    Returns the valid items in their stored order and the number of entries
    that were skipped.
    """

    items: list[WishlistItem] = []
    skipped = 0
    for entry in raw:
        try:
            items.append(WishlistItem.model_validate(entry))
        except ValidationError:
            skipped += 1
    return items, skipped


def dump_items(items: Iterable[WishlistItem]) -> list[dict[str, Any]]:
    return [item.to_payload() for item in items]


class ItemsResponse(BaseModel):
    items: list[dict[str, Any]]


class CategoriesResponse(BaseModel):
    categories: list[str]


class SuccessResponse(BaseModel):
    success: bool = True
