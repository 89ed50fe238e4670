from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from wishlist.api.deps import get_wishlist_store
from wishlist.schemas import (
    ItemsResponse,
    SuccessResponse,
    dump_items,
    parse_items,
)
from wishlist.services.store import StoreError, WishlistStore

router = APIRouter()

_LOGGER = structlog.get_logger(__name__)


@router.get("", response_model=ItemsResponse, summary="Read the shared wishlist items")
def read_items(store: WishlistStore = Depends(get_wishlist_store)) -> ItemsResponse:
    return ItemsResponse(items=dump_items(store.get_items()))


@router.post(
    "", response_model=SuccessResponse, summary="Replace the shared wishlist items"
)
def save_items(
    payload: Any = Body(default=None),
    store: WishlistStore = Depends(get_wishlist_store),
) -> SuccessResponse:
    raw = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(raw, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Items must be an array",
        )
    try:
        items = parse_items(raw)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Items are invalid ({exc.error_count()} errors)",
        ) from exc

    try:
        store.save_items(items)
    except StoreError as exc:
        _LOGGER.error("api.items.save_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save items",
        ) from exc
    return SuccessResponse()
