from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status

from wishlist.api.deps import get_wishlist_store
from wishlist.schemas import CategoriesResponse, SuccessResponse
from wishlist.services.store import StoreError, WishlistStore

router = APIRouter()

_LOGGER = structlog.get_logger(__name__)


@router.get(
    "", response_model=CategoriesResponse, summary="Read the shared category list"
)
def read_categories(
    store: WishlistStore = Depends(get_wishlist_store),
) -> CategoriesResponse:
    return CategoriesResponse(categories=store.get_categories())


@router.post(
    "", response_model=SuccessResponse, summary="Replace the shared category list"
)
def save_categories(
    payload: Any = Body(default=None),
    store: WishlistStore = Depends(get_wishlist_store),
) -> SuccessResponse:
    raw = payload.get("categories") if isinstance(payload, dict) else None
    if not isinstance(raw, list) or not all(isinstance(name, str) for name in raw):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Categories must be an array",
        )

    try:
        store.save_categories(raw)
    except StoreError as exc:
        _LOGGER.error("api.categories.save_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save categories",
        ) from exc
    return SuccessResponse()
