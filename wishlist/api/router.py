from __future__ import annotations

from fastapi import APIRouter

from .endpoints import categories, health, items, preview

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(items.router, prefix="/wishlist/items", tags=["wishlist"])
api_router.include_router(
    categories.router, prefix="/wishlist/categories", tags=["wishlist"]
)
api_router.include_router(preview.router, prefix="/preview", tags=["preview"])
