from __future__ import annotations

from fastapi import Depends, Request

from wishlist.core.redis import RedisConnectionPool
from wishlist.services.preview import PreviewExtractor, get_preview_extractor
from wishlist.services.store import WishlistStore

__all__ = [
    "get_preview_extractor_dependency",
    "get_redis_pool",
    "get_wishlist_store",
]


def get_redis_pool(request: Request) -> RedisConnectionPool:
    """Return the pool created by the application lifespan."""

    return request.app.state.redis_pool


def get_wishlist_store(
    pool: RedisConnectionPool = Depends(get_redis_pool),
) -> WishlistStore:
    return WishlistStore(pool)


def get_preview_extractor_dependency() -> PreviewExtractor:
    return get_preview_extractor()
