from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from wishlist.core.redis import BackoffPolicy, RedisConnectionPool
from wishlist.schemas import WishlistItem


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the store uses."""

    def __init__(
        self,
        *,
        ping_failures: int = 0,
        fail_reads: bool = False,
        fail_writes: bool = False,
    ) -> None:
        self.data: dict[str, str] = {}
        self.ping_failures = ping_failures
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.pings = 0
        self.closed = False

    def ping(self) -> bool:
        self.pings += 1
        if self.ping_failures > 0:
            self.ping_failures -= 1
            raise RedisConnectionError("connection refused")
        return True

    def get(self, name: str) -> str | None:
        if self.fail_reads:
            raise RedisConnectionError("read failed")
        return self.data.get(name)

    def set(self, name: str, value: str) -> bool:
        if self.fail_writes:
            raise RedisConnectionError("write failed")
        self.data[name] = value
        return True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def redis_pool(fake_redis: FakeRedis) -> RedisConnectionPool:
    return RedisConnectionPool(
        "redis://test",
        backoff=BackoffPolicy(max_retries=0),
        client_factory=lambda: fake_redis,
        sleep=lambda _: None,
    )


@pytest.fixture
def make_item() -> Callable[..., WishlistItem]:
    def factory(item_id: str, created_at: int = 0, **fields: Any) -> WishlistItem:
        payload: dict[str, Any] = {
            "id": item_id,
            "url": f"https://shop.example.com/{item_id}",
            "title": f"Item {item_id}",
            "createdAt": created_at,
        }
        payload.update(fields)
        return WishlistItem.model_validate(payload)

    return factory


@pytest.fixture
def new_fake_redis() -> Callable[..., FakeRedis]:
    return FakeRedis
