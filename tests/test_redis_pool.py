from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest
from redis.retry import Retry

from wishlist.core.config import Settings
from wishlist.core.redis import (
    BackoffPolicy,
    RedisConnectionPool,
    StoreUnavailableError,
)


def test_backoff_doubles_until_cap() -> None:
    policy = BackoffPolicy(base=0.1, cap=3.0, max_retries=10)

    delays = list(policy.delays())

    assert delays[:5] == pytest.approx([0.1, 0.2, 0.4, 0.8, 1.6])
    assert delays[5:] == pytest.approx([3.0] * 5)
    assert len(delays) == 10


def test_backoff_is_zero_before_first_failure() -> None:
    assert BackoffPolicy().compute(0) == 0.0


def test_backoff_should_retry_respects_limit() -> None:
    policy = BackoffPolicy(max_retries=2)

    assert policy.should_retry(1)
    assert policy.should_retry(2)
    assert not policy.should_retry(3)


def test_backoff_from_settings() -> None:
    config = Settings(
        redis_backoff_base=0.5, redis_backoff_cap=2.0, redis_max_retries=3
    )

    policy = BackoffPolicy.from_settings(config)

    assert list(policy.delays()) == pytest.approx([0.5, 1.0, 2.0])


def test_backoff_is_usable_by_redis_retry() -> None:
    policy = BackoffPolicy(max_retries=4)

    retry = Retry(policy, policy.max_retries)

    assert retry is not None


def test_pool_connects_lazily_and_reuses_client(
    new_fake_redis: Callable[..., Any],
) -> None:
    created: list[Any] = []

    def factory() -> Any:
        client = new_fake_redis()
        created.append(client)
        return client

    pool = RedisConnectionPool("redis://test", client_factory=factory)
    assert created == []

    first = pool.client()
    second = pool.client()

    assert first is second
    assert len(created) == 1


def test_pool_retries_with_backoff_before_connecting(
    new_fake_redis: Callable[..., Any],
) -> None:
    created: list[Any] = []
    sleeps: list[float] = []

    def factory() -> Any:
        # The first three candidates refuse the connection.
        client = new_fake_redis(ping_failures=1 if len(created) < 3 else 0)
        created.append(client)
        return client

    pool = RedisConnectionPool(
        "redis://test",
        backoff=BackoffPolicy(base=0.1, cap=3.0, max_retries=10),
        client_factory=factory,
        sleep=sleeps.append,
    )

    client = pool.client()

    assert client is created[-1]
    assert len(created) == 4
    assert sleeps == pytest.approx([0.1, 0.2, 0.4])
    assert all(candidate.closed for candidate in created[:3])


def test_pool_raises_when_retries_exhausted(
    new_fake_redis: Callable[..., Any],
) -> None:
    sleeps: list[float] = []
    pool = RedisConnectionPool(
        "redis://test",
        backoff=BackoffPolicy(max_retries=2),
        client_factory=lambda: new_fake_redis(ping_failures=1),
        sleep=sleeps.append,
    )

    with pytest.raises(StoreUnavailableError):
        pool.client()

    assert len(sleeps) == 2


def test_pool_invalidate_forces_reconnect(
    new_fake_redis: Callable[..., Any],
) -> None:
    created: list[Any] = []

    def factory() -> Any:
        client = new_fake_redis()
        created.append(client)
        return client

    pool = RedisConnectionPool("redis://test", client_factory=factory)
    first = pool.client()

    pool.invalidate()
    second = pool.client()

    assert first is not second
    assert created[0].closed


def test_pool_close_releases_client_and_rejects_callers(
    redis_pool: RedisConnectionPool, fake_redis: Any
) -> None:
    redis_pool.client()

    redis_pool.close()

    assert redis_pool.closed
    assert fake_redis.closed
    with pytest.raises(StoreUnavailableError):
        redis_pool.client()
    assert redis_pool.ping() is False


def test_pool_ping_reports_reachability(
    redis_pool: RedisConnectionPool, new_fake_redis: Callable[..., Any]
) -> None:
    assert redis_pool.ping() is True

    unreachable = RedisConnectionPool(
        "redis://test",
        backoff=BackoffPolicy(max_retries=0),
        client_factory=lambda: new_fake_redis(ping_failures=1),
        sleep=lambda _: None,
    )
    assert unreachable.ping() is False


def test_concurrent_callers_share_one_connection(
    new_fake_redis: Callable[..., Any],
) -> None:
    created: list[Any] = []
    gate = threading.Event()

    def factory() -> Any:
        gate.wait(timeout=1)
        client = new_fake_redis()
        created.append(client)
        return client

    pool = RedisConnectionPool("redis://test", client_factory=factory)
    results: list[object] = []

    def worker() -> None:
        results.append(pool.client())

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for thread in threads:
        thread.start()
    gate.set()
    for thread in threads:
        thread.join(timeout=2)

    assert len(created) == 1
    assert len(results) == 5
    assert all(result is created[0] for result in results)
