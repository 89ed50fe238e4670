"""Redis connection lifecycle for the shared wishlist store."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

import redis
import structlog
from redis.backoff import AbstractBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from wishlist.core.config import Settings

_LOGGER = structlog.get_logger(__name__)


class RedisClient(Protocol):
    def ping(self) -> Any: ...

    def get(self, name: str) -> Any: ...

    def set(self, name: str, value: str) -> Any: ...

    def close(self) -> None: ...


RedisClientFactory = Callable[[], RedisClient]


class StoreUnavailableError(RuntimeError):
    """Raised when the pool has been closed or cannot reach Redis."""


@dataclass
class BackoffPolicy(AbstractBackoff):
    """Capped exponential backoff.

    ``compute(n)`` returns the wait before retry ``n`` (1-based):
    ``min(cap, base * factor ** (n - 1))``. The same object is handed to
    redis-py's ``Retry`` so command retries and reconnects share one policy.
    """

    base: float = 0.1
    factor: float = 2.0
    cap: float = 3.0
    max_retries: int = 10

    def compute(self, failures: int) -> float:
        if failures <= 0:
            return 0.0
        return min(self.cap, self.base * self.factor ** (failures - 1))

    def reset(self) -> None:
        return None

    def should_retry(self, failures: int) -> bool:
        return failures <= self.max_retries

    def delays(self) -> Iterator[float]:
        for failures in range(1, self.max_retries + 1):
            yield self.compute(failures)

    @classmethod
    def from_settings(cls, config: Settings) -> BackoffPolicy:
        return cls(
            base=config.redis_backoff_base,
            cap=config.redis_backoff_cap,
            max_retries=config.redis_max_retries,
        )


class RedisConnectionPool:
    """Owns the process-wide Redis client.

    Construct once at startup and call :meth:`close` at shutdown. The first
    caller of :meth:`client` connects; concurrent callers block on the same
    lock and reuse the result. :meth:`invalidate` drops a broken client so the
    next caller reconnects.
    """

    def __init__(
        self,
        url: str,
        *,
        backoff: BackoffPolicy | None = None,
        socket_timeout: float = 5.0,
        client_factory: RedisClientFactory | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._url = url
        self._backoff = backoff or BackoffPolicy()
        self._socket_timeout = socket_timeout
        self._client_factory = client_factory or self._default_client_factory
        self._sleep = sleep
        self._lock = threading.Lock()
        self._client: RedisClient | None = None
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        *,
        client_factory: RedisClientFactory | None = None,
    ) -> RedisConnectionPool:
        return cls(
            config.redis_uri,
            backoff=BackoffPolicy.from_settings(config),
            socket_timeout=config.redis_socket_timeout,
            client_factory=client_factory,
        )

    @property
    def backoff(self) -> BackoffPolicy:
        return self._backoff

    @property
    def closed(self) -> bool:
        return self._closed

    def _default_client_factory(self) -> RedisClient:
        return redis.Redis.from_url(
            self._url,
            decode_responses=True,
            socket_timeout=self._socket_timeout,
            socket_connect_timeout=self._socket_timeout,
            retry=Retry(self._backoff, self._backoff.max_retries),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
        )

    def client(self) -> RedisClient:
        with self._lock:
            if self._closed:
                raise StoreUnavailableError("Redis connection pool is closed")
            if self._client is None:
                self._client = self._connect()
            return self._client

    def _connect(self) -> RedisClient:
        failures = 0
        while True:
            candidate = self._client_factory()
            try:
                candidate.ping()
            except RedisError as exc:
                _close_quietly(candidate)
                failures += 1
                if not self._backoff.should_retry(failures):
                    _LOGGER.error(
                        "redis.connect_failed", attempts=failures, error=str(exc)
                    )
                    raise StoreUnavailableError(
                        f"Redis connection failed after {failures} attempts"
                    ) from exc
                delay = self._backoff.compute(failures)
                _LOGGER.warning(
                    "redis.connect_retry",
                    attempt=failures,
                    delay=delay,
                    error=str(exc),
                )
                self._sleep(delay)
                continue
            _LOGGER.info("redis.connected", attempts=failures + 1)
            return candidate

    def invalidate(self) -> None:
        with self._lock:
            if self._client is not None:
                _close_quietly(self._client)
                self._client = None

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._client is not None:
                _close_quietly(self._client)
                self._client = None
        _LOGGER.info("redis.pool_closed")

    def ping(self) -> bool:
        try:
            self.client().ping()
        except (RedisError, StoreUnavailableError):
            return False
        return True


def _close_quietly(client: RedisClient) -> None:
    try:
        client.close()
    except RedisError:
        _LOGGER.debug("redis.close_failed", exc_info=True)


__all__ = [
    "BackoffPolicy",
    "RedisClient",
    "RedisClientFactory",
    "RedisConnectionPool",
    "StoreUnavailableError",
]
