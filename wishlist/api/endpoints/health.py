from __future__ import annotations

import time
from typing import Any

from fastapi import APIRouter, Depends

from wishlist import __version__
from wishlist.api.deps import get_redis_pool
from wishlist.core.config import settings
from wishlist.core.redis import RedisConnectionPool
from wishlist.schemas.health import ServiceStatus

router = APIRouter()


@router.get("", response_model=ServiceStatus, summary="Liveness probe")
def service_status() -> ServiceStatus:
    """Report process liveness only; Redis is checked by ``/readiness``."""

    return ServiceStatus(
        service=settings.app_name,
        version=__version__,
        environment=settings.environment,
        store="redis",
    )


@router.get("/readiness", summary="Check that the shared store answers")
def readiness_check(
    pool: RedisConnectionPool = Depends(get_redis_pool),
) -> dict[str, Any]:
    started = time.perf_counter()
    reachable = pool.ping()
    redis_component: dict[str, Any] = {"status": "ok" if reachable else "error"}
    if reachable:
        elapsed = time.perf_counter() - started
        redis_component["latency_ms"] = round(elapsed * 1000, 3)
    return {
        "status": "ok" if reachable else "error",
        "components": {"redis": redis_component},
    }
