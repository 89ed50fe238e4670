from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from wishlist.api.deps import get_preview_extractor_dependency, get_redis_pool
from wishlist.core.redis import RedisConnectionPool
from wishlist.main import app
from wishlist.services.preview import PreviewExtractor


class PageServer:
    """Serves canned HTML to the preview extractor, keyed by URL."""

    def __init__(self) -> None:
        self.pages: dict[str, tuple[int, str]] = {}
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url not in self.pages:
            raise httpx.ConnectError("unknown host", request=request)
        status_code, body = self.pages[url]
        return httpx.Response(status_code, text=body)


@pytest.fixture(name="pages")
def pages_fixture() -> PageServer:
    return PageServer()


@pytest.fixture(name="client")
def client_fixture(
    redis_pool: RedisConnectionPool, pages: PageServer
) -> Iterator[TestClient]:
    transport = httpx.MockTransport(pages)

    def override_get_preview_extractor() -> PreviewExtractor:
        return PreviewExtractor(
            http_client_factory=lambda: httpx.Client(transport=transport)
        )

    app.dependency_overrides[get_redis_pool] = lambda: redis_pool
    app.dependency_overrides[get_preview_extractor_dependency] = (
        override_get_preview_extractor
    )
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_redis_pool, None)
        app.dependency_overrides.pop(get_preview_extractor_dependency, None)
