"""HTTP client for the wishlist API.

Loads degrade to defaults and pushes swallow errors: the shared store is a
convenience copy, so an unreachable server must never interrupt editing.
Only the preview call raises, because adding an item needs its answer.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import httpx
import structlog

from wishlist.core.config import Settings, settings
from wishlist.schemas import (
    UNCATEGORIZED,
    WishlistItem,
    dump_items,
    parse_stored_items,
)

HttpClientFactory = Callable[[], httpx.Client]

ITEMS_PATH = "/api/wishlist/items"
CATEGORIES_PATH = "/api/wishlist/categories"
PREVIEW_PATH = "/api/preview"

_logger = structlog.get_logger(__name__)


class PreviewRequestError(RuntimeError):
    """Raised when the preview endpoint cannot produce a preview."""


class RemoteWishlistClient:
    def __init__(
        self,
        config: Settings | None = None,
        *,
        base_url: str | None = None,
        http_client_factory: HttpClientFactory | None = None,
    ) -> None:
        self._settings = config or settings
        self._base_url = (base_url or self._settings.api_base_url).rstrip("/")
        self._http_client_factory = http_client_factory or self._default_factory
        # Preview fetches run two sequential page loads server side.
        self._preview_timeout = httpx.Timeout(
            self._settings.preview_timeout + self._settings.preview_fallback_timeout
        )

    def _default_factory(self) -> httpx.Client:
        return httpx.Client()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _get_json(self, path: str) -> dict[str, Any] | None:
        try:
            with self._http_client_factory() as client:
                response = client.get(self._url(path))
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            _logger.warning(
                "sync.load_http_error",
                path=path,
                status_code=exc.response.status_code,
            )
            return None
        except httpx.HTTPError as exc:
            _logger.warning("sync.load_failed", path=path, error=str(exc))
            return None
        except ValueError as exc:
            _logger.warning("sync.load_invalid_json", path=path, error=str(exc))
            return None
        return data if isinstance(data, dict) else None

    def _post_json(self, path: str, payload: dict[str, Any]) -> bool:
        try:
            with self._http_client_factory() as client:
                response = client.post(self._url(path), json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            _logger.error(
                "sync.push_http_error",
                path=path,
                status_code=exc.response.status_code,
            )
            return False
        except httpx.HTTPError as exc:
            _logger.error("sync.push_failed", path=path, error=str(exc))
            return False
        _logger.info("sync.pushed", path=path)
        return True

    def load_items(self) -> list[WishlistItem]:
        data = self._get_json(ITEMS_PATH)
        raw = data.get("items") if data else None
        if not isinstance(raw, list):
            return []
        items, skipped = parse_stored_items(raw)
        if skipped:
            _logger.warning("sync.items_skipped", skipped=skipped)
        return items

    def load_categories(self) -> list[str]:
        data = self._get_json(CATEGORIES_PATH)
        raw = data.get("categories") if data else None
        if not isinstance(raw, list) or not raw:
            return [UNCATEGORIZED]
        return [str(name) for name in raw]

    def push_items(self, items: Iterable[WishlistItem]) -> bool:
        return self._post_json(ITEMS_PATH, {"items": dump_items(items)})

    def push_categories(self, categories: Iterable[str]) -> bool:
        return self._post_json(CATEGORIES_PATH, {"categories": list(categories)})

    def fetch_preview(self, url: str) -> dict[str, Any]:
        try:
            with self._http_client_factory() as client:
                response = client.post(
                    self._url(PREVIEW_PATH),
                    json={"url": url},
                    timeout=self._preview_timeout,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise PreviewRequestError(f"Failed to fetch preview for {url}") from exc
        except ValueError as exc:
            raise PreviewRequestError("Preview response was not JSON") from exc
        if not isinstance(data, dict):
            raise PreviewRequestError("Preview response was not an object")
        return data


__all__ = ["PreviewRequestError", "RemoteWishlistClient"]
