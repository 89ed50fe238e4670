from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status

from wishlist.api.deps import get_preview_extractor_dependency
from wishlist.services.preview import PreviewExtractor

router = APIRouter()

_LOGGER = structlog.get_logger(__name__)


@router.post("", summary="Fetch link preview metadata for a URL")
def create_preview(
    payload: Any = Body(default=None),
    extractor: PreviewExtractor = Depends(get_preview_extractor_dependency),
) -> dict[str, Any]:
    url = payload.get("url") if isinstance(payload, dict) else None
    if not url or not isinstance(url, str):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL is required",
        )

    try:
        return extractor.extract(url).as_dict()
    except Exception as exc:
        _LOGGER.exception("api.preview.failed", url=url, error=str(exc))

    last_resort = extractor.fetch_fallback(url)
    if last_resort.has_content():
        last_resort.fallback = True
        return last_resort.as_dict()
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Failed to fetch link preview",
    )
