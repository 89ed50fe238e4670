"""Link preview extraction for newly added wishlist items.

Two passes are made over the target page. The primary pass parses the
document with BeautifulSoup and reads Open Graph / Twitter card metadata. If
that pass fails, finds nothing, or finds a bot-check interstitial, a second
direct fetch is scanned with regular expressions. Neither pass raises: every
network or parse failure collapses into an empty result, and the caller
always receives at least a title derived from the host name.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlparse

import httpx
import structlog
from bs4 import BeautifulSoup

from wishlist.core.config import Settings, settings

HttpClientFactory = Callable[[], httpx.Client]

UNTITLED = "Untitled"

BLOCKED_STATUS_CODES = frozenset({401, 403})
BLOCKED_PHRASES: tuple[str, ...] = (
    "access denied",
    "forbidden",
    "zugriff verweigert",
)
UNHELPFUL_PHRASES: tuple[str, ...] = (
    "just a moment",
    "checking security",
    "please wait",
    "loading",
    *BLOCKED_PHRASES,
)

_ACCEPT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_PRIMARY_TITLE_KEYS = ("og:title", "twitter:title")
_PRIMARY_DESCRIPTION_KEYS = ("og:description", "description", "twitter:description")
_PRIMARY_IMAGE_KEYS = frozenset(
    {"og:image", "og:image:url", "og:image:secure_url", "twitter:image"}
)

_TITLE_TAG = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTRIBUTE = re.compile(r"""([\w:-]+)\s*=\s*(["'])(.*?)\2""", re.DOTALL)
_FALLBACK_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("og:title",),
    "description": ("og:description", "description"),
    "site_name": ("og:site_name",),
}
_FALLBACK_IMAGE_KEYS = frozenset({"og:image", "image"})

_logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PreviewResult:
    title: str | None = None
    description: str | None = None
    image: str | None = None
    images: list[str] = field(default_factory=list)
    site_name: str | None = None
    unhelpful: bool = False
    fallback: bool = False

    def has_content(self) -> bool:
        return bool(self.title or self.description)

    def merged_over(self, base: PreviewResult) -> PreviewResult:
        """Return a copy of ``self`` with gaps filled in from ``base``."""

        images = _dedupe([*self.images, *base.images])
        return PreviewResult(
            title=self.title or base.title,
            description=self.description or base.description,
            image=self.image or base.image or (images[0] if images else None),
            images=images,
            site_name=self.site_name or base.site_name,
            unhelpful=self.unhelpful or base.unhelpful,
            fallback=self.fallback or base.fallback,
        )

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.title:
            payload["title"] = self.title
        if self.description:
            payload["description"] = self.description
        if self.image:
            payload["image"] = self.image
        if self.images:
            payload["images"] = list(self.images)
        if self.site_name:
            payload["siteName"] = self.site_name
        payload["_unhelpful"] = self.unhelpful
        payload["_fallback"] = self.fallback
        return payload


def hostname_label(url: str) -> str | None:
    """Return the URL host without a leading ``www.``, or ``None``."""

    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def is_unhelpful(title: str | None, site_name: str | None = None) -> bool:
    """Detect bot-check or access-denied pages from their title.

    Only the phrase list is consulted. Short titles are fine: plenty of
    shops use their bare domain as the page title.
    """

    label = (title or site_name or "").casefold().strip()
    if not label:
        return False
    return any(phrase in label for phrase in UNHELPFUL_PHRASES)


def is_blocked_response(status_code: int, body: str) -> bool:
    if status_code in BLOCKED_STATUS_CODES:
        return True
    lowered = body.lower()
    return any(phrase in lowered for phrase in BLOCKED_PHRASES)


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = html.unescape(value).strip()
    return text or None


def parse_document_metadata(document: str, base_url: str) -> PreviewResult:
    """Primary extractor: read card metadata from a parsed DOM."""

    soup = BeautifulSoup(document, "html.parser")
    meta: dict[str, str] = {}
    images: list[str] = []
    for node in soup.find_all("meta"):
        key = node.get("property") or node.get("name")
        content = node.get("content")
        if not isinstance(key, str) or not isinstance(content, str):
            continue
        key = key.strip().lower()
        content = content.strip()
        if not content:
            continue
        meta.setdefault(key, content)
        if key in _PRIMARY_IMAGE_KEYS:
            images.append(urljoin(base_url, content))

    title = next((meta[key] for key in _PRIMARY_TITLE_KEYS if key in meta), None)
    if title is None and soup.title is not None:
        title = soup.title.get_text(strip=True) or None
    description = next(
        (meta[key] for key in _PRIMARY_DESCRIPTION_KEYS if key in meta), None
    )
    images = _dedupe(images)
    return PreviewResult(
        title=_clean(title),
        description=_clean(description),
        image=images[0] if images else None,
        images=images,
        site_name=_clean(meta.get("og:site_name")),
    )


def scan_html_metadata(document: str) -> PreviewResult:
    """Fallback extractor: a regex scan that tolerates broken markup.

    Attribute order inside ``<meta>`` tags does not matter. The first match
    per field wins; image candidates are deduplicated in document order.
    """

    found: dict[str, str] = {}
    images: list[str] = []

    title_match = _TITLE_TAG.search(document)
    if title_match:
        title = _clean(title_match.group(1))
        if title:
            found["title"] = title

    for tag in _META_TAG.finditer(document):
        attrs = {
            name.lower(): value for name, _, value in _ATTRIBUTE.findall(tag.group(0))
        }
        key = (attrs.get("property") or attrs.get("name") or "").strip().lower()
        content = _clean(attrs.get("content"))
        if not key or not content:
            continue
        if key in _FALLBACK_IMAGE_KEYS:
            images.append(content)
            continue
        for field_name, keys in _FALLBACK_FIELDS.items():
            if key in keys and field_name not in found:
                found[field_name] = content

    images = _dedupe(images)
    return PreviewResult(
        title=found.get("title"),
        description=found.get("description"),
        image=images[0] if images else None,
        images=images,
        site_name=found.get("site_name"),
    )


def _default_client_factory() -> httpx.Client:
    return httpx.Client(follow_redirects=True)


class PreviewExtractor:
    """Produce best-effort link previews; see module docstring."""

    def __init__(
        self,
        config: Settings | None = None,
        *,
        http_client_factory: HttpClientFactory | None = None,
    ) -> None:
        self._settings = config or settings
        self._http_client_factory = http_client_factory or _default_client_factory
        self._headers = {
            "User-Agent": self._settings.preview_user_agent,
            **_ACCEPT_HEADERS,
        }

    def extract(self, url: str) -> PreviewResult:
        candidates: list[PreviewResult] = []
        primary = PreviewResult()
        try:
            primary = self.fetch_primary(url)
        except httpx.HTTPStatusError as exc:
            _logger.warning(
                "preview.primary_http_error",
                url=url,
                status_code=exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            _logger.warning(
                "preview.primary_failed", url=url, error=exc.__class__.__name__
            )
        except Exception as exc:
            _logger.warning(
                "preview.primary_unexpected_error", url=url, error=str(exc)
            )
        if primary.has_content():
            candidates.append(primary)

        result = primary
        needs_fallback = not primary.has_content() or is_unhelpful(
            primary.title, primary.site_name
        )
        if needs_fallback:
            fallback = self.fetch_fallback(url)
            if fallback.has_content():
                candidates.append(fallback)
                fallback.fallback = True
                result = fallback.merged_over(primary)

        unhelpful = any(
            is_unhelpful(candidate.title, candidate.site_name)
            for candidate in candidates
        )
        return self._finalise(url, result, unhelpful=unhelpful)

    def _finalise(
        self, url: str, result: PreviewResult, *, unhelpful: bool
    ) -> PreviewResult:
        host = hostname_label(url)
        title = result.title
        site_name = result.site_name
        if host is not None:
            if title and is_unhelpful(title):
                title = host
            if site_name and is_unhelpful(site_name):
                site_name = host
            if not title:
                title = host
                site_name = site_name or host
        if not title:
            title = UNTITLED

        preview = PreviewResult(
            title=title,
            description=result.description,
            image=result.image or (result.images[0] if result.images else None),
            images=list(result.images),
            site_name=site_name,
            unhelpful=unhelpful,
            fallback=result.fallback,
        )
        _logger.info(
            "preview.extracted",
            url=url,
            unhelpful=preview.unhelpful,
            fallback=preview.fallback,
            has_image=preview.image is not None,
        )
        return preview

    def fetch_primary(self, url: str) -> PreviewResult:
        """Fetch and parse ``url``; raises on transport or HTTP errors."""

        timeout = httpx.Timeout(self._settings.preview_timeout)
        with self._http_client_factory() as client:
            response = client.get(
                url, headers=self._headers, timeout=timeout, follow_redirects=True
            )
            response.raise_for_status()
        return parse_document_metadata(response.text, str(response.url))

    def fetch_fallback(self, url: str) -> PreviewResult:
        """Direct fetch plus regex scan; blocked or failed pages yield nothing."""

        timeout = httpx.Timeout(self._settings.preview_fallback_timeout)
        try:
            with self._http_client_factory() as client:
                response = client.get(
                    url, headers=self._headers, timeout=timeout, follow_redirects=True
                )
                body = response.text
        except httpx.HTTPError as exc:
            _logger.warning(
                "preview.fallback_failed", url=url, error=exc.__class__.__name__
            )
            return PreviewResult()
        except Exception as exc:
            _logger.warning(
                "preview.fallback_unexpected_error", url=url, error=str(exc)
            )
            return PreviewResult()

        if is_blocked_response(response.status_code, body):
            _logger.info(
                "preview.fallback_blocked", url=url, status_code=response.status_code
            )
            return PreviewResult()
        if not response.is_success:
            _logger.info(
                "preview.fallback_http_error",
                url=url,
                status_code=response.status_code,
            )
            return PreviewResult()

        scanned = scan_html_metadata(body)
        if scanned.has_content() and not scanned.site_name:
            scanned.site_name = hostname_label(url)
        return scanned


_extractor_factory: Callable[[], PreviewExtractor] | None = None


def set_preview_extractor_factory(
    factory: Callable[[], PreviewExtractor] | None,
) -> None:
    global _extractor_factory
    _extractor_factory = factory


def get_preview_extractor() -> PreviewExtractor:
    if _extractor_factory is not None:
        return _extractor_factory()
    return PreviewExtractor()


__all__ = [
    "BLOCKED_PHRASES",
    "UNHELPFUL_PHRASES",
    "PreviewExtractor",
    "PreviewResult",
    "get_preview_extractor",
    "hostname_label",
    "is_blocked_response",
    "is_unhelpful",
    "parse_document_metadata",
    "scan_html_metadata",
    "set_preview_extractor_factory",
]
