"""Scrape provider boundary and the Firecrawl implementation.

A provider turns one URL into an :class:`~readlater.importer.types.ItemDraft`
or raises a :class:`~readlater.core.exceptions.ScrapeError` subclass carrying
a retryable flag.  Retries, timeouts and error containment are *not* the
provider's job; :mod:`readlater.importer.scrape_client` wraps every call.

Firecrawl mapping (``POST /v1/scrape``):

- transport timeout                 → ``ScrapeTimeoutError``
- other transport errors            → ``ScrapeProviderError(retryable=True)``
- HTTP 429                          → ``ScrapeRateLimitError`` (``Retry-After``)
- HTTP 408 / 5xx                    → ``ScrapeProviderError(retryable=True)``
- other HTTP 4xx                    → ``ScrapeProviderError(retryable=False)``
- non-JSON body, ``success: false``,
  binary content type, empty page   → ``UnsupportedContentError``
- target page answered 4xx / 5xx    → ``ScrapeProviderError`` (5xx retryable)
"""

from __future__ import annotations

import email.utils
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import httpx

from readlater.core.exceptions import (
    ScrapeProviderError,
    ScrapeRateLimitError,
    ScrapeTimeoutError,
    UnsupportedContentError,
)
from readlater.importer.config import (
    DEFAULT_TIMEOUT,
    FIRECRAWL_FORMATS,
    FIRECRAWL_SCRAPE_PATH,
    MAX_SUMMARY_CHARS,
    RETRYABLE_STATUS_CODES,
    UNSUPPORTED_CONTENT_TYPES,
)
from readlater.importer.types import ItemDraft, ItemStatus

logger = logging.getLogger(__name__)


class ScrapeProvider(ABC):
    """Extracts one page.  Implementations may suspend on I/O."""

    name: str = "provider"

    @abstractmethod
    async def scrape(self, url: str) -> ItemDraft:
        """Extract *url* into an item draft.

        Raises:
            ScrapeError: Any subclass, with ``retryable`` set appropriately.
        """

    async def aclose(self) -> None:
        """Release network resources.  No-op by default."""


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def parse_retry_after(value: str | None) -> float | None:
    """Parse a ``Retry-After`` header into seconds.

    Accepts both the delta-seconds and the HTTP-date forms.  Returns ``None``
    when the header is missing or unparseable.
    """
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def _first_text(value: Any) -> str | None:
    """Return the first non-empty string of a metadata value (str or list)."""
    if isinstance(value, list):
        value = next((v for v in value if isinstance(v, str) and v.strip()), None)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _split_tags(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, list):
        raw = [v for v in value if isinstance(v, str)]
    else:
        return ()
    tags: list[str] = []
    for tag in raw:
        tag = tag.strip()
        if tag and tag.lower() not in {t.lower() for t in tags}:
            tags.append(tag)
    return tuple(tags)


def _is_unsupported_content_type(content_type: str) -> bool:
    ct = content_type.lower().split(";")[0].strip()
    return any(ct.startswith(prefix) for prefix in UNSUPPORTED_CONTENT_TYPES)


def build_item_draft(url: str, data: dict[str, Any]) -> ItemDraft:
    """Map a Firecrawl ``data`` object to an :class:`ItemDraft`.

    Args:
        url: The normalized URL that was requested.
        data: The ``data`` member of a successful scrape response.

    Returns:
        The item draft, status ``COMPLETED``.

    Raises:
        ScrapeProviderError: If the target page itself answered with an
            error status.
        UnsupportedContentError: If the content type cannot be read or the
            page has neither content nor a title.
    """
    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        metadata = {}

    page_status = metadata.get("statusCode")
    if isinstance(page_status, int) and page_status >= 400:
        raise ScrapeProviderError(
            f"target page answered HTTP {page_status}",
            url=url,
            retryable=page_status >= 500,
            status_code=page_status,
        )

    content_type = _first_text(metadata.get("contentType")) or ""
    if content_type and _is_unsupported_content_type(content_type):
        raise UnsupportedContentError(f"unsupported content type {content_type!r}", url=url)

    content = data.get("markdown") if isinstance(data.get("markdown"), str) else None
    title = _first_text(metadata.get("title")) or _first_text(metadata.get("ogTitle"))
    if not (content and content.strip()) and not title:
        raise UnsupportedContentError("no readable content extracted", url=url)

    summary = _first_text(metadata.get("description")) or _first_text(
        metadata.get("ogDescription")
    )
    if summary and len(summary) > MAX_SUMMARY_CHARS:
        summary = summary[:MAX_SUMMARY_CHARS].rstrip() + "…"

    return ItemDraft(
        url=url,
        title=title,
        author=_first_text(metadata.get("author")) or _first_text(metadata.get("article:author")),
        summary=summary,
        tags=_split_tags(metadata.get("keywords")),
        og_image=_first_text(metadata.get("ogImage")) or _first_text(metadata.get("og:image")),
        status=ItemStatus.COMPLETED,
        content=content,
        canonical_url=_first_text(metadata.get("url")) or _first_text(metadata.get("sourceURL")),
    )


# ---------------------------------------------------------------------------
# Firecrawl
# ---------------------------------------------------------------------------


class FirecrawlProvider(ScrapeProvider):
    """Scrape provider backed by the Firecrawl HTTP API.

    Args:
        api_key: Firecrawl bearer token.
        base_url: API base URL.
        timeout: HTTP timeout in seconds for one request.
        http_client: Optional injected :class:`httpx.AsyncClient` (tests).
            An injected client is not closed by :meth:`aclose`.
    """

    name = "firecrawl"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.firecrawl.dev",
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def scrape(self, url: str) -> ItemDraft:
        client = self._get_client()
        payload = {
            "url": url,
            "formats": list(FIRECRAWL_FORMATS),
            "onlyMainContent": True,
        }
        try:
            response = await client.post(
                f"{self._base_url}{FIRECRAWL_SCRAPE_PATH}",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise ScrapeTimeoutError(f"provider timed out: {exc}", url=url) from exc
        except httpx.RequestError as exc:
            raise ScrapeProviderError(
                f"provider request error: {exc}", url=url, retryable=True
            ) from exc

        status = response.status_code
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            raise ScrapeRateLimitError(
                "provider rate limit reached", url=url, retry_after=retry_after
            )
        if status in RETRYABLE_STATUS_CODES or status >= 500:
            raise ScrapeProviderError(
                f"provider answered HTTP {status}", url=url, retryable=True, status_code=status
            )
        if status >= 400:
            raise ScrapeProviderError(
                f"provider refused request: HTTP {status} {_error_text(response)}".rstrip(),
                url=url,
                retryable=False,
                status_code=status,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UnsupportedContentError("provider returned a non-JSON body", url=url) from exc

        if not isinstance(body, dict) or not body.get("success") or not isinstance(
            body.get("data"), dict
        ):
            message = body.get("error") if isinstance(body, dict) else None
            raise UnsupportedContentError(
                f"provider could not extract the page: {message or 'malformed response'}",
                url=url,
            )

        item = build_item_draft(url, body["data"])
        logger.debug("importer: firecrawl extracted %s (title=%r)", url, item.title)
        return item


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return f"({body['error']})"
    return ""
