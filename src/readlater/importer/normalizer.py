"""URL normalization and batch deduplication.

Pure functions, no I/O.  A batch is normalized once, before scheduling:
valid URLs are canonicalized and deduplicated (first occurrence wins, order
of first appearance kept), invalid entries are collected as failures and
never reach the scrape provider.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass, field

from readlater.core.exceptions import ErrorKind, InvalidUrlError
from readlater.importer.config import ALLOWED_SCHEMES, DEFAULT_PORTS, TRACKING_PARAMS
from readlater.importer.types import FailureDetail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedBatch:
    """Outcome of normalizing a raw batch.

    Attributes:
        urls: Deduplicated normalized URLs in order of first appearance.
        rejected: One failure per input that could not be normalized.
        duplicates: Number of valid inputs dropped as duplicates.
    """

    urls: tuple[str, ...] = ()
    rejected: tuple[FailureDetail, ...] = field(default_factory=tuple)
    duplicates: int = 0


def _strip_tracking(query: str) -> str:
    pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
    kept = [(k, v) for k, v in pairs if k.lower() not in TRACKING_PARAMS]
    if len(kept) == len(pairs):
        # Leave untouched queries byte-for-byte so normalization is idempotent.
        return query
    return urllib.parse.urlencode(kept)


def normalize_url(raw_url: str) -> str:
    """Return the canonical form of *raw_url*.

    Transformations, in order:

    1. Trim surrounding whitespace.
    2. Require an ``http``/``https`` scheme and a host.
    3. Lowercase scheme and host; drop user info and scheme-default ports.
    4. Remove tracking query parameters (UTM, fbclid, gclid, ...).
    5. Strip the trailing slash from the path; an empty path becomes ``/``.
    6. Drop the fragment.

    The function is idempotent: ``normalize_url(normalize_url(u)) ==
    normalize_url(u)``.  ``http://a.com`` and ``http://a.com/`` normalize to
    the same string.

    Args:
        raw_url: URL as submitted by the user.

    Returns:
        The normalized URL.

    Raises:
        InvalidUrlError: If the input is empty, not a string, relative,
            uses another scheme, has no host, or contains whitespace.
    """
    if not isinstance(raw_url, str):
        raise InvalidUrlError(repr(raw_url), "URL must be a string")

    candidate = raw_url.strip()
    if not candidate:
        raise InvalidUrlError(raw_url, "empty URL")
    if any(ch.isspace() for ch in candidate):
        raise InvalidUrlError(raw_url, "URL contains whitespace")

    parsed = urllib.parse.urlsplit(candidate)
    scheme = parsed.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidUrlError(raw_url, "URL must be absolute http(s)")

    try:
        hostname = parsed.hostname
        port = parsed.port
    except ValueError as exc:
        raise InvalidUrlError(raw_url, f"malformed host or port ({exc})") from exc

    if not hostname or hostname.startswith(".") or ".." in hostname:
        raise InvalidUrlError(raw_url, "URL has no valid host")

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    path = parsed.path.rstrip("/") or "/"
    query = _strip_tracking(parsed.query) if parsed.query else ""

    return urllib.parse.urlunsplit((scheme, netloc, path, query, ""))


def normalize_batch(raw_urls: Iterable[str]) -> NormalizedBatch:
    """Normalize and deduplicate a raw batch.

    Deduplication is by exact equality of the normalized string.  Invalid
    entries are reported with reason ``"InvalidUrl"`` and the error message;
    they are not fatal for the rest of the batch.

    Args:
        raw_urls: User-supplied URL strings, possibly with duplicates.

    Returns:
        A :class:`NormalizedBatch`.
    """
    seen: set[str] = set()
    urls: list[str] = []
    rejected: list[FailureDetail] = []
    duplicates = 0

    for raw in raw_urls:
        try:
            url = normalize_url(raw)
        except InvalidUrlError as exc:
            logger.info("importer: rejected input %r: %s", raw, exc.message)
            rejected.append(
                FailureDetail(
                    url=raw if isinstance(raw, str) else repr(raw),
                    reason=ErrorKind.INVALID_URL.value,
                    message=exc.message,
                )
            )
            continue
        if url in seen:
            duplicates += 1
            continue
        seen.add(url)
        urls.append(url)

    if duplicates:
        logger.debug("importer: dropped %d duplicate URL(s)", duplicates)

    return NormalizedBatch(urls=tuple(urls), rejected=tuple(rejected), duplicates=duplicates)
