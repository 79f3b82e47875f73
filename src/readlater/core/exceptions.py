"""Application-wide exception hierarchy for readlater.

All custom exceptions subclass ``ReadLaterError``, enabling consistent error
handling and structured logging across the application.

Hierarchy::

    ReadLaterError
    ├── ImportConfigError
    ├── ImportStateError
    │   └── BatchCancelledError
    ├── InvalidUrlError
    └── ScrapeError               (kind, retryable)
        ├── ScrapeTimeoutError
        ├── ScrapeRateLimitError  (retry_after: float | None)
        ├── ScrapeProviderError
        └── UnsupportedContentError

Per-URL errors (``InvalidUrlError`` and the ``ScrapeError`` family) never
escape the import pipeline: the scrape client adapter converts them into
:class:`~readlater.importer.types.ScrapeFailure` outcomes.  Only
``ImportConfigError`` is raised to the caller, before any job starts.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Stable, user-visible classification of a per-URL import failure.

    The value doubles as the ``reason`` string reported in batch summaries.
    """

    INVALID_URL = "InvalidUrl"
    TIMEOUT = "Timeout"
    RATE_LIMITED = "RateLimited"
    PROVIDER_ERROR = "ProviderError"
    UNSUPPORTED_CONTENT = "UnsupportedContent"
    CANCELLED = "Cancelled"


class ReadLaterError(Exception):
    """Base class for all readlater exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Batch-level exceptions
# ---------------------------------------------------------------------------


class ImportConfigError(ReadLaterError):
    """Raised synchronously when a bulk import request cannot be started.

    Covers an empty URL set, an invalid concurrency ceiling and batches
    larger than the configured maximum.  No job has been scheduled when
    this is raised.
    """


class ImportStateError(ReadLaterError):
    """Raised when a progress stream is used out of order.

    For example, asking for the batch summary before the stream has been
    exhausted.
    """


class BatchCancelledError(ImportStateError):
    """Raised when the summary of a cancelled batch is requested.

    A cancelled batch never produces a summary; the caller that abandoned
    the stream builds its own partial picture from the events it observed.

    Args:
        reported: Number of progress events delivered before cancellation.
        total: Number of jobs scheduled for the batch.
    """

    kind = ErrorKind.CANCELLED

    def __init__(self, reported: int, total: int) -> None:
        super().__init__(
            f"Batch cancelled after {reported} of {total} events; no summary available"
        )
        self.reported = reported
        self.total = total


# ---------------------------------------------------------------------------
# Per-URL exceptions
# ---------------------------------------------------------------------------


class InvalidUrlError(ReadLaterError):
    """Raised when a raw input string is not a usable absolute http(s) URL.

    Args:
        raw_url: The offending input, as submitted.
        message: Human-readable description of the problem.
    """

    kind = ErrorKind.INVALID_URL

    def __init__(self, raw_url: str, message: str = "not a valid absolute URL") -> None:
        super().__init__(f"{message}: {raw_url!r}")
        self.raw_url = raw_url
        self.message = message


class ScrapeError(ReadLaterError):
    """Raised by a scrape provider when a single extraction fails.

    Subclasses fix ``kind`` and the default ``retryable`` flag; the flag can
    be overridden per instance (a provider error may or may not be worth
    retrying depending on the status code).

    Args:
        message: Human-readable description of the failure.
        url: The URL whose extraction failed.
        retryable: Override for the class-level default.
    """

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        url: str | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.retryable = self.default_retryable if retryable is None else retryable


class ScrapeTimeoutError(ScrapeError):
    """Raised when the provider does not answer within the per-call timeout."""

    kind = ErrorKind.TIMEOUT
    default_retryable = True


class ScrapeRateLimitError(ScrapeError):
    """Raised when the provider signals that the caller is rate limited.

    Args:
        message: Human-readable description of the rate limit.
        url: The URL whose extraction was refused.
        retry_after: Seconds the provider asked us to wait, or ``None`` if
            no hint was supplied.
    """

    kind = ErrorKind.RATE_LIMITED
    default_retryable = True

    def __init__(
        self,
        message: str,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url)
        self.retry_after = retry_after


class ScrapeProviderError(ScrapeError):
    """Raised for provider-side failures (5xx, transport errors, 4xx refusals).

    Retryable only when constructed with ``retryable=True``.

    Args:
        message: Human-readable description of the failure.
        url: The URL whose extraction failed.
        retryable: Whether a later attempt may succeed.
        status_code: HTTP status returned by the provider, if any.
    """

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        url: str | None = None,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, url=url, retryable=retryable)
        self.status_code = status_code


class UnsupportedContentError(ScrapeError):
    """Raised when the page cannot be turned into an item.

    Covers unsupported content types and malformed provider payloads.
    Never retryable.
    """

    kind = ErrorKind.UNSUPPORTED_CONTENT
