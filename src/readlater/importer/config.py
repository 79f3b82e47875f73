"""Constants and tuning defaults for the bulk import pipeline.

Runtime values come from :class:`~readlater.config.settings.Settings`; the
constants below are the defaults used when a component is built directly
(tests, scripts) without going through the settings object.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------

#: Default maximum number of provider calls in flight for one batch.
DEFAULT_CONCURRENCY: int = 5

#: Default largest number of raw URLs accepted in one batch.
DEFAULT_MAX_BATCH_SIZE: int = 100

# ---------------------------------------------------------------------------
# Provider calls
# ---------------------------------------------------------------------------

#: Default per-call timeout in seconds (one attempt, backoff excluded).
DEFAULT_TIMEOUT: float = 30.0

#: Default number of retries after the first attempt.
DEFAULT_MAX_RETRIES: int = 2

#: Default delay before the first retry, in seconds.
DEFAULT_BACKOFF_BASE: float = 0.5

#: Default exponential growth factor between retries.
DEFAULT_BACKOFF_MULTIPLIER: float = 2.0

#: Default ceiling for a single backoff delay, in seconds.
DEFAULT_BACKOFF_MAX: float = 30.0

#: Default jitter, as a fraction of the computed delay.
DEFAULT_BACKOFF_JITTER: float = 0.1

# ---------------------------------------------------------------------------
# Firecrawl
# ---------------------------------------------------------------------------

#: Path of the single-URL scrape endpoint, relative to the API base URL.
FIRECRAWL_SCRAPE_PATH: str = "/v1/scrape"

#: Output formats requested from Firecrawl for every page.
FIRECRAWL_FORMATS: tuple[str, ...] = ("markdown",)

#: Provider statuses worth another attempt (429 is handled separately).
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 500, 502, 503, 504})

#: Content-Type prefixes that cannot become a readable item.
UNSUPPORTED_CONTENT_TYPES: frozenset[str] = frozenset(
    {
        "application/octet-stream",
        "application/zip",
        "audio/",
        "font/",
        "image/",
        "video/",
    }
)

#: Maximum characters kept from the summary/description metadata.
MAX_SUMMARY_CHARS: int = 1000

# ---------------------------------------------------------------------------
# URL normalization
# ---------------------------------------------------------------------------

#: Query parameters stripped before deduplication.
TRACKING_PARAMS: frozenset[str] = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "fbclid",
        "gclid",
        "mc_cid",
        "mc_eid",
        "_ga",
    }
)

#: Schemes accepted for import.
ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

#: Ports dropped from the host because they are implied by the scheme.
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}
