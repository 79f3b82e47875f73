"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
The Firecrawl API key and every import tuning knob are read exclusively
through this module; never call ``os.getenv`` directly elsewhere in the
codebase.

Usage::

    from readlater.config.settings import get_settings

    settings = get_settings()
    ceiling = settings.import_concurrency
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables and an optional .env file.

    Every field has a default so the application starts without a ``.env``
    file; the scrape provider will reject requests until
    ``FIRECRAWL_API_KEY`` is supplied.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    app_name: str = "Read Later"
    """Human-readable application name shown in the OpenAPI docs."""

    debug: bool = False
    """Enable FastAPI debug mode and verbose error responses.  Never True in production."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    allowed_origins: list[str] = ["http://localhost:3000"]
    """Origins permitted by the CORS middleware (the web UI dev server by default)."""

    # ------------------------------------------------------------------
    # Scrape provider (Firecrawl)
    # ------------------------------------------------------------------

    firecrawl_api_key: str = ""
    """Bearer token for the Firecrawl API.  Required for real extractions."""

    firecrawl_base_url: str = "https://api.firecrawl.dev"
    """Base URL of the Firecrawl API (override for self-hosted deployments)."""

    # ------------------------------------------------------------------
    # Bulk import pipeline
    # ------------------------------------------------------------------

    import_concurrency: int = Field(default=5, ge=1)
    """Maximum number of extraction calls in flight for one batch."""

    max_batch_size: int = Field(default=100, ge=1)
    """Largest number of raw URLs accepted in a single bulk import."""

    scrape_timeout_seconds: float = Field(default=30.0, gt=0)
    """Hard upper bound on a single provider call, retries excluded."""

    scrape_max_retries: int = Field(default=2, ge=0)
    """Retries after the first attempt for transient failures."""

    scrape_backoff_base_seconds: float = Field(default=0.5, ge=0)
    """Delay before the first retry; doubled (by default) on every retry."""

    scrape_backoff_multiplier: float = Field(default=2.0, ge=1)
    """Exponential growth factor between consecutive retry delays."""

    scrape_backoff_max_seconds: float = Field(default=30.0, ge=0)
    """Ceiling for a single backoff delay.  A provider ``Retry-After`` hint
    above this value ends the retry loop instead of sleeping."""

    scrape_backoff_jitter: float = Field(default=0.1, ge=0, le=1)
    """Random fraction of the computed delay added on top of it."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings instance.

    The first call reads the environment (and ``.env``); subsequent calls
    return the same object.  Tests call ``get_settings.cache_clear()`` after
    patching the environment.
    """
    return Settings()
