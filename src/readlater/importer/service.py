"""Import service: wires settings, provider, adapter and dispatcher together.

The API layer holds one :class:`ImportService` per application instance.
Persistence of the resulting item drafts is the caller's responsibility.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from readlater.config.settings import Settings
from readlater.importer.dispatcher import BulkImportDispatcher
from readlater.importer.normalizer import normalize_url
from readlater.importer.progress import ProgressStream
from readlater.importer.provider import FirecrawlProvider, ScrapeProvider
from readlater.importer.retry import RetryPolicy
from readlater.importer.scrape_client import ScrapeClient
from readlater.importer.types import ScrapeOutcome

logger = logging.getLogger(__name__)


class ImportService:
    """Single and bulk URL import.

    Args:
        client: Scrape client adapter.
        dispatcher: Bulk dispatcher built on the same client.
    """

    def __init__(self, client: ScrapeClient, dispatcher: BulkImportDispatcher) -> None:
        self._client = client
        self._dispatcher = dispatcher

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: ScrapeProvider | None = None,
    ) -> ImportService:
        """Build the service from application settings.

        Args:
            settings: Application settings.
            provider: Optional provider override; defaults to Firecrawl.
        """
        if provider is None:
            if not settings.firecrawl_api_key:
                logger.warning("importer: FIRECRAWL_API_KEY is not set; extractions will fail")
            provider = FirecrawlProvider(
                api_key=settings.firecrawl_api_key,
                base_url=settings.firecrawl_base_url,
                timeout=settings.scrape_timeout_seconds,
            )
        policy = RetryPolicy(
            max_retries=settings.scrape_max_retries,
            base_delay=settings.scrape_backoff_base_seconds,
            multiplier=settings.scrape_backoff_multiplier,
            max_delay=settings.scrape_backoff_max_seconds,
            jitter=settings.scrape_backoff_jitter,
        )
        client = ScrapeClient(
            provider,
            timeout=settings.scrape_timeout_seconds,
            retry_policy=policy,
        )
        dispatcher = BulkImportDispatcher(
            client,
            concurrency=settings.import_concurrency,
            max_batch_size=settings.max_batch_size,
        )
        return cls(client, dispatcher)

    @property
    def dispatcher(self) -> BulkImportDispatcher:
        return self._dispatcher

    async def import_url(self, raw_url: str) -> ScrapeOutcome:
        """Import one URL.

        Raises:
            InvalidUrlError: If *raw_url* cannot be normalized.
        """
        url = normalize_url(raw_url)
        return await self._client.fetch(url)

    def bulk_import(
        self,
        raw_urls: Iterable[str],
        *,
        concurrency: int | None = None,
    ) -> ProgressStream:
        """Schedule a batch; see :meth:`BulkImportDispatcher.dispatch`."""
        return self._dispatcher.dispatch(raw_urls, concurrency=concurrency)

    async def aclose(self) -> None:
        await self._client.provider.aclose()
