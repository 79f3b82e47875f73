"""Unit tests for the import service wiring."""

from __future__ import annotations

import httpx
import pytest
import respx

from readlater.config.settings import Settings
from readlater.core.exceptions import ErrorKind, InvalidUrlError
from readlater.importer.provider import FirecrawlProvider
from readlater.importer.service import ImportService
from readlater.importer.types import ScrapeFailure, ScrapeSuccess
from tests.factories.firecrawl import FirecrawlResponseFactory
from tests.factories.providers import ScriptedProvider


class TestFromSettings:
    def test_builds_firecrawl_provider_by_default(self, settings: Settings) -> None:
        service = ImportService.from_settings(settings)

        assert isinstance(service._client.provider, FirecrawlProvider)

    def test_settings_flow_into_policy_and_dispatcher(self) -> None:
        settings = Settings(
            import_concurrency=7,
            scrape_max_retries=4,
            scrape_backoff_base_seconds=1.5,
            scrape_backoff_max_seconds=12.0,
            scrape_backoff_jitter=0.0,
        )

        service = ImportService.from_settings(settings, provider=ScriptedProvider())

        policy = service._client.retry_policy
        assert service.dispatcher.concurrency == 7
        assert policy.max_retries == 4
        assert policy.base_delay == 1.5
        assert policy.max_delay == 12.0
        assert policy.jitter == 0.0


@pytest.mark.asyncio
class TestImportService:
    async def test_import_url_normalizes_before_fetching(self, settings: Settings) -> None:
        provider = ScriptedProvider()
        service = ImportService.from_settings(settings, provider=provider)

        outcome = await service.import_url("HTTPS://Example.com/post/?utm_source=x")

        assert isinstance(outcome, ScrapeSuccess)
        assert provider.calls == ["https://example.com/post"]

    async def test_import_url_rejects_invalid_input(self, settings: Settings) -> None:
        service = ImportService.from_settings(settings, provider=ScriptedProvider())

        with pytest.raises(InvalidUrlError):
            await service.import_url("not a url")

    async def test_bulk_import_returns_stream(self, settings: Settings) -> None:
        service = ImportService.from_settings(settings, provider=ScriptedProvider())

        summary = await service.bulk_import(["https://a.test/1", "https://a.test/2"]).drain()

        assert summary.succeeded == 2

    async def test_aclose_closes_provider(self, settings: Settings) -> None:
        provider = ScriptedProvider()
        service = ImportService.from_settings(settings, provider=provider)

        await service.aclose()

        assert provider.closed is True

    async def test_end_to_end_with_firecrawl(self, settings: Settings) -> None:
        body = FirecrawlResponseFactory.build(data__metadata__title="Hello")
        with respx.mock(base_url=settings.firecrawl_base_url) as mock:
            mock.post("/v1/scrape").mock(
                side_effect=[httpx.Response(503), httpx.Response(200, json=body)]
            )
            service = ImportService.from_settings(
                settings.model_copy(
                    update={"scrape_backoff_base_seconds": 0.0, "scrape_backoff_jitter": 0.0}
                )
            )
            try:
                outcome = await service.import_url("https://example.com/hello")
            finally:
                await service.aclose()

        assert isinstance(outcome, ScrapeSuccess)
        assert outcome.attempts == 2
        assert outcome.item.title == "Hello"

    async def test_end_to_end_permanent_failure(self, settings: Settings) -> None:
        with respx.mock(base_url=settings.firecrawl_base_url) as mock:
            route = mock.post("/v1/scrape").mock(return_value=httpx.Response(402))
            service = ImportService.from_settings(settings)
            try:
                outcome = await service.import_url("https://example.com/paywalled")
            finally:
                await service.aclose()

        assert isinstance(outcome, ScrapeFailure)
        assert outcome.kind is ErrorKind.PROVIDER_ERROR
        assert route.call_count == 1
