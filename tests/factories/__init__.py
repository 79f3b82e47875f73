"""Test data factories.

Available factories
-------------------
FirecrawlMetadataFactory   : ``data.metadata`` of a Firecrawl scrape response
FirecrawlDataFactory       : ``data`` of a Firecrawl scrape response
FirecrawlResponseFactory   : full Firecrawl ``/v1/scrape`` JSON body
ScriptedProvider           : in-memory scrape provider replaying per-URL steps
RecordingSleep             : ``asyncio.sleep`` stand-in recording backoff delays
"""

from __future__ import annotations

from tests.factories.firecrawl import (
    FirecrawlDataFactory,
    FirecrawlMetadataFactory,
    FirecrawlResponseFactory,
)
from tests.factories.providers import (
    RecordingSleep,
    ScriptedProvider,
    make_client,
    make_item,
)

__all__ = [
    "FirecrawlDataFactory",
    "FirecrawlMetadataFactory",
    "FirecrawlResponseFactory",
    "RecordingSleep",
    "ScriptedProvider",
    "make_client",
    "make_item",
]
