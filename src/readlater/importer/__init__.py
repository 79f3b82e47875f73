"""Bulk import pipeline.

Takes a batch of URLs, extracts each through the scrape provider with
bounded concurrency and streams per-URL progress back to the caller.

Sub-modules:
- ``config``       : constants and tuning defaults
- ``types``        : jobs, outcomes, progress events, batch summaries
- ``normalizer``   : URL canonicalization and batch deduplication
- ``provider``     : scrape provider boundary and the Firecrawl client
- ``retry``        : exponential backoff policy
- ``scrape_client``: per-URL adapter: timeout, retries, error containment
- ``dispatcher``   : bounded worker pool and batch entry point
- ``progress``     : pull-based progress stream
- ``aggregator``   : fold of events into a batch summary
- ``service``      : wiring from settings
- ``router``       : FastAPI router (``/imports/``)
"""

from __future__ import annotations

from readlater.importer.aggregator import ResultAggregator, summarize
from readlater.importer.dispatcher import BulkImportDispatcher, WorkerPool
from readlater.importer.normalizer import NormalizedBatch, normalize_batch, normalize_url
from readlater.importer.progress import ProgressStream
from readlater.importer.provider import FirecrawlProvider, ScrapeProvider
from readlater.importer.retry import RetryPolicy
from readlater.importer.scrape_client import ScrapeClient
from readlater.importer.service import ImportService
from readlater.importer.types import (
    BatchSummary,
    FailureDetail,
    ImportJob,
    ItemDraft,
    ItemStatus,
    ProgressEvent,
    ScrapeFailure,
    ScrapeOutcome,
    ScrapeSuccess,
)

__all__ = [
    "BatchSummary",
    "BulkImportDispatcher",
    "FailureDetail",
    "FirecrawlProvider",
    "ImportJob",
    "ImportService",
    "ItemDraft",
    "ItemStatus",
    "NormalizedBatch",
    "ProgressEvent",
    "ProgressStream",
    "ResultAggregator",
    "RetryPolicy",
    "ScrapeClient",
    "ScrapeFailure",
    "ScrapeOutcome",
    "ScrapeProvider",
    "ScrapeSuccess",
    "WorkerPool",
    "normalize_batch",
    "normalize_url",
    "summarize",
]
