"""Bounded dispatcher for bulk imports.

:class:`BulkImportDispatcher` validates and normalizes a raw batch, creates
one :class:`~readlater.importer.types.ImportJob` per distinct URL and hands
them to a :class:`WorkerPool` wrapped in a
:class:`~readlater.importer.progress.ProgressStream`.

Scheduling:
    The pool runs ``min(concurrency, total)`` worker coroutines.  Each worker
    takes the next pending job from a FIFO as soon as its previous provider
    call completes, so at most ``concurrency`` calls are ever in flight and
    a slow page only holds up its own slot.  Completed outcomes are queued
    for the stream without waiting for the consumer.

Cancellation:
    :meth:`WorkerPool.cancel` stops the scheduling loop; running calls are
    cancelled (``CancelledError`` propagates into the scrape client) or, on
    request, allowed to finish.  Their outcomes are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Iterable, Sequence

from readlater.core.exceptions import ErrorKind, ImportConfigError
from readlater.importer.config import DEFAULT_CONCURRENCY, DEFAULT_MAX_BATCH_SIZE
from readlater.importer.normalizer import normalize_batch
from readlater.importer.progress import ProgressStream
from readlater.importer.scrape_client import ScrapeClient
from readlater.importer.types import ImportJob, ScrapeFailure, ScrapeOutcome

logger = logging.getLogger(__name__)


def _validate_concurrency(concurrency: object) -> int:
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ImportConfigError(f"concurrency must be a positive integer, got {concurrency!r}")
    return concurrency


class WorkerPool:
    """Executes a fixed list of jobs with a hard concurrency ceiling.

    Args:
        client: Scrape client adapter used for every job.
        jobs: Jobs to run, in submission order.
        concurrency: Maximum number of simultaneous provider calls.
    """

    def __init__(
        self,
        client: ScrapeClient,
        jobs: Sequence[ImportJob],
        concurrency: int,
    ) -> None:
        self._client = client
        self._jobs = tuple(jobs)
        self._concurrency = _validate_concurrency(concurrency)
        self._pending: deque[ImportJob] = deque(self._jobs)
        self._in_flight: set[str] = set()
        self._results: asyncio.Queue[tuple[ImportJob, ScrapeOutcome]] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []
        self._stopping = False

    @property
    def jobs(self) -> tuple[ImportJob, ...]:
        return self._jobs

    @property
    def total(self) -> int:
        return len(self._jobs)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def start(self) -> None:
        """Spawn the worker tasks.  Must be called from a running event loop."""
        if self._workers:
            return
        for index in range(min(self._concurrency, self.total)):
            self._workers.append(
                asyncio.create_task(self._worker(index), name=f"import-worker-{index}")
            )

    async def next_outcome(self) -> tuple[ImportJob, ScrapeOutcome]:
        """Wait for the next finished job, in completion order."""
        return await self._results.get()

    async def join(self) -> None:
        """Wait for every worker to exit."""
        if self._workers:
            await asyncio.gather(*self._workers)

    async def cancel(self, *, wait_in_flight: bool = False) -> None:
        """Stop scheduling and unwind the workers.

        Args:
            wait_in_flight: Let calls already running finish naturally
                instead of cancelling them.
        """
        self._stopping = True
        dropped = len(self._pending)
        self._pending.clear()
        if not wait_in_flight:
            for task in self._workers:
                task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        logger.info(
            "importer: worker pool stopped, %d pending job(s) never started", dropped
        )

    async def _worker(self, index: int) -> None:
        while self._pending and not self._stopping:
            job = self._pending.popleft()
            self._in_flight.add(job.url)
            try:
                outcome = await self._run(job)
            except asyncio.CancelledError:
                logger.debug(
                    "importer: worker %d %s for %s", index, ErrorKind.CANCELLED.value, job.url
                )
                raise
            finally:
                self._in_flight.discard(job.url)

            if self._stopping:
                logger.debug("importer: discarding outcome for %s after cancellation", job.url)
                return
            self._results.put_nowait((job, outcome))

    async def _run(self, job: ImportJob) -> ScrapeOutcome:
        try:
            return await self._client.fetch(job.url)
        except Exception as exc:  # noqa: BLE001
            # The adapter is total; this only guards against a broken client.
            logger.exception("importer: scrape client raised for %s", job.url)
            return ScrapeFailure(
                kind=ErrorKind.PROVIDER_ERROR,
                message=f"unexpected error: {exc}",
                retryable=False,
            )


class BulkImportDispatcher:
    """Entry point of the bulk import pipeline.

    Args:
        client: Scrape client adapter shared by every batch.
        concurrency: Default concurrency ceiling per batch.
        max_batch_size: Largest number of raw URLs accepted per batch.

    Raises:
        ImportConfigError: If ``concurrency`` or ``max_batch_size`` is invalid.
    """

    def __init__(
        self,
        client: ScrapeClient,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ) -> None:
        self._client = client
        self._concurrency = _validate_concurrency(concurrency)
        if max_batch_size < 1:
            raise ImportConfigError(f"max_batch_size must be >= 1, got {max_batch_size!r}")
        self._max_batch_size = max_batch_size

    @property
    def concurrency(self) -> int:
        return self._concurrency

    def dispatch(
        self,
        raw_urls: Iterable[str],
        *,
        concurrency: int | None = None,
    ) -> ProgressStream:
        """Validate, normalize and schedule a batch.

        Nothing runs until the returned stream is entered or first pulled.

        Args:
            raw_urls: User-supplied URL strings (unvalidated, may repeat).
            concurrency: Per-batch override of the concurrency ceiling.

        Returns:
            The batch's :class:`ProgressStream`.

        Raises:
            ImportConfigError: If the batch is empty, too large, passed as a
                single string, or the concurrency ceiling is invalid.
        """
        if isinstance(raw_urls, str):
            raise ImportConfigError("expected a collection of URLs, got a single string")
        urls = list(raw_urls)
        if not urls:
            raise ImportConfigError("at least one URL is required")
        if len(urls) > self._max_batch_size:
            raise ImportConfigError(
                f"batch of {len(urls)} URLs exceeds the limit of {self._max_batch_size}"
            )
        ceiling = self._concurrency if concurrency is None else _validate_concurrency(concurrency)

        batch = normalize_batch(urls)
        jobs = [ImportJob(url=url) for url in batch.urls]
        logger.info(
            "importer: batch dispatched total=%d rejected=%d duplicates=%d concurrency=%d",
            len(jobs),
            len(batch.rejected),
            batch.duplicates,
            ceiling,
        )
        return ProgressStream(WorkerPool(self._client, jobs, ceiling), rejected=batch.rejected)
