"""Pull-based progress stream for one bulk import batch.

:class:`ProgressStream` is a lazy, finite, single-pass async iterator of
:class:`~readlater.importer.types.ProgressEvent`.  Jobs run in the
dispatcher's worker pool independently of how fast the consumer pulls;
finished outcomes wait in the pool's queue until the consumer asks for them.

The ``completed`` counter is assigned here, by the single consumer-side
writer, so concurrent completions can never produce lost or duplicated
counts.

Usage::

    async with dispatcher.dispatch(urls) as stream:
        async for event in stream:
            progress_bar.update(event.completed, event.total)
    summary = stream.summary()

Leaving the ``async with`` block early (``break``, exception, task
cancellation) cancels the batch: no new job starts and in-flight outcomes
are discarded.  A bare ``async for`` loop that is abandoned cancels the
batch too, once the event loop finalizes its iterator.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from readlater.core.exceptions import BatchCancelledError, ImportStateError
from readlater.importer.aggregator import ResultAggregator
from readlater.importer.types import (
    BatchSummary,
    FailureDetail,
    ImportJob,
    ProgressEvent,
    ScrapeOutcome,
    ScrapeSuccess,
)

if TYPE_CHECKING:
    from readlater.importer.dispatcher import WorkerPool

logger = logging.getLogger(__name__)

_PENDING = "pending"
_RUNNING = "running"
_EXHAUSTED = "exhausted"
_CANCELLED = "cancelled"


def _to_event(job: ImportJob, outcome: ScrapeOutcome, completed: int, total: int) -> ProgressEvent:
    if isinstance(outcome, ScrapeSuccess):
        return ProgressEvent(
            completed=completed,
            total=total,
            url=job.url,
            status="success",
            item=outcome.item,
        )
    return ProgressEvent(
        completed=completed,
        total=total,
        url=job.url,
        status="error",
        reason=outcome.kind.value,
        message=outcome.message,
    )


class ProgressStream:
    """Progress events of one batch, in completion order.

    Args:
        pool: The worker pool executing the batch's jobs.
        rejected: Inputs rejected during normalization; they are not
            streamed but are counted in :meth:`summary`.
    """

    def __init__(self, pool: WorkerPool, rejected: tuple[FailureDetail, ...] = ()) -> None:
        self._pool = pool
        self._rejected = rejected
        self._aggregator = ResultAggregator(rejected)
        self._reported: set[str] = set()
        self._delivered = 0
        self._state = _PENDING

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def total(self) -> int:
        """Number of scheduled jobs (and of events the stream will yield)."""
        return self._pool.total

    @property
    def completed(self) -> int:
        """Number of events delivered so far."""
        return self._delivered

    @property
    def rejected(self) -> tuple[FailureDetail, ...]:
        return self._rejected

    @property
    def exhausted(self) -> bool:
        return self._state == _EXHAUSTED

    @property
    def cancelled(self) -> bool:
        return self._state == _CANCELLED

    @property
    def unreported_urls(self) -> list[str]:
        """Scheduled URLs for which no event has been delivered yet."""
        return [job.url for job in self._pool.jobs if job.url not in self._reported]

    # ------------------------------------------------------------------
    # Async iteration
    # ------------------------------------------------------------------

    def _ensure_started(self) -> None:
        if self._state == _PENDING:
            self._state = _RUNNING
            self._pool.start()

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        return self._events()

    async def _events(self) -> AsyncIterator[ProgressEvent]:
        """Yield the remaining events; abandoning the iterator cancels the batch."""
        try:
            while True:
                try:
                    event = await self.__anext__()
                except StopAsyncIteration:
                    return
                yield event
        finally:
            await self.aclose()

    async def __anext__(self) -> ProgressEvent:
        if self._state in (_EXHAUSTED, _CANCELLED):
            raise StopAsyncIteration
        self._ensure_started()

        if self._delivered >= self.total:
            await self._pool.join()
            self._state = _EXHAUSTED
            logger.info(
                "importer: batch finished total=%d succeeded=%d failed=%d",
                self.total,
                self._aggregator.succeeded,
                self._aggregator.failed,
            )
            raise StopAsyncIteration

        job, outcome = await self._pool.next_outcome()
        self._delivered += 1
        self._reported.add(job.url)
        event = _to_event(job, outcome, self._delivered, self.total)
        self._aggregator.add(event)
        logger.debug(
            "importer: progress %d/%d %s %s", event.completed, event.total, event.status, event.url
        )
        return event

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ProgressStream:
        self._ensure_started()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        await self.aclose()

    async def aclose(self, *, wait_in_flight: bool = False) -> None:
        """Abandon the batch.

        No new job is started.  In-flight provider calls are cancelled, or,
        with ``wait_in_flight=True``, allowed to finish; either way their
        outcomes are discarded.  A no-op once the stream is exhausted or
        already cancelled.

        Args:
            wait_in_flight: Let running calls complete instead of cancelling them.
        """
        if self._state in (_EXHAUSTED, _CANCELLED):
            return
        started = self._state == _RUNNING
        self._state = _CANCELLED
        if started:
            await self._pool.cancel(wait_in_flight=wait_in_flight)
        logger.info(
            "importer: batch cancelled after %d of %d event(s)", self._delivered, self.total
        )

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def summary(self) -> BatchSummary:
        """Return the final summary of an exhausted stream.

        Raises:
            BatchCancelledError: If the stream was abandoned.
            ImportStateError: If the stream has not been exhausted yet.
        """
        if self._state == _CANCELLED:
            raise BatchCancelledError(reported=self._delivered, total=self.total)
        if self._state != _EXHAUSTED:
            raise ImportStateError(
                f"summary requested after {self._delivered} of {self.total} events; "
                "exhaust the stream first"
            )
        return self._aggregator.finalize()

    async def drain(self) -> BatchSummary:
        """Consume every remaining event and return the summary."""
        async with self:
            async for _ in self:
                pass
        return self.summary()
