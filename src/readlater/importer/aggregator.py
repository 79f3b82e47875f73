"""Fold of progress events into a batch summary.

The aggregator holds no reference to the dispatcher: any consumer can build
the same summary by folding over the events it received, which is exactly
what :func:`summarize` does.
"""

from __future__ import annotations

from collections.abc import Iterable

from readlater.importer.types import BatchSummary, FailureDetail, ProgressEvent


class ResultAggregator:
    """Running success/failure counts for one batch.

    ``succeeded`` counts events with ``status == "success"``; ``failed``
    counts every other event plus every input rejected during normalization.
    """

    def __init__(self, rejected: Iterable[FailureDetail] = ()) -> None:
        self._succeeded = 0
        self._failures: list[FailureDetail] = list(rejected)

    @property
    def succeeded(self) -> int:
        return self._succeeded

    @property
    def failed(self) -> int:
        return len(self._failures)

    def add(self, event: ProgressEvent) -> None:
        if event.status == "success":
            self._succeeded += 1
            return
        self._failures.append(
            FailureDetail(
                url=event.url,
                reason=event.reason or "Unknown",
                message=event.message or "",
            )
        )

    def finalize(self) -> BatchSummary:
        return BatchSummary(
            total=self._succeeded + len(self._failures),
            succeeded=self._succeeded,
            failed=len(self._failures),
            failures=tuple(self._failures),
        )


def summarize(
    events: Iterable[ProgressEvent],
    rejected: Iterable[FailureDetail] = (),
) -> BatchSummary:
    """Build a :class:`BatchSummary` from already-collected events.

    Args:
        events: Progress events of one batch, in any order.
        rejected: Normalization failures of the same batch.

    Returns:
        The summary; ``succeeded + failed == total``.
    """
    aggregator = ResultAggregator(rejected)
    for event in events:
        aggregator.add(event)
    return aggregator.finalize()
