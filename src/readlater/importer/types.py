"""Data model shared by the bulk import pipeline.

Every record here is immutable once built.  ``ScrapeOutcome`` is the union
returned by the scrape client adapter; ``ProgressEvent`` is what the
progress stream yields; ``BatchSummary`` is the aggregator's final fold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union

from readlater.core.exceptions import ErrorKind

ProgressStatus = Literal["success", "error"]


class ItemStatus(str, Enum):
    """Lifecycle status of a saved item, as stored by the item repository."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ItemDraft:
    """Extracted content ready to be persisted by the item repository.

    Attributes:
        url: The normalized URL that was imported.
        title: Page title, if detected.
        author: Author byline, if detected.
        summary: Short description (meta/OG description), if available.
        tags: Keywords attached to the page.
        og_image: Representative image URL.
        status: Item status to persist; ``COMPLETED`` after a successful
            extraction.
        content: Main content as markdown.
        canonical_url: URL reported by the provider after redirects.
    """

    url: str
    title: str | None = None
    author: str | None = None
    summary: str | None = None
    tags: tuple[str, ...] = ()
    og_image: str | None = None
    status: ItemStatus = ItemStatus.COMPLETED
    content: str | None = None
    canonical_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "summary": self.summary,
            "tags": list(self.tags),
            "og_image": self.og_image,
            "status": self.status.value,
            "content": self.content,
            "canonical_url": self.canonical_url,
        }


@dataclass(frozen=True)
class ImportJob:
    """One URL scheduled by the dispatcher.

    ``attempt`` counts dispatches of this URL within the batch; the adapter's
    own retries are reported on the outcome, not here.
    """

    url: str
    attempt: int = 1


@dataclass(frozen=True)
class ScrapeSuccess:
    item: ItemDraft
    attempts: int = 1

    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class ScrapeFailure:
    kind: ErrorKind
    message: str
    retryable: bool
    attempts: int = 1

    ok: Literal[False] = field(default=False, init=False)


ScrapeOutcome = Union[ScrapeSuccess, ScrapeFailure]


@dataclass(frozen=True)
class ProgressEvent:
    """One terminal job outcome, as delivered to the stream consumer.

    Attributes:
        completed: Running count of delivered events, starting at 1.
        total: Number of jobs in the batch; fixed at dispatch.
        url: The job's normalized URL.
        status: ``"success"`` or ``"error"``.
        reason: ``ErrorKind`` value for errors, ``None`` for successes.
        message: Provider/adapter message for errors.
        item: The extracted draft for successes.
    """

    completed: int
    total: int
    url: str
    status: ProgressStatus
    reason: str | None = None
    message: str | None = None
    item: ItemDraft | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        """Wire shape consumed by progress bars."""
        payload: dict[str, Any] = {
            "completed": self.completed,
            "total": self.total,
            "url": self.url,
            "status": self.status,
        }
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True)
class FailureDetail:
    url: str
    reason: str
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "reason": self.reason, "message": self.message}


@dataclass(frozen=True)
class BatchSummary:
    """Final success/failure report for one batch.

    ``failures`` includes inputs rejected during normalization, so
    ``succeeded + failed == total`` always holds.
    """

    total: int
    succeeded: int
    failed: int
    failures: tuple[FailureDetail, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [failure.to_dict() for failure in self.failures],
        }
