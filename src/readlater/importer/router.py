"""FastAPI router for URL imports.

Routes:
    POST   /imports/      : import a single URL, returns the extracted item
    POST   /imports/bulk  : bulk import, progress streamed via Server-Sent Events

Persisting the returned items is left to the caller (the web UI hands each
successful draft to the item repository).
"""

from __future__ import annotations

import json
from typing import Annotated, AsyncGenerator

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from readlater.api.dependencies import get_import_service
from readlater.core.exceptions import ErrorKind, ImportConfigError, InvalidUrlError
from readlater.core.schemas.imports import (
    BatchSummaryRead,
    BulkImportCreate,
    ItemDraftRead,
    ProgressEventRead,
    SingleImportCreate,
)
from readlater.importer.service import ImportService
from readlater.importer.types import ProgressEvent, ScrapeFailure

logger = structlog.get_logger(__name__)

router = APIRouter()

#: HTTP status returned for a failed single import, by error kind.
_FAILURE_STATUS: dict[ErrorKind, int] = {
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.UNSUPPORTED_CONTENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def _progress_frame(event: ProgressEvent) -> str:
    payload = ProgressEventRead(
        **event.to_dict(),
        item=ItemDraftRead(**event.item.to_dict()) if event.item is not None else None,
    )
    return _sse("progress", payload.model_dump_json(exclude_none=True))


# ---------------------------------------------------------------------------
# Single import
# ---------------------------------------------------------------------------


@router.post("/", response_model=ItemDraftRead)
async def import_url(
    payload: SingleImportCreate,
    service: Annotated[ImportService, Depends(get_import_service)],
) -> ItemDraftRead:
    """Extract one URL and return the item draft.

    Raises:
        HTTPException 422: If the URL is invalid or the page is unreadable.
        HTTPException 429: If the provider kept rate limiting the request.
        HTTPException 502: On other provider failures.
        HTTPException 504: If the provider timed out on every attempt.
    """
    try:
        outcome = await service.import_url(payload.url)
    except InvalidUrlError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"reason": exc.kind.value, "message": exc.message},
        ) from exc

    if isinstance(outcome, ScrapeFailure):
        logger.warning(
            "single_import_failed",
            url=payload.url,
            reason=outcome.kind.value,
            attempts=outcome.attempts,
        )
        raise HTTPException(
            status_code=_FAILURE_STATUS.get(outcome.kind, status.HTTP_502_BAD_GATEWAY),
            detail={"reason": outcome.kind.value, "message": outcome.message},
        )

    logger.info("single_import_completed", url=outcome.item.url, attempts=outcome.attempts)
    return ItemDraftRead(**outcome.item.to_dict())


# ---------------------------------------------------------------------------
# Bulk import (SSE)
# ---------------------------------------------------------------------------


@router.post("/bulk")
async def bulk_import(
    payload: BulkImportCreate,
    request: Request,
    service: Annotated[ImportService, Depends(get_import_service)],
) -> StreamingResponse:
    """Import a batch of URLs and stream progress via Server-Sent Events.

    **Event types**:

    ``start``::

        event: start
        data: {"total": 3, "rejected": 1}

    ``progress`` (one per scheduled URL, in completion order)::

        event: progress
        data: {"completed": 1, "total": 3, "url": "https://x.test/1",
               "status": "success", "item": {...}}

    ``summary`` (only when every event was delivered)::

        event: summary
        data: {"total": 4, "succeeded": 2, "failed": 2, "failures": [...]}

    A client disconnect cancels the batch.

    Raises:
        HTTPException 422: If the batch is empty, too large or the
            concurrency ceiling is invalid.
    """
    try:
        stream = service.bulk_import(payload.urls, concurrency=payload.concurrency)
    except ImportConfigError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    logger.info(
        "bulk_import_started",
        total=stream.total,
        rejected=len(stream.rejected),
        concurrency=payload.concurrency,
    )

    async def event_generator() -> AsyncGenerator[str, None]:
        """Relay progress events, then the summary."""
        async with stream:
            yield _sse("start", json.dumps({"total": stream.total, "rejected": len(stream.rejected)}))
            async for event in stream:
                if await request.is_disconnected():
                    logger.info(
                        "bulk_import_client_disconnected",
                        completed=stream.completed,
                        total=stream.total,
                    )
                    break
                yield _progress_frame(event)

        if stream.exhausted:
            summary = stream.summary()
            logger.info(
                "bulk_import_completed",
                total=summary.total,
                succeeded=summary.succeeded,
                failed=summary.failed,
            )
            yield _sse("summary", BatchSummaryRead(**summary.to_dict()).model_dump_json())

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Connection": "keep-alive",
        },
    )
