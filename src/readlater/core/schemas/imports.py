"""Pydantic request/response schemas for the import routes.

Used by :mod:`readlater.importer.router` for validation, serialisation, and
OpenAPI documentation generation.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SingleImportCreate(BaseModel):
    """Payload for importing one URL.

    Attributes:
        url: The page to import.  Normalized server-side.
    """

    url: str = Field(min_length=1)


class BulkImportCreate(BaseModel):
    """Payload for a bulk import.

    Attributes:
        urls: Raw URLs to import; invalid entries are reported as failures,
            duplicates are merged.
        concurrency: Optional per-batch concurrency ceiling; defaults to the
            ``IMPORT_CONCURRENCY`` setting.
    """

    urls: List[str] = Field(min_length=1)
    concurrency: Optional[int] = Field(default=None, ge=1, le=50)


class ItemDraftRead(BaseModel):
    """Extracted item, ready for the item repository."""

    url: str
    title: Optional[str] = None
    author: Optional[str] = None
    summary: Optional[str] = None
    tags: List[str] = []
    og_image: Optional[str] = None
    status: str
    content: Optional[str] = None
    canonical_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProgressEventRead(BaseModel):
    """One ``progress`` SSE frame."""

    completed: int
    total: int
    url: str
    status: Literal["success", "error"]
    reason: Optional[str] = None
    item: Optional[ItemDraftRead] = None


class FailureRead(BaseModel):
    url: str
    reason: str
    message: str = ""


class BatchSummaryRead(BaseModel):
    """The final ``summary`` SSE frame."""

    total: int
    succeeded: int
    failed: int
    failures: List[FailureRead] = []
