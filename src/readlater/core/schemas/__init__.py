"""Pydantic schemas for request/response validation.

Sub-modules:
    imports: SingleImportCreate, BulkImportCreate, ItemDraftRead,
              ProgressEventRead, BatchSummaryRead
"""

from __future__ import annotations
