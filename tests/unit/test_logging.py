"""Unit tests for the structured logging configuration.

Verifies that ``configure_logging()`` produces well-formed JSON, that the
``request_id_var`` context variable is propagated and that secrets never
reach the output.
"""

from __future__ import annotations

import json
import logging
from io import StringIO
from typing import Any, Callable

import structlog

from readlater.core.logging_config import configure_logging, request_id_var


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _capture(log_level: str, emit: Callable[[], None]) -> list[dict[str, Any]]:
    """Run *emit* with the root handler redirected and return parsed JSON records."""
    configure_logging(log_level)

    buffer = StringIO()
    root = logging.getLogger()
    original_streams = []
    for handler in root.handlers:
        if hasattr(handler, "stream"):
            original_streams.append((handler, handler.stream))
            handler.stream = buffer

    try:
        emit()
    finally:
        for handler, stream in original_streams:
            handler.flush()
            handler.stream = stream

    lines = [line for line in buffer.getvalue().strip().splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


def _find(records: list[dict[str, Any]], event: str) -> dict[str, Any] | None:
    return next((r for r in records if r.get("event") == event), None)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestConfigureLoggingJson:
    """Verify INFO-level (production) JSON output."""

    def test_stdlib_record_rendered_as_json(self) -> None:
        records = _capture(
            "INFO", lambda: logging.getLogger("readlater.importer").info("importer: hello")
        )

        target = _find(records, "importer: hello")
        assert target is not None, f"record not found in {records!r}"
        assert target["level"] == "info"
        assert target["logger"] == "readlater.importer"
        assert "timestamp" in target

    def test_structlog_record_keeps_fields(self) -> None:
        records = _capture(
            "INFO",
            lambda: structlog.get_logger("readlater.test").info("bulk_import_started", total=3),
        )

        target = _find(records, "bulk_import_started")
        assert target is not None
        assert target["total"] == 3

    def test_debug_records_dropped_at_info(self) -> None:
        records = _capture(
            "INFO", lambda: logging.getLogger("readlater.importer").debug("importer: noisy")
        )

        assert _find(records, "importer: noisy") is None


class TestSecretRedaction:
    def test_top_level_secret_redacted(self) -> None:
        records = _capture(
            "INFO",
            lambda: structlog.get_logger("readlater.test").info(
                "provider_configured", firecrawl_api_key="fc-live-123"
            ),
        )

        target = _find(records, "provider_configured")
        assert target is not None
        assert target["firecrawl_api_key"] == "[REDACTED]"

    def test_nested_authorization_header_redacted(self) -> None:
        records = _capture(
            "INFO",
            lambda: structlog.get_logger("readlater.test").info(
                "provider_request",
                headers={"Authorization": "Bearer fc-live-123", "Accept": "application/json"},
            ),
        )

        target = _find(records, "provider_request")
        assert target is not None
        assert target["headers"]["Authorization"] == "[REDACTED]"
        assert target["headers"]["Accept"] == "application/json"


class TestRequestIdContextVar:
    def test_request_id_appears_in_json_output(self) -> None:
        token = request_id_var.set("test-req-1234")
        try:
            records = _capture(
                "INFO", lambda: logging.getLogger("readlater.test").info("with_request_id")
            )
        finally:
            request_id_var.reset(token)

        target = _find(records, "with_request_id")
        assert target is not None
        assert target.get("request_id") == "test-req-1234"

    def test_no_request_id_when_var_unset(self) -> None:
        request_id_var.set(None)

        records = _capture(
            "INFO", lambda: logging.getLogger("readlater.test").info("without_request_id")
        )

        target = _find(records, "without_request_id")
        assert target is not None
        assert target.get("request_id") is None


class TestConfigureLoggingIdempotent:
    def test_calling_twice_does_not_duplicate_handlers(self) -> None:
        configure_logging("INFO")
        configure_logging("INFO")

        assert len(logging.getLogger().handlers) == 1
