"""FastAPI application factory and entry point.

Creates the application instance, registers middleware, builds the import
service and mounts the import router.

Usage::

    # Development server (from project root)
    uvicorn readlater.api.main:app --reload
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from readlater import __version__
from readlater.config.settings import get_settings
from readlater.core.logging_config import configure_logging, request_id_var
from readlater.importer.service import ImportService

configure_logging("INFO")

logger = structlog.get_logger(__name__)


def create_app(import_service: ImportService | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        import_service: Optional pre-built service (tests).  When omitted the
            service is built from settings and its HTTP client is closed on
            shutdown.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()

    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description="Save web pages for later reading; bulk import with live progress.",
        version=__version__,
        debug=settings.debug,
        redirect_slashes=False,
    )

    application.state.import_service = import_service or ImportService.from_settings(settings)

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with its status and duration under a request ID."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn(
                "request_complete",
                status_code=status_code,
                elapsed_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -----------------------------------------------------------

    from readlater.importer.router import router as import_router  # noqa: PLC0415

    application.include_router(import_router, prefix="/imports", tags=["imports"])

    # ---- Lifecycle events -------------------------------------------------

    @application.on_event("startup")
    async def on_startup() -> None:
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            import_concurrency=settings.import_concurrency,
            log_level=settings.log_level,
        )

    @application.on_event("shutdown")
    async def on_shutdown() -> None:
        """Close the provider's HTTP client."""
        await application.state.import_service.aclose()
        logger.info("application_shutdown")

    @application.get("/health", tags=["system"])
    async def health() -> JSONResponse:
        """Return a minimal process-level liveness status."""
        return JSONResponse({"status": "ok"})

    return application


app = create_app()
"""The FastAPI application instance (ASGI callable for Uvicorn)."""
