"""Shared FastAPI dependencies.

Usage in a route::

    from readlater.api.dependencies import get_import_service

    @router.post("/")
    async def handler(
        service: Annotated[ImportService, Depends(get_import_service)],
    ) -> ...:
        ...

Tests swap the service through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from readlater.importer.service import ImportService


def get_import_service(request: Request) -> ImportService:
    """Return the application's :class:`ImportService`.

    Raises:
        HTTPException 503: If the application was built without one.
    """
    service = getattr(request.app.state, "import_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Import service is not configured.",
        )
    return service
