"""Domain exceptions raised by the service layer.

Services never raise ``HTTPException`` directly; the handlers registered by
:func:`register_exception_handlers` translate these into JSON responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)


class MedMeshError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MedMeshError):
    """Caller-supplied data violates a documented constraint."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MedMeshError):
    """A referenced model or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(MedMeshError):
    """The caller lacks rights for the requested action."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(MedMeshError):
    """The action is redundant or collides with existing state."""

    status_code = status.HTTP_409_CONFLICT


class TransientStoreError(MedMeshError):
    """The persistence layer is unreachable or timed out."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message)


def register_exception_handlers(app: FastAPI) -> FastAPI:
    """Attach handlers mapping domain errors onto HTTP responses."""

    @app.exception_handler(MedMeshError)
    async def medmesh_error_handler(request: Request, exc: MedMeshError) -> JSONResponse:
        if isinstance(exc, TransientStoreError):
            logger.error("Store unavailable during %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(OperationalError)
    async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
        logger.error("Database error during %s %s: %s", request.method, request.url.path, exc)
        transient = TransientStoreError()
        return JSONResponse(status_code=transient.status_code, content={"detail": transient.message})

    return app
