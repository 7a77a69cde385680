"""
Maps workflow errors to HTTP responses.

The reason string travels to the client verbatim under "detail"; "error"
carries the stable kind code.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from unifind.core.errors import (
    Conflict,
    Forbidden,
    InvalidState,
    NotFound,
    StoreUnavailable,
    ValidationError,
    WorkflowError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidState: status.HTTP_409_CONFLICT,
    Conflict: status.HTTP_409_CONFLICT,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: WorkflowError) -> int:
    for error_cls, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.reason}")
    return JSONResponse(status_code=code, content={"error": exc.kind, "detail": exc.reason})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowError, workflow_error_handler)
