"""
Application errors and FastAPI exception handlers.

Routes raise HTTPException for plain failures. AppError is used where the
client needs a machine-readable `error_type` (plan limits, verification, etc).
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger


class AppError(Exception):
    """Business-rule failure with an HTTP status and an error_type tag."""

    status_code = 400

    def __init__(self, message: str, error_type: Optional[str] = None,
                 status_code: Optional[int] = None, extra: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class ConflictError(AppError):
    status_code = 409


class ServiceUnavailableError(AppError):
    """An external integration is not configured."""
    status_code = 503


class UpstreamError(AppError):
    """An external integration answered with an error."""
    status_code = 502


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    body = {"detail": exc.message}
    if exc.error_type:
        body["error_type"] = exc.error_type
    body.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=body)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
