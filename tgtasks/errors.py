"""
Error types and the JSON error envelope for the HTTP API.

Every failure leaves the service as ``{"success": false, "message": ...}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationFailed(ApiError):
    http_status = status.HTTP_400_BAD_REQUEST


class Unauthorized(ApiError):
    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFound(ApiError):
    http_status = status.HTTP_404_NOT_FOUND


class DuplicateUserError(Exception):
    """Raised by a store when a user with the same telegram id already exists."""

    def __init__(self, telegram_id: str):
        super().__init__(f"User {telegram_id} already exists")
        self.telegram_id = telegram_id


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request data"
    first = errors[0]
    # Drop the "body"/"query" prefix FastAPI puts in front of the field path.
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    field = ".".join(loc)
    if field:
        return f"Invalid request data: {field}: {first.get('msg')}"
    return f"Invalid request data: {first.get('msg')}"


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that render every error as the JSON envelope."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.http_status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info(
                "%s %s -> %d %s",
                request.method,
                request.url.path,
                exc.http_status,
                exc.message,
            )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(_describe_validation_error(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s: %s", request.url.path, exc, exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error"),
        )
