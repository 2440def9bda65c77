"""
Error envelope and exception handlers.

Every failure leaves the API as ``{"error": {"type", "message"}}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.results import ErrorKind

logger = logging.getLogger(__name__)

_HTTP_ERROR_TYPES = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_404_NOT_FOUND: "missing",
    status.HTTP_405_METHOD_NOT_ALLOWED: "missing",
}


def envelope(status_code: int, type_: str, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": type_, "message": message}},
        headers=headers,
    )


def error_response(kind: ErrorKind) -> JSONResponse:
    """Map a domain error to its fixed status and message."""
    return envelope(kind.status, kind.value, kind.message)


def bad_request() -> JSONResponse:
    return envelope(status.HTTP_400_BAD_REQUEST, "invalid", "Bad request")


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return envelope(exc.status_code, "missing", "Resource not found")
        type_ = _HTTP_ERROR_TYPES.get(exc.status_code, "invalid")
        message = exc.detail if isinstance(exc.detail, str) else "Bad request"
        return envelope(exc.status_code, type_, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s %s: %s", request.method, request.url.path, exc.errors())
        return bad_request()

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return bad_request()
