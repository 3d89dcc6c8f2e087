"""Canonical API errors — one error shape for every failing /api request.

Every error response body looks like::

    {"error": true, "code": "NOT_FOUND", "message": "Booking not found",
     "details": ..., "requestId": "..."}

Services raise ``AppError`` subclasses; routers may also raise FastAPI's
``HTTPException``. Both are rendered by the handlers registered in
``register_exception_handlers``.
"""

import enum
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVALID_INPUT = "INVALID_INPUT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    EXTERNAL_API_ERROR = "EXTERNAL_API_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class AppError(Exception):
    """Base application error carrying an HTTP status and a canonical code."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: ErrorCode | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code or status_code_to_error_code(status_code)
        self.details = details


class ValidationError(AppError):
    def __init__(self, message: str, details: Any = None, code: ErrorCode = ErrorCode.VALIDATION_ERROR):
        super().__init__(400, message, code, details)


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(401, message, ErrorCode.AUTHENTICATION_ERROR)


class AuthorizationError(AppError):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(403, message, ErrorCode.AUTHORIZATION_ERROR)


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource"):
        super().__init__(404, f"{resource} not found", ErrorCode.NOT_FOUND)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(409, message, ErrorCode.CONFLICT)


class RateLimitError(AppError):
    def __init__(self, message: str = "Too many requests"):
        super().__init__(429, message, ErrorCode.RATE_LIMIT_EXCEEDED)


class ExternalAPIError(AppError):
    def __init__(self, provider: str, message: str, details: Any = None):
        super().__init__(502, f"{provider}: {message}", ErrorCode.EXTERNAL_API_ERROR, details)
        self.provider = provider


class DatabaseError(AppError):
    def __init__(self, message: str = "Database operation failed"):
        super().__init__(500, message, ErrorCode.DATABASE_ERROR)


def status_code_to_error_code(status_code: int) -> ErrorCode:
    """Map an HTTP status to the canonical error code."""
    mapping = {
        400: ErrorCode.BAD_REQUEST,
        401: ErrorCode.AUTHENTICATION_ERROR,
        403: ErrorCode.AUTHORIZATION_ERROR,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.CONFLICT,
        429: ErrorCode.RATE_LIMIT_EXCEEDED,
        500: ErrorCode.INTERNAL_SERVER_ERROR,
        502: ErrorCode.EXTERNAL_API_ERROR,
        503: ErrorCode.EXTERNAL_API_ERROR,
    }
    if status_code in mapping:
        return mapping[status_code]
    if 400 <= status_code < 500:
        return ErrorCode.VALIDATION_ERROR
    if status_code >= 500:
        return ErrorCode.SERVICE_UNAVAILABLE
    return ErrorCode.UNKNOWN_ERROR


def error_body(
    code: ErrorCode,
    message: str,
    details: Any = None,
    request_id: str | None = None,
) -> dict:
    body: dict[str, Any] = {"error": True, "code": code.value, "message": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    if request_id:
        body["requestId"] = request_id
    return body


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.details, _request_id(request)),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    details = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(status_code_to_error_code(exc.status_code), message, details, _request_id(request)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request data",
            exc.errors(),
            _request_id(request),
        ),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body(
            ErrorCode.INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            request_id=_request_id(request),
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
