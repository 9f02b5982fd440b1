"""
Domain exception -> HTTP response mapping.

Every error body has the shape {"error", "message", "details"}. Internal
detail (driver errors, stack traces, model failures) goes to the log only.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from align.domain.exceptions import (
    AlignException,
    AuthenticationException,
    PersistenceError,
    ResourceNotFoundException,
    TurnCancelledError,
    ValidationException,
)
from align.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

# nginx convention: the client closed the connection before the response
CLIENT_CLOSED_REQUEST = 499


def _error(
    status_code: int,
    error: str,
    message: str,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details or {}},
        headers=headers,
    )


def _from_exception(
    status_code: int, exc: AlignException, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Client-facing domain errors carry their own error body"""
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def validation_exception_handler(request: Request, exc: ValidationException):
    return _from_exception(status.HTTP_400_BAD_REQUEST, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()]
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Invalid request body",
        {"fields": [f for f in fields if f]},
    )


async def authentication_exception_handler(request: Request, exc: AuthenticationException):
    return _from_exception(
        status.HTTP_401_UNAUTHORIZED, exc, headers={"WWW-Authenticate": "Bearer"}
    )


async def not_found_exception_handler(request: Request, exc: ResourceNotFoundException):
    return _from_exception(status.HTTP_404_NOT_FOUND, exc)


async def persistence_exception_handler(request: Request, exc: PersistenceError):
    logger.error(
        "Persistence failure on %s %s: %s",
        request.method,
        request.url.path,
        exc.details,
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "PERSISTENCE_ERROR", "Could not save or load data"
    )


async def turn_cancelled_handler(request: Request, exc: TurnCancelledError):
    logger.info(
        "%s %s abandoned: %s",
        request.method,
        request.url.path,
        exc.message,
    )
    return _error(CLIENT_CLOSED_REQUEST, exc.error_code, "Request cancelled")


async def align_exception_handler(request: Request, exc: AlignException):
    logger.error("Unhandled %s: %s", exc.error_code, exc.details)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "An unexpected error occurred"
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    codes = {
        status.HTTP_401_UNAUTHORIZED: "AUTHENTICATION_ERROR",
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    }
    return _error(
        exc.status_code,
        codes.get(exc.status_code, "HTTP_ERROR"),
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error on %s %s (trace %s)",
        request.method,
        request.url.path,
        get_trace_id(),
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "An unexpected error occurred"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; more specific exception types win over AlignException"""
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AuthenticationException, authentication_exception_handler)
    app.add_exception_handler(ResourceNotFoundException, not_found_exception_handler)
    app.add_exception_handler(PersistenceError, persistence_exception_handler)
    app.add_exception_handler(TurnCancelledError, turn_cancelled_handler)
    app.add_exception_handler(AlignException, align_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
