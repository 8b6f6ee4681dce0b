"""
Error types and standardized error responses for the journal service.

Every failure the service knows about is a ``QJournalError`` subclass that
carries a machine-stable ``code`` and the HTTP status it maps to. The
FastAPI exception handlers registered by ``register_exception_handlers``
render them all in one shape:

    {
        "error": "VALIDATION_ERROR",
        "details": "Answers are required",
        "correlation_id": "1f2e3d4c"
    }

Usage:
    from app.shared.errors import ValidationError, GenerationError

    if not answers:
        raise ValidationError("Answers are required")
"""

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("QJournal.Errors")


class ErrorCode(str, Enum):
    """Standard error codes returned in the ``error`` field."""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    GENERATION_ERROR = "GENERATION_ERROR"

    # Domain-specific errors
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# EXCEPTIONS
# =============================================================================

class QJournalError(Exception):
    """Base class for all errors the service reports to callers."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(QJournalError):
    """The request was missing data or carried malformed data."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class NotFoundError(QJournalError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class AuthError(QJournalError):
    """No usable credentials were presented."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401


class InvalidTokenError(AuthError):
    """A token was presented but failed verification (bad signature, expired, unknown key)."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class ConfigurationError(QJournalError):
    """A required setting (API key, identity provider URL, ...) is missing."""

    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 500


class GenerationError(QJournalError):
    """The generative text service was unreachable, timed out, or answered badly."""

    code = ErrorCode.GENERATION_ERROR
    status_code = 500


class PersistenceError(QJournalError):
    """The database was unavailable or rejected a write."""

    code = ErrorCode.DATABASE_ERROR
    status_code = 500


class AnalysisError(QJournalError):
    """A journal submission failed after validation; nothing was stored."""

    code = ErrorCode.ANALYSIS_ERROR
    status_code = 500


# =============================================================================
# RESPONSES
# =============================================================================

class ErrorBody(BaseModel):
    """Structured error body."""
    error: str
    details: str
    correlation_id: Optional[str] = None


def get_correlation_id(request: Optional[Request] = None) -> Optional[str]:
    """
    Extract correlation ID from request state.

    Args:
        request: FastAPI request object (optional)

    Returns:
        Correlation ID string or None if not available
    """
    if request is None:
        return None
    return getattr(request.state, "correlation_id", None)


def error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    correlation_id: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        status_code: HTTP status code
        correlation_id: Request correlation ID for tracing
        extra: Additional top-level fields (safe to expose)

    Returns:
        JSONResponse with standardized error format
    """
    body = ErrorBody(
        error=code.value,
        details=message,
        correlation_id=correlation_id,
    ).model_dump(exclude_none=True)
    if extra:
        body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def route_not_found(
    path: str,
    available_routes: Iterable[str],
    correlation_id: Optional[str] = None,
) -> JSONResponse:
    """404 listing the routes the service does serve."""
    return error_response(
        code=ErrorCode.NOT_FOUND,
        message="Route not found",
        status_code=404,
        correlation_id=correlation_id,
        extra={
            "requested_path": path,
            "available_routes": sorted(set(available_routes)),
        },
    )


def _available_routes(app: FastAPI) -> list[str]:
    # Included routers are not flattened into app.routes on every FastAPI release
    return list(app.openapi().get("paths", {}))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service's exception handlers to ``app``."""

    @app.exception_handler(QJournalError)
    async def handle_qjournal_error(request: Request, exc: QJournalError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code.value, exc.message, extra={"path": request.url.path})
        else:
            logger.info("%s: %s", exc.code.value, exc.message, extra={"path": request.url.path})
        return error_response(
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            correlation_id=get_correlation_id(request),
            extra=exc.details,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return error_response(
            code=ErrorCode.VALIDATION_ERROR,
            message="; ".join(problems) or "Invalid request",
            status_code=400,
            correlation_id=get_correlation_id(request),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        correlation_id = get_correlation_id(request)
        if exc.status_code == 404 and exc.detail == "Not Found":
            logger.info(
                "Received %s request to undefined route: %s",
                request.method,
                request.url.path,
            )
            return route_not_found(request.url.path, _available_routes(app), correlation_id)
        if exc.status_code == 405:
            return error_response(
                code=ErrorCode.METHOD_NOT_ALLOWED,
                message=f"Method {request.method} not allowed for {request.url.path}",
                status_code=405,
                correlation_id=correlation_id,
            )
        return error_response(
            code=ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.VALIDATION_ERROR,
            message=str(exc.detail),
            status_code=exc.status_code,
            correlation_id=correlation_id,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="Internal server error",
            status_code=500,
            correlation_id=get_correlation_id(request),
        )
