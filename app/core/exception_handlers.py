"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 403, 404, 429, 500, 503)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    StorageUnavailableError,
    VerificationAppError,
)
from app.core.logging import get_request_id
from app.core.rate_limit import build_rate_limit_headers

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, (AuthenticationAppError, VerificationAppError)):
        return 403
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, StorageUnavailableError):
        return 503
    if isinstance(exc, StorageAppError):
        return 500
    return 400


def _include_rate_limit_headers(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings.app.rate_limit_include_headers if settings is not None else True


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Routes domain errors to appropriate HTTP status codes:
    - ValidationAppError → 400 Bad Request (client fault)
    - AuthenticationAppError, VerificationAppError → 403 Forbidden
    - NotFoundAppError → 404 Not Found
    - RateLimitAppError → 429 Too Many Requests (+ Retry-After)
    - StorageAppError → 500 Internal Server Error (backend fault)
    - StorageUnavailableError → 503 Service Unavailable (no backend configured)

    Storage errors never expose their chained cause to the client.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    # Storage details name internal backends; keep them in logs only
    if exc.details and status_code < 500:
        error_content["details"] = exc.details

    headers = None
    if isinstance(exc, RateLimitAppError):
        headers = build_rate_limit_headers(
            exc.details, include_limits=_include_rate_limit_headers(request)
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message.
    Prevents information leakage (no stack traces to client).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Order matters: specific handlers registered before general fallback.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
