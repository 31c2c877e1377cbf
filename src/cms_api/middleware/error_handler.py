"""Global error handling that renders every failure in the response envelope.

All error bodies have the shape ``{"code": ..., "message": ..., "data": {...}}``.
Unexpected exceptions are logged with their traceback and answered with a
generic message so that internal details never reach the client.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cms_api.config import get_settings
from cms_api.exceptions import CmsAPIError
from cms_api.models.dto.common import ErrorResponse

logger = logging.getLogger(__name__)

# Safe error messages that can be shown to users
SAFE_ERROR_MESSAGES = {
    400: "Invalid request",
    401: "Not authorized to access this route",
    403: "Access denied",
    404: "Resource not found",
    405: "Method not allowed",
    429: "Too many requests",
    500: "Internal server error",
}

# Envelope codes for plain HTTP errors raised by the framework
STATUS_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHENTICATED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMITED",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    data: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an error response in the standard envelope."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=code, message=message, data=data or {}).model_dump(),
        headers=headers,
    )


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[str]:
    """Reduce pydantic validation errors to ``field: message`` strings.

    Args:
        errors: Raw errors from ``RequestValidationError.errors()``

    Returns:
        At most five field-level messages
    """
    safe_errors = []
    for error in errors:
        loc = error.get("loc", [])
        msg = error.get("msg", "Invalid value")
        field = loc[-1] if loc else "field"
        if isinstance(field, str) and not field.startswith("_"):
            safe_errors.append(f"{field}: {msg}")
        elif isinstance(field, int) and len(loc) > 1:
            safe_errors.append(f"{loc[-2]}[{field}]: {msg}")
    return safe_errors[:5]


async def cms_api_error_handler(request: Request, exc: CmsAPIError) -> JSONResponse:
    """Render domain exceptions with their own status and envelope code."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} for {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} for {request.method} {request.url.path}: {exc.message}")

    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions (unknown routes, wrong methods)."""
    settings = get_settings()
    code = STATUS_CODES.get(exc.status_code, "ERROR")

    if settings.debug and isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = SAFE_ERROR_MESSAGES.get(exc.status_code, "Request failed")

    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors as 400 responses."""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")

    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Invalid request data",
        {"errors": sanitize_validation_errors(exc.errors())},
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit violations."""
    logger.warning(f"Rate limit exceeded for {request.url.path}")

    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RATE_LIMITED",
        "Rate limit exceeded",
        headers={"Retry-After": "60"},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors without leaking database details."""
    logger.error(f"Database error for {request.url.path}: {exc}", exc_info=True)

    # Unique constraints only fire if two writers raced past the explicit checks
    if isinstance(exc, IntegrityError):
        text = str(exc).lower()
        if "unique" in text or "duplicate" in text:
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                "DUPLICATE",
                "Resource already exists",
            )

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ERROR",
        "Database error occurred",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking information."""
    settings = get_settings()

    logger.error(f"Unhandled exception for {request.url.path}: {exc}", exc_info=True)

    data: dict[str, Any] = {}
    if settings.debug:
        data = {"type": type(exc).__name__, "detail": str(exc)}

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "ERROR",
        SAFE_ERROR_MESSAGES[500],
        data,
    )
