"""Centralized exception handlers.

Controller failures are never handled by the dispatch handlers; they
propagate here. Each handler logs the failure with sanitized context and
renders an ``ErrorResponse``:

- ``WaypostError`` subclasses map to a status by type
  (400, 404, 401, 422, otherwise 500)
- ``HTTPException`` raised by the router (unknown path, wrong verb) keeps its
  status and headers, including ``Allow`` on 405
- anything else is a 500 whose details are hidden in production
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.constants import HTTP_422_UNPROCESSABLE, HTTP_500_INTERNAL_SERVER_ERROR
from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_dict, sanitize_error_context
from src.core.exceptions import (
    BusinessRuleError,
    ErrorCode,
    NotFoundError,
    Severity,
    UnauthorizedError,
    ValidationError,
    WaypostError,
)

# Checked in order; the first matching type wins
_STATUS_BY_ERROR_TYPE: tuple[tuple[type[WaypostError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (BusinessRuleError, HTTP_422_UNPROCESSABLE),
)

_HTTP_ERROR_CODES: dict[int, tuple[ErrorCode, Severity]] = {
    status.HTTP_400_BAD_REQUEST: (ErrorCode.VALIDATION_ERROR, Severity.LOW),
    status.HTTP_401_UNAUTHORIZED: (ErrorCode.UNAUTHORIZED, Severity.HIGH),
    status.HTTP_404_NOT_FOUND: (ErrorCode.NOT_FOUND, Severity.LOW),
    status.HTTP_405_METHOD_NOT_ALLOWED: (ErrorCode.METHOD_NOT_ALLOWED, Severity.LOW),
}


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: WaypostError) -> int:
    """Return the HTTP status a ``WaypostError`` is rendered with."""
    for error_type, status_code in _STATUS_BY_ERROR_TYPE:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _request_id() -> str:
    return RequestContext.get_request_id() or generate_request_id()


async def waypost_error_handler(request: Request, exc: Exception) -> Response:
    """Handle WaypostError exceptions.

    Args:
        request: The request whose handling failed.
        exc: The WaypostError raised.

    Returns:
        Response: ORJSONResponse with the error details.

    Raises:
        TypeError: If exc is not a WaypostError instance.
    """
    if not isinstance(exc, WaypostError):
        raise TypeError(f"Expected WaypostError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()
    status_code = status_code_for(exc)

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            "error_code": exc.error_code,
        },
    )
    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=status_code,
        alert=exc.should_alert,
        **error_context,
    )

    debug_info: dict[str, Any] | None = None
    if settings.environment == "development":
        debug_info = {
            "stack_trace": exc.stack_trace,
            "exception_type": type(exc).__name__,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    error_response = ErrorResponse(
        error_code=exc.error_code,
        message=exc.message,
        details=sanitize_dict(exc.context) if exc.context else None,
        correlation_id=correlation_id,
        request_id=_request_id(),
        severity=exc.severity.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )

    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (unmatched paths and verbs included).

    Args:
        request: The request that could not be served.
        exc: The HTTPException raised.

    Returns:
        Response: ORJSONResponse with the transport's status and headers.

    Raises:
        TypeError: If exc is not an HTTPException instance.
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_code, severity = _HTTP_ERROR_CODES.get(
        exc.status_code, (ErrorCode.INTERNAL_ERROR, Severity.MEDIUM)
    )
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        severity = Severity.HIGH

    details: dict[str, Any] | None = None
    allow = (exc.headers or {}).get("Allow")
    if allow:
        details = {"allowed_methods": [m.strip() for m in allow.split(",")]}

    error_context = sanitize_error_context(
        exc,
        {
            "status": exc.status_code,
            "method": request.method,
            "path": str(request.url.path),
        },
    )
    logger.warning("HTTP exception", **error_context)

    error_response = ErrorResponse(
        error_code=error_code.value,
        message=str(exc.detail),
        details=details,
        correlation_id=correlation_id,
        request_id=_request_id(),
        severity=severity.value,
        service_info=get_service_info(settings),
    )

    return ORJSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
        headers=exc.headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle any other exception as an internal server error.

    In production the response hides everything but a generic message.

    Args:
        request: The request whose handling failed.
        exc: The unhandled exception.

    Returns:
        Response: ORJSONResponse with status 500.
    """
    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
        },
    )
    logger.opt(exception=exc).error(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        **error_context,
    )

    if settings.environment == "production":
        message = "An internal server error occurred"
        details = None
        debug_info = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}
        debug_info = {
            "stack_trace": traceback.format_tb(exc.__traceback__),
            "exception_type": type(exc).__name__,
        }

    error_response = ErrorResponse(
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        details=details,
        correlation_id=correlation_id,
        request_id=_request_id(),
        severity=Severity.CRITICAL.value,
        service_info=get_service_info(settings),
        debug_info=debug_info,
    )

    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register every exception handler on ``app``.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(WaypostError, waypost_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
