"""Global exception handlers producing the uniform ``ErrorResponse`` body.

Application errors map to status codes by type. Request validation failures
are reported field by field. Anything unexpected becomes a 500 whose details
are hidden outside development.
"""

import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.error_context import sanitize_dict, sanitize_error_context
from src.core.exceptions import (
    BudgetForgeError,
    BusinessRuleError,
    CacheUnavailableError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    Severity,
    UnauthorizedError,
    ValidationError,
)

# Checked in order; the first matching base class wins
ERROR_STATUS_CODES: tuple[tuple[type[BudgetForgeError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (BusinessRuleError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (CacheUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

HTTP_ERROR_CODES: dict[int, tuple[ErrorCode, Severity]] = {
    status.HTTP_400_BAD_REQUEST: (ErrorCode.VALIDATION_ERROR, Severity.LOW),
    status.HTTP_401_UNAUTHORIZED: (ErrorCode.UNAUTHORIZED, Severity.MEDIUM),
    status.HTTP_403_FORBIDDEN: (ErrorCode.UNAUTHORIZED, Severity.MEDIUM),
    status.HTTP_404_NOT_FOUND: (ErrorCode.NOT_FOUND, Severity.LOW),
    status.HTTP_405_METHOD_NOT_ALLOWED: (ErrorCode.VALIDATION_ERROR, Severity.LOW),
    status.HTTP_409_CONFLICT: (ErrorCode.CONFLICT, Severity.LOW),
}


def get_service_info(settings: Settings) -> ServiceInfo:
    """Describe this service for inclusion in error bodies."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def status_code_for(exc: BudgetForgeError) -> int:
    """HTTP status code for an application error."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or generate_request_id()


def _error_response(
    request: Request,
    status_code: int,
    *,
    error_code: str,
    message: str,
    severity: Severity,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=_request_id(request),
        severity=severity.value,
        service_info=get_service_info(get_settings()),
        debug_info=debug_info,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def budgetforge_error_handler(request: Request, exc: Exception) -> Response:
    """Render a ``BudgetForgeError`` with its code, severity and context.

    Args:
        request: The FastAPI request that caused the exception
        exc: The BudgetForgeError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not a BudgetForgeError instance
    """
    if not isinstance(exc, BudgetForgeError):
        raise TypeError(f"Expected BudgetForgeError, got {type(exc).__name__}")

    status_code = status_code_for(exc)
    log_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": request.url.path,
            "error_code": exc.error_code,
            "fingerprint": exc.fingerprint,
        },
    )
    log = logger.warning if exc.is_expected else logger.error
    log("Handling {}: {}", type(exc).__name__, exc.message, **log_context)

    debug_info = None
    if get_settings().environment == "development":
        debug_info = {
            "exception_type": type(exc).__name__,
            "stack_trace": exc.stack_trace,
        }
        if exc.cause:
            debug_info["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause),
            }

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return _error_response(
        request,
        status_code,
        error_code=exc.error_code,
        message=exc.message,
        severity=exc.severity,
        details=sanitize_dict(exc.context) if exc.context else None,
        debug_info=debug_info,
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Report request validation failures grouped by field.

    Args:
        request: The FastAPI request that caused the exception
        exc: The RequestValidationError exception to handle

    Returns:
        Response: ORJSONResponse with validation error details

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # ("body", "amount") -> "amount"
        location = [str(part) for part in error.get("loc", ())[1:]]
        field_name = ".".join(location) or "root"
        message = error.get("msg", "Invalid value")
        field_errors.setdefault(field_name, []).append(message)

    logger.warning(
        "Request validation failed",
        path=request.url.path,
        method=request.method,
        validation_errors=field_errors,
    )
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_code=ErrorCode.VALIDATION_ERROR.value,
        message="Request validation failed",
        severity=Severity.LOW,
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Wrap framework ``HTTPException`` (e.g. unknown routes) in ``ErrorResponse``.

    Args:
        request: The FastAPI request that caused the exception
        exc: The HTTPException to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code, severity = HTTP_ERROR_CODES.get(
        exc.status_code, (ErrorCode.INTERNAL_ERROR, Severity.HIGH)
    )
    logger.warning(
        "HTTP exception",
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
        detail=exc.detail,
    )
    return _error_response(
        request,
        exc.status_code,
        error_code=error_code.value,
        message=str(exc.detail),
        severity=severity,
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Turn any unhandled exception into a 500.

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: ORJSONResponse with generic error message
    """
    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        **sanitize_error_context(
            exc,
            {"request_method": request.method, "request_path": request.url.path},
        ),
    )

    if get_settings().environment == "production":
        message = "An internal server error occurred"
        details = None
        debug_info = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}
        debug_info = {
            "exception_type": type(exc).__name__,
            "stack_trace": traceback.format_tb(exc.__traceback__),
        }

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        severity=Severity.CRITICAL,
        details=details,
        debug_info=debug_info,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on ``app``.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(BudgetForgeError, budgetforge_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
