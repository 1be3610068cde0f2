"""
Error responses.

Every failure leaves the API as an ``ErrorResponse`` body: a stable
``error_code`` clients can branch on, a message, a recovery hint and, for
domain errors, the exception's structured details.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    AuthorizationError,
    ConcurrentReminderUpdateError,
    ConfigurationError,
    DeliveryError,
    EmployeeNotFoundError,
    EmployeeSuspendedError,
    RateLimitedError,
    ReminderEngineError,
    RuleNotFoundError,
    SettingsNotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)

logger = get_logger(__name__)

# Looked up along the exception's MRO, so the most specific class wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    EmployeeNotFoundError: status.HTTP_404_NOT_FOUND,
    RuleNotFoundError: status.HTTP_404_NOT_FOUND,
    SettingsNotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrentReminderUpdateError: status.HTTP_409_CONFLICT,
    EmployeeSuspendedError: status.HTTP_409_CONFLICT,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    RateLimitedError: status.HTTP_429_TOO_MANY_REQUESTS,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ValueError: status.HTTP_400_BAD_REQUEST,
    DeliveryError: status.HTTP_502_BAD_GATEWAY,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

HINTS: dict[str, str] = {
    "EMPLOYEE_NOT_FOUND": "Check the employee ID; only employee accounts can be reminded.",
    "EMPLOYEE_SUSPENDED": "Suspended employees cannot receive reminders.",
    "RULE_NOT_FOUND": "List rules with GET /api/recurring-reminders and retry with a known ID.",
    "SETTINGS_NOT_FOUND": "Run migrations to seed the reminder settings row.",
    "CONCURRENT_REMINDER_UPDATE": "Another reminder was sent at the same moment. Reload and retry.",
    "RATE_LIMITED": "Wait for retry_after_seconds or resend with override_rate_limit.",
    "UNAUTHORIZED": "Send a valid bearer token in the Authorization header.",
    "FORBIDDEN": "Only active managers can manage reminders.",
    "INVALID_TIME_OF_DAY": "Use HH:MM between 00:00 and 23:59.",
    "INVALID_TIMEZONE": "Use an IANA timezone name such as America/Los_Angeles.",
    "INVALID_RULE": "Check scope, target, days_of_week and condition fields.",
    "IN_APP_DELIVERY_FAILED": "The notification could not be stored. Retry later.",
    "PUSH_GATEWAY_ERROR": "The push service is unreachable. Retry later.",
    "VALIDATION_ERROR": "Check the request body fields and types.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

_HTTP_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def _status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_json(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=HINTS.get(error_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Turn any exception into an error response, logging 5xx with a traceback."""
    status_code = _status_for(exc)

    if isinstance(exc, ReminderEngineError):
        error_code, message, detail = exc.code, exc.message, exc.details or None
    else:
        error_code, message, detail = type(exc).__name__, str(exc), None

    if status_code >= 500:
        logger.error("request_error", error_code=error_code, error=str(exc), exc_info=exc)
    else:
        logger.info("request_rejected", error_code=error_code, status=status_code)

    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}

    return _error_json(request, status_code, error_code, message, detail, headers)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort conversion of anything the exception handlers missed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, request validation and HTTP errors."""

    @app.exception_handler(ReminderEngineError)
    async def domain_error(request: Request, exc: ReminderEngineError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return _error_json(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            detail=fields,
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_json(
            request,
            exc.status_code,
            _HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail or "An error occurred"),
            headers=getattr(exc, "headers", None),
        )
