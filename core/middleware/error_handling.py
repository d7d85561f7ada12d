"""
Error handling middleware with security-compliant error sanitization.

Every error leaves the API in the same envelope::

    {"error": {"code": ..., "message": ..., "path": ..., "method": ...}}
"""

import logging
import re
import traceback
from typing import Any, Callable, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError, ConnectionError as RedisConnectionError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.middleware.authorization import AuthorizationError

logger = logging.getLogger(__name__)

# Secrets in key=value or JSON "key": "value" form
SENSITIVE_PATTERNS = [
    re.compile(r'(?:password|passwd|token|secret)["\']?\s*[:=]\s*["\']?[^"\'\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\']?\s*[:=]\s*["\']?(?:bearer\s+)?[^"\'\s,}]+', re.IGNORECASE),
    re.compile(r'postgres(?:ql)?(?:\+\w+)?://\S+', re.IGNORECASE),
    re.compile(r'redis://\S+', re.IGNORECASE),
]


class ResourceNotFound(LookupError):
    """Raised by services when a requested record does not exist for the caller."""

    def __init__(self, resource: str, resource_id: Any = None):
        self.resource = resource
        self.resource_id = resource_id
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a request collides with existing state (duplicate e-mail, foreign membership)."""


def sanitize_error_message(message: Any) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = str(message)
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten FastAPI validation errors into ``field / message / type`` triples."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": sanitize_error_message(error["msg"]),
            "type": error["type"],
        })
    return errors


def classify_exception(exc: Exception, debug: bool = False) -> tuple[int, str, str, Optional[Any]]:
    """
    Map an exception to ``(status_code, error_code, message, details)``.

    Args:
        exc: The exception raised while serving the request
        debug: Whether to attach a traceback for unexpected errors
    """
    details = None

    if isinstance(exc, StarletteHTTPException):
        return exc.status_code, "HTTP_EXCEPTION", sanitize_error_message(exc.detail), None

    if isinstance(exc, RequestValidationError):
        return 422, "VALIDATION_ERROR", "Request validation failed", format_validation_errors(exc)

    if isinstance(exc, AuthorizationError):
        return status.HTTP_403_FORBIDDEN, exc.code, sanitize_error_message(exc), None

    if isinstance(exc, ResourceNotFound):
        return status.HTTP_404_NOT_FOUND, "NOT_FOUND", sanitize_error_message(exc), None

    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT, "CONFLICT", sanitize_error_message(exc), None

    if isinstance(exc, IntegrityError):
        return (
            status.HTTP_409_CONFLICT,
            "INTEGRITY_ERROR",
            "Database integrity constraint violated",
            None,
        )

    if isinstance(exc, OperationalError):
        return (
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "DATABASE_ERROR",
            "Database service temporarily unavailable",
            None,
        )

    if isinstance(exc, SQLAlchemyError):
        if debug:
            details = {"type": type(exc).__name__, "traceback": traceback.format_exc()}
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "A database error occurred", details

    if isinstance(exc, RedisConnectionError):
        return (
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "CACHE_ERROR",
            "Cache service temporarily unavailable",
            None,
        )

    if isinstance(exc, RedisError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "CACHE_ERROR", "A cache error occurred", None

    if isinstance(exc, ValueError):
        message = sanitize_error_message(exc) or "Invalid input provided"
        return status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", message, None

    if isinstance(exc, PermissionError):
        return (
            status.HTTP_403_FORBIDDEN,
            "PERMISSION_DENIED",
            "You don't have permission to perform this action",
            None,
        )

    if isinstance(exc, TimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT, "TIMEOUT", "The request timed out", None

    if debug:
        details = {
            "type": type(exc).__name__,
            "message": sanitize_error_message(exc),
            "traceback": traceback.format_exc(),
        }
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "An unexpected error occurred",
        details,
    )


def error_response(
    status_code: int,
    code: str,
    message: str,
    path: str,
    method: str,
    details: Optional[Any] = None,
    request_id: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build the JSON error envelope."""
    body: dict[str, Any] = {
        "code": code,
        "message": message,
        "path": path,
        "method": method,
    }
    if details is not None:
        body["details"] = details
    if request_id:
        body["request_id"] = request_id
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def _log_exception(exc: Exception, status_code: int, method: str, path: str) -> None:
    summary = f"{type(exc).__name__}: {sanitize_error_message(exc)}"
    if status_code >= 500:
        logger.error(f"Request failed: {method} {path} - {summary}", exc_info=exc)
    else:
        logger.warning(f"Request rejected: {method} {path} - {status_code} {summary}")


class ErrorHandlingMiddleware:
    """
    Outermost ASGI middleware that turns any uncaught exception into the
    error envelope. Exceptions raised after the response has started are
    re-raised since nothing can be sent any more.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to include detailed error information
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            response = self._handle_exception(exc, scope)
            await response(scope, receive, send)

    def _handle_exception(self, exc: Exception, scope: dict) -> JSONResponse:
        path = scope.get("path", "unknown")
        method = scope.get("method", "unknown")
        status_code, code, message, details = classify_exception(exc, self.debug)
        _log_exception(exc, status_code, method, path)

        request_id = None
        for name, value in scope.get("headers", []):
            if name == b"x-request-id":
                request_id = value.decode()
                break

        return error_response(status_code, code, message, path, method, details, request_id)


def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Handled here (inside the routing layer) so that HTTP, validation and
    domain errors never reach the generic server error path.

    Args:
        app: FastAPI application instance
    """

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        status_code, code, message, details = classify_exception(exc)
        _log_exception(exc, status_code, request.method, request.url.path)
        return error_response(
            status_code,
            code,
            message,
            str(request.url.path),
            request.method,
            details,
            getattr(request.state, "request_id", None),
            headers=getattr(exc, "headers", None),
        )

    for exc_class in (
        StarletteHTTPException,
        RequestValidationError,
        AuthorizationError,
        ResourceNotFound,
        ConflictError,
        IntegrityError,
        ValueError,
    ):
        app.add_exception_handler(exc_class, handle)
