"""
Error handling middleware with security-compliant error sanitization.

Every error leaves the API as ``{"code": ..., "message": ...}``. Internal
errors are logged with their detail and a trace id; the client only ever
sees the trace id.
"""

import logging
import re
from typing import Any, Callable, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.errors import HTTPError, InternalError, InvalidJSONError, ValidationError

logger = logging.getLogger(__name__)

# Patterns for sensitive data that should never be logged
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'totp[_a-z]*["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'authorization["\s:]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'\b\d{3}-\d{2}-\d{4}\b'),  # SSN
    re.compile(r'\b\d{16}\b'),  # Credit card
]

STATUS_CODES = {
    404: "RESOURCE-NOT-FOUND-ERROR",
    405: "METHOD-NOT-ALLOWED-ERROR",
}


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def _request_context(scope: dict) -> dict[str, Any]:
    state = scope.get("state") or {}
    return {
        "request_id": state.get("request_id"),
        "path": scope.get("path", "unknown"),
        "method": scope.get("method", "unknown"),
    }


def _describe_cause(exc: BaseException) -> str:
    cause: Optional[BaseException] = exc.__cause__
    if cause is None:
        return ""
    return sanitize_error_message(f"{type(cause).__name__}: {cause}")


def log_http_error(exc: HTTPError, scope: dict) -> None:
    context = _request_context(scope)
    if isinstance(exc, InternalError):
        logger.error(
            exc.code,
            extra={
                **context,
                "trace_id": exc.trace_id,
                "error_message": sanitize_error_message(exc.detail),
                "cause": _describe_cause(exc),
            },
            exc_info=exc,
        )
    else:
        logger.warning(exc.code, extra={**context, "error_message": exc.message})


def error_response(exc: HTTPError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status,
        content={"code": exc.code, "message": exc.message},
    )


def translate_request_validation_error(exc: RequestValidationError) -> HTTPError:
    """
    Malformed JSON becomes ``INVALID-JSON-ERROR``; anything else pydantic
    rejects (a wrong type for a field) becomes an input validation error.
    """
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return InvalidJSONError()
    messages = []
    for error in errors:
        location = [str(loc) for loc in error.get("loc", ()) if loc not in ("body", "query", "path")]
        field = ".".join(location) or "request body"
        messages.append(f"The {field} is invalid")
    return ValidationError(messages)


class ErrorHandlingMiddleware:
    """
    Outermost safety net: any exception that escapes the route handlers
    becomes an internal error response with a trace id.
    """

    def __init__(self, app: Callable, debug: bool = False):
        """
        Initialize error handling middleware.

        Args:
            app: The ASGI application
            debug: Whether to log the full exception chain
        """
        self.app = app
        self.debug = debug

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except Exception as exc:
            response = await self._handle_exception(exc, scope)
            await response(scope, receive, send)

    async def _handle_exception(self, exc: Exception, scope: dict) -> Response:
        if isinstance(exc, HTTPError):
            error = exc
        else:
            error = InternalError(f"Unhandled {type(exc).__name__}: {exc}")
            error.__cause__ = exc
        log_http_error(error, scope)
        return error_response(error)


def setup_error_handlers(app):
    """
    Set up exception handlers for FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(HTTPError)
    async def http_error_handler(request: Request, exc: HTTPError):
        """Handle domain errors."""
        log_http_error(exc, request.scope)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request bodies pydantic could not parse."""
        error = translate_request_validation_error(exc)
        log_http_error(error, request.scope)
        return error_response(error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle framework HTTP exceptions (unknown routes, wrong methods)."""
        error = HTTPError(
            sanitize_error_message(str(exc.detail)),
            status=exc.status_code,
            code=STATUS_CODES.get(exc.status_code, "HTTP-ERROR"),
        )
        log_http_error(error, request.scope)
        return error_response(error)
