"""
Core middleware package.

This package provides:
- Error handling with {code, message} responses and trace ids
- Structured logging with request ids and sensitive-data masking
- Session cookie authentication
- Tenant-scoped authorization backed by an in-process policy cache
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
    get_logger,
)

from core.middleware.authentication import (
    AuthenticationMiddleware,
    get_current_session,
    get_current_session_id,
    require_authenticated_user,
)

from core.middleware.authorization import (
    PolicyCache,
    key_match2,
    get_policy_cache,
    require_authorization,
    require_acting_user,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    "get_logger",
    # Authentication
    "AuthenticationMiddleware",
    "get_current_session",
    "get_current_session_id",
    "require_authenticated_user",
    # Authorization
    "PolicyCache",
    "key_match2",
    "get_policy_cache",
    "require_authorization",
    "require_acting_user",
]
