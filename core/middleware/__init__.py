"""
Core middleware package.

- Error handling with sensitive data sanitization
- Structured logging with PII masking
- Redis-based sliding window rate limiting
- Bearer token authentication
- Role-based authorization within an organization
"""

from core.middleware.error_handling import (
    ConflictError,
    ErrorHandlingMiddleware,
    ResourceNotFound,
    sanitize_error_message,
    setup_error_handlers,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

from core.middleware.rate_limiting import (
    RateLimitMiddleware,
    RateLimitRule,
    RateLimitStrategy,
    RateLimitWindow,
    SlidingWindowRateLimiter,
)

from core.middleware.authentication import (
    AuthenticationError,
    AuthenticationMiddleware,
)

from core.middleware.authorization import (
    AuthorizationError,
    InsufficientPermissions,
    JobAccessDenied,
    OrganizationAccessDenied,
    Permission,
    UserContext,
    check_permission,
    get_user_context,
    require_permission,
    require_roles,
)

__all__ = [
    # Error handling
    "ConflictError",
    "ErrorHandlingMiddleware",
    "ResourceNotFound",
    "sanitize_error_message",
    "setup_error_handlers",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
    # Rate limiting
    "RateLimitMiddleware",
    "RateLimitRule",
    "RateLimitStrategy",
    "RateLimitWindow",
    "SlidingWindowRateLimiter",
    # Authentication
    "AuthenticationError",
    "AuthenticationMiddleware",
    # Authorization
    "AuthorizationError",
    "InsufficientPermissions",
    "JobAccessDenied",
    "OrganizationAccessDenied",
    "Permission",
    "UserContext",
    "check_permission",
    "get_user_context",
    "require_permission",
    "require_roles",
]
