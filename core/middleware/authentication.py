"""
Authentication middleware for verifying access tokens.

This middleware:
1. Lets public endpoints and CORS preflight requests through
2. Extracts the bearer token from the Authorization header
3. Verifies signature, expiry and token type
4. Stores the verified claims in the request scope (``jwt_payload``)

Loading the profile and roles is left to the ``get_user_context``
dependency so that routes that need them pay for the database round trip.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse

from core.config import settings
from core.security import verify_jwt_token

logger = logging.getLogger(__name__)

# Public endpoints that don't require authentication
PUBLIC_ENDPOINTS = [
    "/",
    "/health",
    "/ready",
    f"{settings.api_v1_prefix}/auth/login",
    f"{settings.api_v1_prefix}/auth/register",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class AuthenticationError(Exception):
    """Base exception for authentication errors."""
    code = "AUTHENTICATION_ERROR"


class TokenMissingError(AuthenticationError):
    """Raised when no bearer token is supplied."""
    code = "TOKEN_MISSING"


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""
    code = "TOKEN_EXPIRED"


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid."""
    code = "TOKEN_INVALID"


class AuthenticationMiddleware:
    """
    ASGI middleware validating bearer tokens for every non-public path.
    """

    def __init__(
        self,
        app: Callable,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
    ):
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            jwt_secret: Secret key for JWT verification
            jwt_algorithm: JWT signing algorithm
        """
        self.app = app
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        if request.method == "OPTIONS" or is_public_endpoint(request.url.path):
            await self.app(scope, receive, send)
            return

        try:
            scope["jwt_payload"] = self._authenticate(request)
        except AuthenticationError as e:
            logger.warning(f"Authentication failed for {request.method} {request.url.path}: {e}")
            await self._send_error_response(scope, receive, send, e)
            return

        await self.app(scope, receive, send)

    def _authenticate(self, request: Request) -> dict:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if not token:
            raise TokenMissingError("No authentication token provided")

        try:
            payload = verify_jwt_token(token, self.jwt_secret, self.jwt_algorithm)
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        return dict(payload)

    async def _send_error_response(
        self,
        scope: dict,
        receive: Callable,
        send: Callable,
        error: AuthenticationError,
    ) -> None:
        messages = {
            TokenMissingError: "Authentication required.",
            TokenExpiredError: "Authentication token has expired. Please login again.",
            TokenInvalidError: "Invalid authentication token.",
        }
        response = JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={
                "error": {
                    "code": error.code,
                    "message": messages.get(type(error), "Authentication failed."),
                    "path": scope.get("path"),
                    "method": scope.get("method"),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
        await response(scope, receive, send)


def is_public_endpoint(path: str) -> bool:
    """
    Check if endpoint is public (no auth required).

    Args:
        path: Request path

    Returns:
        True if endpoint is public
    """
    if path in PUBLIC_ENDPOINTS:
        return True

    public_prefixes = ["/health", "/docs", "/redoc", "/openapi"]
    return any(path.startswith(prefix) for prefix in public_prefixes)


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """
    Extract JWT token from an Authorization header value.

    Args:
        auth_header: Raw header value

    Returns:
        JWT token or None
    """
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None
