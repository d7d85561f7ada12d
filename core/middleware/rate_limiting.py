"""
Redis-based rate limiting middleware.

Requests are counted in a sliding window kept in a Redis sorted set. Login and
registration get a strict per-IP budget; everything else is limited per user
(or per IP when unauthenticated). When Redis misbehaves requests are let
through.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.config import settings

logger = logging.getLogger(__name__)


class RateLimitStrategy(str, Enum):
    """What a rate limit is keyed on."""
    IP_ADDRESS = "ip"
    USER_ID = "user"


class RateLimitWindow(str, Enum):
    """Time window types for rate limiting."""
    MINUTE = "minute"
    HOUR = "hour"


WINDOW_SECONDS = {
    RateLimitWindow.MINUTE: 60,
    RateLimitWindow.HOUR: 3600,
}


@dataclass
class RateLimitRule:
    """Rate limit rule configuration."""
    strategy: RateLimitStrategy
    window: RateLimitWindow
    max_requests: int
    paths: Optional[List[str]] = None  # prefixes; None applies everywhere

    def applies_to(self, path: str) -> bool:
        if not self.paths:
            return True
        return any(path.startswith(prefix) for prefix in self.paths)


def default_rules() -> List[RateLimitRule]:
    """Rules built from the configured budgets."""
    auth_paths = [
        f"{settings.api_v1_prefix}/auth/login",
        f"{settings.api_v1_prefix}/auth/register",
    ]
    return [
        RateLimitRule(
            strategy=RateLimitStrategy.IP_ADDRESS,
            window=RateLimitWindow.MINUTE,
            max_requests=settings.auth_rate_limit_per_minute,
            paths=auth_paths,
        ),
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.MINUTE,
            max_requests=settings.rate_limit_per_minute,
        ),
        RateLimitRule(
            strategy=RateLimitStrategy.USER_ID,
            window=RateLimitWindow.HOUR,
            max_requests=settings.rate_limit_per_hour,
        ),
    ]


class SlidingWindowRateLimiter:
    """
    Sliding window counter on top of Redis sorted sets.

    Each request is a member scored by its timestamp; members older than the
    window are dropped before counting.
    """

    def __init__(self, redis_client: Redis):
        self.redis = redis_client

    async def is_allowed(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
    ) -> tuple[bool, Dict[str, Any]]:
        """
        Record a request under ``key`` and decide whether it fits the budget.

        Returns:
            Tuple of (is_allowed, metadata) where metadata holds
            limit, remaining, reset and retry_after
        """
        now = time.time()
        member = f"{now}:{uuid.uuid4().hex[:8]}"

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(key, 0, now - window_seconds)
            pipe.zcard(key)
            pipe.zadd(key, {member: now})
            pipe.expire(key, window_seconds + 60)
            results = await pipe.execute()

            current_count = results[1]
            allowed = current_count + 1 <= max_requests
            retry_after = 0

            if not allowed:
                oldest = await self.redis.zrange(key, 0, 0, withscores=True)
                if oldest:
                    retry_after = int(oldest[0][1] + window_seconds - now)
                else:
                    retry_after = window_seconds
                await self.redis.zrem(key, member)

            return allowed, {
                'limit': max_requests,
                'remaining': max(0, max_requests - current_count - 1),
                'reset': int(now + window_seconds),
                'retry_after': max(0, retry_after),
            }

        except RedisError as e:
            logger.error(f"Redis error in rate limiter, allowing request: {e}")
            return True, {
                'limit': max_requests,
                'remaining': max_requests,
                'reset': int(now + window_seconds),
                'retry_after': 0,
                'error': 'redis_unavailable',
            }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies every matching rule to a request; the most restrictive result
    is reported in the ``X-RateLimit-*`` headers.
    """

    EXEMPT_PATHS = ('/health', '/ready')

    def __init__(
        self,
        app: ASGIApp,
        redis_client: Redis,
        rules: Optional[List[RateLimitRule]] = None,
        key_prefix: str = "ratelimit",
    ):
        """
        Initialize rate limiting middleware.

        Args:
            app: The ASGI application
            redis_client: Async Redis client shared with the application
            rules: Rate limit rules; defaults to the configured budgets
            key_prefix: Prefix for Redis keys
        """
        super().__init__(app)
        self.limiter = SlidingWindowRateLimiter(redis_client)
        self.rules = rules if rules is not None else default_rules()
        self.key_prefix = key_prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        result = await self._check_rate_limits(request)

        if not result['allowed']:
            logger.warning(
                f"Rate limit exceeded for {request.method} {request.url.path} "
                f"(retry after {result['retry_after']}s)"
            )
            response = JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    'error': {
                        'code': 'RATE_LIMIT_EXCEEDED',
                        'message': 'Too many requests. Please try again later.',
                        'path': request.url.path,
                        'method': request.method,
                        'retry_after': result['retry_after'],
                    }
                },
            )
        else:
            response = await call_next(request)

        if result['limit']:
            add_rate_limit_headers(response, result)
        return response

    async def _check_rate_limits(self, request: Request) -> Dict[str, Any]:
        result = {'allowed': True, 'limit': 0, 'remaining': 0, 'reset': 0, 'retry_after': 0}

        for rule in self.rules:
            if not rule.applies_to(request.url.path):
                continue

            allowed, metadata = await self.limiter.is_allowed(
                key=self.build_key(request, rule),
                max_requests=rule.max_requests,
                window_seconds=WINDOW_SECONDS[rule.window],
            )

            if not allowed:
                result['allowed'] = False
                result['retry_after'] = max(result['retry_after'], metadata['retry_after'])

            if result['limit'] == 0 or metadata['remaining'] < result['remaining']:
                result['limit'] = metadata['limit']
                result['remaining'] = metadata['remaining']
                result['reset'] = metadata['reset']

        return result

    def build_key(self, request: Request, rule: RateLimitRule) -> str:
        """Redis key for ``rule`` applied to ``request``."""
        parts = [self.key_prefix, rule.strategy.value, rule.window.value]

        if rule.paths:
            parts.append(request.url.path)

        if rule.strategy == RateLimitStrategy.USER_ID:
            user_id = get_user_id(request)
            parts.append(user_id if user_id else f"ip:{get_client_ip(request)}")
        else:
            parts.append(get_client_ip(request))

        return ":".join(parts)


def get_client_ip(request: Request) -> str:
    forwarded_for = request.headers.get('x-forwarded-for')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()

    real_ip = request.headers.get('x-real-ip')
    if real_ip:
        return real_ip

    return request.client.host if request.client else 'unknown'


def get_user_id(request: Request) -> Optional[str]:
    """User id from the verified token claims, if the request carries any."""
    payload = request.scope.get('jwt_payload')
    if payload and payload.get('user_id') is not None:
        return str(payload['user_id'])
    return None


def add_rate_limit_headers(response: Response, result: Dict[str, Any]) -> None:
    response.headers['X-RateLimit-Limit'] = str(result['limit'])
    response.headers['X-RateLimit-Remaining'] = str(result['remaining'])
    response.headers['X-RateLimit-Reset'] = str(result['reset'])

    if not result['allowed']:
        response.headers['Retry-After'] = str(result['retry_after'])
