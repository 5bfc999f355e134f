"""Rate limiting middleware using Redis with Lua script optimization."""

import hashlib
import logging
import random
import time
from typing import Callable

from fastapi import Request, Response
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from yafoy.core.config import settings
from yafoy.core.redis import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window rate limiting per IP and per bearer token.

    Each check is one atomic Lua call. When Redis is unreachable requests
    are let through.
    """

    RATE_LIMIT_SCRIPT = """
    local key = KEYS[1]
    local now = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local request_id = ARGV[4]
    local window_start = now - window

    -- Remove old entries outside the window
    redis.call('ZREMRANGEBYSCORE', key, 0, window_start)

    -- Count current requests in window
    local count = redis.call('ZCARD', key)

    if count < limit then
        -- Add new request with unique ID to prevent collisions
        redis.call('ZADD', key, now, request_id)
        redis.call('EXPIRE', key, window + 1)
        return {1, 0}  -- allowed, retry_after=0
    else
        -- Get oldest entry for retry-after calculation
        local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
        local retry_after = 1
        if oldest and #oldest >= 2 then
            retry_after = math.ceil(oldest[2] + window - now) + 1
            if retry_after < 1 then retry_after = 1 end
        end
        return {0, retry_after}  -- not allowed, retry_after
    end
    """

    EXEMPT_PATHS = ("/health", "/health/ready", "/metrics")

    def __init__(
        self,
        app,
        user_limit: int | None = None,
        ip_limit: int | None = None,
        enabled: bool | None = None,
    ):
        super().__init__(app)
        self.user_limit = user_limit if user_limit is not None else settings.RATE_LIMIT_USER
        self.ip_limit = ip_limit if ip_limit is not None else settings.RATE_LIMIT_IP
        self.enabled = enabled if enabled is not None else settings.RATE_LIMIT_ENABLED
        self._rate_limit_script = None

    async def _get_rate_limit_script(self, redis):
        """Get or register the rate limit Lua script."""
        if self._rate_limit_script is None:
            self._rate_limit_script = redis.register_script(self.RATE_LIMIT_SCRIPT)
        return self._rate_limit_script

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting."""
        if not self.enabled or request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        try:
            redis = await get_redis()
            limited = await self._check_request(redis, request, client_ip)
        except (RedisError, OSError) as e:
            logger.warning(f"Rate limiting skipped, Redis unavailable: {e}")
            return await call_next(request)

        if limited is not None:
            return limited
        return await call_next(request)

    async def _check_request(self, redis, request: Request, client_ip: str) -> Response | None:
        """Return a 429 response if a limit is exceeded, else None."""
        ip_allowed, ip_retry_after = await self._check_rate_limit_lua(
            redis, f"ratelimit:ip:{client_ip}", self.ip_limit
        )
        if not ip_allowed:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests from this IP"},
                headers={"Retry-After": str(ip_retry_after)},
            )

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token_hash = hashlib.sha256(auth_header[7:].encode()).hexdigest()[:16]
            user_allowed, user_retry_after = await self._check_rate_limit_lua(
                redis, f"ratelimit:user:{token_hash}", self.user_limit
            )
            if not user_allowed:
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too many requests for this user"},
                    headers={"Retry-After": str(user_retry_after)},
                )
        return None

    async def _check_rate_limit_lua(
        self, redis, key: str, limit: int, window: int = 1
    ) -> tuple[bool, int]:
        """Check rate limit using atomic Lua script.

        Args:
            redis: Redis client
            key: Rate limit key
            limit: Maximum requests per window
            window: Window size in seconds

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        now = time.time()
        # Generate unique request ID to prevent score collisions
        request_id = f"{now}:{random.randint(0, 999999)}"

        script = await self._get_rate_limit_script(redis)
        result = await script(
            keys=[key],
            args=[now, window, limit, request_id],
        )

        return bool(result[0]), int(result[1])
