"""Rate limiting for sign-in.

Sliding window limiter backed by Redis sorted sets, shared across API
instances. When Redis is unreachable requests are not limited.
"""

import hashlib
import logging
import time
from typing import Optional

from fastapi import HTTPException, Request, status
from redis import Redis
from redis.exceptions import RedisError

from ..audit.service import get_client_ip
from ..config import get_settings
from ..observability.metrics import auth_attempts_total

logger = logging.getLogger(__name__)


def get_redis_client() -> Optional[Redis]:
    """Get Redis client for rate limiting.

    Returns None if Redis is not available, allowing graceful degradation.
    """
    try:
        client = Redis.from_url(
            get_settings().REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=0.5,
            socket_timeout=0.5,
        )
        client.ping()
        return client
    except (RedisError, OSError, ValueError):
        logger.warning("Redis unavailable, sign-in rate limiting disabled")
        return None


def _get_client_identifier(request: Request) -> str:
    """Hashed fingerprint of client IP and User-Agent."""
    ip = get_client_ip(request) or "unknown"
    user_agent = request.headers.get("User-Agent", "")
    fingerprint = f"{ip}:{user_agent}"
    return hashlib.sha256(fingerprint.encode()).hexdigest()[:32]


def _get_rate_limit_key(identifier: str, endpoint: str) -> str:
    return f"rate_limit:{endpoint}:{identifier}"


class RateLimiter:
    """Rate limiter using Redis sliding window algorithm."""

    def __init__(
        self,
        redis: Optional[Redis] = None,
        max_attempts: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        settings = get_settings()
        self.redis = redis
        self.max_attempts = max_attempts or settings.RATE_LIMIT_MAX_ATTEMPTS
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW
        self._connected = redis is not None

    def _client(self) -> Optional[Redis]:
        if not self._connected:
            self.redis = get_redis_client()
            self._connected = True
        return self.redis

    def is_rate_limited(self, request: Request, endpoint: str = "sign_in") -> bool:
        """Check if client has used up its attempts in the current window."""
        redis = self._client()
        if not redis:
            return False

        key = _get_rate_limit_key(_get_client_identifier(request), endpoint)
        window_start = time.time() - self.window_seconds

        try:
            redis.zremrangebyscore(key, 0, window_start)
            return redis.zcard(key) >= self.max_attempts
        except RedisError as e:
            logger.warning(f"Rate limit check failed, allowing request: {e}")
            return False

    def record_attempt(self, request: Request, endpoint: str = "sign_in") -> int:
        """Record an attempt and return the count in the current window."""
        redis = self._client()
        if not redis:
            return 0

        key = _get_rate_limit_key(_get_client_identifier(request), endpoint)
        now = time.time()

        try:
            redis.zadd(key, {f"{now:.6f}": now})
            redis.expire(key, self.window_seconds)
            return redis.zcard(key)
        except RedisError as e:
            logger.warning(f"Failed to record rate limit attempt: {e}")
            return 0

    def reset(self, request: Request, endpoint: str = "sign_in") -> None:
        """Clear the window after a successful sign-in."""
        redis = self._client()
        if not redis:
            return
        try:
            redis.delete(_get_rate_limit_key(_get_client_identifier(request), endpoint))
        except RedisError as e:
            logger.warning(f"Failed to reset rate limit: {e}")


# Global rate limiter instance (connects lazily on first use)
rate_limiter = RateLimiter()


def check_rate_limit(request: Request) -> None:
    """Check rate limit and raise 429 if exceeded.

    Use as a dependency:

        @router.post("/sign-in")
        def sign_in(request: Request, _: None = Depends(check_rate_limit)):
            ...
    """
    if rate_limiter.is_rate_limited(request, "sign_in"):
        auth_attempts_total.labels(action="sign_in", result="rate_limited").inc()
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many sign-in attempts. Please wait before trying again.",
            headers={"Retry-After": str(rate_limiter.window_seconds)}
        )

    rate_limiter.record_attempt(request, "sign_in")
