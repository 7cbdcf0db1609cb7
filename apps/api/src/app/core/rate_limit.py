"""
Rate Limiting Module

Sliding-window rate limiting for mutation endpoints using Redis sorted sets.
Falls back to in-memory storage if Redis is unavailable. Limits are only
enforced when RATE_LIMIT_ENABLED is set.

Applied to:
- Registration applications (per student)
- Registration decisions and member removals (per chapter head)
"""

import logging
import time

from fastapi import HTTPException, status

from app.core.config import settings
from app.core.redis import get_redis

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [timestamp, ...]}
_memory_store: dict[str, list[float]] = {}


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "Rate limit exceeded",
                "details": f"Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using Redis.

    Args:
        client: Redis client
        key: Rate limit key (e.g., "chapterhead:decide:head@x.edu")
        limit: Maximum requests allowed
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using in-memory storage.

    Only limits within a single process.
    """
    now = time.time()
    window_start = now - window_seconds

    recent = [ts for ts in _memory_store.get(key, []) if ts > window_start]

    if len(recent) >= limit:
        _memory_store[key] = recent
        return False

    recent.append(now)
    _memory_store[key] = recent
    return True


async def check_rate_limit(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    client = get_redis()

    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except Exception as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_rate_limit(
    scope: str,
    subject: str,
    limit: int,
    window_seconds: int,
) -> None:
    """
    Raise RateLimitExceeded when ``subject`` exceeded ``limit`` for ``scope``.

    Args:
        scope: Action name (e.g., "chapterhead:kick")
        subject: Who is acting (usually the caller's email)
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
    """
    if not settings.rate_limit_enabled:
        return

    key = f"rate_limit:{scope}:{subject.lower()}"
    allowed = await check_rate_limit(key, limit, window_seconds)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {key}: {limit}/{window_seconds}s")
        raise RateLimitExceeded(limit, window_seconds)


def reset_memory_store() -> None:
    """Clear the in-memory fallback store."""
    _memory_store.clear()


__all__ = [
    "RateLimitExceeded",
    "check_rate_limit",
    "enforce_rate_limit",
    "reset_memory_store",
]
