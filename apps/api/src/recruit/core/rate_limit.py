"""
Rate Limiting Module

Fixed-window request counting per client address, used to throttle
application submissions.

The limiter depends on an injected `RateLimitStore`:
- MemoryRateLimitStore: process-local, best-effort, reset on restart.
  Read-modify-write is guarded by an asyncio.Lock and the clock is
  injectable so tests can control time.
- RedisRateLimitStore: atomic INCR + EXPIRE pipeline, shared between
  workers that use the same Redis database.

SECURITY: Counters are not synchronized across processes when the memory
store is used; each worker enforces its own limit.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from fastapi import HTTPException, Request, status
from redis.asyncio import Redis

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateLimitResult:
    """Outcome of a single rate limit check."""

    allowed: bool
    count: int
    retry_after_seconds: int = 0


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "Too many requests",
                "details": f"Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": retry_after_seconds,
            },
            headers={"Retry-After": str(retry_after_seconds)},
        )


class RateLimitStore(Protocol):
    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult: ...


@dataclass
class _Window:
    count: int
    reset_at: float


class MemoryRateLimitStore:
    """
    In-memory fixed-window counters.

    A window opens on the first request from a key and lasts
    `window_seconds`; requests beyond `limit` inside the window are refused
    with the seconds remaining until it closes.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        async with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or window.reset_at <= now:
                self._windows[key] = _Window(count=1, reset_at=now + window_seconds)
                return RateLimitResult(allowed=True, count=1)

            if window.count >= limit:
                retry_after = max(0, math.ceil(window.reset_at - now))
                return RateLimitResult(
                    allowed=False, count=window.count, retry_after_seconds=retry_after
                )

            window.count += 1
            return RateLimitResult(allowed=True, count=window.count)

    async def sweep(self) -> int:
        """Evict expired windows. Returns the number of evicted keys."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if window.reset_at <= now]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimitStore:
    """Redis fixed-window counters (INCR + EXPIRE NX, then TTL)."""

    def __init__(self, client: Redis, prefix: str = "rate_limit:") -> None:
        self._client = client
        self._prefix = prefix

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        redis_key = f"{self._prefix}{key}"

        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        # Only the first request of a window sets the expiry
        pipe.expire(redis_key, window_seconds, nx=True)
        pipe.ttl(redis_key)
        count, _, ttl = await pipe.execute()

        if count > limit:
            retry_after = ttl if ttl and ttl > 0 else window_seconds
            return RateLimitResult(
                allowed=False, count=count, retry_after_seconds=min(retry_after, window_seconds)
            )
        return RateLimitResult(allowed=True, count=count)


class RateLimiter:
    """Applies a fixed limit/window policy on top of a store."""

    def __init__(self, store: RateLimitStore, limit: int, window_seconds: int) -> None:
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds

    async def check(self, key: str) -> RateLimitResult:
        return await self.store.hit(key, self.limit, self.window_seconds)

    async def enforce(self, key: str) -> RateLimitResult:
        """
        Count a request against `key`.

        Raises:
            RateLimitExceeded: When the window's budget is exhausted (HTTP 429)
        """
        result = await self.check(key)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {key}: {self.limit}/{self.window_seconds}s, "
                f"retry after {result.retry_after_seconds}s"
            )
            raise RateLimitExceeded(self.limit, self.window_seconds, result.retry_after_seconds)
        return result


def get_client_ip(request: Request) -> str:
    """
    Resolve the submitter address.

    Uses the first hop of X-Forwarded-For when present (the service runs
    behind a proxy), else the socket peer.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


# Process-wide limiter, set during startup
_limiter: RateLimiter | None = None


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    global _limiter
    _limiter = limiter


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency returning the submission rate limiter."""
    if _limiter is None:
        raise RuntimeError("Rate limiter is not initialized")
    return _limiter


__all__ = [
    "MemoryRateLimitStore",
    "RateLimitExceeded",
    "RateLimitResult",
    "RateLimiter",
    "RedisRateLimitStore",
    "get_client_ip",
    "get_rate_limiter",
    "set_rate_limiter",
]
