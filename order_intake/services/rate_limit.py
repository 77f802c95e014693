"""Per-client admission control for order submissions.

Every backend implements a fixed window: the first hit from an identity
opens a window of ``window_seconds``; up to ``max_hits`` attempts are
admitted inside it and the rest are rejected until it expires. This is an
approximation of a sliding log, so a client can land up to ``2 * max_hits``
attempts across a window boundary.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from order_intake.core.config import Settings
from order_intake.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class RateLimiter(Protocol):
    window_seconds: int

    async def admit(self, identity: str) -> bool:
        """Count one attempt for ``identity``; return False if over the limit."""
        ...

    async def close(self) -> None: ...


@dataclass
class _Bucket:
    count: int
    resets_at: float


class MemoryRateLimiter:
    """Process-local counters. Reset on restart, not shared between workers."""

    def __init__(
        self,
        max_hits: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_hits = max_hits
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    async def admit(self, identity: str) -> bool:
        now = self._clock()
        with self._lock:
            self._sweep(now)
            bucket = self._buckets.get(identity)
            if bucket is None or bucket.resets_at <= now:
                bucket = _Bucket(count=0, resets_at=now + self.window_seconds)
                self._buckets[identity] = bucket
            bucket.count += 1
            return bucket.count <= self.max_hits

    def _sweep(self, now: float) -> None:
        """Drop expired buckets at most once per window. Caller holds the lock."""
        if now < self._next_sweep:
            return
        expired = [key for key, b in self._buckets.items() if b.resets_at <= now]
        for key in expired:
            del self._buckets[key]
        self._next_sweep = now + self.window_seconds

    async def close(self) -> None:
        with self._lock:
            self._buckets.clear()


class RedisRateLimiter:
    """Counters in Redis, shared by every worker pointed at the same server."""

    KEY_PREFIX = "order-intake:rate:"

    def __init__(self, redis_url: str, max_hits: int, window_seconds: int):
        import redis.asyncio as aioredis

        self.max_hits = max_hits
        self.window_seconds = window_seconds
        self._redis = aioredis.from_url(redis_url)

    async def admit(self, identity: str) -> bool:
        key = f"{self.KEY_PREFIX}{identity}"
        # INCR and EXPIRE NX in one MULTI/EXEC: the TTL is set only by the
        # hit that opened the window.
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, self.window_seconds, nx=True)
            count, _ = await pipe.execute()
        return int(count) <= self.max_hits

    async def close(self) -> None:
        await self._redis.aclose()


class NoopRateLimiter:
    """Admits everything."""

    def __init__(self, window_seconds: int = 0):
        self.window_seconds = window_seconds

    async def admit(self, identity: str) -> bool:
        return True

    async def close(self) -> None:
        return None


def build_rate_limiter(settings: Settings) -> RateLimiter:
    backend = settings.RATE_LIMIT_BACKEND.lower()
    if backend == "memory":
        return MemoryRateLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)
    if backend == "redis":
        return RedisRateLimiter(
            settings.REDIS_URL, settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS
        )
    if backend == "disabled":
        logger.warning("Rate limiting is disabled; order submissions are unthrottled")
        return NoopRateLimiter(settings.RATE_LIMIT_WINDOW_SECONDS)
    raise ConfigurationError(f"Unknown RATE_LIMIT_BACKEND: {settings.RATE_LIMIT_BACKEND!r}")
