"""Guest rate limiting - per-IP daily cap on email generation

Counters live behind the ``RateLimitStore`` interface: a process-local store
for single-instance deployments, and a Redis store shared by all instances.
"""

import asyncio
import logging
import time
from typing import Dict, Iterable, Optional, Tuple

from fastapi import Request
from redis.asyncio import Redis

from sayitright.core.config import get_settings
from sayitright.core.errors import BadRequestError, TooManyRequestsError
from sayitright.core.redis import get_redis
from sayitright.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()


class RateLimitStore:
    """Fixed-window counter store"""

    async def increment(self, key: str, window_seconds: int) -> Tuple[int, float]:
        """
        Count one hit.

        Args:
            key: Counter key
            window_seconds: Window length, starting at the first hit

        Returns:
            (hits in the current window, window expiry as epoch seconds)
        """
        raise NotImplementedError

    async def cleanup(self) -> int:
        """Drop expired windows; returns how many were removed"""
        return 0


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store"""

    def __init__(self):
        # key -> (count, reset_at)
        self.records: Dict[str, Tuple[int, float]] = {}
        self.lock = asyncio.Lock()

    async def increment(self, key: str, window_seconds: int) -> Tuple[int, float]:
        async with self.lock:
            now = time.time()
            record = self.records.get(key)

            # New or expired window
            if record is None or now > record[1]:
                record = (1, now + window_seconds)
            else:
                record = (record[0] + 1, record[1])

            self.records[key] = record
            return record

    async def cleanup(self) -> int:
        async with self.lock:
            now = time.time()
            expired = [key for key, (_, reset_at) in self.records.items() if now > reset_at]
            for key in expired:
                del self.records[key]
            return len(expired)


class RedisRateLimitStore(RateLimitStore):
    """Redis store: INCR, with EXPIRE set on the first hit of a window"""

    def __init__(self, redis: Optional[Redis] = None, prefix: str = "ratelimit:"):
        self._redis = redis
        self.prefix = prefix

    async def _client(self) -> Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    async def increment(self, key: str, window_seconds: int) -> Tuple[int, float]:
        redis = await self._client()
        redis_key = f"{self.prefix}{key}"

        count = await redis.incr(redis_key)
        if count == 1:
            await redis.expire(redis_key, window_seconds)
            ttl = window_seconds
        else:
            ttl = await redis.ttl(redis_key)
            if ttl < 0:
                # Key lost its expiry; start the window again
                await redis.expire(redis_key, window_seconds)
                ttl = window_seconds

        return count, time.time() + ttl


def create_rate_limit_store(backend: str) -> RateLimitStore:
    if backend == "redis":
        return RedisRateLimitStore()
    return InMemoryRateLimitStore()


def get_client_ip(request: Request) -> Optional[str]:
    """X-Forwarded-For (first hop), then X-Real-IP, then the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else None


class GuestRateLimiter:
    """Daily per-IP cap for unauthenticated callers"""

    def __init__(self, store: RateLimitStore, max_requests: int, window_seconds: int):
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def check(self, request: Request, user: Optional[User]) -> None:
        """
        Count a guest request.

        Raises:
            BadRequestError: client IP cannot be determined
            TooManyRequestsError: daily guest limit exceeded
        """
        # Logged-in users are not IP limited
        if user is not None:
            return

        ip = get_client_ip(request)
        if not ip:
            raise BadRequestError("IP를 확인할 수 없습니다")

        count, reset_at = await self.store.increment(f"guest:{ip}", self.window_seconds)

        if count > self.max_requests:
            logger.warning(f"Guest limit exceeded: ip={ip}, count={count}")
            raise TooManyRequestsError(
                "일일 게스트 이메일 생성 한도를 초과했습니다. 회원가입 후 무제한으로 사용하세요.",
                details={"resetAt": int(reset_at)},
            )


# Shared limiter
guest_rate_limiter = GuestRateLimiter(
    store=create_rate_limit_store(settings.rate_limit_backend),
    max_requests=settings.guest_daily_limit,
    window_seconds=settings.guest_window_seconds,
)


async def sweep_expired_windows(stores: Iterable[RateLimitStore]) -> int:
    """Drop expired windows from every store; Redis stores expire on their own"""
    removed = 0
    for store in stores:
        removed += await store.cleanup()
    return removed


async def cleanup_task(stores: Iterable[RateLimitStore], interval_seconds: int = 300):
    """Periodically sweep the given stores"""
    stores = list(stores)
    while True:
        await asyncio.sleep(interval_seconds)
        removed = await sweep_expired_windows(stores)
        if removed:
            logger.debug(f"Rate limit cleanup removed {removed} windows")
