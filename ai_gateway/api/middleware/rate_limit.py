"""
Rate Limiting

Fixed-window request quotas keyed by (route class, client identity), with two
interchangeable counter backends:

- InMemoryRateLimiter: counters live in this process only
- RedisRateLimiter: counters live in Redis so every instance shares one quota

The backend is chosen once at startup by select_rate_limit_backend(); if the
shared store cannot be reached the gateway runs with local counters and logs
why. Nothing switches backends per call after that.
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.requests import Request

from ai_gateway.core.config import Settings
from ai_gateway.observability.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Policies
# =============================================================================


class RouteClass(str, Enum):
    AUTH = "auth"
    CHAT = "chat"
    DEFAULT = "default"
    VECTOR_SEARCH = "vector_search"


@dataclass(frozen=True)
class RateLimitPolicy:
    """
    Quota for one route class.

    Attributes:
        name: Route class name, part of the counter key
        window_ms: Window length in milliseconds
        max_requests: Requests allowed per window
        message: Message returned when the quota is exhausted
    """

    name: str
    window_ms: int
    max_requests: int
    message: str = "Too many requests, please try again later"


def policies_from_settings(settings: Settings) -> dict[str, RateLimitPolicy]:
    return {
        RouteClass.AUTH.value: RateLimitPolicy(
            name=RouteClass.AUTH.value,
            window_ms=settings.rate_limit_auth_window_ms,
            max_requests=settings.rate_limit_auth_max,
            message="Too many authentication attempts, please try again later",
        ),
        RouteClass.CHAT.value: RateLimitPolicy(
            name=RouteClass.CHAT.value,
            window_ms=settings.rate_limit_chat_window_ms,
            max_requests=settings.rate_limit_chat_max,
            message="Too many chat requests, please slow down",
        ),
        RouteClass.DEFAULT.value: RateLimitPolicy(
            name=RouteClass.DEFAULT.value,
            window_ms=settings.rate_limit_default_window_ms,
            max_requests=settings.rate_limit_default_max,
        ),
        RouteClass.VECTOR_SEARCH.value: RateLimitPolicy(
            name=RouteClass.VECTOR_SEARCH.value,
            window_ms=settings.rate_limit_vector_search_window_ms,
            max_requests=settings.rate_limit_vector_search_max,
            message="Too many vector search requests, please slow down",
        ),
    }


# =============================================================================
# Results
# =============================================================================


@dataclass
class RateLimitResult:
    """
    Outcome of one counted request.

    Attributes:
        allowed: Whether the request fits in the current window
        limit: Maximum requests per window
        remaining: Requests left in the current window
        reset_after_ms: Milliseconds until the window resets
    """

    allowed: bool
    limit: int
    remaining: int
    reset_after_ms: int

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets (at least 1)."""
        return max(1, math.ceil(self.reset_after_ms / 1000))

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.retry_after),
        }


def _result(count: int, policy: RateLimitPolicy, reset_after_ms: int) -> RateLimitResult:
    return RateLimitResult(
        allowed=count <= policy.max_requests,
        limit=policy.max_requests,
        remaining=max(0, policy.max_requests - count),
        reset_after_ms=max(0, reset_after_ms),
    )


# =============================================================================
# Rate Limiter Interface
# =============================================================================


class RateLimiter(ABC):
    """
    Abstract base class for rate limiters.

    Both backends must behave identically from the caller's perspective:
    every call counts one request and reports whether it fits.
    """

    def __init__(self, policy: RateLimitPolicy) -> None:
        self.policy = policy

    @abstractmethod
    async def is_allowed(self, client_id: str) -> RateLimitResult:
        """
        Count a request from client_id and check it against the quota.

        Args:
            client_id: Client identity (principal id or IP address)

        Returns:
            RateLimitResult with allowed status and window info
        """


# =============================================================================
# In-Memory Rate Limiter
# =============================================================================


@dataclass
class RateLimitWindow:
    start: float
    count: int = 0


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local fixed-window counter.

    The read-increment-write below has no await in it, so under the event
    loop two concurrent requests can never both take the last slot.

    Args:
        policy: Quota to enforce
        clock: Monotonic seconds; injectable for tests
    """

    _PRUNE_THRESHOLD = 10_000

    def __init__(
        self,
        policy: RateLimitPolicy,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(policy)
        self._clock = clock
        self._window_seconds = policy.window_ms / 1000.0
        self._windows: dict[str, RateLimitWindow] = {}

    async def is_allowed(self, client_id: str) -> RateLimitResult:
        now = self._clock()
        window = self._windows.get(client_id)
        if window is None or now - window.start >= self._window_seconds:
            if len(self._windows) >= self._PRUNE_THRESHOLD:
                self._prune(now)
            window = RateLimitWindow(start=now)
            self._windows[client_id] = window
        window.count += 1

        reset_after_ms = int((window.start + self._window_seconds - now) * 1000)
        return _result(window.count, self.policy, reset_after_ms)

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.start >= self._window_seconds
        ]
        for key in expired:
            del self._windows[key]


# =============================================================================
# Redis Rate Limiter
# =============================================================================


class RedisRateLimiter(RateLimiter):
    """
    Shared fixed-window counter in Redis.

    One MULTI/EXEC transaction per request: create the key with the window
    TTL if absent, INCR it, read the remaining TTL. Concurrent instances
    therefore never undercount.
    """

    def __init__(
        self,
        policy: RateLimitPolicy,
        redis: Redis,
        key_prefix: str = "rl:",
    ) -> None:
        super().__init__(policy)
        self._redis = redis
        self._key_prefix = key_prefix

    def _key(self, client_id: str) -> str:
        return f"{self._key_prefix}{self.policy.name}:{client_id}"

    async def is_allowed(self, client_id: str) -> RateLimitResult:
        key = self._key(client_id)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, px=self.policy.window_ms, nx=True)
            pipe.incr(key)
            pipe.pttl(key)
            _, count, ttl_ms = await pipe.execute()

        if ttl_ms is None or ttl_ms < 0:
            ttl_ms = self.policy.window_ms
        return _result(int(count), self.policy, int(ttl_ms))


# =============================================================================
# Backend Selection
# =============================================================================


class RateLimitBackend(str, Enum):
    LOCAL = "local"
    SHARED = "shared"


@dataclass
class BackendSelection:
    backend: RateLimitBackend
    redis: Optional[Redis] = None
    reason: str = ""


async def select_rate_limit_backend(
    settings: Settings,
    redis_factory: Optional[Callable[[str], Redis]] = None,
) -> BackendSelection:
    """
    Decide the counter backend once at startup.

    A shared backend is used only when configured and Redis answers PING.
    Otherwise the gateway degrades to local counters and logs the reason;
    it never fails to start because Redis is down.

    Args:
        settings: Application settings
        redis_factory: Builds a client from a URL (defaults to Redis.from_url)
    """
    if settings.rate_limit_backend == RateLimitBackend.LOCAL.value:
        reason = "configured"
        logger.info("rate_limit_backend_selected", backend="local", reason=reason)
        return BackendSelection(RateLimitBackend.LOCAL, reason=reason)

    factory = redis_factory or (lambda url: Redis.from_url(url, decode_responses=True))
    client = factory(settings.redis_url)
    try:
        await asyncio.wait_for(client.ping(), timeout=settings.redis_connect_timeout_seconds)
    except asyncio.TimeoutError:
        reason = f"redis unreachable: no answer within {settings.redis_connect_timeout_seconds}s"
    except (RedisError, OSError) as e:
        reason = f"redis unreachable: {e}"
    else:
        reason = ""

    if reason:
        logger.warning(
            "rate_limit_backend_degraded",
            backend="local",
            desired="shared",
            reason=reason,
        )
        await client.aclose()
        return BackendSelection(RateLimitBackend.LOCAL, reason=reason)

    logger.info("rate_limit_backend_selected", backend="shared", reason="redis reachable")
    return BackendSelection(RateLimitBackend.SHARED, redis=client, reason="redis reachable")


def build_rate_limiters(
    policies: dict[str, RateLimitPolicy],
    selection: BackendSelection,
    key_prefix: str = "rl:",
) -> dict[str, RateLimiter]:
    if selection.backend == RateLimitBackend.SHARED and selection.redis is not None:
        return {
            name: RedisRateLimiter(policy, selection.redis, key_prefix)
            for name, policy in policies.items()
        }
    return {name: InMemoryRateLimiter(policy) for name, policy in policies.items()}


# =============================================================================
# Client Identity
# =============================================================================


def client_address(request: Request) -> str:
    """
    Client address for anonymous routes.

    Always the socket peer as seen by the app. X-Forwarded-For is honoured
    only through ProxyHeadersMiddleware, which rewrites the peer when the
    connection comes from a trusted proxy (Settings.forwarded_allow_ips).
    """
    if request.client:
        return request.client.host
    return "unknown"
