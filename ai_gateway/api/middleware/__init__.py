"""HTTP middleware: request context, security headers and rate limiting."""

from ai_gateway.api.middleware.logging import RequestContextMiddleware
from ai_gateway.api.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimiter,
    RateLimitPolicy,
    RateLimitResult,
    RedisRateLimiter,
    RouteClass,
)
from ai_gateway.api.middleware.security import SecurityHeadersMiddleware

__all__ = [
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
    "InMemoryRateLimiter",
    "RateLimiter",
    "RateLimitPolicy",
    "RateLimitResult",
    "RedisRateLimiter",
    "RouteClass",
]
