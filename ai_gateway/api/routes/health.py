"""
Health Router

Liveness and readiness probes plus a status summary. No authentication and
no rate limiting.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ai_gateway import __version__
from ai_gateway.api.deps import get_provider_router, get_settings
from ai_gateway.api.middleware.rate_limit import BackendSelection, RateLimitBackend
from ai_gateway.core.config import Settings
from ai_gateway.models.responses import HealthResponse
from ai_gateway.observability.logging import get_logger
from ai_gateway.providers.router import ProviderRouter

logger = get_logger(__name__)

REDIS_PING_TIMEOUT_SECONDS = 2.0


class HealthService:
    """Dependency checks for the readiness probe."""

    def __init__(self, selection: BackendSelection, started_at: float) -> None:
        self._selection = selection
        self._started_at = started_at

    @property
    def backend(self) -> RateLimitBackend:
        return self._selection.backend

    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self._started_at, 3)

    async def check_redis(self) -> bool:
        """
        Ping the shared counter store.

        Always True under the local backend: no external dependency is in
        use. Under the shared backend every rate-limited request needs Redis.
        """
        redis: Optional[Redis] = self._selection.redis
        if self._selection.backend != RateLimitBackend.SHARED or redis is None:
            return True
        try:
            await asyncio.wait_for(redis.ping(), timeout=REDIS_PING_TIMEOUT_SECONDS)
            return True
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            logger.warning("redis_health_check_failed", error=str(e))
            return False


def get_health_service(request: Request) -> HealthService:
    return request.app.state.health_service


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings),
    health: HealthService = Depends(get_health_service),
    providers: ProviderRouter = Depends(get_provider_router),
) -> HealthResponse:
    """Status summary; ``degraded`` when shared rate limiting fell back to local."""
    degraded = (
        settings.rate_limit_backend == RateLimitBackend.SHARED.value
        and health.backend == RateLimitBackend.LOCAL
    )
    return HealthResponse(
        status="degraded" if degraded else "healthy",
        service=settings.service_name,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=health.uptime_seconds(),
        rateLimitBackend=health.backend.value,
        providers=providers.status(),
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    response: Response,
    health: HealthService = Depends(get_health_service),
) -> dict[str, object]:
    redis_ok = await health.check_redis()
    if not redis_ok:
        response.status_code = 503
    return {
        "status": "ready" if redis_ok else "not_ready",
        "checks": {"redis": redis_ok},
    }
