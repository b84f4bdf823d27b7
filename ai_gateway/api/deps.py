"""
API Dependencies

FastAPI dependency functions. Services are built once in the application
lifespan and stored on ``app.state``; these functions hand them to routes
and can be replaced through ``app.dependency_overrides`` in tests.

Per-request order on protected routes: bearer token check, then the
route-class rate limit, then body validation by FastAPI.
"""

from typing import Callable, Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ai_gateway.api.middleware.rate_limit import (
    RateLimiter,
    RateLimitResult,
    RouteClass,
    client_address,
)
from ai_gateway.auth.service import CredentialService
from ai_gateway.core.config import Settings
from ai_gateway.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ErrorCode,
    RateLimitError,
)
from ai_gateway.models.domain import Principal
from ai_gateway.observability.logging import get_logger
from ai_gateway.observability.metrics import record_rate_limit_rejection
from ai_gateway.providers.router import ProviderRouter
from ai_gateway.services.chat import ChatService
from ai_gateway.services.vector_search import VectorSearchService

logger = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


# =============================================================================
# Service accessors
# =============================================================================


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credential_service


def get_provider_router(request: Request) -> ProviderRouter:
    return request.app.state.provider_router


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_vector_search_service(request: Request) -> VectorSearchService:
    return request.app.state.vector_search_service


# =============================================================================
# Authentication
# =============================================================================


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    credential_service: CredentialService = Depends(get_credential_service),
) -> Principal:
    """
    Require ``Authorization: Bearer <token>``.

    Missing, expired and malformed tokens all raise AuthenticationError
    subclasses; the error code tells them apart.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(
            "Authorization header with a Bearer token is required",
            code=ErrorCode.MISSING_TOKEN,
        )
    principal = credential_service.verify(credentials.credentials)
    request.state.principal = principal
    return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Allow only principals whose token carries the admin role (403 otherwise)."""
    if principal.role != "admin":
        raise AuthorizationError("Admin access required", code=ErrorCode.FORBIDDEN)
    return principal


# =============================================================================
# Rate limiting
# =============================================================================


async def _enforce(
    request: Request,
    response: Response,
    route_class: RouteClass,
    client_id: str,
) -> RateLimitResult:
    limiter: RateLimiter = request.app.state.rate_limiters[route_class.value]
    result = await limiter.is_allowed(client_id)
    if not result.allowed:
        record_rate_limit_rejection(route_class.value)
        logger.warning(
            "rate_limit_exceeded",
            route_class=route_class.value,
            client_id=client_id,
            limit=result.limit,
            retry_after=result.retry_after,
        )
        raise RateLimitError(
            limiter.policy.message,
            retry_after=result.retry_after,
            limit=result.limit,
            route_class=route_class.value,
        )
    response.headers.update(result.headers())
    return result


def rate_limit_by_principal(route_class: RouteClass) -> Callable:
    """Rate limit keyed by the authenticated principal; implies authentication."""

    async def dependency(
        request: Request,
        response: Response,
        principal: Principal = Depends(get_current_principal),
    ) -> RateLimitResult:
        return await _enforce(request, response, route_class, f"user:{principal.id}")

    return dependency


def rate_limit_by_address(route_class: RouteClass) -> Callable:
    """Rate limit keyed by client address, for unauthenticated routes."""

    async def dependency(request: Request, response: Response) -> RateLimitResult:
        return await _enforce(request, response, route_class, f"ip:{client_address(request)}")

    return dependency
