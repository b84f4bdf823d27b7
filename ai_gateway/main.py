"""
AI Gateway - Main Application Entry Point

Builds the FastAPI application: middleware, routes, exception handlers and
the lifespan that wires the shared HTTP client, provider registry, rate
limiters and credential service.

Run with: uvicorn ai_gateway.main:app
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Optional

import httpx
from argon2 import PasswordHasher
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from ai_gateway import __version__
from ai_gateway.api.deps import rate_limit_by_address
from ai_gateway.api.errors import register_exception_handlers
from ai_gateway.api.middleware.logging import RequestContextMiddleware
from ai_gateway.api.middleware.rate_limit import (
    RouteClass,
    build_rate_limiters,
    policies_from_settings,
    select_rate_limit_backend,
)
from ai_gateway.api.middleware.security import SecurityHeadersMiddleware
from ai_gateway.api.routes.admin import router as admin_router
from ai_gateway.api.routes.auth import router as auth_router
from ai_gateway.api.routes.chat import router as chat_router
from ai_gateway.api.routes.embeddings import router as embeddings_router
from ai_gateway.api.routes.health import HealthService
from ai_gateway.api.routes.health import router as health_router
from ai_gateway.api.routes.providers import router as providers_router
from ai_gateway.api.routes.vector_search import router as vector_search_router
from ai_gateway.auth.service import CredentialService
from ai_gateway.auth.store import InMemoryUserStore, UserStore
from ai_gateway.auth.tokens import TokenService
from ai_gateway.clients.http import create_http_client
from ai_gateway.clients.vector_store import SupabaseVectorStoreClient
from ai_gateway.core.config import Settings, get_settings
from ai_gateway.observability.logging import configure_logging, get_logger
from ai_gateway.observability.metrics import MetricsMiddleware, get_metrics_app
from ai_gateway.providers.router import create_provider_router
from ai_gateway.services.chat import ChatService
from ai_gateway.services.vector_search import VectorSearchService

APP_NAME = "AI Gateway"
APP_DESCRIPTION = "Authenticated, rate-limited gateway to hosted model providers"

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    redis_factory: Optional[Callable[[str], Redis]] = None,
    user_store: Optional[UserStore] = None,
    password_hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration (default: get_settings())
        http_client: Outbound client; owned by the caller when given
        redis_factory: Builds the Redis client for shared rate limiting
        user_store: User storage (default: in-memory)
        password_hasher: argon2 hasher for the default user store

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, force=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "gateway_starting",
            service=settings.service_name,
            version=__version__,
            environment=settings.environment,
        )

        owns_client = http_client is None
        client = http_client or create_http_client(
            timeout_seconds=settings.provider_timeout_seconds
        )

        selection = await select_rate_limit_backend(settings, redis_factory)
        provider_router = create_provider_router(settings, client)

        app.state.settings = settings
        app.state.provider_router = provider_router
        app.state.rate_limiters = build_rate_limiters(
            policies_from_settings(settings),
            selection,
            key_prefix=settings.rate_limit_key_prefix,
        )
        app.state.credential_service = CredentialService(
            user_store or InMemoryUserStore(password_hasher),
            TokenService(
                settings.jwt_secret.get_secret_value(),
                expiry_seconds=settings.jwt_expiry_seconds,
                algorithm=settings.jwt_algorithm,
            ),
            password_min_length=settings.password_min_length,
            admin_emails=settings.admin_emails,
        )
        app.state.chat_service = ChatService(provider_router)
        app.state.vector_search_service = VectorSearchService(
            provider_router,
            SupabaseVectorStoreClient(
                client,
                rpc_function=settings.vector_search_rpc_function,
                timeout_seconds=settings.vector_search_timeout_seconds,
            ),
            default_provider=settings.vector_search_embedding_provider,
            default_model=settings.vector_search_embedding_model,
        )
        app.state.health_service = HealthService(selection, started_at=time.monotonic())

        logger.info(
            "gateway_started",
            rate_limit_backend=selection.backend.value,
            providers=list(provider_router.provider_ids),
        )

        yield

        logger.info("gateway_shutting_down")
        if owns_client:
            await client.aclose()
        if selection.redis is not None:
            await selection.redis.aclose()

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )

    # Last added runs first
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.forwarded_allow_ips)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(chat_router)
    app.include_router(embeddings_router)
    app.include_router(vector_search_router)
    app.include_router(providers_router)
    app.include_router(admin_router)
    app.mount("/metrics", get_metrics_app())

    @app.get(
        "/",
        tags=["Info"],
        dependencies=[Depends(rate_limit_by_address(RouteClass.DEFAULT))],
    )
    async def root() -> dict[str, Any]:
        return {
            "service": APP_NAME,
            "version": __version__,
            "docs": "disabled" if settings.is_production else "/docs",
        }

    return app


app = create_app()
