"""
Core configuration module for AI Gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the AI_GATEWAY_ prefix.

Configuration is read-only after process start: the signing key, provider
keys and rate-limit quotas are fixed for the lifetime of the process.
"""

import secrets
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid environment values."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the AI_GATEWAY_ prefix for environment variables.
    Example: AI_GATEWAY_PORT=8080
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="ai-gateway",
        description="Name of the service for logging and identification",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port the service listens on",
    )
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by the CORS middleware",
    )

    # =========================================================================
    # Authentication
    # =========================================================================
    jwt_secret: SecretStr = Field(
        default=SecretStr(""),
        description="HMAC signing key for session tokens",
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        description="Session token signing algorithm",
    )
    jwt_expiry_seconds: int = Field(
        default=86400,
        ge=60,
        description="Session token lifetime in seconds",
    )
    password_min_length: int = Field(
        default=8,
        ge=1,
        le=128,
        description="Minimum password length accepted at registration",
    )
    admin_emails: list[str] = Field(
        default=[],
        description="Emails granted the admin role when they register (exact match)",
    )

    # =========================================================================
    # Rate Limiting
    # =========================================================================
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL for shared rate-limit counters",
    )
    rate_limit_backend: Literal["shared", "local"] = Field(
        default="shared",
        description="Desired counter backend; degrades to local if Redis is unreachable",
    )
    rate_limit_key_prefix: str = Field(
        default="rl:",
        description="Key prefix for shared rate-limit counters",
    )
    redis_connect_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        le=30,
        description="How long startup waits for Redis to answer PING",
    )
    rate_limit_auth_window_ms: int = Field(default=900_000, ge=1000)
    rate_limit_auth_max: int = Field(default=10, ge=1)
    rate_limit_chat_window_ms: int = Field(default=60_000, ge=1000)
    rate_limit_chat_max: int = Field(default=20, ge=1)
    rate_limit_default_window_ms: int = Field(default=900_000, ge=1000)
    rate_limit_default_max: int = Field(default=100, ge=1)
    rate_limit_vector_search_window_ms: int = Field(default=60_000, ge=1000)
    rate_limit_vector_search_max: int = Field(default=30, ge=1)
    forwarded_allow_ips: list[str] = Field(
        default=["127.0.0.1"],
        description="Proxy addresses whose X-Forwarded-For header is trusted",
    )

    # =========================================================================
    # Provider Configuration
    # =========================================================================
    anthropic_api_key: SecretStr = Field(default=SecretStr(""))
    anthropic_base_url: str = Field(default="https://api.anthropic.com/v1")
    anthropic_version: str = Field(
        default="2023-06-01",
        description="Value sent in the anthropic-version header",
    )
    deepseek_api_key: SecretStr = Field(default=SecretStr(""))
    deepseek_base_url: str = Field(default="https://api.deepseek.com/v1")
    xai_api_key: SecretStr = Field(default=SecretStr(""))
    xai_base_url: str = Field(default="https://api.x.ai/v1")
    openrouter_api_key: SecretStr = Field(default=SecretStr(""))
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    openrouter_referer: str = Field(
        default="",
        description="Optional HTTP-Referer sent to OpenRouter for attribution",
    )
    nvidia_nim_api_key: SecretStr = Field(default=SecretStr(""))
    nvidia_nim_base_url: str = Field(default="https://integrate.api.nvidia.com/v1")
    nvidia_nim_rerank_url: str = Field(
        default="https://ai.api.nvidia.com/v1/retrieval",
        description="Base URL of the NVIDIA retrieval (rerank) API",
    )
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    provider_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Timeout for a single upstream provider call",
    )

    # =========================================================================
    # Vector Search
    # =========================================================================
    vector_search_embedding_provider: str = Field(
        default="openai",
        description="Provider used to embed vector-search queries",
    )
    vector_search_embedding_model: str = Field(
        default="text-embedding-3-small",
        description="Default embedding model for vector-search queries",
    )
    vector_search_rpc_function: str = Field(
        default="match_documents",
        description="Similarity-search RPC invoked on the vector store",
    )
    vector_search_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    model_config = {
        "env_prefix": "AI_GATEWAY_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://")):
            raise ValueError("redis_url must start with redis:// or rediss://")
        return v

    @field_validator(
        "anthropic_base_url",
        "deepseek_base_url",
        "xai_base_url",
        "openrouter_base_url",
        "nvidia_nim_base_url",
        "nvidia_nim_rerank_url",
        "openai_base_url",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """
        Require a strong signing key in production.

        Outside production an empty key is replaced with a random one, so
        tokens do not survive a restart but the service still starts.
        """
        secret = self.jwt_secret.get_secret_value()
        if self.environment == Environment.PRODUCTION.value:
            if len(secret) < MIN_JWT_SECRET_LENGTH:
                raise ValueError(
                    f"jwt_secret must be at least {MIN_JWT_SECRET_LENGTH} "
                    "characters in production"
                )
            if "*" in self.cors_origins:
                raise ValueError("wildcard cors_origins are not allowed in production")
        elif not secret:
            self.jwt_secret = SecretStr(secrets.token_urlsafe(48))
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION.value


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.
    Call get_settings.cache_clear() in tests to reload from the environment.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
