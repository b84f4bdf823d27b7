"""
Core module for AI Gateway.

This module contains configuration and the error taxonomy.
"""

from ai_gateway.core.config import Settings, get_settings
from ai_gateway.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ErrorCode,
    GatewayError,
    GatewayNotImplementedError,
    GatewayValidationError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    TokenExpiredError,
    TokenMalformedError,
    UnknownProviderError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "GatewayError",
    "GatewayValidationError",
    "UnknownProviderError",
    "AuthenticationError",
    "TokenExpiredError",
    "TokenMalformedError",
    "InvalidCredentialsError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ProviderError",
    "GatewayNotImplementedError",
    "InternalError",
]
