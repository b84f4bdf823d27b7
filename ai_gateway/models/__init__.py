"""Pydantic models for requests, responses and internal domain types."""

from ai_gateway.models.domain import Principal, UserRecord
from ai_gateway.models.requests import (
    ChatRequest,
    EmbeddingRequest,
    LoginRequest,
    Message,
    RegisterRequest,
    RerankRequest,
    VectorSearchRequest,
)
from ai_gateway.models.responses import (
    AuthResponse,
    EmbeddingData,
    EmbeddingResponse,
    ErrorEnvelope,
    GatewayMetadata,
    HealthResponse,
    RerankResponse,
    RerankResult,
    Usage,
    VectorSearchMetadata,
    VectorSearchResponse,
    VectorSearchResult,
)

__all__ = [
    # Domain
    "Principal",
    "UserRecord",
    # Requests
    "ChatRequest",
    "EmbeddingRequest",
    "LoginRequest",
    "Message",
    "RegisterRequest",
    "RerankRequest",
    "VectorSearchRequest",
    # Responses
    "AuthResponse",
    "EmbeddingData",
    "EmbeddingResponse",
    "ErrorEnvelope",
    "GatewayMetadata",
    "HealthResponse",
    "RerankResponse",
    "RerankResult",
    "Usage",
    "VectorSearchMetadata",
    "VectorSearchResponse",
    "VectorSearchResult",
]
