"""
Response Models

Pydantic models for API response serialization. Chat completions are not
modelled here: the upstream envelope is passed through largely unchanged,
with gateway metadata added.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ai_gateway.models.domain import Principal


class Usage(BaseModel):
    """
    Token usage statistics.

    total_tokens always equals prompt_tokens + completion_tokens when built
    by an adapter from separate counts.
    """

    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = Field(default=0, description="Tokens in prompt")
    completion_tokens: int = Field(default=0, description="Tokens in completion")
    total_tokens: int = Field(default=0, description="Total tokens")

    @classmethod
    def from_counts(cls, prompt_tokens: int, completion_tokens: int) -> "Usage":
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )


class GatewayMetadata(BaseModel):
    provider: str = Field(..., description="Resolved provider identifier")
    latency_ms: int = Field(..., description="Elapsed time spent on the upstream call")
    request_id: Optional[str] = Field(default=None, description="Request identifier")


# =============================================================================
# Auth
# =============================================================================


class AuthResponse(BaseModel):
    user: Principal
    token: str
    expiresIn: str = Field(..., description="Token lifetime, e.g. '24h'")


# =============================================================================
# Embeddings / Rerank
# =============================================================================


class EmbeddingData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "embedding"
    embedding: Union[list[float], str] = Field(..., description="Vector, or base64 when requested")
    index: int


class EmbeddingResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: str = "list"
    data: list[EmbeddingData]
    model: Optional[str] = None
    usage: Optional[Usage] = None


class RerankResult(BaseModel):
    index: int
    relevance_score: float
    document: Optional[str] = None


class RerankResponse(BaseModel):
    model: str
    results: list[RerankResult]


# =============================================================================
# Vector Search
# =============================================================================


class VectorSearchResult(BaseModel):
    id: Any
    content: str = ""
    similarity: float
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None


class VectorSearchMetadata(BaseModel):
    resultCount: int
    threshold: float
    limit: int
    embeddingModel: str
    embeddingTime: int = Field(..., description="Milliseconds spent embedding the query")
    searchTime: int = Field(..., description="Milliseconds spent in the similarity search")
    totalTime: int = Field(..., description="embeddingTime + searchTime")


class VectorSearchResponse(BaseModel):
    success: bool = True
    query: str
    results: list[VectorSearchResult]
    metadata: VectorSearchMetadata


# =============================================================================
# Errors
# =============================================================================


class ErrorBody(BaseModel):
    type: str
    message: str
    code: str
    details: Optional[Any] = None
    traceId: Optional[str] = None


class ErrorEnvelope(BaseModel):
    """The single wire shape of every failure response."""

    error: ErrorBody


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded"]
    service: str
    version: str
    timestamp: str
    uptime: float
    rateLimitBackend: str
    providers: dict[str, Literal["configured", "missing_key"]]
