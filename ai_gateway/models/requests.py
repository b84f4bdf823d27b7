"""
Request Models

Pydantic models for API request validation. Every model here is validated
before any upstream call is made, so malformed input never consumes
provider quota.
"""

from typing import Annotated, Any, Literal, Optional, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Auth
# =============================================================================


def _check_email_syntax(v: str) -> str:
    """Reject malformed addresses but keep the address exactly as submitted."""
    try:
        validate_email(v, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return v


AccountEmail = Annotated[str, AfterValidator(_check_email_syntax)]


class RegisterRequest(BaseModel):
    email: AccountEmail = Field(..., description="Account email (exact, case-sensitive match)")
    password: str = Field(..., min_length=1, max_length=1024, description="Plain password")
    name: Optional[str] = Field(default=None, max_length=200, description="Display name")


class LoginRequest(BaseModel):
    email: AccountEmail = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=1024, description="Plain password")


# =============================================================================
# Chat
# =============================================================================


class TextPart(BaseModel):
    type: Literal["text"]
    text: str


class ImageUrl(BaseModel):
    url: str = Field(..., pattern=r"^(https?://|data:)")
    detail: Optional[Literal["auto", "low", "high"]] = None


class ImageUrlPart(BaseModel):
    type: Literal["image_url"]
    image_url: ImageUrl


class Message(BaseModel):
    """
    Chat message model.

    Attributes:
        role: Message role (system, user, assistant)
        content: Plain text, or a list of text/image parts
    """

    role: Literal["system", "user", "assistant"]
    content: Union[str, list[Union[TextPart, ImageUrlPart]]]

    def text(self) -> str:
        """Flatten content to plain text, dropping non-text parts."""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text for part in self.content if isinstance(part, TextPart))


class ChatRequest(BaseModel):
    """
    Canonical chat request.

    Unknown fields are kept and forwarded to the upstream as
    provider-specific options.

    Required Fields:
        provider: Registered provider identifier (exact match)
        model: Upstream model identifier
        messages: Ordered conversation, at least one message
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    provider: str = Field(..., min_length=1, description="Provider identifier")
    model: str = Field(..., min_length=1, description="Model identifier")
    messages: list[Message] = Field(..., description="Conversation messages")
    temperature: Optional[float] = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )
    max_tokens: Optional[int] = Field(
        default=None,
        gt=0,
        alias="maxTokens",
        description="Maximum tokens to generate",
    )
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Nucleus sampling")
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    stream: bool = Field(default=False, description="Enable streaming")
    tools: Optional[list[Any]] = Field(default=None, description="Tools for function calling")
    tool_choice: Optional[Union[Literal["auto", "none"], dict[str, Any]]] = None

    @field_validator("messages")
    @classmethod
    def messages_not_empty(cls, v: list[Message]) -> list[Message]:
        if not v:
            raise ValueError("At least one message is required")
        return v

    def extra_options(self) -> dict[str, Any]:
        """Provider-specific fields the client sent beyond the canonical ones."""
        return dict(self.model_extra or {})


# =============================================================================
# Embeddings / Rerank
# =============================================================================


class EmbeddingRequest(BaseModel):
    provider: str = Field(..., min_length=1, description="Provider identifier")
    model: str = Field(..., min_length=1, description="Embedding model identifier")
    input: Union[str, list[str]] = Field(..., description="Text or texts to embed")
    encoding_format: Optional[Literal["float", "base64"]] = None

    @field_validator("input")
    @classmethod
    def input_not_empty(cls, v: Union[str, list[str]]) -> Union[str, list[str]]:
        if isinstance(v, list) and not v:
            raise ValueError("input must contain at least one text")
        return v


class RerankRequest(BaseModel):
    provider: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1, description="Query to rank documents against")
    documents: list[str] = Field(..., min_length=1, description="Candidate passages")
    top_n: Optional[int] = Field(default=None, gt=0)
    return_documents: bool = True


# =============================================================================
# Vector Search
# =============================================================================

MAX_QUERY_LENGTH = 8000
MAX_RESULT_LIMIT = 100


class VectorSearchRequest(BaseModel):
    """
    Vector search request.

    Bounds are enforced here so an out-of-range request never spends an
    embedding call: query 1-8000 characters, threshold 0-1, limit 1-100.
    """

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., min_length=1, max_length=MAX_QUERY_LENGTH)
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    limit: int = Field(default=5, ge=1, le=MAX_RESULT_LIMIT)
    supabase_url: str = Field(..., alias="supabaseUrl", pattern=r"^https?://")
    supabase_key: str = Field(..., alias="supabaseKey", min_length=1)
    embedding_provider: Optional[str] = Field(
        default=None, alias="embeddingProvider", min_length=1
    )
    embedding_model: Optional[str] = Field(default=None, alias="embeddingModel", min_length=1)
