"""
Tests for the error taxonomy.

Every failure kind maps to a fixed status, type and code, and serializes
into the {type, message, code, details?, traceId} envelope body.
"""

import pytest

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


class TestStatusMapping:
    """Each class carries its HTTP status and type name."""

    @pytest.mark.parametrize(
        "exc, status, error_type",
        [
            (GatewayValidationError(), 400, "ValidationError"),
            (UnknownProviderError("x", ["deepseek"]), 400, "ValidationError"),
            (AuthenticationError(), 401, "AuthenticationError"),
            (TokenExpiredError(), 401, "AuthenticationError"),
            (AuthorizationError(), 403, "AuthorizationError"),
            (NotFoundError(), 404, "NotFoundError"),
            (ConflictError(), 409, "ConflictError"),
            (RateLimitError(), 429, "RateLimitError"),
            (GatewayNotImplementedError(), 501, "NotImplementedError"),
            (ProviderError("boom", provider="xai"), 502, "ProviderError"),
            (InternalError(), 500, "InternalError"),
        ],
    )
    def test_status_and_type(self, exc: GatewayError, status: int, error_type: str) -> None:
        assert exc.status_code == status
        assert exc.error_type == error_type

    def test_auth_failures_are_told_apart_by_code(self) -> None:
        """Expired and malformed tokens share 401 but carry distinct codes."""
        assert TokenExpiredError().code == ErrorCode.TOKEN_EXPIRED.value
        assert TokenMalformedError().code == ErrorCode.INVALID_TOKEN.value
        assert InvalidCredentialsError().code == ErrorCode.INVALID_CREDENTIALS.value

    def test_error_code_enum_is_normalized_to_string(self) -> None:
        exc = NotFoundError("missing", code=ErrorCode.PROVIDER_NOT_FOUND)

        assert exc.code == "PROVIDER_NOT_FOUND"


class TestEnvelopeBody:
    """to_dict() output."""

    def test_minimal_body(self) -> None:
        body = InternalError().to_dict("req-1")

        assert body == {
            "type": "InternalError",
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
            "traceId": "req-1",
        }

    def test_unknown_provider_lists_registered_ids(self) -> None:
        """The caller can correct the request from the details alone."""
        exc = UnknownProviderError("DeepSeek", ["xai", "deepseek"])
        body = exc.to_dict("req-2")

        assert body["code"] == "UNKNOWN_PROVIDER"
        assert body["message"] == "Unknown provider: DeepSeek"
        assert body["details"] == {
            "provider": "DeepSeek",
            "availableProviders": ["xai", "deepseek"],
        }

    def test_rate_limit_details(self) -> None:
        exc = RateLimitError("slow down", retry_after=42, limit=20, route_class="chat")

        assert exc.to_dict()["details"] == {"retryAfter": 42, "limit": 20, "routeClass": "chat"}

    def test_provider_error_preserves_upstream(self) -> None:
        exc = ProviderError(
            "Rate limited upstream",
            provider="deepseek",
            upstream_status=429,
            upstream_body={"error": {"message": "Rate limited upstream"}},
        )

        assert exc.to_dict()["details"] == {
            "provider": "deepseek",
            "upstreamStatus": 429,
            "upstreamBody": {"error": {"message": "Rate limited upstream"}},
        }

    def test_provider_error_omits_absent_upstream_fields(self) -> None:
        exc = ProviderError("API key not configured", provider="xai")

        assert exc.to_dict()["details"] == {"provider": "xai"}
