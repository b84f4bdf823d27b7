"""
Error taxonomy for AI Gateway.

This module provides the closed set of failures any component may report to
a caller. Every exception inherits from GatewayError and carries a fixed HTTP
status, an error type name and a machine-readable code. The boundary handler
in ai_gateway.api.errors is the only place these are turned into JSON.
"""

from enum import Enum
from typing import Any, Optional, Sequence


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(str, Enum):
    """
    Machine-readable error codes.

    These codes provide a consistent way to identify error conditions
    across the API and in logging.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    MISSING_TOKEN = "MISSING_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    USER_EXISTS = "USER_EXISTS"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class GatewayError(Exception):
    """
    Base exception for all AI Gateway errors.

    Subclasses fix ``status_code`` and ``error_type`` at class level so a
    failure kind always maps to the same HTTP status.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error code.
        details: Optional structured context for the caller.
    """

    status_code: int = 500
    error_type: str = "InternalError"
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code (defaults per class).
            details: Additional structured context.
        """
        self.message = message or self.default_message
        super().__init__(self.message)
        if isinstance(code, ErrorCode):
            code = code.value
        self.code = code or self.default_code.value
        self.details = details

    def to_dict(self, trace_id: Optional[str] = None) -> dict[str, Any]:
        """Serialize to the error envelope body (without the outer key)."""
        body: dict[str, Any] = {
            "type": self.error_type,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        body["traceId"] = trace_id
        return body


# =============================================================================
# 400 Validation
# =============================================================================


class GatewayValidationError(GatewayError):
    """Malformed body or out-of-range field, detected before any network call."""

    status_code = 400
    error_type = "ValidationError"
    default_code = ErrorCode.VALIDATION_ERROR
    default_message = "Request validation failed"


class UnknownProviderError(GatewayValidationError):
    """
    Provider id did not match any registered adapter.

    The details always enumerate the registered provider identifiers so the
    caller can correct the request.
    """

    default_code = ErrorCode.UNKNOWN_PROVIDER

    def __init__(self, provider: str, available: Sequence[str]) -> None:
        super().__init__(
            f"Unknown provider: {provider}",
            details={"provider": provider, "availableProviders": list(available)},
        )
        self.provider = provider
        self.available = list(available)


# =============================================================================
# 401 / 403 Authentication and Authorization
# =============================================================================


class AuthenticationError(GatewayError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    error_type = "AuthenticationError"
    default_code = ErrorCode.AUTHENTICATION_ERROR
    default_message = "Authentication required"


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but the token is past its expiry."""

    default_code = ErrorCode.TOKEN_EXPIRED
    default_message = "Token has expired"


class TokenMalformedError(AuthenticationError):
    """Token is tampered, truncated or carries unusable claims."""

    default_code = ErrorCode.INVALID_TOKEN
    default_message = "Invalid token"


class InvalidCredentialsError(AuthenticationError):
    """
    Login failed.

    Raised for both unknown email and wrong password; the two cases are
    indistinguishable to the caller.
    """

    default_code = ErrorCode.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class AuthorizationError(GatewayError):
    status_code = 403
    error_type = "AuthorizationError"
    default_code = ErrorCode.AUTHORIZATION_ERROR
    default_message = "Insufficient permissions"


# =============================================================================
# 404 / 409
# =============================================================================


class NotFoundError(GatewayError):
    status_code = 404
    error_type = "NotFoundError"
    default_code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(GatewayError):
    status_code = 409
    error_type = "ConflictError"
    default_code = ErrorCode.USER_EXISTS
    default_message = "Resource already exists"


# =============================================================================
# 429 Rate Limiting
# =============================================================================


class RateLimitError(GatewayError):
    """
    Request quota for the current window is exhausted.

    Attributes:
        retry_after: Seconds until the window resets.
        limit: Maximum requests allowed per window.
        route_class: Name of the rate-limit policy that rejected the request.
    """

    status_code = 429
    error_type = "RateLimitError"
    default_code = ErrorCode.RATE_LIMIT_ERROR
    default_message = "Too many requests, please try again later"

    def __init__(
        self,
        message: Optional[str] = None,
        retry_after: int = 1,
        limit: int = 0,
        route_class: str = "default",
    ) -> None:
        super().__init__(
            message,
            details={"retryAfter": retry_after, "limit": limit, "routeClass": route_class},
        )
        self.retry_after = retry_after
        self.limit = limit
        self.route_class = route_class


# =============================================================================
# 502 Provider
# =============================================================================


class ProviderError(GatewayError):
    """
    Exception for upstream provider failures.

    Raised on any non-2xx upstream response, transport failure or malformed
    stream. Upstream failures are never retried by the gateway; the status
    and body are preserved for the caller.

    Attributes:
        provider: Identifier of the upstream (e.g., "deepseek", "supabase").
        upstream_status: HTTP status returned by the upstream, if any.
        upstream_body: Parsed JSON or raw text of the upstream error body.
    """

    status_code = 502
    error_type = "ProviderError"
    default_code = ErrorCode.PROVIDER_ERROR
    default_message = "Upstream provider request failed"

    def __init__(
        self,
        message: str,
        provider: str,
        upstream_status: Optional[int] = None,
        upstream_body: Any = None,
    ) -> None:
        details: dict[str, Any] = {"provider": provider}
        if upstream_status is not None:
            details["upstreamStatus"] = upstream_status
        if upstream_body is not None:
            details["upstreamBody"] = upstream_body
        super().__init__(message, details=details)
        self.provider = provider
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


# =============================================================================
# 501 / 500
# =============================================================================


class GatewayNotImplementedError(GatewayError):
    status_code = 501
    error_type = "NotImplementedError"
    default_code = ErrorCode.NOT_IMPLEMENTED
    default_message = "Not implemented"


class InternalError(GatewayError):
    """Fallback for unrecognized failures; never leaks internal detail."""

    status_code = 500
    error_type = "InternalError"
    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal server error"
