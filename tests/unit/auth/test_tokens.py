"""
Tests for session token issuing and verification.
"""

import time

import jwt
import pytest

from ai_gateway.auth.tokens import TokenService
from ai_gateway.core.exceptions import TokenExpiredError, TokenMalformedError
from ai_gateway.models.domain import Principal

SECRET = "unit-test-secret-with-enough-length-for-hs256"


@pytest.fixture
def principal() -> Principal:
    return Principal(id="u-1", email="alice@acme.io", name="Alice", role="user")


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(SECRET, expiry_seconds=3600)


class TestIssueAndVerify:
    """Round trip of the principal through a signed token."""

    def test_verify_recovers_principal(self, tokens: TokenService, principal: Principal) -> None:
        assert tokens.verify(tokens.issue(principal)) == principal

    def test_name_is_optional(self, tokens: TokenService) -> None:
        anonymous = Principal(id="u-2", email="bob@acme.io")

        recovered = tokens.verify(tokens.issue(anonymous))

        assert recovered.name is None
        assert recovered.role == "user"

    def test_expiry_claim_matches_lifetime(self, principal: Principal) -> None:
        service = TokenService(SECRET, expiry_seconds=3600, clock=lambda: 1_000_000.0)

        claims = jwt.decode(
            service.issue(principal),
            SECRET,
            algorithms=["HS256"],
            options={"verify_exp": False},
        )

        assert claims["iat"] == 1_000_000
        assert claims["exp"] == 1_003_600

    @pytest.mark.parametrize(
        "seconds, expected",
        [(86400, "24h"), (1800, "30m"), (45, "45s"), (5400, "90m")],
    )
    def test_expires_in_formatting(self, seconds: int, expected: str) -> None:
        assert TokenService(SECRET, expiry_seconds=seconds).expires_in == expected

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService("")


class TestVerificationFailures:
    """Expired and malformed tokens raise distinct errors."""

    def test_expired_token(self, principal: Principal) -> None:
        issued_long_ago = TokenService(
            SECRET, expiry_seconds=60, clock=lambda: time.time() - 3600
        )
        token = issued_long_ago.issue(principal)

        with pytest.raises(TokenExpiredError):
            TokenService(SECRET).verify(token)

    def test_wrong_signature(self, tokens: TokenService, principal: Principal) -> None:
        forged = TokenService("another-secret-that-is-long-enough-too").issue(principal)

        with pytest.raises(TokenMalformedError):
            tokens.verify(forged)

    def test_tampered_and_expired_is_reported_as_malformed(self, principal: Principal) -> None:
        """The signature is checked before the expiry."""
        forged = TokenService(
            "another-secret-that-is-long-enough-too",
            expiry_seconds=60,
            clock=lambda: time.time() - 3600,
        ).issue(principal)

        with pytest.raises(TokenMalformedError):
            TokenService(SECRET).verify(forged)

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", "not-a-jwt-at-all"])
    def test_garbage(self, tokens: TokenService, token: str) -> None:
        with pytest.raises(TokenMalformedError):
            tokens.verify(token)

    def test_missing_claims(self, tokens: TokenService) -> None:
        now = int(time.time())
        token = jwt.encode({"iat": now, "exp": now + 60, "email": "x@acme.io"}, SECRET)

        with pytest.raises(TokenMalformedError):
            tokens.verify(token)

    def test_unknown_role(self, tokens: TokenService) -> None:
        now = int(time.time())
        token = jwt.encode(
            {"id": "u-1", "email": "x@acme.io", "role": "root", "iat": now, "exp": now + 60},
            SECRET,
        )

        with pytest.raises(TokenMalformedError):
            tokens.verify(token)

    def test_missing_expiry(self, tokens: TokenService) -> None:
        token = jwt.encode(
            {"id": "u-1", "email": "x@acme.io", "role": "user", "iat": int(time.time())},
            SECRET,
        )

        with pytest.raises(TokenMalformedError):
            tokens.verify(token)
