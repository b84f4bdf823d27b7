"""
Session token issuing and verification.

Tokens are HMAC-signed JWTs carrying the principal's id, email, optional
name and role. The signing key is process-wide configuration.
"""

import time
from typing import Any, Callable

import jwt

from ai_gateway.core.exceptions import TokenExpiredError, TokenMalformedError
from ai_gateway.models.domain import Principal

_ROLES = ("user", "admin")


class TokenService:
    """
    Issue and verify signed session tokens.

    Args:
        secret: HMAC signing key
        expiry_seconds: Token lifetime
        algorithm: JWT algorithm (HS256 by default)
        clock: Returns the current UNIX time; injectable for tests
    """

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 86400,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty secret")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self.expiry_seconds = expiry_seconds

    @property
    def expires_in(self) -> str:
        """Lifetime in the short form reported to clients ("24h", "30m", "45s")."""
        seconds = self.expiry_seconds
        if seconds % 3600 == 0:
            return f"{seconds // 3600}h"
        if seconds % 60 == 0:
            return f"{seconds // 60}m"
        return f"{seconds}s"

    def issue(self, principal: Principal) -> str:
        now = int(self._clock())
        payload: dict[str, Any] = {
            "id": principal.id,
            "email": principal.email,
            "role": principal.role,
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        if principal.name:
            payload["name"] = principal.name
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        """
        Verify a token and recover its principal.

        The signature is checked before expiry, so a tampered token is always
        reported as malformed even when it is also past its expiry.

        Raises:
            TokenExpiredError: signature valid but token is expired
            TokenMalformedError: bad signature, bad encoding or unusable claims
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            raise TokenMalformedError() from e

        user_id = claims.get("id")
        email = claims.get("email")
        role = claims.get("role")
        name = claims.get("name")
        if not isinstance(user_id, str) or not isinstance(email, str) or role not in _ROLES:
            raise TokenMalformedError("Token claims are incomplete")
        if name is not None and not isinstance(name, str):
            raise TokenMalformedError("Token claims are incomplete")
        return Principal(id=user_id, email=email, name=name, role=role)
