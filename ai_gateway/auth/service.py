"""Credential service: registration, login and token verification."""

from typing import Iterable, Optional

from ai_gateway.auth.store import UserStore
from ai_gateway.auth.tokens import TokenService
from ai_gateway.core.exceptions import GatewayValidationError, InvalidCredentialsError
from ai_gateway.models.domain import Principal
from ai_gateway.observability.logging import get_logger

logger = get_logger(__name__)


class CredentialService:
    """
    Combines a UserStore with a TokenService.

    Login failures never reveal whether the email exists: unknown email and
    wrong password both raise InvalidCredentialsError. Registrations whose
    email is listed in admin_emails (exact match) get the admin role.
    """

    def __init__(
        self,
        store: UserStore,
        tokens: TokenService,
        password_min_length: int = 8,
        admin_emails: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.password_min_length = password_min_length
        self.admin_emails = frozenset(admin_emails)

    async def register(
        self, email: str, password: str, name: Optional[str] = None
    ) -> tuple[Principal, str]:
        if len(password) < self.password_min_length:
            raise GatewayValidationError(
                f"Password must be at least {self.password_min_length} characters",
                details=[{"path": "password", "message": "too short"}],
            )
        role = "admin" if email in self.admin_emails else "user"
        record = await self.store.create(email, password, name, role=role)
        principal = record.to_principal()
        logger.info("user_registered", user_id=principal.id, role=principal.role)
        return principal, self.tokens.issue(principal)

    async def authenticate(self, email: str, password: str) -> tuple[Principal, str]:
        record = await self.store.verify_password(email, password)
        if record is None:
            logger.warning("login_failed")
            raise InvalidCredentialsError()
        principal = record.to_principal()
        logger.info("user_logged_in", user_id=principal.id)
        return principal, self.tokens.issue(principal)

    def verify(self, token: str) -> Principal:
        return self.tokens.verify(token)

    async def list_principals(self) -> list[Principal]:
        return [record.to_principal() for record in await self.store.list_users()]
