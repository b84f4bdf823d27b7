"""
User storage.

UserStore is the capability the credential service depends on; the
in-memory implementation stands in for a persistent store.
"""

import asyncio
import uuid
from typing import Optional, Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ai_gateway.core.exceptions import ConflictError
from ai_gateway.models.domain import Role, UserRecord
from ai_gateway.observability.logging import get_logger

logger = get_logger(__name__)


class UserStore(Protocol):
    """Minimal user persistence contract."""

    async def create(
        self, email: str, password: str, name: Optional[str] = None, role: Role = "user"
    ) -> UserRecord:
        """Insert a user if the email is absent; raise ConflictError otherwise."""
        ...

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def verify_password(self, email: str, password: str) -> Optional[UserRecord]:
        """Return the user when the password matches, None for any mismatch."""
        ...

    async def list_users(self) -> list[UserRecord]:
        """All users in registration order."""
        ...


class InMemoryUserStore:
    """
    Process-local user table keyed by exact (case-sensitive) email.

    Hashing runs in a worker thread. The final existence check and the
    insert happen with no suspension point between them, so two concurrent
    registrations for one email cannot both succeed.
    """

    def __init__(self, hasher: Optional[PasswordHasher] = None) -> None:
        self._hasher = hasher or PasswordHasher()
        self._users: dict[str, UserRecord] = {}
        # Verified against for unknown emails so both failure paths cost a hash check
        self._dummy_hash = self._hasher.hash(uuid.uuid4().hex)

    def __len__(self) -> int:
        return len(self._users)

    async def create(
        self, email: str, password: str, name: Optional[str] = None, role: Role = "user"
    ) -> UserRecord:
        if email in self._users:
            raise ConflictError("User already exists")

        password_hash = await asyncio.to_thread(self._hasher.hash, password)

        if email in self._users:
            raise ConflictError("User already exists")
        record = UserRecord(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=password_hash,
            name=name,
            role=role,
        )
        self._users[email] = record
        logger.info("user_created", user_id=record.id, role=role)
        return record

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email)

    async def list_users(self) -> list[UserRecord]:
        return list(self._users.values())

    async def verify_password(self, email: str, password: str) -> Optional[UserRecord]:
        record = self._users.get(email)
        stored_hash = record.password_hash if record else self._dummy_hash
        matches = await asyncio.to_thread(self._check, stored_hash, password)
        if record is None or not matches:
            return None
        return record

    def _check(self, stored_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(stored_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False
