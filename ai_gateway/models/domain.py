"""Internal domain types shared by auth and the HTTP layer."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "admin"]


class Principal(BaseModel):
    """
    Authenticated identity carried inside a session token.

    Frozen: the role cannot change for the lifetime of a token.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: Optional[str] = None
    role: Role = "user"


@dataclass(frozen=True)
class UserRecord:
    """Stored user; the password exists only as a salted hash."""

    id: str
    email: str
    password_hash: str
    name: Optional[str] = None
    role: Role = "user"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_principal(self) -> Principal:
        return Principal(id=self.id, email=self.email, name=self.name, role=self.role)
