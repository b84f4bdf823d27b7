"""Credential and session token handling."""

from ai_gateway.auth.service import CredentialService
from ai_gateway.auth.store import InMemoryUserStore, UserStore
from ai_gateway.auth.tokens import TokenService

__all__ = ["CredentialService", "InMemoryUserStore", "TokenService", "UserStore"]
