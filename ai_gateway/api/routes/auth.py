"""
Auth Router

POST /auth/register and POST /auth/login. Both share the strict
authentication rate limit, keyed by client address.
"""

from fastapi import APIRouter, Depends, status

from ai_gateway.api.deps import get_credential_service, rate_limit_by_address
from ai_gateway.api.middleware.rate_limit import RouteClass
from ai_gateway.auth.service import CredentialService
from ai_gateway.models.requests import LoginRequest, RegisterRequest
from ai_gateway.models.responses import AuthResponse

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
    dependencies=[Depends(rate_limit_by_address(RouteClass.AUTH))],
)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    credentials: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    """Create an account and return a session token (409 if the email exists)."""
    principal, token = await credentials.register(body.email, body.password, body.name)
    return AuthResponse(user=principal, token=token, expiresIn=credentials.tokens.expires_in)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    credentials: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    principal, token = await credentials.authenticate(body.email, body.password)
    return AuthResponse(user=principal, token=token, expiresIn=credentials.tokens.expires_in)
