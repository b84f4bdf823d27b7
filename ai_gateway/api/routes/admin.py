"""
Admin Router

Operator endpoints. Every route requires a token with the admin role and
counts against the default rate limit.
"""

from typing import Any

from fastapi import APIRouter, Depends

from ai_gateway.api.deps import get_credential_service, rate_limit_by_principal, require_admin
from ai_gateway.api.middleware.rate_limit import RouteClass
from ai_gateway.auth.service import CredentialService

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[
        Depends(require_admin),
        Depends(rate_limit_by_principal(RouteClass.DEFAULT)),
    ],
)


@router.get("/users")
async def list_users(
    credentials: CredentialService = Depends(get_credential_service),
) -> dict[str, Any]:
    users = [principal.model_dump() for principal in await credentials.list_principals()]
    return {"users": users, "total": len(users)}
