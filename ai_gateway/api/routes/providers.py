"""
Providers Router

Read-only catalog of registered providers with their configuration status.
"""

from typing import Any

from fastapi import APIRouter, Depends

from ai_gateway.api.deps import get_provider_router, rate_limit_by_principal
from ai_gateway.api.middleware.rate_limit import RouteClass
from ai_gateway.core.exceptions import ErrorCode, NotFoundError
from ai_gateway.providers.base import ProviderAdapter
from ai_gateway.providers.catalog import CATALOG, ProviderInfo
from ai_gateway.providers.router import ProviderRouter

router = APIRouter(
    prefix="/providers",
    tags=["Providers"],
    dependencies=[Depends(rate_limit_by_principal(RouteClass.DEFAULT))],
)


def _describe(adapter: ProviderAdapter) -> dict[str, Any]:
    info = CATALOG.get(adapter.provider_id) or ProviderInfo(
        id=adapter.provider_id, name=adapter.display_name
    )
    data = info.to_dict()
    data["configured"] = adapter.configured
    data["status"] = "configured" if adapter.configured else "missing_key"
    data["baseUrl"] = adapter.base_url
    data["capabilities"] = adapter.capabilities.as_list()
    return data


@router.get("")
async def list_providers(
    providers: ProviderRouter = Depends(get_provider_router),
) -> dict[str, Any]:
    entries = [_describe(adapter) for adapter in providers.adapters.values()]
    return {"providers": entries, "total": len(entries)}


@router.get("/{provider_id}")
async def get_provider(
    provider_id: str,
    providers: ProviderRouter = Depends(get_provider_router),
) -> dict[str, Any]:
    adapter = providers.adapters.get(provider_id)
    if adapter is None:
        raise NotFoundError(
            f"Provider not found: {provider_id}",
            code=ErrorCode.PROVIDER_NOT_FOUND,
            details={"availableProviders": list(providers.provider_ids)},
        )
    return _describe(adapter)
