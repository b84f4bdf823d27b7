"""
Provider Router

Exact-match lookup from a client-supplied provider id to its adapter. The
registry is built once at startup and is read-only afterwards.
"""

from types import MappingProxyType
from typing import Iterator, Mapping, Optional

import httpx

from ai_gateway.core.config import Settings
from ai_gateway.core.exceptions import UnknownProviderError
from ai_gateway.observability.logging import get_logger
from ai_gateway.providers.anthropic import AnthropicAdapter
from ai_gateway.providers.base import ProviderAdapter
from ai_gateway.providers.deepseek import DeepSeekAdapter
from ai_gateway.providers.nvidia import NvidiaNimAdapter
from ai_gateway.providers.openai import OpenAIAdapter
from ai_gateway.providers.openrouter import OpenRouterAdapter
from ai_gateway.providers.xai import XAIAdapter

logger = get_logger(__name__)


class ProviderRouter:
    """
    Immutable registry of provider adapters.

    Lookups are exact string matches; an unknown id raises
    UnknownProviderError listing every registered id in registration order.

    Args:
        adapters: Mapping of provider id to adapter; copied on construction
    """

    def __init__(self, adapters: Mapping[str, ProviderAdapter]) -> None:
        self._adapters: Mapping[str, ProviderAdapter] = MappingProxyType(dict(adapters))

    @property
    def adapters(self) -> Mapping[str, ProviderAdapter]:
        return self._adapters

    @property
    def provider_ids(self) -> tuple[str, ...]:
        return tuple(self._adapters)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._adapters

    def __iter__(self) -> Iterator[str]:
        return iter(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    def get(self, provider_id: str) -> ProviderAdapter:
        adapter = self._adapters.get(provider_id)
        if adapter is None:
            raise UnknownProviderError(provider_id, self.provider_ids)
        return adapter

    def status(self) -> dict[str, str]:
        """Provider id -> "configured" or "missing_key"."""
        return {
            provider_id: "configured" if adapter.configured else "missing_key"
            for provider_id, adapter in self._adapters.items()
        }


def create_provider_router(
    settings: Settings,
    http_client: httpx.AsyncClient,
    adapters: Optional[Mapping[str, ProviderAdapter]] = None,
) -> ProviderRouter:
    """
    Build the router from settings.

    Every known provider is registered even without an API key; calls to an
    unconfigured provider fail with ProviderError before any network I/O,
    and /providers reports it as missing_key.
    """
    if adapters is not None:
        router = ProviderRouter(adapters)
    else:
        timeout = settings.provider_timeout_seconds
        router = ProviderRouter(
            {
                "xai": XAIAdapter(
                    http_client,
                    settings.xai_api_key.get_secret_value(),
                    settings.xai_base_url,
                    timeout,
                ),
                "anthropic": AnthropicAdapter(
                    http_client,
                    settings.anthropic_api_key.get_secret_value(),
                    settings.anthropic_base_url,
                    timeout,
                    api_version=settings.anthropic_version,
                ),
                "deepseek": DeepSeekAdapter(
                    http_client,
                    settings.deepseek_api_key.get_secret_value(),
                    settings.deepseek_base_url,
                    timeout,
                ),
                "openrouter": OpenRouterAdapter(
                    http_client,
                    settings.openrouter_api_key.get_secret_value(),
                    settings.openrouter_base_url,
                    timeout,
                    referer=settings.openrouter_referer or None,
                ),
                "nvidia_nim": NvidiaNimAdapter(
                    http_client,
                    settings.nvidia_nim_api_key.get_secret_value(),
                    settings.nvidia_nim_base_url,
                    timeout,
                    rerank_url=settings.nvidia_nim_rerank_url,
                ),
                "openai": OpenAIAdapter(
                    http_client,
                    settings.openai_api_key.get_secret_value(),
                    settings.openai_base_url,
                    timeout,
                ),
            }
        )

    status = router.status()
    logger.info(
        "provider_router_initialized",
        providers=list(router.provider_ids),
        configured=[pid for pid, state in status.items() if state == "configured"],
    )
    return router
