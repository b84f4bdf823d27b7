"""OpenRouter adapter."""

from typing import Optional

import httpx

from ai_gateway.providers.base import ProviderCapabilities
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter


class OpenRouterAdapter(OpenAICompatibleAdapter):
    """
    OpenRouter proxies many model vendors behind one OpenAI-style API.

    Sends the optional attribution headers OpenRouter uses for its
    leaderboards (HTTP-Referer, X-Title).
    """

    provider_id = "openrouter"
    display_name = "OpenRouter"
    capabilities = ProviderCapabilities(chat=True, streaming=True, embeddings=True)

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 60.0,
        referer: Optional[str] = None,
        title: str = "AI Gateway",
    ) -> None:
        super().__init__(http_client, api_key, base_url, timeout_seconds)
        self._referer = referer
        self._title = title

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        headers["X-Title"] = self._title
        return headers
