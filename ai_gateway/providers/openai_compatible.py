"""
OpenAI-compatible chat adapter.

DeepSeek, xAI, OpenRouter, NVIDIA NIM and OpenAI all speak the OpenAI chat
completions wire format; they differ only in base URL, headers and which
optional operations they offer.
"""

import contextlib
from typing import Any, AsyncIterator

from ai_gateway.core.exceptions import ProviderError
from ai_gateway.models.requests import ChatRequest, EmbeddingRequest
from ai_gateway.providers.base import ProviderAdapter, extract_error_message

# Canonical fields forwarded when set; anything else the client sent is
# passed through as a provider-specific option
_CHAT_FIELDS = (
    "temperature",
    "max_tokens",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "tools",
    "tool_choice",
)


def build_chat_payload(request: ChatRequest, stream: bool) -> dict[str, Any]:
    payload: dict[str, Any] = dict(request.extra_options())
    payload["model"] = request.model
    payload["messages"] = [m.model_dump(exclude_none=True) for m in request.messages]
    for field in _CHAT_FIELDS:
        value = getattr(request, field)
        if value is not None:
            payload[field] = value
    payload["stream"] = stream
    return payload


class OpenAICompatibleAdapter(ProviderAdapter):
    """Adapter for upstreams exposing /chat/completions and /embeddings."""

    chat_path = "/chat/completions"
    embeddings_path = "/embeddings"

    async def chat(self, request: ChatRequest) -> dict[str, Any]:
        return await self._post_json(
            f"{self.base_url}{self.chat_path}",
            build_chat_payload(request, stream=False),
        )

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[dict[str, Any]]:
        events = self._iter_sse(
            f"{self.base_url}{self.chat_path}",
            build_chat_payload(request, stream=True),
        )
        async with contextlib.aclosing(events):
            async for event in events:
                if "error" in event:
                    raise ProviderError(
                        extract_error_message(event, f"{self.display_name} stream failed"),
                        provider=self.provider_id,
                        upstream_body=event,
                    )
                yield event

    async def embeddings(self, request: EmbeddingRequest) -> dict[str, Any]:
        if not self.capabilities.embeddings:
            return await super().embeddings(request)
        return await self._post_json(
            f"{self.base_url}{self.embeddings_path}",
            self._embeddings_payload(request),
        )

    def _embeddings_payload(self, request: EmbeddingRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {"model": request.model, "input": request.input}
        if request.encoding_format:
            payload["encoding_format"] = request.encoding_format
        return payload
