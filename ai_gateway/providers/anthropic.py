"""
Anthropic adapter.

Translates the canonical (OpenAI-style) chat request to the Anthropic
Messages API and maps responses and stream events back, so callers see the
same chat.completion / chat.completion.chunk shapes as for every other
provider.
"""

import contextlib
import time
from typing import Any, AsyncIterator, Optional

import httpx

from ai_gateway.core.exceptions import ProviderError
from ai_gateway.models.requests import ChatRequest, ImageUrlPart, Message
from ai_gateway.models.responses import Usage
from ai_gateway.providers.base import (
    ProviderAdapter,
    ProviderCapabilities,
    extract_error_message,
)

DEFAULT_MAX_TOKENS = 4096

_FINISH_REASONS = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
}


def _content_blocks(message: Message) -> Any:
    if isinstance(message.content, str):
        return message.content
    blocks: list[dict[str, Any]] = []
    for part in message.content:
        if isinstance(part, ImageUrlPart):
            blocks.append(
                {"type": "image", "source": {"type": "url", "url": part.image_url.url}}
            )
        else:
            blocks.append({"type": "text", "text": part.text})
    return blocks


def build_messages_payload(request: ChatRequest, stream: bool) -> dict[str, Any]:
    """
    Build a Messages API body.

    System messages are lifted into the top-level ``system`` field; the rest
    keep their order.
    """
    system_texts = [m.text() for m in request.messages if m.role == "system"]
    payload: dict[str, Any] = {
        "model": request.model,
        "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        "messages": [
            {"role": m.role, "content": _content_blocks(m)}
            for m in request.messages
            if m.role != "system"
        ],
        "stream": stream,
    }
    if system_texts:
        payload["system"] = "\n\n".join(system_texts)
    if request.temperature is not None:
        payload["temperature"] = request.temperature
    if request.top_p is not None:
        payload["top_p"] = request.top_p
    return payload


def _finish_reason(stop_reason: Optional[str]) -> Optional[str]:
    if stop_reason is None:
        return None
    return _FINISH_REASONS.get(stop_reason, stop_reason)


class AnthropicAdapter(ProviderAdapter):
    provider_id = "anthropic"
    display_name = "Anthropic"
    capabilities = ProviderCapabilities(chat=True, streaming=True)

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 60.0,
        api_version: str = "2023-06-01",
    ) -> None:
        super().__init__(http_client, api_key, base_url, timeout_seconds)
        self._api_version = api_version

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self._api_version,
            "Content-Type": "application/json",
        }

    async def chat(self, request: ChatRequest) -> dict[str, Any]:
        data = await self._post_json(
            f"{self.base_url}/messages",
            build_messages_payload(request, stream=False),
        )

        text = "".join(
            block.get("text", "")
            for block in data.get("content") or []
            if block.get("type") == "text"
        )
        usage = data.get("usage") or {}
        return {
            "id": data.get("id"),
            "object": "chat.completion",
            "created": int(time.time()),
            "model": data.get("model", request.model),
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": text},
                    "finish_reason": _finish_reason(data.get("stop_reason")) or "stop",
                }
            ],
            "usage": Usage.from_counts(
                int(usage.get("input_tokens", 0)),
                int(usage.get("output_tokens", 0)),
            ).model_dump(),
        }

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[dict[str, Any]]:
        message_id: Optional[str] = None
        model = request.model
        created = int(time.time())
        input_tokens = 0

        def chunk(delta: dict[str, Any], finish_reason: Optional[str] = None) -> dict[str, Any]:
            return {
                "id": message_id,
                "object": "chat.completion.chunk",
                "created": created,
                "model": model,
                "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
            }

        events = self._iter_sse(
            f"{self.base_url}/messages",
            build_messages_payload(request, stream=True),
            require_done=False,
        )
        async with contextlib.aclosing(events):
            async for event in events:
                event_type = event.get("type")
                if event_type == "message_start":
                    message = event.get("message") or {}
                    message_id = message.get("id")
                    model = message.get("model", model)
                    input_tokens = int((message.get("usage") or {}).get("input_tokens", 0))
                elif event_type == "content_block_delta":
                    delta = event.get("delta") or {}
                    if delta.get("type") == "text_delta":
                        yield chunk({"content": delta.get("text", "")})
                elif event_type == "message_delta":
                    output_tokens = int((event.get("usage") or {}).get("output_tokens", 0))
                    stop_reason = (event.get("delta") or {}).get("stop_reason")
                    final = chunk({}, _finish_reason(stop_reason))
                    final["usage"] = Usage.from_counts(input_tokens, output_tokens).model_dump()
                    yield final
                elif event_type == "message_stop":
                    return
                elif event_type == "error":
                    raise ProviderError(
                        extract_error_message(event, "Anthropic stream failed"),
                        provider=self.provider_id,
                        upstream_body=event,
                    )

        raise ProviderError(
            "Anthropic stream ended before completion",
            provider=self.provider_id,
        )
