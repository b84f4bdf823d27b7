"""
Tests for the Anthropic adapter.

The adapter translates the canonical chat request into the Messages API and
maps responses and stream events back into chat.completion shapes.
"""

import json
from typing import Any, AsyncIterator

import httpx
import pytest

from ai_gateway.core.exceptions import ProviderError
from ai_gateway.models.requests import ChatRequest
from ai_gateway.providers.anthropic import AnthropicAdapter, build_messages_payload
from fakes import ANTHROPIC_MESSAGES_URL, MockUpstream


def chat_request(**overrides) -> ChatRequest:
    data: dict[str, Any] = {
        "provider": "anthropic",
        "model": "claude-sonnet",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Say hello"},
        ],
    }
    data.update(overrides)
    return ChatRequest(**data)


def anthropic_sse(events: list[dict[str, Any]]) -> str:
    """Anthropic streams carry an event: line before every data: line."""
    return "".join(f"event: {e['type']}\ndata: {json.dumps(e)}\n\n" for e in events)


STREAM_EVENTS = [
    {
        "type": "message_start",
        "message": {"id": "msg_1", "model": "claude-sonnet", "usage": {"input_tokens": 9}},
    },
    {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
    {"type": "ping"},
    {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hel"}},
    {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "lo"}},
    {"type": "content_block_stop", "index": 0},
    {
        "type": "message_delta",
        "delta": {"stop_reason": "end_turn"},
        "usage": {"output_tokens": 2},
    },
    {"type": "message_stop"},
]


@pytest.fixture
def adapter(upstream: MockUpstream) -> AnthropicAdapter:
    return AnthropicAdapter(upstream.client(), "sk-ant", "https://api.anthropic.com/v1")


class TestBuildMessagesPayload:
    def test_system_messages_are_lifted(self) -> None:
        payload = build_messages_payload(chat_request(), stream=False)

        assert payload["system"] == "Be brief."
        assert payload["messages"] == [{"role": "user", "content": "Say hello"}]

    def test_max_tokens_defaults(self) -> None:
        assert build_messages_payload(chat_request(), stream=False)["max_tokens"] == 4096
        assert (
            build_messages_payload(chat_request(maxTokens=64), stream=False)["max_tokens"] == 64
        )

    def test_image_parts_become_url_sources(self) -> None:
        request = chat_request(
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "What is this?"},
                        {"type": "image_url", "image_url": {"url": "https://img.acme.io/a.png"}},
                    ],
                }
            ]
        )

        content = build_messages_payload(request, stream=False)["messages"][0]["content"]

        assert content == [
            {"type": "text", "text": "What is this?"},
            {"type": "image", "source": {"type": "url", "url": "https://img.acme.io/a.png"}},
        ]


class TestAnthropicChat:
    @pytest.mark.asyncio
    async def test_maps_to_completion_shape(
        self, adapter: AnthropicAdapter, upstream: MockUpstream
    ) -> None:
        upstream.json(
            ANTHROPIC_MESSAGES_URL,
            {
                "id": "msg_1",
                "type": "message",
                "model": "claude-sonnet",
                "content": [{"type": "text", "text": "Hello!"}],
                "stop_reason": "end_turn",
                "usage": {"input_tokens": 10, "output_tokens": 4},
            },
        )

        data = await adapter.chat(chat_request())

        assert data["object"] == "chat.completion"
        assert data["choices"][0]["message"] == {"role": "assistant", "content": "Hello!"}
        assert data["choices"][0]["finish_reason"] == "stop"
        assert data["usage"] == {"prompt_tokens": 10, "completion_tokens": 4, "total_tokens": 14}

        sent = upstream.requests[0]
        assert sent.headers["x-api-key"] == "sk-ant"
        assert sent.headers["anthropic-version"] == "2023-06-01"
        assert "Authorization" not in sent.headers

    @pytest.mark.asyncio
    async def test_error_body_preserved(
        self, adapter: AnthropicAdapter, upstream: MockUpstream
    ) -> None:
        upstream.json(
            ANTHROPIC_MESSAGES_URL,
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}},
            status=529,
        )

        with pytest.raises(ProviderError) as exc_info:
            await adapter.chat(chat_request())

        assert exc_info.value.message == "Overloaded"
        assert exc_info.value.upstream_status == 529


class TestAnthropicStream:
    @pytest.mark.asyncio
    async def test_text_deltas_then_final_usage(
        self, adapter: AnthropicAdapter, upstream: MockUpstream
    ) -> None:
        upstream.text(ANTHROPIC_MESSAGES_URL, anthropic_sse(STREAM_EVENTS))

        chunks = [c async for c in adapter.stream_chat(chat_request(stream=True))]

        contents = [c["choices"][0]["delta"].get("content") for c in chunks]
        assert contents == ["Hel", "lo", None]
        assert all(c["object"] == "chat.completion.chunk" for c in chunks)
        assert chunks[0]["id"] == "msg_1"

        final = chunks[-1]
        assert final["choices"][0]["finish_reason"] == "stop"
        assert final["usage"] == {"prompt_tokens": 9, "completion_tokens": 2, "total_tokens": 11}

    @pytest.mark.asyncio
    async def test_stream_without_message_stop_is_an_error(
        self, adapter: AnthropicAdapter, upstream: MockUpstream
    ) -> None:
        upstream.text(ANTHROPIC_MESSAGES_URL, anthropic_sse(STREAM_EVENTS[:4]))

        with pytest.raises(ProviderError, match="ended before completion"):
            [c async for c in adapter.stream_chat(chat_request(stream=True))]

    @pytest.mark.asyncio
    async def test_error_event(self, adapter: AnthropicAdapter, upstream: MockUpstream) -> None:
        events = STREAM_EVENTS[:4] + [
            {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}
        ]
        upstream.text(ANTHROPIC_MESSAGES_URL, anthropic_sse(events))

        with pytest.raises(ProviderError, match="Overloaded"):
            [c async for c in adapter.stream_chat(chat_request(stream=True))]

    @pytest.mark.asyncio
    async def test_message_stop_closes_upstream_response(self, upstream: MockUpstream) -> None:
        """Returning on message_stop releases the connection without draining the body."""

        class TrackedStream(httpx.AsyncByteStream):
            closed = False

            async def __aiter__(self) -> AsyncIterator[bytes]:
                yield anthropic_sse(STREAM_EVENTS).encode()
                yield b": trailing keep-alive\n\n"

            async def aclose(self) -> None:
                self.closed = True

        body = TrackedStream()
        upstream.route(
            ANTHROPIC_MESSAGES_URL,
            lambda request: httpx.Response(
                200, stream=body, headers={"Content-Type": "text/event-stream"}
            ),
        )
        adapter = AnthropicAdapter(upstream.client(), "sk-ant", "https://api.anthropic.com/v1")

        chunks = [c async for c in adapter.stream_chat(chat_request(stream=True))]

        assert chunks[-1]["choices"][0]["finish_reason"] == "stop"
        assert body.closed is True
