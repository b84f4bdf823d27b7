"""
Integration tests for POST /chat, streaming and non-streaming, against a
scripted upstream.
"""

import json

import pytest
from fastapi.testclient import TestClient

from fakes import ANTHROPIC_MESSAGES_URL, DEEPSEEK_CHAT_URL, MockUpstream, chunk, completion

pytestmark = pytest.mark.integration


def chat_body(**overrides) -> dict:
    body = {
        "provider": "deepseek",
        "model": "deepseek-chat",
        "messages": [{"role": "user", "content": "Say hello"}],
    }
    body.update(overrides)
    return body


def sse_events(text: str) -> list[str]:
    return [frame[len("data: "):] for frame in text.split("\n\n") if frame.startswith("data: ")]


class TestNonStreamingChat:
    def test_completion_with_gateway_metadata(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.json(DEEPSEEK_CHAT_URL, completion())

        response = client.post(
            "/chat",
            json=chat_body(),
            headers={**auth_headers, "X-Request-ID": "req-chat-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["choices"][0]["message"]["content"] == "Hello there"
        assert body["usage"]["total_tokens"] == 15
        assert body["gateway"]["provider"] == "deepseek"
        assert body["gateway"]["request_id"] == "req-chat-1"
        assert response.headers["X-RateLimit-Limit"] == "20"
        assert response.headers["X-RateLimit-Remaining"] == "19"

        forwarded = MockUpstream.body(upstream.calls_to(DEEPSEEK_CHAT_URL)[0])
        assert forwarded["model"] == "deepseek-chat"
        assert "provider" not in forwarded

    def test_unknown_provider_lists_ids_and_makes_no_call(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        response = client.post("/chat", json=chat_body(provider="DeepSeek"), headers=auth_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "UNKNOWN_PROVIDER"
        assert error["details"]["availableProviders"] == [
            "xai",
            "anthropic",
            "deepseek",
            "openrouter",
            "nvidia_nim",
            "openai",
        ]
        assert upstream.requests == []

    def test_empty_messages_rejected(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        response = client.post("/chat", json=chat_body(messages=[]), headers=auth_headers)

        assert response.status_code == 400
        assert upstream.requests == []

    def test_upstream_error_becomes_502(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.json(
            DEEPSEEK_CHAT_URL, {"error": {"message": "Rate limited upstream"}}, status=429
        )

        response = client.post("/chat", json=chat_body(), headers=auth_headers)

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["type"] == "ProviderError"
        assert error["message"] == "Rate limited upstream"
        assert error["details"]["upstreamStatus"] == 429
        assert len(upstream.calls_to(DEEPSEEK_CHAT_URL)) == 1

    def test_anthropic_translation(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.json(
            ANTHROPIC_MESSAGES_URL,
            {
                "id": "msg_1",
                "model": "claude-sonnet",
                "content": [{"type": "text", "text": "Hi!"}],
                "stop_reason": "max_tokens",
                "usage": {"input_tokens": 5, "output_tokens": 7},
            },
        )

        response = client.post(
            "/chat",
            json=chat_body(provider="anthropic", model="claude-sonnet"),
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["choices"][0]["finish_reason"] == "length"
        assert body["usage"]["total_tokens"] == 12


class TestStreamingChat:
    def test_frames_in_order_then_done(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.sse(DEEPSEEK_CHAT_URL, [chunk("Hel"), chunk("lo"), chunk(" world")])

        response = client.post("/chat", json=chat_body(stream=True), headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["Cache-Control"] == "no-cache"
        events = sse_events(response.text)
        assert events[-1] == "[DONE]"
        contents = [json.loads(e)["choices"][0]["delta"]["content"] for e in events[:-1]]
        assert contents == ["Hel", "lo", " world"]

    def test_failure_before_first_chunk_is_json_error(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.json(DEEPSEEK_CHAT_URL, {"error": {"message": "bad model"}}, status=400)

        response = client.post("/chat", json=chat_body(stream=True), headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"]["details"]["upstreamStatus"] == 400

    def test_truncated_upstream_ends_without_done(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        """A mid-stream failure is never reported as a clean completion."""
        upstream.sse(DEEPSEEK_CHAT_URL, [chunk("Hel"), chunk("lo")], done=False)

        response = client.post("/chat", json=chat_body(stream=True), headers=auth_headers)

        assert response.status_code == 200
        events = sse_events(response.text)
        assert "[DONE]" not in events
        assert [json.loads(e)["choices"][0]["delta"]["content"] for e in events] == ["Hel", "lo"]

    def test_empty_upstream_stream(
        self, client: TestClient, auth_headers: dict, upstream: MockUpstream
    ) -> None:
        upstream.sse(DEEPSEEK_CHAT_URL, [])

        response = client.post("/chat", json=chat_body(stream=True), headers=auth_headers)

        assert sse_events(response.text) == ["[DONE]"]
