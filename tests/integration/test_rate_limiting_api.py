"""
Integration tests for per-route-class rate limiting over HTTP.
"""

import pytest
from fastapi.testclient import TestClient

from ai_gateway.core.config import Settings
from ai_gateway.main import create_app
from fakes import DEEPSEEK_CHAT_URL, MockUpstream, completion

pytestmark = pytest.mark.integration


TIGHT_LIMITS = {"rate_limit_auth_max": 3, "rate_limit_chat_max": 2}


def build_client(test_settings: Settings, upstream: MockUpstream, password_hasher, **overrides):
    settings = test_settings.model_copy(update={**TIGHT_LIMITS, **overrides})
    app = create_app(
        settings=settings, http_client=upstream.client(), password_hasher=password_hasher
    )
    return TestClient(app)


@pytest.fixture
def tight_client(test_settings: Settings, upstream: MockUpstream, password_hasher):
    with build_client(test_settings, upstream, password_hasher) as client:
        yield client


def register(client: TestClient, email: str):
    return client.post("/auth/register", json={"email": email, "password": "correct-horse"})


class TestAuthRateLimit:
    def test_limit_then_429_with_headers(self, tight_client: TestClient) -> None:
        statuses = [register(tight_client, f"user{i}@acme.io").status_code for i in range(3)]

        rejected = register(tight_client, "user9@acme.io")

        assert statuses == [201, 201, 201]
        assert rejected.status_code == 429
        error = rejected.json()["error"]
        assert error["type"] == "RateLimitError"
        assert error["details"]["routeClass"] == "auth"
        assert int(rejected.headers["Retry-After"]) >= 1
        assert rejected.headers["X-RateLimit-Remaining"] == "0"

    def test_forwarded_header_cannot_reset_quota(self, tight_client: TestClient) -> None:
        """A fresh X-Forwarded-For per request from an untrusted peer is ignored."""
        statuses = [
            tight_client.post(
                "/auth/login",
                json={"email": "alice@acme.io", "password": f"guess-{i}"},
                headers={"X-Forwarded-For": f"198.51.100.{i}"},
            ).status_code
            for i in range(6)
        ]

        assert statuses == [401, 401, 401, 429, 429, 429]

    def test_trusted_proxy_forwards_client_address(
        self, test_settings: Settings, upstream: MockUpstream, password_hasher
    ) -> None:
        def register_from(client: TestClient, email: str, address: str) -> int:
            return client.post(
                "/auth/register",
                json={"email": email, "password": "correct-horse"},
                headers={"X-Forwarded-For": address},
            ).status_code

        with build_client(
            test_settings, upstream, password_hasher, forwarded_allow_ips=["testclient"]
        ) as client:
            first = [register_from(client, f"user{i}@acme.io", "203.0.113.7") for i in range(4)]
            other = register_from(client, "other@acme.io", "203.0.113.8")

        assert first == [201, 201, 201, 429]
        assert other == 201


class TestChatRateLimit:
    def test_keyed_by_principal(self, tight_client: TestClient, upstream: MockUpstream) -> None:
        upstream.json(DEEPSEEK_CHAT_URL, completion())
        alice = register(tight_client, "alice@acme.io").json()["token"]
        bob = register(tight_client, "bob@acme.io").json()["token"]
        body = {
            "provider": "deepseek",
            "model": "deepseek-chat",
            "messages": [{"role": "user", "content": "hi"}],
        }

        def chat(token: str) -> int:
            return tight_client.post(
                "/chat", json=body, headers={"Authorization": f"Bearer {token}"}
            ).status_code

        alice_statuses = [chat(alice), chat(alice), chat(alice)]
        bob_status = chat(bob)

        assert alice_statuses == [200, 200, 429]
        assert bob_status == 200
        assert len(upstream.calls_to(DEEPSEEK_CHAT_URL)) == 3

    def test_rejected_request_makes_no_upstream_call(
        self, tight_client: TestClient, upstream: MockUpstream
    ) -> None:
        upstream.json(DEEPSEEK_CHAT_URL, completion())
        token = register(tight_client, "erin@acme.io").json()["token"]
        headers = {"Authorization": f"Bearer {token}"}
        body = {
            "provider": "deepseek",
            "model": "deepseek-chat",
            "messages": [{"role": "user", "content": "hi"}],
        }

        for _ in range(3):
            tight_client.post("/chat", json=body, headers=headers)

        assert len(upstream.calls_to(DEEPSEEK_CHAT_URL)) == 2
