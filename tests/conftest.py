"""
Pytest configuration for the AI Gateway test suite.

This configuration sets up:
- Test markers for categorization
- Settings with fake provider keys and local rate limiting
- A scripted upstream (httpx.MockTransport) standing in for every provider
  and the vector store
- An application client with lifespan running, plus an authenticated user
"""

import sys
from pathlib import Path

import fakeredis.aioredis
import pytest
from argon2 import PasswordHasher
from fastapi.testclient import TestClient

from fakes import TEST_JWT_SECRET, MockUpstream

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - integration: Tests through the HTTP application
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests through the HTTP application")


# =============================================================================
# Scripted Upstream
# =============================================================================


@pytest.fixture
def upstream() -> MockUpstream:
    return MockUpstream()


# =============================================================================
# FakeRedis Fixture
# =============================================================================


@pytest.fixture
def fake_redis():
    """
    Fake Redis client with decode_responses=True.

    Fully functional Redis-compatible interface without a real Redis
    instance.
    """
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# =============================================================================
# Test Settings Fixture
# =============================================================================


@pytest.fixture
def test_settings():
    """
    Settings configured for testing:
    - Local rate limiting (no Redis)
    - Fake API keys for every provider
    - Fixed signing key
    """
    from ai_gateway.core.config import Settings

    return Settings(
        service_name="ai-gateway-test",
        environment="test",
        jwt_secret=TEST_JWT_SECRET,
        rate_limit_backend="local",
        anthropic_api_key="test-anthropic-key",
        deepseek_api_key="test-deepseek-key",
        xai_api_key="test-xai-key",
        openrouter_api_key="test-openrouter-key",
        nvidia_nim_api_key="test-nvidia-key",
        openai_api_key="test-openai-key",
    )


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """argon2 with minimal cost so registration tests stay fast."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(test_settings, upstream, password_hasher):
    from ai_gateway.main import create_app

    return create_app(
        settings=test_settings,
        http_client=upstream.client(),
        password_hasher=password_hasher,
    )


@pytest.fixture
def client(app):
    """TestClient used as a context manager so the lifespan runs."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    """Register a user and return its bearer header."""
    response = client.post(
        "/auth/register",
        json={"email": "alice@acme.io", "password": "correct-horse", "name": "Alice"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
