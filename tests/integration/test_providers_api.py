"""
Integration tests for the provider catalog endpoints.
"""

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration


class TestProvidersEndpoint:
    def test_lists_registered_providers(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get("/providers", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 6
        ids = [p["id"] for p in body["providers"]]
        assert ids == ["xai", "anthropic", "deepseek", "openrouter", "nvidia_nim", "openai"]
        assert all(p["configured"] is True for p in body["providers"])
        assert all(p["status"] == "configured" for p in body["providers"])

    def test_single_provider(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get("/providers/nvidia_nim", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "nvidia_nim"
        assert "rerank" in body["capabilities"]
        assert body["baseUrl"] == "https://integrate.api.nvidia.com/v1"

    def test_unknown_provider_is_404(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get("/providers/nope", headers=auth_headers)

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "PROVIDER_NOT_FOUND"
        assert "deepseek" in error["details"]["availableProviders"]

    def test_api_keys_never_exposed(self, client: TestClient, auth_headers: dict) -> None:
        response = client.get("/providers", headers=auth_headers)

        assert "test-deepseek-key" not in response.text
