"""
NVIDIA NIM adapter.

Chat and embeddings go through the OpenAI-compatible integrate API; rerank
goes through the separate retrieval API, where the model id is part of the
URL path.
"""

from typing import Any, Optional

import httpx

from ai_gateway.models.requests import EmbeddingRequest, RerankRequest
from ai_gateway.providers.base import ProviderCapabilities
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter


class NvidiaNimAdapter(OpenAICompatibleAdapter):
    provider_id = "nvidia_nim"
    display_name = "NVIDIA NIM"
    capabilities = ProviderCapabilities(chat=True, streaming=True, embeddings=True, rerank=True)

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 60.0,
        rerank_url: Optional[str] = None,
    ) -> None:
        super().__init__(http_client, api_key, base_url, timeout_seconds)
        self.rerank_url = (rerank_url or "https://ai.api.nvidia.com/v1/retrieval").rstrip("/")

    def _embeddings_payload(self, request: EmbeddingRequest) -> dict[str, Any]:
        payload = super()._embeddings_payload(request)
        # Asymmetric NIM embedding models reject requests without input_type
        payload["input_type"] = "query"
        return payload

    async def rerank(self, request: RerankRequest) -> dict[str, Any]:
        data = await self._post_json(
            f"{self.rerank_url}/{request.model}/reranking",
            {
                "model": request.model,
                "query": {"text": request.query},
                "passages": [{"text": doc} for doc in request.documents],
            },
        )

        rankings = sorted(
            data.get("rankings") or [],
            key=lambda r: r.get("logit", 0.0),
            reverse=True,
        )
        if request.top_n is not None:
            rankings = rankings[: request.top_n]

        results = []
        for ranking in rankings:
            index = int(ranking.get("index", 0))
            result: dict[str, Any] = {
                "index": index,
                "relevance_score": float(ranking.get("logit", 0.0)),
            }
            if request.return_documents and 0 <= index < len(request.documents):
                result["document"] = request.documents[index]
            results.append(result)
        return {"model": request.model, "results": results}
