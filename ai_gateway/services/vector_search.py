"""
Vector Search Orchestrator

Two sequential remote calls, each timed on its own:

1. embed the query through a provider adapter
2. run the similarity search RPC with that embedding

If embedding fails the whole operation fails; no partial result is
returned. Timings are reported in whole milliseconds and totalTime is
always exactly embeddingTime + searchTime.
"""

import time
from typing import Any, Callable

from ai_gateway.clients.vector_store import PROVIDER_ID as VECTOR_STORE_ID
from ai_gateway.clients.vector_store import SupabaseVectorStoreClient
from ai_gateway.core.exceptions import GatewayValidationError, ProviderError
from ai_gateway.models.requests import EmbeddingRequest, VectorSearchRequest
from ai_gateway.models.responses import (
    VectorSearchMetadata,
    VectorSearchResponse,
    VectorSearchResult,
)
from ai_gateway.observability.logging import get_logger
from ai_gateway.providers.router import ProviderRouter

logger = get_logger(__name__)


def _to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


class VectorSearchService:
    """
    Embed-then-search orchestration.

    Args:
        router: Provider registry used to find the embedding adapter
        store: Similarity-search client
        default_provider: Embedding provider when the request names none
        default_model: Embedding model when the request names none
        clock: Seconds counter used for phase timings
    """

    def __init__(
        self,
        router: ProviderRouter,
        store: SupabaseVectorStoreClient,
        default_provider: str = "openai",
        default_model: str = "text-embedding-3-small",
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._router = router
        self._store = store
        self._default_provider = default_provider
        self._default_model = default_model
        self._clock = clock

    async def search(self, request: VectorSearchRequest) -> VectorSearchResponse:
        provider_id = request.embedding_provider or self._default_provider
        model = request.embedding_model or self._default_model

        adapter = self._router.get(provider_id)
        if not adapter.capabilities.embeddings:
            raise GatewayValidationError(
                f"Provider {provider_id} does not support embeddings",
                details={"embeddingProvider": provider_id},
            )

        started = self._clock()
        data = await adapter.embeddings(
            EmbeddingRequest(provider=provider_id, model=model, input=request.query)
        )
        embedded = self._clock()
        embedding = self._first_embedding(data, provider_id)
        embedding_ms = _to_ms(embedded - started)

        logger.info(
            "query_embedded",
            provider=provider_id,
            model=model,
            dimensions=len(embedding),
            embedding_ms=embedding_ms,
        )

        search_started = self._clock()
        rows = await self._store.match_documents(
            request.supabase_url,
            request.supabase_key,
            embedding,
            request.threshold,
            request.limit,
        )
        search_ms = _to_ms(self._clock() - search_started)

        results = [self._to_result(row) for row in rows]
        total_ms = embedding_ms + search_ms
        logger.info(
            "vector_search_completed",
            result_count=len(results),
            search_ms=search_ms,
            total_ms=total_ms,
        )

        return VectorSearchResponse(
            success=True,
            query=request.query,
            results=results,
            metadata=VectorSearchMetadata(
                resultCount=len(results),
                threshold=request.threshold,
                limit=request.limit,
                embeddingModel=model,
                embeddingTime=embedding_ms,
                searchTime=search_ms,
                totalTime=total_ms,
            ),
        )

    @staticmethod
    def _first_embedding(data: dict[str, Any], provider_id: str) -> list[float]:
        try:
            embedding = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                "Embedding response contained no vector", provider=provider_id
            ) from e
        if not isinstance(embedding, list) or not embedding:
            raise ProviderError("Embedding response contained no vector", provider=provider_id)
        return embedding

    @staticmethod
    def _to_result(row: Any) -> VectorSearchResult:
        """Map one RPC row; a row of the wrong shape is an upstream failure (502)."""
        if not isinstance(row, dict):
            raise ProviderError(
                "Vector store returned a malformed row",
                provider=VECTOR_STORE_ID,
                upstream_body=row,
            )
        try:
            return VectorSearchResult(
                id=row.get("id"),
                content=row.get("content") or "",
                similarity=float(row.get("similarity") or 0.0),
                metadata=row.get("metadata") or {},
                created_at=row.get("created_at"),
            )
        except (TypeError, ValueError) as e:
            raise ProviderError(
                "Vector store returned a malformed row",
                provider=VECTOR_STORE_ID,
                upstream_body=row,
            ) from e
