"""
Chat Service

Dispatches canonical chat, embedding and rerank requests to the adapter
selected by provider id, and records per-provider metrics.
"""

import time
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from ai_gateway.core.exceptions import GatewayError
from ai_gateway.models.requests import ChatRequest, EmbeddingRequest, RerankRequest
from ai_gateway.models.responses import GatewayMetadata
from ai_gateway.observability.logging import get_logger
from ai_gateway.observability.metrics import record_provider_call, record_token_usage
from ai_gateway.providers.base import ProviderAdapter
from ai_gateway.providers.router import ProviderRouter

logger = get_logger(__name__)


def _elapsed_ms(start: float) -> int:
    return int(round((time.perf_counter() - start) * 1000))


class ChatService:
    """
    Service layer between the HTTP routes and the provider router.

    Adapter selection happens before any I/O, so an unknown provider fails
    without touching the network.
    """

    def __init__(self, router: ProviderRouter) -> None:
        self._router = router

    @property
    def router(self) -> ProviderRouter:
        return self._router

    async def complete(
        self, request: ChatRequest, request_id: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Non-streaming chat.

        Returns the upstream completion envelope with a ``gateway`` block
        added (resolved provider, upstream latency, request id).
        """
        adapter = self._router.get(request.provider)
        data, latency_ms = await self._call(adapter, "chat", adapter.chat, request)
        record_token_usage(request.provider, request.model, data.get("usage"))
        data["gateway"] = GatewayMetadata(
            provider=request.provider, latency_ms=latency_ms, request_id=request_id
        ).model_dump()
        logger.info(
            "chat_completed",
            provider=request.provider,
            model=request.model,
            latency_ms=latency_ms,
        )
        return data

    def open_stream(self, request: ChatRequest) -> AsyncIterator[dict[str, Any]]:
        """
        Resolve the adapter and return its chunk stream.

        Raises UnknownProviderError immediately; the returned generator does
        no I/O until first iterated.
        """
        adapter = self._router.get(request.provider)
        return self._relay(adapter, request)

    async def _relay(
        self, adapter: ProviderAdapter, request: ChatRequest
    ) -> AsyncIterator[dict[str, Any]]:
        start = time.perf_counter()
        outcome = "error"
        stream = adapter.stream_chat(request)
        try:
            async for chunk in stream:
                if chunk.get("usage"):
                    record_token_usage(request.provider, request.model, chunk["usage"])
                yield chunk
            outcome = "success"
        except GeneratorExit:
            outcome = "cancelled"
            raise
        finally:
            await stream.aclose()
            record_provider_call(
                adapter.provider_id, "stream", outcome, time.perf_counter() - start
            )

    async def embeddings(self, request: EmbeddingRequest) -> dict[str, Any]:
        adapter = self._router.get(request.provider)
        data, _ = await self._call(adapter, "embeddings", adapter.embeddings, request)
        return data

    async def rerank(self, request: RerankRequest) -> dict[str, Any]:
        adapter = self._router.get(request.provider)
        data, _ = await self._call(adapter, "rerank", adapter.rerank, request)
        return data

    async def _call(
        self,
        adapter: ProviderAdapter,
        operation: str,
        func: Callable[[Any], Awaitable[dict[str, Any]]],
        request: Any,
    ) -> tuple[dict[str, Any], int]:
        start = time.perf_counter()
        try:
            data = await func(request)
        except GatewayError:
            record_provider_call(
                adapter.provider_id, operation, "error", time.perf_counter() - start
            )
            raise
        record_provider_call(
            adapter.provider_id, operation, "success", time.perf_counter() - start
        )
        return data, _elapsed_ms(start)
