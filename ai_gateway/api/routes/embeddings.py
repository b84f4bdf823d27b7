"""Embeddings and rerank routes (default rate-limit class)."""

from typing import Any

from fastapi import APIRouter, Depends

from ai_gateway.api.deps import get_chat_service, rate_limit_by_principal
from ai_gateway.api.middleware.rate_limit import RouteClass
from ai_gateway.models.requests import EmbeddingRequest, RerankRequest
from ai_gateway.models.responses import EmbeddingResponse, RerankResponse
from ai_gateway.services.chat import ChatService

router = APIRouter(
    tags=["Embeddings"],
    dependencies=[Depends(rate_limit_by_principal(RouteClass.DEFAULT))],
)


@router.post("/embeddings", response_model=EmbeddingResponse)
async def create_embeddings(
    body: EmbeddingRequest,
    service: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    """Returns the upstream embedding list: {data: [{embedding, index}], model, usage}."""
    return await service.embeddings(body)


@router.post("/rerank", response_model=RerankResponse, response_model_exclude_none=True)
async def rerank(
    body: RerankRequest,
    service: ChatService = Depends(get_chat_service),
) -> dict[str, Any]:
    """Rank documents against a query; 501 for providers without rerank."""
    return await service.rerank(body)
