"""Vector search route."""

from fastapi import APIRouter, Depends

from ai_gateway.api.deps import get_vector_search_service, rate_limit_by_principal
from ai_gateway.api.middleware.rate_limit import RouteClass
from ai_gateway.models.requests import VectorSearchRequest
from ai_gateway.models.responses import VectorSearchResponse
from ai_gateway.services.vector_search import VectorSearchService

router = APIRouter(
    tags=["Vector Search"],
    dependencies=[Depends(rate_limit_by_principal(RouteClass.VECTOR_SEARCH))],
)


@router.post("/vector-search", response_model=VectorSearchResponse)
async def vector_search(
    body: VectorSearchRequest,
    service: VectorSearchService = Depends(get_vector_search_service),
) -> VectorSearchResponse:
    """
    Embed the query, then run the similarity search.

    Bounds (query 1-8000 chars, threshold 0-1, limit 1-100) are checked
    before either call is made.
    """
    return await service.search(body)
