"""Service layer: chat dispatch and vector search orchestration."""

from ai_gateway.services.chat import ChatService
from ai_gateway.services.vector_search import VectorSearchService

__all__ = ["ChatService", "VectorSearchService"]
