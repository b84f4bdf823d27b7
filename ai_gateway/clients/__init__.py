"""Outbound HTTP clients."""

from ai_gateway.clients.http import create_http_client
from ai_gateway.clients.vector_store import SupabaseVectorStoreClient

__all__ = ["create_http_client", "SupabaseVectorStoreClient"]
