"""OpenAI adapter; the default embedding backend for vector search."""

from ai_gateway.providers.base import ProviderCapabilities
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter


class OpenAIAdapter(OpenAICompatibleAdapter):
    provider_id = "openai"
    display_name = "OpenAI"
    capabilities = ProviderCapabilities(chat=True, streaming=True, embeddings=True)
