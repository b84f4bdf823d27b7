"""xAI (Grok) adapter."""

from ai_gateway.providers.base import ProviderCapabilities
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter


class XAIAdapter(OpenAICompatibleAdapter):
    provider_id = "xai"
    display_name = "xAI"
    capabilities = ProviderCapabilities(chat=True, streaming=True)
