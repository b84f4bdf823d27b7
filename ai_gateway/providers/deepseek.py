"""DeepSeek adapter (chat and streaming)."""

from ai_gateway.providers.base import ProviderCapabilities
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter


class DeepSeekAdapter(OpenAICompatibleAdapter):
    provider_id = "deepseek"
    display_name = "DeepSeek"
    capabilities = ProviderCapabilities(chat=True, streaming=True)
