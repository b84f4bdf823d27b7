"""Upstream provider adapters and the dispatch router."""

from ai_gateway.providers.anthropic import AnthropicAdapter
from ai_gateway.providers.base import ProviderAdapter, ProviderCapabilities
from ai_gateway.providers.deepseek import DeepSeekAdapter
from ai_gateway.providers.nvidia import NvidiaNimAdapter
from ai_gateway.providers.openai import OpenAIAdapter
from ai_gateway.providers.openai_compatible import OpenAICompatibleAdapter
from ai_gateway.providers.openrouter import OpenRouterAdapter
from ai_gateway.providers.router import ProviderRouter, create_provider_router
from ai_gateway.providers.xai import XAIAdapter

__all__ = [
    "ProviderAdapter",
    "ProviderCapabilities",
    "OpenAICompatibleAdapter",
    "AnthropicAdapter",
    "DeepSeekAdapter",
    "NvidiaNimAdapter",
    "OpenAIAdapter",
    "OpenRouterAdapter",
    "XAIAdapter",
    "ProviderRouter",
    "create_provider_router",
]
