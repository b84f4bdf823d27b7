"""
Static provider catalog served by /providers.

Read-only reference data: display names, model limits and list pricing
(USD per million tokens, where published).
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    context_window: int
    max_tokens: int
    supports_streaming: bool = True
    supports_vision: bool = False
    supports_function_calling: bool = False
    input_cost_per_1m: Optional[float] = None
    output_cost_per_1m: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "contextWindow": self.context_window,
            "maxTokens": self.max_tokens,
            "supportsStreaming": self.supports_streaming,
            "supportsVision": self.supports_vision,
            "supportsFunctionCalling": self.supports_function_calling,
            "pricing": {"input": self.input_cost_per_1m, "output": self.output_cost_per_1m},
        }


@dataclass(frozen=True)
class ProviderInfo:
    id: str
    name: str
    models: tuple[ModelInfo, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["models"] = [m.to_dict() for m in self.models]
        return data


CATALOG: dict[str, ProviderInfo] = {
    "xai": ProviderInfo(
        id="xai",
        name="xAI",
        models=(
            ModelInfo("grok-4-1-fast-reasoning", "Grok 4.1 Fast Reasoning", 2_000_000, 32768,
                      supports_vision=True, supports_function_calling=True),
            ModelInfo("grok-4-fast-reasoning", "Grok 4 Fast Reasoning", 2_000_000, 32768,
                      supports_function_calling=True),
            ModelInfo("grok-3-mini", "Grok 3 Mini", 131072, 8192, supports_function_calling=True),
        ),
    ),
    "anthropic": ProviderInfo(
        id="anthropic",
        name="Anthropic",
        models=(
            ModelInfo("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", 200_000, 8192,
                      supports_vision=True, supports_function_calling=True,
                      input_cost_per_1m=3.00, output_cost_per_1m=15.00),
            ModelInfo("claude-3-opus-20240229", "Claude 3 Opus", 200_000, 4096,
                      supports_vision=True, supports_function_calling=True,
                      input_cost_per_1m=15.00, output_cost_per_1m=75.00),
            ModelInfo("claude-3-haiku-20240307", "Claude 3 Haiku", 200_000, 4096,
                      supports_vision=True, supports_function_calling=True,
                      input_cost_per_1m=0.25, output_cost_per_1m=1.25),
        ),
    ),
    "deepseek": ProviderInfo(
        id="deepseek",
        name="DeepSeek",
        models=(
            ModelInfo("deepseek-chat", "DeepSeek Chat", 64000, 8192,
                      supports_function_calling=True,
                      input_cost_per_1m=0.14, output_cost_per_1m=0.28),
            ModelInfo("deepseek-reasoner", "DeepSeek Reasoner", 64000, 8192,
                      input_cost_per_1m=0.55, output_cost_per_1m=2.19),
        ),
    ),
    "openrouter": ProviderInfo(
        id="openrouter",
        name="OpenRouter",
        models=(
            ModelInfo("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet (via OpenRouter)",
                      200_000, 8192, supports_vision=True, supports_function_calling=True),
            ModelInfo("google/gemini-2.0-flash-exp:free", "Gemini 2.0 Flash (Free)",
                      1_000_000, 8192, supports_vision=True, supports_function_calling=True),
            ModelInfo("meta-llama/llama-3.3-70b-instruct", "Llama 3.3 70B Instruct",
                      128000, 4096, supports_function_calling=True),
        ),
    ),
    "nvidia_nim": ProviderInfo(
        id="nvidia_nim",
        name="NVIDIA NIM",
        models=(
            ModelInfo("nvidia/llama-3.3-70b-instruct", "Llama 3.3 70B Instruct", 128000, 4096,
                      supports_function_calling=True),
            ModelInfo("nvidia/llama-3_2-nv-rerankqa-1b-v2", "Llama 3.2 Rerank QA 1B", 8192, 512,
                      supports_streaming=False),
        ),
    ),
    "openai": ProviderInfo(
        id="openai",
        name="OpenAI",
        models=(
            ModelInfo("gpt-4o-mini", "GPT-4o mini", 128000, 16384,
                      supports_vision=True, supports_function_calling=True,
                      input_cost_per_1m=0.15, output_cost_per_1m=0.60),
            ModelInfo("text-embedding-3-small", "Text Embedding 3 Small", 8191, 0,
                      supports_streaming=False, input_cost_per_1m=0.02),
        ),
    ),
}
