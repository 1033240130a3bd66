"""LLM provider protocol: abstract interface for generative-model calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Model used when settings leave the model name empty.
DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o",
    "gemini": "gemini-2.0-flash",
}


@dataclass
class ProviderResponse:
    """Text and usage returned by one provider call."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    latency_ms: float


@runtime_checkable
class LLMProvider(Protocol):
    """A generative model reachable with a system and a user message."""

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider:
    """Build a provider by name ("anthropic", "openai", "gemini" or "mock").

    SDK imports happen here so that only the selected provider's SDK is
    loaded. Raises ValueError for an unknown name.
    """
    if provider_name == "mock":
        from steady.core.llm.providers.mock import MockProvider

        return MockProvider()
    if provider_name not in DEFAULT_MODELS:
        raise ValueError(f"Unknown LLM provider: {provider_name}")

    model = model or DEFAULT_MODELS[provider_name]
    if provider_name == "anthropic":
        from steady.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model)
    if provider_name == "openai":
        from steady.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model)

    from steady.core.llm.providers.gemini import GeminiProvider

    return GeminiProvider(api_key=api_key, model=model)
