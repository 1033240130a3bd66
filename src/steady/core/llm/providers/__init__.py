"""LLM provider implementations."""

from steady.core.llm.providers.anthropic import AnthropicProvider
from steady.core.llm.providers.gemini import GeminiProvider
from steady.core.llm.providers.mock import MockProvider
from steady.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "GeminiProvider", "MockProvider", "OpenAIProvider"]
