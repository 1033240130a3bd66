"""Anthropic Claude provider.

The SDK's automatic retries are disabled: an analysis makes exactly one
model call, and repeated attempts are the caller's decision.
"""

from __future__ import annotations

import time
from typing import Any

from steady.core.llm.provider import DEFAULT_MODELS, ProviderResponse


class AnthropicProvider:
    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["anthropic"]) -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = model

    @staticmethod
    def _text_of(message: Any) -> str:
        # A refusal arrives as a normal message with stop_reason "refusal".
        if getattr(message, "stop_reason", None) == "refusal":
            raise RuntimeError("Claude declined the request (refusal)")
        return "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        started = time.monotonic()
        message = await self.client.messages.create(
            model=self.model,
            system=system_message,
            messages=[{"role": "user", "content": user_message}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        text = self._text_of(message)
        return ProviderResponse(
            content=text,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
            model=getattr(message, "model", None) or self.model,
            latency_ms=(time.monotonic() - started) * 1000,
        )
