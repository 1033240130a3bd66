"""OpenAI chat-completions provider.

Requests JSON-object output, since every health analysis expects a single
JSON object back. SDK retries are disabled (one attempt per analysis).
"""

from __future__ import annotations

import time
from typing import Any

from steady.core.llm.provider import DEFAULT_MODELS, ProviderResponse


class OpenAIProvider:
    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["openai"]) -> None:
        import openai

        self.client = openai.AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model

    @staticmethod
    def _first_choice_text(completion: Any) -> str:
        if not completion.choices:
            return ""
        choice = completion.choices[0]
        if choice.finish_reason == "content_filter":
            raise RuntimeError("Completion stopped by content_filter")
        return choice.message.content or ""

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        started = time.monotonic()
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
            temperature=temperature,
        )
        text = self._first_choice_text(completion)
        usage = completion.usage
        return ProviderResponse(
            content=text,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            model=getattr(completion, "model", None) or self.model,
            latency_ms=(time.monotonic() - started) * 1000,
        )
