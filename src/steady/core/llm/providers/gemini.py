"""Google Gemini provider (google-genai SDK).

Asks for an application/json response; prompt-level safety blocks surface
as exceptions so the caller can classify them.
"""

from __future__ import annotations

import time

from steady.core.llm.provider import DEFAULT_MODELS, ProviderResponse


class GeminiProvider:
    """Gemini provider using the google-genai SDK."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["gemini"]) -> None:
        from google import genai

        self.client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        from google.genai import types

        start = time.monotonic()
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=user_message,
            config=types.GenerateContentConfig(
                system_instruction=system_message,
                max_output_tokens=max_tokens,
                temperature=temperature,
                top_k=40,
                top_p=0.95,
                response_mime_type="application/json",
            ),
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise RuntimeError(f"Prompt blocked by safety filters: {feedback.block_reason}")

        usage = getattr(response, "usage_metadata", None)
        return ProviderResponse(
            content=response.text or "",
            input_tokens=(usage.prompt_token_count or 0) if usage else 0,
            output_tokens=(usage.candidates_token_count or 0) if usage else 0,
            model=self.model,
            latency_ms=elapsed_ms,
        )
