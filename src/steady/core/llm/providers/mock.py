"""Offline provider for development and tests."""

from __future__ import annotations

import asyncio
import json

from steady.core.llm.provider import ProviderResponse

# Replies used when no fixed response is configured, keyed by the JSON key
# that identifies the requested output shape.
_CANNED_REPLIES = {
    '"riskForecast"': {
        "score": 72,
        "summary": "Your recent readings sit mostly within the stable reference range.",
        "riskForecast": "No elevated risk expected over the next 48-72 hours.",
    },
    '"personalCare"': {
        "diet": "Choose a low-sodium lunch today, such as a salad with beans.",
        "personalCare": "Take a short walk after your next meal.",
        "social": "Share how your week is going with someone you trust.",
    },
    '"status"': {"status": "operational"},
}
_DEFAULT_REPLY = "Mock LLM response."


class MockProvider:
    """Deterministic provider: a fixed reply, or a canned one per prompt shape.

    ``raise_exc`` makes every call fail with that exception, and ``delay_s``
    sleeps before answering so timeouts can be exercised. The last messages
    and a call counter are kept for assertions.
    """

    def __init__(
        self,
        response_content: str | None = None,
        *,
        raise_exc: Exception | None = None,
        delay_s: float = 0.0,
    ) -> None:
        self.response_content = response_content
        self.raise_exc = raise_exc
        self.delay_s = delay_s
        self.last_system_message = ""
        self.last_user_message = ""
        self.call_count = 0

    def _reply_for(self, user_message: str) -> str:
        if self.response_content is not None:
            return self.response_content
        for marker, reply in _CANNED_REPLIES.items():
            if marker in user_message:
                return json.dumps(reply)
        return _DEFAULT_REPLY

    async def generate(
        self,
        system_message: str,
        user_message: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> ProviderResponse:
        self.call_count += 1
        self.last_system_message, self.last_user_message = system_message, user_message
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.raise_exc is not None:
            raise self.raise_exc

        reply = self._reply_for(user_message)
        return ProviderResponse(
            content=reply,
            input_tokens=len(system_message.split()) + len(user_message.split()),
            output_tokens=len(reply.split()),
            model="mock",
            latency_ms=0.0,
        )
