"""Model client: the bridge between insight prompts and LLM providers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from steady.core.llm.errors import (
    ModelCallError,
    ModelFailure,
    ModelResponseError,
    classify_exception,
)
from steady.core.llm.provider import LLMProvider, ProviderResponse
from steady.core.llm.response import parse_model_response
from steady.core.llm.system_prompt import HEALTH_COMPANION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 20.0

STATUS_PROMPT = 'Connectivity check. Reply with exactly this JSON object: {"status": "operational"}'
STATUS_FIELDS = ("status",)


@dataclass
class ModelResult(Generic[T]):
    """Tagged result of a model-backed analysis: a value or a failure reason."""

    value: T | None = None
    failure: ModelFailure | None = None
    detail: str = ""
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failure is None and self.value is not None

    @classmethod
    def success(cls, value: T, usage: dict[str, int] | None = None) -> ModelResult[T]:
        return cls(value=value, usage=usage or {})

    @classmethod
    def failed(cls, failure: ModelFailure, detail: str = "") -> ModelResult[T]:
        return cls(failure=failure, detail=detail)


class ModelClient:
    """Bounded, classified access to a generative model.

    ``generate`` is the raw ``prompt -> text`` boundary and raises
    ModelCallError; ``analyze`` adds parsing and never raises for model or
    response failures.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        provider_name: str = "mock",
        timeout_s: float = DEFAULT_TIMEOUT_SECONDS,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> None:
        self.provider = provider
        self.provider_name = provider_name
        self.timeout_s = timeout_s
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def _call(self, prompt: str) -> ProviderResponse:
        try:
            response: ProviderResponse = await asyncio.wait_for(
                self.provider.generate(
                    system_message=HEALTH_COMPANION_SYSTEM_PROMPT,
                    user_message=prompt,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            raise ModelCallError(
                f"Model call timed out after {self.timeout_s:.1f}s",
                ModelFailure.TRANSIENT_FAILURE,
            ) from None
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise ModelCallError(str(exc) or type(exc).__name__, classify_exception(exc)) from exc

        logger.info(
            "Model call: provider=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            self.provider_name,
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return response

    async def generate(self, prompt: str) -> str:
        """Send a prompt to the model and return its text.

        Raises ModelCallError (with a ModelFailure classification) when the
        provider raises or the call exceeds the timeout.
        """
        response = await self._call(prompt)
        return response.content

    async def analyze(
        self,
        prompt: str,
        required_fields: tuple[str, ...],
        *,
        kind: str = "analysis",
    ) -> ModelResult[dict[str, Any]]:
        """Call the model and parse one JSON object with ``required_fields``.

        Every failure (provider error, timeout, malformed output) comes back
        as a failed ModelResult and is logged with its classification.
        """
        try:
            response = await self._call(prompt)
            parsed = parse_model_response(response.content, required_fields)
        except ModelCallError as exc:
            logger.warning("Model %s failed: failure=%s (%s)", kind, exc.failure.value, exc)
            return ModelResult.failed(exc.failure, str(exc))
        except ModelResponseError as exc:
            logger.warning(
                "Model %s failed: failure=%s (%s)",
                kind,
                ModelFailure.MALFORMED_RESPONSE.value,
                exc,
            )
            return ModelResult.failed(ModelFailure.MALFORMED_RESPONSE, str(exc))

        return ModelResult.success(
            parsed,
            usage={
                "input_tokens": response.input_tokens,
                "output_tokens": response.output_tokens,
            },
        )

    async def check_status(self) -> ModelResult[dict[str, Any]]:
        """Send a tiny prompt to confirm the model answers in the expected shape."""
        return await self.analyze(STATUS_PROMPT, STATUS_FIELDS, kind="status check")
