"""Failure taxonomy for generative-model calls."""

from __future__ import annotations

import asyncio
from enum import Enum


class ModelFailure(str, Enum):
    """Why a model-backed analysis did not produce a usable value."""

    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    CONTENT_BLOCKED = "CONTENT_BLOCKED"
    CONFIG_ERROR = "CONFIG_ERROR"
    TRANSIENT_FAILURE = "TRANSIENT_FAILURE"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


class ModelError(Exception):
    """Base exception for model client errors."""


class ModelCallError(ModelError):
    """The provider call itself failed (raised, timed out, or was refused)."""

    def __init__(self, message: str, failure: ModelFailure) -> None:
        super().__init__(message)
        self.failure = failure


class ModelResponseError(ModelError):
    """The provider answered, but not with the expected JSON object."""


_QUOTA_MARKERS = ("quota", "rate limit", "rate_limit", "resource_exhausted", "too many requests")
_BLOCKED_MARKERS = ("safety", "blocked", "content_filter", "content filter", "refusal")
_CONFIG_MARKERS = (
    "api key",
    "api_key",
    "permission",
    "unauthorized",
    "unauthenticated",
    "authentication",
    "not found",
)


def _status_code(exc: BaseException) -> int | None:
    """Pull an HTTP status out of SDK exceptions (anthropic/openai/google-genai)."""
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 100 <= value < 600:
            return value
    return None


def classify_exception(exc: BaseException) -> ModelFailure:
    """Map an exception raised by a provider call to a ModelFailure.

    Classification is for logging only; every class leads to the same
    deterministic fallback.
    """
    if isinstance(exc, ModelCallError):
        return exc.failure
    if isinstance(exc, ModelResponseError):
        return ModelFailure.MALFORMED_RESPONSE
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ModelFailure.TRANSIENT_FAILURE

    message = str(exc).lower()
    status = _status_code(exc)

    if status == 429 or any(m in message for m in _QUOTA_MARKERS):
        return ModelFailure.QUOTA_EXCEEDED
    if any(m in message for m in _BLOCKED_MARKERS):
        return ModelFailure.CONTENT_BLOCKED
    if status in (401, 403, 404) or any(m in message for m in _CONFIG_MARKERS):
        return ModelFailure.CONFIG_ERROR
    return ModelFailure.TRANSIENT_FAILURE
