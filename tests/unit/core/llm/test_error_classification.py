"""Tests for classifying provider exceptions into ModelFailure values."""

from __future__ import annotations

import asyncio

import pytest

from steady.core.llm.errors import (
    ModelCallError,
    ModelFailure,
    ModelResponseError,
    classify_exception,
)


class _StatusError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class _CodeError(Exception):
    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


@pytest.mark.parametrize(
    "exc, expected",
    [
        (_StatusError("Too many", 429), ModelFailure.QUOTA_EXCEEDED),
        (_CodeError("RESOURCE_EXHAUSTED", 429), ModelFailure.QUOTA_EXCEEDED),
        (RuntimeError("You exceeded your current quota"), ModelFailure.QUOTA_EXCEEDED),
        (RuntimeError("Rate limit reached for requests"), ModelFailure.QUOTA_EXCEEDED),
        (RuntimeError("Response blocked due to SAFETY"), ModelFailure.CONTENT_BLOCKED),
        (RuntimeError("finish_reason=content_filter"), ModelFailure.CONTENT_BLOCKED),
        (_StatusError("Unauthorized", 401), ModelFailure.CONFIG_ERROR),
        (_CodeError("Permission denied", 403), ModelFailure.CONFIG_ERROR),
        (RuntimeError("API key not valid. Please pass a valid API key."), ModelFailure.CONFIG_ERROR),
        (asyncio.TimeoutError(), ModelFailure.TRANSIENT_FAILURE),
        (ConnectionError("connection reset by peer"), ModelFailure.TRANSIENT_FAILURE),
        (_StatusError("Internal server error", 500), ModelFailure.TRANSIENT_FAILURE),
    ],
)
def test_classify_exception(exc, expected):
    assert classify_exception(exc) is expected


def test_model_call_error_keeps_its_classification():
    exc = ModelCallError("boom", ModelFailure.CONTENT_BLOCKED)
    assert classify_exception(exc) is ModelFailure.CONTENT_BLOCKED


def test_response_error_is_malformed():
    assert classify_exception(ModelResponseError("bad")) is ModelFailure.MALFORMED_RESPONSE


def test_failure_values_are_strings():
    assert ModelFailure.QUOTA_EXCEEDED == "QUOTA_EXCEEDED"
