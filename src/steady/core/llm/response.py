"""Response parsing for generative-model output.

The model is asked for a single JSON object but is not guaranteed to return
only JSON, so extraction scans the text for balanced ``{...}`` spans that
decode to objects and keeps the first one with the expected fields.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterator
from typing import Any

from steady.core.llm.errors import ModelResponseError

logger = logging.getLogger(__name__)

SCORE_FIELD = "score"


def _balanced_span_end(text: str, start: int) -> int | None:
    """Return the index just past the brace that closes ``text[start]``.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def iter_json_objects(text: str) -> Iterator[dict[str, Any]]:
    """Yield each balanced JSON object embedded in free-form text, in order.

    Objects nested inside a decoded object are not yielded separately.
    """
    if not text:
        return

    start = text.find("{")
    while start != -1:
        end = _balanced_span_end(text, start)
        parsed = None
        if end is not None:
            try:
                parsed = json.loads(text[start:end])
            except json.JSONDecodeError:
                parsed = None
        if isinstance(parsed, dict):
            yield parsed
            start = text.find("{", end)
        else:
            start = text.find("{", start + 1)


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Extract the first balanced JSON object embedded in free-form text.

    Returns None when no candidate span decodes to a dict.
    """
    return next(iter_json_objects(text), None)


def _coerce_score(value: Any) -> int:
    if isinstance(value, bool):
        raise ModelResponseError("score must be a number, got a boolean")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ModelResponseError(f"score is not numeric: {value!r}") from None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ModelResponseError(f"score is not a finite number: {value!r}")
    if not 0 <= value <= 100:
        raise ModelResponseError(f"score out of range 0-100: {value}")
    return int(round(value))


def validate_shape(obj: dict[str, Any], required_fields: tuple[str, ...]) -> dict[str, Any]:
    """Check a parsed object against the expected fields and normalise it.

    ``score`` becomes an int in [0, 100]; every other field must be a
    non-empty string and is stripped. Extra keys are dropped.
    """
    missing = [name for name in required_fields if name not in obj]
    if missing:
        raise ModelResponseError(f"Missing fields in model response: {', '.join(missing)}")

    normalised: dict[str, Any] = {}
    for name in required_fields:
        value = obj[name]
        if name == SCORE_FIELD:
            normalised[name] = _coerce_score(value)
            continue
        if not isinstance(value, str) or not value.strip():
            raise ModelResponseError(f"Field '{name}' must be a non-empty string")
        normalised[name] = value.strip()
    return normalised


def parse_model_response(text: str, required_fields: tuple[str, ...]) -> dict[str, Any]:
    """Extract and validate the JSON object from a model response.

    Candidate objects are tried in order; the first one with the expected
    shape wins. Raises ModelResponseError when nothing usable is found,
    carrying the last shape error if any object was found.
    """
    last_error: ModelResponseError | None = None
    for obj in iter_json_objects(text):
        try:
            return validate_shape(obj, required_fields)
        except ModelResponseError as exc:
            logger.debug("Skipping JSON candidate: %s", exc)
            last_error = exc
    if last_error is not None:
        raise last_error
    raise ModelResponseError("No JSON object found in model response")
