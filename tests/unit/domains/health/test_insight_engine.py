"""Tests for the InsightEngine: cold start, model path and fallbacks."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from steady.core.llm.client import ModelClient
from steady.core.llm.providers.mock import MockProvider
from steady.domains.health.domain_logic.insight_engine import (
    COLD_START_SUMMARY,
    FALLBACK_FORECAST,
    FALLBACK_SUMMARY,
    InsightEngine,
    InsightPolicy,
    default_nudges,
)
from steady.domains.health.domain_logic.vitals_models import UserHealthProfile, VitalsRecord

NUDGES_JSON = (
    'Here you go: {"diet": "Swap chips for nuts.", '
    '"personalCare": "Stretch for five minutes.", "social": "Text your sister."}'
)


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _hypertensive_reading() -> VitalsRecord:
    return VitalsRecord(
        timestamp=datetime.now(timezone.utc) - timedelta(hours=2),
        systolic_bp=150,
        diastolic_bp=95,
        heart_rate=88,
    )


def _engine(dataset_store, provider: MockProvider, **policy) -> InsightEngine:
    client = ModelClient(provider, timeout_s=0.2)
    return InsightEngine(dataset_store, client, InsightPolicy(**policy) if policy else None)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_requires_loaded_store(self, model_client):
        from steady.core.reference.registry import ReferenceDatasetStore

        with pytest.raises(ValueError, match="ReferenceDatasetStore"):
            InsightEngine(ReferenceDatasetStore(), model_client)

    def test_requires_model_client(self, dataset_store):
        with pytest.raises(ValueError, match="ModelClient"):
            InsightEngine(dataset_store, None)


# ---------------------------------------------------------------------------
# Stability score
# ---------------------------------------------------------------------------

class TestStabilityScore:
    def test_empty_history_is_cold_start_without_model_call(self, dataset_store, profile):
        provider = MockProvider(raise_exc=AssertionError("model must not be called"))
        assessment = _run(_engine(dataset_store, provider).calculate_stability_score(profile, []))
        assert assessment.score == 50
        assert assessment.summary == COLD_START_SUMMARY
        assert assessment.source == "cold_start"
        assert provider.call_count == 0

    def test_model_response_is_used(self, dataset_store, profile, mock_provider):
        engine = _engine(dataset_store, mock_provider)
        assessment = _run(engine.calculate_stability_score(profile, [_hypertensive_reading()]))
        assert assessment.score == 82
        assert assessment.risk_forecast == "Low risk over the next 48-72 hours."
        assert assessment.source == "model"
        assert mock_provider.call_count == 1
        assert "Hypertension" in mock_provider.last_user_message

    def test_unreachable_model_falls_back(self, dataset_store, profile):
        provider = MockProvider(raise_exc=ConnectionError("connection refused"))
        assessment = _run(
            _engine(dataset_store, provider).calculate_stability_score(
                profile, [_hypertensive_reading()]
            )
        )
        assert assessment.to_dict() == {
            "score": 65,
            "summary": FALLBACK_SUMMARY,
            "riskForecast": FALLBACK_FORECAST,
        }
        assert assessment.source == "fallback"

    @pytest.mark.parametrize(
        "provider",
        [
            MockProvider(raise_exc=RuntimeError("429 quota exceeded")),
            MockProvider(raise_exc=RuntimeError("blocked by safety filters")),
            MockProvider(raise_exc=RuntimeError("invalid api key")),
            MockProvider("Sorry, I can only answer in prose."),
            MockProvider('{"score": 140, "summary": "x", "riskForecast": "y"}'),
            MockProvider('{"score": 70, "summary": "missing forecast"}'),
            MockProvider("{}", delay_s=1.0),
        ],
    )
    def test_every_failure_gives_fallback(self, dataset_store, profile, provider):
        assessment = _run(
            _engine(dataset_store, provider).calculate_stability_score(
                profile, [_hypertensive_reading()]
            )
        )
        assert assessment.score == 65
        assert assessment.source == "fallback"

    def test_policy_scores_are_configurable(self, dataset_store, profile):
        provider = MockProvider(raise_exc=RuntimeError("down"))
        engine = _engine(dataset_store, provider, cold_start_score=40, fallback_score=60)
        assert _run(engine.calculate_stability_score(profile, [])).score == 40
        assert _run(engine.calculate_stability_score(profile, [_hypertensive_reading()])).score == 60


# ---------------------------------------------------------------------------
# Nudges
# ---------------------------------------------------------------------------

class TestNudges:
    def test_no_vitals_gives_personalised_defaults(self, dataset_store, profile):
        provider = MockProvider(NUDGES_JSON)
        nudges = _run(_engine(dataset_store, provider).generate_nudges(profile, []))
        assert nudges.source == "fallback"
        assert nudges.diet.startswith("Hi Ada!")
        assert "Hypertension" in nudges.diet
        assert provider.call_count == 0

    def test_model_nudges(self, dataset_store, profile):
        provider = MockProvider(NUDGES_JSON)
        nudges = _run(
            _engine(dataset_store, provider).generate_nudges(profile, [_hypertensive_reading()])
        )
        assert nudges.to_dict() == {
            "diet": "Swap chips for nuts.",
            "personalCare": "Stretch for five minutes.",
            "social": "Text your sister.",
        }

    def test_model_failure_gives_defaults(self, dataset_store, profile):
        provider = MockProvider(raise_exc=RuntimeError("quota"))
        nudges = _run(
            _engine(dataset_store, provider).generate_nudges(profile, [_hypertensive_reading()])
        )
        assert nudges == default_nudges(profile)

    def test_only_latest_record_is_sent(self, dataset_store, profile):
        provider = MockProvider(NUDGES_JSON)
        older = VitalsRecord(
            timestamp=datetime.now(timezone.utc) - timedelta(days=2),
            weight=180.0,
            notes="older-entry-marker",
        )
        _run(_engine(dataset_store, provider).generate_nudges(
            profile, [_hypertensive_reading(), older]
        ))
        assert "older-entry-marker" not in provider.last_user_message


class TestDefaultNudges:
    def test_joins_conditions(self):
        profile = UserHealthProfile("u", "Sam Lee", ("Hypertension", "Type 2 Diabetes"))
        assert "managing Hypertension and Type 2 Diabetes" in default_nudges(profile).diet

    def test_no_conditions_or_name(self):
        nudges = default_nudges(UserHealthProfile("u"))
        assert "Hi Friend!" in nudges.diet
        assert "managing your health" in nudges.diet
