"""Health insight engine: stability scoring and behavioural nudges.

Per invocation: select datasets -> build prompt -> call model -> parse
response -> success or deterministic fallback. The engine holds no mutable
state, so one instance serves concurrent requests.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from steady.core.llm.client import ModelClient
from steady.core.reference.matcher import select_relevant_datasets
from steady.core.reference.models import ReferenceDataset
from steady.core.reference.registry import ReferenceDatasetStore
from steady.domains.health.domain_logic.insight_prompts import (
    DEFAULT_VITALS_PROMPT_LIMIT,
    NUDGE_FIELDS,
    STABILITY_FIELDS,
    build_nudge_prompt,
    build_stability_prompt,
)
from steady.domains.health.domain_logic.vitals_models import (
    NudgeSet,
    StabilityAssessment,
    UserHealthProfile,
    VitalsRecord,
)

logger = logging.getLogger(__name__)

COLD_START_SUMMARY = (
    "We don't have enough data yet to provide a comprehensive wellness score. "
    "Please continue logging your vitals to get personalized insights."
)
COLD_START_FORECAST = "Continue monitoring your health regularly for better analysis."

FALLBACK_SUMMARY = (
    "We're having difficulty analyzing your data right now. Based on your recent "
    "activities, you're maintaining a generally stable health pattern."
)
FALLBACK_FORECAST = (
    "Continue your current health management routine and consult with your "
    "healthcare provider regularly."
)


@dataclass(frozen=True)
class InsightPolicy:
    """Scores and limits used by the deterministic paths."""

    cold_start_score: int = 50
    fallback_score: int = 65
    vitals_prompt_limit: int = DEFAULT_VITALS_PROMPT_LIMIT
    time_range_days: int = 30


def default_nudges(profile: UserHealthProfile) -> NudgeSet:
    """Name-personalised nudges used without data or when the model fails."""
    name = profile.first_name
    conditions = " and ".join(profile.conditions) if profile.conditions else "your health"
    return NudgeSet(
        diet=(
            f"Hi {name}! Since you're managing {conditions}, focus on whole foods today. "
            "Try adding some leafy greens or a piece of fruit to your next meal."
        ),
        personal_care=(
            f"Take a moment for yourself today, {name}. Even 5 minutes of deep breathing "
            "can help manage stress and support your overall health."
        ),
        social=(
            "Consider reaching out to a friend or family member today. Social connections "
            "are wonderful for both mental and physical wellbeing, especially when "
            "managing health conditions."
        ),
        source="fallback",
    )


class InsightEngine:
    """Turns a profile and recent vitals into a stability assessment and nudges.

    Usage::

        engine = InsightEngine(store, model_client)
        assessment = await engine.calculate_stability_score(profile, vitals)
        nudges = await engine.generate_nudges(profile, latest)
    """

    def __init__(
        self,
        store: ReferenceDatasetStore,
        model_client: ModelClient,
        policy: InsightPolicy | None = None,
    ) -> None:
        if store is None or len(store) == 0:
            raise ValueError("InsightEngine requires a loaded ReferenceDatasetStore")
        if model_client is None:
            raise ValueError("InsightEngine requires a ModelClient")
        self.store = store
        self.model_client = model_client
        self.policy = policy or InsightPolicy()

    def select_relevant_datasets(self, conditions: Sequence[str]) -> dict[str, ReferenceDataset]:
        return select_relevant_datasets(self.store, conditions)

    def cold_start_assessment(self) -> StabilityAssessment:
        return StabilityAssessment(
            score=self.policy.cold_start_score,
            summary=COLD_START_SUMMARY,
            risk_forecast=COLD_START_FORECAST,
            source="cold_start",
        )

    def fallback_assessment(self) -> StabilityAssessment:
        return StabilityAssessment(
            score=self.policy.fallback_score,
            summary=FALLBACK_SUMMARY,
            risk_forecast=FALLBACK_FORECAST,
            source="fallback",
        )

    async def calculate_stability_score(
        self,
        profile: UserHealthProfile,
        recent_vitals: Sequence[VitalsRecord],
    ) -> StabilityAssessment:
        """Score recent vitals (most recent first) against reference patterns.

        Never raises for model problems: no vitals gives the cold-start
        assessment without a model call, any model or parse failure gives the
        fallback assessment.
        """
        if not recent_vitals:
            logger.info("No vitals for user %s; returning cold-start assessment", profile.user_id)
            return self.cold_start_assessment()

        datasets = self.select_relevant_datasets(profile.conditions)
        prompt = build_stability_prompt(
            profile.conditions,
            datasets,
            recent_vitals,
            time_range_days=self.policy.time_range_days,
            vitals_limit=self.policy.vitals_prompt_limit,
        )

        result = await self.model_client.analyze(prompt, STABILITY_FIELDS, kind="stability")
        if not result.ok:
            logger.warning(
                "Stability scoring fell back for user %s: %s",
                profile.user_id,
                result.failure.value if result.failure else "unknown",
            )
            return self.fallback_assessment()

        parsed = result.value or {}
        logger.info("Stability score calculated for user %s: %d", profile.user_id, parsed["score"])
        return StabilityAssessment(
            score=parsed["score"],
            summary=parsed["summary"],
            risk_forecast=parsed["riskForecast"],
        )

    async def generate_nudges(
        self,
        profile: UserHealthProfile,
        latest_vitals: Sequence[VitalsRecord],
    ) -> NudgeSet:
        """Diet, personal-care and social nudges based on the latest record.

        Falls back to personalised defaults with no vitals or on any model
        failure.
        """
        if not latest_vitals:
            logger.info("No vitals for user %s; returning default nudges", profile.user_id)
            return default_nudges(profile)

        datasets = self.select_relevant_datasets(profile.conditions)
        prompt = build_nudge_prompt(
            profile.first_name,
            profile.conditions,
            datasets,
            latest_vitals[0],
        )

        result = await self.model_client.analyze(prompt, NUDGE_FIELDS, kind="nudges")
        if not result.ok:
            logger.warning(
                "Nudge generation fell back for user %s: %s",
                profile.user_id,
                result.failure.value if result.failure else "unknown",
            )
            return default_nudges(profile)

        parsed = result.value or {}
        logger.info("Nudges generated for user %s", profile.user_id)
        return NudgeSet(
            diet=parsed["diet"],
            personal_care=parsed["personalCare"],
            social=parsed["social"],
        )
