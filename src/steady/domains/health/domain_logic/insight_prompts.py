"""Prompt construction for stability scoring and nudge generation."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from steady.core.reference.matcher import classify_against_patterns
from steady.core.reference.models import ReferenceDataset
from steady.domains.health.domain_logic.vitals_models import VitalsRecord

STABILITY_FIELDS = ("score", "summary", "riskForecast")
NUDGE_FIELDS = ("diet", "personalCare", "social")

DEFAULT_VITALS_PROMPT_LIMIT = 10


def _conditions_text(conditions: Sequence[str]) -> str:
    return ", ".join(conditions) if conditions else "no specific conditions (general wellness)"


def _datasets_json(datasets: Mapping[str, ReferenceDataset]) -> str:
    return json.dumps(
        {name: dataset.as_prompt_dict() for name, dataset in datasets.items()},
        indent=2,
    )


def _pattern_hints(
    datasets: Mapping[str, ReferenceDataset],
    record: VitalsRecord,
) -> list[str]:
    """Closest template category per dataset for the given record."""
    hints = []
    vitals = record.to_dict()
    for name, dataset in datasets.items():
        category = classify_against_patterns(dataset, vitals)
        if category:
            hints.append(f"- {name}: closest template category is '{category}'")
    return hints


def build_stability_prompt(
    conditions: Sequence[str],
    datasets: Mapping[str, ReferenceDataset],
    vitals: Sequence[VitalsRecord],
    *,
    time_range_days: int = 30,
    vitals_limit: int = DEFAULT_VITALS_PROMPT_LIMIT,
) -> str:
    """Stability-scoring prompt: conditions, dataset exemplars, recent vitals.

    Only the ``vitals_limit`` most recent records are embedded.
    """
    recent = [record.to_prompt_dict() for record in vitals[:vitals_limit]]
    parts: list[str] = []

    parts.append(
        "## Task\n"
        "Analyse this person's vital signs by comparing them with the reference "
        "datasets below (Stable, At-Risk, Critical patterns) and refine the result "
        "with general health knowledge."
    )
    parts.append(f"## Reference Datasets\n```json\n{_datasets_json(datasets)}\n```")
    parts.append(
        "## Patient Data\n"
        f"Conditions: {_conditions_text(conditions)}\n"
        f"Time period: last {time_range_days} days\n"
        f"Recent vital signs (most recent first, {len(recent)} entries):\n"
        f"```json\n{json.dumps(recent, indent=2, default=str)}\n```"
    )

    if vitals:
        hints = _pattern_hints(datasets, vitals[0])
        if hints:
            parts.append("## Template Match For Latest Entry\n" + "\n".join(hints))

    parts.append(
        "## Steps\n"
        "1. Compare the readings directly with the dataset patterns.\n"
        "2. Decide which category (Stable, At-Risk, Critical) they match most closely.\n"
        "3. Refine the assessment considering trends and context.\n"
        "4. Give a stability score from 0 to 100.\n"
        "5. Explain the score in 2-3 sentences, referencing dataset patterns.\n"
        "6. Forecast potential risks for the next 48-72 hours in 1-2 sentences."
    )
    parts.append(
        "## Required Output\n"
        "Return ONLY a JSON object with exactly this structure:\n"
        "{\n"
        '  "score": <number between 0 and 100>,\n'
        '  "summary": "<2-3 sentences explaining the score>",\n'
        '  "riskForecast": "<1-2 sentences about the next 48-72 hours>"\n'
        "}"
    )
    return "\n\n".join(parts)


def build_nudge_prompt(
    first_name: str,
    conditions: Sequence[str],
    datasets: Mapping[str, ReferenceDataset],
    latest: VitalsRecord,
) -> str:
    """Nudge prompt: datasets plus the single latest record."""
    latest_json = json.dumps(latest.to_prompt_dict(), indent=2, default=str)
    parts: list[str] = []

    parts.append(
        "## Task\n"
        f"{first_name} lives with {_conditions_text(conditions)} and has just logged "
        "new health data. Compare it with the reference datasets and write three "
        "personal, achievable recommendations."
    )
    parts.append(f"## Reference Datasets\n```json\n{_datasets_json(datasets)}\n```")
    parts.append(f"## Latest Entry\n```json\n{latest_json}\n```")

    hints = _pattern_hints(datasets, latest)
    if hints:
        parts.append("## Template Match\n" + "\n".join(hints))

    parts.append(
        "## Recommendations\n"
        "- diet: specific, actionable nutrition advice based on the condition and latest data\n"
        "- personalCare: a self-care suggestion for physical or mental wellbeing\n"
        "- social: a connection or support suggestion\n"
        f"Be warm and practical, reference their data where relevant, and use "
        f"the name {first_name} naturally."
    )
    parts.append(
        "## Required Output\n"
        "Return ONLY a JSON object with exactly this structure:\n"
        "{\n"
        '  "diet": "<dietary recommendation>",\n'
        '  "personalCare": "<self-care suggestion>",\n'
        '  "social": "<social connection suggestion>"\n'
        "}"
    )
    return "\n\n".join(parts)

