"""Tests for stability and nudge prompt construction."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from steady.core.reference.matcher import select_relevant_datasets
from steady.domains.health.domain_logic.insight_prompts import (
    build_nudge_prompt,
    build_stability_prompt,
)
from steady.domains.health.domain_logic.vitals_models import VitalsRecord


def _records(n: int) -> list[VitalsRecord]:
    now = datetime.now(timezone.utc) - timedelta(hours=1)
    return [
        VitalsRecord(timestamp=now - timedelta(days=i), heart_rate=60 + i, notes=f"entry-{i}")
        for i in range(n)
    ]


class TestStabilityPrompt:
    def test_embeds_conditions_datasets_and_output_shape(self, dataset_store):
        datasets = select_relevant_datasets(dataset_store, ["Hypertension"])
        prompt = build_stability_prompt(["Hypertension"], datasets, _records(2))
        assert "Conditions: Hypertension" in prompt
        assert '"Hypertension"' in prompt
        assert "Severely elevated" in prompt
        assert '"riskForecast"' in prompt
        assert "last 30 days" in prompt

    def test_only_ten_most_recent_records(self, dataset_store):
        datasets = select_relevant_datasets(dataset_store, [])
        prompt = build_stability_prompt([], datasets, _records(15))
        assert "entry-9" in prompt
        assert "entry-10" not in prompt
        assert "10 entries" in prompt
        assert "general wellness" in prompt

    def test_limit_is_configurable(self, dataset_store):
        datasets = select_relevant_datasets(dataset_store, [])
        prompt = build_stability_prompt([], datasets, _records(5), vitals_limit=2)
        assert "entry-1" in prompt
        assert "entry-2" not in prompt

    def test_template_hint_for_latest_entry(self, dataset_store):
        datasets = select_relevant_datasets(dataset_store, ["Hypertension"])
        record = VitalsRecord(
            timestamp=datetime.now(timezone.utc) - timedelta(hours=1),
            systolic_bp=185,
            diastolic_bp=115,
        )
        prompt = build_stability_prompt(["Hypertension"], datasets, [record])
        assert "closest template category is 'critical'" in prompt


class TestNudgePrompt:
    def test_embeds_name_and_latest_entry(self, dataset_store):
        datasets = select_relevant_datasets(dataset_store, ["Type 2 Diabetes"])
        latest = _records(1)[0]
        prompt = build_nudge_prompt("Ada", ["Type 2 Diabetes"], datasets, latest)
        assert "Ada lives with Type 2 Diabetes" in prompt
        assert "entry-0" in prompt
        assert '"personalCare"' in prompt
        assert '"id"' not in prompt
