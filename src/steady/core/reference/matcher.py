"""Dataset selection and pattern matching for reference datasets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from steady.core.reference.models import (
    ConditionLabel,
    DatasetKey,
    PatternExemplar,
    ReferenceDataset,
    ValueRange,
)
from steady.core.reference.registry import ReferenceDatasetStore

logger = logging.getLogger(__name__)

# Conditions with a dataset of their own. Everything else falls to the default.
CONDITION_DATASETS: dict[ConditionLabel, DatasetKey] = {
    ConditionLabel.HYPERTENSION: DatasetKey.HYPERTENSION,
    ConditionLabel.TYPE_2_DIABETES: DatasetKey.DIABETES,
    ConditionLabel.TYPE_1_DIABETES: DatasetKey.DIABETES,
    ConditionLabel.HEART_DISEASE: DatasetKey.HEARTRISK,
    ConditionLabel.CARDIAC_RISK: DatasetKey.HEARTRISK,
}

# General cardiovascular reference used when no condition maps to a dataset.
DEFAULT_DATASET_KEY = DatasetKey.HYPERTENSION
DEFAULT_DATASET_LABEL = "General Health"

# On equal match scores the more severe category wins.
_SEVERITY_ORDER = ("critical", "at_risk", "stable")


def dataset_key_for(condition: str | ConditionLabel) -> DatasetKey | None:
    """Return the dataset key mapped to a condition, or None when unmapped."""
    label = condition if isinstance(condition, ConditionLabel) else ConditionLabel.parse(condition)
    if label is None:
        return None
    return CONDITION_DATASETS.get(label)


def select_relevant_datasets(
    store: ReferenceDatasetStore,
    conditions: Iterable[str | ConditionLabel],
) -> dict[str, ReferenceDataset]:
    """Map each condition with an available dataset to that dataset.

    When nothing matches, the result has exactly one entry,
    ``"General Health"`` -> the default dataset.
    """
    selected: dict[str, ReferenceDataset] = {}
    for condition in conditions:
        key = dataset_key_for(condition)
        if key is None:
            continue
        dataset = store.get(key.value)
        if dataset is None:
            logger.warning("Dataset %s mapped for %s is not loaded", key.value, condition)
            continue
        name = condition.value if isinstance(condition, ConditionLabel) else condition
        selected[name] = dataset

    if not selected:
        default = store.get(DEFAULT_DATASET_KEY.value)
        if default is None:
            raise LookupError(f"Default dataset {DEFAULT_DATASET_KEY.value!r} is not loaded")
        selected[DEFAULT_DATASET_LABEL] = default

    return selected


def _exemplar_match(exemplar: PatternExemplar, vitals: Mapping[str, Any]) -> float:
    """Fraction of the exemplar's comparable fields that the vitals satisfy."""
    compared = 0
    matched = 0
    for name, template in exemplar.vitals.items():
        value = vitals.get(name)
        if value is None or value == "":
            continue
        compared += 1
        if isinstance(template, ValueRange):
            try:
                if template.contains(float(value)):
                    matched += 1
            except (TypeError, ValueError):
                continue
        elif str(value).lower() == template.lower():
            matched += 1
    return matched / compared if compared else 0.0


def classify_against_patterns(
    dataset: ReferenceDataset,
    vitals: Mapping[str, Any],
) -> str | None:
    """Return the pattern category the vitals match best, or None.

    ``vitals`` uses the wire field names (``bloodPressureSystolic`` etc.).
    """
    best_category: str | None = None
    best_score = 0.0
    for category in _SEVERITY_ORDER:
        for exemplar in dataset.exemplars(category):
            score = _exemplar_match(exemplar, vitals)
            if score > best_score:
                best_score = score
                best_category = category
    return best_category
