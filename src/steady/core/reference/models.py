"""Data models for condition reference datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

PATTERN_CATEGORIES = ("stable", "at_risk", "critical")


class ConditionLabel(str, Enum):
    """Condition labels a user can carry on their health profile."""

    HYPERTENSION = "Hypertension"
    TYPE_2_DIABETES = "Type 2 Diabetes"
    TYPE_1_DIABETES = "Type 1 Diabetes"
    COPD = "COPD"
    ASTHMA = "Asthma"
    HEART_DISEASE = "Heart Disease"
    CARDIAC_RISK = "Cardiac Risk"
    CHRONIC_KIDNEY_DISEASE = "Chronic Kidney Disease"
    ARTHRITIS = "Arthritis"
    DEPRESSION = "Depression"
    ANXIETY = "Anxiety"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> ConditionLabel | None:
        """Return the label for ``value`` or None when it is not a known condition."""
        try:
            return cls(value)
        except ValueError:
            return None


class DatasetKey(str, Enum):
    """Identifiers of the bundled reference datasets."""

    HYPERTENSION = "hypertension"
    DIABETES = "diabetes"
    HEARTRISK = "heartrisk"


@dataclass(frozen=True)
class ValueRange:
    """Inclusive numeric range; either bound may be open."""

    min: float | None = None
    max: float | None = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True

    def as_dict(self) -> dict[str, float]:
        out: dict[str, float] = {}
        if self.min is not None:
            out["min"] = self.min
        if self.max is not None:
            out["max"] = self.max
        return out


@dataclass(frozen=True)
class PatternExemplar:
    """One labelled vital-sign pattern: a partial vitals template plus text."""

    label: str
    description: str
    vitals: dict[str, ValueRange | str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "description": self.description,
            "vitals": {
                name: value.as_dict() if isinstance(value, ValueRange) else value
                for name, value in self.vitals.items()
            },
        }


@dataclass(frozen=True)
class ReferenceDataset:
    """A condition-family table of stable / at-risk / critical exemplars."""

    id: str
    version: str
    display_name: str
    description: str
    patterns: dict[str, tuple[PatternExemplar, ...]]
    units: dict[str, str] = field(default_factory=dict)

    def exemplars(self, category: str) -> tuple[PatternExemplar, ...]:
        return self.patterns.get(category, ())

    def as_prompt_dict(self) -> dict[str, Any]:
        """Serialisable form embedded in model prompts."""
        return {
            "dataset": self.display_name,
            "description": self.description,
            "units": dict(self.units),
            "patterns": {
                category: [ex.as_dict() for ex in self.exemplars(category)]
                for category in PATTERN_CATEGORIES
            },
        }
