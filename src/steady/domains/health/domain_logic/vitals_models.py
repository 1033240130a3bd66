"""Vitals records, user profiles, and the insight/aggregation result types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Field catalogue
# ---------------------------------------------------------------------------

# attribute name -> wire name (the JSON field names used by every output)
NUMERIC_FIELDS: dict[str, str] = {
    "systolic_bp": "bloodPressureSystolic",
    "diastolic_bp": "bloodPressureDiastolic",
    "heart_rate": "heartRate",
    "weight": "weight",
    "temperature": "temperature",
}

# Fields counted by the data-quality completeness score.
TRACKABLE_FIELDS: dict[str, str] = {**NUMERIC_FIELDS, "mood": "mood"}

_WIRE_TO_ATTR = {wire: attr for attr, wire in TRACKABLE_FIELDS.items()}

# Accepted ranges (inclusive) for logged values.
VALUE_RANGES: dict[str, tuple[float, float]] = {
    "systolic_bp": (70, 300),
    "diastolic_bp": (40, 200),
    "heart_rate": (30, 220),
    "weight": (50, 1000),        # lb
    "temperature": (90, 115),    # °F
}

MAX_NOTES_LENGTH = 500
MAX_CONDITIONS = 5


class VitalsValidationError(ValueError):
    """A vitals record violates its invariants."""


class Mood(str, Enum):
    GREAT = "great"
    GOOD = "good"
    OKAY = "okay"
    STRESSED = "stressed"
    TIRED = "tired"
    UNWELL = "unwell"


def _utc(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


# ---------------------------------------------------------------------------
# Vitals record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VitalsRecord:
    """One logged observation. Immutable; records are deleted, never edited."""

    timestamp: datetime
    systolic_bp: int | None = None
    diastolic_bp: int | None = None
    heart_rate: int | None = None
    weight: float | None = None
    temperature: float | None = None
    mood: Mood | None = None
    notes: str | None = None
    id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _utc(self.timestamp))
        if self.mood is not None and not isinstance(self.mood, Mood):
            try:
                object.__setattr__(self, "mood", Mood(self.mood))
            except ValueError:
                raise VitalsValidationError(
                    f"Invalid mood {self.mood!r}; expected one of "
                    f"{', '.join(m.value for m in Mood)}"
                ) from None
        self._validate()

    def _validate(self) -> None:
        if self.timestamp > datetime.now(timezone.utc):
            raise VitalsValidationError("Timestamp cannot be in the future")

        for attr, (low, high) in VALUE_RANGES.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise VitalsValidationError(f"{NUMERIC_FIELDS[attr]} must be a number")
            if not math.isfinite(value) or not low <= value <= high:
                raise VitalsValidationError(
                    f"{NUMERIC_FIELDS[attr]} must be between {low:g} and {high:g}"
                )

        for attr in ("systolic_bp", "diastolic_bp", "heart_rate"):
            value = getattr(self, attr)
            if value is not None and value != int(value):
                raise VitalsValidationError(f"{NUMERIC_FIELDS[attr]} must be a whole number")

        has_systolic = self.systolic_bp is not None
        has_diastolic = self.diastolic_bp is not None
        if has_systolic != has_diastolic:
            raise VitalsValidationError(
                "Please provide both systolic and diastolic blood pressure"
            )
        if has_systolic and self.systolic_bp <= self.diastolic_bp:  # type: ignore[operator]
            raise VitalsValidationError(
                "Systolic pressure must be higher than diastolic pressure"
            )

        if self.notes is not None and len(self.notes) > MAX_NOTES_LENGTH:
            raise VitalsValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")

        if not self.has_vitals() and self.mood is None:
            raise VitalsValidationError("Please provide at least one vital sign or mood entry")

    def has_vitals(self) -> bool:
        return any(getattr(self, attr) is not None for attr in NUMERIC_FIELDS)

    def get(self, wire_name: str) -> Any:
        """Value of a field by its wire name."""
        attr = _WIRE_TO_ATTR.get(wire_name, wire_name)
        value = getattr(self, attr, None)
        return value.value if isinstance(value, Mood) else value

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys, ISO timestamp)."""
        return {
            "id": self.id or None,
            "timestamp": self.timestamp.isoformat(),
            "bloodPressureSystolic": self.systolic_bp,
            "bloodPressureDiastolic": self.diastolic_bp,
            "heartRate": self.heart_rate,
            "weight": self.weight,
            "temperature": self.temperature,
            "mood": self.mood.value if self.mood else None,
            "notes": self.notes or None,
        }

    def to_prompt_dict(self) -> dict[str, Any]:
        """Compact form for model prompts: only present fields, no id."""
        data = self.to_dict()
        data.pop("id")
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VitalsRecord:
        """Build a record from wire or snake_case keys; blank strings are absent.

        Raises VitalsValidationError for invalid input.
        """

        def pick(attr: str) -> Any:
            wire = TRACKABLE_FIELDS.get(attr, attr)
            for key in (wire, attr):
                if key in data and not _blank(data[key]):
                    return data[key]
            return None

        def number(attr: str, integer: bool) -> int | float | None:
            raw = pick(attr)
            if raw is None:
                return None
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise VitalsValidationError(
                    f"{TRACKABLE_FIELDS[attr]} must be a number"
                ) from None
            if integer:
                if value != int(value):
                    raise VitalsValidationError(
                        f"{TRACKABLE_FIELDS[attr]} must be a whole number"
                    )
                return int(value)
            return value

        raw_ts = data.get("timestamp") or data.get("date")
        if raw_ts is None:
            timestamp = datetime.now(timezone.utc)
        elif isinstance(raw_ts, datetime):
            timestamp = raw_ts
        else:
            try:
                timestamp = datetime.fromisoformat(str(raw_ts).replace("Z", "+00:00"))
            except ValueError:
                raise VitalsValidationError("Please provide a valid date") from None

        notes = data.get("notes")
        return cls(
            timestamp=timestamp,
            systolic_bp=number("systolic_bp", integer=True),
            diastolic_bp=number("diastolic_bp", integer=True),
            heart_rate=number("heart_rate", integer=True),
            weight=number("weight", integer=False),
            temperature=number("temperature", integer=False),
            mood=pick("mood"),
            notes=None if _blank(notes) else str(notes),
            id=str(data.get("id") or ""),
        )


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserHealthProfile:
    """Read-only view of a user's conditions, owned by the identity subsystem."""

    user_id: str
    display_name: str = ""
    conditions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(dict.fromkeys(self.conditions)))
        if len(self.conditions) > MAX_CONDITIONS:
            raise ValueError(f"A profile can list at most {MAX_CONDITIONS} conditions")

    @property
    def first_name(self) -> str:
        parts = self.display_name.split()
        return parts[0] if parts else "Friend"


# ---------------------------------------------------------------------------
# Insight results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StabilityAssessment:
    """0-100 stability score with rationale and a 48-72h risk forecast.

    ``source`` records which path produced it (model, fallback, cold_start)
    and is not part of the wire format.
    """

    score: int
    summary: str
    risk_forecast: str
    source: str = "model"

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "summary": self.summary, "riskForecast": self.risk_forecast}


@dataclass(frozen=True)
class NudgeSet:
    """Three categorised behavioural recommendations."""

    diet: str
    personal_care: str
    social: str
    source: str = "model"

    def to_dict(self) -> dict[str, str]:
        return {"diet": self.diet, "personalCare": self.personal_care, "social": self.social}


# ---------------------------------------------------------------------------
# Aggregation results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldAverage:
    value: float
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "count": self.count}


@dataclass(frozen=True)
class Statistics:
    """Window statistics: entry count, date range, and per-field averages."""

    total_entries: int
    start: datetime | None
    end: datetime | None
    averages: dict[str, FieldAverage] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEntries": self.total_entries,
            "dateRange": {
                "start": self.start.isoformat() if self.start else None,
                "end": self.end.isoformat() if self.end else None,
            },
            "averages": {name: avg.to_dict() for name, avg in self.averages.items()},
        }


@dataclass(frozen=True)
class FieldTrend:
    change: float
    percent_change: float
    direction: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "change": self.change,
            "percentChange": self.percent_change,
            "direction": self.direction,
        }


@dataclass(frozen=True)
class TrendReport:
    """Per-field comparison of the recent half of a window with the older half."""

    fields: dict[str, FieldTrend]
    recent_count: int
    older_count: int

    def __getitem__(self, name: str) -> FieldTrend:
        return self.fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def to_dict(self) -> dict[str, Any]:
        return {name: trend.to_dict() for name, trend in self.fields.items()}


@dataclass(frozen=True)
class DataQualityScore:
    score: int
    completeness: int
    consistency: int
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "completeness": self.completeness,
            "consistency": self.consistency,
            "message": self.message,
        }
