"""Statistics, trend deltas, and data-quality scoring over a vitals window.

All functions are pure. Inputs are most-recent-first sequences of
VitalsRecord (or wire-format dicts, as read from an external store); values
that are missing, non-numeric, non-finite or not strictly positive are
ignored.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from steady.domains.health.domain_logic.vitals_models import (
    NUMERIC_FIELDS,
    TRACKABLE_FIELDS,
    DataQualityScore,
    FieldAverage,
    FieldTrend,
    Statistics,
    TrendReport,
    VitalsRecord,
)

logger = logging.getLogger(__name__)

RecordLike = Union[VitalsRecord, Mapping[str, Any]]

CONSISTENCY_WINDOW_DAYS = 7
COMPLETENESS_WEIGHT = 0.6
CONSISTENCY_WEIGHT = 0.4

CHART_SERIES = ("bloodPressure", "heartRate", "weight", "temperature", "mood")


def _round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def _raw(record: RecordLike, wire_name: str) -> Any:
    return record.get(wire_name)


def _timestamp(record: RecordLike) -> datetime | None:
    ts = record.timestamp if isinstance(record, VitalsRecord) else record.get("timestamp")
    if isinstance(ts, str):
        try:
            ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(ts, datetime):
        return None
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _positive_number(value: Any) -> float | None:
    """Parse a value the way a lenient float parse would; keep finite positives."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def field_values(records: Sequence[RecordLike], wire_name: str) -> list[float]:
    """All valid (finite, strictly positive) values of a numeric field."""
    values = []
    for record in records:
        number = _positive_number(_raw(record, wire_name))
        if number is not None:
            values.append(number)
    return values


def _mean(values: Sequence[float]) -> float | None:
    """Mean of the values, or None when empty or not representable."""
    if not values:
        return None
    count = len(values)
    # Dividing first keeps values near the float ceiling from overflowing the sum.
    mean = math.fsum(v / count for v in values)
    return mean if math.isfinite(mean) else None


def field_average(records: Sequence[RecordLike], wire_name: str) -> float | None:
    return _mean(field_values(records, wire_name))


def compute_statistics(records: Sequence[RecordLike]) -> Statistics | None:
    """Entry count, date range and per-field averages, or None when empty.

    Fields with no valid observation are left out of ``averages``.
    """
    if not records:
        return None

    averages: dict[str, FieldAverage] = {}
    for wire_name in NUMERIC_FIELDS.values():
        values = field_values(records, wire_name)
        mean = _mean(values)
        if mean is not None:
            averages[wire_name] = FieldAverage(value=mean, count=len(values))

    return Statistics(
        total_entries=len(records),
        start=_timestamp(records[-1]),
        end=_timestamp(records[0]),
        averages=averages,
    )


def split_halves(
    records: Sequence[RecordLike],
) -> tuple[Sequence[RecordLike], Sequence[RecordLike]]:
    """Split a most-recent-first window into (recent, older).

    The recent half takes the extra record when the length is odd.
    """
    midpoint = (len(records) + 1) // 2
    return records[:midpoint], records[midpoint:]


def compute_trends(records: Sequence[RecordLike]) -> TrendReport | None:
    """Compare the recent half's averages with the older half's.

    Returns None for fewer than two records. Fields without a valid value in
    both halves are omitted.
    """
    if len(records) < 2:
        return None

    recent, older = split_halves(records)
    logger.debug("Trend split: %d recent, %d older", len(recent), len(older))
    trends: dict[str, FieldTrend] = {}
    for wire_name in NUMERIC_FIELDS.values():
        recent_avg = field_average(recent, wire_name)
        older_avg = field_average(older, wire_name)
        if recent_avg is None or older_avg is None:
            continue

        change = recent_avg - older_avg
        ratio = change / older_avg * 1000
        if not (math.isfinite(change) and math.isfinite(ratio)):
            logger.debug("Skipping trend for %s: change is not finite", wire_name)
            continue
        percent_change = _round_half_up(ratio) / 10
        if change > 0:
            direction = "up"
        elif change < 0:
            direction = "down"
        else:
            direction = "stable"
        trends[wire_name] = FieldTrend(
            change=change,
            percent_change=percent_change,
            direction=direction,
        )

    return TrendReport(fields=trends, recent_count=len(recent), older_count=len(older))


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return bool(value)


def compute_data_quality(
    records: Sequence[RecordLike],
    *,
    now: datetime | None = None,
) -> DataQualityScore:
    """Blend field completeness (60%) with logging consistency (40%).

    completeness: mean share of trackable fields filled per record.
    consistency: records in the last 7 days over 7, capped at 1.
    """
    if not records:
        return DataQualityScore(score=0, completeness=0, consistency=0, message="No data available")

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=CONSISTENCY_WINDOW_DAYS)

    trackable = list(TRACKABLE_FIELDS.values())
    completeness = sum(
        sum(1 for name in trackable if _filled(_raw(record, name))) / len(trackable)
        for record in records
    ) / len(records)

    recent_entries = 0
    for record in records:
        ts = _timestamp(record)
        if ts is not None and ts >= cutoff:
            recent_entries += 1
    consistency = min(1.0, recent_entries / CONSISTENCY_WINDOW_DAYS)

    overall = (completeness * COMPLETENESS_WEIGHT + consistency * CONSISTENCY_WEIGHT) * 100
    if overall > 70:
        message = "Excellent data quality"
    elif overall > 40:
        message = "Good data quality"
    else:
        message = "Consider logging more consistently"

    return DataQualityScore(
        score=int(_round_half_up(overall)),
        completeness=int(_round_half_up(completeness * 100)),
        consistency=int(_round_half_up(consistency * 100)),
        message=message,
    )


def format_vitals_for_charts(records: Sequence[VitalsRecord]) -> dict[str, list[dict[str, Any]]]:
    """Chronological (oldest-first) series per chart for the dashboard."""
    charts: dict[str, list[dict[str, Any]]] = {name: [] for name in CHART_SERIES}

    for record in reversed(records):
        point = {
            "date": record.timestamp.date().isoformat(),
            "timestamp": record.timestamp.isoformat(),
        }
        if record.systolic_bp and record.diastolic_bp:
            charts["bloodPressure"].append(
                {**point, "systolic": record.systolic_bp, "diastolic": record.diastolic_bp}
            )
        if record.heart_rate:
            charts["heartRate"].append({**point, "heartRate": record.heart_rate})
        if record.weight:
            charts["weight"].append({**point, "weight": record.weight})
        if record.temperature:
            charts["temperature"].append({**point, "temperature": record.temperature})
        if record.mood:
            charts["mood"].append({**point, "mood": record.mood.value})

    return charts
