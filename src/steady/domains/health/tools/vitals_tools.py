"""MCP tools for logging vitals and aggregating them over a window."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from steady.domains.health.connectors.in_memory import InMemoryHealthStore
    from steady.domains.health.services.health_service import HealthInsightService

from steady.domains.health.connectors import UserNotFoundError
from steady.domains.health.domain_logic.vitals_models import VitalsRecord, VitalsValidationError
from steady.domains.health.services.health_service import HISTORY_LIMIT

logger = logging.getLogger(__name__)

MAX_LATEST_COUNT = 50


def _error(message: str) -> str:
    return json.dumps({"status": "error", "message": message})


def _not_found(exc: UserNotFoundError) -> str:
    logger.info("Vitals request for unknown user: %s", exc)
    return _error(str(exc))


def register_vitals_tools(
    mcp: FastMCP,
    service: HealthInsightService,
    health_store: InMemoryHealthStore,
) -> None:
    """Register vitals entry and aggregation tools on the MCP server."""

    # --- Aggregation ---

    @mcp.tool
    async def vitals_statistics(ctx: Context, user_id: str, window_days: int = 30) -> str:
        """Average of each vital over the window, with the number of readings.

        Args:
            user_id: The user whose vitals are summarised.
            window_days: Days of history to include (default 30).
        """
        try:
            statistics = await service.get_statistics(user_id, window_days)
        except UserNotFoundError as exc:
            return _not_found(exc)
        if statistics is None:
            return json.dumps({"statistics": None, "message": "No vitals in this period"})
        return json.dumps({"statistics": statistics.to_dict()})

    @mcp.tool
    async def vitals_trends(ctx: Context, user_id: str, window_days: int = 30) -> str:
        """Compare the recent half of the window with the older half, per vital.

        Args:
            user_id: The user whose vitals are compared.
            window_days: Days of history to include (default 30).
        """
        try:
            trends = await service.get_trends(user_id, window_days)
        except UserNotFoundError as exc:
            return _not_found(exc)
        if trends is None:
            return json.dumps({"trends": None, "message": "At least two entries are needed"})
        return json.dumps({"trends": trends.to_dict()})

    @mcp.tool
    async def data_quality(ctx: Context, user_id: str, window_days: int = 30) -> str:
        """How complete and regular your logging has been.

        Args:
            user_id: The user whose logging is scored.
            window_days: Days of history to include (default 30).
        """
        try:
            quality = await service.get_data_quality(user_id, window_days)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps(quality.to_dict())

    @mcp.tool
    async def health_summary(ctx: Context, user_id: str, window_days: int = 30) -> str:
        """Period summary: entries logged, data quality, trends and statistics.

        Args:
            user_id: The user whose period is summarised.
            window_days: Days of history to include (default 30).
        """
        try:
            summary = await service.get_health_summary(user_id, window_days)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps({"summary": summary}, indent=2)

    @mcp.tool
    async def vitals_history(
        ctx: Context, user_id: str, window_days: int = 30, limit: int = HISTORY_LIMIT
    ) -> str:
        """Entries logged in the window, newest first.

        Args:
            user_id: The user whose entries are returned.
            window_days: Days of history to include (default 30).
            limit: Maximum number of entries (1-100, default 100).
        """
        limit = max(1, min(limit, HISTORY_LIMIT))
        try:
            history = await service.get_vitals_history(user_id, window_days, limit)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps(history)

    @mcp.tool
    async def vitals_charts(
        ctx: Context, user_id: str, window_days: int = 30, chart_type: str = "all"
    ) -> str:
        """Chart-ready series over the window, oldest first.

        Args:
            user_id: The user whose readings are charted.
            window_days: Days of history to include (default 30).
            chart_type: "all", or one of bloodPressure, heartRate, weight,
                temperature, mood.
        """
        try:
            charts = await service.get_chart_data(user_id, window_days, chart_type)
        except UserNotFoundError as exc:
            return _not_found(exc)
        except ValueError as exc:
            return _error(str(exc))
        if not any(charts.values()):
            return json.dumps({"charts": charts, "message": "No data available for charts"})
        return json.dumps({"charts": charts})

    # --- Entry ---

    @mcp.tool
    async def log_vitals(
        ctx: Context,
        user_id: str,
        systolic_bp: int | None = None,
        diastolic_bp: int | None = None,
        heart_rate: int | None = None,
        weight: float | None = None,
        temperature: float | None = None,
        mood: str = "",
        notes: str = "",
        reading_date: str = "",
    ) -> str:
        """Record a set of home readings.

        Blood pressure needs both numbers. At least one vital or a mood is
        required.

        Args:
            user_id: The user logging the readings.
            systolic_bp: Systolic blood pressure (top number), mmHg.
            diastolic_bp: Diastolic blood pressure (bottom number), mmHg.
            heart_rate: Heart rate in BPM.
            weight: Weight in pounds.
            temperature: Body temperature in Fahrenheit.
            mood: One of great, good, okay, stressed, tired, unwell.
            notes: Optional notes (up to 500 characters).
            reading_date: When the readings were taken (ISO 8601). Defaults to now.
        """
        try:
            record = VitalsRecord.from_dict({
                "systolic_bp": systolic_bp,
                "diastolic_bp": diastolic_bp,
                "heart_rate": heart_rate,
                "weight": weight,
                "temperature": temperature,
                "mood": mood,
                "notes": notes,
                "date": reading_date or None,
            })
            vitals_id = health_store.log_vitals(user_id, record)
        except (VitalsValidationError, UserNotFoundError) as exc:
            logger.info("Vitals entry rejected for user %s: %s", user_id, exc)
            return _error(str(exc))

        recorded = [k for k, v in record.to_prompt_dict().items() if k not in ("timestamp", "notes")]
        return json.dumps({
            "status": "saved",
            "vitals_id": vitals_id,
            "recorded": recorded,
            "timestamp": record.timestamp.isoformat(),
        })

    @mcp.tool
    async def latest_vitals(ctx: Context, user_id: str, count: int = 1) -> str:
        """The most recent entries, newest first.

        Args:
            user_id: The user whose entries are returned.
            count: How many entries (1-50, default 1).
        """
        count = max(1, min(count, MAX_LATEST_COUNT))
        try:
            records = await service.get_latest_vitals(user_id, count)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps({"vitals": [r.to_dict() for r in records]})

    @mcp.tool
    async def delete_vitals(ctx: Context, user_id: str, vitals_id: str) -> str:
        """Delete one entry. Entries cannot be edited; delete and log again instead.

        Args:
            user_id: The user who owns the entry.
            vitals_id: ID of the entry to delete.
        """
        if not health_store.delete_vitals(user_id, vitals_id):
            return _error(f"Vitals entry not found: {vitals_id}")
        return json.dumps({"status": "deleted", "vitals_id": vitals_id})
