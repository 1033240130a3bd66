"""Health insight service: the API the MCP tools call.

Combines the vitals and profile sources with the insight engine and the
aggregator. Insight operations are total with respect to model failures;
aggregation operations return ``None`` for insufficient data and let source
failures propagate. Both raise UserNotFoundError for an unknown user.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from steady.domains.health.connectors import ProfileSource, VitalsSource
from steady.domains.health.domain_logic.insight_engine import InsightEngine, default_nudges
from steady.domains.health.domain_logic.vitals_aggregator import (
    CHART_SERIES,
    compute_data_quality,
    compute_statistics,
    compute_trends,
    format_vitals_for_charts,
)
from steady.domains.health.domain_logic.vitals_models import (
    DataQualityScore,
    NudgeSet,
    StabilityAssessment,
    Statistics,
    TrendReport,
    UserHealthProfile,
    VitalsRecord,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100
DASHBOARD_HISTORY_ENTRIES = 10


class HealthInsightService:
    """Per-user insight and aggregation operations.

    Usage::

        service = HealthInsightService(engine, store, store)
        assessment = await service.get_stability_assessment("u1")
        dashboard = await service.get_dashboard("u1", window_days=30)
    """

    def __init__(
        self,
        engine: InsightEngine,
        vitals_source: VitalsSource,
        profile_source: ProfileSource,
        *,
        stability_window_days: int = 30,
        stability_vitals_limit: int = 10,
        nudge_vitals_count: int = 3,
    ) -> None:
        self.engine = engine
        self.vitals_source = vitals_source
        self.profile_source = profile_source
        self.stability_window_days = stability_window_days
        self.stability_vitals_limit = stability_vitals_limit
        self.nudge_vitals_count = nudge_vitals_count

    # ------------------------------------------------------------------
    # Insights (model-backed, total)
    # ------------------------------------------------------------------

    async def get_stability_assessment(self, user_id: str) -> StabilityAssessment:
        profile = await self.profile_source.get_user_profile(user_id)
        recent = await self.vitals_source.get_recent_vitals(
            user_id, self.stability_window_days, self.stability_vitals_limit
        )
        return await self.engine.calculate_stability_score(profile, recent)

    async def get_nudge_set(self, user_id: str) -> NudgeSet:
        profile = await self.profile_source.get_user_profile(user_id)
        latest = await self.vitals_source.get_latest_vitals(user_id, self.nudge_vitals_count)
        return await self.engine.generate_nudges(profile, latest)

    async def get_dashboard_insights(self, user_id: str) -> dict[str, Any]:
        """Stability score and nudges, computed concurrently."""
        profile = await self.profile_source.get_user_profile(user_id)
        recent, latest = await asyncio.gather(
            self.vitals_source.get_recent_vitals(
                user_id, self.stability_window_days, self.stability_vitals_limit
            ),
            self.vitals_source.get_latest_vitals(user_id, self.nudge_vitals_count),
        )
        assessment, nudges = await asyncio.gather(
            self.engine.calculate_stability_score(profile, recent),
            self.engine.generate_nudges(profile, latest),
        )
        return _insights_payload(assessment, nudges)

    # ------------------------------------------------------------------
    # Aggregation (pure computation over the window)
    # ------------------------------------------------------------------

    async def _window(self, user_id: str, window_days: int) -> list[VitalsRecord]:
        return await self.vitals_source.get_recent_vitals(user_id, window_days, HISTORY_LIMIT)

    async def _user_window(
        self, user_id: str, window_days: int, limit: int = HISTORY_LIMIT
    ) -> list[VitalsRecord]:
        """The window for a known user; raises UserNotFoundError otherwise."""
        await self.profile_source.get_user_profile(user_id)
        return await self.vitals_source.get_recent_vitals(user_id, window_days, limit)

    async def get_statistics(self, user_id: str, window_days: int = 30) -> Statistics | None:
        return compute_statistics(await self._user_window(user_id, window_days))

    async def get_trends(self, user_id: str, window_days: int = 30) -> TrendReport | None:
        return compute_trends(await self._user_window(user_id, window_days))

    async def get_data_quality(self, user_id: str, window_days: int = 30) -> DataQualityScore:
        return compute_data_quality(await self._user_window(user_id, window_days))

    async def get_health_summary(self, user_id: str, window_days: int = 30) -> dict[str, Any]:
        """Period summary: entry count, data quality, trends and statistics."""
        records = await self._user_window(user_id, window_days)
        trends = compute_trends(records)
        statistics = compute_statistics(records)
        return {
            "period": f"{window_days} days",
            "entriesLogged": len(records),
            "lastEntry": records[0].timestamp.isoformat() if records else None,
            "dataQuality": compute_data_quality(records).to_dict(),
            "trends": trends.to_dict() if trends is not None else None,
            "statistics": statistics.to_dict() if statistics is not None else None,
        }

    async def get_vitals_history(
        self, user_id: str, window_days: int = 30, limit: int = HISTORY_LIMIT
    ) -> dict[str, Any]:
        """Entries in the window, newest first, with the total and period."""
        records = await self._user_window(user_id, window_days, limit)
        return {
            "vitals": [r.to_dict() for r in records],
            "total": len(records),
            "period": f"{window_days} days",
        }

    async def get_latest_vitals(self, user_id: str, count: int = 1) -> list[VitalsRecord]:
        await self.profile_source.get_user_profile(user_id)
        return await self.vitals_source.get_latest_vitals(user_id, count)

    async def get_chart_data(
        self, user_id: str, window_days: int = 30, chart_type: str = "all"
    ) -> dict[str, list[dict[str, Any]]]:
        """Oldest-first chart series, either all of them or a single one.

        Raises ValueError for an unknown chart type.
        """
        if chart_type != "all" and chart_type not in CHART_SERIES:
            raise ValueError(
                f"Unknown chart type '{chart_type}'; expected 'all' or one of: "
                f"{', '.join(CHART_SERIES)}"
            )
        charts = format_vitals_for_charts(await self._user_window(user_id, window_days))
        if chart_type == "all":
            return charts
        return {chart_type: charts[chart_type]}

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def get_dashboard(self, user_id: str, window_days: int = 30) -> dict[str, Any]:
        """Profile, history, charts, statistics and insights in one payload.

        Branches run concurrently and each one degrades on its own: a failed
        history branch yields an empty history, a failed insight branch the
        deterministic defaults. Only a profile failure fails the request.
        """
        profile_result, history_result, insights_result = await asyncio.gather(
            self.profile_source.get_user_profile(user_id),
            self._window(user_id, window_days),
            self.get_dashboard_insights(user_id),
            return_exceptions=True,
        )

        if isinstance(profile_result, BaseException):
            raise profile_result
        profile: UserHealthProfile = profile_result

        if isinstance(history_result, BaseException):
            logger.warning("Vitals history unavailable for user %s: %s", user_id, history_result)
            history: list[VitalsRecord] = []
        else:
            history = history_result

        ai_enabled = not isinstance(insights_result, BaseException)
        if ai_enabled:
            insights = insights_result
        else:
            logger.warning("Insights unavailable for user %s: %s", user_id, insights_result)
            insights = _insights_payload(
                self.engine.cold_start_assessment(), default_nudges(profile)
            )

        statistics = compute_statistics(history)
        logger.info("Dashboard assembled for user %s (%d entries)", user_id, len(history))
        return {
            "user": {
                "id": profile.user_id,
                "displayName": profile.display_name,
                "healthConditions": list(profile.conditions),
            },
            "vitals": {
                "latest": history[0].to_dict() if history else None,
                "history": [r.to_dict() for r in history[:DASHBOARD_HISTORY_ENTRIES]],
                "total": len(history),
                "period": f"{window_days} days",
            },
            "charts": format_vitals_for_charts(history),
            "statistics": statistics.to_dict() if statistics is not None else None,
            "dataQuality": compute_data_quality(history).to_dict(),
            "ai": insights,
            "summary": {
                "totalEntries": len(history),
                "latestEntry": history[0].timestamp.isoformat() if history else None,
                "dataAvailable": bool(history),
                "aiEnabled": ai_enabled,
            },
        }


def _insights_payload(assessment: StabilityAssessment, nudges: NudgeSet) -> dict[str, Any]:
    return {
        "stabilityScore": assessment.to_dict(),
        "nudges": nudges.to_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
