"""MCP tools for model-backed health insights.

Stability assessment and nudges always answer: model failures degrade to
deterministic results inside the engine. Only an unknown user is reported
as an error.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from steady.domains.health.services.health_service import HealthInsightService

from steady.domains.health.connectors import UserNotFoundError

logger = logging.getLogger(__name__)


def _not_found(exc: UserNotFoundError) -> str:
    logger.info("Insight request for unknown user: %s", exc)
    return json.dumps({"status": "error", "message": str(exc)})


def register_insight_tools(mcp: FastMCP, service: HealthInsightService) -> None:
    """Register stability, nudge and dashboard tools on the MCP server."""

    @mcp.tool
    async def stability_assessment(ctx: Context, user_id: str) -> str:
        """Score how stable your recent vitals are (0-100) with a short forecast.

        Uses the last 30 days of readings compared against reference patterns
        for your health conditions.

        Args:
            user_id: The user whose vitals are assessed.
        """
        try:
            assessment = await service.get_stability_assessment(user_id)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps(assessment.to_dict())

    @mcp.tool
    async def health_nudges(ctx: Context, user_id: str) -> str:
        """Get today's diet, personal-care and social suggestions.

        Args:
            user_id: The user the suggestions are for.
        """
        try:
            nudges = await service.get_nudge_set(user_id)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps(nudges.to_dict())

    @mcp.tool
    async def dashboard(ctx: Context, user_id: str, window_days: int = 30) -> str:
        """Everything the dashboard shows: latest vitals, charts, statistics and insights.

        Args:
            user_id: The user whose dashboard is assembled.
            window_days: How many days of history to include (default 30).
        """
        if window_days < 1:
            return json.dumps({"status": "error", "message": "window_days must be at least 1"})
        try:
            payload = await service.get_dashboard(user_id, window_days)
        except UserNotFoundError as exc:
            return _not_found(exc)
        return json.dumps(payload, indent=2)
