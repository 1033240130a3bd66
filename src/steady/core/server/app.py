"""Steady Health MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for `fastmcp run src/steady/core/server/app.py:mcp`
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from fastmcp import FastMCP

from steady.core.config.settings import Settings, get_settings
from steady.core.llm.client import ModelClient
from steady.core.llm.provider import LLMProvider, create_provider
from steady.core.reference.loader import load_dataset_directory
from steady.core.reference.registry import ReferenceDatasetStore
from steady.domains.health.connectors.in_memory import InMemoryHealthStore
from steady.domains.health.connectors.mock_data import seed_demo_data
from steady.domains.health.domain_logic.insight_engine import InsightEngine, InsightPolicy
from steady.domains.health.resources.datasets import register_dataset_resources
from steady.domains.health.services.health_service import HealthInsightService
from steady.domains.health.tools.insight_tools import register_insight_tools
from steady.domains.health.tools.vitals_tools import register_vitals_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Steady Health"
SERVER_VERSION = "0.1.0"

# Bundled reference datasets live under src/steady/domains/health/datasets/
_DATASET_DIR = Path(__file__).resolve().parent.parent.parent / "domains" / "health" / "datasets"


def _build_provider(settings: Settings) -> tuple[str, LLMProvider]:
    """Provider from settings; a missing API key degrades to the mock provider."""
    if settings.llm_provider == "mock":
        provider_name, api_key, model = "mock", "", ""
    elif settings.llm_provider == "anthropic":
        api_key = settings.anthropic_api_key
        model = settings.anthropic_model
        provider_name = "anthropic" if api_key else "mock"
    elif settings.llm_provider == "openai":
        api_key = settings.openai_api_key
        model = settings.openai_model
        provider_name = "openai" if api_key else "mock"
    elif settings.llm_provider == "gemini":
        api_key = settings.gemini_api_key
        model = settings.gemini_model
        provider_name = "gemini" if api_key else "mock"
    else:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

    if provider_name == "mock" and settings.llm_provider != "mock":
        logger.warning(
            "No API key configured for provider '%s'; falling back to mock provider",
            settings.llm_provider,
        )

    return provider_name, create_provider(provider_name=provider_name, api_key=api_key, model=model)


def create_app(
    *,
    store_override: ReferenceDatasetStore | None = None,
    provider_override: LLMProvider | None = None,
    health_store_override: InMemoryHealthStore | None = None,
) -> FastMCP:
    """Create and configure the Steady Health MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Loads and freezes the reference dataset store (fatal on failure)
    3. Creates the model client
    4. Initializes the vitals/profile store (seeded with demo data)
    5. Wires the insight engine and the service
    6. Registers all tools and resources
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Steady Health: home vitals tracking for people managing chronic "
            "conditions. Provides a stability score, daily nudges, statistics, "
            "trends and data-quality feedback through MCP tools."
        ),
    )

    # --- Reference datasets (DatasetLoadError propagates) ---
    if store_override is not None:
        store = store_override
    else:
        dataset_dir = Path(settings.reference_dataset_dir) if settings.reference_dataset_dir else _DATASET_DIR
        store = ReferenceDatasetStore()
        dataset_count = load_dataset_directory(dataset_dir, store)
        logger.info("Loaded %d reference datasets from %s", dataset_count, dataset_dir)
    store.freeze()

    # --- Model client ---
    if provider_override is not None:
        provider_name, provider = "override", provider_override
    else:
        provider_name, provider = _build_provider(settings)
    model_client = ModelClient(
        provider,
        provider_name=provider_name,
        timeout_s=settings.llm_timeout_seconds,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
    )

    # --- Vitals and profile store ---
    if health_store_override is not None:
        health_store = health_store_override
    else:
        health_store = InMemoryHealthStore()
        demo_user = seed_demo_data(health_store)
        logger.info("Using in-memory health store seeded with demo user '%s'", demo_user)

    # --- Engine and service ---
    engine = InsightEngine(
        store,
        model_client,
        InsightPolicy(
            cold_start_score=settings.cold_start_score,
            fallback_score=settings.fallback_score,
            vitals_prompt_limit=settings.stability_vitals_limit,
            time_range_days=settings.stability_window_days,
        ),
    )
    service = HealthInsightService(
        engine,
        health_store,
        health_store,
        stability_window_days=settings.stability_window_days,
        stability_vitals_limit=settings.stability_vitals_limit,
        nudge_vitals_count=settings.nudge_vitals_count,
    )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "datasets_loaded": len(store),
            "llm_provider": provider_name,
        }

    @server.tool
    async def ai_status() -> dict:
        """Check that the configured model is reachable and answering.

        Sends one short prompt. Insights still work when the model is
        unavailable, using deterministic defaults.
        """
        result = await model_client.check_status()
        status = {
            "llm_provider": provider_name,
            "status": "operational" if result.ok else "unavailable",
            "reachable": result.ok,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if not result.ok and result.failure is not None:
            status["failure"] = result.failure.value
        return status

    register_insight_tools(server, service)
    register_vitals_tools(server, service, health_store)
    logger.info("Insight and vitals tools registered")

    # --- Register resources ---
    register_dataset_resources(server, store)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
