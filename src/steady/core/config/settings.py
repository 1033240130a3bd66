"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Steady Health server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the MCP server.
    steady_host: str = "127.0.0.1"
    steady_port: int = 8001
    steady_log_level: str = "info"
    steady_allow_insecure_bind: bool = False

    # Generative model
    llm_provider: Literal["anthropic", "openai", "gemini", "mock"] = "gemini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    llm_timeout_seconds: float = 20.0
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.7

    # Insight policy (arbitrary constants, kept configurable)
    cold_start_score: int = 50
    fallback_score: int = 65
    stability_window_days: int = 30
    stability_vitals_limit: int = 10
    nudge_vitals_count: int = 3

    # Reference datasets (empty = bundled datasets)
    reference_dataset_dir: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
