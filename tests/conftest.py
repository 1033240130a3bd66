"""Shared test fixtures for Steady Health tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("REFERENCE_DATASET_DIR", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from steady.core.llm.client import ModelClient  # noqa: E402
from steady.core.llm.providers.mock import MockProvider  # noqa: E402
from steady.core.reference.loader import load_dataset_directory  # noqa: E402
from steady.core.reference.registry import ReferenceDatasetStore  # noqa: E402
from steady.domains.health.connectors.in_memory import InMemoryHealthStore  # noqa: E402
from steady.domains.health.domain_logic.vitals_models import UserHealthProfile  # noqa: E402

DATASET_DIR = _SRC_DIR / "steady" / "domains" / "health" / "datasets"

STABILITY_JSON = (
    '{"score": 82, "summary": "Your readings are steady.", '
    '"riskForecast": "Low risk over the next 48-72 hours."}'
)


@pytest.fixture
def dataset_store() -> ReferenceDatasetStore:
    """The bundled reference datasets, loaded and frozen."""
    store = ReferenceDatasetStore()
    load_dataset_directory(DATASET_DIR, store)
    store.freeze()
    return store


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider(STABILITY_JSON)


@pytest.fixture
def model_client(mock_provider: MockProvider) -> ModelClient:
    return ModelClient(mock_provider, timeout_s=1.0)


@pytest.fixture
def profile() -> UserHealthProfile:
    return UserHealthProfile(
        user_id="user-1",
        display_name="Ada Lovelace",
        conditions=("Hypertension",),
    )


@pytest.fixture
def health_store(profile: UserHealthProfile) -> InMemoryHealthStore:
    """An in-memory store with one user and no vitals."""
    store = InMemoryHealthStore()
    store.add_user(profile)
    return store
