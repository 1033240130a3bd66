"""Tests for the in-memory vitals and profile store."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from steady.domains.health.connectors import ProfileSource, UserNotFoundError, VitalsSource
from steady.domains.health.connectors.in_memory import InMemoryHealthStore
from steady.domains.health.connectors.mock_data import DEMO_USER_ID, seed_demo_data
from steady.domains.health.domain_logic.vitals_models import VitalsRecord


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _record(days_ago: float, heart_rate: int = 70) -> VitalsRecord:
    return VitalsRecord(
        timestamp=datetime.now(timezone.utc) - timedelta(days=days_ago, hours=1),
        heart_rate=heart_rate,
    )


class TestProtocols:
    def test_store_satisfies_both_sources(self, health_store):
        assert isinstance(health_store, VitalsSource)
        assert isinstance(health_store, ProfileSource)


class TestProfiles:
    def test_get_profile(self, health_store, profile):
        assert _run(health_store.get_user_profile("user-1")) == profile

    def test_unknown_user_raises(self, health_store):
        with pytest.raises(UserNotFoundError):
            _run(health_store.get_user_profile("nobody"))


class TestVitals:
    def test_log_generates_id(self, health_store):
        vitals_id = health_store.log_vitals("user-1", _record(0))
        assert vitals_id
        latest = _run(health_store.get_latest_vitals("user-1"))
        assert latest[0].id == vitals_id

    def test_log_keeps_existing_id(self, health_store):
        record = VitalsRecord(
            timestamp=datetime.now(timezone.utc) - timedelta(hours=1), heart_rate=70, id="fixed"
        )
        assert health_store.log_vitals("user-1", record) == "fixed"

    def test_log_for_unknown_user_raises(self, health_store):
        with pytest.raises(UserNotFoundError):
            health_store.log_vitals("nobody", _record(0))

    def test_most_recent_first_regardless_of_insert_order(self, health_store):
        for days_ago, hr in ((3, 73), (0, 70), (1, 71)):
            health_store.log_vitals("user-1", _record(days_ago, hr))
        recent = _run(health_store.get_recent_vitals("user-1", window_days=30))
        assert [r.heart_rate for r in recent] == [70, 71, 73]

    def test_window_and_limit(self, health_store):
        for days_ago in (0, 1, 2, 10, 40):
            health_store.log_vitals("user-1", _record(days_ago))
        assert len(_run(health_store.get_recent_vitals("user-1", window_days=30))) == 4
        assert len(_run(health_store.get_recent_vitals("user-1", window_days=7))) == 3
        assert len(_run(health_store.get_recent_vitals("user-1", window_days=30, limit=2))) == 2

    def test_latest_ignores_window(self, health_store):
        health_store.log_vitals("user-1", _record(90))
        assert len(_run(health_store.get_latest_vitals("user-1", count=3))) == 1

    def test_delete(self, health_store):
        vitals_id = health_store.log_vitals("user-1", _record(0))
        assert health_store.delete_vitals("user-1", vitals_id)
        assert health_store.count_vitals("user-1") == 0
        assert not health_store.delete_vitals("user-1", vitals_id)


class TestDemoData:
    def test_seed_demo_data(self):
        store = InMemoryHealthStore()
        user_id = seed_demo_data(store)
        assert user_id == DEMO_USER_ID
        profile = _run(store.get_user_profile(user_id))
        assert "Hypertension" in profile.conditions
        recent = _run(store.get_recent_vitals(user_id, window_days=30))
        assert len(recent) == store.count_vitals(user_id) > 2
        assert recent[0].timestamp >= recent[-1].timestamp
