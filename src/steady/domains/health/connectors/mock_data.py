"""Demo data for development: one user with two weeks of home readings.

Readings describe a person with mildly elevated, slowly improving blood
pressure, with enough history for trends, statistics and insights.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from steady.domains.health.connectors.in_memory import InMemoryHealthStore
from steady.domains.health.domain_logic.vitals_models import (
    Mood,
    UserHealthProfile,
    VitalsRecord,
)

DEMO_USER_ID = "demo-user"

_DEMO_READINGS = [
    # (days ago, systolic, diastolic, heart rate, weight, temperature, mood)
    (0, 128, 82, 72, 181.4, 98.4, Mood.GOOD),
    (1, 131, 84, 74, 181.8, None, Mood.OKAY),
    (2, 129, 83, 70, None, None, Mood.GOOD),
    (3, 134, 86, 76, 182.0, 98.6, Mood.STRESSED),
    (5, 136, 87, 75, 182.3, None, Mood.TIRED),
    (7, 138, 88, 78, 182.6, 98.5, Mood.OKAY),
    (9, 141, 90, 80, 183.0, None, Mood.STRESSED),
    (11, 139, 89, 77, 183.1, None, Mood.OKAY),
    (13, 142, 91, 79, 183.5, 98.7, Mood.TIRED),
]


def get_demo_profile() -> UserHealthProfile:
    return UserHealthProfile(
        user_id=DEMO_USER_ID,
        display_name="Jordan Rivera",
        conditions=("Hypertension", "Type 2 Diabetes"),
    )


def get_demo_vitals(now: datetime | None = None) -> list[VitalsRecord]:
    """Demo records, most recent first."""
    now = now or datetime.now(timezone.utc)
    return [
        VitalsRecord(
            timestamp=now - timedelta(days=days_ago, hours=1),
            systolic_bp=systolic,
            diastolic_bp=diastolic,
            heart_rate=heart_rate,
            weight=weight,
            temperature=temperature,
            mood=mood,
        )
        for days_ago, systolic, diastolic, heart_rate, weight, temperature, mood in _DEMO_READINGS
    ]


def seed_demo_data(store: InMemoryHealthStore) -> str:
    """Add the demo user and readings; returns the demo user id."""
    store.add_user(get_demo_profile())
    for record in get_demo_vitals():
        store.log_vitals(DEMO_USER_ID, record)
    return DEMO_USER_ID
