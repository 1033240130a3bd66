"""In-process vitals and profile store.

Implements both VitalsSource and ProfileSource. Records are immutable: the
store supports logging and deleting entries, never editing them.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from steady.domains.health.connectors import UserNotFoundError
from steady.domains.health.domain_logic.vitals_models import UserHealthProfile, VitalsRecord

logger = logging.getLogger(__name__)


class InMemoryHealthStore:
    """Dict-backed store for profiles and vitals.

    Usage::

        store = InMemoryHealthStore()
        store.add_user(UserHealthProfile("u1", "Ada Lovelace", ("Hypertension",)))
        vitals_id = store.log_vitals("u1", record)
        recent = await store.get_recent_vitals("u1", window_days=30)
    """

    def __init__(self) -> None:
        self._profiles: dict[str, UserHealthProfile] = {}
        self._vitals: dict[str, list[VitalsRecord]] = {}

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def add_user(self, profile: UserHealthProfile) -> None:
        self._profiles[profile.user_id] = profile
        self._vitals.setdefault(profile.user_id, [])

    async def get_user_profile(self, user_id: str) -> UserHealthProfile:
        profile = self._profiles.get(user_id)
        if profile is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return profile

    # ------------------------------------------------------------------
    # Vitals
    # ------------------------------------------------------------------

    def log_vitals(self, user_id: str, record: VitalsRecord) -> str:
        """Store a record and return its id (generated when empty)."""
        if user_id not in self._profiles:
            raise UserNotFoundError(f"User not found: {user_id}")
        stored = record if record.id else replace(record, id=self._new_id())
        records = self._vitals[user_id]
        records.append(stored)
        records.sort(key=lambda r: r.timestamp, reverse=True)
        logger.info("Vitals %s logged for user %s", stored.id, user_id)
        return stored.id

    def delete_vitals(self, user_id: str, vitals_id: str) -> bool:
        """Delete one record; returns False when it does not exist."""
        records = self._vitals.get(user_id, [])
        for i, record in enumerate(records):
            if record.id == vitals_id:
                del records[i]
                logger.info("Vitals %s deleted for user %s", vitals_id, user_id)
                return True
        return False

    async def get_recent_vitals(
        self, user_id: str, window_days: int = 30, limit: int = 100
    ) -> list[VitalsRecord]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=window_days)
        records = [r for r in self._vitals.get(user_id, []) if r.timestamp >= cutoff]
        return records[:limit]

    async def get_latest_vitals(self, user_id: str, count: int = 1) -> list[VitalsRecord]:
        return list(self._vitals.get(user_id, [])[:count])

    def count_vitals(self, user_id: str) -> int:
        return len(self._vitals.get(user_id, []))
