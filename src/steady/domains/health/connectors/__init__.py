"""Health data connectors: the vitals and profile sources the engine reads from."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from steady.domains.health.domain_logic.vitals_models import UserHealthProfile, VitalsRecord


class HealthSourceError(Exception):
    """A vitals or profile source could not answer."""


class UserNotFoundError(HealthSourceError):
    """No profile exists for the requested user."""


@runtime_checkable
class VitalsSource(Protocol):
    """Ordered access to a user's logged vitals (most recent first)."""

    async def get_recent_vitals(
        self, user_id: str, window_days: int = 30, limit: int = 100
    ) -> list[VitalsRecord]:
        """Records logged within the last ``window_days`` days, newest first."""
        ...

    async def get_latest_vitals(self, user_id: str, count: int = 1) -> list[VitalsRecord]:
        """The ``count`` most recent records regardless of age."""
        ...


@runtime_checkable
class ProfileSource(Protocol):
    """Read-only access to user health profiles."""

    async def get_user_profile(self, user_id: str) -> UserHealthProfile:
        """Return the profile, or raise UserNotFoundError."""
        ...
