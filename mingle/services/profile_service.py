"""
Profile store — reads profiles for the matcher, writes them for the webhook.

Backed by the ``user_profiles`` table. The matcher only needs
``fetch_snapshot``; ``upsert`` and ``delete`` are used by the Clerk
identity webhook.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from mingle.matching_engine.errors import ProfileLookupFailure
from mingle.matching_engine.interests import normalize_interests
from mingle.matching_engine.snapshot import ProfileSnapshot
from mingle.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "username",
    "display_name",
    "email",
    "interests",
    "gender",
    "location",
    "date_of_birth",
    "avatar_url",
)


def to_snapshot(profile: UserProfile) -> ProfileSnapshot:
    """Copy an ORM row into an immutable snapshot with normalized interests."""
    return ProfileSnapshot(
        user_id=profile.user_id,
        interests=normalize_interests(profile.interests),
        display_name=profile.display_name,
        first_name=profile.first_name,
        last_name=profile.last_name,
        username=profile.username,
        gender=profile.gender,
        location=profile.location,
        date_of_birth=profile.date_of_birth,
        avatar_url=profile.avatar_url,
    )


class ProfileService:
    """Profile lookups and writes against the database."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    @property
    def session_factory(self):
        if self._session_factory is not None:
            return self._session_factory
        from mingle.database import async_session
        return async_session

    async def fetch_snapshot(self, user_id: str) -> ProfileSnapshot | None:
        """
        Return the profile for *user_id*, or ``None`` if there is none.

        Raises ``ProfileLookupFailure`` when the store itself fails.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(UserProfile).where(UserProfile.user_id == user_id)
                )
                profile = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Profile lookup failed for %s", user_id)
            raise ProfileLookupFailure() from exc

        if profile is None:
            return None
        return to_snapshot(profile)

    async def upsert(self, user_id: str, fields: dict) -> UserProfile:
        """Create or update the profile row; unknown keys are ignored."""
        values = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        if isinstance(values.get("date_of_birth"), str):
            values["date_of_birth"] = _parse_date(values["date_of_birth"])

        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(UserProfile).where(UserProfile.user_id == user_id)
                )
                profile = result.scalar_one_or_none()
                if profile is None:
                    profile = UserProfile(user_id=user_id, **values)
                    session.add(profile)
                else:
                    for key, value in values.items():
                        setattr(profile, key, value)
        return profile

    async def delete(self, user_id: str) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                await session.execute(
                    delete(UserProfile).where(UserProfile.user_id == user_id)
                )


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning("Ignoring unparseable date_of_birth %r", value)
        return None


profile_service = ProfileService()
