"""
Profile snapshots and the per-viewer peer view built from them.

A ``ProfileSnapshot`` is what the profile store returns for one
identity during one match evaluation; it is never cached. At pairing
time each side gets a ``MatchedUser`` describing the *other* side.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

from mingle.matching_engine.config import PLACEHOLDER_AVATAR_URL
from mingle.schemas.matching import MatchedUser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ProfileSnapshot:
    user_id: str
    interests: tuple[str, ...] = ()
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    gender: str | None = None
    location: str | None = None
    date_of_birth: date | datetime | None = None
    avatar_url: str | None = None


def compute_age(birth: date | datetime | None, now: datetime | None = None) -> int | None:
    """
    Age in years via elapsed-time arithmetic.

    The elapsed time since *birth* is laid on top of the Unix epoch and
    the distance of the resulting UTC year from 1970 is the age. This
    is not calendar-exact around birthdays (leap days shift it by up to
    a day or so) and is kept that way for client compatibility.
    """
    if birth is None:
        return None
    if not isinstance(birth, datetime):
        birth = datetime(birth.year, birth.month, birth.day, tzinfo=timezone.utc)
    elif birth.tzinfo is None:
        birth = birth.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return abs((EPOCH + (now - birth)).year - 1970)


def display_name(profile: ProfileSnapshot) -> str:
    """display_name → "first last" → username → "User {last 4 of id}"."""
    if profile.display_name and profile.display_name.strip():
        return profile.display_name.strip()

    full = " ".join(p.strip() for p in (profile.first_name, profile.last_name) if p and p.strip())
    if full:
        return full

    if profile.username and profile.username.strip():
        return profile.username.strip()

    return f"User {profile.user_id[-4:]}"


def build_peer_view(
    peer: ProfileSnapshot,
    shared: tuple[str, ...] = (),
    now: datetime | None = None,
) -> MatchedUser:
    """Denormalize *peer* into the view the other participant receives."""
    return MatchedUser(
        id=peer.user_id,
        name=display_name(peer),
        age=compute_age(peer.date_of_birth, now),
        location=peer.location,
        gender=peer.gender,
        avatar=peer.avatar_url or PLACEHOLDER_AVATAR_URL,
        interests=shared,
    )
