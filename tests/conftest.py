"""
Shared test fixtures for Mingle.

Provides an async HTTP test client, a controllable clock, an in-memory
profile store double, a recording notifier, and a coordinator wired to
all of them.
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mingle.matching_engine.coordinator import MatchCoordinator
from mingle.matching_engine.interests import normalize_interests
from mingle.matching_engine.snapshot import ProfileSnapshot

T0 = 1_700_000_000_000  # epoch ms


# --- Clock ---


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.now = start

    def advance(self, ms: int) -> None:
        self.now += ms

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# --- Profiles ---


def _make_profile(user_id: str, interests: str | None = "music, art", **overrides) -> ProfileSnapshot:
    """Build a ProfileSnapshot with test defaults."""
    defaults = {
        "first_name": "Asha",
        "last_name": "Verma",
        "gender": "Female",
        "location": "Mumbai",
        "date_of_birth": date(1996, 3, 14),
        "avatar_url": f"https://cdn.example.com/{user_id}.jpg",
    }
    defaults.update(overrides)
    return ProfileSnapshot(user_id=user_id, interests=normalize_interests(interests), **defaults)


@pytest.fixture
def make_profile():
    """Factory fixture for ProfileSnapshot instances."""
    return _make_profile


@pytest.fixture
def profiles():
    """
    Profile store double backed by ``profiles.data``.

    ``fetch_snapshot`` yields to the event loop once before answering so
    concurrent attempts interleave the way real I/O would.
    """
    store = MagicMock()
    store.data = {}

    async def _fetch(user_id):
        await asyncio.sleep(0)
        return store.data.get(user_id)

    store.fetch_snapshot = AsyncMock(side_effect=_fetch)
    return store


# --- Notifier ---


@pytest.fixture
def notifier():
    """AsyncMock notifier recording every emit."""
    n = AsyncMock()
    n.emit_status = AsyncMock()
    n.emit_room_status = AsyncMock()
    n.enter_room = AsyncMock()
    n.leave_room = AsyncMock()
    n.relay = AsyncMock()
    return n


@pytest.fixture
def statuses(notifier):
    """``statuses(conn)`` -> ``(status, kwargs)`` for every emit_status sent to *conn*, in order."""

    def _statuses(connection: str) -> list[tuple]:
        return [
            (c.args[1], c.kwargs)
            for c in notifier.emit_status.await_args_list
            if c.args[0] == connection
        ]

    return _statuses


# --- Coordinator ---


@pytest.fixture
def coordinator(profiles, notifier, clock):
    return MatchCoordinator(
        profiles=profiles,
        notifier=notifier,
        staleness_ms=15_000,
        requeue_policy="both",
        clock=clock,
    )


@pytest.fixture
def online(coordinator, profiles, make_profile):
    """Register a connection and give its identity a profile."""

    def _online(connection: str, identity: str | None = None, interests: str | None = "music, art", **fields):
        identity = identity or f"user_{connection}"
        coordinator.join(connection, identity)
        profiles.data[identity] = make_profile(identity, interests, **fields)
        return identity

    return _online


# --- HTTP client ---


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client against the FastAPI app."""
    from mingle.main import fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
