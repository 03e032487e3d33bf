"""Tests for the profile and message stores against a mocked session."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from mingle.matching_engine.errors import ProfileLookupFailure, TransientStoreFailure
from mingle.models.message import Message
from mingle.models.user_profile import UserProfile
from mingle.services.message_service import MessageService
from mingle.services.profile_service import ProfileService, to_snapshot


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_session():
    """Mock async DB session supporting session.begin() context manager."""
    session = AsyncMock()
    session.add = MagicMock()

    begin_cm = AsyncMock()
    begin_cm.__aenter__ = AsyncMock(return_value=None)
    begin_cm.__aexit__ = AsyncMock(return_value=False)
    session.begin = MagicMock(return_value=begin_cm)

    return session


@pytest.fixture
def mock_session_factory(mock_session):
    """Session factory that returns a context manager yielding mock_session."""

    class _SessionCM:
        async def __aenter__(self):
            return mock_session

        async def __aexit__(self, *args):
            pass

    def factory():
        return _SessionCM()

    return factory


def _returns(session, row):
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    session.execute = AsyncMock(return_value=result)


def _db_down():
    return OperationalError("SELECT", {}, Exception("connection refused"))


def _profile(**overrides) -> UserProfile:
    fields = {
        "user_id": "user_1",
        "first_name": "Asha",
        "last_name": "Verma",
        "interests": "Music; Art, music",
        "gender": "Female",
        "date_of_birth": date(1996, 3, 14),
        "avatar_url": "https://cdn.example.com/a.jpg",
    }
    fields.update(overrides)
    return UserProfile(**fields)


# ---------------------------------------------------------------------------
# Profile store
# ---------------------------------------------------------------------------


class TestProfileService:

    def test_to_snapshot_normalizes_interests(self):
        snap = to_snapshot(_profile())
        assert snap.user_id == "user_1"
        assert snap.interests == ("music", "art")
        assert snap.first_name == "Asha"
        assert snap.date_of_birth == date(1996, 3, 14)

    @pytest.mark.asyncio
    async def test_fetch_snapshot(self, mock_session, mock_session_factory):
        _returns(mock_session, _profile())
        service = ProfileService(session_factory=mock_session_factory)

        snap = await service.fetch_snapshot("user_1")

        assert snap.user_id == "user_1"
        assert snap.interests == ("music", "art")

    @pytest.mark.asyncio
    async def test_fetch_snapshot_missing(self, mock_session, mock_session_factory):
        _returns(mock_session, None)
        service = ProfileService(session_factory=mock_session_factory)
        assert await service.fetch_snapshot("user_9") is None

    @pytest.mark.asyncio
    async def test_fetch_snapshot_store_failure(self, mock_session, mock_session_factory):
        mock_session.execute = AsyncMock(side_effect=_db_down())
        service = ProfileService(session_factory=mock_session_factory)
        with pytest.raises(ProfileLookupFailure):
            await service.fetch_snapshot("user_1")

    @pytest.mark.asyncio
    async def test_upsert_creates(self, mock_session, mock_session_factory):
        _returns(mock_session, None)
        service = ProfileService(session_factory=mock_session_factory)

        profile = await service.upsert(
            "user_1",
            {"first_name": "Asha", "date_of_birth": "1996-03-14T00:00:00Z", "unknown": "x"},
        )

        mock_session.add.assert_called_once_with(profile)
        assert profile.user_id == "user_1"
        assert profile.first_name == "Asha"
        assert profile.date_of_birth == date(1996, 3, 14)
        assert not hasattr(profile, "unknown")

    @pytest.mark.asyncio
    async def test_upsert_updates_existing(self, mock_session, mock_session_factory):
        existing = _profile()
        _returns(mock_session, existing)
        service = ProfileService(session_factory=mock_session_factory)

        profile = await service.upsert("user_1", {"interests": "chess", "location": "Pune"})

        assert profile is existing
        assert existing.interests == "chess"
        assert existing.location == "Pune"
        assert existing.first_name == "Asha"
        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_upsert_bad_date_stored_as_none(self, mock_session, mock_session_factory):
        _returns(mock_session, None)
        service = ProfileService(session_factory=mock_session_factory)
        profile = await service.upsert("user_1", {"date_of_birth": "not a date"})
        assert profile.date_of_birth is None

    @pytest.mark.asyncio
    async def test_delete(self, mock_session, mock_session_factory):
        service = ProfileService(session_factory=mock_session_factory)
        await service.delete("user_1")
        mock_session.execute.assert_awaited_once()


# ---------------------------------------------------------------------------
# Message store
# ---------------------------------------------------------------------------


class TestMessageService:

    @pytest.mark.asyncio
    async def test_save_private(self, mock_session, mock_session_factory):
        service = MessageService(session_factory=mock_session_factory)

        msg = await service.save_private("user_1", "user_2", "hi")

        mock_session.add.assert_called_once_with(msg)
        assert msg.is_private
        assert msg.recipient_id == "user_2"
        assert msg.room_id is None
        assert msg.id is not None
        assert msg.timestamp is not None

    @pytest.mark.asyncio
    async def test_save_group(self, mock_session, mock_session_factory):
        service = MessageService(session_factory=mock_session_factory)

        msg = await service.save_group("user_1", "lobby", "hello")

        assert not msg.is_private
        assert msg.room_id == "lobby"
        assert msg.recipient_id is None

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_session, mock_session_factory):
        mock_session.add.side_effect = _db_down()
        service = MessageService(session_factory=mock_session_factory)
        with pytest.raises(TransientStoreFailure):
            await service.save_private("user_1", "user_2", "hi")

    def test_message_repr(self):
        msg = Message(sender_id="user_1", room_id="lobby", content="x")
        assert repr(msg) == "<Message user_1 -> lobby>"
