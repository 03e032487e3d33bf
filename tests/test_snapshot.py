"""Tests for peer views — display name fallback, age arithmetic, avatar placeholder."""

from datetime import date, datetime, timezone

from mingle.matching_engine.config import PLACEHOLDER_AVATAR_URL
from mingle.matching_engine.snapshot import (
    ProfileSnapshot,
    build_peer_view,
    compute_age,
    display_name,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class TestComputeAge:

    def test_typical(self):
        assert compute_age(date(1996, 3, 14), NOW) == 30

    def test_none(self):
        assert compute_age(None, NOW) is None

    def test_accepts_naive_datetime(self):
        assert compute_age(datetime(1996, 3, 14), NOW) == 30

    def test_elapsed_time_not_calendar(self):
        """The day before a 30th birthday already counts as 30."""
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert compute_age(date(2000, 1, 2), now) == 30

    def test_future_birth_date_is_absolute(self):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert compute_age(date(2031, 1, 1), now) == 1


class TestDisplayName:

    def test_display_name_first(self):
        p = ProfileSnapshot("user_abcd1234", display_name="Ash", first_name="Asha", username="ash96")
        assert display_name(p) == "Ash"

    def test_first_and_last(self):
        p = ProfileSnapshot("user_abcd1234", first_name="Asha", last_name="Verma", username="ash96")
        assert display_name(p) == "Asha Verma"

    def test_first_only(self):
        p = ProfileSnapshot("user_abcd1234", first_name="Asha")
        assert display_name(p) == "Asha"

    def test_username(self):
        p = ProfileSnapshot("user_abcd1234", first_name="  ", username="ash96")
        assert display_name(p) == "ash96"

    def test_generic(self):
        assert display_name(ProfileSnapshot("user_abcd1234")) == "User 1234"


class TestBuildPeerView:

    def test_fields(self):
        p = ProfileSnapshot(
            "user_1",
            interests=("music", "art"),
            first_name="Ravi",
            last_name="Kumar",
            gender="Male",
            location="Pune",
            date_of_birth=date(1996, 3, 14),
            avatar_url="https://cdn.example.com/r.jpg",
        )
        view = build_peer_view(p, shared=("art",), now=NOW)
        assert view.id == "user_1"
        assert view.name == "Ravi Kumar"
        assert view.age == 30
        assert view.location == "Pune"
        assert view.gender == "Male"
        assert view.avatar == "https://cdn.example.com/r.jpg"
        assert view.interests == ("art",)

    def test_avatar_placeholder(self):
        view = build_peer_view(ProfileSnapshot("user_1"), now=NOW)
        assert view.avatar == PLACEHOLDER_AVATAR_URL
        assert view.age is None
