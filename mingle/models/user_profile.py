"""
User profile model — the profile store consulted by the matcher.

Rows are written out-of-band by the Clerk identity webhook and read
once per random-match evaluation. ``interests`` is free text as the
user typed it; normalization happens at match time.
"""

from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mingle.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Clerk user id
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    username: Mapped[str | None] = mapped_column(String(100))
    display_name: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255))

    interests: Mapped[str | None] = mapped_column(Text)
    gender: Mapped[str | None] = mapped_column(String(32))
    location: Mapped[str | None] = mapped_column(String(200))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    avatar_url: Mapped[str | None] = mapped_column(Text)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<UserProfile {self.user_id} {self.username or ''}>"
