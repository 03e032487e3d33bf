"""SQLAlchemy ORM models for Mingle."""

from mingle.models.user_profile import UserProfile
from mingle.models.message import Message

__all__ = [
    "UserProfile",
    "Message",
]
