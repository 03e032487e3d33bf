"""
Chat message model — append-only log of private and group messages.

Private messages carry a ``recipient_id`` and no ``room_id``; group
messages carry a ``room_id`` and no recipient.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from mingle.database import Base


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    room_id: Mapped[str | None] = mapped_column(String(200), index=True)
    sender_id: Mapped[str | None] = mapped_column(String(64), index=True)
    recipient_id: Mapped[str | None] = mapped_column(String(64), index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_private(self) -> bool:
        return self.room_id is None

    def __repr__(self) -> str:
        target = self.recipient_id if self.is_private else self.room_id
        return f"<Message {self.sender_id} -> {target}>"


@event.listens_for(Message, "init")
def _set_message_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "timestamp" not in kwargs:
        target.timestamp = datetime.now(timezone.utc)
