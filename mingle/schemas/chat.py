"""
Pydantic schemas for inbound chat events.
"""

from pydantic import BaseModel, Field


class PrivateMessageIn(BaseModel):
    recipient_id: str = Field(alias="recipientId", min_length=1)
    message: str


class GroupMessageIn(BaseModel):
    room_id: str = Field(alias="roomId", min_length=1)
    message: str


class ChatMessageOut(BaseModel):
    """Relayed to recipients of ``privateMessage`` / ``groupMessage``."""

    sender_id: str | None = Field(default=None, alias="senderId")
    message: str

    model_config = {"populate_by_name": True}

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
