"""
Pydantic schemas for random-match events and status payloads.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchStatus(str, Enum):
    WAITING = "waiting"
    PENDING = "pending"
    CONNECTED = "connected"
    REJECTED = "rejected"
    ERROR = "error"


class MatchedUser(BaseModel):
    """What one participant sees of the other. Computed once per pairing."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    age: int | None = None
    location: str | None = None
    gender: str | None = None
    avatar: str
    interests: tuple[str, ...] = ()


class MatchStatusPayload(BaseModel):
    """Body of every outbound ``randomMatchStatus`` event."""

    model_config = ConfigDict(populate_by_name=True)

    status: MatchStatus
    matched_user: MatchedUser | None = Field(default=None, alias="matchedUser")
    room_id: str | None = Field(default=None, alias="roomId")
    message: str | None = None

    def to_wire(self) -> dict:
        """camelCase dict with absent fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RoomRequest(BaseModel):
    """Inbound ``randomMatchAccept`` / ``randomMatchReject`` body."""

    room_id: str = Field(alias="roomId", min_length=1)


class MatchingPoolStatus(BaseModel):
    """Current state of the waiting pool and session directory."""

    waiting: int
    pending_rooms: int
    connected_rooms: int
    online_connections: int
    oldest_waiting_ms: int | None


class SweepResult(BaseModel):
    expired: int
    remaining: int
