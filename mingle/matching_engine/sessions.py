"""
Session directory — random-match rooms from pairing to teardown.

A room is created PENDING the moment a compatible pair is found,
becomes CONNECTED once both participants accept, and REJECTED when
either side rejects (or leaves). Transitions that the current state
does not allow raise ``InvalidTransition``.

The directory indexes rooms by participant so disconnect cleanup does
not need to scan every room.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from mingle.matching_engine.config import ROOM_PREFIX
from mingle.matching_engine.errors import InvalidTransition
from mingle.schemas.matching import MatchedUser

logger = logging.getLogger(__name__)


class RoomState(str, enum.Enum):
    PENDING = "pending"
    CONNECTED = "connected"
    REJECTED = "rejected"


def room_id_for(a: str, b: str) -> str:
    """Deterministic room id for a pair, independent of who initiated."""
    first, second = sorted((a, b))
    return f"{ROOM_PREFIX}-{first}-{second}"


@dataclass
class MatchRoom:
    room_id: str
    participants: tuple[str, str]
    # viewer connection -> what that viewer sees of the other participant
    peer_views: dict[str, MatchedUser]
    acceptance: dict[str, bool] = field(default_factory=dict)
    state: RoomState = RoomState.PENDING

    def __post_init__(self):
        a, b = self.participants
        if a == b:
            raise ValueError("A room needs two distinct participants")
        self.acceptance = {a: False, b: False}

    @classmethod
    def pair(
        cls,
        a: str,
        b: str,
        view_for_a: MatchedUser,
        view_for_b: MatchedUser,
    ) -> "MatchRoom":
        return cls(
            room_id=room_id_for(a, b),
            participants=(a, b),
            peer_views={a: view_for_a, b: view_for_b},
        )

    # ── queries ─────────────────────────────────────────────────────────

    def has(self, connection: str) -> bool:
        return connection in self.acceptance

    def other(self, connection: str) -> str:
        a, b = self.participants
        return b if connection == a else a

    def view_for(self, connection: str) -> MatchedUser:
        return self.peer_views[connection]

    @property
    def all_accepted(self) -> bool:
        return all(self.acceptance.values())

    # ── transitions ─────────────────────────────────────────────────────

    def accept(self, connection: str) -> bool:
        """
        Record *connection*'s acceptance.

        Returns True only for the accept that completes the handshake
        (PENDING → CONNECTED). Accepting an already CONNECTED room is a
        no-op returning False.
        """
        if self.state is RoomState.REJECTED:
            raise InvalidTransition(self.room_id, self.state.value, "accept")
        if self.state is RoomState.CONNECTED:
            return False

        self.acceptance[connection] = True
        if self.all_accepted:
            self.state = RoomState.CONNECTED
            return True
        return False

    def reject(self) -> None:
        """PENDING or CONNECTED → REJECTED."""
        if self.state is RoomState.REJECTED:
            raise InvalidTransition(self.room_id, self.state.value, "reject")
        self.state = RoomState.REJECTED


class SessionDirectory:
    """Live rooms keyed by room id, with a participant → room index."""

    def __init__(self):
        self._rooms: dict[str, MatchRoom] = {}
        self._by_participant: dict[str, str] = {}

    def add(self, room: MatchRoom) -> None:
        for connection in room.participants:
            current = self._by_participant.get(connection)
            if current is not None and current != room.room_id:
                raise ValueError(f"{connection} already belongs to room {current}")
        self._rooms[room.room_id] = room
        for connection in room.participants:
            self._by_participant[connection] = room.room_id

    def get(self, room_id: str) -> MatchRoom | None:
        return self._rooms.get(room_id)

    def room_for(self, connection: str) -> MatchRoom | None:
        room_id = self._by_participant.get(connection)
        return self._rooms.get(room_id) if room_id else None

    def remove(self, room_id: str) -> MatchRoom | None:
        room = self._rooms.pop(room_id, None)
        if room is None:
            return None
        for connection in room.participants:
            if self._by_participant.get(connection) == room_id:
                del self._by_participant[connection]
        return room

    def count(self, state: RoomState) -> int:
        return sum(1 for room in self._rooms.values() if room.state is state)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
