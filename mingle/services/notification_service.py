"""
Notification fan-out over Socket.IO.

Delivers ``randomMatchStatus`` payloads to one connection or to every
connection joined to a room channel, and relays ordinary chat events.
Delivery is best effort: a target that already disconnected is
silently dropped by the server, and emit failures are logged, never
raised into the matcher.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mingle.matching_engine.config import STATUS_EVENT
from mingle.schemas.matching import MatchedUser, MatchStatus, MatchStatusPayload

if TYPE_CHECKING:
    import socketio

logger = logging.getLogger(__name__)


class NotificationService:
    """Wraps the Socket.IO server so the matcher never touches it directly."""

    def __init__(self, sio: "socketio.AsyncServer | None" = None):
        self._sio = sio

    @property
    def sio(self) -> "socketio.AsyncServer":
        if self._sio is not None:
            return self._sio
        # Lazy import to avoid a cycle with the realtime module
        from mingle.realtime.server import sio as _default
        return _default

    # ── match status ────────────────────────────────────────────────────

    async def emit_status(
        self,
        connection: str,
        status: MatchStatus,
        matched_user: MatchedUser | None = None,
        room_id: str | None = None,
        message: str | None = None,
    ) -> None:
        payload = MatchStatusPayload(
            status=status, matched_user=matched_user, room_id=room_id, message=message,
        )
        await self._emit(STATUS_EVENT, payload.to_wire(), to=connection)

    async def emit_room_status(
        self,
        room_id: str,
        status: MatchStatus,
        message: str | None = None,
    ) -> None:
        payload = MatchStatusPayload(status=status, room_id=room_id, message=message)
        await self._emit(STATUS_EVENT, payload.to_wire(), room=room_id)

    # ── channels ────────────────────────────────────────────────────────

    async def enter_room(self, connection: str, room_id: str) -> None:
        try:
            await self.sio.enter_room(connection, room_id)
        except Exception:
            logger.exception("Could not add socket %s to room %s", connection, room_id)

    async def leave_room(self, connection: str, room_id: str) -> None:
        try:
            await self.sio.leave_room(connection, room_id)
        except Exception:
            logger.exception("Could not remove socket %s from room %s", connection, room_id)

    # ── chat relay ──────────────────────────────────────────────────────

    async def relay(
        self,
        event: str,
        data: dict,
        to: str | None = None,
        room: str | None = None,
        skip: str | None = None,
    ) -> None:
        await self._emit(event, data, to=to, room=room, skip_sid=skip)

    async def _emit(self, event: str, data: dict, **target) -> None:
        target = {k: v for k, v in target.items() if v is not None}
        try:
            await self.sio.emit(event, data, **target)
        except Exception:
            logger.exception("Emit %s to %s failed", event, target)


notification_service = NotificationService()
