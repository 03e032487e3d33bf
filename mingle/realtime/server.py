"""
Socket.IO event surface.

Every inbound event is a thin adapter: validate the payload, hand it to
the match coordinator or the chat relay, never let an exception escape
into the transport. Malformed payloads are logged and dropped.
"""

from __future__ import annotations

import logging

import socketio
from pydantic import ValidationError

from mingle.config import settings
from mingle.matching_engine.coordinator import match_coordinator
from mingle.matching_engine.errors import TransientStoreFailure
from mingle.schemas.chat import ChatMessageOut, GroupMessageIn, PrivateMessageIn
from mingle.schemas.matching import RoomRequest
from mingle.services.message_service import message_service
from mingle.services.notification_service import notification_service

logger = logging.getLogger(__name__)

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.CORS_ORIGINS,
)


# ── Connection lifecycle ──────────────────────────────────────────────────


@sio.event
async def connect(sid, environ, auth=None):
    logger.info("New client connected: %s", sid)


@sio.event
async def disconnect(sid, *args):
    await match_coordinator.disconnect(sid)


@sio.on("join")
async def on_join(sid, user_id):
    if not isinstance(user_id, str) or not user_id:
        logger.warning("Ignoring join from %s without a user id", sid)
        return
    match_coordinator.join(sid, user_id)


# ── Chat relay ────────────────────────────────────────────────────────────


@sio.on("privateMessage")
async def on_private_message(sid, data):
    try:
        payload = PrivateMessageIn.model_validate(data)
    except ValidationError:
        logger.warning("Malformed privateMessage from %s", sid)
        return

    sender_id = match_coordinator.registry.lookup(sid)
    try:
        await message_service.save_private(sender_id, payload.recipient_id, payload.message)
    except TransientStoreFailure:
        logger.exception("Error inserting private message")

    out = ChatMessageOut(sender_id=sender_id, message=payload.message).to_wire()
    for connection in match_coordinator.registry.connections_for(payload.recipient_id):
        await notification_service.relay("privateMessage", out, to=connection)


@sio.on("joinRoom")
async def on_join_room(sid, room_id):
    if not isinstance(room_id, str) or not room_id:
        logger.warning("Ignoring joinRoom from %s without a room id", sid)
        return
    await notification_service.enter_room(sid, room_id)
    logger.info("Socket %s joined room %s", sid, room_id)


@sio.on("groupMessage")
async def on_group_message(sid, data):
    try:
        payload = GroupMessageIn.model_validate(data)
    except ValidationError:
        logger.warning("Malformed groupMessage from %s", sid)
        return

    sender_id = match_coordinator.registry.lookup(sid)
    try:
        await message_service.save_group(sender_id, payload.room_id, payload.message)
    except TransientStoreFailure:
        logger.exception("Error inserting group message")

    out = ChatMessageOut(sender_id=sender_id, message=payload.message).to_wire()
    await notification_service.relay("groupMessage", out, room=payload.room_id, skip=sid)


# ── Random matching ───────────────────────────────────────────────────────


@sio.on("findRandomMatch")
async def on_find_random_match(sid, *args):
    await match_coordinator.find_random_match(sid)


@sio.on("randomMatchAccept")
async def on_random_match_accept(sid, data):
    try:
        request = RoomRequest.model_validate(data)
    except ValidationError:
        logger.warning("Malformed randomMatchAccept from %s", sid)
        return
    await match_coordinator.accept(sid, request.room_id)


@sio.on("randomMatchReject")
async def on_random_match_reject(sid, data):
    try:
        request = RoomRequest.model_validate(data)
    except ValidationError:
        logger.warning("Malformed randomMatchReject from %s", sid)
        return
    await match_coordinator.reject(sid, request.room_id)


@sio.on("cancelRandomMatch")
async def on_cancel_random_match(sid, *args):
    match_coordinator.cancel(sid)
