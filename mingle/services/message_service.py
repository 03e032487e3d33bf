"""
Message store — append-only persistence for chat traffic.

Persistence is decoupled from delivery: callers relay the message
whether or not the insert succeeds. A failed insert surfaces as
``TransientStoreFailure`` for the caller to log.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from mingle.matching_engine.errors import TransientStoreFailure
from mingle.models.message import Message

logger = logging.getLogger(__name__)


class MessageService:

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    @property
    def session_factory(self):
        if self._session_factory is not None:
            return self._session_factory
        from mingle.database import async_session
        return async_session

    async def save_private(self, sender_id: str | None, recipient_id: str, content: str) -> Message:
        return await self._insert(
            Message(room_id=None, sender_id=sender_id, recipient_id=recipient_id, content=content)
        )

    async def save_group(self, sender_id: str | None, room_id: str, content: str) -> Message:
        return await self._insert(
            Message(room_id=room_id, sender_id=sender_id, content=content)
        )

    async def _insert(self, message: Message) -> Message:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(message)
        except SQLAlchemyError as exc:
            raise TransientStoreFailure(f"Could not store message from {message.sender_id}") from exc
        return message


message_service = MessageService()
