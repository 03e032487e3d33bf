"""
Identity registry — live socket id ↔ Clerk user id.

Source of truth for "is this user online". An identity may hold several
live connections (multi-device); reverse lookup returns the earliest
one still registered.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Bidirectional connection/identity mapping, process scoped."""

    def __init__(self):
        self._by_connection: dict[str, str] = {}
        # identity -> connections in registration order
        self._by_identity: dict[str, list[str]] = {}

    def register(self, connection: str, identity: str) -> None:
        """Associate *connection* with *identity*; last call wins."""
        previous = self._by_connection.get(connection)
        if previous == identity:
            return
        if previous is not None:
            self._unlink(connection, previous)

        self._by_connection[connection] = identity
        self._by_identity.setdefault(identity, []).append(connection)
        logger.info("User %s connected with socket id %s", identity, connection)

    def lookup(self, connection: str) -> str | None:
        return self._by_connection.get(connection)

    def reverse_lookup(self, identity: str) -> str | None:
        connections = self._by_identity.get(identity)
        return connections[0] if connections else None

    def connections_for(self, identity: str) -> list[str]:
        return list(self._by_identity.get(identity, ()))

    def is_online(self, identity: str) -> bool:
        return bool(self._by_identity.get(identity))

    def forget(self, connection: str) -> str | None:
        """Drop the mapping for *connection*; returns the identity it had."""
        identity = self._by_connection.pop(connection, None)
        if identity is not None:
            self._unlink(connection, identity)
        return identity

    def _unlink(self, connection: str, identity: str) -> None:
        connections = self._by_identity.get(identity)
        if not connections:
            return
        if connection in connections:
            connections.remove(connection)
        if not connections:
            del self._by_identity[identity]

    def __len__(self) -> int:
        return len(self._by_connection)

    def __contains__(self, connection: object) -> bool:
        return connection in self._by_connection
