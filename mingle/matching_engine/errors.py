"""
Exceptions raised inside the random-matching engine.

``MatchingError`` subclasses end a single match attempt and are turned
into one ``error`` status for the requester. Nothing here is fatal to
the process.
"""

from mingle.matching_engine.config import (
    MSG_ALREADY_PENDING,
    MSG_LOOKUP_FAILED,
    MSG_NO_MUTUAL_INTEREST,
    MSG_PROFILE_INCOMPLETE,
)


class MatchingError(Exception):
    """Base class for user-facing match attempt failures."""

    message = MSG_LOOKUP_FAILED

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class IncompleteProfile(MatchingError):
    """Requester has no profile or no usable interests."""

    message = MSG_PROFILE_INCOMPLETE


class ProfileLookupFailure(MatchingError):
    """A profile could not be resolved (partner gone, store unreachable)."""

    message = MSG_LOOKUP_FAILED


class NoMutualInterest(MatchingError):
    message = MSG_NO_MUTUAL_INTEREST


class MatchAlreadyPending(MatchingError):
    message = MSG_ALREADY_PENDING


class InvalidTransition(Exception):
    """A room event arrived that its current state does not allow."""

    def __init__(self, room_id: str, state: str, event: str):
        self.room_id = room_id
        self.state = state
        self.event = event
        super().__init__(f"Room {room_id}: cannot {event} while {state}")


class TransientStoreFailure(Exception):
    """Persisting a chat message failed; delivery proceeds regardless."""
