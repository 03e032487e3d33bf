"""
Random-match coordinator.

Owns the identity registry, the waiting pool and the session directory
and drives one match attempt from request to pairing:

  1. resolve the requester's identity (unknown → ignored)
  2. fetch the requester's profile (no interests → "profile incomplete")
  3. claim the first fresh waiting entry, or join the pool and wait
  4. fetch the partner's profile (failure → "error finding matches")
  5. require at least one shared interest ("no mutual interest")
  6. open a PENDING room, notify both sides with each other's view

Accept / reject / cancel / disconnect then move the room through
PENDING → CONNECTED | REJECTED and tidy the pool.

Everything runs on one event loop. The pool claim never awaits, and a
connection taking part in an attempt (as requester or as the claimed
partner) is busy until the attempt settles; the two roles are tracked
separately so one ending never clears the other.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from mingle.matching_engine.config import (
    MSG_LOOKUP_FAILED,
    MSG_PEER_DISCONNECTED,
    MSG_PEER_LEFT,
    REQUEUE_POLICY,
    STALENESS_MS,
)
from mingle.matching_engine.errors import (
    IncompleteProfile,
    InvalidTransition,
    MatchAlreadyPending,
    MatchingError,
    NoMutualInterest,
    ProfileLookupFailure,
)
from mingle.matching_engine.interests import shared_interests
from mingle.matching_engine.pool_manager import WaitingEntry, WaitingPool, now_ms
from mingle.matching_engine.registry import IdentityRegistry
from mingle.matching_engine.sessions import MatchRoom, RoomState, SessionDirectory
from mingle.matching_engine.snapshot import ProfileSnapshot, build_peer_view
from mingle.schemas.matching import MatchStatus

if TYPE_CHECKING:
    from mingle.services.notification_service import NotificationService
    from mingle.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class AttemptOutcome(str, enum.Enum):
    """How a single ``find_random_match`` call ended."""

    IGNORED = "ignored"
    WAITING = "waiting"
    PENDING = "pending"
    REJECTED_NO_PROFILE = "rejected_no_profile"
    REJECTED_NO_MUTUAL_INTEREST = "rejected_no_mutual_interest"
    ERROR = "error"


_OUTCOME_FOR_ERROR = {
    IncompleteProfile: AttemptOutcome.REJECTED_NO_PROFILE,
    NoMutualInterest: AttemptOutcome.REJECTED_NO_MUTUAL_INTEREST,
}


class MatchCoordinator:
    """Stateful random matcher. One instance per process."""

    def __init__(
        self,
        profiles: "ProfileService | None" = None,
        notifier: "NotificationService | None" = None,
        registry: IdentityRegistry | None = None,
        pool: WaitingPool | None = None,
        sessions: SessionDirectory | None = None,
        staleness_ms: int = STALENESS_MS,
        requeue_policy: str = REQUEUE_POLICY,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Args:
            profiles: profile store (defaults to the module-level ``profile_service``).
            notifier: status fan-out (defaults to ``notification_service``).
            staleness_ms: waiting entries at least this old are unclaimable.
            requeue_policy: who re-enters the pool after a rejection
                            (``both``, ``rejecter`` or ``none``).
            clock: epoch-ms time source, swapped out by tests.
        """
        self._profiles = profiles
        self._notifier = notifier
        self.registry = registry or IdentityRegistry()
        self.pool = pool or WaitingPool()
        self.sessions = sessions or SessionDirectory()
        self.staleness_ms = staleness_ms
        self.requeue_policy = requeue_policy
        self.clock = clock

        # connections running their own find_random_match
        self._requesting: set[str] = set()
        # waiting connections claimed as partner by another attempt
        self._claimed: set[str] = set()
        # busy connections that cancelled or left before the attempt settled
        self._withdrawn: set[str] = set()

    @property
    def profiles(self) -> "ProfileService":
        if self._profiles is not None:
            return self._profiles
        from mingle.services.profile_service import profile_service
        return profile_service

    @property
    def notifier(self) -> "NotificationService":
        if self._notifier is not None:
            return self._notifier
        from mingle.services.notification_service import notification_service
        return notification_service

    # ── Identity ─────────────────────────────────────────────────────────

    def join(self, connection: str, identity: str) -> None:
        self.registry.register(connection, identity)

    # ── findRandomMatch ──────────────────────────────────────────────────

    async def find_random_match(self, connection: str) -> AttemptOutcome:
        """Run one match attempt for *connection*."""
        identity = self.registry.lookup(connection)
        if identity is None:
            return AttemptOutcome.IGNORED
        if self._busy(connection):
            logger.debug("Socket %s already has a match attempt in flight", connection)
            return AttemptOutcome.IGNORED

        logger.info("User %s is looking for a random match", identity)
        self._requesting.add(connection)
        try:
            return await self._attempt(connection, identity)
        except MatchingError as exc:
            logger.info("Match attempt for %s ended: %s", identity, exc.message)
            await self.notifier.emit_status(connection, MatchStatus.ERROR, message=exc.message)
            return _OUTCOME_FOR_ERROR.get(type(exc), AttemptOutcome.ERROR)
        except Exception:
            logger.exception("Match attempt for %s failed", identity)
            await self.notifier.emit_status(connection, MatchStatus.ERROR, message=MSG_LOOKUP_FAILED)
            return AttemptOutcome.ERROR
        finally:
            self._requesting.discard(connection)
            if connection not in self._claimed:
                self._withdrawn.discard(connection)

    async def _attempt(self, connection: str, identity: str) -> AttemptOutcome:
        room = self.sessions.room_for(connection)
        if room is not None:
            if room.state is RoomState.PENDING:
                raise MatchAlreadyPending()
            # Looking again ends the current conversation
            await self._close_room(room, leaver=connection, message=MSG_PEER_LEFT)

        # A repeated request restarts the wait
        self.pool.remove(connection)

        requester = await self.profiles.fetch_snapshot(identity)
        if requester is None or not requester.interests:
            raise IncompleteProfile()
        if connection in self._withdrawn or self.registry.lookup(connection) != identity:
            return AttemptOutcome.IGNORED

        entry = self.pool.claim_fresh(self.clock(), self.staleness_ms, exclude=connection)
        if entry is None:
            return await self._wait(connection)

        partner = entry.connection
        self._claimed.add(partner)
        try:
            return await self._pair(connection, requester, entry)
        finally:
            self._claimed.discard(partner)
            if partner not in self._requesting:
                self._withdrawn.discard(partner)

    def _busy(self, connection: str) -> bool:
        return connection in self._requesting or connection in self._claimed

    async def _pair(
        self,
        connection: str,
        requester: ProfileSnapshot,
        entry: WaitingEntry,
    ) -> AttemptOutcome:
        partner = entry.connection
        try:
            partner_profile = await self._partner_profile(partner)

            # Either side may have gone away while the partner was being fetched
            if connection in self._withdrawn or self.registry.lookup(connection) is None:
                self._restore(entry)
                return AttemptOutcome.IGNORED
            if partner in self._withdrawn or self.registry.lookup(partner) is None:
                logger.info("Partner %s left before pairing; %s keeps waiting", partner, connection)
                return await self._wait(connection)

            shared = shared_interests(requester.interests, partner_profile.interests)
            if not shared:
                raise NoMutualInterest()

            now = datetime.now(timezone.utc)
            room = MatchRoom.pair(
                connection,
                partner,
                view_for_a=build_peer_view(partner_profile, shared, now),
                view_for_b=build_peer_view(requester, shared, now),
            )
            self.sessions.add(room)
        except Exception:
            # No room was opened, so the claimed partner goes back to waiting
            self._restore(entry)
            raise

        for participant in room.participants:
            await self.notifier.enter_room(participant, room.room_id)
        for participant in room.participants:
            await self.notifier.emit_status(
                participant,
                MatchStatus.PENDING,
                matched_user=room.view_for(participant),
                room_id=room.room_id,
            )
        logger.info(
            "Matched %s with %s in room %s",
            requester.user_id, partner_profile.user_id, room.room_id,
        )
        return AttemptOutcome.PENDING

    async def _partner_profile(self, partner: str) -> ProfileSnapshot:
        partner_identity = self.registry.lookup(partner)
        if partner_identity is None:
            raise ProfileLookupFailure()
        profile = await self.profiles.fetch_snapshot(partner_identity)
        if profile is None:
            raise ProfileLookupFailure()
        return profile

    async def _wait(self, connection: str) -> AttemptOutcome:
        self.pool.admit(connection, self.clock())
        await self.notifier.emit_status(connection, MatchStatus.WAITING)
        return AttemptOutcome.WAITING

    def _restore(self, entry: WaitingEntry) -> None:
        """Return a claimed partner to the pool unless it has since left."""
        partner = entry.connection
        if partner in self._withdrawn or self.registry.lookup(partner) is None:
            return
        if self.sessions.room_for(partner) is not None:
            return
        self.pool.restore(entry)

    # ── randomMatchAccept ────────────────────────────────────────────────

    async def accept(self, connection: str, room_id: str) -> None:
        room = self.sessions.get(room_id)
        if room is None or not room.has(connection):
            return

        try:
            completed = room.accept(connection)
        except InvalidTransition as exc:
            logger.warning("%s", exc)
            return

        if completed:
            for participant in room.participants:
                await self.notifier.emit_status(
                    participant,
                    MatchStatus.CONNECTED,
                    matched_user=room.view_for(participant),
                    room_id=room_id,
                )
            logger.info("Room %s connected", room_id)
        elif room.state is RoomState.PENDING:
            await self.notifier.emit_status(
                connection,
                MatchStatus.WAITING,
                matched_user=room.view_for(connection),
                room_id=room_id,
            )

    # ── randomMatchReject ────────────────────────────────────────────────

    async def reject(self, connection: str, room_id: str) -> None:
        room = self.sessions.get(room_id)
        if room is None or not room.has(connection):
            return

        try:
            room.reject()
        except InvalidTransition as exc:
            logger.warning("%s", exc)
            return

        await self.notifier.emit_room_status(room_id, MatchStatus.REJECTED)
        self.sessions.remove(room_id)
        for participant in room.participants:
            await self.notifier.leave_room(participant, room_id)
        logger.info("Room %s rejected by %s", room_id, connection)

        now = self.clock()
        for participant in self._requeue_targets(room, connection):
            if participant not in self.registry:
                continue
            self.pool.admit(participant, now)
            await self.notifier.emit_status(participant, MatchStatus.WAITING)

    def _requeue_targets(self, room: MatchRoom, rejecter: str) -> list[str]:
        if self.requeue_policy == "both":
            return [rejecter, room.other(rejecter)]
        if self.requeue_policy == "rejecter":
            return [rejecter]
        return []

    # ── cancelRandomMatch ────────────────────────────────────────────────

    def cancel(self, connection: str) -> None:
        """Leave the waiting pool. Has no effect on an open room."""
        self.pool.remove(connection)
        if self._busy(connection):
            self._withdrawn.add(connection)

    # ── disconnect ───────────────────────────────────────────────────────

    async def disconnect(self, connection: str) -> None:
        logger.info("Client disconnected: %s", connection)
        self.registry.forget(connection)
        self.pool.remove(connection)
        if self._busy(connection):
            self._withdrawn.add(connection)

        room = self.sessions.room_for(connection)
        if room is not None:
            await self._close_room(room, leaver=connection, message=MSG_PEER_DISCONNECTED)

    async def _close_room(self, room: MatchRoom, leaver: str, message: str) -> None:
        """Tear down *room* because *leaver* is gone; tell the other side."""
        try:
            room.reject()
        except InvalidTransition:
            pass
        self.sessions.remove(room.room_id)

        remaining = room.other(leaver)
        await self.notifier.emit_status(
            remaining, MatchStatus.REJECTED, room_id=room.room_id, message=message,
        )
        for participant in room.participants:
            await self.notifier.leave_room(participant, room.room_id)
        logger.info("Room %s closed: %s", room.room_id, message)

    # ── Maintenance / stats ──────────────────────────────────────────────

    def sweep_stale(self) -> list[WaitingEntry]:
        """Drop expired waiting entries now instead of at the next claim."""
        expired = self.pool.sweep(self.clock(), self.staleness_ms)
        if expired:
            logger.info("Swept %d stale waiting entries", len(expired))
        return expired

    def stats(self) -> dict:
        oldest = self.pool.oldest_enqueued_at()
        return {
            "waiting": len(self.pool),
            "pending_rooms": self.sessions.count(RoomState.PENDING),
            "connected_rooms": self.sessions.count(RoomState.CONNECTED),
            "online_connections": len(self.registry),
            "oldest_waiting_ms": self.clock() - oldest if oldest is not None else None,
        }


# Module-level singleton (uses default profile store and notifier)
match_coordinator = MatchCoordinator()
