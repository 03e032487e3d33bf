"""
In-memory waiting pool for the random matcher.

Holds connections that asked for a match and have not been paired yet,
oldest first. Each entry is stamped with its admission time in epoch
milliseconds.

Expiry is lazy: an entry older than the staleness window is skipped
(and dropped) only when a claim scan reaches it, or when an explicit
``sweep`` runs. Nothing is evicted on a timer by the pool itself.

No method awaits. Under a single event loop that makes every
admit / claim / remove atomic with respect to other handlers, so one
entry can never be claimed twice.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class WaitingEntry:
    connection: str
    enqueued_at: int  # epoch ms

    def is_fresh(self, now: int, staleness_ms: int) -> bool:
        return now - self.enqueued_at < staleness_ms


# WaitingPool ────────────────────────────────────────────────────────────────


class WaitingPool:
    """
    FIFO-ish pool of ``WaitingEntry`` keyed by connection.

    A connection has at most one entry; admitting it again keeps the
    existing entry and its position.
    """

    def __init__(self):
        self._entries: OrderedDict[str, WaitingEntry] = OrderedDict()

    # ── admit / remove ──────────────────────────────────────────────────

    def admit(self, connection: str, now: int | None = None) -> WaitingEntry:
        """Append *connection* to the back of the pool."""
        existing = self._entries.get(connection)
        if existing is not None:
            return existing
        entry = WaitingEntry(connection, now if now is not None else now_ms())
        self._entries[connection] = entry
        logger.info("Socket %s added to waiting pool", connection)
        return entry

    def remove(self, connection: str) -> WaitingEntry | None:
        """Remove the entry for *connection*; no-op if absent."""
        entry = self._entries.pop(connection, None)
        if entry is not None:
            logger.info("Socket %s removed from waiting pool", connection)
        return entry

    def restore(self, entry: WaitingEntry) -> None:
        """
        Put a previously claimed entry back at the front of the pool.

        The original timestamp is kept, so a restored entry expires when
        it would have anyway. Ignored if the connection re-entered the
        pool in the meantime.
        """
        if entry.connection in self._entries:
            return
        self._entries[entry.connection] = entry
        self._entries.move_to_end(entry.connection, last=False)

    # ── claim ───────────────────────────────────────────────────────────

    def claim_fresh(
        self,
        now: int,
        staleness_ms: int,
        exclude: str | None = None,
    ) -> WaitingEntry | None:
        """
        Remove and return the first entry younger than *staleness_ms*.

        Stale entries met along the way are dropped. *exclude* (the
        requester itself) is never returned and keeps its place.
        Returns ``None`` and leaves fresh entries untouched if nothing
        qualifies.
        """
        stale: list[str] = []
        claimed: WaitingEntry | None = None

        for connection, entry in self._entries.items():
            if connection == exclude:
                continue
            if not entry.is_fresh(now, staleness_ms):
                stale.append(connection)
                continue
            claimed = entry
            break

        for connection in stale:
            del self._entries[connection]
        if stale:
            logger.debug("Dropped %d stale waiting entries", len(stale))

        if claimed is not None:
            del self._entries[claimed.connection]
        return claimed

    # ── sweep ───────────────────────────────────────────────────────────

    def sweep(self, now: int, staleness_ms: int) -> list[WaitingEntry]:
        """Drop every stale entry and return what was dropped."""
        expired = [e for e in self._entries.values() if not e.is_fresh(now, staleness_ms)]
        for entry in expired:
            del self._entries[entry.connection]
        return expired

    # ── query ───────────────────────────────────────────────────────────

    def get_entry(self, connection: str) -> WaitingEntry | None:
        return self._entries.get(connection)

    def snapshot(self) -> list[WaitingEntry]:
        """All entries, oldest position first."""
        return list(self._entries.values())

    def oldest_enqueued_at(self) -> int | None:
        if not self._entries:
            return None
        return min(e.enqueued_at for e in self._entries.values())

    def __contains__(self, connection: object) -> bool:
        return connection in self._entries

    def __len__(self) -> int:
        return len(self._entries)
