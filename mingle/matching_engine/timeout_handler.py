"""
Timeout handler — optional periodic sweep of stale waiting entries.

Waiting entries expire lazily: a claim scan skips anything older than
the staleness window. This sweeper only reclaims the memory of
entries nobody scanned past; it never changes who can be matched.
Disabled unless ``MATCH_SWEEP_INTERVAL_SECONDS`` is positive.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mingle.matching_engine.coordinator import MatchCoordinator

logger = logging.getLogger(__name__)


def check_timeouts(coordinator: "MatchCoordinator") -> list[dict]:
    """Drop expired waiting entries and describe what was dropped."""
    return [
        {
            "connection": entry.connection,
            "enqueued_at": entry.enqueued_at,
            "reason": "stale",
        }
        for entry in coordinator.sweep_stale()
    ]


async def run_sweeper(coordinator: "MatchCoordinator", interval_seconds: float) -> None:
    """Call ``check_timeouts`` every *interval_seconds* until cancelled."""
    logger.info("Stale-entry sweeper running every %ss", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            check_timeouts(coordinator)
        except Exception:
            logger.exception("Stale-entry sweep failed")
