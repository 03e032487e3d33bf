"""
Random-matching admin endpoints.

Read-only insight into the live waiting pool and session directory,
plus a manual trigger for the stale-entry sweep.
"""

from fastapi import APIRouter

from mingle.matching_engine.coordinator import match_coordinator
from mingle.matching_engine.timeout_handler import check_timeouts
from mingle.schemas.matching import MatchingPoolStatus, SweepResult

router = APIRouter()


@router.get("/pool", response_model=MatchingPoolStatus)
async def get_pool_status():
    """Current waiting / pending / connected counts."""
    return MatchingPoolStatus(**match_coordinator.stats())


@router.post("/sweep", response_model=SweepResult)
async def sweep_stale_entries():
    """Drop expired waiting entries now rather than at the next claim."""
    expired = check_timeouts(match_coordinator)
    return SweepResult(expired=len(expired), remaining=len(match_coordinator.pool))
