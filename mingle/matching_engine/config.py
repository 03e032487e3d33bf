"""
Matching engine configuration constants.

Defines the staleness window, room naming, status vocabulary and
user-facing error messages used by the random matcher.
"""

from mingle.config import settings

# Waiting entries older than this are skipped by claim scans (lazy expiry)
STALENESS_MS = settings.MATCH_STALENESS_SECONDS * 1000

# Who goes back to the waiting pool after a rejection: both | rejecter | none
REQUEUE_POLICY = settings.MATCH_REQUEUE_POLICY

# Periodic stale-entry sweep; 0 disables it
SWEEP_INTERVAL_SECONDS = settings.MATCH_SWEEP_INTERVAL_SECONDS

# Random-match rooms are named random-{sidA}-{sidB} with the pair sorted
ROOM_PREFIX = "random"

# Outbound event carrying every match state change
STATUS_EVENT = "randomMatchStatus"

PLACEHOLDER_AVATAR_URL = settings.PLACEHOLDER_AVATAR_URL

# User-facing messages
MSG_PROFILE_INCOMPLETE = "profile incomplete"
MSG_LOOKUP_FAILED = "error finding matches"
MSG_NO_MUTUAL_INTEREST = "no mutual interest"
MSG_ALREADY_PENDING = "match already pending"
MSG_PEER_DISCONNECTED = "peer disconnected"
MSG_PEER_LEFT = "peer left"
