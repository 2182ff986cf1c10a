"""Storage layer for leaderboard score collections."""

from .errors import DeleteError, LeaderboardStoreError, MalformedRecordError, ReadError, WriteError
from .score_store import FirestoreScoreStore, ScoreStore

__all__ = [
    "ScoreStore",
    "FirestoreScoreStore",
    "LeaderboardStoreError",
    "ReadError",
    "WriteError",
    "DeleteError",
    "MalformedRecordError",
]
