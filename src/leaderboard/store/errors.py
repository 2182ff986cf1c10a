"""Error taxonomy shared by score stores and the reconciliation job."""

from __future__ import annotations


class LeaderboardStoreError(RuntimeError):
    """Base class for failures raised while touching the score collection."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ReadError(LeaderboardStoreError):
    """Raised when the score collection cannot be enumerated."""


class WriteError(LeaderboardStoreError):
    """Raised when a consolidated record cannot be written."""


class DeleteError(LeaderboardStoreError):
    """Raised when a retired record cannot be deleted."""


class MalformedRecordError(LeaderboardStoreError):
    """Raised when a stored record has no usable identity value."""


__all__ = [
    "LeaderboardStoreError",
    "ReadError",
    "WriteError",
    "DeleteError",
    "MalformedRecordError",
]
