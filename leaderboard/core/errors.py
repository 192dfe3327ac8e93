"""Error taxonomy shared by the stores and the HTTP layer.

The API maps each class to a status code while keeping a stable
machine-readable ``code``. Store failures never carry driver detail in
``message``; the driver exception is chained for logging only.
"""

from __future__ import annotations


class LeaderboardError(Exception):
    """Base class for every failure the leaderboard core reports."""

    code = "LEADERBOARD_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


class InvalidInput(LeaderboardError):
    """Malformed, missing or non-finite request fields."""

    code = "INVALID_INPUT"
    status_code = 400


class UnknownIdentity(LeaderboardError):
    """A submission referenced a player that is not registered."""

    code = "UNKNOWN_IDENTITY"
    status_code = 400


class Conflict(LeaderboardError):
    """Uniqueness violation while inserting; recovered by re-fetching."""

    code = "CONFLICT"
    status_code = 409


class StoreError(LeaderboardError):
    """Unexpected failure inside the backing store."""

    code = "STORE_ERROR"
    status_code = 500


class Unavailable(StoreError):
    """The store could not be reached within the acquisition timeout."""

    code = "UNAVAILABLE"
    status_code = 503


__all__ = [
    "Conflict",
    "InvalidInput",
    "LeaderboardError",
    "StoreError",
    "Unavailable",
    "UnknownIdentity",
]
