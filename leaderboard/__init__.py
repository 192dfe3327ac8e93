"""Leaderboard service: identities, score ledger and rankings."""

__version__ = "0.3.0"
