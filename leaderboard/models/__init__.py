"""Database model exports."""

from .identity import Identity
from .score import ScoreRecord

__all__ = [
    "Identity",
    "ScoreRecord",
]
