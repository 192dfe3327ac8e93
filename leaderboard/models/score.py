"""Database model for the current ranking state of each player."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class ScoreRecord(SQLModel, table=True):
    """Exactly one row per identity, updated in place by every submission.

    ``score`` is used by the scalar policies; ``victories``, ``defeats`` and
    ``explored`` by the accumulator policy. All four are signed 64-bit.
    """

    __tablename__ = "score_record"

    identity_id: int = ORMField(foreign_key="identity.id", primary_key=True)
    score: int = ORMField(default=0, index=True, sa_type=BigInteger)
    victories: int = ORMField(default=0, sa_type=BigInteger)
    defeats: int = ORMField(default=0, sa_type=BigInteger)
    explored: int = ORMField(default=0, sa_type=BigInteger)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["ScoreRecord"]
