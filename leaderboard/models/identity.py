"""Database model for registered players."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class Identity(SQLModel, table=True):
    """Stable numeric identity bound to a unique, case-sensitive username."""

    __tablename__ = "identity"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    username: str = ORMField(max_length=64, index=True, unique=True)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Identity"]
