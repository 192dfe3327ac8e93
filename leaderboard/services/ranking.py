"""Ordered, capped views over the score ledger."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlmodel import select

from ..core.database import Database
from ..core.errors import InvalidInput
from ..models import Identity, ScoreRecord
from .ledger import MergePolicy, record_to_dict

DEFAULT_MAX_SIZE = 100


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    user_id: int
    username: str
    record: ScoreRecord

    @property
    def updated_at(self) -> datetime:
        return self.record.updated_at


def _ordering(policy: MergePolicy):
    # Scalar ties go to whoever reached the score first; tallies break ties
    # on rooms explored. The identity id makes the order total.
    if policy.is_scalar:
        return (
            ScoreRecord.score.desc(),
            ScoreRecord.updated_at.asc(),
            ScoreRecord.identity_id.asc(),
        )
    return (
        ScoreRecord.victories.desc(),
        ScoreRecord.explored.desc(),
        ScoreRecord.defeats.asc(),
        ScoreRecord.identity_id.asc(),
    )


class RankingQuery:
    """Read-only top-N over the ledger; never writes."""

    def __init__(
        self,
        database: Database,
        *,
        policy: Union[MergePolicy, str] = MergePolicy.BEST_OF,
        max_size: int = DEFAULT_MAX_SIZE,
    ) -> None:
        self.database = database
        self.policy = MergePolicy(policy)
        self.max_size = max_size

    def bound(self, n: Optional[int]) -> int:
        """Clamp a requested size to ``max_size``; ``None`` means the maximum."""

        if n is None:
            return self.max_size
        if n < 1:
            raise InvalidInput("limit must be >= 1")
        return min(n, self.max_size)

    def top(self, n: Optional[int] = None) -> List[RankedEntry]:
        limit = self.bound(n)
        statement = (
            select(ScoreRecord, Identity)
            .join(Identity, Identity.id == ScoreRecord.identity_id)
            .order_by(*_ordering(self.policy))
            .limit(limit)
        )
        with self.database.session() as session:
            rows = session.exec(statement).all()

        return [
            RankedEntry(rank=index, user_id=identity.id, username=identity.username, record=record)
            for index, (record, identity) in enumerate(rows, start=1)
        ]


def entry_to_dict(entry: RankedEntry, policy: MergePolicy) -> Dict[str, Any]:
    """Serialise a ranked entry to an API-friendly dict."""

    return {
        "rank": entry.rank,
        "user_id": entry.user_id,
        "username": entry.username,
        **record_to_dict(entry.record, policy),
    }


__all__ = ["DEFAULT_MAX_SIZE", "RankedEntry", "RankingQuery", "entry_to_dict"]
