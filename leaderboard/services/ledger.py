"""Score ledger: one record per identity, merged under a configured policy.

Every submission is applied as a single ``INSERT ... ON CONFLICT DO UPDATE``
whose merge expression is evaluated by the database, so two concurrent
submissions for the same identity can never lose an update.

Policies
--------
``best_of``
    ``score = max(stored, submitted)``. Replaying an older, lower score is a
    no-op and ``updated_at`` only moves when the score improves.
``latest_wins``
    ``score = submitted``. There is no ordering guarantee: a stale or retried
    submission that arrives late overwrites a newer one.
``accumulator``
    ``victories``, ``defeats`` and ``explored`` are incremented. Replays are
    double counted, so each game result must be submitted exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy import and_, case
from sqlalchemy.dialects import postgresql, sqlite

from ..core.database import Database
from ..core.errors import InvalidInput, UnknownIdentity
from ..core.time import utcnow
from ..models import Identity, ScoreRecord
from .identities import IdentityStore
from .validation import (
    INT64_MAX,
    INT64_MIN,
    coerce_identity_id,
    coerce_int,
    normalize_username,
)

logger = logging.getLogger(__name__)

_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class MergePolicy(str, Enum):
    BEST_OF = "best_of"
    LATEST_WINS = "latest_wins"
    ACCUMULATOR = "accumulator"

    @property
    def is_scalar(self) -> bool:
        return self is not MergePolicy.ACCUMULATOR


@dataclass(frozen=True)
class ScoreSubmission:
    """Candidate scalar score for ``best_of`` and ``latest_wins``."""

    score: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.score <= INT64_MAX:
            raise InvalidInput("score is out of range")


@dataclass(frozen=True)
class TallyDelta:
    """Non-negative increments for the accumulator policy."""

    victories: int = 0
    defeats: int = 0
    explored: int = 0

    def __post_init__(self) -> None:
        for name in ("victories", "defeats", "explored"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidInput(f"{name} must be >= 0")
            if value > INT64_MAX:
                raise InvalidInput(f"{name} is out of range")


Delta = Union[ScoreSubmission, TallyDelta]

_TALLY_FIELDS = (("victory", "victories"), ("defeat", "defeats"), ("explored", "explored"))


class ScoreLedger:
    """Applies submissions to the single score row kept for each identity."""

    def __init__(
        self,
        database: Database,
        identities: IdentityStore,
        *,
        policy: Union[MergePolicy, str] = MergePolicy.BEST_OF,
        auto_register: bool = True,
    ) -> None:
        self.database = database
        self.identities = identities
        self.policy = MergePolicy(policy)
        self.auto_register = auto_register

        dialect = database.engine.dialect.name
        try:
            self._insert = _INSERTS[dialect]
        except KeyError:
            raise ValueError(f"Atomic upsert is not supported on {dialect!r}") from None

        if self.policy is MergePolicy.LATEST_WINS:
            logger.warning(
                "latest_wins policy: out-of-order or retried submissions overwrite newer scores"
            )
        elif self.policy is MergePolicy.ACCUMULATOR:
            logger.warning("accumulator policy: replayed submissions are double counted")

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------
    def parse_delta(self, body: Mapping[str, Any]) -> Delta:
        """Build the delta for the configured policy from a JSON body."""

        if self.policy.is_scalar:
            return ScoreSubmission(score=coerce_int(body.get("score"), "score"))

        if not any(key in body for key, _ in _TALLY_FIELDS):
            raise InvalidInput("At least one of victory, defeat, explored is required")
        values: Dict[str, int] = {}
        for key, attr in _TALLY_FIELDS:
            raw = body.get(key)
            values[attr] = 0 if raw is None else coerce_int(raw, key, minimum=0)
        return TallyDelta(**values)

    def resolve_identity(
        self, *, username: Any = None, user_id: Any = None
    ) -> Identity:
        """Find the submitting identity, registering it when allowed.

        ``user_id`` takes precedence over ``username``. An unknown id is
        always an error since there is no name to register it under.
        """

        if user_id is not None:
            identity_id = coerce_identity_id(user_id)
            identity = self.identities.get_by_id(identity_id)
            if identity is None:
                raise UnknownIdentity(f"Unknown user_id {identity_id}")
            return identity

        if username is None:
            raise InvalidInput("Username or user_id is required")
        name = normalize_username(username)
        if self.auto_register:
            with self.database.session() as session:
                return self.identities.get_or_create(session, name)

        identity = self.identities.get_by_username(name)
        if identity is None:
            raise UnknownIdentity("Unknown username")
        return identity

    # ------------------------------------------------------------------
    # Core operation
    # ------------------------------------------------------------------
    def submit(
        self, identity_id: int, delta: Delta, *, at: Optional[datetime] = None
    ) -> ScoreRecord:
        """Merge ``delta`` into the identity's record and return the result."""

        self._check_delta(delta)
        at = at or utcnow()

        with self.database.session() as session:
            if session.get(Identity, identity_id) is None:
                raise UnknownIdentity(f"Unknown user_id {identity_id}")

            result = session.connection().execute(self._upsert(identity_id, delta, at))
            if result.rowcount == 0:
                # The overflow guard on the tally merge matched nothing.
                raise InvalidInput("Tally totals would exceed the supported range")
            record = session.get(ScoreRecord, identity_id, populate_existing=True)
            session.commit()

        logger.debug("Merged %s for identity %s under %s", delta, identity_id, self.policy.value)
        return record

    def get(self, identity_id: int) -> Optional[ScoreRecord]:
        with self.database.session() as session:
            return session.get(ScoreRecord, identity_id)

    def _check_delta(self, delta: Delta) -> None:
        expected = ScoreSubmission if self.policy.is_scalar else TallyDelta
        if not isinstance(delta, expected):
            raise InvalidInput(
                f"{self.policy.value} policy expects {expected.__name__}"
            )

    def _upsert(self, identity_id: int, delta: Delta, at: datetime):
        table = ScoreRecord.__table__
        values: Dict[str, Any] = {
            "identity_id": identity_id,
            "score": 0,
            "victories": 0,
            "defeats": 0,
            "explored": 0,
            "updated_at": at,
        }
        if isinstance(delta, ScoreSubmission):
            values["score"] = delta.score
        else:
            values.update(
                victories=delta.victories, defeats=delta.defeats, explored=delta.explored
            )

        stmt = self._insert(table).values(**values)
        excluded = stmt.excluded

        if self.policy is MergePolicy.BEST_OF:
            improved = excluded.score > table.c.score
            merge = {
                "score": case((improved, excluded.score), else_=table.c.score),
                "updated_at": case((improved, excluded.updated_at), else_=table.c.updated_at),
            }
        elif self.policy is MergePolicy.LATEST_WINS:
            merge = {"score": excluded.score, "updated_at": excluded.updated_at}
        else:
            merge = {
                "victories": table.c.victories + excluded.victories,
                "defeats": table.c.defeats + excluded.defeats,
                "explored": table.c.explored + excluded.explored,
                "updated_at": excluded.updated_at,
            }
            # Sums stay within BIGINT; both sides are non-negative so the
            # subtraction itself cannot overflow.
            guard = and_(
                *(
                    table.c[column] <= INT64_MAX - excluded[column]
                    for column in ("victories", "defeats", "explored")
                )
            )
            return stmt.on_conflict_do_update(
                index_elements=[table.c.identity_id], set_=merge, where=guard
            )

        return stmt.on_conflict_do_update(index_elements=[table.c.identity_id], set_=merge)


def record_to_dict(record: ScoreRecord, policy: MergePolicy) -> Dict[str, Any]:
    """Serialise the fields a policy exposes."""

    if policy.is_scalar:
        return {"score": record.score}
    return {
        "victories": record.victories,
        "defeats": record.defeats,
        "explored": record.explored,
    }


__all__ = [
    "Delta",
    "MergePolicy",
    "ScoreLedger",
    "ScoreSubmission",
    "TallyDelta",
    "record_to_dict",
]
