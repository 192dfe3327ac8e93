"""Service layer helpers."""

from .identities import IdentityStore
from .ledger import (
    MergePolicy,
    ScoreLedger,
    ScoreSubmission,
    TallyDelta,
    record_to_dict,
)
from .ranking import RankedEntry, RankingQuery, entry_to_dict
from .validation import coerce_int, normalize_username

__all__ = [
    "IdentityStore",
    "MergePolicy",
    "RankedEntry",
    "RankingQuery",
    "ScoreLedger",
    "ScoreSubmission",
    "TallyDelta",
    "coerce_int",
    "entry_to_dict",
    "normalize_username",
    "record_to_dict",
]
