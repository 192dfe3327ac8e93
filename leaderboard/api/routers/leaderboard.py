"""Leaderboard endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ...services import RankingQuery, ScoreLedger, entry_to_dict, record_to_dict
from ..dependencies import get_ledger, get_ranking

router = APIRouter(tags=["leaderboard"])


@router.post("/update-leaderboard")
def update_leaderboard(
    body: Optional[Dict[str, Any]] = Body(default=None),
    ledger: ScoreLedger = Depends(get_ledger),
):
    """Submit a game result for a player identified by ``user_id`` or ``username``."""

    payload = body or {}
    delta = ledger.parse_delta(payload)
    identity = ledger.resolve_identity(
        username=payload.get("username"), user_id=payload.get("user_id")
    )
    record = ledger.submit(identity.id, delta)

    return {
        "ok": True,
        "user_id": identity.id,
        "username": identity.username,
        **record_to_dict(record, ledger.policy),
    }


@router.get("/leaderboard")
def get_leaderboard(
    limit: Optional[int] = None,
    ranking: RankingQuery = Depends(get_ranking),
):
    """Return the ranked leaderboard, capped at the configured maximum."""

    entries = ranking.top(limit)
    return {
        "merge_policy": ranking.policy.value,
        "leaderboard": [entry_to_dict(entry, ranking.policy) for entry in entries],
    }


__all__ = ["router"]
