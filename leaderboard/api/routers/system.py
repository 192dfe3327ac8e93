"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...core import Database
from ...services import ScoreLedger
from ..dependencies import get_database, get_ledger

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple liveness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz(
    database: Database = Depends(get_database),
    ledger: ScoreLedger = Depends(get_ledger),
) -> Dict[str, Any]:
    """Readiness probe; fails with 503 when the store cannot be reached."""

    database.ping()
    return {"ok": True, "merge_policy": ledger.policy.value}


__all__ = ["router"]
