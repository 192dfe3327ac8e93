"""FastAPI dependencies exposing the services built at startup."""

from __future__ import annotations

from fastapi import Request

from ..core import Database
from ..services import IdentityStore, RankingQuery, ScoreLedger


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_identity_store(request: Request) -> IdentityStore:
    return request.app.state.identities


def get_ledger(request: Request) -> ScoreLedger:
    return request.app.state.ledger


def get_ranking(request: Request) -> RankingQuery:
    return request.app.state.ranking


__all__ = ["get_database", "get_identity_store", "get_ledger", "get_ranking"]
