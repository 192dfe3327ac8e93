"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_error_handlers, register_routes
from .core import (
    PORT,
    Database,
    RequestIDMiddleware,
    Settings,
    configure_logging,
    load_settings,
    run_migrations,
)
from .services import IdentityStore, RankingQuery, ScoreLedger

logger = logging.getLogger(__name__)


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(
            settings.database_url,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
        )
        run_migrations(database.engine, reset=settings.db_reset)

        identities = IdentityStore(database)
        app.state.database = database
        app.state.identities = identities
        app.state.ledger = ScoreLedger(
            database,
            identities,
            policy=settings.merge_policy,
            auto_register=settings.auto_register,
        )
        app.state.ranking = RankingQuery(
            database, policy=settings.merge_policy, max_size=settings.max_size
        )
        logger.info(
            "Leaderboard ready (policy=%s, auto_register=%s)",
            settings.merge_policy,
            settings.auto_register,
        )
        try:
            yield
        finally:
            database.dispose()
            logger.info("Connection pool disposed")

    return lifespan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Leaderboard API", version="0.3.0", lifespan=_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)
    register_routes(app)
    return app


def main() -> None:
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    main()
