"""Idempotent schema setup, run once before the service takes traffic."""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)


def run_migrations(engine: Engine, *, reset: bool = False) -> None:
    """Create the identity and score tables if they do not already exist."""

    from .. import models  # noqa: F401 - ensure models are registered with SQLModel

    if reset:
        logger.warning("DB_RESET enabled, dropping leaderboard tables")
        SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    logger.info("Schema ready: %s", ", ".join(sorted(SQLModel.metadata.tables)))


__all__ = ["run_migrations"]
