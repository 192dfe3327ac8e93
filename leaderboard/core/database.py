"""Database configuration and session helpers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from .errors import LeaderboardError, StoreError, Unavailable

logger = logging.getLogger(__name__)

_UNAVAILABLE_ERRORS = (PoolTimeoutError, OperationalError, InterfaceError, DisconnectionError)


def translate_store_error(exc: SQLAlchemyError) -> StoreError:
    """Map a driver failure onto the public taxonomy without leaking detail."""

    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return Unavailable("Store unavailable")
    return StoreError("Server error")


def _build_engine(
    url: str, *, pool_size: int, max_overflow: int, pool_timeout: int
) -> Engine:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )

    connect_args = {"check_same_thread": False, "timeout": pool_timeout}
    if parsed.database in (None, "", ":memory:"):
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)

    Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        url,
        connect_args=connect_args,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
    )


class Database:
    """Process-wide connection pool with an explicit open/dispose lifecycle."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 0,
        pool_timeout: int = 5,
    ) -> None:
        self.url = url
        self.engine = _build_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Borrow a connection for one unit of work.

        Any SQLAlchemy failure that escapes the block is rolled back, logged
        and re-raised as :class:`StoreError` or :class:`Unavailable`.
        """

        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
            except LeaderboardError:
                session.rollback()
                raise
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Store operation failed")
                raise translate_store_error(exc) from exc

    def ping(self) -> None:
        """Run a trivial query through the pool."""

        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("Store ping failed: %s", exc.__class__.__name__)
            raise translate_store_error(exc) from exc

    def dispose(self) -> None:
        """Close pooled connections once borrowed handles are returned."""

        self.engine.dispose()


__all__ = ["Database", "translate_store_error"]
