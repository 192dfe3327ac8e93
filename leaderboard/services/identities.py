"""Username to numeric identity mapping with idempotent registration."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.database import Database
from ..core.errors import Conflict, StoreError
from ..models import Identity
from .validation import normalize_username

logger = logging.getLogger(__name__)


class IdentityStore:
    """Registers usernames and looks identities up by name or id.

    Registration is insert-or-fetch: the unique index on ``username`` decides
    concurrent races, and the loser re-reads the winner's row.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def register(self, username: str) -> Identity:
        name = normalize_username(username)
        with self.database.session() as session:
            return self.get_or_create(session, name)

    def get_by_username(self, username: str) -> Optional[Identity]:
        name = normalize_username(username)
        with self.database.session() as session:
            return _find_by_username(session, name)

    def get_by_id(self, identity_id: int) -> Optional[Identity]:
        with self.database.session() as session:
            return session.get(Identity, identity_id)

    def get_or_create(self, session: Session, username: str) -> Identity:
        """Return the identity for an already normalised username."""

        existing = _find_by_username(session, username)
        if existing:
            return existing

        try:
            return _insert(session, username)
        except Conflict:
            identity = _find_by_username(session, username)
            if identity is None:
                raise StoreError("Server error") from None
            logger.info("Registration race for %r resolved to id %s", username, identity.id)
            return identity


def _find_by_username(session: Session, username: str) -> Optional[Identity]:
    return session.exec(select(Identity).where(Identity.username == username)).first()


def _insert(session: Session, username: str) -> Identity:
    identity = Identity(username=username)
    session.add(identity)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise Conflict("Username already registered") from exc
    session.refresh(identity)
    logger.info("Registered %r as id %s", username, identity.id)
    return identity


__all__ = ["IdentityStore"]
