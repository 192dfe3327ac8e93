import itertools
from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from leaderboard.app import create_app
from leaderboard.core import Database, Settings, run_migrations
from leaderboard.services import IdentityStore, ScoreLedger


@pytest.fixture()
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'leaderboard.db'}", pool_size=5, pool_timeout=5)
    run_migrations(db.engine)
    yield db
    db.dispose()


@pytest.fixture()
def identities(database):
    return IdentityStore(database)


@pytest.fixture()
def make_ledger(database, identities):
    def _make(policy="best_of", auto_register=True):
        return ScoreLedger(database, identities, policy=policy, auto_register=auto_register)

    return _make


@pytest.fixture()
def ledger(make_ledger):
    return make_ledger()


@pytest.fixture()
def make_client(tmp_path):
    """Build a started TestClient against its own SQLite file."""

    counter = itertools.count()
    with ExitStack() as stack:

        def _make(**overrides):
            url = f"sqlite:///{tmp_path / f'api-{next(counter)}.db'}"
            overrides.setdefault("merge_policy", "best_of")
            overrides.setdefault("auto_register", True)
            overrides.setdefault("max_size", 100)
            overrides.setdefault("db_reset", False)
            settings = Settings().with_overrides(
                database_url=url, allowed_origins=["http://localhost:5173"], **overrides
            )
            return stack.enter_context(TestClient(create_app(settings)))

        yield _make


@pytest.fixture()
def client(make_client):
    return make_client()
