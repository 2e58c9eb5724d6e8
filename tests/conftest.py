"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest
from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from vaultroll.constants import POOL_ROW_ID
from vaultroll.database.engine import enable_sqlite_immediate
from vaultroll.database.models import Account, Base, BetRecord, JackpotPool


# ---------------------------------------------------------------------------
# Deterministic random sources
# ---------------------------------------------------------------------------
class SequenceRandom:
    """Random source that replays a fixed list of rolls (cycling).

    ``choice`` always returns the first element so flavor text is stable.
    """

    def __init__(self, rolls: Sequence[int]) -> None:
        self._rolls = list(rolls)
        self._index = 0
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        roll = self._rolls[self._index % len(self._rolls)]
        self._index += 1
        self.calls += 1
        assert a <= roll <= b
        return roll

    def choice(self, seq):
        return seq[0]


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Vaultroll tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by the TestClient, which runs sync routes on a thread pool).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """File-backed SQLite engine: one connection per session, so threads
    really contend for the database lock.  Transactions open with
    ``BEGIN IMMEDIATE``, as in production.
    """
    engine = enable_sqlite_immediate(create_engine(
        f"sqlite:///{tmp_path / 'vaultroll.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    ))
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------
@pytest.fixture
def make_account():
    """Factory: insert an account with a given balance and return its key."""

    def _make(
        engine: Engine,
        key: str = "tg-1001",
        *,
        balance: int = 100,
        first_name: str | None = "Alice",
        username: str | None = None,
    ) -> str:
        with Session(engine) as session:
            session.add(Account(
                account_key=key,
                balance=balance,
                first_name=first_name,
                username=username,
            ))
            session.commit()
        return key

    return _make


@pytest.fixture
def seed_pool():
    """Factory: create or overwrite the singleton pool row."""

    def _seed(engine: Engine, amount: int = 1000) -> None:
        with Session(engine) as session:
            pool = session.get(JackpotPool, POOL_ROW_ID)
            if pool is None:
                session.add(JackpotPool(id=POOL_ROW_ID, jackpot=amount))
            else:
                pool.jackpot = amount
            session.commit()

    return _seed


def read_balance(engine: Engine, key: str) -> int:
    with Session(engine) as session:
        return session.scalar(select(Account.balance).where(Account.account_key == key))


def read_pool(engine: Engine) -> int | None:
    with Session(engine) as session:
        return session.scalar(
            select(JackpotPool.jackpot).where(JackpotPool.id == POOL_ROW_ID)
        )


def count_bets(engine: Engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(BetRecord)) or 0


@pytest.fixture
def ledger_view():
    """Read-side helpers bundled for assertions."""

    class _View:
        balance = staticmethod(read_balance)
        pool = staticmethod(read_pool)
        bets = staticmethod(count_bets)

    return _View


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
@pytest.fixture
def client(db_engine):
    """FastAPI TestClient wired to the in-memory engine and default config."""
    from fastapi.testclient import TestClient

    from vaultroll.api.deps import get_config, get_engine, get_random
    from vaultroll.api.main import app
    from vaultroll.config import DEFAULT_CONFIG

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: DEFAULT_CONFIG
    app.dependency_overrides[get_random] = lambda: SequenceRandom([75])
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
