"""
vaultroll.database.engine — Database Connection & Error Translation
====================================================================

Builds the SQLAlchemy engine from ``DATABASE_URL`` and provides the
session helpers every service uses.

Settlement correctness lives in the database, not in this process: the
engine is configured with the isolation level from ``config.yaml`` (or, on
SQLite, ``BEGIN IMMEDIATE`` transactions) and every service runs its reads
and conditional writes inside one session.
Infrastructure failures (lost connections, pool exhaustion, lock
timeouts) are translated to :class:`~vaultroll.errors.StoreUnavailable`
by :func:`store_errors` so callers never see driver-level detail.

Usage::

    from vaultroll.database.engine import create_db_engine, init_db

    engine = create_db_engine(cfg)       # reads DATABASE_URL from .env
    init_db(engine, cfg)                 # CREATE TABLE IF NOT EXISTS …
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig
from vaultroll.database.models import Base
from vaultroll.errors import StoreUnavailable

logger = logging.getLogger(__name__)

# SQLSTATEs that mean "your transaction lost a race; run it again".
RETRYABLE_SQLSTATES = frozenset({
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
    "55P03",  # lock_not_available
})

# OperationalErrors that mean the store, not the query, is the problem.
UNAVAILABLE_SQLSTATE_CLASSES = frozenset({
    "08",  # connection_exception
    "53",  # insufficient_resources
    "57",  # operator_intervention (admin_shutdown, cannot_connect_now, ...)
})
UNAVAILABLE_SQLSTATES = frozenset({"55P03"})  # lock_not_available
UNAVAILABLE_MESSAGES = (
    "database is locked",
    "unable to open database file",
    "disk i/o error",
    "could not connect",
    "connection refused",
    "server closed the connection",
    "connection timed out",
)


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(cfg: VaultrollConfig = DEFAULT_CONFIG) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    Non-SQLite URLs get a pool sized for one API process (5 + 10 overflow),
    a 10 s checkout timeout so a saturated pool surfaces as
    ``StoreUnavailable`` instead of a hung request, hourly recycling, and
    the isolation level from ``config.yaml``.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    if url.startswith("sqlite"):
        # No FOR UPDATE on SQLite: every transaction takes the write lock up front.
        engine = enable_sqlite_immediate(
            create_engine(url, echo=False, connect_args={"timeout": 10})
        )
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,   # Reconnect stale connections automatically
            pool_timeout=10,      # Fail after 10s instead of hanging forever
            pool_recycle=3600,
            isolation_level=cfg.isolation_level,
        )
    logger.info("Database engine created → %s", engine.url.host or engine.url.database)
    return engine


def enable_sqlite_immediate(engine: Engine) -> Engine:
    """Start every SQLite transaction with ``BEGIN IMMEDIATE``.

    pysqlite defers ``BEGIN`` until the first DML statement, so a
    settlement's reads would otherwise run outside its transaction.  With
    the write lock taken at ``BEGIN``, the balance and pool a settlement
    reads cannot change before it commits.  This is SQLAlchemy's documented
    pysqlite transaction recipe; it also makes SAVEPOINT behave.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine, cfg: VaultrollConfig = DEFAULT_CONFIG) -> None:
    """Create all tables and seed the jackpot pool row.

    Safe to call on every startup.  In production the schema is managed by
    Alembic (``alembic upgrade head``); ``create_all`` is a safety net for
    dev/test environments.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    from vaultroll.database.ledger import get_or_create_pool

    with get_session(engine) as session:
        pool = get_or_create_pool(session, cfg.jackpot_seed)
        logger.info("Jackpot pool ready (%d)", pool.jackpot)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Driver error classification
# ---------------------------------------------------------------------------
def _sqlstate(orig: BaseException | None) -> str | None:
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_retryable(exc: BaseException) -> bool:
    """True if *exc* is a lost serialization race worth re-running.

    PostgreSQL reports these by SQLSTATE (``pgcode`` on psycopg2,
    ``sqlstate`` on psycopg 3).  SQLite reports a busy database, which a
    fresh attempt also resolves.
    """
    if not isinstance(exc, sa_exc.DBAPIError):
        return False
    if _sqlstate(exc.orig) in RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(exc.orig)


def is_unavailable(exc: BaseException) -> bool:
    """True if *exc* is an infrastructure failure rather than a bug.

    Only connection-, timeout- and resource-class failures count.  Other
    ``OperationalError``s (a missing table, a bad column) are bugs and
    propagate as such.
    """
    if isinstance(exc, sa_exc.TimeoutError):  # connection pool exhausted
        return True
    if not isinstance(exc, sa_exc.DBAPIError):
        return False
    if exc.connection_invalidated or isinstance(exc, sa_exc.InterfaceError):
        return True
    if not isinstance(exc, sa_exc.OperationalError):
        return False

    code = _sqlstate(exc.orig)
    if code is not None:
        return code[:2] in UNAVAILABLE_SQLSTATE_CLASSES or code in UNAVAILABLE_SQLSTATES
    message = str(exc.orig).lower()
    return any(marker in message for marker in UNAVAILABLE_MESSAGES)


@contextmanager
def store_errors():
    """Translate infrastructure failures into :class:`StoreUnavailable`.

    Anything else (integrity violations, programming errors) propagates
    untouched and surfaces as an internal error at the API boundary.
    """
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        if is_unavailable(exc):
            logger.exception("Ledger store unavailable")
            raise StoreUnavailable() from exc
        raise
