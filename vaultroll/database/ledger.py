"""
vaultroll.database.ledger — Ledger Store Primitives
====================================================

Thin, session-scoped helpers over the three tables.  Every balance and
pool mutation is a single ``UPDATE … SET x = x + :delta`` statement, so
the arithmetic happens inside the database and concurrent writers can
never lose each other's updates.  Guarded variants push the invariant
into the ``WHERE`` clause and raise :class:`~vaultroll.errors.ConditionFailed`
when no row matched.

None of these functions commit; the calling service owns the transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from vaultroll.constants import POOL_ROW_ID
from vaultroll.database.models import Account, BetRecord, JackpotPool
from vaultroll.errors import ConditionFailed

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
def get_account(
    session: Session, account_key: str, *, for_update: bool = False
) -> Account | None:
    """Fetch an account by identity key, optionally row-locking it."""
    stmt = select(Account).where(Account.account_key == account_key)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return session.scalar(stmt)


def create_account(session: Session, account_key: str, **profile) -> Account:
    """Insert an account, or return the existing row if a concurrent
    registration won the race on the unique ``account_key``.
    """
    account = Account(account_key=account_key, balance=0, **profile)
    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(account)
    except IntegrityError:
        logger.info("Account %s created concurrently; re-reading", account_key)
        existing = get_account(session, account_key)
        if existing is None:
            raise
        return existing
    return account


def adjust_balance(session: Session, account_key: str, delta: int) -> int:
    """Unconditionally add *delta* to a balance and return the new value."""
    stmt = (
        update(Account)
        .where(Account.account_key == account_key)
        .values(balance=Account.balance + delta)
        .returning(Account.balance)
        .execution_options(synchronize_session=False)
    )
    new_balance = session.execute(stmt).scalar_one_or_none()
    if new_balance is None:
        raise ConditionFailed("accounts", f"No account {account_key!r} to adjust")
    return new_balance


def conditional_adjust_balance(
    session: Session,
    account_key: str,
    delta: int,
    *,
    stake: int = 0,
    floor: int = 0,
) -> int:
    """Add *delta* only if the current balance still covers *stake* and the
    resulting balance stays ``>= floor``.

    The stake check matters for positive deltas: a win drawn against a
    balance that a concurrent wager has since spent must not apply.

    Raises
    ------
    ConditionFailed
        If the account is missing or either condition would not hold.
    """
    stmt = (
        update(Account)
        .where(
            Account.account_key == account_key,
            Account.balance >= stake,
            Account.balance + delta >= floor,
        )
        .values(balance=Account.balance + delta)
        .returning(Account.balance)
        .execution_options(synchronize_session=False)
    )
    new_balance = session.execute(stmt).scalar_one_or_none()
    if new_balance is None:
        raise ConditionFailed("accounts")
    return new_balance


def claim_allowance(
    session: Session,
    account_key: str,
    amount: int,
    *,
    now: datetime,
    cutoff: datetime,
) -> int:
    """Credit *amount* and stamp ``last_daily_claim`` in one statement.

    The cooldown predicate (never claimed, or last claim at or before
    *cutoff*) is part of the ``WHERE`` clause, so two concurrent claims
    cannot both apply.
    """
    stmt = (
        update(Account)
        .where(
            Account.account_key == account_key,
            or_(
                Account.last_daily_claim.is_(None),
                Account.last_daily_claim <= cutoff,
            ),
        )
        .values(balance=Account.balance + amount, last_daily_claim=now)
        .returning(Account.balance)
        .execution_options(synchronize_session=False)
    )
    new_balance = session.execute(stmt).scalar_one_or_none()
    if new_balance is None:
        raise ConditionFailed("accounts", "Daily allowance cooldown still active")
    return new_balance


# ---------------------------------------------------------------------------
# Jackpot pool
# ---------------------------------------------------------------------------
def _pool_select(for_update: bool):
    stmt = select(JackpotPool).where(JackpotPool.id == POOL_ROW_ID)
    if for_update:
        stmt = stmt.with_for_update()
    return stmt.execution_options(populate_existing=True)


def get_or_create_pool(
    session: Session, seed: int, *, for_update: bool = False
) -> JackpotPool:
    """Return the singleton pool row, creating it with *seed* if absent.

    Two concurrent creators are reconciled by the primary key: the loser's
    SAVEPOINT rolls back and it re-reads the winner's row.
    """
    pool = session.scalar(_pool_select(for_update))
    if pool is not None:
        return pool

    try:
        with session.begin_nested():   # SAVEPOINT
            pool = JackpotPool(id=POOL_ROW_ID, jackpot=seed)
            session.add(pool)
    except IntegrityError:
        logger.info("Jackpot pool created concurrently; re-reading")
        pool = session.scalar(_pool_select(for_update))
        if pool is None:
            raise
        return pool

    logger.info("Jackpot pool seeded with %d", seed)
    return pool


def get_pool_amount(session: Session) -> int | None:
    """Read the current jackpot straight from the database."""
    return session.scalar(
        select(JackpotPool.jackpot).where(JackpotPool.id == POOL_ROW_ID)
    )


def adjust_pool(session: Session, delta: int, *, floor: int | None = None) -> int:
    """Add *delta* to the jackpot and return the new amount.

    With *floor* set the update only applies if the result stays
    ``>= floor``; otherwise :class:`ConditionFailed` is raised.
    """
    criteria = [JackpotPool.id == POOL_ROW_ID]
    if floor is not None:
        criteria.append(JackpotPool.jackpot + delta >= floor)
    stmt = (
        update(JackpotPool)
        .where(*criteria)
        .values(jackpot=JackpotPool.jackpot + delta)
        .returning(JackpotPool.jackpot)
        .execution_options(synchronize_session=False)
    )
    new_amount = session.execute(stmt).scalar_one_or_none()
    if new_amount is None:
        raise ConditionFailed("jackpot_pool")
    return new_amount


# ---------------------------------------------------------------------------
# Bets
# ---------------------------------------------------------------------------
def insert_bet_record(
    session: Session,
    *,
    account_id: int,
    amount: int,
    roll: int,
    is_win: bool,
    payout: int,
) -> BetRecord:
    """Append one immutable bet row and flush so its id is assigned."""
    bet = BetRecord(
        account_id=account_id,
        amount=amount,
        roll=roll,
        is_win=is_win,
        payout=payout,
    )
    session.add(bet)
    session.flush()
    return bet


def list_recent_winning_bets(session: Session, limit: int) -> list[BetRecord]:
    """Newest winning bets first, with their accounts eagerly loaded."""
    rows = session.scalars(
        select(BetRecord)
        .options(joinedload(BetRecord.account))
        .where(BetRecord.is_win.is_(True))
        .order_by(BetRecord.created_at.desc(), BetRecord.id.desc())
        .limit(limit)
    ).all()
    return list(rows)
