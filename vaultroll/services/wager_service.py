"""
vaultroll.services.wager_service — Wager Settlement
====================================================

Settles one wager end to end: validate, read account and pool, draw the
outcome, move balance and pool, append the bet row, report the result.

Two strategies, chosen by ``settlement_strategy`` in ``config.yaml``:

``transactional`` (default)
    Everything from the first read to the bet insert runs in one
    transaction.  The account and pool rows are read ``FOR UPDATE``; on
    SQLite, which has no row locks, the engine opens every transaction
    with ``BEGIN IMMEDIATE`` instead.  The balance update is conditional on
    the balance still covering the stake, whatever the draw, and a lost
    serialization race rolls back and starts over from a fresh read.  A
    failed call leaves nothing behind.

``compensating``
    Each step commits on its own.  The stake is debited unconditionally,
    re-checked, and credited back if the balance went negative; only then
    is the outcome drawn and the payout credited.  There is a window in
    which a concurrent reader can observe the intermediate balance; kept
    for stores that cannot hold a multi-statement transaction.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig
from vaultroll.database import ledger
from vaultroll.database.engine import is_retryable, is_unavailable, store_errors
from vaultroll.engine.flavor import Flavor, generate_flavor
from vaultroll.engine.outcome import (
    Band,
    Outcome,
    RandomSource,
    default_random,
    draw_outcome,
)
from vaultroll.engine.settlement import SettlementDeltas, compute_deltas
from vaultroll.errors import (
    AccountNotFound,
    ConditionFailed,
    InsufficientFunds,
    InvalidInput,
    PoolExhausted,
    StoreUnavailable,
)
from vaultroll.services.account_service import require_account_key

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_BACKOFF_BASE_SECONDS = 0.02


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------
@dataclass
class WagerResult:
    bet_id: int
    roll: int
    band: Band
    is_win: bool
    payout: int
    balance_delta: int
    new_balance: int
    new_pool_amount: int
    flavor: Flavor

    def to_dict(self) -> dict:
        return {
            "bet_id": self.bet_id,
            "roll": self.roll,
            "band": self.band.value,
            "is_win": self.is_win,
            "payout": self.payout,
            "balance_delta": self.balance_delta,
            "new_balance": self.new_balance,
            "new_pool_amount": self.new_pool_amount,
            "flavor": self.flavor.to_dict(),
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate_wager_amount(amount: object) -> int:
    """Accept only a positive ``int`` (``bool`` is rejected explicitly)."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidInput("Wager must be a positive whole number")
    return amount


def _check_pool_cover(pool_amount: int, amount: int, cfg: VaultrollConfig) -> None:
    """Reject wagers whose WIN payout would drive the pool below zero."""
    if not cfg.allow_negative_pool and amount > pool_amount:
        raise PoolExhausted(pool_amount)


def _pool_floor(cfg: VaultrollConfig) -> int | None:
    return None if cfg.allow_negative_pool else 0


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------
def place_wager(
    engine: Engine,
    account_key: str,
    amount: int,
    *,
    cfg: VaultrollConfig = DEFAULT_CONFIG,
    rng: RandomSource | None = None,
) -> WagerResult:
    """Settle one wager for *account_key*.

    Raises
    ------
    InvalidInput
        Missing key, or *amount* is not a positive integer.  No store access.
    AccountNotFound
        No account with this key.
    InsufficientFunds
        *amount* exceeds the balance, either at validation time or when the
        guarded debit runs.
    PoolExhausted
        The pool cannot cover a win of this size (``allow_negative_pool``
        off).
    StoreUnavailable
        The database is unreachable, or every retry lost its race.
    """
    require_account_key(account_key)
    validate_wager_amount(amount)
    rng = rng or default_random()

    if cfg.settlement_strategy == "compensating":
        with store_errors():
            return _settle_compensating(engine, account_key, amount, cfg, rng)
    return _settle_with_retry(engine, account_key, amount, cfg, rng)


# ---------------------------------------------------------------------------
# Transactional strategy
# ---------------------------------------------------------------------------
def _settle_with_retry(
    engine: Engine,
    account_key: str,
    amount: int,
    cfg: VaultrollConfig,
    rng: RandomSource,
) -> WagerResult:
    attempts = cfg.max_settlement_attempts
    for attempt in range(1, attempts + 1):
        try:
            return _settle_transactional(engine, account_key, amount, cfg, rng)
        except ConditionFailed as exc:
            # Only the pool guard reaches here; the balance guard is
            # translated to InsufficientFunds inside the transaction.
            reason = f"guard on {exc.target}"
        except sa_exc.SQLAlchemyError as exc:
            if is_retryable(exc):
                reason = "serialization conflict"
            elif is_unavailable(exc):
                logger.exception("Ledger store unavailable during settlement")
                raise StoreUnavailable() from exc
            else:
                raise

        logger.warning(
            "Settlement for %s lost a race (%s); attempt %d/%d",
            account_key, reason, attempt, attempts,
        )
        if attempt < attempts:
            time.sleep(random.uniform(0, _BACKOFF_BASE_SECONDS * 2 ** (attempt - 1)))

    raise StoreUnavailable("Settlement could not complete under contention; try again")


def _settle_transactional(
    engine: Engine,
    account_key: str,
    amount: int,
    cfg: VaultrollConfig,
    rng: RandomSource,
) -> WagerResult:
    with Session(engine) as session:
        # Lock order: account, then pool.  Every writer follows it.
        account = ledger.get_account(session, account_key, for_update=True)
        if account is None:
            raise AccountNotFound()
        if account.balance < amount:
            raise InsufficientFunds()
        account_id = account.id

        pool = ledger.get_or_create_pool(session, cfg.jackpot_seed, for_update=True)
        pool_at_draw = pool.jackpot
        _check_pool_cover(pool_at_draw, amount, cfg)

        outcome = draw_outcome(amount, pool_at_draw, rng)
        deltas = compute_deltas(outcome)

        try:
            new_balance = ledger.conditional_adjust_balance(
                session, account_key, deltas.balance_delta, stake=amount
            )
        except ConditionFailed as exc:
            raise InsufficientFunds() from exc

        ledger.adjust_pool(session, deltas.pool_delta, floor=_pool_floor(cfg))

        bet = ledger.insert_bet_record(
            session,
            account_id=account_id,
            amount=amount,
            roll=outcome.roll,
            is_win=outcome.is_win,
            payout=deltas.payout,
        )
        bet_id = bet.id
        session.commit()

        new_pool_amount = ledger.get_pool_amount(session)

    return _finish(account_key, bet_id, outcome, deltas, new_balance, new_pool_amount, rng)


# ---------------------------------------------------------------------------
# Compensating strategy
# ---------------------------------------------------------------------------
def _settle_compensating(
    engine: Engine,
    account_key: str,
    amount: int,
    cfg: VaultrollConfig,
    rng: RandomSource,
) -> WagerResult:
    with Session(engine) as session:
        account = ledger.get_account(session, account_key)
        if account is None:
            raise AccountNotFound()
        if account.balance < amount:
            raise InsufficientFunds()
        account_id = account.id

        pool = ledger.get_or_create_pool(session, cfg.jackpot_seed)
        pool_at_draw = pool.jackpot
        _check_pool_cover(pool_at_draw, amount, cfg)
        session.commit()

        # Stake first: a concurrent wager that spent it shows up as a
        # negative balance here, before any outcome exists.
        after_stake = ledger.adjust_balance(session, account_key, -amount)
        session.commit()
        if after_stake < 0:
            ledger.adjust_balance(session, account_key, amount)
            session.commit()
            logger.warning(
                "Reversed overdraw on %s (balance reached %d)", account_key, after_stake
            )
            raise InsufficientFunds()

        outcome = draw_outcome(amount, pool_at_draw, rng)
        deltas = compute_deltas(outcome)

        new_balance = after_stake
        credit = deltas.balance_delta + amount
        if credit:
            new_balance = ledger.adjust_balance(session, account_key, credit)
            session.commit()

        try:
            ledger.adjust_pool(session, deltas.pool_delta, floor=_pool_floor(cfg))
        except ConditionFailed:
            session.rollback()
            ledger.adjust_balance(session, account_key, -deltas.balance_delta)
            session.commit()
            logger.warning("Reversed settlement on %s: pool guard failed", account_key)
            raise PoolExhausted(ledger.get_pool_amount(session) or 0) from None
        session.commit()

        bet = ledger.insert_bet_record(
            session,
            account_id=account_id,
            amount=amount,
            roll=outcome.roll,
            is_win=outcome.is_win,
            payout=deltas.payout,
        )
        bet_id = bet.id
        session.commit()

        new_pool_amount = ledger.get_pool_amount(session)

    return _finish(account_key, bet_id, outcome, deltas, new_balance, new_pool_amount, rng)


# ---------------------------------------------------------------------------
# Shared tail
# ---------------------------------------------------------------------------
def _finish(
    account_key: str,
    bet_id: int,
    outcome: Outcome,
    deltas: SettlementDeltas,
    new_balance: int,
    new_pool_amount: int,
    rng: RandomSource,
) -> WagerResult:
    logger.info(
        "Wager settled: account=%s bet=%d roll=%d band=%s balance%+d pool%+d",
        account_key, bet_id, outcome.roll, outcome.band,
        deltas.balance_delta, deltas.pool_delta,
    )
    flavor = generate_flavor(
        outcome.roll, outcome.is_win, deltas.payout, wager=outcome.wager, rng=rng
    )
    return WagerResult(
        bet_id=bet_id,
        roll=outcome.roll,
        band=outcome.band,
        is_win=outcome.is_win,
        payout=deltas.payout,
        balance_delta=deltas.balance_delta,
        new_balance=new_balance,
        new_pool_amount=new_pool_amount,
        flavor=flavor,
    )
