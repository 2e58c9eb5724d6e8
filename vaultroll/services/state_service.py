"""
vaultroll.services.state_service — Pool State & Recent Wins
============================================================

Read-only projection for the game screen: the current jackpot and the
latest winning bets.  The only write is the lazy seed of the pool row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig
from vaultroll.constants import ANONYMOUS_PLAYER, JACKPOT_ROLL
from vaultroll.database import ledger
from vaultroll.database.engine import get_session, store_errors

if TYPE_CHECKING:
    from sqlalchemy import Engine


@dataclass(frozen=True, slots=True)
class RecentWin:
    player: str
    amount: int
    roll: int
    is_jackpot: bool
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "player": self.player,
            "amount": self.amount,
            "roll": self.roll,
            "is_jackpot": self.is_jackpot,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class PoolState:
    pool_amount: int
    recent_wins: list[RecentWin] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "pool_amount": self.pool_amount,
            "recent_wins": [w.to_dict() for w in self.recent_wins],
        }


def get_pool_state(
    engine: Engine, *, cfg: VaultrollConfig = DEFAULT_CONFIG
) -> PoolState:
    """Current jackpot and the newest ``recent_wins_limit`` winning bets."""
    with store_errors(), get_session(engine) as session:
        pool = ledger.get_or_create_pool(session, cfg.jackpot_seed)
        bets = ledger.list_recent_winning_bets(session, cfg.recent_wins_limit)

        wins = [
            RecentWin(
                player=(bet.account.display_name if bet.account else None)
                or ANONYMOUS_PLAYER,
                amount=bet.payout,
                roll=bet.roll,
                is_jackpot=bet.roll == JACKPOT_ROLL,
                created_at=bet.created_at,
            )
            for bet in bets
        ]
        return PoolState(pool_amount=pool.jackpot, recent_wins=wins)
