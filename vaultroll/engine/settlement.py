"""
vaultroll.engine.settlement — Outcome → Balance & Pool Deltas
==============================================================

Pure calculation.  LOSS and WIN move credits between the player and the
pool (the deltas sum to zero).  JACKPOT credits the player the pool share
*plus* the stake, while the pool only gives up the share:

    LOSS     balance −w            pool +w
    WIN      balance +w            pool −w
    JACKPOT  balance +(share + w)  pool −share
"""

from __future__ import annotations

from dataclasses import dataclass

from vaultroll.engine.outcome import Band, Outcome


@dataclass(frozen=True, slots=True)
class SettlementDeltas:
    balance_delta: int
    pool_delta: int
    payout: int


def compute_deltas(outcome: Outcome) -> SettlementDeltas:
    """Return the balance and pool deltas for a drawn outcome."""
    wager = outcome.wager
    if outcome.band is Band.LOSS:
        return SettlementDeltas(balance_delta=-wager, pool_delta=wager, payout=0)
    if outcome.band is Band.WIN:
        return SettlementDeltas(
            balance_delta=wager, pool_delta=-wager, payout=outcome.payout
        )
    return SettlementDeltas(
        balance_delta=outcome.jackpot_share + wager,
        pool_delta=-outcome.jackpot_share,
        payout=outcome.payout,
    )
