"""
vaultroll.engine.outcome — Roll → Band → Payout
================================================

Pure outcome generation.  No DB I/O: the caller passes in the pool amount
it read inside its own transaction, plus a random source.

    roll   1–50   → LOSS     payout 0
    roll  51–99   → WIN      payout 2 × wager
    roll    100   → JACKPOT  payout wager + floor(pool / 2)
"""

from __future__ import annotations

import enum
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from vaultroll.constants import (
    JACKPOT_ROLL,
    JACKPOT_SHARE_DENOMINATOR,
    JACKPOT_SHARE_NUMERATOR,
    LOSS_MAX_ROLL,
    ROLL_MAX,
    ROLL_MIN,
    WIN_PAYOUT_MULTIPLIER,
)

__all__ = [
    "Band",
    "Outcome",
    "RandomSource",
    "classify_roll",
    "default_random",
    "draw_outcome",
    "jackpot_share",
]

T = TypeVar("T")


class Band(enum.StrEnum):
    LOSS = "LOSS"
    WIN = "WIN"
    JACKPOT = "JACKPOT"


class RandomSource(Protocol):
    """The two operations the game needs from a random generator.

    :class:`random.Random` and :class:`random.SystemRandom` satisfy it;
    tests substitute a fixed-sequence source.
    """

    def randint(self, a: int, b: int) -> int: ...

    def choice(self, seq: Sequence[T]) -> T: ...


_default_random = random.SystemRandom()


def default_random() -> RandomSource:
    return _default_random


@dataclass(frozen=True, slots=True)
class Outcome:
    """A drawn roll with its band and gross payout."""

    roll: int
    band: Band
    wager: int
    payout: int
    jackpot_share: int = 0

    @property
    def is_win(self) -> bool:
        return self.band is not Band.LOSS


def classify_roll(roll: int) -> Band:
    """Map a roll in [1, 100] to its band."""
    if not ROLL_MIN <= roll <= ROLL_MAX:
        raise ValueError(f"roll must be in [{ROLL_MIN}, {ROLL_MAX}], got {roll}")
    if roll <= LOSS_MAX_ROLL:
        return Band.LOSS
    if roll == JACKPOT_ROLL:
        return Band.JACKPOT
    return Band.WIN


def jackpot_share(pool_amount: int) -> int:
    """Half the pool, truncated toward negative infinity (``floor``).

    Integer floor division keeps this exact for any pool size.
    """
    return (pool_amount * JACKPOT_SHARE_NUMERATOR) // JACKPOT_SHARE_DENOMINATOR


def draw_outcome(
    wager: int, pool_amount: int, rng: RandomSource | None = None
) -> Outcome:
    """Draw a roll and compute the payout for *wager* against *pool_amount*."""
    rng = rng or default_random()
    roll = rng.randint(ROLL_MIN, ROLL_MAX)
    band = classify_roll(roll)

    if band is Band.LOSS:
        return Outcome(roll=roll, band=band, wager=wager, payout=0)
    if band is Band.WIN:
        return Outcome(
            roll=roll, band=band, wager=wager, payout=wager * WIN_PAYOUT_MULTIPLIER
        )

    share = jackpot_share(pool_amount)
    return Outcome(
        roll=roll,
        band=band,
        wager=wager,
        payout=wager + share,
        jackpot_share=share,
    )
