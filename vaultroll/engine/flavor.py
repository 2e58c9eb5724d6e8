"""
vaultroll.engine.flavor — Outcome Presentation Descriptor
==========================================================

Turns a settled outcome into the card the client renders: a category tag,
a title, a randomly chosen phrase and colour hints.  Cosmetic only;
nothing here feeds back into settlement or storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vaultroll.constants import (
    FLAVOR_HINTS,
    JACKPOT_PHRASES,
    JACKPOT_ROLL,
    LOSS_PHRASES,
    WIN_PHRASES,
)
from vaultroll.engine.outcome import RandomSource, default_random


@dataclass(frozen=True, slots=True)
class Flavor:
    category: str          # "jackpot" | "success" | "error"
    title: str
    phrase: str
    description: str
    hints: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "title": self.title,
            "phrase": self.phrase,
            "description": self.description,
            **self.hints,
        }


def _money(amount: int) -> str:
    return f"${abs(amount):,}"


def generate_flavor(
    roll: int,
    is_win: bool,
    payout: int,
    *,
    wager: int = 0,
    rng: RandomSource | None = None,
) -> Flavor:
    """Build the descriptor for one outcome.

    Win copy reports the net credit (payout minus *wager*); loss copy
    reports the absorbed *wager*, since the payout is zero.
    """
    rng = rng or default_random()

    if roll == JACKPOT_ROLL:
        phrase = rng.choice(JACKPOT_PHRASES)
        return Flavor(
            category="jackpot",
            title="CRITICAL HIT DETECTED",
            phrase=phrase,
            description=f"{phrase} You secured {_money(payout)}.",
            hints=dict(FLAVOR_HINTS["jackpot"]),
        )

    if is_win:
        phrase = rng.choice(WIN_PHRASES)
        return Flavor(
            category="success",
            title="WIN REGISTERED",
            phrase=phrase,
            description=f"{phrase} Account credited +{_money(payout - wager)}.",
            hints=dict(FLAVOR_HINTS["success"]),
        )

    phrase = rng.choice(LOSS_PHRASES)
    return Flavor(
        category="error",
        title="LOSS CALCULATED",
        phrase=phrase,
        description=f"{phrase} Vault absorbs {_money(wager)}.",
        hints=dict(FLAVOR_HINTS["error"]),
    )
