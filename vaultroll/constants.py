"""
vaultroll.constants — Shared Constants
=======================================

Single source of truth for the roll bands, economy seeds and the
presentation palette.  Import from here instead of duplicating in the
engine, services and API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Roll bands (inclusive bounds)
# ---------------------------------------------------------------------------
ROLL_MIN = 1
ROLL_MAX = 100
LOSS_MAX_ROLL = 50          # 1–50   → LOSS
WIN_MAX_ROLL = 99           # 51–99  → WIN
JACKPOT_ROLL = 100          # 100    → JACKPOT

WIN_PAYOUT_MULTIPLIER = 2
JACKPOT_SHARE_NUMERATOR = 1     # floor(pool * 1 / 2)
JACKPOT_SHARE_DENOMINATOR = 2

# ---------------------------------------------------------------------------
# Economy defaults (overridable from config.yaml)
# ---------------------------------------------------------------------------
DEFAULT_JACKPOT_SEED = 1000
DEFAULT_DAILY_ALLOWANCE = 100
DEFAULT_DAILY_COOLDOWN_HOURS = 24
DEFAULT_RECENT_WINS_LIMIT = 5

POOL_ROW_ID = 1             # Well-known primary key of the singleton pool row
ANONYMOUS_PLAYER = "Anonymous"

MS_PER_HOUR = 3_600_000

# ---------------------------------------------------------------------------
# Flavor presentation (used by engine.flavor)
# ---------------------------------------------------------------------------
WIN_PHRASES: tuple[str, ...] = (
    "Probability matrix aligned.",
    "Fortune favors the bold.",
    "Investment strategy: Successful.",
    "Algorithm approves this outcome.",
    "Neural network predicts more wins.",
    "Quantum fluctuation in your favor.",
)

LOSS_PHRASES: tuple[str, ...] = (
    "Variance happens.",
    "The house sends its regards.",
    "System analysis: Unfortunate.",
    "Don't give up, human.",
    "Entropy increased.",
    "Risk assessment: Recalibrate.",
    "Statistical correction applied.",
)

JACKPOT_PHRASES: tuple[str, ...] = (
    "System Overload! The vault has been breached.",
)

FLAVOR_HINTS: dict[str, dict[str, str]] = {
    "jackpot": {
        "emoji": "\U0001f3b0",  # 🎰
        "border_color": "border-amber-400",
        "text_color": "text-amber-300",
        "bg_color": "bg-amber-900/40",
    },
    "success": {
        "emoji": "\U0001f7e2",  # 🟢
        "border_color": "border-green-500/50",
        "text_color": "text-green-400",
        "bg_color": "bg-green-900/30",
    },
    "error": {
        "emoji": "\U0001f534",  # 🔴
        "border_color": "border-red-500/50",
        "text_color": "text-red-400",
        "bg_color": "bg-red-900/30",
    },
}
