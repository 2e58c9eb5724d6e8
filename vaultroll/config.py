"""
vaultroll.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for game tuning (jackpot seed, allowance, cooldown)
and settlement behaviour (strategy, retry budget, pool guard).  Secrets
such as ``DATABASE_URL`` stay in the environment (``.env``).

Usage::

    from vaultroll.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.jackpot_seed)          # 1000
    print(cfg.settlement_strategy)   # "transactional"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from vaultroll.constants import (
    DEFAULT_DAILY_ALLOWANCE,
    DEFAULT_DAILY_COOLDOWN_HOURS,
    DEFAULT_JACKPOT_SEED,
    DEFAULT_RECENT_WINS_LIMIT,
)

SETTLEMENT_STRATEGIES = ("transactional", "compensating")
ISOLATION_LEVELS = (
    "SERIALIZABLE",
    "REPEATABLE READ",
    "READ COMMITTED",
    "AUTOCOMMIT",
)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class VaultrollConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Every field has a default so a partial file (or none at all, in tests)
    still yields a usable config.
    """

    # Economy
    jackpot_seed: int = DEFAULT_JACKPOT_SEED
    daily_allowance: int = DEFAULT_DAILY_ALLOWANCE
    daily_cooldown_hours: int = DEFAULT_DAILY_COOLDOWN_HOURS
    recent_wins_limit: int = DEFAULT_RECENT_WINS_LIMIT

    # Settlement
    settlement_strategy: str = "transactional"
    max_settlement_attempts: int = 5
    allow_negative_pool: bool = False

    # Database
    isolation_level: str = "SERIALIZABLE"

    # API
    api_port: int = 8000

    def __post_init__(self) -> None:
        if self.settlement_strategy not in SETTLEMENT_STRATEGIES:
            raise ValueError(
                f"settlement_strategy must be one of {SETTLEMENT_STRATEGIES}, "
                f"got {self.settlement_strategy!r}"
            )
        if self.isolation_level not in ISOLATION_LEVELS:
            raise ValueError(
                f"isolation_level must be one of {ISOLATION_LEVELS}, "
                f"got {self.isolation_level!r}"
            )
        if self.max_settlement_attempts < 1:
            raise ValueError("max_settlement_attempts must be at least 1")
        if self.jackpot_seed < 0:
            raise ValueError("jackpot_seed must not be negative")
        if self.daily_allowance <= 0:
            raise ValueError("daily_allowance must be positive")
        if self.daily_cooldown_hours <= 0:
            raise ValueError("daily_cooldown_hours must be positive")
        if self.recent_wins_limit < 1:
            raise ValueError("recent_wins_limit must be at least 1")


DEFAULT_CONFIG = VaultrollConfig()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> VaultrollConfig:
    """Read *path* and return a :class:`VaultrollConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If a value is out of range or of the wrong type.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = DEFAULT_CONFIG
    return VaultrollConfig(
        jackpot_seed=int(raw.get("jackpot_seed", defaults.jackpot_seed)),
        daily_allowance=int(raw.get("daily_allowance", defaults.daily_allowance)),
        daily_cooldown_hours=int(
            raw.get("daily_cooldown_hours", defaults.daily_cooldown_hours)
        ),
        recent_wins_limit=int(raw.get("recent_wins_limit", defaults.recent_wins_limit)),
        settlement_strategy=str(
            raw.get("settlement_strategy", defaults.settlement_strategy)
        ),
        max_settlement_attempts=int(
            raw.get("max_settlement_attempts", defaults.max_settlement_attempts)
        ),
        allow_negative_pool=bool(
            raw.get("allow_negative_pool", defaults.allow_negative_pool)
        ),
        isolation_level=str(raw.get("isolation_level", defaults.isolation_level)).upper(),
        api_port=int(raw.get("api_port", defaults.api_port)),
    )
