"""
vaultroll.engine.cooldown — Daily Allowance Cooldown Arithmetic
================================================================

Pure time arithmetic for the allowance window.  Naive datetimes (SQLite
drops the offset on the way back) are treated as UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from vaultroll.constants import MS_PER_HOUR


def normalize_dt(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def remaining_cooldown(
    last_claim: datetime | None, now: datetime, cooldown: timedelta
) -> timedelta | None:
    """Time left before the next claim, or ``None`` if a claim is allowed."""
    if last_claim is None:
        return None
    elapsed = normalize_dt(now) - normalize_dt(last_claim)
    if elapsed >= cooldown:
        return None
    return cooldown - elapsed


def hours_remaining(remaining: timedelta) -> int:
    """Whole hours left, rounded up: ``ceil(remaining_ms / 3_600_000)``."""
    remaining_ms = remaining // timedelta(milliseconds=1)
    return max(1, -(-remaining_ms // MS_PER_HOUR))
