"""
tests/test_config.py — YAML Config Loader & Cooldown Arithmetic
================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig, load_config
from vaultroll.engine.cooldown import hours_remaining, remaining_cooldown


class TestLoadConfig:
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DEFAULT_CONFIG

    def test_values_are_read(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "jackpot_seed: 5000\n"
            "daily_allowance: 250\n"
            "settlement_strategy: compensating\n"
            "allow_negative_pool: true\n"
            "isolation_level: read committed\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.jackpot_seed == 5000
        assert cfg.daily_allowance == 250
        assert cfg.settlement_strategy == "compensating"
        assert cfg.allow_negative_pool is True
        assert cfg.isolation_level == "READ COMMITTED"
        assert cfg.daily_cooldown_hours == 24

    def test_unknown_strategy_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("settlement_strategy: optimistic\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_settlement_attempts": 0},
            {"daily_allowance": 0},
            {"jackpot_seed": -1},
            {"recent_wins_limit": 0},
        ],
    )
    def test_out_of_range_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            VaultrollConfig(**overrides)


class TestCooldown:
    DAY = timedelta(hours=24)
    T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_never_claimed(self):
        assert remaining_cooldown(None, self.T0, self.DAY) is None

    def test_window_elapsed(self):
        assert remaining_cooldown(self.T0, self.T0 + self.DAY, self.DAY) is None

    def test_naive_timestamps_are_utc(self):
        naive = self.T0.replace(tzinfo=None)
        remaining = remaining_cooldown(naive, self.T0 + timedelta(hours=1), self.DAY)
        assert remaining == timedelta(hours=23)

    @pytest.mark.parametrize(
        "remaining, hours",
        [
            (timedelta(hours=23), 23),
            (timedelta(hours=23, minutes=1), 24),
            (timedelta(minutes=30), 1),
            (timedelta(milliseconds=1), 1),
            (timedelta(hours=24), 24),
        ],
    )
    def test_hours_round_up(self, remaining, hours):
        assert hours_remaining(remaining) == hours
