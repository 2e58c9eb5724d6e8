"""
tests/test_account_service.py — Account Registration & Summary Tests
=====================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from vaultroll.errors import AccountNotFound, InvalidInput
from vaultroll.services.account_service import get_account_summary, register_account
from vaultroll.services.allowance_service import claim_daily_allowance

T0 = datetime(2026, 6, 10, 18, 0, tzinfo=UTC)


class TestRegister:
    def test_creates_with_zero_balance(self, db_engine, ledger_view):
        account, created = register_account(
            db_engine, "tg-555", first_name="Mara", username="mara_v", language_code="en"
        )
        assert created is True
        assert account.balance == 0
        assert account.display_name == "Mara"
        assert ledger_view.balance(db_engine, "tg-555") == 0

    def test_reregister_refreshes_profile_only(self, db_engine, make_account, ledger_view):
        key = make_account(db_engine, balance=340, first_name="Old")

        account, created = register_account(db_engine, key, first_name="New", is_premium=True)

        assert created is False
        assert account.first_name == "New"
        assert account.is_premium is True
        assert account.balance == 340
        assert ledger_view.balance(db_engine, key) == 340

    @pytest.mark.parametrize("key", ["", "  ", None])
    def test_key_required(self, db_engine, key):
        with pytest.raises(InvalidInput):
            register_account(db_engine, key)


class TestSummary:
    def test_fresh_account_can_claim(self, db_engine, make_account):
        key = make_account(db_engine, balance=12)
        summary = get_account_summary(db_engine, key, clock=lambda: T0)
        assert summary.balance == 12
        assert summary.can_claim is True
        assert summary.next_claim_at is None

    def test_after_claim(self, db_engine, make_account):
        key = make_account(db_engine, balance=0)
        claim_daily_allowance(db_engine, key, clock=lambda: T0)

        summary = get_account_summary(
            db_engine, key, clock=lambda: T0 + timedelta(hours=5)
        )

        assert summary.balance == 100
        assert summary.can_claim is False
        assert summary.last_daily_claim == T0
        assert summary.next_claim_at == T0 + timedelta(hours=24)
        assert summary.to_dict()["can_claim"] is False

    def test_unknown_account(self, db_engine):
        with pytest.raises(AccountNotFound):
            get_account_summary(db_engine, "nobody")
