"""
vaultroll.services.allowance_service — Daily Allowance
=======================================================

Credits a fixed allowance once per cooldown window.  The credit and the
timestamp move in a single guarded ``UPDATE`` whose ``WHERE`` clause
re-checks the cooldown, so racing claims cannot double-credit.  Claims are
not written to the bet ledger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig
from vaultroll.database import ledger
from vaultroll.database.engine import get_session, store_errors
from vaultroll.engine.cooldown import hours_remaining, remaining_cooldown
from vaultroll.errors import AccountNotFound, ConditionFailed, CooldownActive
from vaultroll.services.account_service import require_account_key, utcnow

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass
class AllowanceResult:
    amount: int
    balance: int
    claimed_at: datetime

    @property
    def message(self) -> str:
        return f"Claimed ${self.amount:,}!"

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "balance": self.balance,
            "claimed_at": self.claimed_at.isoformat(),
            "message": self.message,
        }


def claim_daily_allowance(
    engine: Engine,
    account_key: str,
    *,
    cfg: VaultrollConfig = DEFAULT_CONFIG,
    clock: Callable[[], datetime] = utcnow,
) -> AllowanceResult:
    """Credit the daily allowance to *account_key*.

    Raises
    ------
    InvalidInput
        Missing key.
    AccountNotFound
        No account with this key.
    CooldownActive
        The previous claim is younger than the cooldown window.
    """
    require_account_key(account_key)
    cooldown = timedelta(hours=cfg.daily_cooldown_hours)
    now = clock()

    with store_errors(), get_session(engine) as session:
        account = ledger.get_account(session, account_key)
        if account is None:
            raise AccountNotFound()

        remaining = remaining_cooldown(account.last_daily_claim, now, cooldown)
        if remaining is not None:
            raise CooldownActive(hours_remaining(remaining))

        try:
            new_balance = ledger.claim_allowance(
                session,
                account_key,
                cfg.daily_allowance,
                now=now,
                cutoff=now - cooldown,
            )
        except ConditionFailed:
            # Another claim landed between our read and the guarded update.
            session.refresh(account)
            remaining = remaining_cooldown(account.last_daily_claim, now, cooldown)
            raise CooldownActive(
                hours_remaining(remaining) if remaining is not None else 1
            ) from None

    logger.info(
        "Daily allowance claimed: account=%s amount=%d balance=%d",
        account_key, cfg.daily_allowance, new_balance,
    )
    return AllowanceResult(
        amount=cfg.daily_allowance, balance=new_balance, claimed_at=now
    )
