"""
vaultroll.services.account_service — Account Registration & Summary
====================================================================

Accounts are created by the identity glue after it has verified a player
with the messaging platform; this module trusts the key it is handed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from vaultroll.config import DEFAULT_CONFIG, VaultrollConfig
from vaultroll.database import ledger
from vaultroll.database.engine import get_session, store_errors
from vaultroll.database.models import Account
from vaultroll.engine.cooldown import normalize_dt, remaining_cooldown
from vaultroll.errors import AccountNotFound, InvalidInput

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

MAX_ACCOUNT_KEY_LENGTH = 64


def utcnow() -> datetime:
    return datetime.now(UTC)


def require_account_key(account_key: object) -> str:
    """Reject a missing, blank or oversized identity key."""
    if not isinstance(account_key, str) or not account_key.strip():
        raise InvalidInput("Missing account key")
    if len(account_key) > MAX_ACCOUNT_KEY_LENGTH:
        raise InvalidInput("Account key is too long")
    return account_key


@dataclass
class AccountSummary:
    account_key: str
    display_name: str | None
    balance: int
    last_daily_claim: datetime | None
    next_claim_at: datetime | None

    @property
    def can_claim(self) -> bool:
        return self.next_claim_at is None

    def to_dict(self) -> dict:
        return {
            "account_key": self.account_key,
            "display_name": self.display_name,
            "balance": self.balance,
            "last_daily_claim": (
                self.last_daily_claim.isoformat() if self.last_daily_claim else None
            ),
            "next_claim_at": self.next_claim_at.isoformat() if self.next_claim_at else None,
            "can_claim": self.can_claim,
        }


def register_account(
    engine: Engine,
    account_key: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    username: str | None = None,
    language_code: str | None = None,
    is_premium: bool = False,
) -> tuple[Account, bool]:
    """Create the account on first verification, refresh its profile after.

    Returns (account, created).  Balance and claim state are never touched
    here.
    """
    require_account_key(account_key)
    profile = {
        "first_name": first_name,
        "last_name": last_name,
        "username": username,
        "language_code": language_code,
        "is_premium": is_premium,
    }

    with store_errors(), get_session(engine) as session:
        account = ledger.get_account(session, account_key)
        created = account is None
        if created:
            account = ledger.create_account(session, account_key, **profile)
            logger.info("Registered account %s", account_key)
        else:
            for name, value in profile.items():
                setattr(account, name, value)
        session.flush()
        session.refresh(account)
        session.expunge(account)
        return account, created


def get_account_summary(
    engine: Engine,
    account_key: str,
    *,
    cfg: VaultrollConfig = DEFAULT_CONFIG,
    clock: Callable[[], datetime] = utcnow,
) -> AccountSummary:
    """Balance plus allowance availability for one account."""
    require_account_key(account_key)
    with store_errors(), get_session(engine) as session:
        account = ledger.get_account(session, account_key)
        if account is None:
            raise AccountNotFound()

        now = clock()
        last_claim = (
            normalize_dt(account.last_daily_claim) if account.last_daily_claim else None
        )
        remaining = remaining_cooldown(
            last_claim, now, timedelta(hours=cfg.daily_cooldown_hours)
        )
        return AccountSummary(
            account_key=account.account_key,
            display_name=account.display_name,
            balance=account.balance,
            last_daily_claim=last_claim,
            next_claim_at=now + remaining if remaining is not None else None,
        )
