"""
vaultroll.errors — Error Taxonomy
==================================

Every failure the services raise carries a machine-readable ``kind`` and a
human-readable message.  The API layer maps kinds to HTTP statuses; the
services never import FastAPI.
"""

from __future__ import annotations

from typing import Any


class VaultrollError(Exception):
    """Base class for all domain failures."""

    kind = "InternalError"
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class InvalidInput(VaultrollError):
    """Malformed or non-positive wager, or a missing account key."""

    kind = "InvalidInput"
    default_message = "Invalid input"


class AccountNotFound(VaultrollError):
    kind = "AccountNotFound"
    default_message = "User not found"


class InsufficientFunds(VaultrollError):
    kind = "InsufficientFunds"
    default_message = "Insufficient balance"


class PoolExhausted(VaultrollError):
    """The jackpot pool cannot cover a winning payout for this wager."""

    kind = "PoolExhausted"
    default_message = "The vault cannot cover this wager"

    def __init__(self, pool_amount: int, message: str | None = None) -> None:
        self.pool_amount = pool_amount
        super().__init__(
            message or f"The vault cannot cover this wager (max {pool_amount})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "pool_amount": self.pool_amount}


class CooldownActive(VaultrollError):
    kind = "CooldownActive"

    def __init__(self, hours_remaining: int) -> None:
        self.hours_remaining = hours_remaining
        super().__init__(f"Please wait {hours_remaining} hours")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "hours_remaining": self.hours_remaining}


class ConditionFailed(VaultrollError):
    """A conditional store update matched no row.

    Raised by :mod:`vaultroll.database.ledger`; the settlement engine
    translates it before it reaches a caller.
    """

    kind = "ConditionFailed"
    default_message = "Conditional update did not apply"

    def __init__(self, target: str, message: str | None = None) -> None:
        self.target = target
        super().__init__(message or f"Conditional update on {target} did not apply")


class StoreUnavailable(VaultrollError):
    kind = "StoreUnavailable"
    default_message = "Ledger store unavailable"


class InternalError(VaultrollError):
    kind = "InternalError"
