"""
vaultroll.database.models — SQLAlchemy 2.0 Data Models
=======================================================

Tables:
- accounts      — One row per verified player (opaque identity key)
- jackpot_pool  — Singleton row holding the shared jackpot
- bets          — Append-only ledger, one row per settled wager
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Vaultroll ORM models."""


# ---------------------------------------------------------------------------
# Accounts — one row per verified player
# ---------------------------------------------------------------------------
class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    username: Mapped[str | None] = mapped_column(String(100), default=None)
    language_code: Mapped[str | None] = mapped_column(String(16), default=None)
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_daily_claim: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    bets: Mapped[list[BetRecord]] = relationship(back_populates="account")

    @property
    def display_name(self) -> str | None:
        return self.first_name or self.username

    def __repr__(self) -> str:
        return f"<Account id={self.id} key={self.account_key!r} balance={self.balance}>"


# ---------------------------------------------------------------------------
# JackpotPool — singleton shared pool
# ---------------------------------------------------------------------------
class JackpotPool(Base):
    """The shared jackpot.

    Exactly one row, addressed by :data:`~vaultroll.constants.POOL_ROW_ID`.
    The primary key doubles as the uniqueness guard for concurrent lazy
    creation.
    """
    __tablename__ = "jackpot_pool"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    jackpot: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<JackpotPool id={self.id} jackpot={self.jackpot}>"


# ---------------------------------------------------------------------------
# BetRecord — append-only wager ledger
# ---------------------------------------------------------------------------
class BetRecord(Base):
    __tablename__ = "bets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("accounts.id"), nullable=False
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    roll: Mapped[int] = mapped_column(Integer, nullable=False)
    is_win: Mapped[bool] = mapped_column(Boolean, nullable=False)
    payout: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    account: Mapped[Account] = relationship(back_populates="bets")

    __table_args__ = (
        Index("ix_bets_win_time", "is_win", "created_at"),
        Index("ix_bets_account_time", "account_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<BetRecord id={self.id} account={self.account_id} "
            f"roll={self.roll} win={self.is_win} payout={self.payout}>"
        )
