"""Create accounts, jackpot_pool and bets tables

Revision ID: 5c2e8a1f9b3d
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e8a1f9b3d"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the ledger tables."""
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_key", sa.String(64), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("language_code", sa.String(16), nullable=True),
        sa.Column("is_premium", sa.Boolean(), nullable=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_daily_claim", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "jackpot_pool",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("jackpot", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "bets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id"),
            nullable=False,
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("roll", sa.Integer(), nullable=False),
        sa.Column("is_win", sa.Boolean(), nullable=False),
        sa.Column("payout", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_bets_win_time", "bets", ["is_win", "created_at"])
    op.create_index("ix_bets_account_time", "bets", ["account_id", "created_at"])


def downgrade() -> None:
    """Drop the ledger tables."""
    op.drop_index("ix_bets_account_time", table_name="bets")
    op.drop_index("ix_bets_win_time", table_name="bets")
    op.drop_table("bets")
    op.drop_table("jackpot_pool")
    op.drop_table("accounts")
