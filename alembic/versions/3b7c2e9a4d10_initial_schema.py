"""Initial schema

Revision ID: 3b7c2e9a4d10
Revises:
Create Date: 2026-10-19 09:12:03.518214

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7c2e9a4d10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    # Table: accounts (money in micro-dollars)
    op.create_table(
        "accounts",
        sa.Column("id", sa.Text(), nullable=False, primary_key=True),
        sa.Column("balance_micros", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.Text(), nullable=False),
        sa.CheckConstraint("balance_micros >= 0", name="check_balance_non_negative"),
    )

    # Table: holdings
    op.create_table(
        "holdings",
        sa.Column("account_id", sa.Text(), nullable=False),
        sa.Column("symbol", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("account_id", "symbol"),
        sa.CheckConstraint("quantity > 0", name="check_holding_quantity_positive"),
    )

    # Table: transactions
    op.create_table(
        "transactions",
        sa.Column(
            "id", sa.Integer(), nullable=False, primary_key=True, autoincrement=True
        ),
        sa.Column("account_id", sa.Text(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("symbol", sa.Text(), nullable=False),
        sa.Column("side", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_micros", sa.Integer(), nullable=False),
        sa.Column("executed_at", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("account_id", "seq", name="uq_transactions_account_seq"),
        sa.CheckConstraint("side IN ('BUY', 'SELL')", name="check_transaction_side"),
        sa.CheckConstraint("quantity > 0", name="check_transaction_quantity_positive"),
        sa.CheckConstraint("price_micros >= 0", name="check_transaction_price"),
    )
    op.create_index(
        "ix_transactions_account_executed_at",
        "transactions",
        ["account_id", "executed_at"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_transactions_account_executed_at", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("holdings")
    op.drop_table("accounts")
