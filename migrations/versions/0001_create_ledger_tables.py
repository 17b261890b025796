"""create ledger tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


ACCOUNT_TYPES = ("ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE")
NORMAL_BALANCES = ("DEBIT", "CREDIT")
TRANSACTION_TYPES = ("INCOME", "EXPENSE")
TRANSACTION_STATUSES = ("COMPLETED", "PENDING", "VOIDED")


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "account_type",
            sa.Enum(*ACCOUNT_TYPES, name="account_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "normal_balance",
            sa.Enum(*NORMAL_BALANCES, name="normal_balance_enum"),
            nullable=False,
        ),
        sa.Column("balance", sa.Numeric(19, 4), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "code", name="uq_accounts_company_code"),
    )
    op.create_index("ix_accounts_company_id", "accounts", ["company_id"])

    op.create_table(
        "ledger_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column(
            "type",
            sa.Enum(*TRANSACTION_TYPES, name="transaction_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(*TRANSACTION_STATUSES, name="transaction_status_enum"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("debit_amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("credit_amount", sa.Numeric(19, 4), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("transaction_date", sa.DateTime(), nullable=False),
        sa.Column("reference_number", sa.String(length=64), nullable=False),
        sa.Column("debit_account_code", sa.String(length=20), nullable=True),
        sa.Column("credit_account_code", sa.String(length=20), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_ledger_transactions_company_id", "ledger_transactions", ["company_id"]
    )
    op.create_index(
        "ix_ledger_transactions_account_id", "ledger_transactions", ["account_id"]
    )
    op.create_index(
        "ix_ledger_transactions_transaction_date",
        "ledger_transactions",
        ["transaction_date"],
    )
    op.create_index(
        "ix_ledger_transactions_reference_number",
        "ledger_transactions",
        ["reference_number"],
    )


def downgrade() -> None:
    op.drop_index("ix_ledger_transactions_reference_number", "ledger_transactions")
    op.drop_index("ix_ledger_transactions_transaction_date", "ledger_transactions")
    op.drop_index("ix_ledger_transactions_account_id", "ledger_transactions")
    op.drop_index("ix_ledger_transactions_company_id", "ledger_transactions")
    op.drop_table("ledger_transactions")
    op.drop_index("ix_accounts_company_id", "accounts")
    op.drop_table("accounts")
    sa.Enum(name="transaction_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transaction_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="normal_balance_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="account_type_enum").drop(op.get_bind(), checkfirst=True)
