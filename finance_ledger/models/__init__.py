"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from finance_ledger.models.base import Base
from finance_ledger.models.enums import (
    AccountType,
    NormalBalance,
    TransactionType,
    TransactionStatus,
)
from finance_ledger.models.account import Account
from finance_ledger.models.transaction import Transaction

__all__ = [
    "Base",
    "AccountType",
    "NormalBalance",
    "TransactionType",
    "TransactionStatus",
    "Account",
    "Transaction",
]
