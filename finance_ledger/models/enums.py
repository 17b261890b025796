"""
Shared enumerations for database models.

The lowercase values are the ones reporting code reads,
so they must not change.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, enum.Enum):
    """Side on which an account's balance increases."""
    DEBIT = "debit"
    CREDIT = "credit"


class TransactionType(str, enum.Enum):
    """
    Binary classification derived from the posted side and the
    account's normal balance. Asset transfers still land in one
    of these two buckets.
    """
    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, enum.Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    VOIDED = "voided"


# Debit-normal account types; everything else is credit-normal.
DEBIT_NORMAL_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})


def default_normal_balance(account_type: AccountType) -> NormalBalance:
    if account_type in DEBIT_NORMAL_TYPES:
        return NormalBalance.DEBIT
    return NormalBalance.CREDIT
