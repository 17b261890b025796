"""
Pydantic schemas for account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_ledger.models.enums import AccountType, NormalBalance


class AccountCreate(BaseModel):
    """
    Request to create an account.

    normal_balance defaults from account_type when omitted.
    """
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    account_type: AccountType
    normal_balance: NormalBalance | None = None


class AccountResponse(BaseModel):
    id: int
    company_id: int
    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    balance: Decimal
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountBalanceResponse(BaseModel):
    """Response for an account balance query."""
    account_id: int
    account_code: str
    normal_balance: NormalBalance
    balance: Decimal
