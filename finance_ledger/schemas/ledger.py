"""
Pydantic schemas for ledger operations.

Request models are deliberately lenient about missing and zero
amounts: the LedgerService owns that validation and raises its
own typed errors for it. Scale and length limits mirror the
columns so oversized input fails with a 422 at the edge.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from finance_ledger.amounts import AMOUNT_SCALE
from finance_ledger.models.enums import (
    NormalBalance,
    TransactionStatus,
    TransactionType,
)
from finance_ledger.models.transaction import DESCRIPTION_LENGTH, REFERENCE_LENGTH


# --- Request Schemas ---

class LedgerEntryCreate(BaseModel):
    """A single debit or credit against one account."""
    account_id: int | None = None
    description: str | None = Field(default=None, max_length=DESCRIPTION_LENGTH)
    debit: Decimal | None = Field(default=None, decimal_places=AMOUNT_SCALE)
    credit: Decimal | None = Field(default=None, decimal_places=AMOUNT_SCALE)
    transaction_date: datetime | None = None
    reference_number: str | None = Field(default=None, max_length=REFERENCE_LENGTH)
    category_id: int | None = None
    reference_type: str | None = None
    reference_id: str | int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class DoubleEntrySide(BaseModel):
    """One side of a double-entry posting; the side decides debit or credit."""
    account_id: int | None = None
    amount: Decimal | None = Field(default=None, decimal_places=AMOUNT_SCALE)
    category_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class JournalLine(BaseModel):
    """One row of an N-way journal entry."""
    account_id: int | None = None
    debit: Decimal | None = Field(default=None, decimal_places=AMOUNT_SCALE)
    credit: Decimal | None = Field(default=None, decimal_places=AMOUNT_SCALE)
    description: str | None = Field(default=None, max_length=DESCRIPTION_LENGTH)
    category_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class PostingCommon(BaseModel):
    """Fields shared by every row of a posting group."""
    description: str | None = Field(default=None, max_length=DESCRIPTION_LENGTH)
    transaction_date: datetime | None = None
    reference_number: str | None = Field(default=None, max_length=REFERENCE_LENGTH)
    metadata: dict[str, Any] = Field(default_factory=dict)


class PostDoubleEntryRequest(BaseModel):
    debit: DoubleEntrySide
    credit: DoubleEntrySide
    common: PostingCommon = Field(default_factory=PostingCommon)


class PostJournalEntryRequest(BaseModel):
    entries: list[JournalLine]
    common: PostingCommon = Field(default_factory=PostingCommon)


class ReverseTransactionRequest(BaseModel):
    reason: str = Field(default="", max_length=DESCRIPTION_LENGTH)


# --- Response Schemas ---

class LedgerTransactionResponse(BaseModel):
    id: int
    company_id: int
    user_id: int | None
    account_id: int
    category_id: int | None
    type: TransactionType
    status: TransactionStatus
    amount: Decimal
    debit_amount: Decimal
    credit_amount: Decimal
    description: str
    transaction_date: datetime
    reference_number: str
    debit_account_code: str | None
    credit_account_code: str | None
    metadata: dict[str, Any] = Field(
        validation_alias=AliasChoices("entry_metadata", "metadata")
    )
    created_at: datetime

    model_config = {"from_attributes": True}


class DoubleEntryResponse(BaseModel):
    debit_transaction: LedgerTransactionResponse
    credit_transaction: LedgerTransactionResponse
    reference_number: str

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    transactions: list[LedgerTransactionResponse]
    reference_number: str
    total_debits: Decimal
    total_credits: Decimal

    model_config = {"from_attributes": True}


class TrialBalanceRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    normal_balance: NormalBalance
    debit_total: Decimal
    credit_total: Decimal


class TrialBalance(BaseModel):
    """Summed debit/credit activity per account as of a date."""
    as_of_date: date
    accounts: list[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal
    is_balanced: bool


class IntegrityReport(BaseModel):
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    drifted_accounts: list[str]
