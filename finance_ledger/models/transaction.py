"""
Ledger transaction model.

Each row records one monetary movement against one account:
either a debit or a credit, never both. Rows are append-only.
The single permitted mutation is the reversal stamp written by
TransactionService.stamp_reversal.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, Integer, ForeignKey, JSON,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finance_ledger.models.base import Base
from finance_ledger.models.enums import TransactionType, TransactionStatus

DESCRIPTION_LENGTH = 255
REFERENCE_LENGTH = 64


class Transaction(Base):
    """
    A posted ledger entry.

    Related postings share a reference_number. The balance rule
    for a posting group is enforced by the LedgerService, not by
    the model.
    """

    __tablename__ = "ledger_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, name="transaction_type_enum"),
        nullable=False,
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(TransactionStatus, name="transaction_status_enum"),
        nullable=False,
        default=TransactionStatus.COMPLETED,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    description: Mapped[str] = mapped_column(
        String(DESCRIPTION_LENGTH), nullable=False
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    reference_number: Mapped[str] = mapped_column(
        String(REFERENCE_LENGTH), nullable=False, index=True
    )
    debit_account_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    credit_account_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    # "metadata" is reserved on declarative classes
    entry_metadata: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    account: Mapped["Account"] = relationship(back_populates="transactions")

    @property
    def is_reversed(self) -> bool:
        return bool((self.entry_metadata or {}).get("reversed"))

    def __repr__(self) -> str:
        side = "DR" if self.debit_amount else "CR"
        return (
            f"<Transaction {self.reference_number} {side} "
            f"{self.amount} ({self.status.value})>"
        )
