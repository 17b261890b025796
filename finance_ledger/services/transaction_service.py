"""
Transaction service: the transaction store used by the ledger.

Rows are created here and never updated, with one exception:
stamp_reversal, the narrow path that records reversal linkage
on an original posting.
"""

import secrets
from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from finance_ledger.context import LedgerContext
from finance_ledger.exceptions import TransactionNotFoundError
from finance_ledger.models.transaction import Transaction
from finance_ledger.models.enums import TransactionStatus


def generate_reference_number(prefix: str = "TXN", today: date | None = None) -> str:
    """
    Build a human-readable grouping key like TXN-20241231-A1B2C3.

    The random suffix makes collisions unlikely; the database
    does not enforce uniqueness.
    """
    today = today or datetime.utcnow().date()
    return f"{prefix}-{today:%Y%m%d}-{secrets.token_hex(3).upper()}"


class TransactionService:

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields) -> Transaction:
        """Insert a new ledger row. Only the LedgerService calls this."""
        txn = Transaction(**fields)
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_transaction(
        self, ctx: LedgerContext, transaction_id: int, lock: bool = False
    ) -> Transaction:
        query = select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.company_id == ctx.company_id,
        )
        if lock:
            query = query.with_for_update()

        txn = self.db.execute(query).scalar_one_or_none()
        if not txn:
            raise TransactionNotFoundError(transaction_id)
        return txn

    def stamp_reversal(
        self, original: Transaction, reversal: Transaction, reason: str
    ) -> Transaction:
        """
        Record on the original posting that it has been reversed.

        This is the only permitted post-creation write to a
        ledger row. The metadata dict is replaced, not mutated,
        so the JSON column change is detected.
        """
        original.entry_metadata = {
            **(original.entry_metadata or {}),
            "reversed": True,
            "reversed_by_transaction_id": reversal.id,
            "reversal_reason": reason,
            "reversed_at": datetime.utcnow().isoformat(),
        }
        self.db.flush()
        return original

    def query_by_account_and_date_range(
        self,
        ctx: LedgerContext,
        account_id: int,
        start: date | None = None,
        end: date | None = None,
        status: TransactionStatus | None = TransactionStatus.COMPLETED,
    ) -> list[Transaction]:
        """
        Return an account's transactions dated within [start, end], oldest first.

        Both bounds are inclusive whole days; either may be omitted.
        """
        query = select(Transaction).where(
            Transaction.company_id == ctx.company_id,
            Transaction.account_id == account_id,
        )
        if status is not None:
            query = query.where(Transaction.status == status)
        if start is not None:
            query = query.where(
                Transaction.transaction_date >= datetime.combine(start, time.min)
            )
        if end is not None:
            query = query.where(
                Transaction.transaction_date < end_of_day(end)
            )

        return list(self.db.execute(
            query.order_by(Transaction.transaction_date, Transaction.id)
        ).scalars().all())

    def get_by_reference(
        self, ctx: LedgerContext, reference_number: str
    ) -> list[Transaction]:
        """Return every transaction of a posting group."""
        return list(self.db.execute(
            select(Transaction)
            .where(
                Transaction.company_id == ctx.company_id,
                Transaction.reference_number == reference_number,
            )
            .order_by(Transaction.id)
        ).scalars().all())


def end_of_day(day: date) -> datetime:
    """Exclusive upper bound covering the whole of ``day``."""
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day + timedelta(days=1), time.min)
