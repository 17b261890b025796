"""
Ledger service: the double-entry engine.

This service enforces the fundamental rules:
1. Every entry is either a debit or a credit, never both
2. Every posting group balances (debits = credits)
3. Entries are append-only; corrections are reversals
4. An account's cached balance always equals the signed sum
   of its completed entries

All writes go through a UnitOfWork, so a posting group is
committed whole or not at all. No other code writes ledger rows.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, func

from finance_ledger.amounts import AMOUNT_SCALE, ZERO, decimal_places, to_amount
from finance_ledger.config import Settings, get_settings
from finance_ledger.context import LedgerContext
from finance_ledger.exceptions import (
    AccountInactiveError,
    FieldTooLongError,
    InvalidAmountSplitError,
    MissingFieldError,
    ReversalNotAllowedError,
    UnbalancedJournalEntryError,
)
from finance_ledger.models.account import Account
from finance_ledger.models.transaction import (
    DESCRIPTION_LENGTH,
    REFERENCE_LENGTH,
    Transaction,
)
from finance_ledger.models.enums import TransactionStatus, TransactionType
from finance_ledger.schemas.ledger import (
    DoubleEntrySide,
    JournalLine,
    LedgerEntryCreate,
    PostingCommon,
    TrialBalance,
    TrialBalanceRow,
)
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.transaction_service import (
    TransactionService,
    end_of_day,
    generate_reference_number,
)
from finance_ledger.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class DoubleEntryResult:
    debit_transaction: Transaction
    credit_transaction: Transaction
    reference_number: str


@dataclass
class JournalEntryResult:
    transactions: list[Transaction]
    reference_number: str
    total_debits: Decimal
    total_credits: Decimal


class LedgerService:
    """
    All ledger postings pass through this service.

    The caller supplies the UnitOfWork, which makes the atomic
    boundary part of the interface: each public write method
    opens one atomic block, and nested calls join it.
    """

    def __init__(self, uow: UnitOfWork, settings: Settings | None = None):
        self.uow = uow
        self.db = uow.session
        self.settings = settings or get_settings()
        self.tolerance = self.settings.LEDGER_BALANCE_TOLERANCE
        self.accounts = AccountService(self.db)
        self.transactions = TransactionService(self.db)

    # --- Validation ---

    @staticmethod
    def _require(account_id, description) -> None:
        if not account_id:
            raise MissingFieldError("account_id")
        if not description or not str(description).strip():
            raise MissingFieldError("description")

    @staticmethod
    def _split_amounts(debit, credit) -> tuple[Decimal, Decimal]:
        """Return (debit, credit) or raise if the pair is not a valid one-sided amount."""
        if debit is None and credit is None:
            raise InvalidAmountSplitError(
                "Either 'debit' or 'credit' amount is required"
            )

        debit = Decimal(debit or 0)
        credit = Decimal(credit or 0)

        for amount in (debit, credit):
            if not amount.is_finite():
                raise InvalidAmountSplitError("Amounts must be finite numbers")
            if decimal_places(amount) > AMOUNT_SCALE:
                raise InvalidAmountSplitError(
                    f"Amounts cannot have more than {AMOUNT_SCALE} decimal places"
                )
        if debit < 0 or credit < 0:
            raise InvalidAmountSplitError("Amounts cannot be negative")
        if debit > 0 and credit > 0:
            raise InvalidAmountSplitError(
                "Cannot have both debit and credit amounts"
            )
        if debit == 0 and credit == 0:
            raise InvalidAmountSplitError(
                "Must have either debit or credit amount"
            )
        return debit, credit

    @staticmethod
    def _check_length(field: str, value, max_length: int) -> None:
        if value is not None and len(value) > max_length:
            raise FieldTooLongError(field, max_length)

    def _is_balanced(self, total_debits: Decimal, total_credits: Decimal) -> bool:
        return abs(total_debits - total_credits) <= self.tolerance

    @staticmethod
    def determine_transaction_type(
        account: Account, debit: Decimal
    ) -> TransactionType:
        """
        Posting on the account's normal side is "income", the
        other side "expense".
        """
        on_debit_side = debit > 0
        if on_debit_side == account.is_debit_normal:
            return TransactionType.INCOME
        return TransactionType.EXPENSE

    def generate_reference_number(self) -> str:
        return generate_reference_number(self.settings.LEDGER_REFERENCE_PREFIX)

    # --- Posting ---

    def post_entry(
        self, ctx: LedgerContext, entry: LedgerEntryCreate
    ) -> Transaction:
        """
        Post a single debit or credit against one account.

        Fields and the amount split are validated before anything
        is written. The account is then locked, the row inserted,
        and the account's cached balance recomputed, all in one
        unit of work.
        The row is logged once the outermost unit commits.
        """
        self._require(entry.account_id, entry.description)
        debit, credit = self._split_amounts(entry.debit, entry.credit)
        self._check_length("description", entry.description, DESCRIPTION_LENGTH)
        self._check_length(
            "reference_number", entry.reference_number, REFERENCE_LENGTH
        )

        with self.uow.atomic():
            account = self.accounts.find_by_id(ctx, entry.account_id, lock=True)
            if not account.is_active:
                raise AccountInactiveError(account.code)

            metadata = {
                **entry.metadata,
                "debit_amount": str(debit),
                "credit_amount": str(credit),
                "reference_type": entry.reference_type,
                "reference_id": entry.reference_id,
                "ledger_entry": True,
            }

            txn = self.transactions.create(
                company_id=ctx.company_id,
                user_id=ctx.user_id,
                account_id=account.id,
                category_id=entry.category_id,
                type=self.determine_transaction_type(account, debit),
                status=TransactionStatus.COMPLETED,
                amount=max(debit, credit),
                debit_amount=debit,
                credit_amount=credit,
                description=entry.description,
                transaction_date=entry.transaction_date or datetime.utcnow(),
                reference_number=(
                    entry.reference_number or self.generate_reference_number()
                ),
                debit_account_code=account.code if debit > 0 else None,
                credit_account_code=account.code if credit > 0 else None,
                entry_metadata=metadata,
            )

            self.accounts.recompute_balance(account)

            created = {
                "transaction_id": txn.id,
                "account_id": account.id,
                "account_code": account.code,
                "debit": debit,
                "credit": credit,
                "description": entry.description,
                "reference_number": txn.reference_number,
            }
            self.uow.after_commit(
                lambda: logger.info("Ledger entry created", extra=created)
            )
            return txn

    def post_double_entry(
        self,
        ctx: LedgerContext,
        debit_side: DoubleEntrySide,
        credit_side: DoubleEntrySide,
        common: PostingCommon | None = None,
    ) -> DoubleEntryResult:
        """
        Post a debit and an equal credit under one reference number.

        Either both rows are committed or neither is.
        """
        common = common or PostingCommon()
        for side in (debit_side, credit_side):
            if not side.account_id:
                raise MissingFieldError("account_id")

        debit_amount, _ = self._split_amounts(debit_side.amount, None)
        _, credit_amount = self._split_amounts(None, credit_side.amount)
        if not self._is_balanced(debit_amount, credit_amount):
            raise UnbalancedJournalEntryError(debit_amount, credit_amount)

        description = common.description or "Double entry transaction"
        for suffix in (" (Debit)", " (Credit)"):
            self._check_length(
                "description", f"{description}{suffix}", DESCRIPTION_LENGTH
            )
        self._check_length(
            "reference_number", common.reference_number, REFERENCE_LENGTH
        )

        reference_number = (
            common.reference_number or self.generate_reference_number()
        )
        transaction_date = common.transaction_date or datetime.utcnow()

        with self.uow.atomic():
            self.accounts.lock_accounts(
                ctx, [debit_side.account_id, credit_side.account_id]
            )

            debit_txn = self.post_entry(ctx, LedgerEntryCreate(
                account_id=debit_side.account_id,
                debit=debit_amount,
                description=f"{description} (Debit)",
                transaction_date=transaction_date,
                reference_number=reference_number,
                category_id=debit_side.category_id,
                metadata={**debit_side.metadata, **common.metadata},
            ))
            credit_txn = self.post_entry(ctx, LedgerEntryCreate(
                account_id=credit_side.account_id,
                credit=credit_amount,
                description=f"{description} (Credit)",
                transaction_date=transaction_date,
                reference_number=reference_number,
                category_id=credit_side.category_id,
                metadata={**credit_side.metadata, **common.metadata},
            ))

            posted = {
                "reference_number": reference_number,
                "debit_account_id": debit_side.account_id,
                "credit_account_id": credit_side.account_id,
                "amount": debit_amount,
            }
            self.uow.after_commit(
                lambda: logger.info("Double entry posted", extra=posted)
            )

        return DoubleEntryResult(
            debit_transaction=debit_txn,
            credit_transaction=credit_txn,
            reference_number=reference_number,
        )

    def post_journal_entry(
        self,
        ctx: LedgerContext,
        entries: list[JournalLine],
        common: PostingCommon | None = None,
    ) -> JournalEntryResult:
        """
        Post N debits and credits that together balance.

        Every row is validated and the totals compared before the
        first insert. A failure on any row rolls back the whole
        journal entry.
        """
        common = common or PostingCommon()
        if not entries:
            raise MissingFieldError("entries")

        default_description = common.description or "Journal entry"
        total_debits = ZERO
        total_credits = ZERO
        splits = []
        for line in entries:
            description = line.description or default_description
            self._require(line.account_id, description)
            self._check_length("description", description, DESCRIPTION_LENGTH)
            debit, credit = self._split_amounts(line.debit, line.credit)
            total_debits += debit
            total_credits += credit
            splits.append((line, description, debit, credit))

        if not self._is_balanced(total_debits, total_credits):
            raise UnbalancedJournalEntryError(total_debits, total_credits)
        self._check_length(
            "reference_number", common.reference_number, REFERENCE_LENGTH
        )

        reference_number = (
            common.reference_number or self.generate_reference_number()
        )
        transaction_date = common.transaction_date or datetime.utcnow()

        transactions = []
        with self.uow.atomic():
            self.accounts.lock_accounts(ctx, [line.account_id for line in entries])

            for line, description, debit, credit in splits:
                transactions.append(self.post_entry(ctx, LedgerEntryCreate(
                    account_id=line.account_id,
                    debit=debit or None,
                    credit=credit or None,
                    description=description,
                    transaction_date=transaction_date,
                    reference_number=reference_number,
                    category_id=line.category_id,
                    metadata={**line.metadata, **common.metadata},
                )))

            posted = {
                "reference_number": reference_number,
                "line_count": len(transactions),
                "total_debits": total_debits,
                "total_credits": total_credits,
            }
            self.uow.after_commit(
                lambda: logger.info("Journal entry posted", extra=posted)
            )

        return JournalEntryResult(
            transactions=transactions,
            reference_number=reference_number,
            total_debits=total_debits,
            total_credits=total_credits,
        )

    def reverse_transaction(
        self, ctx: LedgerContext, original: Transaction | int, reason: str
    ) -> Transaction:
        """
        Cancel a posting by posting its mirror image.

        The reversal hits the same account with debit and credit
        swapped. The original row stays in place and is stamped
        with a pointer to its reversal.
        """
        if not reason or not reason.strip():
            raise MissingFieldError("reason")
        self._check_length("reason", reason, DESCRIPTION_LENGTH)
        original_id = original if isinstance(original, int) else original.id

        with self.uow.atomic():
            original = self.transactions.get_transaction(ctx, original_id, lock=True)
            if original.status != TransactionStatus.COMPLETED:
                raise ReversalNotAllowedError(
                    f"Can only reverse completed transactions "
                    f"(status: {original.status.value})"
                )
            if original.is_reversed:
                raise ReversalNotAllowedError(
                    f"Transaction {original.id} already reversed"
                )

            reversal = self.post_entry(ctx, LedgerEntryCreate(
                account_id=original.account_id,
                debit=original.credit_amount,
                credit=original.debit_amount,
                description=(
                    f"Reversal: {original.description} - {reason}"
                )[:DESCRIPTION_LENGTH],
                reference_number=(
                    f"REV-{original.reference_number}"
                )[:REFERENCE_LENGTH],
                category_id=original.category_id,
                metadata={
                    "reversal_of_transaction_id": original.id,
                    "reversal_reason": reason,
                    "original_reference": original.reference_number,
                },
            ))
            self.transactions.stamp_reversal(original, reversal, reason)

            stamped = {
                "transaction_id": original.id,
                "reversal_transaction_id": reversal.id,
                "reason": reason,
            }
            self.uow.after_commit(
                lambda: logger.info("Ledger entry reversed", extra=stamped)
            )

        return reversal

    # --- Queries ---

    def get_account_balance(self, ctx: LedgerContext, account_id: int) -> Decimal:
        """Return the cached balance of an account."""
        account = self.accounts.find_by_id(ctx, account_id)
        return to_amount(account.balance)

    def get_account_ledger(
        self,
        ctx: LedgerContext,
        account_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Transaction]:
        """Completed transactions of one account within a date range."""
        self.accounts.find_by_id(ctx, account_id)
        return self.transactions.query_by_account_and_date_range(
            ctx, account_id, start, end
        )

    def get_posting_group(
        self, ctx: LedgerContext, reference_number: str
    ) -> list[Transaction]:
        return self.transactions.get_by_reference(ctx, reference_number)

    def trial_balance(
        self, ctx: LedgerContext, as_of_date: date | None = None
    ) -> TrialBalance:
        """
        Sum debit and credit activity per active account up to a date.

        Computed by one aggregate statement, so the result reflects
        a single committed snapshot even while postings continue.
        Accounts without activity are left out.
        """
        if isinstance(as_of_date, datetime):
            as_of_date = as_of_date.date()
        as_of_date = as_of_date or datetime.utcnow().date()

        debit_sum = func.coalesce(
            func.sum(Transaction.debit_amount), 0
        ).label("debit_total")
        credit_sum = func.coalesce(
            func.sum(Transaction.credit_amount), 0
        ).label("credit_total")

        results = self.db.execute(
            select(
                Account.id.label("account_id"),
                Account.code.label("account_code"),
                Account.name.label("account_name"),
                Account.normal_balance,
                debit_sum,
                credit_sum,
            )
            .join(Transaction, Transaction.account_id == Account.id)
            .where(
                Account.company_id == ctx.company_id,
                Account.is_active.is_(True),
                Transaction.status == TransactionStatus.COMPLETED,
                Transaction.transaction_date < end_of_day(as_of_date),
            )
            .group_by(
                Account.id,
                Account.code,
                Account.name,
                Account.normal_balance,
            )
            .order_by(Account.code)
        ).all()

        rows = []
        total_debits = ZERO
        total_credits = ZERO
        for row in results:
            debit_total = to_amount(row.debit_total)
            credit_total = to_amount(row.credit_total)
            if debit_total == 0 and credit_total == 0:
                continue

            rows.append(TrialBalanceRow(
                account_id=row.account_id,
                account_code=row.account_code,
                account_name=row.account_name,
                normal_balance=row.normal_balance,
                debit_total=debit_total,
                credit_total=credit_total,
            ))
            total_debits += debit_total
            total_credits += credit_total

        return TrialBalance(
            as_of_date=as_of_date,
            accounts=rows,
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=self._is_balanced(total_debits, total_credits),
        )

    def check_integrity(self, ctx: LedgerContext) -> dict:
        """
        Verify the company's ledger as a whole.

        Reports grand debit/credit totals over every completed
        entry, and lists accounts whose cached balance no longer
        matches the balance derived from their entries.
        """
        total_debits, total_credits = self.db.execute(
            select(
                func.coalesce(func.sum(Transaction.debit_amount), 0),
                func.coalesce(func.sum(Transaction.credit_amount), 0),
            ).where(
                Transaction.company_id == ctx.company_id,
                Transaction.status == TransactionStatus.COMPLETED,
            )
        ).one()
        total_debits = to_amount(total_debits)
        total_credits = to_amount(total_credits)

        drifted = [
            account.code
            for account in self.accounts.list_accounts(ctx)
            if to_amount(account.balance) != self.accounts.calculate_balance(account)
        ]
        if drifted:
            logger.warning(
                "Cached account balances out of sync",
                extra={"company_id": ctx.company_id, "accounts": drifted},
            )

        return {
            "total_debits": total_debits,
            "total_credits": total_credits,
            "difference": total_debits - total_credits,
            "is_balanced": self._is_balanced(total_debits, total_credits),
            "drifted_accounts": drifted,
        }
