"""
Account service: the account store used by the ledger.

Accounts are created and looked up here, always scoped to the
caller's company. The cached balance is written only by
recompute_balance, which the LedgerService calls after every
posting while it holds the account's row lock.
"""

from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from finance_ledger.amounts import to_amount
from finance_ledger.context import LedgerContext
from finance_ledger.exceptions import AccountNotFoundError, LedgerValidationError
from finance_ledger.models.account import Account
from finance_ledger.models.transaction import Transaction
from finance_ledger.models.enums import TransactionStatus, default_normal_balance
from finance_ledger.schemas.account import AccountCreate


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, ctx: LedgerContext, request: AccountCreate) -> Account:
        """
        Create a new account for the caller's company.

        Raises LedgerValidationError if the code is already used
        within the company.
        """
        existing = self.db.execute(
            select(Account).where(
                Account.company_id == ctx.company_id,
                Account.code == request.code,
            )
        ).scalar_one_or_none()

        if existing:
            raise LedgerValidationError(
                f"Account with code '{request.code}' already exists"
            )

        account = Account(
            company_id=ctx.company_id,
            code=request.code,
            name=request.name,
            account_type=request.account_type,
            normal_balance=(
                request.normal_balance
                or default_normal_balance(request.account_type)
            ),
            balance=Decimal("0"),
        )
        self.db.add(account)
        self.db.flush()
        return account

    def find_by_id(
        self, ctx: LedgerContext, account_id: int, lock: bool = False
    ) -> Account:
        """
        Resolve an account within the caller's company.

        With lock=True the row is selected FOR UPDATE, which
        serializes concurrent postings against the same account.
        """
        account = self.db.execute(
            self.account_query(ctx, account_id, lock=lock)
        ).scalar_one_or_none()
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    @staticmethod
    def account_query(ctx: LedgerContext, account_id: int, lock: bool = False):
        """SELECT for one of the company's accounts, FOR UPDATE when locking."""
        query = select(Account).where(
            Account.id == account_id,
            Account.company_id == ctx.company_id,
        )
        if lock:
            query = query.with_for_update()
        return query

    def lock_accounts(
        self, ctx: LedgerContext, account_ids
    ) -> dict[int, Account]:
        """
        Lock several accounts in ascending id order.

        A fixed lock order keeps two multi-account postings that
        touch the same accounts from deadlocking each other.
        """
        ids = sorted(set(account_ids))
        accounts = self.db.execute(
            select(Account)
            .where(
                Account.company_id == ctx.company_id,
                Account.id.in_(ids),
            )
            .order_by(Account.id)
            .with_for_update()
        ).scalars().all()

        found = {a.id: a for a in accounts}
        for account_id in ids:
            if account_id not in found:
                raise AccountNotFoundError(account_id)
        return found

    def list_accounts(
        self, ctx: LedgerContext, active_only: bool = False
    ) -> list[Account]:
        query = select(Account).where(Account.company_id == ctx.company_id)
        if active_only:
            query = query.where(Account.is_active.is_(True))
        return list(self.db.execute(query.order_by(Account.code)).scalars().all())

    def calculate_balance(self, account: Account) -> Decimal:
        """
        Derive an account's balance from its completed transactions.

        Debit-normal accounts: balance = debits - credits
        Credit-normal accounts: balance = credits - debits
        """
        total_debits, total_credits = self.db.execute(
            select(
                func.coalesce(func.sum(Transaction.debit_amount), 0),
                func.coalesce(func.sum(Transaction.credit_amount), 0),
            ).where(
                Transaction.account_id == account.id,
                Transaction.status == TransactionStatus.COMPLETED,
            )
        ).one()

        debits = to_amount(total_debits)
        credits = to_amount(total_credits)
        if account.is_debit_normal:
            return debits - credits
        return credits - debits

    def recompute_balance(self, account: Account) -> Decimal:
        """
        Rewrite the cached balance from the full transaction set.

        Idempotent: calling it again without new postings leaves
        the balance unchanged. Callers posting concurrently must
        hold the account's row lock (find_by_id(lock=True)).
        """
        self.db.flush()
        account.balance = self.calculate_balance(account)
        self.db.flush()
        return account.balance
