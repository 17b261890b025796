"""
Tests for the AccountService.

Covers account creation, per-company code uniqueness,
row locking lookups and balance recomputation.
"""

from decimal import Decimal

import pytest

from finance_ledger.exceptions import AccountNotFoundError, LedgerValidationError
from finance_ledger.models.enums import AccountType, NormalBalance
from finance_ledger.schemas.account import AccountCreate
from finance_ledger.schemas.ledger import LedgerEntryCreate
from finance_ledger.services.account_service import AccountService


def new_account(service, ctx, code, account_type=AccountType.ASSET, **kwargs):
    return service.create_account(ctx, AccountCreate(
        code=code, name=kwargs.pop("name", code), account_type=account_type, **kwargs
    ))


# --- Creation Tests ---

class TestCreateAccount:

    def test_create_account(self, db_session, ctx):
        service = AccountService(db_session)
        account = new_account(service, ctx, "1000", name="Cash")

        assert account.id is not None
        assert account.company_id == ctx.company_id
        assert account.code == "1000"
        assert account.name == "Cash"
        assert account.balance == Decimal("0")
        assert account.is_active is True

    @pytest.mark.parametrize("account_type, expected", [
        (AccountType.ASSET, NormalBalance.DEBIT),
        (AccountType.EXPENSE, NormalBalance.DEBIT),
        (AccountType.LIABILITY, NormalBalance.CREDIT),
        (AccountType.EQUITY, NormalBalance.CREDIT),
        (AccountType.REVENUE, NormalBalance.CREDIT),
    ])
    def test_default_normal_balance(self, db_session, ctx, account_type, expected):
        service = AccountService(db_session)
        account = new_account(service, ctx, "X1", account_type)
        assert account.normal_balance == expected

    def test_explicit_normal_balance_kept(self, db_session, ctx):
        service = AccountService(db_session)
        # Contra-asset: asset type, credit normal
        account = new_account(
            service, ctx, "1590", AccountType.ASSET,
            name="Accumulated Depreciation",
            normal_balance=NormalBalance.CREDIT,
        )
        assert account.normal_balance == NormalBalance.CREDIT
        assert not account.is_debit_normal

    def test_duplicate_code_rejected(self, db_session, ctx):
        service = AccountService(db_session)
        new_account(service, ctx, "1000")

        with pytest.raises(LedgerValidationError, match="already exists"):
            new_account(service, ctx, "1000")

    def test_same_code_allowed_in_other_company(self, db_session, ctx, other_ctx):
        service = AccountService(db_session)
        first = new_account(service, ctx, "1000")
        second = new_account(service, other_ctx, "1000")
        assert first.id != second.id


# --- Lookup Tests ---

class TestFindAccounts:

    def test_find_by_id(self, db_session, ctx):
        service = AccountService(db_session)
        account = new_account(service, ctx, "1000")
        db_session.commit()

        assert service.find_by_id(ctx, account.id).code == "1000"
        assert service.find_by_id(ctx, account.id, lock=True).code == "1000"

    def test_find_by_id_other_company(self, db_session, ctx, other_ctx):
        service = AccountService(db_session)
        account = new_account(service, ctx, "1000")
        db_session.commit()

        with pytest.raises(AccountNotFoundError):
            service.find_by_id(other_ctx, account.id)

    def test_lock_accounts_returns_all(self, db_session, ctx):
        service = AccountService(db_session)
        a = new_account(service, ctx, "1000")
        b = new_account(service, ctx, "2000", AccountType.LIABILITY)
        db_session.commit()

        locked = service.lock_accounts(ctx, [b.id, a.id, b.id])
        assert list(locked) == [a.id, b.id]

    def test_lock_accounts_missing_id(self, db_session, ctx):
        service = AccountService(db_session)
        a = new_account(service, ctx, "1000")
        db_session.commit()

        with pytest.raises(AccountNotFoundError, match="Account 404 not found"):
            service.lock_accounts(ctx, [a.id, 404])

    def test_list_accounts_ordered_by_code(self, db_session, ctx):
        service = AccountService(db_session)
        new_account(service, ctx, "4000", AccountType.REVENUE)
        closed = new_account(service, ctx, "1000")
        new_account(service, ctx, "2000", AccountType.LIABILITY)
        closed.is_active = False
        db_session.commit()

        assert [a.code for a in service.list_accounts(ctx)] == [
            "1000", "2000", "4000",
        ]
        assert [a.code for a in service.list_accounts(ctx, active_only=True)] == [
            "2000", "4000",
        ]


# --- Balance Tests ---

class TestBalances:

    def test_calculate_balance_without_activity(self, db_session, ctx):
        service = AccountService(db_session)
        account = new_account(service, ctx, "1000")
        assert service.calculate_balance(account) == Decimal("0")

    def test_recompute_is_idempotent(self, ledger, ctx, make_account):
        cash = make_account("1000")
        ledger.post_entry(ctx, LedgerEntryCreate(
            account_id=cash.id, debit=Decimal("42.10"), description="Deposit",
        ))

        first = ledger.accounts.recompute_balance(cash)
        second = ledger.accounts.recompute_balance(cash)
        assert first == second == Decimal("42.10")

    def test_credit_normal_balance_sign(self, ledger, ctx, make_account):
        loan = make_account("2100", AccountType.LIABILITY)
        ledger.post_entry(ctx, LedgerEntryCreate(
            account_id=loan.id, credit=Decimal("500"), description="Borrow",
        ))
        ledger.post_entry(ctx, LedgerEntryCreate(
            account_id=loan.id, debit=Decimal("120"), description="Repay",
        ))
        assert ledger.accounts.calculate_balance(loan) == Decimal("380")
