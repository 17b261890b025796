"""
Account API endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finance_ledger.api.dependencies import get_ledger_context, get_uow
from finance_ledger.context import LedgerContext
from finance_ledger.models.base import get_db
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.unit_of_work import UnitOfWork
from finance_ledger.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountBalanceResponse,
)
from finance_ledger.schemas.ledger import LedgerTransactionResponse

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    ctx: LedgerContext = Depends(get_ledger_context),
    db: Session = Depends(get_db),
):
    """
    Create a new account in the caller's chart of accounts.

    Every account must exist before entries can be posted to it.
    """
    service = AccountService(db)
    try:
        account = service.create_account(ctx, request)
        db.commit()
        return account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    ctx: LedgerContext = Depends(get_ledger_context),
    db: Session = Depends(get_db),
):
    """Get account details."""
    service = AccountService(db)
    try:
        return service.find_by_id(ctx, account_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    account_id: int,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Get the cached balance maintained by the ledger."""
    service = LedgerService(uow)
    try:
        balance = service.get_account_balance(ctx, account_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    account = service.accounts.find_by_id(ctx, account_id)
    return AccountBalanceResponse(
        account_id=account.id,
        account_code=account.code,
        normal_balance=account.normal_balance,
        balance=balance,
    )


@router.get(
    "/{account_id}/transactions",
    response_model=list[LedgerTransactionResponse],
)
def get_account_transactions(
    account_id: int,
    start: date | None = None,
    end: date | None = None,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Completed transactions for an account, oldest first."""
    service = LedgerService(uow)
    try:
        return service.get_account_ledger(ctx, account_id, start, end)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
