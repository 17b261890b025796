"""
Ledger API endpoints.

The API layer is thin: it maps HTTP to LedgerService calls and
ledger errors to status codes. Each write runs in the service's
own unit of work, which commits or rolls back on its own.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from finance_ledger.api.dependencies import get_ledger_context, get_uow
from finance_ledger.context import LedgerContext
from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.unit_of_work import UnitOfWork
from finance_ledger.schemas.ledger import (
    LedgerEntryCreate,
    LedgerTransactionResponse,
    PostDoubleEntryRequest,
    DoubleEntryResponse,
    PostJournalEntryRequest,
    JournalEntryResponse,
    ReverseTransactionRequest,
    TrialBalance,
    IntegrityReport,
)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


def _ledger_error(e: Exception) -> HTTPException:
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.post("/entries", response_model=LedgerTransactionResponse, status_code=201)
def post_entry(
    request: LedgerEntryCreate,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Post a single debit or credit against one account."""
    service = LedgerService(uow)
    try:
        return service.post_entry(ctx, request)
    except (LookupError, ValueError) as e:
        raise _ledger_error(e)


@router.post(
    "/double-entries", response_model=DoubleEntryResponse, status_code=201
)
def post_double_entry(
    request: PostDoubleEntryRequest,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Post a debit and an equal credit sharing one reference number."""
    service = LedgerService(uow)
    try:
        result = service.post_double_entry(
            ctx, request.debit, request.credit, request.common
        )
    except (LookupError, ValueError) as e:
        raise _ledger_error(e)
    return DoubleEntryResponse.model_validate(result)


@router.post(
    "/journal-entries", response_model=JournalEntryResponse, status_code=201
)
def post_journal_entry(
    request: PostJournalEntryRequest,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """
    Post a balanced journal entry.

    Total debits must equal total credits; otherwise nothing
    is written.
    """
    service = LedgerService(uow)
    try:
        result = service.post_journal_entry(ctx, request.entries, request.common)
    except (LookupError, ValueError) as e:
        raise _ledger_error(e)
    return JournalEntryResponse.model_validate(result)


@router.post(
    "/transactions/{transaction_id}/reverse",
    response_model=LedgerTransactionResponse,
    status_code=201,
)
def reverse_transaction(
    transaction_id: int,
    request: ReverseTransactionRequest,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Reverse a completed transaction with an offsetting entry."""
    service = LedgerService(uow)
    try:
        return service.reverse_transaction(ctx, transaction_id, request.reason)
    except (LookupError, ValueError) as e:
        raise _ledger_error(e)


@router.get(
    "/transactions/{transaction_id}",
    response_model=LedgerTransactionResponse,
)
def get_transaction(
    transaction_id: int,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Get transaction details."""
    service = LedgerService(uow)
    try:
        return service.transactions.get_transaction(ctx, transaction_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/references/{reference_number}",
    response_model=list[LedgerTransactionResponse],
)
def get_posting_group(
    reference_number: str,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """All transactions sharing a reference number."""
    service = LedgerService(uow)
    transactions = service.get_posting_group(ctx, reference_number)
    if not transactions:
        raise HTTPException(
            status_code=404,
            detail=f"Reference {reference_number} not found",
        )
    return transactions


@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    as_of: date | None = None,
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Per-account debit and credit totals as of a date (default today)."""
    return LedgerService(uow).trial_balance(ctx, as_of)


@router.get("/integrity", response_model=IntegrityReport)
def check_integrity(
    ctx: LedgerContext = Depends(get_ledger_context),
    uow: UnitOfWork = Depends(get_uow),
):
    """Grand totals and cached-balance drift for the caller's ledger."""
    return LedgerService(uow).check_integrity(ctx)
