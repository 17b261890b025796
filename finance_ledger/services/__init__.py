"""Business logic services."""

from finance_ledger.services.ledger_service import LedgerService
from finance_ledger.services.account_service import AccountService
from finance_ledger.services.transaction_service import TransactionService

__all__ = ["LedgerService", "AccountService", "TransactionService"]
