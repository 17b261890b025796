"""
Typed errors raised by the ledger engine.

Every error carries a machine-readable ``code`` so callers can
branch on the kind of failure instead of parsing messages.

    LedgerError
    +-- LedgerValidationError (also a ValueError)
    |   +-- MissingFieldError
    |   +-- InvalidAmountSplitError
    |   +-- UnbalancedJournalEntryError
    |   +-- AccountInactiveError
    |   +-- ReversalNotAllowedError
    |   +-- FieldTooLongError
    +-- AccountNotFoundError (also a LookupError)
    +-- TransactionNotFoundError (also a LookupError)
    +-- PersistenceError
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all ledger errors."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LedgerValidationError(LedgerError, ValueError):
    """Input rejected before anything was written."""

    code = "VALIDATION_ERROR"


class MissingFieldError(LedgerValidationError):
    code = "MISSING_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Required field '{field}' is missing")


class InvalidAmountSplitError(LedgerValidationError):
    """Both or neither of debit/credit supplied, or a negative amount."""

    code = "INVALID_AMOUNT_SPLIT"


class UnbalancedJournalEntryError(LedgerValidationError):
    code = "UNBALANCED_JOURNAL_ENTRY"

    def __init__(self, total_debits: Decimal, total_credits: Decimal):
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            f"Total debits must equal total credits: "
            f"debits={total_debits}, credits={total_credits}"
        )


class AccountInactiveError(LedgerValidationError):
    code = "ACCOUNT_INACTIVE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account {account_code} is not active")


class ReversalNotAllowedError(LedgerValidationError):
    code = "REVERSAL_NOT_ALLOWED"


class FieldTooLongError(LedgerValidationError):
    """A text field would not fit its column."""

    code = "FIELD_TOO_LONG"

    def __init__(self, field: str, max_length: int):
        self.field = field
        self.max_length = max_length
        super().__init__(
            f"Field '{field}' exceeds {max_length} characters"
        )


class AccountNotFoundError(LedgerError, LookupError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class TransactionNotFoundError(LedgerError, LookupError):
    code = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class PersistenceError(LedgerError):
    """The backing store rejected a write. The driver error is chained."""

    code = "PERSISTENCE_FAILURE"
