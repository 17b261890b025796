"""
Tests for the TransactionService.

The ledger rows themselves are written through LedgerService;
these tests cover reference numbers, lookups and the reversal
stamp.
"""

import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_ledger.exceptions import TransactionNotFoundError
from finance_ledger.models.enums import TransactionStatus
from finance_ledger.schemas.ledger import LedgerEntryCreate
from finance_ledger.services.transaction_service import (
    end_of_day,
    generate_reference_number,
)


REFERENCE_PATTERN = re.compile(r"^TXN-\d{8}-[0-9A-F]{6}$")


def post(ledger, ctx, account, when, amount="10", **kwargs):
    return ledger.post_entry(ctx, LedgerEntryCreate(
        account_id=account.id,
        debit=Decimal(amount),
        description=kwargs.pop("description", "Entry"),
        transaction_date=when,
        **kwargs,
    ))


# --- Reference Number Tests ---

class TestReferenceNumber:

    def test_format(self):
        assert REFERENCE_PATTERN.match(generate_reference_number())

    def test_uses_given_date(self):
        ref = generate_reference_number(today=date(2024, 12, 31))
        assert ref.startswith("TXN-20241231-")

    def test_custom_prefix(self):
        assert generate_reference_number("JRN").startswith("JRN-")

    def test_suffix_varies(self):
        refs = {generate_reference_number() for _ in range(20)}
        assert len(refs) > 1

    def test_end_of_day_is_next_midnight(self):
        assert end_of_day(date(2024, 2, 28)) == datetime(2024, 2, 29)
        assert end_of_day(datetime(2024, 12, 31, 15, 30)) == datetime(2025, 1, 1)


# --- Lookup Tests ---

class TestLookups:

    def test_get_transaction(self, ledger, ctx, make_account):
        cash = make_account("1000")
        txn = post(ledger, ctx, cash, datetime(2024, 5, 1))
        assert ledger.transactions.get_transaction(ctx, txn.id).id == txn.id

    def test_get_missing_transaction(self, ledger, ctx):
        with pytest.raises(TransactionNotFoundError, match="Transaction 12 not found"):
            ledger.transactions.get_transaction(ctx, 12)

    def test_date_range_inclusive(self, ledger, ctx, make_account):
        cash = make_account("1000")
        post(ledger, ctx, cash, datetime(2024, 5, 1, 0, 0), description="First")
        post(ledger, ctx, cash, datetime(2024, 5, 15, 23, 59), description="Mid")
        post(ledger, ctx, cash, datetime(2024, 5, 31, 8, 0), description="Last")

        rows = ledger.transactions.query_by_account_and_date_range(
            ctx, cash.id, date(2024, 5, 1), date(2024, 5, 15)
        )
        assert [t.description for t in rows] == ["First", "Mid"]

    def test_date_range_open_ended(self, ledger, ctx, make_account):
        cash = make_account("1000")
        post(ledger, ctx, cash, datetime(2024, 5, 1), description="First")
        post(ledger, ctx, cash, datetime(2024, 6, 1), description="Second")

        rows = ledger.transactions.query_by_account_and_date_range(
            ctx, cash.id, start=date(2024, 5, 2)
        )
        assert [t.description for t in rows] == ["Second"]

    def test_date_range_skips_non_completed(self, ledger, ctx, make_account, db_session):
        cash = make_account("1000")
        txn = post(ledger, ctx, cash, datetime(2024, 5, 1))
        txn.status = TransactionStatus.VOIDED
        db_session.commit()

        svc = ledger.transactions
        assert svc.query_by_account_and_date_range(ctx, cash.id) == []
        assert len(svc.query_by_account_and_date_range(ctx, cash.id, status=None)) == 1

    def test_get_by_reference(self, ledger, ctx, other_ctx, make_account):
        cash = make_account("1000")
        post(ledger, ctx, cash, datetime(2024, 5, 1), reference_number="BATCH-1")
        post(ledger, ctx, cash, datetime(2024, 5, 2), reference_number="BATCH-1")
        post(ledger, ctx, cash, datetime(2024, 5, 3), reference_number="BATCH-2")

        assert len(ledger.transactions.get_by_reference(ctx, "BATCH-1")) == 2
        assert ledger.transactions.get_by_reference(other_ctx, "BATCH-1") == []


# --- Reversal Stamp Tests ---

class TestStampReversal:

    def test_stamp_keeps_existing_metadata(self, ledger, ctx, make_account, db_session):
        cash = make_account("1000")
        original = post(
            ledger, ctx, cash, datetime(2024, 5, 1), metadata={"batch": "A"}
        )
        reversal = post(ledger, ctx, cash, datetime(2024, 5, 2))

        ledger.transactions.stamp_reversal(original, reversal, "Typo")
        db_session.commit()

        meta = ledger.transactions.get_transaction(ctx, original.id).entry_metadata
        assert meta["batch"] == "A"
        assert meta["reversed"] is True
        assert meta["reversed_by_transaction_id"] == reversal.id
        assert meta["reversal_reason"] == "Typo"
