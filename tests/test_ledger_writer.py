"""Tests for the ledger text writer."""

from datetime import date
from decimal import Decimal

import pytest

from ledgercoder.domain.entities import Transaction
from ledgercoder.domain.errors import UnbalancedTransactionError
from ledgercoder.ledger.mappers import record_to_transaction
from ledgercoder.ledger.parser import parse_ledger
from ledgercoder.ledger.writer import to_ledger


def test_to_ledger_format(unknown_expense):
    """Test the serialized block layout."""
    assert to_ledger(unknown_expense) == (
        "2024/01/15 Monthly rent\n"
        "    ; Transaction ID: txn-rent\n"
        "    ; Status: completed\n"
        "    ; Counterparty: Landlord LLC\n"
        "    Expenses:Unknown  $100.00\n"
        "    Assets:Checking  $-100.00\n"
    )


def test_to_ledger_writes_hints_and_comments(unknown_expense):
    """Test that hints and comments are written as comment lines."""
    unknown_expense.add_hint("Paid every month")
    unknown_expense.add_comment("Original Transaction ID: abc")

    text = to_ledger(unknown_expense)

    assert "    ; Hint: Paid every month\n" in text
    assert text.endswith("    ; Original Transaction ID: abc\n")


def test_to_ledger_refuses_unbalanced():
    """Test that an unbalanced transaction is never serialized."""
    transaction = Transaction(date=date(2024, 1, 1), description="Broken", transaction_id="t-bad")
    transaction.add_debit("Expenses:Office", "10.00")
    transaction.add_credit("Assets:Checking", "9.00")

    with pytest.raises(UnbalancedTransactionError, match="t-bad"):
        to_ledger(transaction)


def test_round_trip(unknown_income):
    """Test that parsing serialized text gives back the same transaction."""
    unknown_income.add_hint("Invoice 42")
    unknown_income.add_entry("Income:Unknown", "0.125", "credit")
    unknown_income.add_entry("Assets:Checking", "0.125", "debit")

    parsed = record_to_transaction(parse_ledger(to_ledger(unknown_income))[0])

    assert parsed.date == unknown_income.date
    assert parsed.description == unknown_income.description
    assert parsed.transaction_id == unknown_income.transaction_id
    assert parsed.currency == unknown_income.currency
    assert parsed.hints == ["Invoice 42"]
    assert [(e.account, e.amount, e.direction) for e in parsed.entries] == [
        (e.account, e.amount, e.direction) for e in unknown_income.entries
    ]
    assert parsed.entries[2].amount == Decimal("0.125")
