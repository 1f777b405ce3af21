"""Tests for reconciliation file processing."""

from decimal import Decimal
from pathlib import Path

import pytest

from ledgercoder.domain.coding import DispositionKind
from ledgercoder.domain.errors import ValidationError
from ledgercoder.domain.reconcile import ReconciliationService, parse_reconcile_line

RECONCILE_FILE = Path(__file__).parent / "fixtures" / "reconcile.csv"
COMPANY_ID = "dbd348b4-8d88-11eb-8f51-5f5908fef419"
VENDOR_ID = "0ac547b2-8d8e-11eb-870c-ef6812d46c47"


@pytest.fixture
def reconciliation_service(books, engine):
    """Create a ReconciliationService over the fixture books."""
    return ReconciliationService(books, engine)


def test_parse_reconcile_line():
    """Test parsing rows, blanks and comments."""
    row = parse_reconcile_line(" abc , Expenses:Rent ", 4)
    assert row.transaction_id == "abc"
    assert row.categories == ("Expenses:Rent",)
    assert row.line_number == 4

    assert parse_reconcile_line("", 1) is None
    assert parse_reconcile_line("# comment", 2) is None


def test_parse_reconcile_line_invalid():
    """Test that a row without a category names its line."""
    with pytest.raises(ValidationError, match="Line 7: expected"):
        parse_reconcile_line("justanid", 7)


def test_row_disposition():
    """Test that single categories are full codings and the rest are splits."""
    single = parse_reconcile_line("a,Expenses:Rent", 1).disposition()
    assert single.kind is DispositionKind.CATEGORY
    assert single.category == "Expenses:Rent"

    with_amount = parse_reconcile_line("a,Expenses:Rent:100", 1).disposition()
    assert with_amount.kind is DispositionKind.SPLIT
    assert with_amount.split_input == "Expenses:Rent:100"

    split = parse_reconcile_line("a,Income:Services:10,Income:Sales:5", 1).disposition()
    assert split.split_input == "Income:Services:10,Income:Sales:5"


def test_reconcile_fixture_file(reconciliation_service, books, store):
    """Test coding transactions from a reconciliation file."""
    results = reconciliation_service.reconcile_file(books.uncoded_transactions(), RECONCILE_FILE)

    assert results["errors"] == []
    assert results["coded"] == [
        (VENDOR_ID, "Expenses:Professional"),
        (COMPANY_ID, "Income:Services:10000, Income:Sales:5000"),
    ]
    assert [t.transaction_id for t in books.uncoded_transactions()] == ["card-0001"]

    company_reversal = next(
        r for r in store.read_coding_log_records() if r.transaction_id == f"rev-{COMPANY_ID}"
    )
    assert [(e.account, e.amount) for e in company_reversal.entries] == [
        ("Income:Services", Decimal("-10000.00")),
        ("Income:Sales", Decimal("-5000.00")),
        ("Income:Unknown", Decimal("15000.00")),
    ]


def test_reconcile_row_errors_do_not_stop_the_batch(reconciliation_service, books, tmp_path):
    """Test that failing rows are reported and later rows still run."""
    reconcile_file = tmp_path / "reconcile.csv"
    reconcile_file.write_text(
        "\n".join(
            [
                "missing-id,Expenses:Rent",
                "justanid",
                f"{VENDOR_ID},Expenses:Rent:100,Expenses:Office:200",
                f"{VENDOR_ID},Expenses:Rent:3000,Expenses:Office:2000",
                f"{VENDOR_ID},Expenses:Rent",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    results = reconciliation_service.reconcile_file(books.uncoded_transactions(), reconcile_file)

    assert results["coded"] == [(VENDOR_ID, "Expenses:Rent:3000, Expenses:Office:2000")]
    errors = results["errors"]
    assert len(errors) == 4
    assert errors[0] == "Line 1: Transaction missing-id not found among uncoded transactions"
    assert errors[1].startswith("Line 2: expected")
    assert errors[2].startswith(f"Line 3: Error coding transaction {VENDOR_ID}: Total amount")
    assert errors[3] == f"Line 5: Transaction {VENDOR_ID} not found among uncoded transactions"


def test_reconcile_missing_file(reconciliation_service, books, tmp_path):
    """Test that a missing reconciliation file is reported."""
    with pytest.raises(FileNotFoundError, match="Reconciliation file not found"):
        reconciliation_service.reconcile_file(books.uncoded_transactions(), tmp_path / "nope.csv")
