"""Tests for the coding engine."""

from decimal import Decimal

import pytest

from ledgercoder.domain.coding import (
    Disposition,
    create_reverse_transaction,
    parse_split_input,
    split_category_amount,
)
from ledgercoder.domain.entities import Direction
from ledgercoder.domain.errors import (
    MissingSplitDetailError,
    NoUnknownCategoryError,
    SplitMismatchError,
    ValidationError,
)


def _entries(transaction):
    return [(e.account, e.amount, e.direction) for e in transaction.entries]


def test_full_category_reversal(engine, unknown_expense):
    """Test coding a $100 Unknown expense as rent."""
    reverse = engine.code_transaction(unknown_expense, Disposition.for_category("Expenses:Rent"))

    assert _entries(reverse) == [
        ("Expenses:Rent", Decimal("100.00"), Direction.DEBIT),
        ("Expenses:Unknown", Decimal("100.00"), Direction.CREDIT),
    ]
    assert reverse.is_balanced()


def test_reversal_metadata(engine, unknown_expense):
    """Test that the reversal points back at the original transaction."""
    unknown_expense.add_hint("Paid every month")

    reverse = engine.code_transaction(unknown_expense, Disposition.for_category("Expenses:Rent"))

    assert reverse.transaction_id == "rev-txn-rent"
    assert reverse.description == "Reversal: Monthly rent"
    assert reverse.memo == "Reversal of transaction txn-rent"
    assert reverse.comments == ["Original Transaction ID: txn-rent"]
    assert reverse.hints == ["Paid every month"]
    assert reverse.counterparty == "Landlord LLC"
    assert reverse.date == unknown_expense.date


def test_income_reversal_uses_credit_side(engine, unknown_income):
    """Test that categories land on the Unknown entry's side."""
    reverse = engine.code_transaction(unknown_income, Disposition.for_category("Income:Services"))

    assert _entries(reverse) == [
        ("Income:Services", Decimal("250.00"), Direction.CREDIT),
        ("Income:Unknown", Decimal("250.00"), Direction.DEBIT),
    ]


def test_split_reversal(engine, unknown_expense):
    """Test a split that adds up to the Unknown amount."""
    reverse = engine.code_transaction(
        unknown_expense, Disposition.for_split("Expenses:Rent:60.00,Expenses:Utilities:40.00")
    )

    assert _entries(reverse) == [
        ("Expenses:Rent", Decimal("60.00"), Direction.DEBIT),
        ("Expenses:Utilities", Decimal("40.00"), Direction.DEBIT),
        ("Expenses:Unknown", Decimal("100.00"), Direction.CREDIT),
    ]


def test_split_mismatch(engine, unknown_expense):
    """Test that a split summing to 90 against 100 fails with both totals."""
    with pytest.raises(SplitMismatchError) as excinfo:
        engine.code_transaction(
            unknown_expense, Disposition.for_split("Expenses:Rent:60.00,Expenses:Utilities:30.00")
        )

    assert excinfo.value.split_total == Decimal("90.00")
    assert excinfo.value.unknown_amount == Decimal("100.00")
    assert "(90.00)" in str(excinfo.value)
    assert "(100.00)" in str(excinfo.value)


def test_split_within_tolerance(unknown_expense):
    """Test that a difference below 0.001 is accepted."""
    reverse = create_reverse_transaction(
        unknown_expense, {"Expenses:Rent": "60.0005", "Expenses:Utilities": "40.00"}
    )
    assert len(reverse.entries) == 3


def test_split_requires_detail(engine, unknown_expense):
    """Test that an empty split is rejected."""
    with pytest.raises(MissingSplitDetailError):
        engine.code_transaction(unknown_expense, Disposition.for_split("  "))


def test_no_unknown_entry(engine, unknown_expense):
    """Test that a transaction without an Unknown entry cannot be coded."""
    unknown_expense.replace_account("Expenses:Unknown", "Expenses:Rent")

    with pytest.raises(NoUnknownCategoryError, match="txn-rent"):
        engine.code_transaction(unknown_expense, Disposition.for_category("Expenses:Office"))


def test_reverse_without_categories_mirrors_entries(unknown_expense):
    """Test the plain reversal of every entry."""
    reverse = create_reverse_transaction(unknown_expense)

    assert _entries(reverse) == [
        ("Expenses:Unknown", Decimal("100.00"), Direction.CREDIT),
        ("Assets:Checking", Decimal("100.00"), Direction.DEBIT),
    ]


def test_new_category_registered(engine, catalog, unknown_expense):
    """Test that a new category is used and added to the catalog."""
    reverse = engine.code_transaction(unknown_expense, Disposition.for_new_category("Expenses:Software"))

    assert reverse.entries[0].account == "Expenses:Software"
    assert "Expenses:Software" in catalog


def test_new_category_requires_name(engine, unknown_expense):
    """Test that an empty category name is rejected."""
    with pytest.raises(ValidationError, match="category name is required"):
        engine.code_transaction(unknown_expense, Disposition.for_new_category(""))


def test_negative_split_amount_rejected(engine, unknown_expense):
    """Test that a negative split amount is refused even when the signed total matches."""
    with pytest.raises(ValidationError, match="Amount for category Expenses:Utilities must be positive, got -60"):
        engine.code_transaction(
            unknown_expense, Disposition.for_split("Expenses:Rent:160,Expenses:Utilities:-60")
        )


def test_split_minimum_categories(engine, unknown_expense):
    """Test that a split can require more than one category."""
    with pytest.raises(MissingSplitDetailError, match="at least 2 different categories, got 1"):
        engine.code_transaction(unknown_expense, Disposition.for_split("Expenses:Rent:100", min_categories=2))

    reverse = engine.code_transaction(unknown_expense, Disposition.for_split("Expenses:Rent:100"))
    assert reverse.entries[0].account == "Expenses:Rent"
    assert reverse.is_balanced()


@pytest.mark.parametrize(
    "part, expected",
    [
        ("Expenses:Rent:60.00", ("Expenses:Rent", Decimal("60.00"))),
        ("Expenses:Rent:$1,000", ("Expenses:Rent", Decimal("1000"))),
        ("Expenses:Rent", ("Expenses:Rent", None)),
        ("Expenses:Rent:0", ("Expenses:Rent", None)),
        ("Expenses:Rent:60 USD", ("Expenses:Rent", Decimal("60"))),
        ("Expenses:Rent:60$", ("Expenses:Rent", Decimal("60"))),
        ("Expenses:Rent:12.50 usd", ("Expenses:Rent", Decimal("12.50"))),
        (" Expenses:Car Parts ", ("Expenses:Car Parts", None)),
    ],
)
def test_split_category_amount(part, expected):
    """Test splitting a category from its trailing amount."""
    assert split_category_amount(part) == expected


def test_parse_split_input_fills_and_merges():
    """Test that parts without an amount take the Unknown amount and repeats add up."""
    assert parse_split_input("Expenses:Rent", Decimal("100")) == {"Expenses:Rent": Decimal("100")}
    assert parse_split_input("Expenses:Rent:30,Expenses:Rent:20,", Decimal("50")) == {
        "Expenses:Rent": Decimal("50")
    }
