"""Tests for the suggestion gateway."""

import json
from unittest.mock import MagicMock

import pytest

from ledgercoder.domain.errors import SuggestionServiceError
from ledgercoder.domain.history import CodingHistory
from ledgercoder.domain.suggestion import (
    FALLBACK_CATEGORY,
    MAX_PRIOR_CODINGS,
    PARSE_FAILURE_EXPLANATION,
    SuggestionGateway,
    build_prompt,
    normalize_suggestion,
)


@pytest.fixture
def history():
    """History with a few prior codings."""
    history = CodingHistory()
    history.record("Electric bill", "Expenses:Utilities", counterparty="PowerCo")
    history.record("Monthly rent", "Expenses:Rent", counterparty="Landlord LLC", hints=["Office lease"])
    history.record("Water bill", "Expenses:Utilities", counterparty="Landlord LLC")
    return history


def test_build_prompt_contents(unknown_expense, history, catalog):
    """Test that the prompt carries the transaction, history and categories."""
    unknown_expense.add_hint("Paid on the 15th")

    prompt = build_prompt(unknown_expense, history, catalog.all_categories())

    assert prompt.startswith("Transaction details:\nDate: 2024-01-15\nDescription: Monthly rent\n")
    assert "Amount: 100.00 USD" in prompt
    assert "Unknown account: Expenses:Unknown (debit)" in prompt
    assert "Counterparty: Landlord LLC" in prompt
    assert "Hints from previous categorizations:\n- Paid on the 15th" in prompt
    assert "Counterparty information:\n- Office lease" in prompt
    assert "- Expenses:Maintenance" in prompt
    assert "JSON object" in prompt


def test_build_prompt_orders_relevant_codings_first(unknown_expense, history):
    """Test that the same description, then the same counterparty, come first."""
    prompt = build_prompt(unknown_expense, history)
    codings = [line for line in prompt.splitlines() if line.startswith('- "')]

    assert codings == [
        '- "Monthly rent" => Expenses:Rent (hints: Office lease)',
        '- "Water bill" => Expenses:Utilities',
        '- "Electric bill" => Expenses:Utilities',
    ]


def test_build_prompt_caps_prior_codings(unknown_expense):
    """Test that the prompt lists a bounded number of prior codings."""
    history = CodingHistory()
    for i in range(MAX_PRIOR_CODINGS + 10):
        history.record(f"Purchase {i}", "Expenses:Office")

    prompt = build_prompt(unknown_expense, history)

    assert sum(1 for line in prompt.splitlines() if line.startswith('- "')) == MAX_PRIOR_CODINGS


def test_normalize_valid_reply(catalog):
    """Test that a well-formed reply is taken as is, with percent confidence rescaled."""
    reply = json.dumps({"category": "Expenses:Rent", "confidence": 85, "explanation": "Looks like rent"})

    suggestion = normalize_suggestion(reply, catalog)

    assert suggestion.category == "Expenses:Rent"
    assert suggestion.confidence == pytest.approx(0.85)
    assert suggestion.confidence_percent == 85.0
    assert suggestion.explanation == "Looks like rent"


def test_normalize_fraction_confidence_kept(catalog):
    """Test that a 0-1 confidence is not rescaled."""
    reply = json.dumps({"category": "Expenses:Rent", "confidence": 0.4, "explanation": "maybe"})
    assert normalize_suggestion(reply, catalog).confidence == pytest.approx(0.4)


@pytest.mark.parametrize(
    "confidence, expected",
    [
        ("NaN", 0.0),
        ("Infinity", 0.0),
        ("-Infinity", 0.0),
        ("-5", 0.0),
        ('"high"', 0.0),
        ("250", 1.0),
    ],
)
def test_normalize_confidence_stays_in_range(catalog, confidence, expected):
    """Test that odd confidence values are clamped into 0-1."""
    reply = f'{{"category": "Expenses:Rent", "confidence": {confidence}, "explanation": "rent"}}'

    suggestion = normalize_suggestion(reply, catalog)

    assert suggestion.category == "Expenses:Rent"
    assert suggestion.confidence == expected


def test_normalize_reply_in_code_block(catalog):
    """Test that a JSON reply wrapped in a markdown code block is understood."""
    reply = '```json\n{"category": "Expenses:Office", "confidence": 70, "explanation": "Supplies"}\n```'

    suggestion = normalize_suggestion(reply, catalog)

    assert suggestion.category == "Expenses:Office"
    assert suggestion.confidence == pytest.approx(0.7)
    assert suggestion.explanation == "Supplies"


def test_normalize_category_outside_catalog(catalog):
    """Test that an unknown category is replaced by the closest catalog entry."""
    reply = json.dumps({"category": "Expenses:Utility", "confidence": 0.9, "explanation": "Power bill"})

    suggestion = normalize_suggestion(reply, catalog)

    assert suggestion.category == "Expenses:Utilities"
    assert suggestion.explanation == (
        "Power bill (Adjusted from 'Expenses:Utility' to closest match 'Expenses:Utilities')"
    )


@pytest.mark.parametrize("reply", [None, "", "not json", "[1, 2]", '"text"'])
def test_normalize_unparseable_reply(reply, catalog):
    """Test that an unusable reply never raises and yields the neutral suggestion."""
    suggestion = normalize_suggestion(reply, catalog)

    assert suggestion.category == FALLBACK_CATEGORY
    assert suggestion.confidence == 0.0
    assert suggestion.explanation == PARSE_FAILURE_EXPLANATION


def test_normalize_missing_category(catalog):
    """Test that a reply without a category yields the neutral suggestion."""
    suggestion = normalize_suggestion(json.dumps({"confidence": 90, "explanation": "unsure"}), catalog)

    assert suggestion.category == FALLBACK_CATEGORY
    assert suggestion.confidence == 0.0
    assert suggestion.explanation == "No category suggested: unsure"


def test_gateway_suggest(unknown_expense, history, catalog):
    """Test that the gateway sends the prompt and normalizes the reply."""
    client = MagicMock()
    client.complete.return_value = json.dumps(
        {"category": "Expenses:Rent", "confidence": 0.95, "explanation": "Same as last month"}
    )
    gateway = SuggestionGateway(client, catalog, history)

    suggestion = gateway.suggest(unknown_expense)

    assert suggestion.category == "Expenses:Rent"
    prompt = client.complete.call_args.args[0]
    assert "Description: Monthly rent" in prompt


def test_gateway_service_failure(unknown_expense, history, catalog):
    """Test that a failed service call degrades to the neutral suggestion."""
    client = MagicMock()
    client.complete.side_effect = SuggestionServiceError("connection refused")
    gateway = SuggestionGateway(client, catalog, history)

    suggestion = gateway.suggest(unknown_expense)

    assert suggestion.category == FALLBACK_CATEGORY
    assert suggestion.confidence == 0.0
    assert suggestion.explanation == "Failed to obtain suggestion: connection refused"
