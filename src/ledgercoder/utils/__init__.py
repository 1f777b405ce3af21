"""Utility functions for ledgercoder."""

from ledgercoder.utils.date_parser import parse_ledger_date, format_ledger_date
from ledgercoder.utils.amount_parser import parse_amount, format_amount
from ledgercoder.utils.currency import normalize_currency
from ledgercoder.utils.text_distance import levenshtein_distance, find_closest_match

__all__ = [
    "parse_ledger_date",
    "format_ledger_date",
    "parse_amount",
    "format_amount",
    "normalize_currency",
    "levenshtein_distance",
    "find_closest_match",
]
