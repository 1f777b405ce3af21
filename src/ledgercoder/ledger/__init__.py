"""Ledger file layer for ledgercoder."""

from ledgercoder.ledger.base import LedgerStore
from ledgercoder.ledger.factories import create_file_store
from ledgercoder.ledger.parser import parse_ledger, parse_account_line
from ledgercoder.ledger.writer import to_ledger

__all__ = [
    "LedgerStore",
    "create_file_store",
    "parse_ledger",
    "parse_account_line",
    "to_ledger",
]
