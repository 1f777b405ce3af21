"""Ledger text parser.

Turns ledger-format text into :class:`LedgerRecord` objects. A transaction
block starts at a dated header line and runs until the next header or the end
of input. Comment lines (``;``) inside a block carry metadata, every other
line is a posting.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging
import re
import uuid

from ledgercoder.domain.entities import SourceInfo
from ledgercoder.ledger.records import EntryRecord, LedgerRecord, METADATA_KEYS
from ledgercoder.utils.amount_parser import to_decimal
from ledgercoder.utils.currency import DEFAULT_CURRENCY, normalize_currency
from ledgercoder.utils.date_parser import LEDGER_DATE_PATTERN, parse_ledger_date

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "completed"

# Posting dialects, tried in order; the first match wins
_DOLLAR_LINE = re.compile(r"^\s*(.+?)\s+\$([\-\d,\.]+)(?:\s+([A-Z]+))?$")
_NEGATIVE_DOLLAR_LINE = re.compile(r"^\s*(.+?)\s+-\$([\d,\.]+)(?:\s+([A-Z]+))?$")
_USD_SUFFIX_LINE = re.compile(r"^\s*(.+?)\s+([\-\d,\.]+)\s+USD$")

_METADATA_LINE = re.compile(
    r"^;\s*(" + "|".join(re.escape(key) for key in METADATA_KEYS) + r"):\s*(.+)$"
)

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "ledgercoder")


def parse_account_line(line: str) -> tuple[str, Optional[Decimal], Optional[str]]:
    """Split a posting line into account, signed amount and currency.

    Returns:
        (account, amount, currency). When no dialect matches, or the amount
        token is not a number, amount and currency are None and the account
        is the whole stripped line.
    """
    match = _DOLLAR_LINE.match(line)
    if match:
        account, token, code = match.groups()
        sign = Decimal("1")
    else:
        match = _NEGATIVE_DOLLAR_LINE.match(line)
        if match:
            account, token, code = match.groups()
            sign = Decimal("-1")
        else:
            match = _USD_SUFFIX_LINE.match(line)
            if match is None:
                return (line.strip(), None, None)
            account, token = match.groups()
            code = "USD"
            sign = Decimal("1")

    try:
        amount = to_decimal(token) * sign
    except ValueError:
        return (line.strip(), None, None)
    return (account.strip(), amount, normalize_currency(code or "$"))


@dataclass
class _Block:
    """Accumulates one transaction block while scanning."""

    date: date
    description: Optional[str]
    start_line: int
    lines: list[str] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)
    hints: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def add_comment_line(self, line: str) -> None:
        match = _METADATA_LINE.match(line)
        if match is None:
            text = re.sub(r"^;\s*", "", line)
            self.comments.append(text)
            return

        key, value = match.group(1), match.group(2).strip()
        if key == "Hint":
            self.hints.append(value)
        else:
            self.fields[key] = value

    def is_complete(self) -> bool:
        return len(self.lines) >= 2 and self.date is not None and bool(self.description)


def _stable_transaction_id(block: _Block) -> str:
    """Derive an id that stays the same across parses of an unchanged block."""
    seed = "|".join([block.date.isoformat(), block.description or "", *block.lines])
    return str(uuid.uuid5(_ID_NAMESPACE, seed))


def _build_record(block: _Block, file: Optional[str], end_line: int) -> LedgerRecord:
    entries = []
    for line in block.lines:
        account, amount, currency = parse_account_line(line)
        if amount is None:
            logger.debug("Dropping line without amount in %s: %r", file, line)
            continue
        if amount == 0:
            logger.debug("Dropping zero-amount line in %s: %r", file, line)
            continue
        entries.append(EntryRecord(account=account, amount=amount, currency=currency))

    return LedgerRecord(
        date=block.date,
        description=block.description,
        transaction_id=block.fields.get("Transaction ID") or _stable_transaction_id(block),
        status=block.fields.get("Status", DEFAULT_STATUS),
        counterparty=block.fields.get("Counterparty"),
        memo=block.fields.get("Memo"),
        timestamp=block.fields.get("Timestamp"),
        currency=entries[0].currency if entries else DEFAULT_CURRENCY,
        entries=entries,
        hints=block.hints,
        comments=block.comments,
        source_info=SourceInfo(file=file, start_line=block.start_line, end_line=end_line),
    )


def parse_ledger(text: str, file: Optional[str] = None) -> list[LedgerRecord]:
    """Parse ledger text into records, in file order.

    A block is only kept when it has a date, a description and at least two
    posting lines.

    Args:
        text: Ledger file contents
        file: Path recorded as provenance on each record

    Returns:
        List of ledger records
    """
    records = []
    block: Optional[_Block] = None
    line_number = 0

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith(";"):
            if block is not None:
                block.add_comment_line(line)
            continue

        if LEDGER_DATE_PATTERN.match(line):
            if block is not None and block.is_complete():
                records.append(_build_record(block, file, line_number - 1))

            parts = line.split(None, 1)
            try:
                header_date = parse_ledger_date(parts[0])
            except ValueError as e:
                logger.warning("Skipping block at %s:%d: %s", file, line_number, e)
                block = None
                continue
            description = parts[1].strip() if len(parts) > 1 else None
            block = _Block(date=header_date, description=description, start_line=line_number)
        elif block is not None:
            block.lines.append(line)

    if block is not None and block.is_complete():
        records.append(_build_record(block, file, line_number))

    return records


def parse_ledger_file(path: str | Path) -> list[LedgerRecord]:
    """Read and parse a ledger file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    return parse_ledger(path.read_text(encoding="utf-8"), file=str(path))
