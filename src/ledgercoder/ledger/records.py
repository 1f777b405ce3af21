"""Raw records produced by the ledger text parser.

Records mirror what was written in the file. They are converted to domain
transactions by :mod:`ledgercoder.ledger.mappers`.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgercoder.domain.entities import Direction, SourceInfo
from ledgercoder.utils.currency import DEFAULT_CURRENCY

# Comment keys that map onto structured transaction fields
METADATA_KEYS = ("Transaction ID", "Status", "Counterparty", "Memo", "Timestamp", "Hint")


@dataclass(frozen=True)
class EntryRecord:
    """One posting line with its signed amount as written."""

    account: str
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @property
    def direction(self) -> Direction:
        return Direction.DEBIT if self.amount > 0 else Direction.CREDIT


@dataclass
class LedgerRecord:
    """A parsed transaction block.

    ``from_account``, ``to_account`` and ``amount`` describe the legacy
    two-account shorthand and are only used when ``entries`` is empty.
    """

    date: date
    description: str
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    counterparty: Optional[str] = None
    memo: Optional[str] = None
    timestamp: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    entries: list[EntryRecord] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    source_info: Optional[SourceInfo] = None
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    amount: Optional[Decimal | str] = None
