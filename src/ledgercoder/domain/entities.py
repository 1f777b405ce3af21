"""Domain model entities for ledgercoder.

Entries and transactions are plain data classes, independent of the ledger
text format they are read from and written to.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid

from ledgercoder.domain.errors import ValidationError
from ledgercoder.utils.amount_parser import parse_amount
from ledgercoder.utils.currency import DEFAULT_CURRENCY, normalize_currency

BALANCE_TOLERANCE = Decimal("0.001")

UNKNOWN_ACCOUNTS = ("Income:Unknown", "Expenses:Unknown")


class Direction(str, Enum):
    """Side of a double-entry line."""

    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def opposite(self) -> "Direction":
        return Direction.CREDIT if self is Direction.DEBIT else Direction.DEBIT


@dataclass(frozen=True)
class SourceInfo:
    """Where a transaction was read from, for diagnostics."""

    file: Optional[str]
    start_line: Optional[int] = None
    end_line: Optional[int] = None

    def __str__(self) -> str:
        if self.start_line is not None and self.end_line is not None:
            return f"{self.file}#{self.start_line}-{self.end_line}"
        return str(self.file)


@dataclass(frozen=True)
class Entry:
    """A single debit or credit line.

    The amount is always stored as a positive number; the sign lives in
    ``direction``.
    """

    account: str
    amount: Decimal
    direction: Direction
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        amount = abs(parse_amount(self.amount))
        if amount <= 0:
            raise ValidationError(f"Amount must be positive for account '{self.account}'")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "direction", Direction(self.direction))
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    @property
    def signed_amount(self) -> Decimal:
        """Positive for debits, negative for credits."""
        return self.amount if self.direction is Direction.DEBIT else -self.amount

    @property
    def is_unknown(self) -> bool:
        return self.account in UNKNOWN_ACCOUNTS

    def with_account(self, account: str) -> "Entry":
        """Return a copy of this entry booked to a different account."""
        return replace(self, account=account)


@dataclass
class Transaction:
    """A dated set of entries plus metadata.

    A transaction may be unbalanced while it is being assembled, but it must
    be balanced before it is written to a ledger file.
    """

    date: date
    description: str
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    counterparty: Optional[str] = None
    memo: Optional[str] = None
    timestamp: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    source_info: Optional[SourceInfo] = None
    entries: list[Entry] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.transaction_id:
            self.transaction_id = str(uuid.uuid4())
        self.currency = normalize_currency(self.currency)

    def add_entry(
        self,
        account: str,
        amount: Decimal | str | int | float,
        direction: Direction | str,
        currency: Optional[str] = None,
    ) -> Entry:
        """Append an entry; it inherits the transaction currency by default."""
        entry = Entry(
            account=account,
            amount=amount,
            direction=direction,
            currency=currency or self.currency,
        )
        self.entries.append(entry)
        return entry

    def add_debit(self, account: str, amount: Decimal | str | int | float) -> Entry:
        return self.add_entry(account, amount, Direction.DEBIT)

    def add_credit(self, account: str, amount: Decimal | str | int | float) -> Entry:
        return self.add_entry(account, amount, Direction.CREDIT)

    def add_comment(self, comment: str) -> list[str]:
        self.comments.append(comment)
        return self.comments

    def add_hint(self, hint: str) -> list[str]:
        self.hints.append(hint)
        return self.hints

    def replace_account(self, old_account: str, new_account: str) -> None:
        """Rebook every entry on old_account to new_account."""
        self.entries = [
            entry.with_account(new_account) if entry.account == old_account else entry
            for entry in self.entries
        ]

    @property
    def total_debits(self) -> Decimal:
        return sum(
            (e.amount for e in self.entries if e.direction is Direction.DEBIT),
            Decimal("0"),
        )

    @property
    def total_credits(self) -> Decimal:
        return sum(
            (e.amount for e in self.entries if e.direction is Direction.CREDIT),
            Decimal("0"),
        )

    def is_balanced(self) -> bool:
        return abs(self.total_debits - self.total_credits) < BALANCE_TOLERANCE

    def validate(self) -> list[str]:
        """Return validation warnings; an empty list means the transaction is valid."""
        if not self.entries:
            return ["Transaction has no entries"]

        warnings = []
        if not self.is_balanced():
            warnings.append(
                f"Transaction is not balanced: debits ({self.total_debits}) "
                f"!= credits ({self.total_credits})"
            )
        if not any(e.direction is Direction.DEBIT for e in self.entries):
            warnings.append("Transaction has no debits")
        if not any(e.direction is Direction.CREDIT for e in self.entries):
            warnings.append("Transaction has no credits")
        return warnings

    def is_valid(self) -> bool:
        return not self.validate()

    def find_unknown_entry(self) -> Optional[Entry]:
        """Return the first entry booked to an Unknown placeholder account."""
        for entry in self.entries:
            if entry.is_unknown:
                return entry
        return None

    def __str__(self) -> str:
        lines = []
        if self.source_info is not None and self.source_info.file:
            lines.append(f"Importing: {self.source_info}")

        status = f" [{self.status}]" if self.status else ""
        lines.append(f"Transaction: {self.transaction_id}{status}")
        lines.append(f"Date: {self.date}")
        if self.description:
            lines.append(f"Description: {self.description}")

        lines.append("Entries:")
        for entry in self.entries:
            lines.append(
                f"  {entry.direction.value.capitalize()}: {entry.account} "
                f"{entry.amount} {entry.currency}"
            )

        if self.counterparty:
            lines.append(f"Counterparty: {self.counterparty}")

        warnings = self.validate()
        if warnings:
            lines.append("Warnings:")
            lines.extend(f"  {warning}" for warning in warnings)

        if self.hints:
            lines.append("Hints:")
            lines.extend(f"  - {hint}" for hint in self.hints)

        return "\n".join(lines)
