"""Coding history used as context for category suggestions."""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol
import logging

from ledgercoder.domain.entities import UNKNOWN_ACCOUNTS
from ledgercoder.ledger.records import LedgerRecord

logger = logging.getLogger(__name__)

REVERSAL_PREFIX = "Reversal: "

# Accounts that are the funding side of a coding, not its category
_NON_CATEGORY_PREFIXES = ("Assets:", "Liabilities:")


@dataclass
class PriorCoding:
    """The category previously chosen for a description."""

    description: str
    category: str
    counterparty: Optional[str] = None
    hints: list[str] = field(default_factory=list)


class HistoryProvider(Protocol):
    """Read access to prior codings, as needed to build suggestion context."""

    def prior_category_for(self, description: str) -> Optional[PriorCoding]:
        ...

    def hints_for(self, counterparty: Optional[str]) -> list[str]:
        ...

    def codings(self) -> list[PriorCoding]:
        ...


class CodingHistory:
    """In-memory history of codings, keyed by description and counterparty.

    Loaded once per session from the coding log and updated as transactions
    are coded. It is passed explicitly to whoever needs it.
    """

    def __init__(self):
        self._by_description: dict[str, PriorCoding] = {}
        self._counterparty_hints: dict[str, list[str]] = {}

    @classmethod
    def from_records(cls, records: Iterable[LedgerRecord]) -> "CodingHistory":
        """Build history from parsed coding log records.

        The category of a coding is its first entry that is neither an
        asset/liability account nor an Unknown placeholder.
        """
        history = cls()
        for record in records:
            if not record.description or not record.entries:
                continue
            category = next(
                (
                    entry.account
                    for entry in record.entries
                    if not entry.account.startswith(_NON_CATEGORY_PREFIXES)
                    and entry.account not in UNKNOWN_ACCOUNTS
                ),
                None,
            )
            if category is None:
                continue
            description = record.description
            if description.startswith(REVERSAL_PREFIX):
                description = description[len(REVERSAL_PREFIX):]
            history.record(description, category, record.counterparty, record.hints)

        logger.info(
            "Loaded %d previous codings with hints for %d counterparties",
            len(history),
            len(history._counterparty_hints),
        )
        return history

    def record(
        self,
        description: str,
        category: str,
        counterparty: Optional[str] = None,
        hints: Optional[list[str]] = None,
    ) -> PriorCoding:
        """Remember a coding; later codings of the same description win."""
        coding = PriorCoding(
            description=description,
            category=category,
            counterparty=counterparty,
            hints=list(hints or []),
        )
        self._by_description.pop(description, None)
        self._by_description[description] = coding

        if counterparty and coding.hints:
            self._counterparty_hints.setdefault(counterparty, []).extend(coding.hints)
        return coding

    def prior_category_for(self, description: str) -> Optional[PriorCoding]:
        return self._by_description.get(description)

    def hints_for(self, counterparty: Optional[str]) -> list[str]:
        if not counterparty:
            return []
        return list(self._counterparty_hints.get(counterparty, []))

    def codings(self) -> list[PriorCoding]:
        """Return codings, oldest first."""
        return list(self._by_description.values())

    def __len__(self) -> int:
        return len(self._by_description)
