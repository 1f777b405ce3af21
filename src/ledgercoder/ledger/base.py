"""Abstract ledger storage interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from ledgercoder.ledger.records import LedgerRecord


class LedgerStore(ABC):
    """Abstract storage for source ledgers and the coding log.

    Source ledgers are read-only. The coding log is append-only: existing
    text is never rewritten.
    """

    @abstractmethod
    def source_files(self) -> list[Path]:
        """List source ledger files in load order."""
        pass

    @abstractmethod
    def read_source_records(self) -> list[LedgerRecord]:
        """Parse every source ledger file and concatenate the records."""
        pass

    @abstractmethod
    def coding_log_exists(self) -> bool:
        """Return True if the coding log has been created."""
        pass

    @abstractmethod
    def coding_log_path(self) -> Path:
        """Return the location of the coding log."""
        pass

    @abstractmethod
    def read_coding_log_records(self) -> list[LedgerRecord]:
        """Parse the coding log. Returns an empty list if it does not exist."""
        pass

    @abstractmethod
    def read_coding_log_text(self) -> str:
        """Return the raw coding log text ('' if it does not exist)."""
        pass

    @abstractmethod
    def append_to_coding_log(self, text: str) -> None:
        """Append a serialized transaction block to the coding log."""
        pass
