"""Flat-file ledger store."""

from pathlib import Path
import logging

from ledgercoder.ledger.base import LedgerStore
from ledgercoder.ledger.parser import parse_ledger, parse_ledger_file
from ledgercoder.ledger.records import LedgerRecord

logger = logging.getLogger(__name__)

TRANSACTIONS_DIR = "transactions"
LEDGER_GLOB = "*.ledger"
CODING_LOG = "coding.ledger"


class FileLedgerStore(LedgerStore):
    """Ledger store backed by a books directory.

    Layout::

        <root>/transactions/*.ledger   source ledgers (read-only)
        <root>/coding.ledger           coding log (append-only)
    """

    def __init__(self, root: str | Path):
        """Initialize the store.

        Args:
            root: Books directory
        """
        self.root = Path(root)

    def source_files(self) -> list[Path]:
        return sorted((self.root / TRANSACTIONS_DIR).glob(LEDGER_GLOB))

    def read_source_records(self) -> list[LedgerRecord]:
        records = []
        for path in self.source_files():
            file_records = parse_ledger_file(path)
            logger.debug("Parsed %d transactions from %s", len(file_records), path)
            records.extend(file_records)
        return records

    def coding_log_path(self) -> Path:
        return self.root / CODING_LOG

    def coding_log_exists(self) -> bool:
        return self.coding_log_path().exists()

    def read_coding_log_text(self) -> str:
        if not self.coding_log_exists():
            return ""
        return self.coding_log_path().read_text(encoding="utf-8")

    def read_coding_log_records(self) -> list[LedgerRecord]:
        if not self.coding_log_exists():
            return []
        return parse_ledger(self.read_coding_log_text(), file=str(self.coding_log_path()))

    def append_to_coding_log(self, text: str) -> None:
        # Only ever opened in append mode; a single writer is assumed.
        with open(self.coding_log_path(), "a", encoding="utf-8") as f:
            f.write(text)
            if not text.endswith("\n"):
                f.write("\n")
            f.write("\n")
        logger.info("Appended transaction to %s", self.coding_log_path())
