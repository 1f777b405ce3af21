"""Books domain service: source transactions and what has been coded."""

import logging

from ledgercoder.domain.coding import ORIGINAL_ID_PREFIX
from ledgercoder.domain.entities import Transaction
from ledgercoder.domain.history import CodingHistory
from ledgercoder.ledger.base import LedgerStore
from ledgercoder.ledger.mappers import records_to_transactions
from ledgercoder.ledger.writer import to_ledger

logger = logging.getLogger(__name__)


class BookService:
    """Service for reading the books: source ledgers plus the coding log."""

    def __init__(self, store: LedgerStore):
        """Initialize book service.

        Args:
            store: Ledger store
        """
        self.store = store

    def load_transactions(self) -> list[Transaction]:
        """Load every source ledger transaction, file by file."""
        transactions = records_to_transactions(self.store.read_source_records())
        logger.info(
            "Loaded %d transactions from %d source files",
            len(transactions),
            len(self.store.source_files()),
        )
        return transactions

    def coded_transaction_ids(self) -> set[str]:
        """Return ids recorded in the coding log.

        Includes both the ids of the log's own transactions and every
        ``Original Transaction ID`` a reversal refers back to. A missing log
        means nothing has been coded yet.
        """
        if not self.store.coding_log_exists():
            logger.warning("Coding log %s does not exist yet", self.store.coding_log_path())
            return set()

        coded = set()
        for record in self.store.read_coding_log_records():
            coded.add(record.transaction_id)
            for comment in record.comments:
                if comment.startswith(ORIGINAL_ID_PREFIX):
                    coded.add(comment[len(ORIGINAL_ID_PREFIX):].strip())
        logger.info("Loaded %d coded transaction ids", len(coded))
        return coded

    def uncoded_transactions(self) -> list[Transaction]:
        """Return transactions that still have an Unknown entry and were never coded."""
        coded = self.coded_transaction_ids()
        return [
            transaction
            for transaction in self.load_transactions()
            if transaction.find_unknown_entry() is not None
            and transaction.transaction_id not in coded
        ]

    def check_uncoded(self) -> list[Transaction]:
        """Return every source transaction whose id is not in the coding log."""
        coded = self.coded_transaction_ids()
        return [t for t in self.load_transactions() if t.transaction_id not in coded]

    def load_history(self) -> CodingHistory:
        """Build the coding history from the coding log."""
        return CodingHistory.from_records(self.store.read_coding_log_records())

    def append_coding(self, reverse_transaction: Transaction) -> str:
        """Serialize a reversal and append it to the coding log.

        Raises:
            UnbalancedTransactionError: If the reversal is not balanced; nothing is written

        Returns:
            The ledger text that was appended
        """
        text = to_ledger(reverse_transaction)
        self.store.append_to_coding_log(text)
        return text
