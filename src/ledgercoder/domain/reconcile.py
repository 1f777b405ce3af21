"""Reconciliation domain service: code transactions in bulk from a file.

A reconciliation file holds one line per transaction::

    # transaction_id,category[:amount][,category[:amount]...]
    0ac547b2-8d8e-11eb-870c-ef6812d46c47,Expenses:Rent
    dbd348b4-8d88-11eb-8f51-5f5908fef419,Income:Services:10000,Income:Sales:5000

Blank lines and lines starting with ``#`` are ignored.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import logging

from ledgercoder.domain.books import BookService
from ledgercoder.domain.coding import CodingEngine, Disposition, split_category_amount
from ledgercoder.domain.entities import Transaction
from ledgercoder.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileRow:
    """One parsed reconciliation line."""

    line_number: int
    transaction_id: str
    categories: tuple[str, ...]

    def disposition(self) -> Disposition:
        """A lone category without an amount takes the full Unknown amount."""
        if len(self.categories) == 1:
            category, amount = split_category_amount(self.categories[0])
            if amount is None:
                return Disposition.for_category(category)
        return Disposition.for_split(",".join(self.categories))


def parse_reconcile_line(line: str, line_number: int) -> Optional[ReconcileRow]:
    """Parse one reconciliation line; blank and comment lines yield None.

    Raises:
        ValidationError: If the line has no transaction id or no category
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    parts = [part.strip() for part in line.split(",")]
    categories = tuple(part for part in parts[1:] if part)
    if not parts[0] or not categories:
        raise ValidationError(
            f"Line {line_number}: expected 'transaction_id,category[:amount]', got '{line}'"
        )
    return ReconcileRow(line_number, parts[0], categories)


class ReconciliationService:
    """Service for coding transactions from a reconciliation file."""

    def __init__(self, books: BookService, engine: CodingEngine):
        """Initialize reconciliation service.

        Args:
            books: Book service used to append codings
            engine: Coding engine that builds the reversals
        """
        self.books = books
        self.engine = engine

    def reconcile_file(self, uncoded: list[Transaction], reconcile_file: str | Path) -> dict[str, Any]:
        """Code transactions listed in a reconciliation file.

        A failing row is reported and does not stop later rows.

        Args:
            uncoded: Transactions still waiting to be coded
            reconcile_file: Path to the reconciliation file

        Returns:
            Dict with reconciliation results:
            - coded: list of (transaction_id, categories) tuples
            - errors: list of error messages

        Raises:
            FileNotFoundError: If the reconciliation file doesn't exist
        """
        path = Path(reconcile_file)
        if not path.exists():
            raise FileNotFoundError(f"Reconciliation file not found: {reconcile_file}")

        pending = {transaction.transaction_id: transaction for transaction in uncoded}
        coded = []
        errors = []

        lines = path.read_text(encoding="utf-8").splitlines()
        for line_number, line in enumerate(lines, start=1):
            try:
                row = parse_reconcile_line(line, line_number)
            except ValidationError as e:
                errors.append(str(e))
                continue
            if row is None:
                continue

            try:
                transaction = pending.get(row.transaction_id)
                if transaction is None:
                    raise NotFoundError(transaction_not_found(row.transaction_id))
                reverse = self.engine.code_transaction(transaction, row.disposition())
                self.books.append_coding(reverse)
            except NotFoundError as e:
                errors.append(f"Line {line_number}: {e}")
                continue
            except DomainError as e:
                errors.append(f"Line {line_number}: Error coding transaction {row.transaction_id}: {e}")
                logger.error("Reconciliation failed for %s: %s", row.transaction_id, e)
                continue

            del pending[row.transaction_id]
            categories = ", ".join(row.categories)
            coded.append((row.transaction_id, categories))
            logger.info("Reconciled %s as %s", row.transaction_id, categories)

        return {"coded": coded, "errors": errors}
