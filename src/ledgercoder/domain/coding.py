"""Coding engine: turns an uncategorized transaction into a reversal.

The original transaction is never edited. Coding produces a new, balanced
reversal transaction that moves the Unknown amount onto real categories; the
reversal is what gets appended to the coding log.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional
import logging
import re

from ledgercoder.domain.category import CategoryCatalog, CategoryType, category_type
from ledgercoder.domain.entities import BALANCE_TOLERANCE, Transaction
from ledgercoder.domain.errors import (
    MissingSplitDetailError,
    NoUnknownCategoryError,
    SplitMismatchError,
    ValidationError,
    no_unknown_category,
    non_positive_split_amount,
)
from ledgercoder.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

ORIGINAL_ID_PREFIX = "Original Transaction ID:"

_SPLIT_AMOUNT = re.compile(r"^\s*(-?\$?[\d,]*\.?\d+)\s*(?:USD|\$)?\s*$", re.IGNORECASE)


class DispositionKind(str, Enum):
    """How the Unknown amount of a transaction is resolved."""

    CATEGORY = "category"
    SPLIT = "split"
    NEW_CATEGORY = "new_category"


@dataclass(frozen=True)
class Disposition:
    """The operator's (or suggestion's) decision for one transaction."""

    kind: DispositionKind
    category: Optional[str] = None
    split_input: Optional[str] = None
    min_split_categories: int = 1

    @classmethod
    def for_category(cls, category: str) -> "Disposition":
        return cls(kind=DispositionKind.CATEGORY, category=category)

    @classmethod
    def for_split(cls, split_input: Optional[str], min_categories: int = 1) -> "Disposition":
        return cls(
            kind=DispositionKind.SPLIT, split_input=split_input, min_split_categories=min_categories
        )

    @classmethod
    def for_new_category(cls, category: Optional[str]) -> "Disposition":
        return cls(kind=DispositionKind.NEW_CATEGORY, category=category)


def create_reverse_transaction(
    transaction: Transaction,
    new_categories: Optional[Mapping[str, Decimal | str | int | float]] = None,
) -> Transaction:
    """Create the reversal of a transaction.

    Without new categories every entry is mirrored (debits become credits and
    vice versa). With new categories, the Unknown entry's amount is moved onto
    them: each category is booked on the Unknown entry's side and a single
    offsetting entry on the opposite side cancels the Unknown account.

    Args:
        transaction: Transaction to reverse
        new_categories: Mapping of category to amount (numbers or amount strings)

    Returns:
        The reversal transaction

    Raises:
        NoUnknownCategoryError: If categories are given but there is no Unknown entry
        ValidationError: If a category amount is zero or negative
        SplitMismatchError: If the category amounts do not add up to the Unknown amount
    """
    reverse = Transaction(
        date=transaction.date,
        description=f"Reversal: {transaction.description}",
        transaction_id=f"rev-{transaction.transaction_id}",
        status=transaction.status,
        counterparty=transaction.counterparty,
        memo=f"Reversal of transaction {transaction.transaction_id}",
        timestamp=transaction.timestamp,
        currency=transaction.currency,
        source_info=transaction.source_info,
    )
    reverse.add_comment(f"{ORIGINAL_ID_PREFIX} {transaction.transaction_id}")
    for hint in transaction.hints:
        reverse.add_hint(hint)

    if not new_categories:
        for entry in transaction.entries:
            reverse.add_entry(entry.account, entry.amount, entry.direction.opposite, entry.currency)
        return reverse

    unknown_entry = transaction.find_unknown_entry()
    if unknown_entry is None:
        raise NoUnknownCategoryError(no_unknown_category(transaction.transaction_id))

    amounts = {category: parse_amount(amount) for category, amount in new_categories.items()}
    for category, amount in amounts.items():
        if amount <= 0:
            raise ValidationError(non_positive_split_amount(category, amount))
    total = sum(amounts.values(), Decimal("0"))
    if abs(total - unknown_entry.amount) > BALANCE_TOLERANCE:
        raise SplitMismatchError(total, unknown_entry.amount)

    for category, amount in amounts.items():
        reverse.add_entry(category, amount, unknown_entry.direction)
    reverse.add_entry(unknown_entry.account, total, unknown_entry.direction.opposite)
    return reverse


def split_category_amount(part: str) -> tuple[str, Optional[Decimal]]:
    """Split "Expenses:Rent:60.00" into ("Expenses:Rent", Decimal("60.00")).

    The trailing piece is the amount only when it is numeric and non-zero,
    optionally followed by "USD" or "$" ("Expenses:Rent:60 USD"); otherwise
    the whole part is the category and the amount is None.
    """
    head, sep, tail = part.rpartition(":")
    match = _SPLIT_AMOUNT.match(tail) if sep else None
    if match:
        amount = parse_amount(match.group(1))
        return (head.strip(), amount if amount else None)
    return (part.strip(), None)


def parse_split_input(
    split_input: Optional[str], unknown_amount: Decimal, min_categories: int = 1
) -> dict[str, Decimal]:
    """Parse "category:amount" pairs separated by commas.

    "Expenses:Rent:60.00" books 60.00 to "Expenses:Rent"; the trailing piece
    is the amount whenever it is numeric, so "Expenses:Rent:60" and
    "Rent:60" both work. A part without an amount gets the full Unknown
    amount. Repeated categories are added together.

    A reconciliation row such as "id,Expenses:Rent:100" is a split over a
    single category, so one category is enough by default; the interactive
    split option asks for at least two through ``min_categories``.

    Raises:
        MissingSplitDetailError: If no split detail was given, or it names
            fewer than ``min_categories`` categories
    """
    if split_input is None or not split_input.strip():
        raise MissingSplitDetailError(
            "Split requires categories and amounts (e.g. Expenses:Rent:500,Expenses:Utilities:250)"
        )

    categories: dict[str, Decimal] = {}
    for part in split_input.split(","):
        if not part.strip():
            continue
        category, amount = split_category_amount(part)
        categories[category] = categories.get(category, Decimal("0")) + (amount or unknown_amount)

    if not categories:
        raise MissingSplitDetailError("Split requires at least one category")
    if len(categories) < min_categories:
        raise MissingSplitDetailError(
            f"Split requires at least {min_categories} different categories, got {len(categories)}"
        )
    return categories


class CodingEngine:
    """Service for coding uncategorized transactions."""

    def __init__(self, catalog: CategoryCatalog):
        """Initialize coding engine.

        Args:
            catalog: Category catalog; new custom categories are registered here
        """
        self.catalog = catalog

    def code_transaction(self, transaction: Transaction, disposition: Disposition) -> Transaction:
        """Build the balanced reversal for a disposition.

        Raises:
            NoUnknownCategoryError: If the transaction has no Unknown entry
            MissingSplitDetailError: If a split has no detail
            SplitMismatchError: If split amounts do not match the Unknown amount
            ValidationError: If a category is missing
        """
        unknown_entry = transaction.find_unknown_entry()
        if unknown_entry is None:
            raise NoUnknownCategoryError(no_unknown_category(transaction.transaction_id))

        if disposition.kind is DispositionKind.SPLIT:
            new_categories = parse_split_input(
                disposition.split_input, unknown_entry.amount, disposition.min_split_categories
            )
        else:
            category = (disposition.category or "").strip()
            if not category:
                raise ValidationError("A category name is required")
            if disposition.kind is DispositionKind.NEW_CATEGORY:
                self.register_category(category)
            new_categories = {category: unknown_entry.amount}

        reverse = create_reverse_transaction(transaction, new_categories)
        logger.info(
            "Coded %s as %s",
            transaction.transaction_id,
            ", ".join(f"{c}={a}" for c, a in new_categories.items()),
        )
        return reverse

    def register_category(self, category: str) -> None:
        """Add a custom category to the catalog group matching its prefix."""
        if self.catalog.add_custom_category(category):
            logger.info("Registered custom category %s", category)
        elif category_type(category) is CategoryType.UNKNOWN:
            logger.warning("Category %s has no recognized prefix; not added to catalog", category)
