"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class UnbalancedTransactionError(ValidationError):
    """A transaction whose debits and credits differ was about to be written."""


class NoUnknownCategoryError(ValidationError):
    """A transaction offered for coding has no Unknown entry."""


class MissingSplitDetailError(ValidationError):
    """A split was requested without any category:amount detail."""


class SplitMismatchError(ValidationError):
    """Split amounts do not add up to the Unknown entry amount."""

    def __init__(self, split_total: Decimal, unknown_amount: Decimal):
        super().__init__(split_total_mismatch(split_total, unknown_amount))
        self.split_total = split_total
        self.unknown_amount = unknown_amount


class ResponsesExhaustedError(DomainError):
    """A replayed response file ran out before the session finished."""


class SuggestionServiceError(DomainError):
    """The category suggestion service failed or returned nothing usable."""


class SettingsError(DomainError):
    """A configuration value is missing or malformed."""


def unbalanced_transaction(transaction_id: str, warnings: list[str]) -> str:
    """Return message for refusing to write an unbalanced transaction."""
    return (
        f"Cannot write unbalanced transaction {transaction_id} to ledger: "
        f"{', '.join(warnings)}"
    )


def no_unknown_category(transaction_id: str) -> str:
    """Return message for a transaction with nothing to recategorize."""
    return (
        f"Transaction {transaction_id} has no unknown category "
        "(expected an Income:Unknown or Expenses:Unknown entry)"
    )


def split_total_mismatch(split_total: Decimal, unknown_amount: Decimal) -> str:
    """Return message for split amounts that do not cover the Unknown entry."""
    return (
        f"Total amount of new categories ({split_total}) does not match "
        f"the Unknown entry amount ({unknown_amount})"
    )


def non_positive_split_amount(category: str, amount: Decimal) -> str:
    """Return message for a split category with a zero or negative amount."""
    return f"Amount for category {category} must be positive, got {amount}"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for a transaction id with no uncoded match."""
    return f"Transaction {transaction_id} not found among uncoded transactions"


def file_not_found(label: str, path: str) -> str:
    """Return message for a required input file that does not exist."""
    return f"{label} not found: {path}"
