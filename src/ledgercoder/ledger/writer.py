"""Ledger text writer."""

from ledgercoder.domain.entities import Entry, Transaction
from ledgercoder.domain.errors import UnbalancedTransactionError, unbalanced_transaction
from ledgercoder.utils.amount_parser import format_amount
from ledgercoder.utils.date_parser import format_ledger_date

INDENT = "    "


def entry_to_ledger(entry: Entry) -> str:
    """Format a posting line; amounts are always written in $ form."""
    return f"{INDENT}{entry.account}  ${format_amount(entry.signed_amount)}"


def to_ledger(transaction: Transaction) -> str:
    """Serialize a transaction as a ledger text block.

    Raises:
        UnbalancedTransactionError: If debits and credits differ, so that an
            inconsistent transaction never reaches a ledger file
    """
    if not transaction.is_balanced():
        raise UnbalancedTransactionError(
            unbalanced_transaction(transaction.transaction_id, transaction.validate())
        )

    lines = [f"{format_ledger_date(transaction.date)} {transaction.description}"]
    for key, value in (
        ("Transaction ID", transaction.transaction_id),
        ("Status", transaction.status),
        ("Counterparty", transaction.counterparty),
        ("Memo", transaction.memo),
        ("Timestamp", transaction.timestamp),
    ):
        if value:
            lines.append(f"{INDENT}; {key}: {value}")
    lines.extend(f"{INDENT}; Hint: {hint}" for hint in transaction.hints)

    lines.extend(entry_to_ledger(entry) for entry in transaction.entries)
    lines.extend(f"{INDENT}; {comment}" for comment in transaction.comments)
    return "\n".join(lines) + "\n"
