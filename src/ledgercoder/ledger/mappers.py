"""Mapper functions to convert parsed ledger records into domain transactions.

This layer isolates the conversion logic, so the text format and the domain
model can change independently.
"""

from ledgercoder.domain.entities import Transaction
from ledgercoder.ledger.records import LedgerRecord
from ledgercoder.utils.amount_parser import parse_amount


def record_to_transaction(record: LedgerRecord) -> Transaction:
    """Convert a parsed ledger record to a domain Transaction.

    Records without explicit entries fall back to the legacy two-account
    shorthand (``from_account``, ``to_account``, ``amount``). A non-negative
    amount debits ``to_account`` and credits ``from_account``; a negative
    amount produces the credit to ``from_account`` first and then the debit to
    ``to_account``, both for the absolute amount. The legacy form therefore
    debits ``to_account`` whatever the sign; only the entry order changes.
    """
    transaction = Transaction(
        date=record.date,
        description=record.description,
        transaction_id=record.transaction_id,
        status=record.status,
        counterparty=record.counterparty,
        memo=record.memo,
        timestamp=record.timestamp,
        currency=record.currency,
        source_info=record.source_info,
    )

    if record.entries:
        for entry in record.entries:
            transaction.add_entry(
                account=entry.account,
                amount=abs(entry.amount),
                direction=entry.direction,
                currency=entry.currency,
            )
    elif record.from_account and record.to_account and record.amount is not None:
        amount = parse_amount(record.amount)
        if amount < 0:
            transaction.add_credit(record.from_account, abs(amount))
            transaction.add_debit(record.to_account, abs(amount))
        else:
            transaction.add_debit(record.to_account, amount)
            transaction.add_credit(record.from_account, amount)

    for hint in record.hints:
        transaction.add_hint(hint)
    for comment in record.comments:
        transaction.add_comment(comment)

    return transaction


def records_to_transactions(records: list[LedgerRecord]) -> list[Transaction]:
    """Convert a list of records, preserving order."""
    return [record_to_transaction(record) for record in records]
