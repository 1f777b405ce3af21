"""Shared pytest fixtures for ledgercoder tests."""

from datetime import date
from pathlib import Path
import logging
import shutil

import pytest

from ledgercoder.domain.books import BookService
from ledgercoder.domain.category import CategoryCatalog
from ledgercoder.domain.coding import CodingEngine
from ledgercoder.domain.entities import Transaction
from ledgercoder.ledger.files import FileLedgerStore, TRANSACTIONS_DIR

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeTerminal:
    """Terminal that records output and answers prompts from a script."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.lines = []
        self.prompts = []

    def echo(self, message: str = "") -> None:
        self.lines.append(message)

    def prompt(self, text: str) -> str:
        self.prompts.append(text)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {text}")
        return self.answers.pop(0)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def books_dir(tmp_path):
    """Create a books directory with the fixture ledgers under transactions/."""
    transactions_dir = tmp_path / TRANSACTIONS_DIR
    transactions_dir.mkdir()
    for ledger_file in sorted(FIXTURES_DIR.glob("*.ledger")):
        shutil.copy(ledger_file, transactions_dir / ledger_file.name)
    return tmp_path


@pytest.fixture
def store(books_dir):
    """Create a file ledger store over the temporary books directory."""
    return FileLedgerStore(books_dir)


@pytest.fixture
def books(store):
    """Create a BookService over the temporary books directory."""
    return BookService(store)


@pytest.fixture
def catalog():
    """Create a catalog with the default categories."""
    return CategoryCatalog()


@pytest.fixture
def engine(catalog):
    """Create a CodingEngine over the default catalog."""
    return CodingEngine(catalog)


@pytest.fixture
def unknown_expense():
    """A $100 payment from checking that still needs a category."""
    transaction = Transaction(
        date=date(2024, 1, 15),
        description="Monthly rent",
        transaction_id="txn-rent",
        status="completed",
        counterparty="Landlord LLC",
    )
    transaction.add_debit("Expenses:Unknown", "100.00")
    transaction.add_credit("Assets:Checking", "100.00")
    return transaction


@pytest.fixture
def unknown_income():
    """A $250 deposit into checking that still needs a category."""
    transaction = Transaction(
        date=date(2024, 2, 1),
        description="Client payment",
        transaction_id="txn-income",
        counterparty="Acme Corp",
    )
    transaction.add_debit("Assets:Checking", "250.00")
    transaction.add_credit("Income:Unknown", "250.00")
    return transaction


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def make_terminal():
    """Return a factory for scripted fake terminals."""
    return FakeTerminal


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging configuration done by CLI invocations."""
    yield
    logger = logging.getLogger("ledgercoder")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
