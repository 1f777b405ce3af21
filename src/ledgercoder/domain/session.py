"""Coding session: walks the operator through every uncoded transaction.

Each transaction is driven to one outcome. The operator picks a menu option,
may be asked for split detail, a new category name or feedback on a rejected
suggestion, and the resulting reversal is appended to the coding log exactly
once. Invalid input loops back to the menu a bounded number of times.

Input comes from exactly one :class:`ResponseSource` per session: the live
terminal or a replayed response file. Either can be wrapped in a
:class:`RecordingResponses` to save every answer for a later replay.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Protocol
import logging

from ledgercoder.domain.books import BookService
from ledgercoder.domain.category import NEW_CATEGORY_OPTION, SPLIT_OPTION
from ledgercoder.domain.coding import CodingEngine, Disposition
from ledgercoder.domain.entities import Transaction
from ledgercoder.domain.errors import DomainError, ResponsesExhaustedError
from ledgercoder.domain.history import CodingHistory
from ledgercoder.domain.suggestion import Suggestion, SuggestionGateway

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
MIN_SPLIT_CATEGORIES = 2
AUTO_APPLY_CHOICE = "A"


class Terminal(Protocol):
    """Where the session writes its output and reads live answers."""

    def echo(self, message: str = "") -> None:
        ...

    def prompt(self, text: str) -> str:
        ...


class ResponseSource(ABC):
    """Supplies one answer per decision point, in session order."""

    @abstractmethod
    def read(self, prompt_text: str) -> str:
        """Return the next answer.

        Raises:
            ResponsesExhaustedError: If no answer is left
        """
        pass

    def close(self) -> None:
        """Release the source once the session is over."""
        pass


class InteractiveResponses(ResponseSource):
    """Answers typed by the operator."""

    def __init__(self, terminal: Terminal):
        self.terminal = terminal

    def read(self, prompt_text: str) -> str:
        return self.terminal.prompt(prompt_text)


class ReplayResponses(ResponseSource):
    """Answers replayed front to back from a recorded response file.

    Running dry stops the session; it never falls back to the terminal.
    """

    def __init__(self, terminal: Terminal, responses: Iterable[str]):
        self.terminal = terminal
        self._queue = deque(responses)

    @classmethod
    def from_file(cls, terminal: Terminal, path: str | Path) -> "ReplayResponses":
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        logger.info("Loaded %d saved responses from %s", len(lines), path)
        return cls(terminal, lines)

    def read(self, prompt_text: str) -> str:
        if not self._queue:
            raise ResponsesExhaustedError(f"Ran out of saved responses at prompt '{prompt_text}'")
        response = self._queue.popleft()
        self.terminal.echo(f"{prompt_text}: {response}")
        self.terminal.echo(f"Using saved response: {response}")
        return response


class RecordingResponses(ResponseSource):
    """Wraps another source and saves every answer, in order, on close."""

    def __init__(self, source: ResponseSource, path: str | Path):
        self.source = source
        self.path = Path(path)
        self.recorded: list[str] = []

    def read(self, prompt_text: str) -> str:
        response = self.source.read(prompt_text)
        self.recorded.append(response)
        return response

    def close(self) -> None:
        self.source.close()
        text = "".join(f"{response}\n" for response in self.recorded)
        self.path.write_text(text, encoding="utf-8")
        logger.info("Saved %d responses to %s", len(self.recorded), self.path)


@dataclass
class SessionResult:
    """Outcome of a coding session."""

    coded: list[Transaction] = field(default_factory=list)
    skipped: list[Transaction] = field(default_factory=list)


class CodingSession:
    """Interactive coding of uncategorized transactions."""

    def __init__(
        self,
        books: BookService,
        engine: CodingEngine,
        history: CodingHistory,
        terminal: Terminal,
        responses: ResponseSource,
        gateway: Optional[SuggestionGateway] = None,
        auto_apply: bool = False,
    ):
        """Initialize coding session.

        Args:
            books: Book service the reversals are appended through
            engine: Coding engine that builds the reversals
            history: Coding history, updated after every coded transaction
            terminal: Output for transaction details and menus
            responses: Source of the operator's answers
            gateway: Suggestion gateway; None disables suggestions
            auto_apply: Start in auto-apply mode
        """
        self.books = books
        self.engine = engine
        self.history = history
        self.terminal = terminal
        self.responses = responses
        self.gateway = gateway
        self.auto_apply = auto_apply

    @property
    def suggestions_enabled(self) -> bool:
        return self.gateway is not None

    def run(self, transactions: list[Transaction]) -> SessionResult:
        """Code each transaction in turn.

        The response source is closed however the session ends, so recorded
        answers survive an early stop.

        Raises:
            ResponsesExhaustedError: If replayed answers run out
        """
        result = SessionResult()
        logger.info(
            "Coding session started: %d transactions, suggestions %s, auto-apply %s",
            len(transactions),
            "on" if self.suggestions_enabled else "off",
            "on" if self.auto_apply else "off",
        )
        try:
            for transaction in transactions:
                reverse = self.code(transaction)
                if reverse is None:
                    result.skipped.append(transaction)
                else:
                    result.coded.append(transaction)
        finally:
            self.responses.close()
            logger.info(
                "Coding session ended: %d coded, %d left uncoded",
                len(result.coded),
                len(result.skipped),
            )
        return result

    def code(self, transaction: Transaction) -> Optional[Transaction]:
        """Drive one transaction to an outcome.

        Returns:
            The appended reversal, or None if the transaction was left uncoded
        """
        self.terminal.echo(str(transaction))
        self.terminal.echo()
        logger.info("Coding transaction %s", transaction.transaction_id)

        suggestion = self._suggest(transaction)
        suggested_option = None
        if suggestion is not None:
            suggested_option = self.engine.catalog.option_number(suggestion.category)

        for attempt in range(1, MAX_ATTEMPTS + 1):
            self._show_menu(suggested_option)
            option = self._select_option(suggestion, suggested_option)
            if option is None:
                continue

            chosen = self._disposition_for(option, suggested_option)
            if chosen is None:
                self.terminal.echo("Invalid option. Please try again.")
                continue

            disposition, feedback = chosen
            if feedback and feedback not in transaction.hints:
                transaction.add_hint(feedback)

            try:
                reverse = self.engine.code_transaction(transaction, disposition)
                self.books.append_coding(reverse)
            except DomainError as e:
                self.terminal.echo(f"Error: {e}")
                logger.warning(
                    "Attempt %d to code %s failed: %s", attempt, transaction.transaction_id, e
                )
                continue

            self.history.record(
                transaction.description,
                reverse.entries[0].account,
                transaction.counterparty,
                [feedback] if feedback else transaction.hints,
            )
            self.terminal.echo("Transaction coded and saved to coding.ledger.")
            self.terminal.echo()
            return reverse

        self.terminal.echo(
            f"Giving up on transaction {transaction.transaction_id} after {MAX_ATTEMPTS} attempts; "
            "it remains uncoded."
        )
        self.terminal.echo()
        logger.warning("Left %s uncoded after %d attempts", transaction.transaction_id, MAX_ATTEMPTS)
        return None

    def _suggest(self, transaction: Transaction) -> Optional[Suggestion]:
        if self.gateway is None:
            return None
        self.terminal.echo("Getting AI suggestion...")
        suggestion = self.gateway.suggest(transaction)
        self.terminal.echo(
            f"AI Suggestion: {suggestion.category} (Confidence: {suggestion.confidence_percent}%)"
        )
        self.terminal.echo(f"Explanation: {suggestion.explanation}")
        self.terminal.echo()
        return suggestion

    def _show_menu(self, suggested_option: Optional[int]) -> None:
        self.terminal.echo("Available options:")
        self.terminal.echo(f"{SPLIT_OPTION}. Split transaction between multiple categories")
        self.terminal.echo(f"{NEW_CATEGORY_OPTION}. Create new category")
        for category in self.engine.catalog:
            option = self.engine.catalog.option_number(category)
            marker = " (AI Suggested)" if option == suggested_option else ""
            self.terminal.echo(f"{option}. {category}{marker}")
        if self.suggestions_enabled and not self.auto_apply:
            self.terminal.echo(f"{AUTO_APPLY_CHOICE}. Auto-apply AI suggestions for all remaining transactions")

    def _select_option(
        self, suggestion: Optional[Suggestion], suggested_option: Optional[int]
    ) -> Optional[int]:
        """Return the chosen option number, or None to show the menu again."""
        if self.auto_apply and suggested_option is not None:
            self.terminal.echo(f"Auto-applying AI suggestion: {suggestion.category}")
            return suggested_option

        last_option = len(self.engine.catalog) + NEW_CATEGORY_OPTION
        prompt_text = f"Select option (1-{last_option})"
        if self.suggestions_enabled and not self.auto_apply and suggested_option is not None:
            prompt_text += f"[{suggested_option}]"

        answer = self.responses.read(prompt_text).strip()

        if answer.upper() == AUTO_APPLY_CHOICE and self.suggestions_enabled and not self.auto_apply:
            self.auto_apply = True
            logger.info("Auto-apply of suggestions switched on")
            if suggested_option is None:
                self.terminal.echo("No usable AI suggestion for this transaction.")
                return None
            self.terminal.echo(f"Auto-applying AI suggestion: {suggestion.category}")
            return suggested_option

        try:
            return int(answer)
        except ValueError:
            self.terminal.echo("Invalid option. Please try again.")
            return None

    def _disposition_for(
        self, option: int, suggested_option: Optional[int]
    ) -> Optional[tuple[Disposition, Optional[str]]]:
        """Collect whatever extra input an option needs.

        Returns:
            The disposition and the operator's feedback on a rejected
            suggestion, or None if the option is out of range
        """
        if option == SPLIT_OPTION:
            split_input = self.responses.read(
                "Enter categories and amounts (category1:amount1,category2:amount2,...)"
            )
            return Disposition.for_split(split_input, min_categories=MIN_SPLIT_CATEGORIES), None

        if option == NEW_CATEGORY_OPTION:
            new_category = self.responses.read("Enter new category")
            return Disposition.for_new_category(new_category), None

        category = self.engine.catalog.category_for_option(option)
        if category is None:
            return None

        feedback = None
        if suggested_option is not None and option != suggested_option:
            feedback = self.responses.read("Provide a reason why the AI was wrong").strip() or None
        return Disposition.for_category(category), feedback
