"""Suggestion gateway: asks the category suggestion service about a transaction.

The gateway builds the prompt from the transaction and the coding history,
hands it to a :class:`SuggestionClient`, and maps whatever comes back onto the
category catalog. It never raises for a failed or malformed reply; those
become a neutral ``Expenses:Unknown`` suggestion with zero confidence.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol
import json
import logging
import math

from ledgercoder.domain.category import CategoryCatalog
from ledgercoder.domain.entities import Transaction
from ledgercoder.domain.errors import SuggestionServiceError
from ledgercoder.domain.history import HistoryProvider, PriorCoding
from ledgercoder.utils.text_distance import find_closest_match

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY = "Expenses:Unknown"
PARSE_FAILURE_EXPLANATION = "Failed to parse AI response"
MAX_PRIOR_CODINGS = 50


@dataclass(frozen=True)
class Suggestion:
    """A suggested category with a confidence between 0 and 1."""

    category: str
    confidence: float
    explanation: str

    @property
    def confidence_percent(self) -> float:
        return round(self.confidence * 100, 1)


class SuggestionClient(Protocol):
    """Transport to the external suggestion service."""

    def complete(self, prompt: str) -> Optional[str]:
        """Return the raw reply text for a prompt.

        Raises:
            SuggestionServiceError: If the service cannot be reached
        """
        ...


def fallback_suggestion(explanation: str = PARSE_FAILURE_EXPLANATION) -> Suggestion:
    return Suggestion(category=FALLBACK_CATEGORY, confidence=0.0, explanation=explanation)


def _ordered_codings(transaction: Transaction, history: HistoryProvider) -> list[PriorCoding]:
    """Prior codings with the most relevant first: same description, then same counterparty."""
    codings = history.codings()
    exact = [c for c in codings if c.description == transaction.description]
    same_party = [
        c
        for c in codings
        if transaction.counterparty and c.counterparty == transaction.counterparty and c not in exact
    ]
    rest = [c for c in reversed(codings) if c not in exact and c not in same_party]
    return (exact + same_party + rest)[:MAX_PRIOR_CODINGS]


def build_prompt(
    transaction: Transaction,
    history: HistoryProvider,
    categories: Optional[list[str]] = None,
) -> str:
    """Build the prompt sent to the suggestion service."""
    lines = ["Transaction details:"]
    lines.append(f"Date: {transaction.date}")
    lines.append(f"Description: {transaction.description}")
    if transaction.memo:
        lines.append(f"Memo: {transaction.memo}")

    unknown_entry = transaction.find_unknown_entry()
    if unknown_entry is not None:
        lines.append(f"Amount: {unknown_entry.amount} {unknown_entry.currency}")
        lines.append(f"Unknown account: {unknown_entry.account} ({unknown_entry.direction.value})")

    if transaction.counterparty:
        lines.append(f"Counterparty: {transaction.counterparty}")

    if transaction.hints:
        lines.append("")
        lines.append("Hints from previous categorizations:")
        lines.extend(f"- {hint}" for hint in transaction.hints)

    codings = _ordered_codings(transaction, history)
    if codings:
        lines.append("")
        lines.append("Previous codings:")
        for coding in codings:
            if coding.hints:
                lines.append(
                    f'- "{coding.description}" => {coding.category} (hints: {", ".join(coding.hints)})'
                )
            else:
                lines.append(f'- "{coding.description}" => {coding.category}')

    counterparty_hints = history.hints_for(transaction.counterparty)
    if counterparty_hints:
        lines.append("")
        lines.append("Counterparty information:")
        lines.extend(f"- {hint}" for hint in counterparty_hints)

    if categories:
        lines.append("")
        lines.append("Available categories:")
        lines.extend(f"- {category}" for category in categories)

    lines.append("")
    lines.append("Please respond with a JSON object containing:")
    lines.append("- category: The suggested category (e.g., 'Expenses:Office')")
    lines.append("- confidence: A number between 0-100 indicating your confidence")
    lines.append("- explanation: A brief explanation of your suggestion")
    return "\n".join(lines) + "\n"


def _normalize_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(confidence):
        return 0.0
    if confidence > 1:
        confidence = confidence / 100.0
    return min(max(confidence, 0.0), 1.0)


def normalize_suggestion(content: Optional[str], catalog: CategoryCatalog) -> Suggestion:
    """Map a raw service reply onto the catalog.

    A reply that is missing or not a JSON object yields the fallback
    suggestion. Percent confidences are rescaled to 0-1. A category outside
    the catalog is replaced by the closest catalog entry by edit distance,
    and the explanation notes the substitution.
    """
    if not content:
        return fallback_suggestion()

    text = content.strip()
    # Chat models often wrap the JSON in a markdown code block
    if text.startswith("```"):
        text = "\n".join(text.split("\n")[1:-1])

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Suggestion reply was not valid JSON: %r", content[:200])
        return fallback_suggestion()

    if not isinstance(payload, dict):
        return fallback_suggestion()

    category = payload.get("category")
    explanation = str(payload.get("explanation") or "No explanation provided")
    if not category or not isinstance(category, str):
        return Suggestion(
            category=FALLBACK_CATEGORY,
            confidence=0.0,
            explanation=f"No category suggested: {explanation}",
        )

    confidence = _normalize_confidence(payload.get("confidence", 0))

    if category not in catalog:
        closest = find_closest_match(category, catalog.all_categories())
        if closest is not None:
            explanation += f" (Adjusted from '{category}' to closest match '{closest}')"
            category = closest

    return Suggestion(category=category, confidence=confidence, explanation=explanation)


class SuggestionGateway:
    """Service for obtaining category suggestions for transactions."""

    def __init__(self, client: SuggestionClient, catalog: CategoryCatalog, history: HistoryProvider):
        """Initialize suggestion gateway.

        Args:
            client: Transport to the suggestion service
            catalog: Catalog that suggestions are mapped onto
            history: Prior codings used as prompt context
        """
        self.client = client
        self.catalog = catalog
        self.history = history

    def suggest(self, transaction: Transaction) -> Suggestion:
        """Return a suggestion for a transaction; never raises for service failures."""
        prompt = build_prompt(transaction, self.history, self.catalog.all_categories())
        logger.debug("Suggestion prompt for %s:\n%s", transaction.transaction_id, prompt)

        try:
            content = self.client.complete(prompt)
        except SuggestionServiceError as e:
            logger.error("Failed to obtain suggestion for %s: %s", transaction.transaction_id, e)
            return fallback_suggestion(f"Failed to obtain suggestion: {e}")

        suggestion = normalize_suggestion(content, self.catalog)
        logger.info(
            "Suggestion for %s: %s (confidence %.1f%%)",
            transaction.transaction_id,
            suggestion.category,
            suggestion.confidence_percent,
        )
        return suggestion
