"""Edit distance helpers for fuzzy category matching."""

from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(first: str, second: str) -> int:
    """Return the classic Levenshtein distance between two strings.

    Deletion, insertion and substitution each cost 1.
    """
    return Levenshtein.distance(first, second)


def find_closest_match(value: str, candidates: Iterable[str]) -> Optional[str]:
    """Return the candidate with the smallest edit distance to value.

    Ties resolve to the first minimal candidate in iteration order.
    Returns None when there are no candidates.
    """
    best = None
    best_distance = None
    for candidate in candidates:
        distance = levenshtein_distance(value, candidate)
        if best_distance is None or distance < best_distance:
            best = candidate
            best_distance = distance
    return best
