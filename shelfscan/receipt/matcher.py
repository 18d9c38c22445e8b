"""Match parsed item names to known catalog receipt identifiers.

A catalog product remembers the receipt text it was printed as (its receipt
identifier). OCR rarely reproduces that text exactly, so candidates are ranked
by Damerau-Levenshtein distance over normalized text.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .ocr_parser.common import damerau_levenshtein

DEFAULT_SUGGESTION_LIMIT = 3
# One allowed edit per this many characters when no max_distance is given
CHARS_PER_EDIT = 3


@dataclass(frozen=True)
class IdentifierMatch:
    """A known receipt identifier close to a parsed item name."""

    identifier: str
    distance: int
    similarity: float  # 0.0 to 1.0


def normalize_receipt_text(text: str) -> str:
    """Upper-case, drop punctuation and collapse whitespace."""
    text = re.sub(r"[^A-Z0-9 ]", " ", text.upper())
    return re.sub(r"\s+", " ", text).strip()


def _similarity(a: str, b: str, distance: int) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return round(1 - distance / longest, 2)


def suggest_receipt_identifiers(
    receipt_text: str,
    known_identifiers: Iterable[str],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    max_distance: int | None = None,
) -> list[IdentifierMatch]:
    """
    Rank known receipt identifiers by closeness to a parsed item name.

    Args:
        receipt_text: Item name as parsed from the receipt
        known_identifiers: Receipt identifiers already stored in the catalog
        limit: Maximum number of suggestions to return
        max_distance: Largest edit distance to accept; defaults to a third of
            the normalized name's length (at least 1)

    Returns:
        Matches sorted by distance, then identifier; exact matches first.
    """
    target = normalize_receipt_text(receipt_text)
    if not target or limit <= 0:
        return []
    if max_distance is None:
        max_distance = max(1, len(target) // CHARS_PER_EDIT)

    matches: dict[str, IdentifierMatch] = {}
    for identifier in known_identifiers:
        candidate = normalize_receipt_text(identifier)
        if not candidate or identifier in matches:
            continue
        # Lengths alone already rule the candidate out.
        if abs(len(candidate) - len(target)) > max_distance:
            continue
        distance = damerau_levenshtein(target, candidate)
        if distance > max_distance:
            continue
        matches[identifier] = IdentifierMatch(
            identifier=identifier,
            distance=distance,
            similarity=_similarity(target, candidate, distance),
        )

    ranked = sorted(matches.values(), key=lambda m: (m.distance, m.identifier))
    return ranked[:limit]


def format_suggestions_for_display(item_name: str, matches: list[IdentifierMatch]) -> str:
    """Format identifier suggestions for display to user."""
    if not matches:
        return f"{item_name}: no catalog match"
    suggestions = ", ".join(f"{m.identifier} ({m.similarity:.0%})" for m in matches)
    return f"{item_name}: {suggestions}"
