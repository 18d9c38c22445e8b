"""Shared constants and helpers for OCR receipt line classification."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from shelfscan.domain.receipt import PartialItem

# Confidence scoring
BASE_CONFIDENCE = 0.95
MAX_PLAUSIBLE_PRICE = Decimal("100")
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 50
PRICE_TOLERANCE = Decimal("0.01")  # quantity x unit price may drift by one cent
CENTS = Decimal("0.01")

# Store tax/type codes printed after an item name, e.g. "WHOLE MILK GAL F 3.99"
ITEM_TYPES = ("F", "FW", "W", "T", "HQ", "Q", "H", "TF")
_ITEM_TYPE_ALTERNATION = "|".join(sorted(ITEM_TYPES, key=len, reverse=True))

# Price patterns, tried in priority order. A single line can satisfy more than
# one of them: "2 Ea. @ 1/1.62" also ends in a bare decimal (the unit price).
ORIG_PRICE_PATTERN = re.compile(
    r"(?:\borig\.?\s*\$?\s*(\d+\.\d{2})|(?<![\d.\-$])(\d+\.\d{2})\s*orig\.?)\s*$",
    re.IGNORECASE,
)
EACH_PRICE_PATTERN = re.compile(r"(\d+)\s*Ea\.\s*@\s*(\d+)\s*/\s*\$?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
BARE_PRICE_PATTERN = re.compile(
    r"(?:(?<!-)\$\s*|(?<![\d.\-$]))(\d+\.\d{2})"
    r"\s*(?:/?\s*(?i:lbs?|oz|kg|ea)\b)?"
    rf"\s*(?:{_ITEM_TYPE_ALTERNATION})?\s*$"
)
PRICE_PATTERNS = [
    (ORIG_PRICE_PATTERN, "orig_price"),
    (EACH_PRICE_PATTERN, "each_price"),
    (BARE_PRICE_PATTERN, "bare_price"),
]

# A line that is nothing but a two-decimal amount with an optional tax flag.
STANDALONE_PRICE_PATTERN = re.compile(rf"^\$?\s*\d+\.\d{{2}}(?:\s+(?:{_ITEM_TYPE_ALTERNATION}))?$")
EACH_MARKER_PATTERN = re.compile(r"\d+\s*Ea\.", re.IGNORECASE)

# Non-item noise rows: coupons, subtotal/savings banners, payment rows, separators
SKIP_PATTERNS = [
    re.compile(r"^DC\s"),
    re.compile(r"Special Today"),
    re.compile(r"FREE/COUPON"),
    re.compile(r"Reduced Item"),
    re.compile(r"DIGITAL COUPON"),
    re.compile(r"FSA Subtotal"),
    re.compile(r"^SUB\s*TOTAL", re.IGNORECASE),
    re.compile(r"YOU SAVED"),
    re.compile(r"OUR BRAND SAVINGS"),
    re.compile(r"DEBIT"),
    re.compile(r"^\s*$"),
    re.compile(r"^Total Sale$"),
    re.compile(r"^ITEMS PURCHASED:"),
    re.compile(r"^[*]+$"),
    re.compile(r"^[-=_~.*\s]+$"),
]

STOP_PATTERN = re.compile(r"\*{5,}|ITEMS PURCHASED")


def extract_price(line: str) -> Decimal | None:
    """
    Extract the price a line carries, if any.

    Patterns are tried in priority order (trailing "orig" price, "Ea." unit
    pricing, bare trailing decimal) and the first match wins.

    Returns:
        The price as a Decimal, or None if the line has no usable price.
        Negative (discount) amounts never produce a price.
    """
    text = line.strip()
    for pattern, pattern_type in PRICE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            if pattern_type == "orig_price":
                return Decimal(match.group(1) or match.group(2))
            if pattern_type == "each_price":
                quantity = int(match.group(1))
                per_count = int(match.group(2)) or 1
                unit_price = Decimal(match.group(3))
                return (quantity * unit_price / per_count).quantize(CENTS, rounding=ROUND_HALF_UP)
            return Decimal(match.group(1))
        except InvalidOperation:
            continue
    return None


def parse_unit_pricing(line: str) -> tuple[int, Decimal] | None:
    """Parse lines like "2 Ea. @ 1/1.62" into (unit_quantity, unit_price)."""
    match = EACH_PRICE_PATTERN.search(line.strip())
    if not match:
        return None
    try:
        return int(match.group(1)), Decimal(match.group(3))
    except InvalidOperation:
        return None


def has_each_marker(line: str) -> bool:
    return EACH_MARKER_PATTERN.search(line) is not None


def is_bare_price(line: str) -> bool:
    """Return True if the line is only a price, e.g. "3.99" or "3.99 F"."""
    return STANDALONE_PRICE_PATTERN.match(line.strip()) is not None


def should_stop_processing(line: str) -> bool:
    """Return True for the banner rows that end the item section."""
    return STOP_PATTERN.search(line.strip()) is not None


def should_skip_line(line: str, current_item: PartialItem | None = None) -> bool:
    """
    Return True if the line is known non-item noise.

    A line is never skipped while the current item still needs its price and
    the line carries one, even if it also looks like noise.
    """
    trimmed = line.strip()
    if current_item is not None and current_item.awaiting_price and extract_price(trimmed) is not None:
        return False
    return any(pattern.search(trimmed) for pattern in SKIP_PATTERNS)


def split_item_type(text: str) -> tuple[str, str | None]:
    """Split a trailing store type code off an item name: "MILK F" -> ("MILK", "F")."""
    trimmed = text.strip()
    if trimmed in ITEM_TYPES:
        return "", trimmed
    match = re.match(rf"^(.*\S)\s+({_ITEM_TYPE_ALTERNATION})$", trimmed)
    if match:
        return match.group(1).strip(), match.group(2)
    return trimmed, None


def round_confidence(value: float | Decimal) -> float:
    """Round a confidence score half-up to 2 decimals, clamped to [0, 1]."""
    rounded = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return float(min(Decimal("1"), max(Decimal("0"), rounded)))


def calculate_confidence(
    name: str,
    price: Decimal,
    unit_quantity: int | None = None,
    unit_price: Decimal | None = None,
) -> float:
    """
    Heuristic confidence that a parsed item's fields are consistent.

    Penalties compound: implausible price (zero or over 100), a name length
    outside [3, 50], and a quantity x unit price that misses the line price by
    more than one cent.
    """
    confidence = Decimal(str(BASE_CONFIDENCE))

    if price == 0 or price > MAX_PLAUSIBLE_PRICE:
        confidence *= Decimal("0.7")

    if len(name) < MIN_NAME_LENGTH or len(name) > MAX_NAME_LENGTH:
        confidence *= Decimal("0.8")

    if unit_price and unit_quantity:
        expected = (unit_price * unit_quantity).quantize(CENTS, rounding=ROUND_HALF_UP)
        if abs(expected - price) > PRICE_TOLERANCE:
            confidence *= Decimal("0.7")

    return round_confidence(confidence)


def damerau_levenshtein(a: str, b: str) -> int:
    """
    Edit distance between two strings, counting an adjacent swap as one edit.

    This is the optimal-string-alignment variant: O(len(a) * len(b)) time and space.
    """
    len_a = len(a)
    len_b = len(b)

    matrix = [[0] * (len_b + 1) for _ in range(len_a + 1)]
    for i in range(len_a + 1):
        matrix[i][0] = i
    for j in range(len_b + 1):
        matrix[0][j] = j

    for i in range(1, len_a + 1):
        for j in range(1, len_b + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            matrix[i][j] = min(
                matrix[i - 1][j] + 1,  # deletion
                matrix[i][j - 1] + 1,  # insertion
                matrix[i - 1][j - 1] + cost,  # substitution
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                matrix[i][j] = min(matrix[i][j], matrix[i - 2][j - 2] + 1)  # transposition

    return matrix[len_a][len_b]
