"""Store-format receipt parsers and the line utilities they share."""

from .base import ReceiptFormatParser
from .bounds import find_item_bounds
from .common import (
    calculate_confidence,
    damerau_levenshtein,
    extract_price,
    round_confidence,
    should_skip_line,
)
from .item_number_parser import ItemNumberParser, LineKind, classify_line, finalize
from .price_below_parser import PriceBelowParser, merge_duplicate_items, parse_item

__all__ = [
    "ItemNumberParser",
    "LineKind",
    "PriceBelowParser",
    "ReceiptFormatParser",
    "calculate_confidence",
    "classify_line",
    "damerau_levenshtein",
    "extract_price",
    "finalize",
    "find_item_bounds",
    "merge_duplicate_items",
    "parse_item",
    "round_confidence",
    "should_skip_line",
]
