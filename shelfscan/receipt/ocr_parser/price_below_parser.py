"""Price-below-name receipt layout (Trader Joe's style).

Every item occupies two or three consecutive OCR lines:

    BANANAS             <- item name
    $0.69               <- line price
    3 @ $0.23           <- optional quantity line

The header has a fixed shape (store name, three address lines, store number,
date) and the item section ends at the "Tax:" summary line.
"""

import logging
import math
import re
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from shelfscan.domain.receipt import Item, ParsedReceipt, WordAnnotation

from ..date_utils import placeholder_purchase_iso, purchase_datetime_iso
from .base import ReceiptFormatParser, join_errors, normalize_lines
from .bounds import find_item_bounds
from .common import BASE_CONFIDENCE, CENTS, PRICE_TOLERANCE, round_confidence

logger = logging.getLogger(f"shelfscan_local.{__name__}")

# Fixed header layout
ADDRESS_FIRST_LINE = 1
ADDRESS_LAST_LINE = 3
STORE_NUMBER_LINE = 4
FIRST_ITEM_LINE = 7

DOLLAR_PRICE_PATTERN = re.compile(r"\$(\d+\.\d{2})")
QUANTITY_PATTERN = re.compile(r"(\d+) @ \$(\d+\.?\d*)")
STORE_NUMBER_PATTERN = re.compile(r"Store #(\d+)")
DATE_PATTERN = re.compile(r"(\d{2})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2})")
STATED_COUNT_PATTERN = re.compile(r"Items in Transaction:\s*(\d+)")
TAX_MARKER = "Tax:"

# Lines that can never be an item name
NON_PRODUCT_NAME_PATTERNS = [
    re.compile(r"^\$\d+\.\d{2}$"),  # bare dollar amount
    re.compile(r"^\d+$"),  # bare integer
    re.compile(r"\*\*\*"),
    re.compile(r"gift card", re.IGNORECASE),
    re.compile(r"^SUB\s*TOTAL\b", re.IGNORECASE),
]


class ItemMatch(NamedTuple):
    item: Item
    lines_consumed: int


def _is_non_product_name(name: str) -> bool:
    return any(pattern.search(name) for pattern in NON_PRODUCT_NAME_PATTERNS)


def parse_item(
    lines: Sequence[str],
    annotations: Sequence[WordAnnotation],
    index: int,
) -> ItemMatch | None:
    """
    Try to read one item starting at ``lines[index]``.

    Returns:
        The item and how many lines it used (2, or 3 with a quantity line),
        or None if no item starts here.
    """
    if index + 1 >= len(lines):
        return None

    name = lines[index]
    if _is_non_product_name(name):
        return None

    price_match = DOLLAR_PRICE_PATTERN.search(lines[index + 1])
    if not price_match:
        return None

    price = Decimal(price_match.group(1))
    fragments = [name, price_match.group(0)]
    unit_quantity = 1
    unit_price: Decimal | None = None
    confidence = BASE_CONFIDENCE
    lines_consumed = 2

    if index + 2 < len(lines):
        quantity_match = QUANTITY_PATTERN.search(lines[index + 2])
        if quantity_match:
            fragments.append(quantity_match.group(0))
            unit_quantity = int(quantity_match.group(1))
            unit_price = Decimal(quantity_match.group(2))
            lines_consumed = 3

            calculated = (unit_quantity * unit_price).quantize(CENTS, rounding=ROUND_HALF_UP)
            if abs(calculated - price) > PRICE_TOLERANCE:
                confidence = round_confidence(confidence / 2)
            else:
                # Quantity and price agree: reward the item.
                confidence = round_confidence(math.sqrt(confidence))

    if "?" in name or "..." in name or "   " in name:
        confidence = round_confidence(confidence * 0.8)
    if price == 0 or unit_quantity == 0:
        confidence = round_confidence(confidence * 0.5)

    item = Item(
        name=name,
        price=price,
        unit_quantity=max(unit_quantity, 1),
        unit_price=unit_price,
        confidence=confidence,
        bounds=find_item_bounds(annotations, fragments),
    )
    return ItemMatch(item=item, lines_consumed=lines_consumed)


def merge_duplicate_items(items: Sequence[Item]) -> list[Item]:
    """
    Merge items with the same (name, price) into one line.

    Quantities and line counts are summed and the lowest confidence is kept. Output order
    follows each key's first occurrence.
    """
    merged: dict[tuple[str, Decimal], Item] = {}
    for item in items:
        key = (item.name, item.price)
        existing = merged.get(key)
        if existing is None:
            merged[key] = item
            continue
        merged[key] = Item(
            name=existing.name,
            price=existing.price,
            unit_quantity=existing.unit_quantity + item.unit_quantity,
            unit_price=existing.unit_price,
            item_number=existing.item_number,
            item_type=existing.item_type,
            confidence=min(existing.confidence, item.confidence),
            bounds=existing.bounds,
            line_count=existing.line_count + item.line_count,
        )
    return list(merged.values())


def _extract_store_number(line: str) -> str:
    match = STORE_NUMBER_PATTERN.search(line)
    return f"#{match.group(1)}" if match else ""


def _extract_date(lines: Sequence[str]) -> str | None:
    for line in lines:
        match = DATE_PATTERN.search(line)
        if match:
            month, day, year, hours, minutes = (int(group) for group in match.groups())
            return purchase_datetime_iso(year, month, day, hours, minutes)
    return None


def _extract_dollar_amount(line: str) -> Decimal:
    match = DOLLAR_PRICE_PATTERN.search(line)
    return Decimal(match.group(1)) if match else Decimal("0")


def _extract_total_amount(lines: Sequence[str]) -> Decimal:
    for line in reversed(lines):
        match = DOLLAR_PRICE_PATTERN.search(line)
        if match:
            return Decimal(match.group(1))
    return Decimal("0")


def _extract_stated_item_count(lines: Sequence[str]) -> int:
    for line in lines:
        match = STATED_COUNT_PATTERN.search(line)
        if match:
            return int(match.group(1))
    return 0


class PriceBelowParser(ReceiptFormatParser):
    """Sequential parser for receipts that print each price below its item name."""

    parser_kind = "price_below"

    def parse(self, lines: Sequence[str], annotations: Sequence[WordAnnotation] = ()) -> ParsedReceipt:
        lines = normalize_lines(lines)

        store_name = lines[0] if lines else ""
        store_address = ", ".join(lines[ADDRESS_FIRST_LINE : ADDRESS_LAST_LINE + 1])
        store_number = _extract_store_number(lines[STORE_NUMBER_LINE]) if len(lines) > STORE_NUMBER_LINE else ""
        date_purchased = _extract_date(lines)
        date_is_placeholder = date_purchased is None
        if date_purchased is None:
            date_purchased = placeholder_purchase_iso()

        items: list[Item] = []
        tax_amount = Decimal("0")
        i = FIRST_ITEM_LINE
        while i < len(lines):
            if TAX_MARKER in lines[i]:
                tax_amount = _extract_dollar_amount(lines[i])
                break
            match = parse_item(lines, annotations, i)
            if match:
                items.append(match.item)
                i += match.lines_consumed
            else:
                i += 1

        merged = merge_duplicate_items(items)
        total_items_count = sum(item.unit_quantity for item in merged)
        stated_count = _extract_stated_item_count(lines)

        processing_error: str | None = None
        if total_items_count == stated_count:
            logger.info("Parsed item count matches the stated item count (%d)", stated_count)
        else:
            error = (
                f"Parsed item count ({total_items_count}) does not match "
                f"the stated item count on the receipt ({stated_count})"
            )
            logger.warning("%s", error)
            processing_error = join_errors(processing_error, error)

        return ParsedReceipt(
            store_name=store_name,
            store_address=store_address,
            store_number=store_number,
            date_purchased=date_purchased,
            tax_amount=tax_amount,
            total_amount=_extract_total_amount(lines),
            items=tuple(merged),
            total_items_count=total_items_count,
            processing_error=processing_error,
            date_is_placeholder=date_is_placeholder,
        )
