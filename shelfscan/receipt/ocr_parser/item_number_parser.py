"""Item-number-led receipt layout (H-E-B family).

Items are numbered, but OCR splits them across lines in several ways:

    7 WHOLE MILK GAL F 3.99     <- number, name, type and price inline
    12 ORGANIC BANANAS FW       <- price arrives on a later line
    2 Ea. @ 1/0.29
    0.58
    15                          <- number alone, content on the next line
    HEB BREAD 2.49

Each line is classified into a LineKind and applied to the PartialItem under
construction; an item is emitted once the next item starts.
"""

import logging
import re
from collections.abc import Sequence
from decimal import Decimal
from enum import Enum

from shelfscan.domain.receipt import Item, ParsedReceipt, PartialItem, PartialItemState, WordAnnotation

from ..date_utils import placeholder_purchase_iso, purchase_datetime_iso
from .base import ReceiptFormatParser, join_errors, normalize_lines
from .common import (
    _ITEM_TYPE_ALTERNATION,
    calculate_confidence,
    extract_price,
    has_each_marker,
    is_bare_price,
    parse_unit_pricing,
    should_skip_line,
    should_stop_processing,
    split_item_type,
)

logger = logging.getLogger(f"shelfscan_local.{__name__}")

NUMBER_PREFIX_PATTERN = re.compile(r"^(\d+)(?:\s+|$)")
PURE_NUMBER_PATTERN = re.compile(r"^\d+$")
# "<name> [<type>] <price> [<type>]"
EMBEDDED_ITEM_PATTERN = re.compile(
    rf"^(?P<name>.*?\S)(?:\s+(?P<type>{_ITEM_TYPE_ALTERNATION}))?"
    rf"\s+\$?(?P<price>\d+\.\d{{2}})(?:\s+(?P<flag>{_ITEM_TYPE_ALTERNATION}))?\s*$"
)

STATED_COUNT_PATTERN = re.compile(r"ITEMS PURCHASED:\s*(\d+)")
TAX_LINE_PATTERN = re.compile(r"^(?:SALES\s+)?TAX\b", re.IGNORECASE)
TOTAL_LINE_PATTERN = re.compile(r"^Total Sale\b", re.IGNORECASE)
STORE_NUMBER_PATTERN = re.compile(r"Store\s*#\s*(\d+)", re.IGNORECASE)
DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4})\s+(\d{1,2}):(\d{2})")


class LineKind(Enum):
    STOP = "stop"
    SKIP = "skip"
    CONTINUATION = "continuation"  # quantity/price for the item being built
    BARE_NUMBER = "bare_number"  # item number alone, content on the next line
    NUMBERED_ITEM = "numbered_item"  # item number followed by content
    OTHER = "other"


def classify_line(line: str, current_item: PartialItem | None = None) -> LineKind:
    """Classify one OCR line, in priority order, for the item-number state machine."""
    trimmed = line.strip()
    if should_stop_processing(trimmed):
        return LineKind.STOP
    if should_skip_line(trimmed, current_item):
        return LineKind.SKIP
    if has_each_marker(trimmed):
        return LineKind.CONTINUATION
    if NUMBER_PREFIX_PATTERN.match(trimmed):
        if PURE_NUMBER_PATTERN.match(trimmed):
            return LineKind.BARE_NUMBER
        return LineKind.NUMBERED_ITEM
    return LineKind.OTHER


def apply_item_text(item: PartialItem, text: str) -> None:
    """Fill name/type/price from "<name> [<type>] <price>" or a bare name."""
    text = text.strip()
    match = EMBEDDED_ITEM_PATTERN.match(text)
    if match:
        item.name = match.group("name").strip()
        item.item_type = match.group("type") or match.group("flag")
        item.price = Decimal(match.group("price"))
        return
    name, item_type = split_item_type(text)
    item.name = name or None
    item.item_type = item_type


def start_numbered_item(line: str) -> PartialItem | None:
    """Start a PartialItem from "<number> <content>", or None if the line has no number prefix."""
    trimmed = line.strip()
    match = NUMBER_PREFIX_PATTERN.match(trimmed)
    if not match:
        return None
    item = PartialItem(item_number=int(match.group(1)))
    apply_item_text(item, trimmed[match.end() :])
    return item


def finalize(item: PartialItem) -> Item:
    """Convert a PartialItem into an Item, applying defaults and scoring confidence."""
    name = item.name or ""
    price = item.price if item.price is not None else Decimal("0")
    return Item(
        name=name,
        price=price,
        unit_quantity=item.unit_quantity or 1,
        unit_price=item.unit_price,
        item_number=item.item_number,
        item_type=item.item_type,
        confidence=calculate_confidence(name, price, item.unit_quantity, item.unit_price),
    )


def dedupe_item_numbers(items: Sequence[Item]) -> tuple[list[Item], str | None]:
    """
    Sort items by item number and drop later duplicates.

    Returns:
        (unique items, advisory error or None)
    """
    seen: set[int] = set()
    unique: list[Item] = []
    error: str | None = None
    for item in sorted(items, key=lambda it: it.item_number or 0):
        number = item.item_number or 0
        if number in seen:
            logger.warning("Duplicate item number %d: dropping %r", number, item.name)
            error = join_errors(error, f"Duplicate item number {number} found, keeping first occurrence")
            continue
        seen.add(number)
        unique.append(item)
    return unique, error


class ItemNumberParser(ReceiptFormatParser):
    """State-machine parser for receipts whose items are led by an item number."""

    parser_kind = "item_number"

    def parse(self, lines: Sequence[str], annotations: Sequence[WordAnnotation] = ()) -> ParsedReceipt:
        lines = normalize_lines(lines)
        items = self._scan_items(lines)

        unique, processing_error = dedupe_item_numbers(items)
        total_items_count = len(unique)
        stated_count = _extract_stated_item_count(lines)
        if stated_count and total_items_count != stated_count:
            error = f"Parsed item count ({total_items_count}) does not match receipt total ({stated_count})"
            logger.warning("%s", error)
            processing_error = join_errors(processing_error, error)
        elif stated_count:
            logger.info("Parsed item count matches receipt total (%d)", stated_count)

        date_purchased = _extract_date(lines)
        date_is_placeholder = date_purchased is None
        if date_purchased is None:
            date_purchased = placeholder_purchase_iso()

        return ParsedReceipt(
            store_name=lines[0] if lines else "",
            store_number=_extract_store_number(lines),
            date_purchased=date_purchased,
            tax_amount=_extract_labeled_amount(lines, TAX_LINE_PATTERN),
            total_amount=_extract_labeled_amount(lines, TOTAL_LINE_PATTERN),
            items=tuple(unique),
            total_items_count=total_items_count,
            processing_error=processing_error,
            date_is_placeholder=date_is_placeholder,
        )

    def _scan_items(self, lines: Sequence[str]) -> list[Item]:
        items: list[Item] = []
        current: PartialItem | None = None

        i = 0
        while i < len(lines):
            line = lines[i]
            kind = classify_line(line, current)

            if kind is LineKind.STOP:
                break
            if kind is LineKind.CONTINUATION:
                self._apply_continuation(current, line)
            elif kind is LineKind.BARE_NUMBER:
                self._emit(current, items)
                current = PartialItem(item_number=int(line))
                if i + 1 < len(lines) and self._is_deferred_content(lines[i + 1], current):
                    apply_item_text(current, lines[i + 1])
                    i += 1
            elif kind is LineKind.NUMBERED_ITEM:
                self._emit(current, items)
                current = start_numbered_item(line)
            elif kind is LineKind.OTHER:
                self._apply_other(current, line)
            i += 1

        self._emit(current, items)
        return items

    @staticmethod
    def _is_deferred_content(line: str, current: PartialItem) -> bool:
        # Lines that start an item or carry quantity/price keep their own meaning.
        return classify_line(line, current) is LineKind.OTHER and not is_bare_price(line)

    @staticmethod
    def _apply_continuation(current: PartialItem | None, line: str) -> None:
        if current is None:
            return
        unit_pricing = parse_unit_pricing(line)
        if unit_pricing is not None:
            current.unit_quantity, current.unit_price = unit_pricing
        if current.awaiting_price:
            price = extract_price(line)
            if price is not None:
                current.price = price

    @staticmethod
    def _apply_other(current: PartialItem | None, line: str) -> None:
        if current is None:
            return
        if current.state is PartialItemState.HAS_NUMBER:
            # Number was read alone and its content line got separated from it.
            if not is_bare_price(line):
                apply_item_text(current, line)
            return
        if current.awaiting_price:
            price = extract_price(line)
            if price is not None:
                current.price = price

    @staticmethod
    def _emit(current: PartialItem | None, items: list[Item]) -> None:
        if current is None:
            return
        if current.is_complete:
            items.append(finalize(current))
        elif current.state is not PartialItemState.EMPTY:
            logger.debug("Dropping incomplete item: %r", current)


def _extract_stated_item_count(lines: Sequence[str]) -> int:
    for line in lines:
        match = STATED_COUNT_PATTERN.search(line)
        if match:
            return int(match.group(1))
    return 0


def _extract_labeled_amount(lines: Sequence[str], label: re.Pattern[str]) -> Decimal:
    """Amount printed on a summary label's line, or alone on the line below it."""
    for i, line in enumerate(lines):
        if not label.search(line):
            continue
        amount = extract_price(line)
        if amount is not None:
            return amount
        if i + 1 < len(lines) and is_bare_price(lines[i + 1]):
            amount = extract_price(lines[i + 1])
            if amount is not None:
                return amount
    return Decimal("0")


def _extract_store_number(lines: Sequence[str]) -> str:
    for line in lines:
        match = STORE_NUMBER_PATTERN.search(line)
        if match:
            return f"#{match.group(1)}"
    return ""


def _extract_date(lines: Sequence[str]) -> str | None:
    for line in lines:
        match = DATE_PATTERN.search(line)
        if match:
            month, day, year, hours, minutes = (int(group) for group in match.groups())
            return purchase_datetime_iso(year, month, day, hours, minutes)
    return None
