"""Data models for receipt parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar


@dataclass(frozen=True)
class Vertex:
    """One corner of an OCR bounding polygon, in image pixels."""

    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class WordAnnotation:
    """A single OCR-detected word/token with its quadrilateral bounds."""

    text: str
    vertices: tuple[Vertex, ...] = ()


@dataclass(frozen=True)
class BoundingBox:
    """Pixel rectangle enclosing one parsed line item."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    EMPTY: ClassVar[BoundingBox]

    @property
    def is_empty(self) -> bool:
        # The all-zero box means "no crop available", not a 1-pixel region.
        return self.min_x == 0 and self.min_y == 0 and self.max_x == 0 and self.max_y == 0

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y


BoundingBox.EMPTY = BoundingBox(0, 0, 0, 0)


@dataclass(frozen=True)
class Item:
    """A finalized receipt line item."""

    name: str
    price: Decimal
    unit_quantity: int = 1
    unit_price: Decimal | None = None
    item_number: int | None = None
    item_type: str | None = None  # store tax/type code, e.g. "F", "FW"
    confidence: float = 0.95
    bounds: BoundingBox | None = None
    line_count: int = 1  # receipt lines merged into this item, each charged `price`

    def __post_init__(self) -> None:
        # unit_price falls back to the line price when the receipt shows no unit pricing.
        if self.unit_price is None:
            object.__setattr__(self, "unit_price", self.price)

    @property
    def should_draft_item(self) -> bool:
        """Return True if this item is worth a draft entry for catalog matching."""
        if not self.price:
            return False
        return re.match(r"^-?\$?\d+\.\d{2}$", self.name.strip()) is None


class PartialItemState(Enum):
    EMPTY = "empty"
    HAS_NUMBER = "has_number"
    HAS_NAME = "has_name"
    COMPLETE = "complete"


@dataclass
class PartialItem:
    """Mutable accumulator for the item currently being scanned."""

    item_number: int | None = None
    name: str | None = None
    price: Decimal | None = None
    unit_quantity: int | None = None
    unit_price: Decimal | None = None
    item_type: str | None = None

    @property
    def state(self) -> PartialItemState:
        if self.item_number is not None and self.name and self.price is not None:
            return PartialItemState.COMPLETE
        if self.name:
            return PartialItemState.HAS_NAME
        if self.item_number is not None:
            return PartialItemState.HAS_NUMBER
        return PartialItemState.EMPTY

    @property
    def is_complete(self) -> bool:
        return self.state is PartialItemState.COMPLETE

    @property
    def awaiting_price(self) -> bool:
        """True when a name has been read but no price has been attached yet."""
        return bool(self.name) and self.price is None


@dataclass(frozen=True)
class ParsedReceipt:
    """Parsed receipt data handed to the draft-item review workflow."""

    store_name: str
    store_address: str = ""
    store_number: str = ""
    date_purchased: str = ""  # ISO 8601
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    items: tuple[Item, ...] = field(default_factory=tuple)
    # Format-specific: distinct items (item-number layout) or summed quantities (price-below layout).
    total_items_count: int = 0
    processing_error: str | None = None
    store_brand: str = ""
    date_is_placeholder: bool = False
