"""Format ParsedReceipt data for review output."""

from decimal import Decimal
from typing import Any

from shelfscan.domain.receipt import BoundingBox, Item, ParsedReceipt
from shelfscan.receipt.ocr_parser.base import ERROR_SEPARATOR


def _format_date_for_output(receipt: ParsedReceipt) -> str:
    if receipt.date_is_placeholder:
        return "UNKNOWN"
    return receipt.date_purchased


def _format_items_aligned(items: tuple[Item, ...], indent: str = "  ") -> list[str]:
    """
    Format item rows with aligned names, prices and confidences.

    Args:
        items: Parsed items
        indent: Indentation prefix for each line

    Returns:
        List of formatted item lines
    """
    if not items:
        return []

    rows: list[tuple[str, str, str, str]] = []
    for item in items:
        number = f"#{item.item_number}" if item.item_number is not None else ""
        name = item.name
        if item.item_type:
            name = f"{name} [{item.item_type}]"
        if item.unit_quantity > 1:
            name = f"{name} (qty {item.unit_quantity} @ {item.unit_price:.2f})"
        rows.append((number, name, f"{item.price:.2f}", f"{item.confidence:.0%}"))

    number_width = max(len(row[0]) for row in rows)
    name_width = max(len(row[1]) for row in rows)
    price_width = max(len(row[2]) for row in rows)

    lines = []
    for number, name, price, confidence in rows:
        prefix = f"{number.rjust(number_width)}  " if number_width else ""
        lines.append(f"{indent}{prefix}{name.ljust(name_width)}  {price.rjust(price_width)}  {confidence}")
    return lines


def format_parsed_receipt(receipt: ParsedReceipt) -> str:
    """
    Format a parsed receipt as a human-readable review summary.

    Args:
        receipt: Parsed receipt data

    Returns:
        Multi-line text with a metadata header, the item table, and any
        processing error
    """
    lines = []

    lines.append("; === PARSED RECEIPT - AWAITING REVIEW ===")
    lines.append(f"; @store: {receipt.store_brand or receipt.store_name}")
    if receipt.store_number:
        lines.append(f"; @store_number: {receipt.store_number}")
    if receipt.store_address:
        lines.append(f"; @address: {receipt.store_address}")
    date_str = _format_date_for_output(receipt)
    lines.append(f"; @date: {date_str}")
    if receipt.date_is_placeholder:
        lines.append(f"; FIXME: unknown date (placeholder used: {receipt.date_purchased})")
    lines.append(f"; @total: {receipt.total_amount:.2f}")
    if receipt.tax_amount:
        lines.append(f"; @tax: {receipt.tax_amount:.2f}")
    lines.append(f"; @items: {receipt.total_items_count}")
    lines.append("")

    lines.extend(_format_items_aligned(receipt.items))

    items_total = sum((item.price * item.line_count for item in receipt.items), Decimal("0"))
    if receipt.total_amount > Decimal("0"):
        unaccounted = receipt.total_amount - receipt.tax_amount - items_total
        if unaccounted != Decimal("0"):
            lines.append(f"  ; FIXME: unaccounted amount {unaccounted:.2f}")

    if receipt.processing_error:
        lines.append("")
        for error in receipt.processing_error.split(ERROR_SEPARATOR):
            lines.append(f"; WARNING: {error}")

    lines.append("")
    return "\n".join(lines)


def _bounds_to_dict(bounds: BoundingBox | None) -> dict[str, int] | None:
    if bounds is None or bounds.is_empty:
        return None
    return {"min_x": bounds.min_x, "min_y": bounds.min_y, "max_x": bounds.max_x, "max_y": bounds.max_y}


def item_to_dict(item: Item) -> dict[str, Any]:
    """JSON-ready view of one item; money as two-decimal strings."""
    return {
        "item_number": item.item_number,
        "name": item.name,
        "price": f"{item.price:.2f}",
        "unit_quantity": item.unit_quantity,
        "line_count": item.line_count,
        "unit_price": f"{item.unit_price:.2f}" if item.unit_price is not None else None,
        "item_type": item.item_type,
        "confidence": item.confidence,
        "bounds": _bounds_to_dict(item.bounds),
        "should_draft_item": item.should_draft_item,
    }


def receipt_to_dict(receipt: ParsedReceipt) -> dict[str, Any]:
    """JSON-ready view of a parsed receipt."""
    return {
        "store_name": receipt.store_name,
        "store_brand": receipt.store_brand,
        "store_address": receipt.store_address,
        "store_number": receipt.store_number,
        "date_purchased": receipt.date_purchased,
        "date_is_placeholder": receipt.date_is_placeholder,
        "tax_amount": f"{receipt.tax_amount:.2f}",
        "total_amount": f"{receipt.total_amount:.2f}",
        "total_items_count": receipt.total_items_count,
        "processing_error": receipt.processing_error,
        "items": [item_to_dict(item) for item in receipt.items],
    }
