import json
from decimal import Decimal

from shelfscan.domain.receipt import BoundingBox, Item, ParsedReceipt
from shelfscan.receipt.formatter import format_parsed_receipt, receipt_to_dict


def _receipt(**overrides: object) -> ParsedReceipt:
    fields: dict = {
        "store_name": "TRADER JOE'S",
        "store_brand": "Trader Joe's",
        "store_address": "123 Main St, Austin, TX, 78701",
        "store_number": "#456",
        "date_purchased": "2024-10-15T14:32:00",
        "tax_amount": Decimal("0.05"),
        "total_amount": Decimal("4.23"),
        "items": (
            Item(name="BANANAS", price=Decimal("0.69"), unit_quantity=3, unit_price=Decimal("0.23"), confidence=0.97),
            Item(name="MILK", price=Decimal("3.49"), bounds=BoundingBox(5, 95, 255, 185)),
        ),
        "total_items_count": 4,
    }
    fields.update(overrides)
    return ParsedReceipt(**fields)


def test_format_parsed_receipt_header_and_items() -> None:
    text = format_parsed_receipt(_receipt())

    assert "; @store: Trader Joe's" in text
    assert "; @store_number: #456" in text
    assert "; @date: 2024-10-15T14:32:00" in text
    assert "; @total: 4.23" in text
    assert "; @tax: 0.05" in text
    assert "BANANAS (qty 3 @ 0.23)" in text
    assert "97%" in text
    assert "FIXME" not in text


def test_format_parsed_receipt_flags_unknown_date_and_errors() -> None:
    receipt = _receipt(
        date_purchased="2026-10-01T00:00:00",
        date_is_placeholder=True,
        total_amount=Decimal("10.00"),
        processing_error="Duplicate item number 3 found, keeping first occurrence; Parsed item count (1) does not match receipt total (2)",
    )

    text = format_parsed_receipt(receipt)

    assert "; @date: UNKNOWN" in text
    assert "placeholder used: 2026-10-01T00:00:00" in text
    assert "FIXME: unaccounted amount 5.77" in text
    assert "; WARNING: Duplicate item number 3 found" in text
    assert text.count("; WARNING:") == 2


def test_receipt_to_dict_is_json_ready() -> None:
    data = receipt_to_dict(_receipt())

    encoded = json.loads(json.dumps(data))
    assert encoded["store_brand"] == "Trader Joe's"
    assert encoded["tax_amount"] == "0.05"
    assert encoded["items"][0]["price"] == "0.69"
    assert encoded["items"][0]["unit_price"] == "0.23"
    assert encoded["items"][0]["bounds"] is None
    assert encoded["items"][1]["bounds"] == {"min_x": 5, "min_y": 95, "max_x": 255, "max_y": 185}
    assert encoded["items"][1]["should_draft_item"] is True


def test_merged_lines_count_toward_items_total() -> None:
    receipt = _receipt(
        tax_amount=Decimal("0"),
        total_amount=Decimal("1.38"),
        items=(Item(name="BANANAS", price=Decimal("0.69"), unit_quantity=2, line_count=2),),
    )

    text = format_parsed_receipt(receipt)

    assert "unaccounted" not in text
    assert receipt_to_dict(receipt)["items"][0]["line_count"] == 2
