from decimal import Decimal

from shelfscan.domain.receipt import PartialItem
from shelfscan.receipt.ocr_parser.common import (
    calculate_confidence,
    damerau_levenshtein,
    extract_price,
    is_bare_price,
    parse_unit_pricing,
    round_confidence,
    should_skip_line,
    should_stop_processing,
    split_item_type,
)


def test_extract_price_reads_trailing_decimal() -> None:
    assert extract_price("BANANAS 0.69") == Decimal("0.69")
    assert extract_price("$12.49") == Decimal("12.49")


def test_extract_price_accepts_unit_suffix_and_type_flag() -> None:
    assert extract_price("TOMATOES 1.99/lb") == Decimal("1.99")
    assert extract_price("WHOLE MILK 3.99 F") == Decimal("3.99")


def test_extract_price_each_line_returns_extended_price() -> None:
    assert extract_price("2 Ea. @ 1/1.62") == Decimal("3.24")
    assert extract_price("3 Ea. @ 2/1.00") == Decimal("1.50")


def test_extract_price_prefers_orig_marker() -> None:
    assert extract_price("orig $3.99") == Decimal("3.99")
    assert extract_price("AVOCADO 2.50 orig") == Decimal("2.50")


def test_extract_price_ignores_negative_amounts() -> None:
    assert extract_price("-1.00") is None
    assert extract_price("COUPON -$0.50") is None


def test_extract_price_without_price() -> None:
    assert extract_price("THANK YOU FOR SHOPPING") is None


def test_parse_unit_pricing() -> None:
    assert parse_unit_pricing("2 Ea. @ 1/1.62") == (2, Decimal("1.62"))
    assert parse_unit_pricing("BANANAS 0.69") is None


def test_bare_price_and_stop_rows() -> None:
    assert is_bare_price("3.99")
    assert is_bare_price("3.99 F")
    assert not is_bare_price("MILK 3.99")
    assert should_stop_processing("**********")
    assert should_stop_processing("ITEMS PURCHASED: 4")
    assert not should_stop_processing("*** 3")


def test_should_skip_noise_rows() -> None:
    assert should_skip_line("DIGITAL COUPON")
    assert should_skip_line("YOU SAVED $1.00")
    assert should_skip_line("Total Sale")
    assert should_skip_line("SUBTOTAL 12.00")
    assert should_skip_line("----------")
    assert not should_skip_line("BANANAS")


def test_should_skip_keeps_price_line_for_item_awaiting_price() -> None:
    waiting = PartialItem(item_number=4, name="HEB BREAD")

    assert should_skip_line("DEBIT 2.49")
    assert not should_skip_line("DEBIT 2.49", waiting)


def test_split_item_type() -> None:
    assert split_item_type("ORGANIC BANANAS FW") == ("ORGANIC BANANAS", "FW")
    assert split_item_type("HEB BREAD") == ("HEB BREAD", None)


def test_calculate_confidence_penalties_compound() -> None:
    assert calculate_confidence("WHOLE MILK", Decimal("3.99")) == 0.95
    assert calculate_confidence("WHOLE MILK", Decimal("0")) == 0.67
    assert calculate_confidence("AB", Decimal("3.99")) == 0.76
    assert calculate_confidence("WHOLE MILK", Decimal("3.00"), 2, Decimal("1.00")) == 0.67
    assert calculate_confidence("AB", Decimal("150.00"), 2, Decimal("1.00")) == 0.37


def test_calculate_confidence_accepts_consistent_unit_pricing() -> None:
    assert calculate_confidence("ORGANIC BANANAS", Decimal("0.58"), 2, Decimal("0.29")) == 0.95


def test_round_confidence_is_idempotent_and_bounded() -> None:
    for value in (0.0, 0.475, 0.665, 0.97468, 1.2, -0.3):
        once = round_confidence(value)
        assert round_confidence(once) == once
        assert 0.0 <= once <= 1.0
    assert round_confidence(0.475) == 0.48


def test_damerau_levenshtein() -> None:
    assert damerau_levenshtein("", "abc") == 3
    assert damerau_levenshtein("abc", "") == 3
    assert damerau_levenshtein("abc", "abc") == 0
    assert damerau_levenshtein("abc", "acb") == 1
    assert damerau_levenshtein("kitten", "sitting") == 3
