from decimal import Decimal

import pytest

from shelfscan.receipt.ocr_result_parser import (
    DEFAULT_KNOWN_STORES,
    KnownStore,
    StoreNotSupportedError,
    build_known_stores,
    identify_store,
    parse_receipt,
)

_TRADER_JOES_LINES = [
    "TRADER JOE'S",
    "123 Main St",
    "Austin, TX",
    "78701",
    "Store #456",
    "10-15-24 14:32",
    "OPEN 8:00AM TO 9:00PM DAILY",
    "BANANAS",
    "$0.69",
    "Tax: $0.00",
    "Items in Transaction: 1",
]


def test_identify_store_exact_banner() -> None:
    store = identify_store(["TRADER JOE'S", "123 Main St"])

    assert store is not None
    assert store.brand_name == "Trader Joe's"
    assert store.parser_kind == "price_below"


def test_identify_store_by_alias() -> None:
    store = identify_store(["HEB", "Store #590"])

    assert store is not None
    assert store.brand_name == "H-E-B"
    assert store.parser_kind == "item_number"


def test_identify_store_tolerates_ocr_typo() -> None:
    store = identify_store(["TRADER JOSE'S"])

    assert store is not None
    assert store.brand_name == "Trader Joe's"


def test_identify_store_tolerates_dropped_letter_on_one_line_banner() -> None:
    store = identify_store(["TRADR JOE'S"])

    assert store is not None
    assert store.brand_name == "Trader Joe's"


def test_identify_store_joins_split_banner() -> None:
    store = identify_store(["CENTRAL", "MARKET", "4001 N Lamar"])

    assert store is not None
    assert store.brand_name == "Central Market"


def test_identify_store_unknown_or_empty() -> None:
    assert identify_store(["WALMART SUPERCENTER", "Store 123"]) is None
    assert identify_store([]) is None
    assert identify_store(["", "   "]) is None


def test_parse_receipt_routes_and_sets_brand() -> None:
    receipt = parse_receipt(_TRADER_JOES_LINES)

    assert receipt.store_brand == "Trader Joe's"
    assert receipt.store_name == "TRADER JOE'S"
    assert [item.price for item in receipt.items] == [Decimal("0.69")]


def test_parse_receipt_item_number_store() -> None:
    receipt = parse_receipt(["MI TIENDA", "7 TORTILLAS F 2.99"])

    assert receipt.store_brand == "Mi Tienda"
    assert receipt.items[0].item_number == 7


def test_parse_receipt_unknown_store_raises() -> None:
    with pytest.raises(StoreNotSupportedError, match="WALMART"):
        parse_receipt(["WALMART SUPERCENTER", "1 MILK 3.99"])


def test_unknown_store_error_is_value_error() -> None:
    assert issubclass(StoreNotSupportedError, ValueError)


def test_parse_receipt_with_custom_store_table() -> None:
    stores = (KnownStore("Fiesta Mart", "item_number", ("FIESTA",)),)

    receipt = parse_receipt(["FIESTA #12", "4 LIMES 0.99"], known_stores=stores)

    assert receipt.store_brand == "Fiesta Mart"
    with pytest.raises(StoreNotSupportedError):
        parse_receipt(_TRADER_JOES_LINES, known_stores=stores)


def test_build_known_stores_without_config_returns_defaults() -> None:
    assert build_known_stores(None) == DEFAULT_KNOWN_STORES
    assert build_known_stores({}) == DEFAULT_KNOWN_STORES


def test_build_known_stores_appends_and_overrides() -> None:
    stores = build_known_stores(
        {
            "stores": [
                {"brand_name": "Fiesta Mart", "parser": "item_number", "aliases": ["FIESTA"]},
                {"brand_name": "trader joe's", "parser": "item_number"},
            ]
        }
    )

    assert len(stores) == len(DEFAULT_KNOWN_STORES) + 1
    assert stores[0] == KnownStore("trader joe's", "item_number")
    assert stores[-1] == KnownStore("Fiesta Mart", "item_number", ("FIESTA",))


@pytest.mark.parametrize(
    "entry",
    [
        {"brand_name": "X", "parser": "spatial"},
        {"brand_name": "", "parser": "item_number"},
        {"brand_name": "X", "parser": "item_number", "aliases": "X"},
    ],
)
def test_build_known_stores_rejects_bad_entries(entry: dict) -> None:
    with pytest.raises(ValueError):
        build_known_stores({"stores": [entry]})
