from pathlib import Path

import pytest

from shelfscan.receipt.ocr_result_parser import DEFAULT_KNOWN_STORES, KnownStore
from shelfscan.runtime import get_paths, load_known_stores


def test_missing_config_falls_back_to_builtin_stores() -> None:
    assert load_known_stores() == DEFAULT_KNOWN_STORES


def test_default_config_path_is_under_shelfscan_home(shelfscan_home: Path) -> None:
    assert get_paths().store_rules == shelfscan_home.resolve() / "config" / "stores.toml"


def test_config_entries_are_merged(shelfscan_home: Path) -> None:
    config_path = shelfscan_home / "config" / "stores.toml"
    config_path.parent.mkdir(parents=True)
    config_path.write_text(
        """
[[stores]]
brand_name = "Fiesta Mart"
parser = "item_number"
aliases = ["FIESTA"]
""",
        encoding="utf-8",
    )

    stores = load_known_stores()

    assert stores[-1] == KnownStore("Fiesta Mart", "item_number", ("FIESTA",))
    assert stores[: len(DEFAULT_KNOWN_STORES)] == DEFAULT_KNOWN_STORES


def test_explicit_config_path(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.toml"
    config_path.write_text('[[stores]]\nbrand_name = "H-E-B"\nparser = "price_below"\n', encoding="utf-8")

    stores = load_known_stores(str(config_path))

    heb = next(store for store in stores if store.brand_name == "H-E-B")
    assert heb.parser_kind == "price_below"
    assert heb.aliases == ()


def test_invalid_entry_names_the_file(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.toml"
    config_path.write_text('[[stores]]\nbrand_name = "X"\nparser = "nope"\n', encoding="utf-8")

    with pytest.raises(ValueError, match="bad.toml"):
        load_known_stores(str(config_path))
