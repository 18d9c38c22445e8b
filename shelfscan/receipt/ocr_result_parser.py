"""Identify the store on a receipt and route it to that store's format parser."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from shelfscan.domain.receipt import ParsedReceipt, WordAnnotation

from .ocr_parser.base import ReceiptFormatParser, normalize_lines
from .ocr_parser.common import damerau_levenshtein
from .ocr_parser.item_number_parser import ItemNumberParser
from .ocr_parser.price_below_parser import PriceBelowParser

logger = logging.getLogger(f"shelfscan_local.{__name__}")

# One edit allowed per this many characters of a store alias
ALIAS_CHARS_PER_EDIT = 5


class StoreNotSupportedError(ValueError):
    """Raised when the receipt header matches no known store."""


@dataclass(frozen=True)
class KnownStore:
    """A store brand the dispatcher can recognize, and the layout its receipts use."""

    brand_name: str
    parser_kind: str
    aliases: tuple[str, ...] = ()

    @property
    def match_keys(self) -> tuple[str, ...]:
        keys = [normalize_store_text(alias) for alias in (self.brand_name, *self.aliases)]
        return tuple(dict.fromkeys(key for key in keys if key))


PARSERS: dict[str, ReceiptFormatParser] = {
    parser.parser_kind: parser for parser in (PriceBelowParser(), ItemNumberParser())
}

DEFAULT_KNOWN_STORES: tuple[KnownStore, ...] = (
    KnownStore("Trader Joe's", PriceBelowParser.parser_kind),
    KnownStore("H-E-B", ItemNumberParser.parser_kind, ("HEB",)),
    KnownStore("Central Market", ItemNumberParser.parser_kind),
    KnownStore("Mi Tienda", ItemNumberParser.parser_kind),
    KnownStore("Joe V's Smart Shop", ItemNumberParser.parser_kind, ("JOE VS",)),
)


def normalize_store_text(text: str) -> str:
    """Upper-case and keep only letters and digits."""
    return re.sub(r"[^A-Z0-9]", "", text.upper())


def build_known_stores(
    config: Mapping[str, Any] | None,
    defaults: Iterable[KnownStore] = DEFAULT_KNOWN_STORES,
) -> tuple[KnownStore, ...]:
    """
    Merge ``[[stores]]`` config entries over the built-in store table.

    An entry whose brand_name matches a built-in store (case-insensitive)
    replaces it; other entries are appended.

    Raises:
        ValueError: if an entry is malformed or names an unknown parser.
    """
    stores: dict[str, KnownStore] = {normalize_store_text(store.brand_name): store for store in defaults}
    if not config:
        return tuple(stores.values())

    entries = config.get("stores", [])
    if not isinstance(entries, list):
        raise ValueError("'stores' must be a list of tables")

    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ValueError(f"stores[{index}] must be a table")
        brand_name = entry.get("brand_name")
        if not isinstance(brand_name, str) or not brand_name.strip():
            raise ValueError(f"stores[{index}].brand_name must be a non-empty string")
        parser_kind = entry.get("parser")
        if parser_kind not in PARSERS:
            raise ValueError(
                f"stores[{index}].parser must be one of {sorted(PARSERS)}, got {parser_kind!r}"
            )
        aliases = entry.get("aliases", [])
        if not isinstance(aliases, list) or not all(isinstance(alias, str) for alias in aliases):
            raise ValueError(f"stores[{index}].aliases must be a list of strings")

        store = KnownStore(brand_name.strip(), parser_kind, tuple(aliases))
        stores[normalize_store_text(store.brand_name)] = store

    return tuple(stores.values())


def _key_matches(candidate: str, key: str) -> bool:
    if candidate.startswith(key):
        return True
    tolerance = len(key) // ALIAS_CHARS_PER_EDIT
    # A candidate shorter than the key is compared whole; dropped letters count as edits.
    return tolerance > 0 and damerau_levenshtein(candidate[: len(key)], key) <= tolerance


def identify_store(
    lines: Sequence[str],
    known_stores: Iterable[KnownStore] = DEFAULT_KNOWN_STORES,
) -> KnownStore | None:
    """
    Recognize the store from the receipt header.

    Line 0 is tried alone and joined with line 1, since OCR sometimes splits
    the store banner across two lines.
    """
    lines = normalize_lines(lines)
    if not lines:
        return None
    stores = tuple(known_stores)

    candidates = [normalize_store_text(lines[0])]
    if len(lines) > 1:
        candidates.append(normalize_store_text(lines[0] + lines[1]))

    for candidate in candidates:
        if not candidate:
            continue
        for store in stores:
            if any(_key_matches(candidate, key) for key in store.match_keys):
                return store
    return None


def parse_receipt(
    lines: Sequence[str],
    annotations: Sequence[WordAnnotation] = (),
    known_stores: Iterable[KnownStore] = DEFAULT_KNOWN_STORES,
) -> ParsedReceipt:
    """
    Parse receipt OCR lines with the parser for the detected store.

    Args:
        lines: OCR text lines in reading order
        annotations: Word annotations; entry 0 is the whole-text blob
        known_stores: Stores to recognize (built-ins merged with config)

    Returns:
        ParsedReceipt with store_brand set to the recognized brand

    Raises:
        StoreNotSupportedError: if no known store matches the header
    """
    store = identify_store(lines, known_stores)
    if store is None:
        header = lines[0].strip() if lines else ""
        raise StoreNotSupportedError(f"Store not supported: {header!r}")

    parser = PARSERS[store.parser_kind]
    logger.debug("Recognized %s, parsing as %s", store.brand_name, store.parser_kind)
    receipt = parser.parse(lines, annotations)
    return replace(receipt, store_brand=store.brand_name)
