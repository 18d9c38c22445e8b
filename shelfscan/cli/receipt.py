"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
from pathlib import Path

from shelfscan.application.receipts.scan import ReceiptScanResult
from shelfscan.domain.receipt import ParsedReceipt
from shelfscan.runtime import get_logger

logger = get_logger(__name__)


def _report_failure(result: ReceiptScanResult) -> None:
    """Print a failed workflow result and exit 1."""
    logger.error("%s", result.error)
    if result.status == "ocr_unavailable":
        print(f"OCR service unavailable: {result.error}")
        print("Make sure the OCR service is running, or set OCR_SERVICE_URL / --ocr-url.")
    elif result.status == "store_not_supported":
        print(f"Error: {result.error}")
        print("Run 'shelfscan stores' to see recognized stores, or add one to config/stores.toml.")
    else:
        print(f"Error: {result.error}")
    sys.exit(1)


def _print_receipt(receipt: ParsedReceipt, as_json: bool) -> None:
    from shelfscan.receipt.formatter import format_parsed_receipt, receipt_to_dict

    if as_json:
        print(json.dumps(receipt_to_dict(receipt), indent=2))
        return

    print("\n" + "=" * 60)
    print("PARSED RECEIPT")
    print("=" * 60)
    print(format_parsed_receipt(receipt))
    print("=" * 60)


def _print_catalog_suggestions(receipt: ParsedReceipt, catalog_path: Path) -> None:
    from shelfscan.receipt.matcher import format_suggestions_for_display, suggest_receipt_identifiers
    from shelfscan.runtime.catalog import load_receipt_identifiers

    try:
        identifiers = load_receipt_identifiers(catalog_path)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\nCatalog suggestions:")
    for item in receipt.items:
        if not item.should_draft_item:
            continue
        matches = suggest_receipt_identifiers(item.name, identifiers)
        print(f"  {format_suggestions_for_display(item.name, matches)}")


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse a cached OCR JSON payload and print the receipt."""
    from shelfscan.application.receipts.scan import ReceiptParseRequest, run_receipt_parse

    result = run_receipt_parse(ReceiptParseRequest(ocr_json_path=Path(args.ocr_json)))
    if result.status != "parsed" or result.receipt is None:
        _report_failure(result)
        return

    _print_receipt(result.receipt, args.json)
    if args.catalog:
        _print_catalog_suggestions(result.receipt, Path(args.catalog))


def cmd_scan(args: argparse.Namespace) -> None:
    """Send a receipt image to the OCR service, then parse and print it."""
    from shelfscan.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
    from shelfscan.runtime.receipt_pipeline import resolve_ocr_url

    result = run_receipt_scan(
        ReceiptScanRequest(
            image_path=Path(args.image),
            ocr_url=resolve_ocr_url(args.ocr_url),
            save_previews=args.previews,
        )
    )
    if result.status != "parsed" or result.receipt is None:
        _report_failure(result)
        return

    _print_receipt(result.receipt, args.json)
    if args.json:
        return

    if result.ocr_json_path is not None:
        print(f"\nSaved OCR JSON to: {result.ocr_json_path}")
    if result.preview_paths:
        print(f"Saved {len(result.preview_paths)} item preview(s) to: {result.preview_paths[0].parent}")


def cmd_stores(args: argparse.Namespace) -> None:
    """List the stores the parser recognizes."""
    from shelfscan.runtime import load_known_stores

    try:
        stores = load_known_stores()
    except ValueError as e:
        print(f"Error: invalid store configuration: {e}")
        sys.exit(1)

    print(f"\nSupported stores ({len(stores)}):")
    print("-" * 60)
    for store in stores:
        aliases = ", ".join(store.aliases)
        alias_str = f"  (aliases: {aliases})" if aliases else ""
        print(f"  {store.brand_name:<24} {store.parser_kind:<12}{alias_str}")
    print("-" * 60)


def main() -> int:
    """Compatibility entrypoint; delegates to the unified CLI parser."""
    from shelfscan.cli.main import main as unified_main

    return unified_main()


if __name__ == "__main__":
    raise SystemExit(main())
