#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence

from shelfscan.runtime import configure_logging


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_legacy_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Grocery receipt OCR parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <ocr.json>           Parse a cached OCR JSON payload
  scan <image>               OCR a receipt image, then parse it
  stores                     List recognized stores

Environment:
  SHELFSCAN_HOME       data root (config/stores.toml, receipts/)
  SHELFSCAN_LOG_LEVEL  DEBUG, INFO, WARNING or ERROR
  OCR_SERVICE_URL      OCR service base URL for scan
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a cached OCR JSON payload")
    parse_parser.add_argument("ocr_json", help="Path to OCR JSON (textAnnotations payload)")
    parse_parser.add_argument("--json", action="store_true", help="Print the parsed receipt as JSON")
    parse_parser.add_argument(
        "--catalog", default=None, help="File of known receipt identifiers (one per line) to suggest matches from"
    )

    # scan command
    scan_parser = subparsers.add_parser("scan", help="OCR a receipt image, then parse it")
    scan_parser.add_argument("image", help="Path to receipt image")
    scan_parser.add_argument(
        "--ocr-url", default=None, help="OCR service URL (default: $OCR_SERVICE_URL or http://localhost:8001)"
    )
    scan_parser.add_argument("--previews", action="store_true", help="Save cropped item previews to receipts/previews/")
    scan_parser.add_argument("--json", action="store_true", help="Print the parsed receipt as JSON")

    # stores command
    subparsers.add_parser("stores", help="List recognized stores")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging()

    if args.command == "parse":
        from shelfscan.cli.receipt import cmd_parse

        return _run_legacy_command(cmd_parse, args)
    elif args.command == "scan":
        from shelfscan.cli.receipt import cmd_scan

        return _run_legacy_command(cmd_scan, args)
    elif args.command == "stores":
        from shelfscan.cli.receipt import cmd_stores

        return _run_legacy_command(cmd_stores, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
