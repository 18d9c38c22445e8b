"""Receipt scan workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from shelfscan.receipt.ocr_helpers import VisionResponseError, transform_vision_result
from shelfscan.receipt.ocr_result_parser import KnownStore, StoreNotSupportedError, parse_receipt
from shelfscan.runtime import get_logger, load_known_stores
from shelfscan.runtime.receipt_pipeline import (
    OCRServiceUnavailable,
    call_ocr_service,
    load_ocr_json,
    save_item_previews,
    save_ocr_json,
)

if TYPE_CHECKING:
    from shelfscan.domain.receipt import ParsedReceipt, WordAnnotation

logger = get_logger(__name__)

ScanStatus = Literal[
    "file_not_found",
    "config_error",
    "ocr_unavailable",
    "invalid_ocr_payload",
    "store_not_supported",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for scanning a receipt image through the OCR service."""

    image_path: Path
    ocr_url: str
    save_previews: bool = False
    known_stores: tuple[KnownStore, ...] | None = None


@dataclass(frozen=True)
class ReceiptParseRequest:
    """Inputs for re-parsing a cached OCR JSON payload."""

    ocr_json_path: Path
    known_stores: tuple[KnownStore, ...] | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from a scan or parse workflow."""

    status: ScanStatus
    receipt: ParsedReceipt | None = None
    ocr_json_path: Path | None = None
    preview_paths: tuple[Path, ...] = ()
    error: str | None = None


def _resolve_known_stores(
    known_stores: tuple[KnownStore, ...] | None,
) -> tuple[tuple[KnownStore, ...] | None, str | None]:
    if known_stores is not None:
        return known_stores, None
    try:
        return load_known_stores(), None
    except ValueError as exc:
        return None, f"Invalid store configuration: {exc}"


def _parse_lines(
    lines: list[str],
    annotations: list[WordAnnotation],
    known_stores: tuple[KnownStore, ...],
    ocr_json_path: Path | None,
) -> ReceiptScanResult:
    try:
        receipt = parse_receipt(lines, annotations, known_stores)
    except StoreNotSupportedError as exc:
        return ReceiptScanResult(
            status="store_not_supported",
            ocr_json_path=ocr_json_path,
            error=str(exc),
        )

    if receipt.processing_error:
        logger.warning("Receipt parsed with issues: %s", receipt.processing_error)
    return ReceiptScanResult(status="parsed", receipt=receipt, ocr_json_path=ocr_json_path)


def run_receipt_parse(request: ReceiptParseRequest) -> ReceiptScanResult:
    """Run parse flow: cached OCR JSON -> lines/annotations -> store parser."""
    if not request.ocr_json_path.exists():
        return ReceiptScanResult(
            status="file_not_found",
            error=f"OCR JSON not found: {request.ocr_json_path}",
        )

    known_stores, config_error = _resolve_known_stores(request.known_stores)
    if known_stores is None:
        return ReceiptScanResult(status="config_error", error=config_error)

    try:
        payload = load_ocr_json(request.ocr_json_path)
        lines, annotations = transform_vision_result(payload)
    except ValueError as exc:  # malformed JSON or VisionResponseError
        return ReceiptScanResult(
            status="invalid_ocr_payload",
            ocr_json_path=request.ocr_json_path,
            error=str(exc),
        )

    return _parse_lines(lines, annotations, known_stores, request.ocr_json_path)


def run_receipt_scan(request: ReceiptScanRequest) -> ReceiptScanResult:
    """Run scan flow: OCR -> save raw JSON -> parse -> optional item previews."""
    if not request.image_path.exists():
        return ReceiptScanResult(
            status="file_not_found",
            error=f"Receipt file not found: {request.image_path}",
        )

    known_stores, config_error = _resolve_known_stores(request.known_stores)
    if known_stores is None:
        return ReceiptScanResult(status="config_error", error=config_error)

    try:
        raw_ocr_result, lines, annotations = call_ocr_service(request.image_path, request.ocr_url)
    except OCRServiceUnavailable as exc:
        return ReceiptScanResult(
            status="ocr_unavailable",
            error=str(exc),
        )
    except VisionResponseError as exc:
        return ReceiptScanResult(
            status="invalid_ocr_payload",
            error=str(exc),
        )

    ocr_json_path = save_ocr_json(raw_ocr_result, request.image_path)
    result = _parse_lines(lines, annotations, known_stores, ocr_json_path)

    if result.receipt is None or not request.save_previews:
        return result

    preview_paths = save_item_previews(request.image_path, result.receipt)
    return ReceiptScanResult(
        status=result.status,
        receipt=result.receipt,
        ocr_json_path=ocr_json_path,
        preview_paths=tuple(preview_paths),
    )
