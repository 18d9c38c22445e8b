"""Receipt workflows."""

from shelfscan.application.receipts.scan import (
    ReceiptParseRequest,
    ReceiptScanRequest,
    ReceiptScanResult,
    run_receipt_parse,
    run_receipt_scan,
)

__all__ = [
    "ReceiptParseRequest",
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_receipt_parse",
    "run_receipt_scan",
]
