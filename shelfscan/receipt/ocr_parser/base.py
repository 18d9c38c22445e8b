"""Common interface for store-format receipt parsers."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

from shelfscan.domain.receipt import ParsedReceipt, WordAnnotation

ERROR_SEPARATOR = "; "


class ReceiptFormatParser(ABC):
    """
    One store receipt layout.

    Each subclass is a self-contained state machine over the receipt's OCR
    lines. Parsers hold no state between calls, so one instance can serve any
    number of receipts concurrently.
    """

    parser_kind: ClassVar[str]

    @abstractmethod
    def parse(self, lines: Sequence[str], annotations: Sequence[WordAnnotation] = ()) -> ParsedReceipt:
        """Parse OCR lines (and optional word annotations) into a ParsedReceipt."""


def normalize_lines(lines: Sequence[str]) -> list[str]:
    """Trim OCR lines and drop empty ones."""
    return [line.strip() for line in lines if line and line.strip()]


def join_errors(existing: str | None, error: str) -> str:
    """Append an advisory error, keeping any earlier ones."""
    return f"{existing}{ERROR_SEPARATOR}{error}" if existing else error
