"""Core domain models for shelfscan.

This module provides the data models shared by the parsers and the outer shell:
- ParsedReceipt, Item: parse results handed to the review workflow
- PartialItem: the in-progress item accumulator used while scanning lines
- WordAnnotation, Vertex, BoundingBox: OCR word geometry

Usage:
    from shelfscan.domain import ParsedReceipt, Item
"""

from shelfscan.domain.receipt import (
    BoundingBox,
    Item,
    ParsedReceipt,
    PartialItem,
    PartialItemState,
    Vertex,
    WordAnnotation,
)

__all__ = [
    "BoundingBox",
    "Item",
    "ParsedReceipt",
    "PartialItem",
    "PartialItemState",
    "Vertex",
    "WordAnnotation",
]
