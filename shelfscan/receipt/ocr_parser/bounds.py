"""Bounding-box resolution for parsed receipt items."""

from collections.abc import Sequence

from shelfscan.domain.receipt import BoundingBox, WordAnnotation

# Outward padding around the matched words, in pixels
BOUNDS_PADDING = 5


def _fragment_matches(annotation_text: str, fragment: str) -> bool:
    # Bidirectional containment covers OCR splitting one token into several
    # annotations as well as merging several tokens into one.
    if not annotation_text or not fragment:
        return False
    return annotation_text in fragment or fragment in annotation_text


def find_item_bounds(
    annotations: Sequence[WordAnnotation],
    fragments: Sequence[str],
    padding: int = BOUNDS_PADDING,
) -> BoundingBox:
    """
    Find the rectangle enclosing every word annotation that belongs to one item.

    Args:
        annotations: Full OCR annotation list; entry 0 is the whole-text blob
            and is always ignored.
        fragments: Text pieces known to belong to the item, e.g.
            [name_line, "$0.69", "3 @ $0.23"].
        padding: Pixels to grow the rectangle by on every side.

    Returns:
        The padded rectangle (top-left clamped at 0), or BoundingBox.EMPTY
        if no annotation matches any fragment.
    """
    min_x = min_y = None
    max_x = max_y = None

    for fragment in fragments:
        fragment = fragment.strip()
        for annotation in annotations[1:]:
            if not _fragment_matches(annotation.text.strip(), fragment):
                continue
            for vertex in annotation.vertices:
                min_x = vertex.x if min_x is None else min(min_x, vertex.x)
                min_y = vertex.y if min_y is None else min(min_y, vertex.y)
                max_x = vertex.x if max_x is None else max(max_x, vertex.x)
                max_y = vertex.y if max_y is None else max(max_y, vertex.y)

    if min_x is None or min_y is None or max_x is None or max_y is None:
        return BoundingBox.EMPTY

    return BoundingBox(
        min_x=max(0, min_x - padding),
        min_y=max(0, min_y - padding),
        max_x=max_x + padding,
        max_y=max_y + padding,
    )
