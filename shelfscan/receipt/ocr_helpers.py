"""Pure OCR transformation helpers for receipt parsing."""

import io
from collections.abc import Mapping
from typing import Any

from shelfscan.domain.receipt import BoundingBox, Vertex, WordAnnotation

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this
OCR_IMAGE_PADDING = 50  # White padding around image to prevent edge truncation
PREVIEW_PADDING = 10  # Extra margin around an item's box in its preview crop


class VisionResponseError(ValueError):
    """Raised when an OCR payload carries no usable text annotations."""


def resize_image_bytes(
    image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION, padding: int = OCR_IMAGE_PADDING
) -> bytes:
    """
    Resize image bytes if it exceeds max_dimension on either side.

    Also adds white padding around the image to prevent OCR edge truncation.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)
        padding: White padding to add around image (pixels)

    Returns:
        Image bytes (JPEG format), resized if necessary, with padding added
    """
    from PIL import Image, ImageOps

    img = Image.open(io.BytesIO(image_bytes))

    # Apply EXIF orientation so OCR coordinates and preview crops agree
    img = ImageOps.exif_transpose(img)

    width, height = img.size

    if width <= max_dimension and height <= max_dimension:
        img_final = img
    else:
        # Keep aspect ratio
        if width > height:
            new_width = max_dimension
            new_height = int(height * (max_dimension / width))
        else:
            new_height = max_dimension
            new_width = int(width * (max_dimension / height))

        img_final = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

    if padding > 0:
        img_final = ImageOps.expand(img_final, border=padding, fill="white")

    buffer = io.BytesIO()
    img_final.convert("RGB").save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _parse_vertex(raw: Any) -> Vertex:
    if not isinstance(raw, Mapping):
        return Vertex()
    return Vertex(x=int(raw.get("x", 0) or 0), y=int(raw.get("y", 0) or 0))


def _parse_annotation(raw: Any) -> WordAnnotation:
    if not isinstance(raw, Mapping):
        raise VisionResponseError(f"Text annotation must be an object, got {type(raw).__name__}")
    poly = raw.get("boundingPoly") or {}
    vertices = poly.get("vertices", []) if isinstance(poly, Mapping) else []
    return WordAnnotation(
        text=str(raw.get("description", "")),
        vertices=tuple(_parse_vertex(vertex) for vertex in vertices),
    )


def transform_vision_result(payload: Mapping[str, Any]) -> tuple[list[str], list[WordAnnotation]]:
    """
    Transform a vision text-detection response into parser input.

    Accepts either a single response (``{"textAnnotations": [...]}``) or the
    batch form (``{"responses": [{...}]}``), in which case the first response
    is used. Annotation 0 is the whole-text blob; its description supplies
    the OCR lines.

    Returns:
        (lines, annotations): trimmed non-empty lines, and every annotation
        including the blob at index 0

    Raises:
        VisionResponseError: if the payload reports an error or has no text
    """
    if not isinstance(payload, Mapping):
        raise VisionResponseError(f"OCR payload must be an object, got {type(payload).__name__}")
    if "responses" in payload:
        responses = payload["responses"]
        if not isinstance(responses, list) or not responses:
            raise VisionResponseError("OCR payload has an empty 'responses' list")
        payload = responses[0]
        if not isinstance(payload, Mapping):
            raise VisionResponseError("OCR response must be an object")

    error = payload.get("error")
    if error:
        message = error.get("message", error) if isinstance(error, Mapping) else error
        raise VisionResponseError(f"OCR service reported an error: {message}")

    raw_annotations = payload.get("textAnnotations")
    if not isinstance(raw_annotations, list) or not raw_annotations:
        raise VisionResponseError("OCR payload has no text annotations")

    annotations = [_parse_annotation(raw) for raw in raw_annotations]
    lines = [line.strip() for line in annotations[0].text.split("\n") if line.strip()]
    return lines, annotations


def crop_item_preview(
    image_bytes: bytes,
    bounds: BoundingBox | None,
    padding: int = PREVIEW_PADDING,
) -> bytes | None:
    """
    Cut the region around one item out of the receipt image.

    ``image_bytes`` must be the image the OCR coordinates refer to (the
    resized and padded upload, see resize_image_bytes).

    Returns:
        JPEG bytes of the crop, or None when the item has no usable bounds
    """
    if bounds is None or bounds.is_empty:
        return None

    from PIL import Image

    img = Image.open(io.BytesIO(image_bytes))
    width, height = img.size
    box = (
        max(0, bounds.min_x - padding),
        max(0, bounds.min_y - padding),
        min(width, bounds.max_x + padding),
        min(height, bounds.max_y + padding),
    )
    if box[2] <= box[0] or box[3] <= box[1]:
        return None

    buffer = io.BytesIO()
    img.crop(box).convert("RGB").save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()
