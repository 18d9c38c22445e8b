"""Tests for OCR transformation helpers."""

import io

import pytest
from PIL import Image

from shelfscan.domain.receipt import BoundingBox, Vertex
from shelfscan.receipt.ocr_helpers import (
    VisionResponseError,
    crop_item_preview,
    resize_image_bytes,
    transform_vision_result,
)


def _annotation(text: str, *points: tuple[int, int]) -> dict:
    return {
        "description": text,
        "boundingPoly": {"vertices": [{"x": x, "y": y} for x, y in points]},
    }


def _image_bytes(width: int, height: int, image_format: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format=image_format)
    return buffer.getvalue()


def test_transform_splits_blob_into_trimmed_lines() -> None:
    payload = {
        "textAnnotations": [
            _annotation("TRADER JOE'S\n  BANANAS \n\n$0.69\n", (0, 0), (300, 0), (300, 400), (0, 400)),
            _annotation("BANANAS", (10, 100), (80, 100), (80, 120), (10, 120)),
            _annotation("$0.69", (200, 130), (250, 130), (250, 150), (200, 150)),
        ]
    }

    lines, annotations = transform_vision_result(payload)

    assert lines == ["TRADER JOE'S", "BANANAS", "$0.69"]
    assert len(annotations) == 3
    assert annotations[1].text == "BANANAS"
    assert annotations[1].vertices[0] == Vertex(10, 100)


def test_transform_accepts_batch_wrapper_and_missing_coordinates() -> None:
    payload = {
        "responses": [
            {
                "textAnnotations": [
                    {"description": "H-E-B\n7 MILK F 3.99"},
                    {"description": "MILK", "boundingPoly": {"vertices": [{"x": 5}, {"y": 7}, {}]}},
                ]
            }
        ]
    }

    lines, annotations = transform_vision_result(payload)

    assert lines == ["H-E-B", "7 MILK F 3.99"]
    assert annotations[0].vertices == ()
    assert annotations[1].vertices == (Vertex(5, 0), Vertex(0, 7), Vertex(0, 0))


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"textAnnotations": []},
        {"responses": []},
        {"responses": [{}]},
        {"error": {"code": 3, "message": "Bad image data."}},
    ],
)
def test_transform_rejects_payloads_without_text(payload: dict) -> None:
    with pytest.raises(VisionResponseError):
        transform_vision_result(payload)


def test_vision_error_is_value_error() -> None:
    assert issubclass(VisionResponseError, ValueError)


def test_resize_adds_padding_to_small_images() -> None:
    resized = resize_image_bytes(_image_bytes(100, 50), padding=50)

    with Image.open(io.BytesIO(resized)) as img:
        assert img.size == (200, 150)
        assert img.format == "JPEG"


def test_resize_keeps_aspect_ratio_for_large_images() -> None:
    resized = resize_image_bytes(_image_bytes(400, 200), max_dimension=100, padding=0)

    with Image.open(io.BytesIO(resized)) as img:
        assert img.size == (100, 50)


def test_crop_item_preview_pads_and_clamps_to_image() -> None:
    image = _image_bytes(200, 100)

    preview = crop_item_preview(image, BoundingBox(20, 20, 60, 40))
    assert preview is not None
    with Image.open(io.BytesIO(preview)) as img:
        assert img.size == (60, 40)

    edge = crop_item_preview(image, BoundingBox(5, 5, 195, 95))
    assert edge is not None
    with Image.open(io.BytesIO(edge)) as img:
        assert img.size == (200, 100)


def test_crop_item_preview_without_bounds() -> None:
    image = _image_bytes(200, 100)

    assert crop_item_preview(image, None) is None
    assert crop_item_preview(image, BoundingBox.EMPTY) is None
    assert crop_item_preview(image, BoundingBox(500, 500, 600, 600)) is None
