"""Runtime helpers for the receipt OCR pipeline (network and filesystem)."""

import json
import os
import time
from pathlib import Path
from typing import Any

import httpx

from shelfscan.domain.receipt import ParsedReceipt, WordAnnotation
from shelfscan.receipt.ocr_helpers import (
    OCR_IMAGE_PADDING,
    VisionResponseError,
    crop_item_preview,
    resize_image_bytes,
    transform_vision_result,
)
from shelfscan.runtime.logging import get_logger
from shelfscan.runtime.paths import get_paths

logger = get_logger(__name__)

OCR_SERVICE_URL_ENV = "OCR_SERVICE_URL"
DEFAULT_OCR_SERVICE_URL = "http://localhost:8001"
OCR_TIMEOUT_SECONDS = 60.0


class OCRServiceUnavailable(RuntimeError):
    """Raised when the OCR service cannot be reached or returns an error."""


def resolve_ocr_url(ocr_url: str | None = None) -> str:
    """Explicit URL, else $OCR_SERVICE_URL, else the local default."""
    return ocr_url or os.environ.get(OCR_SERVICE_URL_ENV) or DEFAULT_OCR_SERVICE_URL


def call_ocr_service(
    receipt_path: Path, ocr_url: str
) -> tuple[dict[str, Any], list[str], list[WordAnnotation]]:
    """
    Call the OCR service and return both the raw payload and parser input.

    Returns:
        Tuple of (raw_result, lines, annotations).

    Raises:
        OCRServiceUnavailable: transport failure or non-200 response
        VisionResponseError: the service answered without text annotations
    """
    ocr_url = ocr_url.rstrip("/")
    logger.info("Sending receipt to OCR service at %s...", ocr_url)

    try:
        image_bytes = receipt_path.read_bytes()
        resized_bytes = resize_image_bytes(image_bytes)

        start_time = time.time()
        response = httpx.post(
            f"{ocr_url}/ocr",
            files={"file": (receipt_path.name, resized_bytes, "image/jpeg")},
            timeout=OCR_TIMEOUT_SECONDS,
        )
        elapsed_time = time.time() - start_time
        logger.info("OCR service returned in %.2f seconds", elapsed_time)

        if response.status_code != 200:
            # Body is not logged: it can carry receipt text.
            logger.error("OCR service error: %s", response.status_code)
            raise OCRServiceUnavailable(f"OCR service error: {response.status_code}")

        raw_result = response.json()

    except httpx.RequestError as e:
        logger.error("Failed to connect to OCR service: %s", e)
        raise OCRServiceUnavailable(f"Failed to connect to OCR service: {e}") from e
    except json.JSONDecodeError as e:
        raise VisionResponseError(f"OCR service returned a non-JSON body: {e}") from e

    lines, annotations = transform_vision_result(raw_result)
    return raw_result, lines, annotations


def save_ocr_json(ocr_result: dict[str, Any], receipt_path: Path) -> Path:
    """Save the raw OCR payload so the receipt can be re-parsed without OCR."""
    ocr_json_dir = get_paths().receipts_ocr_json
    ocr_json_dir.mkdir(parents=True, exist_ok=True)
    ocr_json_path = ocr_json_dir / f"{receipt_path.stem}.json"
    ocr_json_path.write_text(json.dumps(ocr_result, indent=2))
    logger.debug("OCR JSON saved to: %s", ocr_json_path)
    return ocr_json_path


def load_ocr_json(json_path: Path) -> dict[str, Any]:
    """Read a cached OCR payload."""
    if not json_path.exists():
        raise FileNotFoundError(f"OCR JSON not found: {json_path}")
    payload = json.loads(json_path.read_text())
    if not isinstance(payload, dict):
        raise ValueError(f"OCR JSON must hold an object: {json_path}")
    return payload


def save_item_previews(
    image_path: Path,
    receipt: ParsedReceipt,
    output_dir: Path | None = None,
    padding: int = OCR_IMAGE_PADDING,
) -> list[Path]:
    """
    Write one cropped preview per item that has bounds.

    Crops come from the same resized+padded image that was sent to OCR, so
    item bounds line up with it.

    Returns:
        Paths of the written previews, in item order
    """
    if output_dir is None:
        output_dir = get_paths().receipts_previews

    ocr_image = resize_image_bytes(image_path.read_bytes(), padding=padding)

    written: list[Path] = []
    for index, item in enumerate(receipt.items, start=1):
        preview = crop_item_preview(ocr_image, item.bounds)
        if preview is None:
            continue
        output_dir.mkdir(parents=True, exist_ok=True)
        preview_path = output_dir / f"{image_path.stem}_item{index:02d}.jpg"
        preview_path.write_bytes(preview)
        written.append(preview_path)

    logger.info("Saved %d item preview(s) to %s", len(written), output_dir)
    return written
