"""Runtime loader for known catalog receipt identifiers."""

from __future__ import annotations

from pathlib import Path


def load_receipt_identifiers(path: Path) -> tuple[str, ...]:
    """
    Read receipt identifiers, one per line.

    Blank lines and ``#`` comments are ignored; duplicates keep their first
    position.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    identifiers: dict[str, None] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        identifiers.setdefault(text, None)
    return tuple(identifiers)
