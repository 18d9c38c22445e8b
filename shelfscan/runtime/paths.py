"""Centralized path management for shelfscan.

All on-disk locations (store config, cached OCR JSON, item previews) hang off
one data root so tests and users can relocate everything with SHELFSCAN_HOME.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

HOME_ENV = "SHELFSCAN_HOME"


def _get_project_root() -> Path:
    """Data root: $SHELFSCAN_HOME if set, else the current directory."""
    env_root = os.environ.get(HOME_ENV)
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all shelfscan data paths, computed from one root."""

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def store_rules(self) -> Path:
        """Known-store table overrides (TOML)."""
        return self.config / "stores.toml"

    # --- Receipt paths ---
    @property
    def receipts(self) -> Path:
        """Root receipts directory."""
        return self.root / "receipts"

    @property
    def receipts_ocr_json(self) -> Path:
        """Raw OCR results (JSON)."""
        return self.receipts / "ocr_json"

    @property
    def receipts_previews(self) -> Path:
        """Cropped line-item preview images."""
        return self.receipts / "previews"

    def ensure_receipt_directories(self) -> None:
        """Create all receipt-related directories if they don't exist."""
        self.receipts_ocr_json.mkdir(parents=True, exist_ok=True)
        self.receipts_previews.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Drop the singleton so the next get_paths() re-reads SHELFSCAN_HOME."""
    global _paths
    _paths = None
