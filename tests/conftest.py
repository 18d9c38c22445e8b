"""Shared pytest fixtures for shelfscan tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from shelfscan.runtime import load_known_stores, reset_paths


@pytest.fixture(autouse=True)
def shelfscan_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the data root at a per-test directory and drop cached config."""
    home = tmp_path / "shelfscan_home"
    home.mkdir()
    monkeypatch.setenv("SHELFSCAN_HOME", str(home))
    monkeypatch.delenv("OCR_SERVICE_URL", raising=False)
    reset_paths()
    load_known_stores.cache_clear()
    yield home
    reset_paths()
    load_known_stores.cache_clear()
