"""Runtime loader for the known-store table."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from shelfscan.receipt.ocr_result_parser import KnownStore, build_known_stores
from shelfscan.runtime.paths import get_paths


@lru_cache(maxsize=4)
def load_known_stores(config_path: str | None = None) -> tuple[KnownStore, ...]:
    """
    Load the known-store table, merging stores.toml over the built-in stores.

    Args:
        config_path: Optional TOML path override. If None, uses default project path.

    Returns:
        Tuple of KnownStore entries; the built-in table when no file exists.

    Raises:
        ValueError: if the TOML file holds a malformed [[stores]] entry
    """
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    path = Path(config_path) if config_path is not None else get_paths().store_rules
    if not path.exists():
        return build_known_stores(None)

    with open(path, "rb") as f:
        config = tomllib.load(f)

    try:
        return build_known_stores(config)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
