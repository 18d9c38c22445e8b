"""Runtime infrastructure for shelfscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Known-store table loading via load_known_stores()

Usage:
    from shelfscan.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.receipts_ocr_json)
"""

from shelfscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from shelfscan.runtime.paths import (
    ProjectPaths,
    get_paths,
    reset_paths,
)
from shelfscan.runtime.store_rules import load_known_stores

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_known_stores",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
