"""Initial recursive scan for source documents."""

import os
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from .path_utils import DEFAULT_IGNORE_DIRS, DEFAULT_SOURCE_SUFFIXES, is_source_file


def _log_walk_error(error: OSError):
    logger.error(f"Could not read directory {error.filename}: {error}")


def scan(
    root_dir: str | Path,
    suffixes: Iterable[str] = DEFAULT_SOURCE_SUFFIXES,
    ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
) -> set[str]:
    """Return every source document below ``root_dir`` as a posix path relative to it.

    Ignored directories are pruned before descending. Unreadable directories
    are logged and skipped; the scan itself never fails.
    """
    root = Path(root_dir)
    suffixes = tuple(suffixes)
    ignore_dirs = set(ignore_dirs)
    found: set[str] = set()

    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = [name for name in dirnames if name not in ignore_dirs]

        relative_dir = Path(dirpath).relative_to(root)
        for filename in filenames:
            if is_source_file(filename, suffixes):
                found.add((relative_dir / filename).as_posix())

    logger.debug(f"Discovered {len(found)} source files in {root}")
    return found
