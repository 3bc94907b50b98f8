"""Logical path helpers shared by discovery, the watchers and the query layer.

A logical path is the stable identity of an artifact: a leading-slash,
forward-slash separated path relative to the served root directory, e.g.
``/docs/intro.md``.
"""

import os
import posixpath
from collections.abc import Iterable
from pathlib import Path, PurePath
from urllib.parse import unquote

DEFAULT_SOURCE_SUFFIXES: tuple[str, ...] = (".md",)
DEFAULT_IGNORE_DIRS: tuple[str, ...] = (".git",)


def to_logical_path(relative_path: str | PurePath) -> str:
    """Convert a root-relative filesystem path into a logical path."""
    path = str(relative_path).replace(os.sep, "/")
    if os.altsep:
        path = path.replace(os.altsep, "/")

    parts = [part for part in path.split("/") if part and part != "."]
    return "/" + "/".join(parts)


def to_relative_path(logical_path: str) -> str:
    """Strip the leading slash of a logical path."""
    return logical_path.lstrip("/")


def decode_request_path(raw_path: str) -> str | None:
    """Percent-decode an externally supplied path into a logical path.

    Returns None for input that cannot be decoded as UTF-8, that tries to
    leave the root through ``.``/``..`` segments, that contains NUL bytes,
    or that is empty after decoding.
    """
    parts: list[str] = []
    for segment in raw_path.split("/"):
        if not segment:
            continue

        try:
            part = unquote(segment, encoding="utf-8", errors="strict")
        except UnicodeDecodeError:
            return None

        if part in (".", "..") or "\x00" in part or "/" in part or "\\" in part:
            return None
        parts.append(part)

    if not parts:
        return None
    return "/" + "/".join(parts)


def listing_sort_key(logical_path: str) -> tuple[int, str]:
    """Deeper paths first, then lexicographic."""
    return -logical_path.count("/"), logical_path


def sort_listing(paths: Iterable[str]) -> list[str]:
    """Return ``paths`` in listing order."""
    return sorted(paths, key=listing_sort_key)


def is_source_file(name: str, suffixes: Iterable[str] = DEFAULT_SOURCE_SUFFIXES) -> bool:
    """Check whether a file name carries one of the recognized source suffixes."""
    for suffix in suffixes:
        if name.endswith("." + suffix.strip(".")):
            return True
    return False


def is_ignored_path(relative_path: str | PurePath, ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS) -> bool:
    """Check whether any directory component of ``relative_path`` is on the ignore list."""
    ignore_dirs = set(ignore_dirs)
    parts = PurePath(relative_path).parts
    return any(part in ignore_dirs for part in parts)


def relative_to_root(path: str | Path, root_dir: str | Path) -> str | None:
    """Return ``path`` relative to ``root_dir`` in posix form, or None when outside the root."""
    try:
        relative = Path(path).resolve().relative_to(Path(root_dir).resolve())
    except ValueError:
        return None
    return relative.as_posix()


def join_root(root_dir: str | Path, logical_path: str) -> Path:
    """Map a logical path back onto the filesystem below ``root_dir``."""
    relative = posixpath.normpath(to_relative_path(logical_path))
    return Path(root_dir) / Path(*relative.split("/"))
