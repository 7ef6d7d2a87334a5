"""Utility helpers for working with source files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Pattern

# Erlang modules and header files.
SOURCE_PATTERN = re.compile(r".*\.[eh]rl$")


def iter_source_paths(root: Path, pattern: Pattern[str] = SOURCE_PATTERN) -> Iterator[Path]:
    """Yield files under ``root`` whose name matches ``pattern``, recursively."""
    root = Path(root)
    if not root.is_dir():
        return
    for item in sorted(root.rglob("*")):
        if item.is_file() and pattern.match(item.name):
            yield item


def subdirs(path: Path) -> list[Path]:
    """Return every directory nested under ``path`` at any depth.

    Directories are listed depth-first, parents before children, siblings by
    name. A missing or unreadable ``path`` has no subdirectories.
    """
    try:
        children = sorted(child for child in Path(path).iterdir() if child.is_dir())
    except (FileNotFoundError, NotADirectoryError, PermissionError):
        return []

    found: list[Path] = []
    for child in children:
        found.append(child)
        found.extend(subdirs(child))
    return found
