"""Recursive directory walk with per-file failure isolation."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Pattern

from erlindex.errors import FileIndexError
from erlindex.models import IndexOutcome, WalkResult
from erlindex.utils.files import SOURCE_PATTERN, iter_source_paths

LOGGER = logging.getLogger(__name__)

Visitor = Callable[[Path], IndexOutcome]


def walk_directory(
    root: Path,
    visitor: Visitor,
    *,
    pattern: Pattern[str] = SOURCE_PATTERN,
) -> WalkResult:
    """Visit every matching file under ``root`` and count the outcomes.

    A failed file is counted and skipped; the walk always continues with the
    next file.
    """
    root = Path(root)
    result = WalkResult(directory=root)
    LOGGER.info("Indexing directory. [dir=%s]", root)
    started = time.perf_counter()

    for path in iter_source_paths(root, pattern):
        try:
            outcome = visitor(path)
        except FileIndexError as exc:
            LOGGER.error("Error indexing file [filename=%s] %s:%s", path, *exc.tag())
            result.record(False)
            continue
        result.record(outcome.ok)

    result.elapsed = time.perf_counter() - started
    LOGGER.info(
        "Finished indexing directory. [dir=%s] [time=%.3fs] [succeeded=%d] [failed=%d]",
        root,
        result.elapsed,
        result.succeeded,
        result.failed,
    )
    return result
