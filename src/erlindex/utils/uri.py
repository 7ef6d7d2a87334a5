"""Conversion between filesystem paths and ``file://`` URIs."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote, unquote_to_bytes, urlparse


def uri_from_path(path: Path | str) -> str:
    """Build a ``file://`` URI from an absolute path.

    The path is quoted as raw filesystem bytes, so names that are not valid
    UTF-8 still produce a URI.
    """
    absolute = Path(path).absolute()
    return "file://" + quote(os.fsencode(absolute.as_posix()))


def path_from_uri(uri: str) -> Path:
    """Return the filesystem path a ``file://`` URI points to."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")
    return Path(os.fsdecode(unquote_to_bytes(parsed.path)))
