"""Exception hierarchy for the indexing core."""

from __future__ import annotations

from pathlib import Path


class ErlIndexError(Exception):
    """Base class for all erlindex errors."""


class ConfigError(ErlIndexError, ValueError):
    """Raised for unknown or malformed configuration options."""


class FileIndexError(ErlIndexError):
    """Indexing of a single file failed.

    Never aborts a directory walk: the walker counts it and moves on.
    """

    def __init__(self, path: Path | str | None, reason: object) -> None:
        self.path = Path(path) if path is not None else None
        self.reason = reason
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"{self.path}: {self.reason}"

    def tag(self) -> tuple[str, object]:
        return type(self).__name__, self.reason


class ReadError(FileIndexError):
    """The file could not be read from disk."""


class ParseError(FileIndexError):
    """The file content could not be parsed into a document."""


class DispatchError(FileIndexError):
    """Storing or indexing a document failed.

    ``stage`` is ``"store"`` when the document store rejected the write, or the
    name of the specialized index that raised.
    """

    def __init__(
        self, uri: str, stage: str, reason: object, path: Path | str | None = None
    ) -> None:
        self.uri = uri
        self.stage = stage
        super().__init__(path, reason)

    def _describe(self) -> str:
        return f"{self.uri} [{self.stage}]: {self.reason}"


class NotFoundError(ErlIndexError, LookupError):
    """No directory in the search path contains the requested file."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"File not found in search path: {filename}")
