"""Source indexing pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from erlindex.config import AppConfig
from erlindex.errors import FileIndexError, NotFoundError, ReadError
from erlindex.index.dispatcher import IndexDispatcher
from erlindex.index.paths import RootPaths
from erlindex.index.specialized import SpecializedIndex, default_indexes
from erlindex.index.storage import DOCUMENTS, DocumentStore
from erlindex.index.walker import walk_directory
from erlindex.ingestion.parser import create_document
from erlindex.models import Document, IndexOutcome, WalkResult
from erlindex.utils.uri import uri_from_path

LOGGER = logging.getLogger(__name__)


class Indexer:
    """Coordinates discovery, parsing and dispatch of source files."""

    def __init__(
        self,
        config: AppConfig,
        store: DocumentStore,
        indexes: Sequence[SpecializedIndex] | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.paths = RootPaths(config)
        self.dispatcher = IndexDispatcher(
            store, indexes if indexes is not None else default_indexes()
        )

    @property
    def indexes(self) -> tuple[SpecializedIndex, ...]:
        return self.dispatcher.indexes

    def initialize(self) -> List[WalkResult]:
        """Index every source file in the app path.

        Dependency and runtime sources are left to ``find_and_index_file``.
        """
        return [self.index_dir(directory) for directory in self.paths.app()]

    def index(self, document: Document) -> None:
        """Store and dispatch a document that has already been parsed."""
        self.dispatcher.dispatch(document)

    def index_dir(self, directory: Path) -> WalkResult:
        """Index all .erl and .hrl files under ``directory``, skipping failures."""
        return walk_directory(directory, self.try_index_file)

    def try_index_file(self, path: Path) -> IndexOutcome:
        """Read, parse and dispatch one file, reporting failure in the outcome."""
        path = Path(path).absolute()
        uri = uri_from_path(path)
        LOGGER.debug("Indexing file. [filename=%s]", path)
        try:
            try:
                content = path.read_bytes()
            except OSError as exc:
                raise ReadError(path, exc) from exc
            document = create_document(uri, content)
            self.index(document)
        except FileIndexError as exc:
            LOGGER.error("Error indexing file [filename=%s] %s:%s", path, *exc.tag())
            return IndexOutcome(path=path, uri=uri, error=exc)
        return IndexOutcome(path=path, uri=uri)

    def find_and_index_file(self, filename: str) -> str:
        """Index the first file named ``filename`` in the search path.

        App directories are searched before deps, deps before runtime.
        Returns the URI of the file found. ``filename`` must be a bare name;
        anything with a directory part raises ``ValueError``.
        """
        if filename in ("", "..") or Path(filename).name != filename:
            raise ValueError(f"Expected a bare file name, got {filename!r}")
        for directory in self.paths.search_path():
            candidate = directory / filename
            if candidate.is_file():
                self.try_index_file(candidate)
                return uri_from_path(candidate.absolute())
        LOGGER.debug("No file named %s in search path", filename)
        raise NotFoundError(filename)

    def get_document(self, uri: str) -> Document:
        return self.store.fetch(DOCUMENTS, uri)
