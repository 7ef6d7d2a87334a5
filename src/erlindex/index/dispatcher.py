"""Fan a document out to the document store and every specialized index."""

from __future__ import annotations

import logging
from typing import Sequence

from erlindex.errors import DispatchError
from erlindex.index.specialized import SpecializedIndex
from erlindex.index.storage import DOCUMENTS, DocumentStore
from erlindex.models import Document

LOGGER = logging.getLogger(__name__)


class IndexDispatcher:
    """Stores documents and hands them to a fixed list of indexes.

    The first failure ends the dispatch: a store failure means no index runs,
    an index failure means later indexes are skipped. Indexes that already ran
    keep their updates.
    """

    def __init__(self, store: DocumentStore, indexes: Sequence[SpecializedIndex]) -> None:
        self.store = store
        self.indexes = tuple(indexes)

    def dispatch(self, document: Document) -> None:
        uri = document.uri
        try:
            self.store.store(DOCUMENTS, uri, document)
        except Exception as exc:
            raise DispatchError(uri, "store", exc) from exc

        for index in self.indexes:
            try:
                index.index(document)
            except Exception as exc:
                raise DispatchError(uri, index.name, exc) from exc
        LOGGER.debug("Dispatched %s to %d indexes", uri, len(self.indexes))
