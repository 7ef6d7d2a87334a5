"""Key-value document stores."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Protocol

from erlindex.models import Document
from erlindex.utils.uri import path_from_uri

DOCUMENTS = "documents"

_DECODERS: Dict[str, Callable[[Any], Any]] = {DOCUMENTS: Document.from_dict}


class DocumentStore(Protocol):
    """Namespaced key-value store; a later write to a key replaces the earlier one."""

    def store(self, namespace: str, key: str, value: Any) -> None: ...

    def fetch(self, namespace: str, key: str) -> Any: ...

    def keys(self, namespace: str) -> List[str]: ...

    def delete(self, namespace: str, key: str) -> None: ...

    def close(self) -> None: ...


class MemoryDocumentStore:
    """In-process store backed by plain dictionaries."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def store(self, namespace: str, key: str, value: Any) -> None:
        self._data.setdefault(namespace, {})[key] = value

    def fetch(self, namespace: str, key: str) -> Any:
        return self._data[namespace][key]

    def keys(self, namespace: str) -> List[str]:
        return list(self._data.get(namespace, {}))

    def delete(self, namespace: str, key: str) -> None:
        self._data.get(namespace, {}).pop(key, None)

    def close(self) -> None:
        pass


class SQLiteDocumentStore:
    """Persistent store keeping JSON-encoded values in a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS entries (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (namespace, key)
                )
                """
            )

    def store(self, namespace: str, key: str, value: Any) -> None:
        payload = value.to_dict() if hasattr(value, "to_dict") else value
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO entries(namespace, key, value)
                VALUES (?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (namespace, key, json.dumps(payload, ensure_ascii=True)),
            )

    def fetch(self, namespace: str, key: str) -> Any:
        row = self._conn.execute(
            "SELECT value FROM entries WHERE namespace = ? AND key = ?",
            (namespace, key),
        ).fetchone()
        if row is None:
            raise KeyError(key)
        value = json.loads(row["value"])
        decoder = _DECODERS.get(namespace)
        return decoder(value) if decoder else value

    def keys(self, namespace: str) -> List[str]:
        rows = self._conn.execute(
            "SELECT key FROM entries WHERE namespace = ? ORDER BY key", (namespace,)
        ).fetchall()
        return [row["key"] for row in rows]

    def delete(self, namespace: str, key: str) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM entries WHERE namespace = ? AND key = ?", (namespace, key))

    def remove_missing_files(self) -> int:
        """Remove documents whose files no longer exist."""
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT key FROM entries WHERE namespace = ?", (DOCUMENTS,)
            ).fetchall()
            missing = [row["key"] for row in rows if not path_from_uri(row["key"]).exists()]
            for key in missing:
                conn.execute(
                    "DELETE FROM entries WHERE namespace = ? AND key = ?", (DOCUMENTS, key)
                )
        return len(missing)
