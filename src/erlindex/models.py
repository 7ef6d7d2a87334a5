"""Core erlindex data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from erlindex.errors import FileIndexError
from erlindex.utils.uri import path_from_uri


@dataclass(slots=True)
class Poi:
    """Point of interest found while parsing a source file."""

    kind: str
    data: Any
    line: int

    def to_dict(self) -> Dict[str, Any]:
        data = list(self.data) if isinstance(self.data, tuple) else self.data
        return {"kind": self.kind, "data": data, "line": self.line}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Poi":
        data = tuple(raw["data"]) if isinstance(raw["data"], list) else raw["data"]
        return cls(kind=raw["kind"], data=data, line=raw["line"])


@dataclass(slots=True)
class Document:
    """Parsed representation of one source file, keyed by URI."""

    uri: str
    text: str
    pois: List[Poi] = field(default_factory=list)

    @property
    def module(self) -> str:
        for poi in self.pois:
            if poi.kind == "module":
                return poi.data
        return path_from_uri(self.uri).stem

    def pois_of(self, kind: str) -> List[Poi]:
        return [poi for poi in self.pois if poi.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uri": self.uri,
            "text": self.text,
            "pois": [poi.to_dict() for poi in self.pois],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Document":
        return cls(
            uri=raw["uri"],
            text=raw["text"],
            pois=[Poi.from_dict(item) for item in raw.get("pois", [])],
        )


@dataclass(slots=True)
class WalkResult:
    """Succeeded/failed counts for one directory walk."""

    directory: Path
    succeeded: int = 0
    failed: int = 0
    elapsed: float = 0.0

    @property
    def visited(self) -> int:
        return self.succeeded + self.failed

    def record(self, ok: bool) -> None:
        if ok:
            self.succeeded += 1
        else:
            self.failed += 1


@dataclass(slots=True)
class IndexOutcome:
    """Result of trying to index a single file."""

    path: Path
    uri: str | None = None
    error: FileIndexError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
