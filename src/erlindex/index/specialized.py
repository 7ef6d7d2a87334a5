"""Specialized indexes fed by the dispatcher.

Each index consumes whole documents and maintains one kind of lookup
structure. The set of indexes is fixed; ``default_indexes`` returns one
instance of each kind in registration order.
"""

from __future__ import annotations

from typing import Dict, List, Protocol, Set, Tuple

from erlindex.models import Document

MFA = Tuple[str, str, int]


class SpecializedIndex(Protocol):
    name: str

    def index(self, document: Document) -> None: ...


class CompletionIndex:
    """Exported functions per module, for completion candidates."""

    name = "completion"

    def __init__(self) -> None:
        self._exports: Dict[str, Set[Tuple[str, int]]] = {}

    def index(self, document: Document) -> None:
        self._exports[document.module] = {poi.data for poi in document.pois_of("export_entry")}

    def exports(self, module: str) -> List[Tuple[str, int]]:
        return sorted(self._exports.get(module, ()))

    def modules(self) -> List[str]:
        return sorted(self._exports)


class ReferencesIndex:
    """Call sites of remote functions."""

    name = "references"

    def __init__(self) -> None:
        self._refs: Dict[MFA, Dict[str, List[int]]] = {}
        self._by_uri: Dict[str, Set[MFA]] = {}

    def index(self, document: Document) -> None:
        # Drop what an earlier version of this document contributed.
        for mfa in self._by_uri.pop(document.uri, ()):
            by_uri = self._refs[mfa]
            del by_uri[document.uri]
            if not by_uri:
                del self._refs[mfa]
        calls = document.pois_of("application")
        if calls:
            self._by_uri[document.uri] = {poi.data for poi in calls}
        for poi in calls:
            self._refs.setdefault(poi.data, {}).setdefault(document.uri, []).append(poi.line)

    def references(self, mfa: MFA) -> List[Tuple[str, int]]:
        by_uri = self._refs.get(mfa, {})
        return [(uri, line) for uri in sorted(by_uri) for line in by_uri[uri]]

    def mfas(self) -> List[MFA]:
        return sorted(self._refs)


class SpecsIndex:
    """Type specifications keyed by module, function and arity."""

    name = "specs"

    def __init__(self) -> None:
        self._specs: Dict[MFA, str] = {}
        self._by_uri: Dict[str, Set[MFA]] = {}

    def index(self, document: Document) -> None:
        for mfa in self._by_uri.pop(document.uri, ()):
            self._specs.pop(mfa, None)
        module = document.module
        keys = set()
        for poi in document.pois_of("spec"):
            function, arity, text = poi.data
            self._specs[(module, function, arity)] = text
            keys.add((module, function, arity))
        if keys:
            self._by_uri[document.uri] = keys

    def spec(self, mfa: MFA) -> str | None:
        return self._specs.get(mfa)


def default_indexes() -> tuple[CompletionIndex, ReferencesIndex, SpecsIndex]:
    return CompletionIndex(), ReferencesIndex(), SpecsIndex()
