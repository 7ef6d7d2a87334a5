"""Turn Erlang source text into a :class:`Document`.

This is a light, regex driven scan rather than a full Erlang parser. It
extracts the points of interest the specialized indexes consume: the module
attribute, export entries, function definitions, specs and remote calls.
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import Iterator, List

from erlindex.errors import ParseError
from erlindex.models import Document, Poi
from erlindex.utils.uri import path_from_uri

LOGGER = logging.getLogger(__name__)

ATOM = r"'?([a-z][A-Za-z0-9_@]*)'?"

MODULE_RE = re.compile(rf"^-module\(\s*{ATOM}\s*\)", re.MULTILINE)
EXPORT_RE = re.compile(r"^-export\(\s*\[(.*?)\]\s*\)", re.MULTILINE | re.DOTALL)
EXPORT_ENTRY_RE = re.compile(rf"{ATOM}\s*/\s*(\d+)")
SPEC_RE = re.compile(rf"^-spec\s+{ATOM}\s*\(", re.MULTILINE)
FUNCTION_RE = re.compile(rf"^{ATOM}\s*\(", re.MULTILINE)
REMOTE_CALL_RE = re.compile(rf"\b{ATOM}\s*:\s*{ATOM}\s*\(")
ATTRIBUTE_RE = re.compile(r"^-\s*[a-z_]+", re.MULTILINE)
FORM_END_RE = re.compile(r"\.(?=\s|$)")

OPENERS = "([{"
CLOSERS = ")]}"
# Closed by ``end``. ``maybe`` is left out: it is an ordinary atom unless
# the feature is enabled, and ``fun`` is handled separately.
BLOCK_KEYWORDS = {"begin", "case", "if", "receive", "try"}


def create_document(uri: str, content: bytes | str) -> Document:
    """Parse ``content`` into a document identified by ``uri``.

    Only undecodable bytes fail the whole document. A call or definition
    whose argument list cannot be measured is left out of the points of
    interest.
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(path_from_uri(uri), f"invalid UTF-8: {exc}") from exc
    else:
        text = content

    stripped = strip_comments(text)
    code = mask_strings(stripped)
    locate = _line_locator(code)
    pois: List[Poi] = []

    match = MODULE_RE.search(code)
    if match:
        pois.append(Poi("module", match.group(1), locate(match.start())))

    for match in EXPORT_RE.finditer(code):
        for entry in EXPORT_ENTRY_RE.finditer(match.group(1)):
            offset = match.start(1) + entry.start()
            pois.append(Poi("export_entry", (entry.group(1), int(entry.group(2))), locate(offset)))

    seen = set()
    for match in FUNCTION_RE.finditer(code):
        arity = _count_args(code, match.end() - 1)
        if arity is None:
            _skipped(uri, match, locate)
            continue
        key = (match.group(1), arity)
        if key in seen:
            continue
        seen.add(key)
        pois.append(Poi("function", key, locate(match.start())))

    for match in SPEC_RE.finditer(code):
        # fun(...) in a type has no matching ``end``
        arity = _count_args(code, match.end() - 1, fun_blocks=False)
        if arity is None:
            _skipped(uri, match, locate)
            continue
        end = FORM_END_RE.search(code, match.end())
        spec_text = stripped[match.start() : end.end() if end else len(code)].strip()
        pois.append(Poi("spec", (match.group(1), arity, spec_text), locate(match.start())))

    attributes = list(_attribute_spans(code))
    for match in REMOTE_CALL_RE.finditer(code):
        if any(start <= match.start() < end for start, end in attributes):
            continue
        arity = _count_args(code, match.end() - 1)
        if arity is None:
            _skipped(uri, match, locate)
            continue
        data = (match.group(1), match.group(2), arity)
        pois.append(Poi("application", data, locate(match.start())))

    LOGGER.debug("Parsed %s: %d points of interest", uri, len(pois))
    return Document(uri=uri, text=text, pois=pois)


def strip_comments(text: str) -> str:
    """Blank out ``%`` comments, leaving strings and line numbers intact."""
    return "\n".join(_strip_line(line) for line in text.split("\n"))


def mask_strings(code: str) -> str:
    """Replace the contents of string literals with spaces.

    Offsets and newlines are preserved, so positions found in the masked
    text are valid in the original.
    """
    chars = list(code)
    index = 0
    length = len(code)
    while index < length:
        char = code[index]
        if char == "$":
            index = _char_literal_end(code, index)
        elif char == "'":
            index = _skip_quoted(code, index)
        elif char == '"':
            end = min(_skip_quoted(code, index), length)
            closed = code[end - 1] == '"' and end - 1 > index
            for pos in range(index + 1, end - 1 if closed else end):
                if chars[pos] != "\n":
                    chars[pos] = " "
            index = end
        else:
            index += 1
    return "".join(chars)


def _strip_line(line: str) -> str:
    in_string = False
    index = 0
    while index < len(line):
        char = line[index]
        if in_string:
            if char == "\\":
                index += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "$":
            index += 1
        elif char == "%":
            return line[:index]
        index += 1
    return line


def _line_locator(code: str):
    starts = [0] + [match.end() for match in re.finditer("\n", code)]

    def locate(offset: int) -> int:
        return bisect.bisect_right(starts, offset)

    return locate


def _skipped(uri: str, match: re.Match, locate) -> None:
    LOGGER.debug("Unbalanced argument list in %s at line %d", uri, locate(match.start()))


def _attribute_spans(code: str) -> Iterator[tuple[int, int]]:
    for match in ATTRIBUTE_RE.finditer(code):
        end = FORM_END_RE.search(code, match.end())
        yield match.start(), end.end() if end else len(code)


def _count_args(code: str, open_index: int, *, fun_blocks: bool = True) -> int | None:
    """Count top-level arguments of the parenthesised list opening at ``open_index``.

    Returns ``None`` when the list is never closed.
    """
    depth = 0
    commas = 0
    has_content = False
    index = open_index + 1
    length = len(code)

    while index < length:
        char = code[index]
        if char in "\"'":
            index = _skip_quoted(code, index)
            has_content = True
            continue
        if char == "$":
            index = _char_literal_end(code, index)
            has_content = True
            continue
        if char.isalpha() or char == "_":
            word_end = index
            while word_end < length and (code[word_end].isalnum() or code[word_end] in "_@"):
                word_end += 1
            word = code[index:word_end]
            if word in BLOCK_KEYWORDS or (
                fun_blocks and word == "fun" and code[word_end:].lstrip().startswith("(")
            ):
                depth += 1
            elif word == "end":
                depth -= 1
            index = word_end
            has_content = True
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            if depth == 0:
                return commas + 1 if has_content else 0
            depth -= 1
        elif char == "," and depth == 0:
            commas += 1
        if not char.isspace():
            has_content = True
        index += 1

    return None


def _char_literal_end(code: str, index: int) -> int:
    if code[index + 1 : index + 2] == "\\":
        return index + 3
    return index + 2


def _skip_quoted(code: str, index: int) -> int:
    quote = code[index]
    index += 1
    while index < len(code):
        if code[index] == "\\":
            index += 2
            continue
        if code[index] == quote:
            return index + 1
        index += 1
    return index
