# File: yogen/utils.py
"""
yogen - Identifier Utilities & Helpers
=======================================
String transformations used to turn Spanner identifiers into Go
identifiers, plus a few small helpers shared across the pipeline.

Contents:
- ``snake_to_camel`` / ``camel_to_snake`` with Go common initialisms
  (``user_id`` → ``UserID``, ``IDValue`` → ``id_value``).
- Spanner reserved keywords and ``escape_column_name``.
- Go reserved names and ``go_param_name``.
- ``ShortNamer``: receiver-name synthesis with a per-instance cache.
- ``Timer`` context manager and ``module_basename``.

The case converters are pure and decorated with ``@lru_cache`` since the
same column names are converted many times per run.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import time
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("yogen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_WORD_BOUNDARY_RE: re.Pattern[str] = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_IDENT_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9]+")

# ---------------------------------------------------------------------------
# Go common initialisms (golint list)
# ---------------------------------------------------------------------------

COMMON_INITIALISMS: FrozenSet[str] = frozenset({
    "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML",
    "HTTP", "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS",
    "RPC", "SLA", "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP", "UI",
    "UID", "UUID", "URI", "URL", "UTF8", "VM", "XML", "XMPP", "XSRF",
    "XSS",
})

_MAX_INITIALISM: int = max(len(word) for word in COMMON_INITIALISMS)

# ---------------------------------------------------------------------------
# Spanner reserved keywords
# ---------------------------------------------------------------------------

SQL_RESERVED_KEYWORDS: FrozenSet[str] = frozenset({
    "ALL", "AND", "ANY", "ARRAY", "AS", "ASC", "ASSERT_ROWS_MODIFIED", "AT",
    "BETWEEN", "BY", "CASE", "CAST", "COLLATE", "CONTAINS", "CREATE",
    "CROSS", "CUBE", "CURRENT", "DEFAULT", "DEFINE", "DESC", "DISTINCT",
    "ELSE", "END", "ENUM", "ESCAPE", "EXCEPT", "EXCLUDE", "EXISTS",
    "EXTRACT", "FALSE", "FETCH", "FOLLOWING", "FOR", "FROM", "FULL",
    "GROUP", "GROUPING", "GROUPS", "HASH", "HAVING", "IF", "IGNORE", "IN",
    "INNER", "INTERSECT", "INTERVAL", "INTO", "IS", "JOIN", "LATERAL",
    "LEFT", "LIKE", "LIMIT", "LOOKUP", "MERGE", "NATURAL", "NEW", "NO",
    "NOT", "NULL", "NULLS", "OF", "ON", "OR", "ORDER", "OUTER", "OVER",
    "PARTITION", "PRECEDING", "PROTO", "RANGE", "RECURSIVE", "RESPECT",
    "RIGHT", "ROLLUP", "ROWS", "SELECT", "SET", "SOME", "STRUCT",
    "TABLESAMPLE", "THEN", "TO", "TREAT", "TRUE", "UNBOUNDED", "UNION",
    "UNNEST", "USING", "WHEN", "WHERE", "WINDOW", "WITH", "WITHIN",
})

# ---------------------------------------------------------------------------
# Go naming tables
# ---------------------------------------------------------------------------

# Go keywords and builtin type names mapped to identifiers that compile.
GO_RESERVED_NAMES: Dict[str, str] = {
    "break": "brk",
    "case": "cs",
    "chan": "chn",
    "const": "cnst",
    "continue": "cnt",
    "default": "def",
    "defer": "dfr",
    "else": "els",
    "fallthrough": "flthrough",
    "for": "fr",
    "func": "fn",
    "go": "goVal",
    "goto": "gt",
    "if": "ifVal",
    "import": "imp",
    "interface": "iface",
    "map": "mp",
    "package": "pkg",
    "range": "rnge",
    "return": "ret",
    "select": "slct",
    "struct": "strct",
    "switch": "swtch",
    "type": "typ",
    "var": "vr",
    # go types
    "error": "e",
    "bool": "b",
    "string": "str",
    "byte": "byt",
    "rune": "r",
    "uintptr": "uptr",
    "int": "i",
    "int8": "i8",
    "int16": "i16",
    "int32": "i32",
    "int64": "i64",
    "uint": "u",
    "uint8": "u8",
    "uint16": "u16",
    "uint32": "u32",
    "uint64": "u64",
    "float32": "z",
    "float64": "f",
    "complex64": "c",
    "complex128": "c128",
}

# Go types that never take the custom type package prefix.
KNOWN_GO_TYPES: FrozenSet[str] = frozenset({
    "bool", "string", "byte", "rune", "int", "int8", "int16", "int32",
    "int64", "uint", "uint8", "uint16", "uint32", "uint64", "float32",
    "float64", "Slice", "StringSlice",
})

DEFAULT_SHORT_NAMES: Dict[str, str] = {
    "bool": "b",
    "string": "s",
    "byte": "b",
    "rune": "r",
    "int": "i",
    "int8": "i",
    "int16": "i",
    "int32": "i",
    "int64": "i",
    "uint": "u",
    "uint8": "u",
    "uint16": "u",
    "uint32": "u",
    "uint64": "u",
    "float32": "f",
    "float64": "f",
}

# Local names of packages imported by the generated code.
CONFLICTED_SHORT_NAMES: FrozenSet[str] = frozenset({
    "context", "errors", "fmt", "regexp", "strings", "time", "iterator",
    "spanner", "civil", "codes", "status",
})

NAME_CONFLICT_SUFFIX: str = "z"


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def snake_to_camel(name: str) -> str:
    """
    Convert a Spanner identifier to an exported Go identifier.

    Words are split on ``_`` and on lower→upper boundaries; runs of capitals
    stay together.  Each word that is a Go initialism is upper-cased, any
    other word only has its first letter raised.

    Examples:
        >>> snake_to_camel("user_id")
        'UserID'
        >>> snake_to_camel("InterleavedId")
        'InterleavedID'
        >>> snake_to_camel("FTString")
        'FTString'
    """
    if not name:
        return ""
    out: List[str] = []
    for chunk in _NON_IDENT_RE.split(name):
        for word in _WORD_BOUNDARY_RE.split(chunk):
            if not word:
                continue
            upper: str = word.upper()
            if upper in COMMON_INITIALISMS:
                out.append(upper)
            else:
                out.append(word[:1].upper() + word[1:])
    return "".join(out)


def _split_camel(chunk: str) -> List[str]:
    words: List[str] = []
    i: int = 0
    n: int = len(chunk)
    while i < n:
        ch: str = chunk[i]
        if ch.isupper():
            matched: int = 0
            for size in range(min(_MAX_INITIALISM, n - i), 1, -1):
                candidate: str = chunk[i:i + size]
                if candidate.upper() != candidate or candidate not in COMMON_INITIALISMS:
                    continue
                if i + size < n and chunk[i + size].islower():
                    continue
                matched = size
                break
            if matched:
                words.append(chunk[i:i + matched])
                i += matched
                continue
            j: int = i + 1
            while j < n and (chunk[j].islower() or chunk[j].isdigit()):
                j += 1
            words.append(chunk[i:j])
            i = j
        else:
            j = i + 1
            while j < n and (chunk[j].islower() or chunk[j].isdigit()):
                j += 1
            words.append(chunk[i:j])
            i = j
    return words


@functools.lru_cache(maxsize=None)
def camel_to_snake(name: str) -> str:
    """
    Convert a CamelCase Go identifier to snake_case.

    A run of capitals that is not an initialism splits into single letters,
    which is what makes ``FTString`` a three-word identifier.

    Examples:
        >>> camel_to_snake("FullType")
        'full_type'
        >>> camel_to_snake("IDValue")
        'id_value'
        >>> camel_to_snake("FTString")
        'f_t_string'
    """
    words: List[str] = []
    for chunk in _NON_IDENT_RE.split(name):
        words.extend(_split_camel(chunk))
    return "_".join(word.lower() for word in words)


# ---------------------------------------------------------------------------
# Column escaping / Go parameter names
# ---------------------------------------------------------------------------


def escape_column_name(name: str) -> str:
    """Wrap *name* in backticks if it is a Spanner reserved keyword."""
    if name.upper() in SQL_RESERVED_KEYWORDS:
        return f"`{name}`"
    return name


def go_param_name(name: str) -> str:
    """
    Lower-case the first word of a Go field name to form a parameter name.

    ``InterleavedID`` → ``interleavedID``; ``FTString`` → ``fTString``;
    ``Type`` → ``typ``.
    """
    words: List[str] = camel_to_snake(name).split("_")
    first: str = words[0] if words else ""
    param: str = first.lower() + name[len(first):]
    return GO_RESERVED_NAMES.get(param.lower(), param)


# ---------------------------------------------------------------------------
# Short names
# ---------------------------------------------------------------------------


ScopeConflict = Union[str, Sequence[object]]


class ShortNamer:
    """
    Synthesises short receiver names (``FullType`` → ``ft``).

    A name that is a Go keyword, a predeclared Go type or the local name of
    an imported package gets the conflict suffix (``InFlight`` → ``ifz``).

    The cache lives on the instance: each generator owns one, so results
    are stable inside a run and independent between runs.
    """

    __slots__ = ("_cache", "_suffix")

    def __init__(self, suffix: str = NAME_CONFLICT_SUFFIX) -> None:
        self._cache: Dict[str, str] = dict(DEFAULT_SHORT_NAMES)
        self._suffix: str = suffix

    def __call__(self, typ: str, *scope_conflicts: ScopeConflict) -> str:
        return self.shortname(typ, *scope_conflicts)

    def shortname(self, typ: str, *scope_conflicts: ScopeConflict) -> str:
        value: Optional[str] = self._cache.get(typ)
        if value is None:
            letters: List[str] = [
                word[:1]
                for word in camel_to_snake(typ).split("_")
                if word and word != "id"
            ]
            value = "".join(letters)
            self._cache[typ] = value

        for conflict in scope_conflicts:
            if isinstance(conflict, str):
                if conflict == value:
                    value += self._suffix
                continue
            for field in conflict:
                if getattr(field, "name", None) == value:
                    value += self._suffix

        if value in GO_RESERVED_NAMES or value in CONFLICTED_SHORT_NAMES:
            value += self._suffix
        return value


# ---------------------------------------------------------------------------
# Misc helpers
# ---------------------------------------------------------------------------


def module_basename(path: str, max_ext: int = 3) -> str:
    """
    Module name for a template path: the basename with up to *max_ext*
    extensions removed (``tpl/index.go.j2`` → ``index``).
    """
    name: str = os.path.basename(path)
    for _ in range(max_ext):
        stem, ext = os.path.splitext(name)
        if not ext:
            break
        name = stem
    return name


def flatten_names(items: Iterable[object]) -> FrozenSet[str]:
    """Collect names from a mix of strings and field lists."""
    names: set = set()
    for item in items:
        if item is None:
            continue
        if isinstance(item, str):
            names.add(item)
            continue
        for field in item:
            names.add(getattr(field, "name"))
    return frozenset(names)


class Timer:
    """
    Context-manager timer for profiling pipeline phases.

    Usage:
        with Timer("load schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "COMMON_INITIALISMS",
    "CONFLICTED_SHORT_NAMES",
    "DEFAULT_SHORT_NAMES",
    "GO_RESERVED_NAMES",
    "KNOWN_GO_TYPES",
    "NAME_CONFLICT_SUFFIX",
    "SQL_RESERVED_KEYWORDS",
    "ShortNamer",
    "Timer",
    "camel_to_snake",
    "escape_column_name",
    "flatten_names",
    "go_param_name",
    "module_basename",
    "snake_to_camel",
]

logger.debug("yogen.utils loaded.")
