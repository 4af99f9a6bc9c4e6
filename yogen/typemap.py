# File: yogen/typemap.py
"""
yogen - Spanner → Go Type Mapping
==================================
``parse_spanner_type`` turns a Spanner column type string plus a
nullability flag into ``(length, FieldType)``.

    ====================  =======================  ======================
    Spanner               NOT NULL                 nullable
    ====================  =======================  ======================
    BOOL                  bool / false             spanner.NullBool
    STRING(N|MAX)         string / ""              spanner.NullString
    INT64                 int64 / 0                spanner.NullInt64
    FLOAT64               float64 / 0.0            spanner.NullFloat64
    NUMERIC               big.Rat                  spanner.NullNumeric
    BYTES(N|MAX)          []byte / nil             []byte / nil
    TIMESTAMP             time.Time                spanner.NullTime
    DATE                  civil.Date               spanner.NullDate
    JSON                  spanner.NullJSON         spanner.NullJSON
    ARRAY<X>              []map(X)                 []map(X) / nil
    anything else         CamelCase user type      CamelCase user type
    ====================  =======================  ======================

Array elements are always mapped as NOT NULL and never carry a length.
"""

from __future__ import annotations

import logging
import re
from typing import List, Tuple

from yogen.models import (
    BUILTIN_PACKAGE,
    GO_NIL,
    ArrayFieldType,
    FieldType,
    Package,
    PlainFieldType,
)
from yogen.utils import snake_to_camel

logger: logging.Logger = logging.getLogger("yogen.typemap")

# ---------------------------------------------------------------------------
# Go packages referenced by mapped types
# ---------------------------------------------------------------------------

SPANNER_PACKAGE: Package = Package(path="cloud.google.com/go/spanner", name="spanner")
CIVIL_PACKAGE: Package = Package(path="cloud.google.com/go/civil", name="civil")
TIME_PACKAGE: Package = Package(path="time", name="time")
BIG_PACKAGE: Package = Package(path="math/big", name="big")

_LENGTH_RE: re.Pattern[str] = re.compile(r"\(([0-9]+|MAX)\)$")
_ARRAY_RE: re.Pattern[str] = re.compile(r"^ARRAY<(.*)>$")

# base type → (NOT NULL descriptor, nullable descriptor)
_SCALARS = {
    "BOOL": (
        PlainFieldType(BUILTIN_PACKAGE, "bool", "false"),
        PlainFieldType(SPANNER_PACKAGE, "NullBool", "NullBool{}"),
    ),
    "STRING": (
        PlainFieldType(BUILTIN_PACKAGE, "string", '""'),
        PlainFieldType(SPANNER_PACKAGE, "NullString", "NullString{}"),
    ),
    "INT64": (
        PlainFieldType(BUILTIN_PACKAGE, "int64", "0"),
        PlainFieldType(SPANNER_PACKAGE, "NullInt64", "NullInt64{}"),
    ),
    "FLOAT64": (
        PlainFieldType(BUILTIN_PACKAGE, "float64", "0.0"),
        PlainFieldType(SPANNER_PACKAGE, "NullFloat64", "NullFloat64{}"),
    ),
    "NUMERIC": (
        PlainFieldType(BIG_PACKAGE, "Rat", "Rat{}"),
        PlainFieldType(SPANNER_PACKAGE, "NullNumeric", "NullNumeric{}"),
    ),
    "BYTES": (
        PlainFieldType(BUILTIN_PACKAGE, "[]byte", GO_NIL),
        PlainFieldType(BUILTIN_PACKAGE, "[]byte", GO_NIL),
    ),
    "TIMESTAMP": (
        PlainFieldType(TIME_PACKAGE, "Time", "Time{}"),
        PlainFieldType(SPANNER_PACKAGE, "NullTime", "NullTime{}"),
    ),
    "DATE": (
        PlainFieldType(CIVIL_PACKAGE, "Date", "Date{}"),
        PlainFieldType(SPANNER_PACKAGE, "NullDate", "NullDate{}"),
    ),
    "JSON": (
        PlainFieldType(SPANNER_PACKAGE, "NullJSON", "NullJSON{Valid: true}"),
        PlainFieldType(SPANNER_PACKAGE, "NullJSON", "NullJSON{}"),
    ),
}


def strip_length(data_type: str) -> Tuple[str, int]:
    """
    Split a trailing ``(N)`` / ``(MAX)`` off *data_type*.

    Returns the base type and the length (``-1`` for MAX or no length).
    """
    match = _LENGTH_RE.search(data_type)
    if match is None:
        return data_type, -1
    size: str = match.group(1)
    base: str = data_type[: match.start()]
    if size == "MAX":
        return base, -1
    return base, int(size)


def parse_spanner_type(data_type: str, nullable: bool) -> Tuple[int, FieldType]:
    """
    Map a Spanner type string to ``(length, FieldType)``.

    Examples:
        >>> parse_spanner_type("STRING(32)", False)
        (32, PlainFieldType(... type='string', null_value='""' ...))
        >>> parse_spanner_type("ARRAY<STRING(32)>", True)[1].nullable
        True
    """
    base, length = strip_length(data_type.strip())

    array = _ARRAY_RE.match(base)
    if array is not None:
        _, element = parse_spanner_type(array.group(1), False)
        return length, ArrayFieldType(element=element, nullable=nullable)

    scalar = _SCALARS.get(base)
    if scalar is not None:
        return length, scalar[1] if nullable else scalar[0]

    name: str = snake_to_camel(base)
    logger.debug("Unknown Spanner type %r mapped to user type %s.", data_type, name)
    return length, PlainFieldType(BUILTIN_PACKAGE, name, f"{name}{{}}")


__all__: List[str] = [
    "BIG_PACKAGE",
    "CIVIL_PACKAGE",
    "SPANNER_PACKAGE",
    "TIME_PACKAGE",
    "parse_spanner_type",
    "strip_length",
]

logger.debug("yogen.typemap loaded.")
