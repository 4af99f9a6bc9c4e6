# File: yogen/models.py
"""
yogen - Intermediate Representation
====================================
Value types produced by the schema loader and consumed by the emission
engine:

    Schema ─┬─ Type (one per table)
            │    ├── Field (one per kept column)
            │    └── Index (one per secondary index, sorted by IndexName)
            └─ ...

Go type descriptors (``PlainFieldType`` / ``ArrayFieldType``) and the
``Package`` they come from also live here.  Descriptors never render a
package-qualified name on their own: they ask a ``PackageResolver`` (in
practice the per-file ``PackageRegistry``) for the local name, so every
reference lands in that file's import list.

Indexes do not hold a pointer back to their ``Type``; they carry the
owning ``table_name`` instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("yogen.models")

GO_NIL: str = "nil"


# ---------------------------------------------------------------------------
# Go packages
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Package:
    """
    A Go import path with an optional package name and alias.

    ``name`` is only needed when the package name differs from the last
    path segment; ``alias`` forces an explicit import alias.
    """

    path: str
    name: str = ""
    alias: str = ""

    def local_name(self) -> str:
        if self.alias:
            return self.alias
        if self.name:
            return self.name
        return self.path.rsplit("/", 1)[-1]

    def is_standard(self) -> bool:
        """Standard-library packages have no dot in their path."""
        return "." not in self.path

    def __str__(self) -> str:
        if self.alias:
            return f'{self.alias} "{self.path}"'
        return f'"{self.path}"'


BUILTIN_PACKAGE: Package = Package(path="")


class PackageResolver(Protocol):
    def use(self, pkg: Package, name: str) -> str:
        ...


# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PlainFieldType:
    """A scalar Go type, e.g. ``int64`` or ``spanner.NullString``."""

    pkg: Package
    type: str
    null_value: str
    custom_type: str = ""

    def get_type(self, resolver: PackageResolver) -> str:
        if self.custom_type:
            return self.custom_type
        return self.get_original_type(resolver)

    def get_original_type(self, resolver: PackageResolver) -> str:
        return resolver.use(self.pkg, self.type)

    def get_null_value(self, resolver: PackageResolver) -> str:
        return resolver.use(self.pkg, self.null_value)

    def with_custom_type(self, custom_type: str) -> "PlainFieldType":
        return PlainFieldType(self.pkg, self.type, self.null_value, custom_type)


@dataclass(frozen=True, slots=True)
class ArrayFieldType:
    """``[]Element``; the null value is ``nil`` only when the column is nullable."""

    element: "FieldType"
    nullable: bool
    custom_type: str = ""

    def get_type(self, resolver: PackageResolver) -> str:
        if self.custom_type:
            return self.custom_type
        return self.get_original_type(resolver)

    def get_original_type(self, resolver: PackageResolver) -> str:
        return f"[]{self.element.get_type(resolver)}"

    def get_null_value(self, resolver: PackageResolver) -> str:
        if self.nullable:
            return GO_NIL
        return f"{self.get_type(resolver)}{{}}"

    def with_custom_type(self, custom_type: str) -> "ArrayFieldType":
        return ArrayFieldType(self.element, self.nullable, custom_type)


FieldType = Union[PlainFieldType, ArrayFieldType]


# ---------------------------------------------------------------------------
# Schema entities
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Field:
    """One column of a table."""

    name: str
    column_name: str
    type: FieldType
    len: int = -1
    spanner_data_type: str = ""
    is_not_null: bool = False
    is_primary_key: bool = False
    is_generated: bool = False

    @property
    def custom_type(self) -> str:
        return self.type.custom_type


@dataclass(slots=True)
class Index:
    """A secondary index of ``table_name``."""

    index_name: str
    name: str
    table_name: str
    func_name: str = ""
    legacy_func_name: str = ""
    is_unique: bool = False
    is_primary: bool = False
    fields: List[Field] = field(default_factory=list)
    storing_fields: List[Field] = field(default_factory=list)
    nullable_fields: List[Field] = field(default_factory=list)


@dataclass(slots=True)
class Type:
    """A Go type generated from one Spanner table."""

    name: str
    table_name: str
    parent_table_name: str = ""
    primary_key_fields: List[Field] = field(default_factory=list)
    fields: List[Field] = field(default_factory=list)
    indexes: List[Index] = field(default_factory=list)

    def field_by_column(self, column_name: str) -> Optional[Field]:
        for f in self.fields:
            if f.column_name == column_name:
                return f
        return None


@dataclass(slots=True)
class Schema:
    """All generated types, sorted by ``Type.name``."""

    types: List[Type] = field(default_factory=list)

    def type_by_table(self, table_name: str) -> Optional[Type]:
        for t in self.types:
            if t.table_name == table_name:
                return t
        return None


__all__: List[str] = [
    "ArrayFieldType",
    "BUILTIN_PACKAGE",
    "Field",
    "FieldType",
    "GO_NIL",
    "Index",
    "Package",
    "PackageResolver",
    "PlainFieldType",
    "Schema",
    "Type",
]

logger.debug("yogen.models loaded.")
