# File: yogen/sources.py
"""
yogen - Schema Sources
=======================
A ``SchemaSource`` answers four questions about a Spanner database:

    table_list()                    tables, sorted by name
    column_list(table)              columns, in ordinal order
    index_list(table)               secondary indexes (no PRIMARY_KEY)
    index_column_list(table, idx)   key and storing columns of an index

Two implementations return identical rows for the same schema:

``InformationSchemaSource``
    Queries ``INFORMATION_SCHEMA`` through a ``google.cloud.spanner``
    ``Database`` handle.

``SchemaParserSource``
    Parses a DDL file with ``yogen.ddl``.

In both, storing columns come first in ``index_column_list`` with
``seq_no == 0``, followed by the key columns numbered from 1.
"""

from __future__ import annotations

import abc
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from google.api_core import exceptions as gapi_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import spanner
from google.cloud.spanner_v1 import param_types

from yogen.ddl import (
    AlterTable,
    ChangeStreamStatement,
    CreateIndex,
    CreateTable,
    OtherStatement,
    parse_ddl,
)
from yogen.errors import SchemaSourceError

logger: logging.Logger = logging.getLogger("yogen.sources")

PRIMARY_KEY_INDEX: str = "PRIMARY_KEY"

# ---------------------------------------------------------------------------
# Row records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SpannerTable:
    table_name: str
    parent_table_name: str = ""


@dataclass(frozen=True, slots=True)
class SpannerColumn:
    field_ordinal: int
    column_name: str
    data_type: str
    not_null: bool = False
    is_primary_key: bool = False
    is_generated: bool = False


@dataclass(frozen=True, slots=True)
class SpannerIndex:
    index_name: str
    is_unique: bool = False
    is_primary: bool = False


@dataclass(frozen=True, slots=True)
class SpannerIndexColumn:
    seq_no: int
    column_name: str
    storing: bool = False


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class SchemaSource(abc.ABC):
    """Uniform, read-only view of a Spanner schema."""

    @abc.abstractmethod
    def table_list(self) -> List[SpannerTable]:
        ...

    @abc.abstractmethod
    def column_list(self, table: str) -> List[SpannerColumn]:
        ...

    @abc.abstractmethod
    def index_list(self, table: str) -> List[SpannerIndex]:
        ...

    @abc.abstractmethod
    def index_column_list(self, table: str, index: str) -> List[SpannerIndexColumn]:
        ...


# ---------------------------------------------------------------------------
# INFORMATION_SCHEMA
# ---------------------------------------------------------------------------

_TABLE_LIST_SQL: str = (
    "SELECT "
    "TABLE_NAME, PARENT_TABLE_NAME "
    "FROM INFORMATION_SCHEMA.TABLES "
    'WHERE TABLE_SCHEMA = "" '
    "ORDER BY TABLE_NAME"
)

_COLUMN_LIST_SQL: str = (
    "SELECT "
    "c.COLUMN_NAME, c.ORDINAL_POSITION, c.IS_NULLABLE, c.SPANNER_TYPE, "
    "EXISTS ("
    "  SELECT 1 FROM INFORMATION_SCHEMA.INDEX_COLUMNS ic "
    '  WHERE ic.TABLE_SCHEMA = "" and ic.TABLE_NAME = c.TABLE_NAME '
    "  AND ic.COLUMN_NAME = c.COLUMN_NAME"
    '  AND ic.INDEX_NAME = "PRIMARY_KEY" '
    ") IS_PRIMARY_KEY, "
    'IS_GENERATED = "ALWAYS" AS IS_GENERATED '
    "FROM INFORMATION_SCHEMA.COLUMNS c "
    'WHERE c.TABLE_SCHEMA = "" AND c.TABLE_NAME = @table '
    "ORDER BY c.ORDINAL_POSITION"
)

_INDEX_LIST_SQL: str = (
    "SELECT "
    "INDEX_NAME, IS_UNIQUE "
    "FROM INFORMATION_SCHEMA.INDEXES "
    'WHERE TABLE_SCHEMA = "" '
    'AND INDEX_NAME != "PRIMARY_KEY" '
    "AND TABLE_NAME = @table "
    "AND SPANNER_IS_MANAGED = FALSE "
)

_INDEX_COLUMN_LIST_SQL: str = (
    "SELECT "
    "ORDINAL_POSITION, COLUMN_NAME "
    "FROM INFORMATION_SCHEMA.INDEX_COLUMNS "
    'WHERE TABLE_SCHEMA = "" AND INDEX_NAME = @index AND TABLE_NAME = @table '
    "ORDER BY ORDINAL_POSITION"
)


class InformationSchemaSource(SchemaSource):
    """
    Reads the schema from a live database.

    *database* is a ``google.cloud.spanner_v1.database.Database`` (or any
    object whose ``snapshot()`` context manager offers ``execute_sql``).
    """

    def __init__(self, database: Any) -> None:
        self.database: Any = database

    @classmethod
    def from_ids(cls, project: str, instance: str, database: str) -> "InformationSchemaSource":
        """Open *project*/*instance*/*database* with default credentials."""
        try:
            client = spanner.Client(project=project)
            db = client.instance(instance).database(database)
        except (gapi_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise SchemaSourceError(
                f"failed to open database projects/{project}/instances/{instance}/databases/{database}: {exc}"
            ) from exc
        logger.info("Connected to %s/%s/%s.", project, instance, database)
        return cls(db)

    def _query(self, name: str, sql: str, params: Optional[Dict[str, str]] = None) -> List[Sequence[Any]]:
        types: Optional[Dict[str, Any]] = None
        if params:
            types = {key: param_types.STRING for key in params}
        try:
            with self.database.snapshot() as snapshot:
                rows: List[Sequence[Any]] = list(
                    snapshot.execute_sql(sql, params=params, param_types=types)
                )
        except gapi_exceptions.GoogleAPIError as exc:
            raise SchemaSourceError(f"{name} query failed: {exc}") from exc
        logger.debug("%s%s returned %d row(s).", name, params or "", len(rows))
        return rows

    def table_list(self) -> List[SpannerTable]:
        return [
            SpannerTable(table_name=row[0], parent_table_name=row[1] or "")
            for row in self._query("TableList", _TABLE_LIST_SQL)
        ]

    def column_list(self, table: str) -> List[SpannerColumn]:
        columns: List[SpannerColumn] = []
        for row in self._query("ColumnList", _COLUMN_LIST_SQL, {"table": table}):
            name, ordinal, is_nullable, data_type, is_pk, is_generated = row
            columns.append(
                SpannerColumn(
                    field_ordinal=int(ordinal or 0),
                    column_name=name,
                    data_type=data_type,
                    not_null=is_nullable == "NO",
                    is_primary_key=bool(is_pk),
                    is_generated=bool(is_generated),
                )
            )
        return columns

    def index_list(self, table: str) -> List[SpannerIndex]:
        return [
            SpannerIndex(index_name=row[0], is_unique=bool(row[1]))
            for row in self._query("IndexList", _INDEX_LIST_SQL, {"table": table})
        ]

    def index_column_list(self, table: str, index: str) -> List[SpannerIndexColumn]:
        columns: List[SpannerIndexColumn] = []
        rows = self._query("IndexColumnList", _INDEX_COLUMN_LIST_SQL, {"table": table, "index": index})
        for ordinal, name in rows:
            if ordinal is None:
                columns.append(SpannerIndexColumn(seq_no=0, column_name=name, storing=True))
            else:
                columns.append(SpannerIndexColumn(seq_no=int(ordinal), column_name=name))

        # The emulator returns NULL-ordinal rows in arbitrary order.
        if os.environ.get("SPANNER_EMULATOR_HOST"):
            storing = sorted((c for c in columns if c.storing), key=lambda c: c.column_name)
            columns = storing + [c for c in columns if not c.storing]
        return columns


# ---------------------------------------------------------------------------
# DDL file
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _TableEntry:
    create_table: Optional[CreateTable] = None
    create_indexes: List[CreateIndex] = field(default_factory=list)


class SchemaParserSource(SchemaSource):
    """
    Reads the schema from DDL text.

    ``ALTER TABLE ... ADD FOREIGN KEY`` is accepted and discarded; any
    other ``ALTER TABLE`` raises ``SchemaSourceError`` unless
    *ignore_unsupported_statements* is set, in which case it is logged
    and skipped.  Change streams and statement kinds that do not affect
    tables (views, roles, drops...) are ignored.
    """

    def __init__(self, ddl: str, ignore_unsupported_statements: bool = False) -> None:
        self._tables: Dict[str, _TableEntry] = {}
        self._load(parse_ddl(ddl), ignore_unsupported_statements)

    @classmethod
    def from_file(cls, path: str, ignore_unsupported_statements: bool = False) -> "SchemaParserSource":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                text: str = fh.read()
        except OSError as exc:
            raise SchemaSourceError(f"failed to read DDL file {path}: {exc}") from exc
        logger.info("Loading schema from DDL file %s.", path)
        return cls(text, ignore_unsupported_statements)

    def _entry(self, name: str) -> _TableEntry:
        return self._tables.setdefault(name, _TableEntry())

    def _load(self, statements: Iterable[object], ignore_unsupported: bool) -> None:
        for stmt in statements:
            if isinstance(stmt, CreateTable):
                self._entry(stmt.name.simple_name()).create_table = stmt
            elif isinstance(stmt, CreateIndex):
                self._entry(stmt.table_name.simple_name()).create_indexes.append(stmt)
            elif isinstance(stmt, AlterTable):
                if stmt.is_add_foreign_key:
                    continue
                if ignore_unsupported:
                    logger.warning("Skipping unsupported statement: %s", stmt.sql)
                    continue
                raise SchemaSourceError(f"unknown statement is specified: {stmt.sql}")
            elif isinstance(stmt, (ChangeStreamStatement, OtherStatement)):
                logger.debug("Ignoring statement: %s", stmt.sql)

        for name, entry in self._tables.items():
            if entry.create_table is None:
                raise SchemaSourceError(f"index defined on unknown table: {name}")

    def _table(self, name: str) -> Optional[CreateTable]:
        entry: Optional[_TableEntry] = self._tables.get(name)
        return entry.create_table if entry is not None else None

    def table_list(self) -> List[SpannerTable]:
        tables: List[SpannerTable] = []
        for name, entry in self._tables.items():
            parent: str = ""
            interleave = entry.create_table.interleave
            if interleave is not None:
                parent = interleave.parent.simple_name()
            tables.append(SpannerTable(table_name=name, parent_table_name=parent))
        tables.sort(key=lambda t: t.table_name)
        return tables

    def column_list(self, table: str) -> List[SpannerColumn]:
        ct: Optional[CreateTable] = self._table(table)
        if ct is None:
            return []
        pk_names = {key.name for key in ct.primary_key}
        return [
            SpannerColumn(
                field_ordinal=i + 1,
                column_name=col.name,
                data_type=col.type,
                not_null=col.not_null,
                is_primary_key=col.name in pk_names,
                is_generated=col.generated_expr is not None,
            )
            for i, col in enumerate(ct.columns)
        ]

    def index_list(self, table: str) -> List[SpannerIndex]:
        entry: Optional[_TableEntry] = self._tables.get(table)
        if entry is None:
            return []
        return [
            SpannerIndex(index_name=ix.name.simple_name(), is_unique=ix.unique)
            for ix in entry.create_indexes
        ]

    def index_column_list(self, table: str, index: str) -> List[SpannerIndexColumn]:
        if index == PRIMARY_KEY_INDEX:
            ct: Optional[CreateTable] = self._table(table)
            if ct is None:
                return []
            return [
                SpannerIndexColumn(seq_no=i + 1, column_name=key.name)
                for i, key in enumerate(ct.primary_key)
            ]

        entry: Optional[_TableEntry] = self._tables.get(table)
        if entry is None:
            return []
        for ix in entry.create_indexes:
            if ix.name.simple_name() != index:
                continue
            columns: List[SpannerIndexColumn] = [
                SpannerIndexColumn(seq_no=0, column_name=name, storing=True)
                for name in ix.storing
            ]
            columns.extend(
                SpannerIndexColumn(seq_no=i + 1, column_name=key.name)
                for i, key in enumerate(ix.keys)
            )
            return columns
        return []


__all__: List[str] = [
    "InformationSchemaSource",
    "PRIMARY_KEY_INDEX",
    "SchemaParserSource",
    "SchemaSource",
    "SpannerColumn",
    "SpannerIndex",
    "SpannerIndexColumn",
    "SpannerTable",
]

logger.debug("yogen.sources loaded.")
