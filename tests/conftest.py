"""
tests/conftest.py
Shared fixtures for the yogen test suite.

DDL texts for the canonical schemas, the INFORMATION_SCHEMA rows a live
database reports for them, a fake Spanner ``Database`` that answers the
four catalog queries from those rows, and generator helpers that write
into ``tmp_path``.  No network access and no Go toolchain are needed:
generator tests use the identity formatter.
"""

from __future__ import annotations

import logging
import pathlib
import textwrap
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import pytest

from yogen.config import GeneratorOptions
from yogen.formatter import identity_formatter
from yogen.generator import Generator
from yogen.loader import TypeLoader
from yogen.models import Schema
from yogen.modules import decide_modules
from yogen.sources import SchemaParserSource


# ---------------------------------------------------------------------------
# DDL fixtures
# ---------------------------------------------------------------------------

SIMPLE_DDL: str = textwrap.dedent("""\
    CREATE TABLE Simple (
      Id INT64 NOT NULL,
      Value STRING(32) NOT NULL,
    ) PRIMARY KEY(Id);
    CREATE INDEX SimpleIndex ON Simple(Value);
    CREATE UNIQUE INDEX SimpleIndex2 ON Simple(Id, Value);
""")

MAX_LENGTH_DDL: str = textwrap.dedent("""\
    CREATE TABLE MaxLengths (
      MaxString STRING(MAX) NOT NULL,
      MaxBytes BYTES(MAX) NOT NULL,
    ) PRIMARY KEY(MaxString);
""")

INTERLEAVED_DDL: str = textwrap.dedent("""\
    CREATE TABLE Parent(Id INT64 NOT NULL) PRIMARY KEY(Id);
    CREATE TABLE Interleaved(
      InterleavedId INT64 NOT NULL,
      Id INT64 NOT NULL,
      Value INT64 NOT NULL,
    ) PRIMARY KEY(Id, InterleavedId),
      INTERLEAVE IN PARENT Parent;
""")

FOREIGN_KEY_DDL: str = textwrap.dedent("""\
    CREATE TABLE Items(ID INT64 NOT NULL) PRIMARY KEY(ID);
    CREATE TABLE ForeignItems(
      ID INT64 NOT NULL,
      ItemID INT64 NOT NULL,
      CONSTRAINT FK FOREIGN KEY (ItemID) REFERENCES Items(ID),
    ) PRIMARY KEY(ID);
""")

RESERVED_DDL: str = "CREATE TABLE T (`From` STRING(32) NOT NULL) PRIMARY KEY(`From`);\n"

ARRAY_DDL: str = textwrap.dedent("""\
    CREATE TABLE Arrays (
      Id INT64 NOT NULL,
      Tags ARRAY<STRING(32)> NOT NULL,
      Labels ARRAY<STRING(32)>,
    ) PRIMARY KEY(Id);
""")

FULL_TYPES_DDL: str = textwrap.dedent("""\
    -- every scalar and array type, nullable and not
    CREATE TABLE FullTypes (
      PKey STRING(32) NOT NULL,
      FTString STRING(32) NOT NULL,
      FTStringNull STRING(32),
      FTBool BOOL NOT NULL,
      FTBoolNull BOOL,
      FTBytes BYTES(32) NOT NULL,
      FTBytesNull BYTES(32),
      FTTimestamp TIMESTAMP NOT NULL,
      FTTimestampNull TIMESTAMP,
      FTInt INT64 NOT NULL,
      FTIntNull INT64,
      FTFloat FLOAT64 NOT NULL,
      FTFloatNull FLOAT64,
      FTDate DATE NOT NULL,
      FTDateNull DATE,
      FTArrayStringNull ARRAY<STRING(32)>,
      FTArrayString ARRAY<STRING(32)> NOT NULL,
      FTArrayBoolNull ARRAY<BOOL>,
      FTArrayBool ARRAY<BOOL> NOT NULL,
      FTArrayBytesNull ARRAY<BYTES(32)>,
      FTArrayBytes ARRAY<BYTES(32)> NOT NULL,
      FTArrayTimestampNull ARRAY<TIMESTAMP>,
      FTArrayTimestamp ARRAY<TIMESTAMP> NOT NULL,
      FTArrayIntNull ARRAY<INT64>,
      FTArrayInt ARRAY<INT64> NOT NULL,
      FTArrayFloatNull ARRAY<FLOAT64>,
      FTArrayFloat ARRAY<FLOAT64> NOT NULL,
      FTArrayDateNull ARRAY<DATE>,
      FTArrayDate ARRAY<DATE> NOT NULL,
    ) PRIMARY KEY(PKey);

    CREATE UNIQUE INDEX FullTypesByFTString ON FullTypes(FTString);
    CREATE INDEX FullTypesByIntDate ON FullTypes(FTInt, FTDate);
    CREATE INDEX FullTypesByIntTimestamp ON FullTypes(FTInt, FTTimestamp);
    CREATE INDEX FullTypesByInTimestampNull ON FullTypes(FTInt, FTTimestampNull);
    CREATE INDEX FullTypesByTimestamp ON FullTypes(FTTimestamp);
""")

STORING_DDL: str = textwrap.dedent("""\
    CREATE TABLE Stored (
      Id INT64 NOT NULL,
      Name STRING(64) NOT NULL,
      Note STRING(MAX),
      Score FLOAT64,
      NameUpper STRING(64) AS (UPPER(Name)) STORED,
    ) PRIMARY KEY(Id);
    CREATE INDEX StoredByName ON Stored(Name) STORING (Score, Note);
""")

PARITY_DDLS: Dict[str, str] = {
    "simple": SIMPLE_DDL,
    "max_length": MAX_LENGTH_DDL,
    "interleaved": INTERLEAVED_DDL,
    "foreign_key": FOREIGN_KEY_DDL,
    "reserved": RESERVED_DDL,
    "storing": STORING_DDL,
}


@pytest.fixture(autouse=True)
def _reset_yogen_logger() -> Iterator[None]:
    """Undo the handler the CLI installs so caplog keeps working."""
    yield
    root = logging.getLogger("yogen")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture()
def ddl_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """FULL_TYPES_DDL written to a temporary schema.sql."""
    path = tmp_path / "schema.sql"
    path.write_text(FULL_TYPES_DDL, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Fake Spanner database
# ---------------------------------------------------------------------------

CatalogTable = Tuple[str, Optional[str]]
CatalogColumn = Tuple[str, str, int, str, str, str]
CatalogIndex = Tuple[str, str, bool, bool]
CatalogIndexColumn = Tuple[str, str, Optional[int], str]


@dataclass
class Catalog:
    """
    INFORMATION_SCHEMA contents, one tuple per catalog row.

    tables:        (TABLE_NAME, PARENT_TABLE_NAME)
    columns:       (TABLE_NAME, COLUMN_NAME, ORDINAL_POSITION, IS_NULLABLE,
                    SPANNER_TYPE, IS_GENERATED)
    indexes:       (TABLE_NAME, INDEX_NAME, IS_UNIQUE, SPANNER_IS_MANAGED)
    index_columns: (TABLE_NAME, INDEX_NAME, ORDINAL_POSITION, COLUMN_NAME);
                   STORING columns have a NULL ORDINAL_POSITION
    """

    tables: List[CatalogTable] = field(default_factory=list)
    columns: List[CatalogColumn] = field(default_factory=list)
    indexes: List[CatalogIndex] = field(default_factory=list)
    index_columns: List[CatalogIndexColumn] = field(default_factory=list)


def _col(table: str, name: str, ordinal: int, spanner_type: str, nullable: bool = False) -> CatalogColumn:
    return (table, name, ordinal, "YES" if nullable else "NO", spanner_type, "NEVER")


def _pk(table: str, unique: bool = True) -> CatalogIndex:
    return (table, "PRIMARY_KEY", unique, False)


# What a live database reports for each of the DDL texts in PARITY_DDLS.
CATALOGS: Dict[str, Catalog] = {
    "simple": Catalog(
        tables=[("Simple", None)],
        columns=[
            _col("Simple", "Id", 1, "INT64"),
            _col("Simple", "Value", 2, "STRING(32)"),
        ],
        indexes=[
            _pk("Simple"),
            ("Simple", "SimpleIndex", False, False),
            ("Simple", "SimpleIndex2", True, False),
        ],
        index_columns=[
            ("Simple", "PRIMARY_KEY", 1, "Id"),
            ("Simple", "SimpleIndex", 1, "Value"),
            ("Simple", "SimpleIndex2", 1, "Id"),
            ("Simple", "SimpleIndex2", 2, "Value"),
        ],
    ),
    "max_length": Catalog(
        tables=[("MaxLengths", None)],
        columns=[
            _col("MaxLengths", "MaxString", 1, "STRING(MAX)"),
            _col("MaxLengths", "MaxBytes", 2, "BYTES(MAX)"),
        ],
        indexes=[_pk("MaxLengths")],
        index_columns=[("MaxLengths", "PRIMARY_KEY", 1, "MaxString")],
    ),
    "interleaved": Catalog(
        tables=[("Interleaved", "Parent"), ("Parent", None)],
        columns=[
            _col("Parent", "Id", 1, "INT64"),
            _col("Interleaved", "InterleavedId", 1, "INT64"),
            _col("Interleaved", "Id", 2, "INT64"),
            _col("Interleaved", "Value", 3, "INT64"),
        ],
        indexes=[_pk("Parent"), _pk("Interleaved")],
        index_columns=[
            ("Parent", "PRIMARY_KEY", 1, "Id"),
            ("Interleaved", "PRIMARY_KEY", 1, "Id"),
            ("Interleaved", "PRIMARY_KEY", 2, "InterleavedId"),
        ],
    ),
    "foreign_key": Catalog(
        tables=[("ForeignItems", None), ("Items", None)],
        columns=[
            _col("Items", "ID", 1, "INT64"),
            _col("ForeignItems", "ID", 1, "INT64"),
            _col("ForeignItems", "ItemID", 2, "INT64"),
        ],
        indexes=[
            _pk("Items"),
            _pk("ForeignItems"),
            # backing index the database creates for the foreign key
            ("ForeignItems", "IDX_ForeignItems_ItemID_N_5F2E5A0E", False, True),
        ],
        index_columns=[
            ("Items", "PRIMARY_KEY", 1, "ID"),
            ("ForeignItems", "PRIMARY_KEY", 1, "ID"),
            ("ForeignItems", "IDX_ForeignItems_ItemID_N_5F2E5A0E", 1, "ItemID"),
        ],
    ),
    "reserved": Catalog(
        tables=[("T", None)],
        columns=[_col("T", "From", 1, "STRING(32)")],
        indexes=[_pk("T")],
        index_columns=[("T", "PRIMARY_KEY", 1, "From")],
    ),
    "storing": Catalog(
        tables=[("Stored", None)],
        columns=[
            _col("Stored", "Id", 1, "INT64"),
            _col("Stored", "Name", 2, "STRING(64)"),
            _col("Stored", "Note", 3, "STRING(MAX)", nullable=True),
            _col("Stored", "Score", 4, "FLOAT64", nullable=True),
            ("Stored", "NameUpper", 5, "YES", "STRING(64)", "ALWAYS"),
        ],
        indexes=[
            _pk("Stored"),
            ("Stored", "StoredByName", False, False),
        ],
        index_columns=[
            ("Stored", "PRIMARY_KEY", 1, "Id"),
            ("Stored", "StoredByName", 1, "Name"),
            ("Stored", "StoredByName", None, "Score"),
            ("Stored", "StoredByName", None, "Note"),
        ],
    ),
}


class FakeSnapshot:
    """Evaluates the four INFORMATION_SCHEMA queries over a ``Catalog``."""

    def __init__(self, catalog: Catalog, calls: List[Tuple[str, Optional[Dict[str, str]]]]) -> None:
        self.catalog = catalog
        self.calls = calls

    def __enter__(self) -> "FakeSnapshot":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def _primary_key_columns(self, table: str) -> List[str]:
        return [
            column for tbl, index, _, column in self.catalog.index_columns
            if tbl == table and index == "PRIMARY_KEY"
        ]

    def execute_sql(
        self,
        sql: str,
        params: Optional[Dict[str, str]] = None,
        param_types: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Sequence[Any]]:
        self.calls.append((sql, params))
        params = params or {}
        if "INFORMATION_SCHEMA.COLUMNS c" in sql:
            table = params["table"]
            pk_columns = self._primary_key_columns(table)
            rows = [
                (name, ordinal, nullable, spanner_type, name in pk_columns, generated == "ALWAYS")
                for tbl, name, ordinal, nullable, spanner_type, generated in sorted(
                    self.catalog.columns, key=lambda c: c[2]
                )
                if tbl == table
            ]
        elif "INFORMATION_SCHEMA.INDEX_COLUMNS" in sql:
            matching = [
                (ordinal, column) for tbl, index, ordinal, column in self.catalog.index_columns
                if tbl == params["table"] and index == params["index"]
            ]
            # NULL sorts first
            rows = sorted(matching, key=lambda r: (r[0] is not None, r[0] or 0))
        elif "INFORMATION_SCHEMA.INDEXES" in sql:
            rows = [
                (index, unique) for tbl, index, unique, managed in self.catalog.indexes
                if tbl == params["table"] and index != "PRIMARY_KEY" and not managed
            ]
        elif "INFORMATION_SCHEMA.TABLES" in sql:
            rows = sorted(self.catalog.tables, key=lambda t: t[0])
        else:
            raise AssertionError(f"unexpected query: {sql}")
        return iter(rows)


class FakeDatabase:
    """Stands in for ``google.cloud.spanner_v1.database.Database``."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.calls: List[Tuple[str, Optional[Dict[str, str]]]] = []

    def snapshot(self) -> FakeSnapshot:
        return FakeSnapshot(self.catalog, self.calls)


@pytest.fixture()
def fake_database() -> FakeDatabase:
    return FakeDatabase(CATALOGS["simple"])


# ---------------------------------------------------------------------------
# Schema / generator helpers
# ---------------------------------------------------------------------------


def load_schema(ddl: str, **loader_kwargs: Any) -> Schema:
    """Parse *ddl* and run the loader over it."""
    return TypeLoader(SchemaParserSource(ddl), **loader_kwargs).load_schema()


@pytest.fixture()
def full_schema() -> Schema:
    return load_schema(FULL_TYPES_DDL)


@pytest.fixture()
def out_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "models"
    path.mkdir()
    return path


def make_generator(out: pathlib.Path, **option_kwargs: Any) -> Generator:
    """A generator with the default modules and no external formatter."""
    option_kwargs.setdefault("formatter", identity_formatter)
    options = GeneratorOptions(package_name=out.name, base_dir=str(out), **option_kwargs)
    header, globals_, types = decide_modules()
    return Generator(options, header, globals_, types)
