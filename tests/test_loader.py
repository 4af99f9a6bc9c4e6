"""
tests/test_loader.py
Unit tests for yogen.loader.TypeLoader.

Tests cover:
- The canonical schemas (simple, MAX length, interleaved, foreign key,
  reserved column name, arrays)
- Index partitions, ordering and function names
- Custom type overlay and its validation errors
- ignore_tables / ignore_fields
"""

from __future__ import annotations

import logging

import pytest

from yogen.config import CustomTypeTable, CustomTypesConfig
from yogen.errors import SchemaStructureError
from yogen.inflector import InflectionRule, Inflector
from yogen.models import ArrayFieldType, Schema
from yogen.packages import PackageRegistry
from yogen.utils import escape_column_name

from conftest import (
    ARRAY_DDL,
    FOREIGN_KEY_DDL,
    INTERLEAVED_DDL,
    MAX_LENGTH_DDL,
    RESERVED_DDL,
    SIMPLE_DDL,
    load_schema,
)


def _custom(table: str, **columns: str) -> CustomTypesConfig:
    return CustomTypesConfig(tables=[CustomTypeTable(name=table, columns=columns)])


# ===========================================================================
class TestCanonicalSchemas:
    """The six reference scenarios."""

    def test_simple(self) -> None:
        schema = load_schema(SIMPLE_DDL)
        assert [t.name for t in schema.types] == ["Simple"]
        typ = schema.types[0]
        assert [(f.name, f.len) for f in typ.fields] == [("ID", -1), ("Value", 32)]
        assert [f.type.type for f in typ.fields] == ["int64", "string"]
        assert [f.name for f in typ.primary_key_fields] == ["ID"]

        simple_index, simple_index2 = typ.indexes
        assert simple_index.index_name == "SimpleIndex"
        assert not simple_index.is_unique
        assert [f.name for f in simple_index.fields] == ["Value"]
        assert simple_index.func_name == "SimplesBySimpleIndex"

        assert simple_index2.is_unique
        assert [f.name for f in simple_index2.fields] == ["ID", "Value"]
        assert simple_index2.func_name == "SimpleBySimpleIndex2"

    def test_max_length(self) -> None:
        typ = load_schema(MAX_LENGTH_DDL).types[0]
        assert typ.name == "MaxLength"
        assert [(f.len, f.spanner_data_type) for f in typ.fields] == [
            (-1, "STRING(MAX)"),
            (-1, "BYTES(MAX)"),
        ]
        assert [f.type.type for f in typ.fields] == ["string", "[]byte"]

    def test_interleaved(self) -> None:
        schema = load_schema(INTERLEAVED_DDL)
        child = schema.type_by_table("Interleaved")
        parent = schema.type_by_table("Parent")
        assert child is not None and parent is not None
        assert child.parent_table_name == "Parent"
        assert parent.parent_table_name == ""
        assert [f.name for f in child.primary_key_fields] == ["ID", "InterleavedID"]
        assert [f.name for f in child.fields] == ["InterleavedID", "ID", "Value"]

    def test_foreign_key_is_tolerated(self) -> None:
        schema = load_schema(FOREIGN_KEY_DDL)
        assert [t.name for t in schema.types] == ["ForeignItem", "Item"]
        foreign = schema.types[0]
        assert [f.column_name for f in foreign.fields] == ["ID", "ItemID"]
        assert foreign.indexes == []

    def test_reserved_column_name(self) -> None:
        typ = load_schema(RESERVED_DDL).types[0]
        assert typ.name == "T"
        assert typ.fields[0].column_name == "From"
        assert escape_column_name(typ.fields[0].column_name) == "`From`"
        assert escape_column_name("Value") == "Value"

    def test_arrays(self) -> None:
        typ = load_schema(ARRAY_DDL).types[0]
        tags = typ.field_by_column("Tags")
        labels = typ.field_by_column("Labels")
        assert tags is not None and labels is not None
        assert isinstance(tags.type, ArrayFieldType) and not tags.type.nullable
        assert isinstance(labels.type, ArrayFieldType) and labels.type.nullable
        assert tags.type.get_null_value(PackageRegistry()) == "[]string{}"
        assert labels.type.get_null_value(PackageRegistry()) == "nil"


# ===========================================================================
class TestIndexes:
    """Secondary index loading."""

    def test_sorted_by_index_name(self, full_schema: Schema) -> None:
        assert [ix.index_name for ix in full_schema.types[0].indexes] == [
            "FullTypesByFTString",
            "FullTypesByInTimestampNull",
            "FullTypesByIntDate",
            "FullTypesByIntTimestamp",
            "FullTypesByTimestamp",
        ]

    def test_func_names(self, full_schema: Schema) -> None:
        names = {ix.index_name: ix.func_name for ix in full_schema.types[0].indexes}
        assert names["FullTypesByFTString"] == "FullTypeByFullTypesByFTString"
        assert names["FullTypesByIntDate"] == "FullTypesByFullTypesByIntDate"

    def test_legacy_func_names(self, full_schema: Schema) -> None:
        names = {ix.index_name: ix.legacy_func_name for ix in full_schema.types[0].indexes}
        assert names["FullTypesByFTString"] == "FullTypeByFTString"
        assert names["FullTypesByIntDate"] == "FullTypesByFTIntFTDate"

    def test_nullable_fields(self, full_schema: Schema) -> None:
        by_name = {ix.index_name: ix for ix in full_schema.types[0].indexes}
        assert [f.name for f in by_name["FullTypesByInTimestampNull"].nullable_fields] == [
            "FTTimestampNull"
        ]
        assert by_name["FullTypesByIntDate"].nullable_fields == []

    def test_storing_fields(self) -> None:
        ddl = SIMPLE_DDL + "CREATE INDEX SimpleStoring ON Simple(Value) STORING (Id);\n"
        typ = load_schema(ddl).types[0]
        index = next(ix for ix in typ.indexes if ix.index_name == "SimpleStoring")
        assert [f.name for f in index.fields] == ["Value"]
        assert [f.name for f in index.storing_fields] == ["ID"]
        assert index.legacy_func_name == "SimplesByIDValue"

    def test_index_table_name(self, full_schema: Schema) -> None:
        assert {ix.table_name for ix in full_schema.types[0].indexes} == {"FullTypes"}

    def test_user_inflection_rule_changes_names(self) -> None:
        inflector = Inflector([InflectionRule("simple", "simpletons")])
        typ = load_schema(SIMPLE_DDL, inflector=inflector).types[0]
        assert typ.indexes[0].func_name == "SimpletonsBySimpleIndex"


# ===========================================================================
class TestCustomTypes:
    """Custom Go types from configuration."""

    def test_overlay(self) -> None:
        typ = load_schema(SIMPLE_DDL, config=_custom("Simple", Id="uint64")).types[0]
        field = typ.field_by_column("Id")
        assert field is not None
        assert field.custom_type == "uint64"
        assert field.type.type == "int64"

    def test_unknown_table(self) -> None:
        with pytest.raises(SchemaStructureError, match="unknown custom type table Nope"):
            load_schema(SIMPLE_DDL, config=_custom("Nope", Id="uint64"))

    def test_unknown_column(self) -> None:
        with pytest.raises(SchemaStructureError, match="unknown custom type column Nope in the table Simple"):
            load_schema(SIMPLE_DDL, config=_custom("Simple", Nope="uint64"))


# ===========================================================================
class TestIgnore:
    """ignore_tables and ignore_fields."""

    def test_ignore_tables(self) -> None:
        schema = load_schema(INTERLEAVED_DDL, ignore_tables=["Parent"])
        assert [t.table_name for t in schema.types] == ["Interleaved"]

    def test_ignore_fields(self) -> None:
        typ = load_schema(SIMPLE_DDL, ignore_fields=["Value"]).types[0]
        assert [f.column_name for f in typ.fields] == ["Id"]
        simple_index = next(ix for ix in typ.indexes if ix.index_name == "SimpleIndex")
        assert simple_index.fields == []

    def test_ignoring_primary_key_is_an_error(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="yogen.loader"):
            with pytest.raises(SchemaStructureError, match="primary key column is not found"):
                load_schema(SIMPLE_DDL, ignore_fields=["Id"])
        assert "listed in ignore_fields" in caplog.text
