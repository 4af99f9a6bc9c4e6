# File: yogen/loader.py
"""
yogen - Schema Loader
======================
``TypeLoader`` turns the rows of a ``SchemaSource`` into the
intermediate ``Schema``:

1. tables minus ``ignore_tables`` become ``Type``s (singularized names);
2. columns minus ``ignore_fields`` become ``Field``s with mapped Go types
   and the custom-type overlay;
3. ``PRIMARY_KEY`` index columns are resolved, in key order, to fields;
4. secondary indexes get their key / storing / nullable partitions and
   function names, and are attached to their table sorted by index name.

Schema-source errors propagate unchanged; structural problems raise
``SchemaStructureError``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from yogen.config import CustomTypesConfig
from yogen.errors import SchemaStructureError
from yogen.inflector import Inflector
from yogen.models import Field, Index, Schema, Type
from yogen.sources import PRIMARY_KEY_INDEX, SchemaSource, SpannerColumn, SpannerTable
from yogen.typemap import parse_spanner_type
from yogen.utils import Timer, snake_to_camel

logger: logging.Logger = logging.getLogger("yogen.loader")


class TypeLoader:
    """
    Builds a ``Schema`` from a ``SchemaSource``.

    Args:
        source:        Where tables, columns and indexes come from.
        inflector:     Used for type names and non-unique index names.
        config:        Custom Go types per table / column.
        ignore_tables: Table names to skip entirely.
        ignore_fields: Column names to drop from every table.
    """

    def __init__(
        self,
        source: SchemaSource,
        inflector: Optional[Inflector] = None,
        config: Optional[CustomTypesConfig] = None,
        ignore_tables: Iterable[str] = (),
        ignore_fields: Iterable[str] = (),
    ) -> None:
        self.source: SchemaSource = source
        self.inflector: Inflector = inflector or Inflector()
        self.config: CustomTypesConfig = config or CustomTypesConfig()
        self.ignore_tables: frozenset = frozenset(ignore_tables)
        self.ignore_fields: frozenset = frozenset(ignore_fields)

    # -----------------------------------------------------------------
    # Hooks used by templates
    # -----------------------------------------------------------------

    @staticmethod
    def nth_param(i: int) -> str:
        """Query placeholder for the *i*-th (0-based) parameter."""
        return f"@param{i}"

    def validate_custom_type(self, data_type: str, custom_type: str) -> bool:
        """Whether *custom_type* may stand in for *data_type*; permissive."""
        return True

    # -----------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------

    def load_schema(self) -> Schema:
        with Timer("load schema"):
            table_map: Dict[str, Type] = self.load_tables()
            index_map: Dict[str, List[Index]] = self.load_indexes(table_map)

            for table_name, indexes in index_map.items():
                table_map[table_name].indexes = sorted(indexes, key=lambda ix: ix.index_name)

            types: List[Type] = sorted(table_map.values(), key=lambda t: t.name)

        logger.info(
            "Loaded %d type(s), %d index(es).",
            len(types), sum(len(t.indexes) for t in types),
        )
        return Schema(types=types)

    # -----------------------------------------------------------------
    # Tables / columns / primary keys
    # -----------------------------------------------------------------

    def load_tables(self) -> Dict[str, Type]:
        table_map: Dict[str, Type] = {}
        tables: List[SpannerTable] = self.source.table_list()
        for table in tables:
            if table.table_name in self.ignore_tables:
                logger.debug("Ignoring table %s.", table.table_name)
                continue

            typ: Type = Type(
                name=self.inflector.singularize_identifier(table.table_name),
                table_name=table.table_name,
                parent_table_name=table.parent_table_name,
            )
            self.load_columns(typ)
            self.load_primary_keys(typ)
            table_map[table.table_name] = typ

        for custom in self.config.tables:
            if custom.name not in table_map:
                raise SchemaStructureError(
                    f"unknown custom type table {custom.name}", table=custom.name
                )
        return table_map

    def load_columns(self, typ: Type) -> None:
        columns: List[SpannerColumn] = self.source.column_list(typ.table_name)
        custom_types: Dict[str, str] = {}
        custom = self.config.table(typ.table_name)
        if custom is not None:
            custom_types = dict(custom.columns)
            known = {c.column_name for c in columns}
            for column_name in custom_types:
                if column_name not in known:
                    raise SchemaStructureError(
                        f"unknown custom type column {column_name} in the table {typ.table_name}",
                        table=typ.table_name,
                        column=column_name,
                    )

        for column in columns:
            if column.column_name in self.ignore_fields:
                if column.is_primary_key:
                    logger.warning(
                        "Primary key column %s.%s is listed in ignore_fields.",
                        typ.table_name, column.column_name,
                    )
                continue

            length, field_type = parse_spanner_type(column.data_type, not column.not_null)
            custom_type: Optional[str] = custom_types.get(column.column_name)
            if custom_type:
                if not self.validate_custom_type(column.data_type, custom_type):
                    raise SchemaStructureError(
                        f"custom type {custom_type} is not compatible with {column.data_type}: "
                        f"table={typ.table_name} column={column.column_name}",
                        table=typ.table_name,
                        column=column.column_name,
                    )
                field_type = field_type.with_custom_type(custom_type)

            typ.fields.append(
                Field(
                    name=snake_to_camel(column.column_name),
                    column_name=column.column_name,
                    type=field_type,
                    len=length,
                    spanner_data_type=column.data_type,
                    is_not_null=column.not_null,
                    is_primary_key=column.is_primary_key,
                    is_generated=column.is_generated,
                )
            )
        logger.debug("Loaded %d field(s) for %s.", len(typ.fields), typ.table_name)

    def load_primary_keys(self, typ: Type) -> None:
        fields: List[Field] = []
        for column in self.source.index_column_list(typ.table_name, PRIMARY_KEY_INDEX):
            found: Optional[Field] = typ.field_by_column(column.column_name)
            if found is None:
                raise SchemaStructureError(
                    "primary key column is not found in column list: "
                    f"table={typ.name} column={column.column_name}",
                    table=typ.table_name,
                    column=column.column_name,
                )
            fields.append(found)
        typ.primary_key_fields = fields

    # -----------------------------------------------------------------
    # Indexes
    # -----------------------------------------------------------------

    def load_indexes(self, table_map: Dict[str, Type]) -> Dict[str, List[Index]]:
        index_map: Dict[str, List[Index]] = {}
        for table_name, typ in table_map.items():
            index_map[table_name] = self.load_table_indexes(typ)
        return index_map

    def load_table_indexes(self, typ: Type) -> List[Index]:
        indexes: List[Index] = []
        for spanner_index in self.source.index_list(typ.table_name):
            index: Index = Index(
                index_name=spanner_index.index_name,
                name=snake_to_camel(spanner_index.index_name),
                table_name=typ.table_name,
                is_unique=spanner_index.is_unique,
                is_primary=spanner_index.is_primary,
            )
            self.load_index_columns(typ, index)
            index.func_name = self.build_index_func_name(typ, index)
            index.legacy_func_name = self.build_legacy_index_func_name(typ, index)
            indexes.append(index)
        return indexes

    def load_index_columns(self, typ: Type, index: Index) -> None:
        for column in self.source.index_column_list(typ.table_name, index.index_name):
            found: Optional[Field] = typ.field_by_column(column.column_name)
            if found is None:
                # ignored via ignore_fields
                continue
            if column.storing:
                index.storing_fields.append(found)
            else:
                index.fields.append(found)
            if not found.is_not_null:
                index.nullable_fields.append(found)

    def _func_prefix(self, typ: Type, index: Index) -> str:
        if index.is_unique:
            return typ.name
        return self.inflector.pluralize(typ.name)

    def build_index_func_name(self, typ: Type, index: Index) -> str:
        """``FullTypeByFullTypesByFTString`` / ``SimplesBySimpleIndex``."""
        return f"{self._func_prefix(typ, index)}By{snake_to_camel(index.index_name)}"

    def build_legacy_index_func_name(self, typ: Type, index: Index) -> str:
        """Older naming: the storing then key field names appended."""
        names: List[str] = [f.name for f in index.storing_fields]
        names.extend(f.name for f in index.fields)
        return f"{self._func_prefix(typ, index)}By{''.join(names)}"


__all__: List[str] = ["TypeLoader"]

logger.debug("yogen.loader loaded.")
