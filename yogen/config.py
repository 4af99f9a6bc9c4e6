# File: yogen/config.py
"""
yogen - Configuration
======================
Pydantic models for the YAML documents the generator accepts, plus the
``GeneratorOptions`` bundle handed to the emission engine.

Documents
---------
``--config`` (combined)::

    tables:
      - name: Singers
        columns:
          Status: models.SingerStatus
    inflections:
      - singular: person
        plural: people

``--custom-types-file``: the ``tables`` part on its own.

``--inflection-rule-file``: a bare sequence of ``{singular, plural}``.

``columns`` may also be written as a list of ``{name, customType}``
records; both spellings load to the same mapping.

Every loader raises ``ConfigError`` naming the file when it is missing,
is not valid YAML, or fails validation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from yogen.errors import ConfigError
from yogen.inflector import InflectionRule as InflectorRule

logger: logging.Logger = logging.getLogger("yogen.config")

DEFAULT_SUFFIX: str = ".yo.go"
DEFAULT_FILE_MODE: int = 0o666

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    populate_by_name=True,
    extra="forbid",
    str_strip_whitespace=True,
)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class CustomTypeTable(BaseModel):
    """Custom Go types for the columns of one table."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Spanner table name.")
    columns: Dict[str, str] = Field(
        default_factory=dict, description="Column name → Go type expression."
    )

    @field_validator("columns", mode="before")
    @classmethod
    def _columns_from_records(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, list):
            columns: Dict[str, str] = {}
            for item in v:
                if not isinstance(item, dict) or "name" not in item:
                    raise ValueError(f"column entry must have a name: {item!r}")
                custom = item.get("customType", item.get("custom_type"))
                if not custom:
                    raise ValueError(f"column {item['name']} has no customType")
                columns[item["name"]] = custom
            return columns
        return v


class CustomTypesConfig(BaseModel):
    model_config = _SHARED_CONFIG

    tables: List[CustomTypeTable] = Field(default_factory=list)

    @field_validator("tables", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def table(self, name: str) -> Optional[CustomTypeTable]:
        for tbl in self.tables:
            if tbl.name == name:
                return tbl
        return None

    def lookup(self, table: str, column: str) -> Optional[str]:
        tbl: Optional[CustomTypeTable] = self.table(table)
        if tbl is None:
            return None
        return tbl.columns.get(column)


class InflectionRule(BaseModel):
    model_config = _SHARED_CONFIG

    singular: str = Field(..., min_length=1)
    plural: str = Field(..., min_length=1)

    def to_rule(self) -> InflectorRule:
        return InflectorRule(self.singular, self.plural)


class YogenConfig(CustomTypesConfig):
    """The combined ``--config`` document."""

    inflections: List[InflectionRule] = Field(default_factory=list)

    @field_validator("inflections", mode="before")
    @classmethod
    def _no_inflections(cls, v: Any) -> Any:
        return [] if v is None else v

    def inflection_rules(self) -> List[InflectorRule]:
        return [rule.to_rule() for rule in self.inflections]


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def _read_yaml(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            text: str = fh.read()
    except OSError as exc:
        raise ConfigError(f"failed to read file ({exc.strerror})", path) from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML ({exc})", path) from exc


def _validate(model: Callable[..., Any], data: Any, path: str) -> Any:
    try:
        return model(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config ({exc})", path) from exc


def load_config(path: Optional[str]) -> YogenConfig:
    """Load the combined config; an empty *path* yields an empty config."""
    if not path:
        return YogenConfig()
    data: Any = _read_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping", path)
    config: YogenConfig = _validate(YogenConfig.model_validate, data, path)
    logger.info(
        "Loaded config %s (%d custom type table(s), %d inflection rule(s)).",
        path, len(config.tables), len(config.inflections),
    )
    return config


def load_custom_types(path: str) -> CustomTypesConfig:
    data: Any = _read_yaml(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("custom types file must be a mapping", path)
    config: CustomTypesConfig = _validate(CustomTypesConfig.model_validate, data, path)
    logger.info("Loaded %d custom type table(s) from %s.", len(config.tables), path)
    return config


def load_inflection_rules(path: str) -> List[InflectionRule]:
    data: Any = _read_yaml(path)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigError("inflection rule file must be a sequence", path)
    rules: List[InflectionRule] = [
        _validate(InflectionRule.model_validate, item, path) for item in data
    ]
    logger.info("Loaded %d inflection rule(s) from %s.", len(rules), path)
    return rules


def merge_config(
    config: YogenConfig,
    custom_types: Optional[CustomTypesConfig] = None,
    rules: Optional[List[InflectionRule]] = None,
) -> YogenConfig:
    """
    Overlay the dedicated files onto the combined config.

    Tables from *custom_types* replace same-named tables of *config*;
    *rules* are appended after the config's own inflections.
    """
    tables: Dict[str, CustomTypeTable] = {t.name: t for t in config.tables}
    if custom_types is not None:
        for tbl in custom_types.tables:
            tables[tbl.name] = tbl
    return YogenConfig(
        tables=list(tables.values()),
        inflections=list(config.inflections) + list(rules or []),
    )


# ---------------------------------------------------------------------------
# Generator options
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GeneratorOptions:
    """Everything the emission engine needs besides the schema and modules."""

    package_name: str
    base_dir: str = field(default_factory=os.getcwd)
    tags: str = ""
    filename_suffix: str = DEFAULT_SUFFIX
    custom_type_package: str = ""
    file_mode: int = DEFAULT_FILE_MODE
    formatter: Optional[Callable[[str, bytes], bytes]] = None


__all__: List[str] = [
    "CustomTypeTable",
    "CustomTypesConfig",
    "DEFAULT_FILE_MODE",
    "DEFAULT_SUFFIX",
    "GeneratorOptions",
    "InflectionRule",
    "YogenConfig",
    "load_config",
    "load_custom_types",
    "load_inflection_rules",
    "merge_config",
]

logger.debug("yogen.config loaded.")
