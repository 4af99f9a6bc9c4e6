# File: yogen/errors.py
"""
yogen - Exception Hierarchy
============================
Every failure raised by the generation pipeline derives from
``YogenError``.  Subclasses map one-to-one onto the pipeline phases so the
CLI (and library callers) can tell a bad config file apart from a broken
template without parsing messages.

    YogenError
    ├── ConfigError            bad CLI args, config / template files
    ├── SchemaSourceError      catalog queries, DDL parsing
    │   └── DDLParseError
    ├── SchemaStructureError   missing PK column, rejected custom type
    ├── TemplateError          module load / parse / execute
    └── EmissionError          temp file, formatter, rename, imports
"""

from __future__ import annotations

import logging
from typing import List, Optional

logger: logging.Logger = logging.getLogger("yogen.errors")


class YogenError(Exception):
    """Base class for all generator failures."""


class ConfigError(YogenError):
    """Invalid or unreadable configuration input."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        if path:
            message = f"{message}: {path}"
        super().__init__(message)
        self.path: Optional[str] = path


class SchemaSourceError(YogenError):
    """A schema source failed to enumerate the schema."""


class DDLParseError(SchemaSourceError):
    """
    A DDL statement could not be parsed.

    ``statement`` holds the offending statement text and ``offset`` the
    character position inside it where parsing stopped.
    """

    def __init__(self, message: str, statement: str = "", offset: int = -1) -> None:
        text: str = message
        if statement:
            text = f"{message} (at offset {offset}): {statement}"
        super().__init__(text)
        self.statement: str = statement
        self.offset: int = offset


class SchemaStructureError(YogenError):
    """The loaded schema is structurally inconsistent."""

    def __init__(self, message: str, table: str = "", column: str = "") -> None:
        super().__init__(message)
        self.table: str = table
        self.column: str = column


class TemplateError(YogenError):
    """A template module failed to load, parse or execute."""

    def __init__(self, phase: str, module_name: str, cause: BaseException) -> None:
        super().__init__(f"{phase} module({module_name}): {cause}")
        self.phase: str = phase
        self.module_name: str = module_name


class EmissionError(YogenError):
    """Writing, formatting or renaming an output file failed."""

    def __init__(self, message: str, file_name: str = "") -> None:
        super().__init__(message)
        self.file_name: str = file_name


__all__: List[str] = [
    "YogenError",
    "ConfigError",
    "SchemaSourceError",
    "DDLParseError",
    "SchemaStructureError",
    "TemplateError",
    "EmissionError",
]

logger.debug("yogen.errors loaded.")
