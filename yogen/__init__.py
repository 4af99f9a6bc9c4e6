# File: yogen/__init__.py
"""
yogen - Go Code Generator for Google Cloud Spanner
====================================================

Reads a Spanner schema (a live database's INFORMATION_SCHEMA or a DDL
file) and writes Go data-access code: one file per table with the row
struct, its mutations and finders, plus package-level helpers.

Architecture overview::

    ┌──────────────┐     ┌──────────────┐     ┌──────────────┐
    │ SchemaSource │────▶│  TypeLoader  │────▶│  Generator   │
    │ (sources.py) │     │ (loader.py)  │     │(generator.py)│
    └──────┬───────┘     └──────┬───────┘     └──────┬───────┘
           │                    │                    │
           ▼                    ▼                    ▼
     ddl.py / spanner     inflector / typemap    modules / funcs

Usage::

    # As a library
    from yogen import Generator, GeneratorOptions, SchemaParserSource, TypeLoader
    from yogen.modules import decide_modules

    schema = TypeLoader(SchemaParserSource.from_file("schema.sql")).load_schema()
    header, globals_, types = decide_modules()
    Generator(GeneratorOptions("models", base_dir="models"), header, globals_, types).generate(schema)

    # From the command line
    yogen generate schema.sql --from-ddl -o models

Public API:
    - SchemaParserSource / InformationSchemaSource - schema sources
    - TypeLoader       - builds the Schema
    - Generator        - renders and writes the files
    - GeneratorOptions - emission settings
    - Inflector        - singular / plural names
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from yogen.config import GeneratorOptions, YogenConfig, load_config
from yogen.errors import (
    ConfigError,
    EmissionError,
    SchemaSourceError,
    SchemaStructureError,
    TemplateError,
    YogenError,
)
from yogen.generator import Generator
from yogen.inflector import Inflector
from yogen.loader import TypeLoader
from yogen.models import Field, Index, Schema, Type
from yogen.sources import InformationSchemaSource, SchemaParserSource, SchemaSource

__all__ = [
    "__version__",
    "ConfigError",
    "EmissionError",
    "Field",
    "Generator",
    "GeneratorOptions",
    "Index",
    "Inflector",
    "InformationSchemaSource",
    "Schema",
    "SchemaParserSource",
    "SchemaSource",
    "SchemaStructureError",
    "TemplateError",
    "Type",
    "TypeLoader",
    "YogenConfig",
    "YogenError",
    "load_config",
]
