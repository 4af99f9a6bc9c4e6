# File: yogen/cli.py
"""
yogen - Command-Line Interface
===============================

``argparse`` front-end with two subcommands.

Usage examples::

    # From a DDL file, into ./models (package "models")
    yogen generate schema.sql --from-ddl -o models

    # From a live database, with custom column types
    yogen generate my-project my-instance my-db -o models \\
        --custom-types-file custom_column_types.yml

    # Dump the built-in templates for editing, then use them
    yogen create-template --template-path templates
    yogen generate schema.sql --from-ddl -o models --template-path templates

Exit codes:
    0 - success
    1 - any failure (the message is printed to stderr as ``error: ...``)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, NoReturn, Optional, Sequence

from yogen.config import (
    DEFAULT_SUFFIX,
    GeneratorOptions,
    YogenConfig,
    load_config,
    load_custom_types,
    load_inflection_rules,
    merge_config,
)
from yogen.errors import ConfigError, YogenError
from yogen.formatter import identity_formatter
from yogen.generator import Generator
from yogen.inflector import Inflector
from yogen.loader import TypeLoader
from yogen.models import Schema
from yogen.modules import copy_builtin_templates, decide_modules, template_loader
from yogen.sources import InformationSchemaSource, SchemaParserSource, SchemaSource

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("yogen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_FAILURE: int = 1


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``yogen`` logger.

    Args:
        verbosity: -1 = errors only, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.CRITICAL

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("yogen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_verbosity(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("verbosity")
    group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except the final error line.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from yogen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="yogen",
        description="Generate Go data-access code for Google Cloud Spanner tables.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"yogen v{__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # --- generate ---
    gen = subparsers.add_parser(
        "generate",
        help="Generate Go code from a database or a DDL file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s schema.sql --from-ddl -o models\n"
            "  %(prog)s PROJECT INSTANCE DATABASE -o models\n"
        ),
    )
    gen.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="PROJECT INSTANCE DATABASE, or a DDL file path with --from-ddl.",
    )
    gen.add_argument("-c", "--config", default=None, metavar="PATH", help="Path to a yogen config file.")
    gen.add_argument("--from-ddl", action="store_true", default=False, help="Read the schema from a DDL file.")
    gen.add_argument("-o", "--out", default=None, metavar="DIR", help="Output directory (default: cwd).")
    gen.add_argument("--suffix", default=DEFAULT_SUFFIX, help="Output file suffix.")
    gen.add_argument("-p", "--package", default="", help="Go package name (default: output directory name).")
    gen.add_argument("--tags", default="", help="Build tags added to the package header.")
    gen.add_argument("--custom-types-file", default=None, metavar="PATH",
                     help="YAML file mapping table columns to custom Go types.")
    gen.add_argument("--custom-type-package", default="", metavar="PKG",
                     help="Go package qualifying bare custom type names.")
    gen.add_argument("--inflection-rule-file", default=None, metavar="PATH",
                     help="YAML list of {singular, plural} irregular pairs.")
    gen.add_argument("--ignore-fields", action="append", default=[], metavar="COLUMN",
                     help="Column to exclude from the generated types (repeatable).")
    gen.add_argument("--ignore-tables", action="append", default=[], metavar="TABLE",
                     help="Table to exclude from the generated types (repeatable).")
    gen.add_argument("--template-path", default=None, metavar="DIR",
                     help="Directory whose <module>.go.j2 files override the built-in ones.")

    modules_group = gen.add_argument_group("modules")
    modules_group.add_argument("--disable-default-modules", action="store_true", default=False,
                               help="Do not run the built-in modules.")
    modules_group.add_argument("--header-module", default=None, metavar="PATH",
                               help="Replace the header module with a user template.")
    modules_group.add_argument("--global-module", action="append", default=[], metavar="PATH",
                               help="Add a user template rendered once (repeatable).")
    modules_group.add_argument("--type-module", action="append", default=[], metavar="PATH",
                               help="Add a user template rendered per table (repeatable).")
    modules_group.add_argument("--use-legacy-index-module", action="store_true", default=False,
                               help="Use the legacy index function names.")

    behaviour_group = gen.add_argument_group("behaviour flags")
    behaviour_group.add_argument("--disable-format", action="store_true", default=False,
                                 help="Do not run goimports/gofmt on the output.")
    behaviour_group.add_argument("--ignore-unsupported-statements", action="store_true", default=False,
                                 help="Skip DDL statements yogen does not understand.")
    _add_verbosity(gen)

    # --- create-template ---
    tmpl = subparsers.add_parser(
        "create-template",
        help="Copy the built-in templates into a directory.",
    )
    tmpl.add_argument("--template-path", required=True, metavar="DIR",
                      help="Destination directory (created if missing).")
    _add_verbosity(tmpl)

    return parser


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


def _resolve_output(args: argparse.Namespace) -> str:
    """The output directory; ``--out`` must name an existing directory."""
    if not args.out:
        return os.getcwd()
    if not os.path.exists(args.out):
        raise ConfigError("output path does not exist", args.out)
    if not os.path.isdir(args.out):
        raise ConfigError("output path must be a directory", args.out)
    return os.path.abspath(args.out)


def _load_settings(args: argparse.Namespace) -> YogenConfig:
    config: YogenConfig = load_config(args.config)
    custom_types = load_custom_types(args.custom_types_file) if args.custom_types_file else None
    rules = load_inflection_rules(args.inflection_rule_file) if args.inflection_rule_file else None
    return merge_config(config, custom_types, rules)


def _open_source(args: argparse.Namespace) -> SchemaSource:
    if args.from_ddl:
        if len(args.sources) != 1:
            raise ConfigError("--from-ddl takes exactly one DDL file path")
        return SchemaParserSource.from_file(
            args.sources[0], ignore_unsupported_statements=args.ignore_unsupported_statements
        )
    if len(args.sources) != 3:
        raise ConfigError("expected PROJECT INSTANCE DATABASE (or a DDL file with --from-ddl)")
    project, instance, database = args.sources
    return InformationSchemaSource.from_ids(project, instance, database)


def _run_generate(args: argparse.Namespace) -> List[str]:
    base_dir: str = _resolve_output(args)
    package_name: str = args.package or os.path.basename(base_dir)
    config: YogenConfig = _load_settings(args)
    inflector: Inflector = Inflector(config.inflection_rules())

    source: SchemaSource = _open_source(args)
    schema: Schema = TypeLoader(
        source,
        inflector=inflector,
        config=config,
        ignore_tables=args.ignore_tables,
        ignore_fields=args.ignore_fields,
    ).load_schema()
    logger.info("Loaded %d type(s).", len(schema.types))

    header, global_modules, type_modules = decide_modules(
        disable_default_modules=args.disable_default_modules,
        use_legacy_index_module=args.use_legacy_index_module,
        header_module=args.header_module,
        global_modules=args.global_module,
        type_modules=args.type_module,
        template_path=args.template_path,
    )

    options: GeneratorOptions = GeneratorOptions(
        package_name=package_name,
        base_dir=base_dir,
        tags=args.tags,
        filename_suffix=args.suffix,
        custom_type_package=args.custom_type_package,
        formatter=identity_formatter if args.disable_format else None,
    )
    generator: Generator = Generator(
        options,
        header,
        global_modules,
        type_modules,
        inflector=inflector,
        loader=template_loader(args.template_path),
    )
    return generator.generate(schema)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    _setup_logging(-1 if args.quiet else args.verbose)

    try:
        if args.command == "create-template":
            copy_builtin_templates(args.template_path)
        else:
            _run_generate(args)
    except YogenError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    sys.exit(EXIT_SUCCESS)


__all__: List[str] = ["cli_main", "EXIT_SUCCESS", "EXIT_FAILURE"]

logger.debug("yogen.cli loaded.")
