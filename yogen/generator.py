# File: yogen/generator.py
"""
yogen - Emission Engine
========================
``Generator.generate(schema)`` renders every module and writes the
results:

1. a fresh ``.yo_*`` workspace directory is created inside the output
   directory, so the final renames never cross a filesystem;
2. each TYPE module renders once per ``Type`` into ``<type><suffix>``;
3. each GLOBAL module renders once into ``<module><suffix>``;
4. each file gets its header rendered (after its chunks, so the header
   sees every import the chunks registered) and is written to a temp
   file: header, then chunks sorted by ``(name, subname)``, blank chunks
   dropped;
5. every temp file is formatted and chmod-ed;
6. every temp file is renamed into the output directory;
7. the workspace is removed.

No destination file is touched until all files made it through step 5.

Templates are Jinja2 with ``StrictUndefined``.  TYPE modules see
``type``; GLOBAL and HEADER modules see ``build_tag``, ``package`` and
``schema``.  The helpers from ``TemplateFuncs`` are available in all of
them.
"""

from __future__ import annotations

import logging
import posixpath
import shutil
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import jinja2

from yogen.buffers import FileBuffer, Formatter, TBuf
from yogen.config import GeneratorOptions
from yogen.errors import EmissionError, TemplateError, YogenError
from yogen.formatter import gofmt_formatter
from yogen.funcs import TemplateFuncs
from yogen.inflector import Inflector
from yogen.models import Schema
from yogen.modules import Module, template_loader
from yogen.packages import PackageRegistry
from yogen.utils import ShortNamer, Timer

logger: logging.Logger = logging.getLogger("yogen.generator")

TEMP_DIR_PREFIX: str = ".yo_"


@dataclass(frozen=True, slots=True)
class DataSet:
    """Context of GLOBAL and HEADER modules."""

    build_tag: str
    package: str
    schema: Schema

    def as_context(self) -> Dict[str, Any]:
        return {"build_tag": self.build_tag, "package": self.package, "schema": self.schema}


def new_environment(loader: Optional[jinja2.BaseLoader] = None) -> jinja2.Environment:
    return jinja2.Environment(
        loader=loader or template_loader(),
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


class Generator:
    """
    Renders modules over a ``Schema`` and writes the output files.

    Args:
        options:       Package name, output directory, suffix, formatter...
        header_module: Rendered in front of every file.
        global_modules / type_modules: See ``yogen.modules``.
        inflector:     Backs the ``pluralize`` helper.
        loader:        Resolves partials imported by templates
                       (default: the built-in ones).
    """

    def __init__(
        self,
        options: GeneratorOptions,
        header_module: Module,
        global_modules: Sequence[Module] = (),
        type_modules: Sequence[Module] = (),
        inflector: Optional[Inflector] = None,
        loader: Optional[jinja2.BaseLoader] = None,
    ) -> None:
        self.options: GeneratorOptions = options
        self.header_module: Module = header_module
        self.global_modules: List[Module] = list(global_modules)
        self.type_modules: List[Module] = list(type_modules)
        self.formatter: Formatter = options.formatter or gofmt_formatter
        self.funcs: TemplateFuncs = TemplateFuncs(
            inflector or Inflector(),
            custom_type_package=options.custom_type_package,
            short_namer=ShortNamer(),
        )

        self._env: jinja2.Environment = new_environment(loader)
        self._templates: Dict[str, jinja2.Template] = {}
        self._files: Dict[str, FileBuffer] = {}
        self._registries: Dict[str, PackageRegistry] = {}
        self._temp_dir: str = ""

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(self, schema: Schema) -> List[str]:
        """Render and write every file; returns the written paths."""
        self._files = {}
        self._registries = {}
        self._templates = {}
        try:
            self._temp_dir = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=self.options.base_dir)
        except OSError as exc:
            raise EmissionError(f"failed to create temp dir: {exc}") from exc

        try:
            with Timer("generate"):
                for module in self.type_modules:
                    for typ in schema.types:
                        self._execute(module, typ.name, "", {"type": typ})

                ds: DataSet = DataSet(self.options.tags, self.options.package_name, schema)
                for module in self.global_modules:
                    self._execute(module, module.name, "", ds.as_context())

                return self._write_files(ds)
        finally:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = ""

    # -----------------------------------------------------------------
    # Files
    # -----------------------------------------------------------------

    def _get_file(self, name: str) -> FileBuffer:
        file_name: str = posixpath.join(
            self.options.base_dir, name.lower() + self.options.filename_suffix
        )
        buf: Optional[FileBuffer] = self._files.get(file_name)
        if buf is None:
            buf = FileBuffer(file_name=file_name, base_name=name, temp_dir=self._temp_dir)
            self._files[file_name] = buf
            self._registries[file_name] = PackageRegistry()
        return buf

    def _write_files(self, ds: DataSet) -> List[str]:
        files: List[FileBuffer] = [self._files[k] for k in sorted(self._files)]
        for buf in files:
            buf.header = self._render(self.header_module, buf, ds.as_context())
            buf.write_temp_file()
        for buf in files:
            buf.postprocess(self.formatter, self.options.file_mode)
        for buf in files:
            buf.finalize()
        logger.info("Generated %d file(s) in %s.", len(files), self.options.base_dir)
        return [buf.file_name for buf in files]

    # -----------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------

    def _template(self, module: Module) -> jinja2.Template:
        key: str = f"{module.type.value}:{module.name}"
        cached: Optional[jinja2.Template] = self._templates.get(key)
        if cached is not None:
            return cached

        body: bytes = module.load()

        try:
            template: jinja2.Template = self._env.from_string(body.decode("utf-8"))
        except (jinja2.TemplateSyntaxError, UnicodeDecodeError) as exc:
            raise TemplateError("Parse", module.name, exc) from exc

        self._templates[key] = template
        return template

    def _render(self, module: Module, buf: FileBuffer, context: Dict[str, Any]) -> str:
        template: jinja2.Template = self._template(module)
        funcs: TemplateFuncs = self.funcs.for_file(self._registries[buf.file_name])
        variables: Dict[str, Any] = funcs.as_globals()
        variables.update(context)
        try:
            return template.render(variables)
        except YogenError:
            raise
        except Exception as exc:
            raise TemplateError("Execute", module.name, exc) from exc

    def _execute(self, module: Module, name: str, subname: str, context: Dict[str, Any]) -> None:
        buf: FileBuffer = self._get_file(name)
        body: str = self._render(module, buf, context)
        buf.chunks.append(TBuf(name=name, subname=subname, body=body))
        logger.debug("Executed module %s for %s.", module.name, name)


__all__: List[str] = ["DataSet", "Generator", "new_environment"]

logger.debug("yogen.generator loaded.")
