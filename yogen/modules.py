# File: yogen/modules.py
"""
yogen - Template Modules
=========================
A module is one named template with a scope:

    HEADER   rendered once per output file, in front of its chunks
    GLOBAL   rendered once; output goes to ``<name><suffix>``
    TYPE     rendered once per table; output goes to ``<type><suffix>``

``BuiltinModule`` reads ``yogen/templates/<name>.go.j2`` from the
installed package unless a template directory overrides it;
``FileModule`` reads a user-supplied path.  Partials such as
``index_funcs`` hold macros shared by several modules; templates reach
them through ``template_loader``.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
from dataclasses import dataclass
from importlib import resources
from typing import List, Optional, Protocol, Sequence, Tuple

import jinja2

from yogen.errors import ConfigError, TemplateError
from yogen.utils import module_basename

logger: logging.Logger = logging.getLogger("yogen.modules")

TEMPLATE_EXT: str = ".go.j2"
TEMPLATE_PACKAGE: str = "yogen.templates"


class ModuleType(enum.Enum):
    GLOBAL = "global"
    TYPE = "type"
    HEADER = "header"


class Module(Protocol):
    @property
    def name(self) -> str:
        ...

    @property
    def type(self) -> ModuleType:
        ...

    def load(self) -> bytes:
        ...


@dataclass(frozen=True, slots=True)
class FileModule:
    """A template read from *path*."""

    type: ModuleType
    name: str
    path: str

    def load(self) -> bytes:
        try:
            with open(self.path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise TemplateError(
                "Load", self.name, ConfigError(f"failed to read file ({exc.strerror})", self.path)
            ) from exc


@dataclass(frozen=True, slots=True)
class BuiltinModule:
    """A template shipped in ``yogen/templates``."""

    type: ModuleType
    name: str
    template_path: Optional[str] = None

    @property
    def file_name(self) -> str:
        return f"{self.name}{TEMPLATE_EXT}"

    def with_template_path(self, template_path: Optional[str]) -> "BuiltinModule":
        return BuiltinModule(self.type, self.name, template_path)

    def load(self) -> bytes:
        if self.template_path:
            override: str = os.path.join(self.template_path, self.file_name)
            if os.path.isfile(override):
                logger.debug("Module %s loaded from %s.", self.name, override)
                return FileModule(self.type, self.name, override).load()
        try:
            return resources.files(TEMPLATE_PACKAGE).joinpath(self.file_name).read_bytes()
        except OSError as exc:
            raise TemplateError("Load", self.name, exc) from exc


# ---------------------------------------------------------------------------
# Built-in set
# ---------------------------------------------------------------------------

HEADER: BuiltinModule = BuiltinModule(ModuleType.HEADER, "header")
NULL_HEADER: BuiltinModule = BuiltinModule(ModuleType.HEADER, "null_header")
INTERFACE: BuiltinModule = BuiltinModule(ModuleType.GLOBAL, "interface")
TYPE: BuiltinModule = BuiltinModule(ModuleType.TYPE, "type")
OPERATION: BuiltinModule = BuiltinModule(ModuleType.TYPE, "operation")
INDEX: BuiltinModule = BuiltinModule(ModuleType.TYPE, "index")
LEGACY_INDEX: BuiltinModule = BuiltinModule(ModuleType.TYPE, "legacy_index")

BUILTIN_MODULES: Tuple[BuiltinModule, ...] = (
    HEADER, NULL_HEADER, INTERFACE, TYPE, OPERATION, INDEX, LEGACY_INDEX,
)

# Macro libraries imported by the built-in modules; never rendered on their own.
TEMPLATE_PARTIALS: Tuple[str, ...] = ("index_funcs",)


def template_loader(template_path: Optional[str] = None) -> jinja2.BaseLoader:
    """
    Resolves ``{% import %}`` and ``{% from %}`` inside templates.

    Names are looked up in *template_path* first, then among the built-in
    templates, so an override directory can replace a partial too.
    """
    loaders: List[jinja2.BaseLoader] = []
    if template_path:
        loaders.append(jinja2.FileSystemLoader(template_path))
    loaders.append(jinja2.PackageLoader("yogen", "templates"))
    return jinja2.ChoiceLoader(loaders)


def decide_modules(
    disable_default_modules: bool = False,
    use_legacy_index_module: bool = False,
    header_module: Optional[str] = None,
    global_modules: Sequence[str] = (),
    type_modules: Sequence[str] = (),
    template_path: Optional[str] = None,
) -> Tuple[Module, List[Module], List[Module]]:
    """
    Pick the header, global and type modules for a run.

    Without ``disable_default_modules`` the defaults are ``header``,
    ``interface`` and ``type`` + ``operation`` + ``index`` (or
    ``legacy_index``).  Otherwise the header renders nothing and only the
    user modules run.  User modules are appended after the defaults; a
    user header replaces the default one.
    """
    header: Module = NULL_HEADER
    globals_: List[Module] = []
    types: List[Module] = []

    if not disable_default_modules:
        header = HEADER.with_template_path(template_path)
        globals_.append(INTERFACE.with_template_path(template_path))
        types.append(TYPE.with_template_path(template_path))
        types.append(OPERATION.with_template_path(template_path))
        index: BuiltinModule = LEGACY_INDEX if use_legacy_index_module else INDEX
        types.append(index.with_template_path(template_path))

    for path in global_modules:
        globals_.append(FileModule(ModuleType.GLOBAL, module_basename(path), path))
    for path in type_modules:
        types.append(FileModule(ModuleType.TYPE, module_basename(path), path))
    if header_module:
        header = FileModule(ModuleType.HEADER, module_basename(header_module), header_module)

    logger.debug(
        "Modules: header=%s global=%s type=%s",
        header.name, [m.name for m in globals_], [m.name for m in types],
    )
    return header, globals_, types


def copy_builtin_templates(dest: str) -> List[str]:
    """Copy every built-in template into *dest*; returns the written paths."""
    try:
        os.makedirs(dest, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"failed to create template directory ({exc.strerror})", dest) from exc

    written: List[str] = []
    root = resources.files(TEMPLATE_PACKAGE)
    file_names: List[str] = [module.file_name for module in BUILTIN_MODULES]
    file_names.extend(f"{name}{TEMPLATE_EXT}" for name in TEMPLATE_PARTIALS)
    for file_name in file_names:
        target: str = os.path.join(dest, file_name)
        try:
            with resources.as_file(root.joinpath(file_name)) as source:
                shutil.copyfile(source, target)
        except OSError as exc:
            raise ConfigError(f"failed to copy template {file_name} ({exc})", target) from exc
        written.append(target)
        logger.info("Created %s.", target)
    return written


__all__: List[str] = [
    "BUILTIN_MODULES",
    "BuiltinModule",
    "FileModule",
    "Module",
    "ModuleType",
    "TEMPLATE_PARTIALS",
    "copy_builtin_templates",
    "decide_modules",
    "template_loader",
]

logger.debug("yogen.modules loaded.")
