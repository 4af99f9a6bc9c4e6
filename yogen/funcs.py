# File: yogen/funcs.py
"""
yogen - Template Function Dictionary
=====================================
``TemplateFuncs`` holds every helper exposed to the Go templates as a
Jinja global.  One instance is bound to each output file so that type
helpers (``gotype``, ``gonullvalue``...) register the packages they use
in that file's ``PackageRegistry``; ``imports()`` then renders them in
the header.

``ignore`` arguments accept column/field names and field lists in any
mix; they are flattened to a set of Go field names.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from yogen.inflector import Inflector
from yogen.loader import TypeLoader
from yogen.models import Field, Index, Package, PlainFieldType, Type
from yogen.packages import PackageRegistry
from yogen.typemap import SPANNER_PACKAGE
from yogen.utils import (
    KNOWN_GO_TYPES,
    ShortNamer,
    escape_column_name,
    flatten_names,
    go_param_name,
)

logger: logging.Logger = logging.getLogger("yogen.funcs")

# spanner wrappers that implement IsNull() directly
_SPANNER_NULL_TYPES = frozenset({
    "NullInt64", "NullString", "NullFloat64", "NullBool", "NullTime", "NullDate",
})


class TemplateFuncs:
    """
    Helpers available to every template.

    Args:
        inflector:           Used by ``pluralize``.
        custom_type_package: Prefix for bare custom type names in ``retype``.
        short_namer:         Shared across files so short names agree.
        registry:            The current file's import registry.
        param:               Placeholder factory (``@param0``...).
    """

    def __init__(
        self,
        inflector: Inflector,
        custom_type_package: str = "",
        short_namer: Optional[ShortNamer] = None,
        registry: Optional[PackageRegistry] = None,
        param: Callable[[int], str] = TypeLoader.nth_param,
    ) -> None:
        self.inflector: Inflector = inflector
        self.custom_type_package: str = custom_type_package
        self.short_namer: ShortNamer = short_namer or ShortNamer()
        self.registry: PackageRegistry = registry if registry is not None else PackageRegistry()
        self.param: Callable[[int], str] = param

    def for_file(self, registry: PackageRegistry) -> "TemplateFuncs":
        """Copy sharing everything but the import registry."""
        return TemplateFuncs(
            self.inflector,
            self.custom_type_package,
            self.short_namer,
            registry,
            self.param,
        )

    def as_globals(self) -> Dict[str, Callable[..., Any]]:
        return {
            "colcount": self.colcount,
            "columncount": self.columncount,
            "colnames": self.colnames,
            "escapedcolnames": self.escapedcolnames,
            "colnamesquery": self.colnamesquery,
            "colprefixnames": self.colprefixnames,
            "colvals": self.colvals,
            "fieldnames": self.fieldnames,
            "goparamlist": self.goparamlist,
            "goEncodedParams": self.go_encoded_params,
            "gocustomparamlist": self.gocustomparamlist,
            "reniltype": self.reniltype,
            "retype": self.retype,
            "shortname": self.shortname,
            "goconvert": self.goconvert,
            "escapedcolname": self.escapedcolname,
            "hascolumn": self.hascolumn,
            "hasfield": self.hasfield,
            "indexcolumns": self.indexcolumns,
            "getstartcount": self.getstartcount,
            "customfieldcount": self.customfieldcount,
            "goparamname": self.goparamname,
            "customtypeparam": self.customtypeparam,
            "tolower": self.tolower,
            "nullcheck": self.nullcheck,
            "pluralize": self.pluralize,
            "gotype": self.gotype,
            "gooriginaltype": self.gooriginaltype,
            "gonullvalue": self.gonullvalue,
            "require": self.require,
            "imports": self.imports,
        }

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    @staticmethod
    def _kept(fields: Sequence[Field], ignore: Sequence[Any]) -> List[Field]:
        names = flatten_names(ignore)
        return [f for f in fields if f.name not in names]

    def _custom_prefix(self) -> str:
        return f"{self.custom_type_package}." if self.custom_type_package else ""

    # -----------------------------------------------------------------
    # Column lists
    # -----------------------------------------------------------------

    def colnames(self, fields: Sequence[Field], *ignore: Any) -> str:
        """``A, B, C``"""
        return ", ".join(f.column_name for f in self._kept(fields, ignore))

    def escapedcolnames(self, fields: Sequence[Field], *ignore: Any) -> str:
        """``A, `From`, C``"""
        return ", ".join(escape_column_name(f.column_name) for f in self._kept(fields, ignore))

    def colnamesquery(self, fields: Sequence[Field], sep: str, *ignore: Any) -> str:
        """``A = @param0 AND B = @param1``"""
        return sep.join(
            f"{escape_column_name(f.column_name)} = {self.param(i)}"
            for i, f in enumerate(self._kept(fields, ignore))
        )

    def colprefixnames(self, fields: Sequence[Field], prefix: str, *ignore: Any) -> str:
        return ", ".join(f"{prefix}.{f.column_name}" for f in self._kept(fields, ignore))

    def colvals(self, fields: Sequence[Field], *ignore: Any) -> str:
        return ", ".join(self.param(i) for i in range(len(self._kept(fields, ignore))))

    def fieldnames(self, fields: Sequence[Field], prefix: str, *ignore: Any) -> str:
        return ", ".join(f"{prefix}.{f.name}" for f in self._kept(fields, ignore))

    def colcount(self, fields: Sequence[Field], *ignore: Any) -> int:
        """1-based: the number of kept fields plus one."""
        return len(self._kept(fields, ignore)) + 1

    def columncount(self, fields: Sequence[Field], *ignore: Any) -> int:
        return len(self._kept(fields, ignore))

    @staticmethod
    def getstartcount(fields: Sequence[Field], pk_fields: Sequence[Field]) -> int:
        return len(fields) - len(pk_fields)

    @staticmethod
    def customfieldcount(fields: Sequence[Field]) -> int:
        # custom types never need a conversion step
        return 0

    # -----------------------------------------------------------------
    # Go parameters
    # -----------------------------------------------------------------

    def _param(self, i: int, f: Field) -> str:
        return self.goparamname(f.name) if f.name else f"v{i}"

    def goparamlist(self, fields: Sequence[Field], add_prefix: bool, add_type: bool, *ignore: Any) -> str:
        """``, fTString string, pKey string`` style lists."""
        values: List[str] = []
        for i, f in enumerate(self._kept(fields, ignore)):
            value: str = self._param(i, f)
            if add_type:
                value += " " + self.retype(self.gotype(f))
            values.append(value)
        joined: str = ", ".join(values)
        if add_prefix and joined:
            return ", " + joined
        return joined

    def gocustomparamlist(self, fields: Sequence[Field], add_prefix: bool, add_type: bool, *ignore: Any) -> str:
        return self.goparamlist(fields, add_prefix, add_type, *ignore)

    def go_encoded_params(self, fields: Sequence[Field], add_prefix: bool, *ignore: Any) -> str:
        """``yoEncode(a), yoEncode(b)``"""
        joined: str = ", ".join(
            f"yoEncode({self._param(i, f)})" for i, f in enumerate(self._kept(fields, ignore))
        )
        if add_prefix and joined:
            return ", " + joined
        return joined

    @staticmethod
    def goparamname(name: str) -> str:
        return go_param_name(name)

    @staticmethod
    def customtypeparam(name: str) -> str:
        return "c" + name

    def goconvert(self, prefix: str, f: Field, t: Field) -> str:
        """Expression converting ``prefix.f`` so it is assignable to *t*."""
        expr: str = f"{prefix}.{f.name}"
        target: str = self.gotype(t)
        if self.gotype(f) == target:
            return expr
        return f"{target}({expr})"

    # -----------------------------------------------------------------
    # Types
    # -----------------------------------------------------------------

    def retype(self, typ: str) -> str:
        """Prefix a bare non-builtin type with the custom type package."""
        if "." in typ:
            return typ
        prefix: str = ""
        while typ.startswith("[]"):
            typ = typ[2:]
            prefix += "[]"
        if typ in KNOWN_GO_TYPES:
            return prefix + typ
        return prefix + self._custom_prefix() + typ

    def reniltype(self, typ: str) -> str:
        if "." in typ:
            return typ
        if typ.endswith("{}"):
            if typ[:-2] in KNOWN_GO_TYPES:
                return typ
            return self._custom_prefix() + typ
        return typ

    def gotype(self, f: Field) -> str:
        """The Go type of *f*; custom types win over the mapped type."""
        if f.custom_type:
            return self.retype(f.custom_type)
        return f.type.get_original_type(self.registry)

    def gooriginaltype(self, f: Field) -> str:
        return f.type.get_original_type(self.registry)

    def gonullvalue(self, f: Field) -> str:
        return f.type.get_null_value(self.registry)

    def nullcheck(self, f: Field) -> str:
        """Go condition that is true when the parameter for *f* holds NULL."""
        param: str = self.goparamname(f.name)
        ft = f.type
        if (
            isinstance(ft, PlainFieldType)
            and not ft.custom_type
            and ft.pkg == SPANNER_PACKAGE
            and ft.type in _SPANNER_NULL_TYPES
        ):
            return f"{param}.IsNull()"
        return f"yo, ok := interface{{}}({param}).(yoIsNull); ok && yo.IsNull()"

    # -----------------------------------------------------------------
    # Names
    # -----------------------------------------------------------------

    def shortname(self, typ: str, *scope_conflicts: Any) -> str:
        return self.short_namer(typ, *scope_conflicts)

    @staticmethod
    def escapedcolname(col: str) -> str:
        return escape_column_name(col)

    @staticmethod
    def hascolumn(fields: Sequence[Field], name: str) -> bool:
        return any(f.column_name == name for f in fields)

    @staticmethod
    def hasfield(fields: Sequence[Field], name: str) -> bool:
        return any(f.name == name for f in fields)

    @staticmethod
    def indexcolumns(typ: Type, index: Index) -> List[str]:
        """Columns readable through *index*: primary key, key parts, storing."""
        names: List[str] = []
        for f in [*typ.primary_key_fields, *index.fields, *index.storing_fields]:
            if f.column_name not in names:
                names.append(f.column_name)
        return names

    @staticmethod
    def tolower(s: str) -> str:
        return s.lower()

    def pluralize(self, s: str) -> str:
        return self.inflector.pluralize(s)

    # -----------------------------------------------------------------
    # Imports
    # -----------------------------------------------------------------

    def require(self, *paths: str) -> str:
        """
        Register import paths used verbatim by a template.

        ``"alias path"`` registers an aliased import.  Returns an empty
        string so it can be called inline.
        """
        for spec in paths:
            alias, _, path = spec.rpartition(" ")
            self.registry.register(Package(path=path, alias=alias))
        return ""

    def imports(self) -> List[List[str]]:
        """Import specs of the current file, grouped standard / third-party."""
        return self.registry.grouped_imports()


__all__: List[str] = ["TemplateFuncs"]

logger.debug("yogen.funcs loaded.")
