# File: yogen/packages.py
"""
yogen - Per-file Go Import Registry
====================================
Each output file owns one ``PackageRegistry``.  Templates never write a
package qualifier by hand: every ``spanner.X`` / ``time.Time`` reference
goes through ``use()``, which assigns the package a local name the first
time it is seen and returns ``<local>.<name>``.

Invariants (violations raise ``EmissionError``):
    - an import path maps to exactly one local name;
    - a local name maps to exactly one import path.

Local names that collide with Go keywords are prefixed with ``_``;
names already taken get a numeric suffix (``spanner1``, ``spanner2``...).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from yogen.errors import EmissionError
from yogen.models import BUILTIN_PACKAGE, Package
from yogen.utils import GO_RESERVED_NAMES

logger: logging.Logger = logging.getLogger("yogen.packages")


class PackageRegistry:
    """Tracks the imports one generated file needs."""

    def __init__(self, local_package: Optional[Package] = None) -> None:
        self._local: Optional[Package] = local_package
        self._names: Dict[str, str] = {}
        self._packages: Dict[str, Package] = {}
        self._paths_by_name: Dict[str, str] = {}

    # -----------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------

    def _is_local(self, pkg: Package) -> bool:
        if pkg.path == BUILTIN_PACKAGE.path:
            return True
        return self._local is not None and pkg.path == self._local.path

    def register(self, pkg: Package) -> str:
        """Register *pkg* (if needed) and return its local name."""
        existing: Optional[str] = self._names.get(pkg.path)
        if existing is not None:
            if pkg.alias and pkg.alias != existing:
                raise EmissionError(
                    f"package {pkg.path} is imported as both {existing} and {pkg.alias}"
                )
            return existing

        if pkg.alias:
            owner: Optional[str] = self._paths_by_name.get(pkg.alias)
            if owner is not None:
                raise EmissionError(
                    f"import alias {pkg.alias} is used by both {owner} and {pkg.path}"
                )
            local: str = pkg.alias
        else:
            original: str = pkg.local_name()
            if original in GO_RESERVED_NAMES:
                original = "_" + original
            local = original
            counter: int = 1
            while local in self._paths_by_name:
                local = f"{original}{counter}"
                counter += 1

        self._names[pkg.path] = local
        self._packages[pkg.path] = pkg
        self._paths_by_name[local] = pkg.path
        logger.debug("Registered import %s as %s.", pkg.path, local)
        return local

    def use(self, pkg: Package, name: str) -> str:
        """Return *name* qualified with the local name of *pkg*."""
        if self._is_local(pkg):
            return name
        return f"{self.register(pkg)}.{name}"

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------

    def imports(self) -> List[str]:
        """
        Import specs for the file: standard-library paths first, then
        third-party, each group sorted by path.
        """
        return [spec for group in self.grouped_imports() for spec in group]

    def grouped_imports(self) -> List[List[str]]:
        """``imports()`` split into the standard and third-party groups."""
        standard: List[str] = []
        third_party: List[str] = []
        for path in sorted(self._names):
            spec: str = self._spec(path)
            if self._packages[path].is_standard():
                standard.append(spec)
            else:
                third_party.append(spec)
        return [group for group in (standard, third_party) if group]

    def _spec(self, path: str) -> str:
        pkg: Package = self._packages[path]
        local: str = self._names[path]
        base_name: str = pkg.name or path.rsplit("/", 1)[-1]
        if local == base_name:
            return f'"{path}"'
        return f'{local} "{path}"'

    def __len__(self) -> int:
        return len(self._names)


__all__: List[str] = ["PackageRegistry"]

logger.debug("yogen.packages loaded.")
