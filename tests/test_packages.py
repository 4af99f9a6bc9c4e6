"""
tests/test_packages.py
Unit tests for yogen.packages.

Tests cover:
- Qualified names and one registration per package
- Import grouping: standard library first, then third-party
- Local-name collisions, Go keywords and explicit aliases
- Bijection errors between paths and local names
"""

from __future__ import annotations

import pytest

from yogen.errors import EmissionError
from yogen.models import Package
from yogen.packages import PackageRegistry
from yogen.typemap import SPANNER_PACKAGE, TIME_PACKAGE, parse_spanner_type


# ===========================================================================
class TestPackageRegistry:
    """Per-file import bookkeeping."""

    def test_builtin_is_unqualified(self) -> None:
        reg = PackageRegistry()
        _, ft = parse_spanner_type("INT64", False)
        assert ft.get_type(reg) == "int64"
        assert len(reg) == 0

    def test_use_registers_once(self) -> None:
        reg = PackageRegistry()
        assert reg.use(SPANNER_PACKAGE, "NullString") == "spanner.NullString"
        assert reg.use(SPANNER_PACKAGE, "NullInt64") == "spanner.NullInt64"
        assert len(reg) == 1

    def test_groups_standard_first(self) -> None:
        reg = PackageRegistry()
        reg.use(SPANNER_PACKAGE, "Key")
        reg.use(TIME_PACKAGE, "Time")
        reg.register(Package(path="context"))
        assert reg.grouped_imports() == [
            ['"context"', '"time"'],
            ['"cloud.google.com/go/spanner"'],
        ]
        assert reg.imports() == ['"context"', '"time"', '"cloud.google.com/go/spanner"']

    def test_name_collision_gets_numeric_suffix(self) -> None:
        reg = PackageRegistry()
        assert reg.register(Package(path="example.com/a/spanner")) == "spanner"
        assert reg.register(SPANNER_PACKAGE) == "spanner1"
        assert '"example.com/a/spanner"' in reg.imports()
        assert 'spanner1 "cloud.google.com/go/spanner"' in reg.imports()

    def test_go_keyword_is_prefixed(self) -> None:
        reg = PackageRegistry()
        assert reg.register(Package(path="example.com/type")) == "_type"

    def test_explicit_alias(self) -> None:
        reg = PackageRegistry()
        assert reg.register(Package(path="google.golang.org/grpc/codes", alias="gcodes")) == "gcodes"
        assert reg.imports() == ['gcodes "google.golang.org/grpc/codes"']

    def test_path_with_two_aliases_is_rejected(self) -> None:
        reg = PackageRegistry()
        reg.register(Package(path="example.com/x", alias="a"))
        with pytest.raises(EmissionError, match="imported as both"):
            reg.register(Package(path="example.com/x", alias="b"))

    def test_alias_used_twice_is_rejected(self) -> None:
        reg = PackageRegistry()
        reg.register(Package(path="example.com/x", alias="a"))
        with pytest.raises(EmissionError, match="is used by both"):
            reg.register(Package(path="example.com/y", alias="a"))

    def test_local_package_is_unqualified(self) -> None:
        local = Package(path="example.com/models")
        reg = PackageRegistry(local_package=local)
        assert reg.use(local, "FullType") == "FullType"
