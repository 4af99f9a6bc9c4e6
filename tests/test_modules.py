"""
tests/test_modules.py
Unit tests for yogen.modules.

Tests cover:
- Default module selection and the legacy index switch
- User header / global / type modules
- Template directory overrides
- copy_builtin_templates
- Load failures
- Partial lookup through template_loader
"""

from __future__ import annotations

import os
import pathlib

import jinja2
import pytest

from yogen.errors import TemplateError
from yogen.modules import (
    BUILTIN_MODULES,
    BuiltinModule,
    FileModule,
    TEMPLATE_PARTIALS,
    ModuleType,
    copy_builtin_templates,
    decide_modules,
    template_loader,
)


# ===========================================================================
class TestDecideModules:
    """Module selection."""

    def test_defaults(self) -> None:
        header, globals_, types = decide_modules()
        assert header.name == "header"
        assert [m.name for m in globals_] == ["interface"]
        assert [m.name for m in types] == ["type", "operation", "index"]
        assert {m.type for m in types} == {ModuleType.TYPE}

    def test_legacy_index(self) -> None:
        _, _, types = decide_modules(use_legacy_index_module=True)
        assert [m.name for m in types] == ["type", "operation", "legacy_index"]

    def test_disable_defaults(self) -> None:
        header, globals_, types = decide_modules(disable_default_modules=True)
        assert header.name == "null_header"
        assert globals_ == []
        assert types == []

    def test_user_modules_are_appended(self) -> None:
        header, globals_, types = decide_modules(
            header_module="tpl/my_header.go.tpl",
            global_modules=["tpl/helpers.go.j2"],
            type_modules=["tpl/extra.tmpl"],
        )
        assert isinstance(header, FileModule)
        assert header.name == "my_header"
        assert [m.name for m in globals_] == ["interface", "helpers"]
        assert [m.name for m in types] == ["type", "operation", "index", "extra"]
        assert types[-1].type is ModuleType.TYPE

    def test_template_path_is_carried(self, tmp_path: pathlib.Path) -> None:
        header, globals_, types = decide_modules(template_path=str(tmp_path))
        for module in [header, *globals_, *types]:
            assert isinstance(module, BuiltinModule)
            assert module.template_path == str(tmp_path)


# ===========================================================================
class TestLoad:
    """Reading template bodies."""

    def test_builtin_templates_ship_with_package(self) -> None:
        for module in BUILTIN_MODULES:
            body = module.load()
            assert isinstance(body, bytes)
        assert b"package {{ package }}" in BuiltinModule(ModuleType.HEADER, "header").load()

    def test_override_directory(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "type.go.j2").write_text("// custom {{ type.name }}\n", encoding="utf-8")
        module = BuiltinModule(ModuleType.TYPE, "type", str(tmp_path))
        assert module.load() == b"// custom {{ type.name }}\n"

    def test_override_directory_falls_back(self, tmp_path: pathlib.Path) -> None:
        module = BuiltinModule(ModuleType.TYPE, "operation", str(tmp_path))
        assert b"func Find{{ type.name }}" in module.load()

    def test_missing_file_module(self, tmp_path: pathlib.Path) -> None:
        module = FileModule(ModuleType.TYPE, "missing", str(tmp_path / "missing.go.j2"))
        with pytest.raises(TemplateError, match=r"Load module\(missing\)") as info:
            module.load()
        assert info.value.phase == "Load"

    def test_missing_builtin(self) -> None:
        with pytest.raises(TemplateError, match=r"Load module\(nope\)"):
            BuiltinModule(ModuleType.TYPE, "nope").load()


# ===========================================================================
class TestCopyBuiltinTemplates:
    """The create-template subcommand's worker."""

    def test_copies_every_template(self, tmp_path: pathlib.Path) -> None:
        dest = tmp_path / "templates" / "nested"
        written = copy_builtin_templates(str(dest))
        assert sorted(os.path.basename(p) for p in written) == sorted(
            [m.file_name for m in BUILTIN_MODULES] + [f"{name}.go.j2" for name in TEMPLATE_PARTIALS]
        )
        assert (dest / "index.go.j2").read_bytes() == BuiltinModule(ModuleType.TYPE, "index").load()

    def test_copied_templates_round_trip_as_overrides(self, tmp_path: pathlib.Path) -> None:
        copy_builtin_templates(str(tmp_path))
        header, _, _ = decide_modules(template_path=str(tmp_path))
        assert header.load() == BuiltinModule(ModuleType.HEADER, "header").load()


# ===========================================================================
class TestTemplateLoader:
    """Partials shared between modules."""

    def test_index_modules_share_one_partial(self) -> None:
        index = BuiltinModule(ModuleType.TYPE, "index").load()
        legacy = BuiltinModule(ModuleType.TYPE, "legacy_index").load()
        assert b'import index_funcs with context' in index
        assert b"index_funcs(legacy=false)" in index
        assert b"index_funcs(legacy=true)" in legacy

    def test_builtin_partial(self) -> None:
        env = jinja2.Environment(loader=template_loader())
        source, _, _ = env.loader.get_source(env, "index_funcs.go.j2")
        assert "{% macro index_funcs(legacy=false) %}" in source

    def test_override_directory_wins(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "index_funcs.go.j2").write_text(
            "{% macro index_funcs(legacy=false) %}custom{% endmacro %}", encoding="utf-8"
        )
        env = jinja2.Environment(loader=template_loader(str(tmp_path)))
        template = env.from_string('{% from "index_funcs.go.j2" import index_funcs %}{{ index_funcs() }}')
        assert template.render() == "custom"

    def test_override_directory_falls_back_to_builtin(self, tmp_path: pathlib.Path) -> None:
        env = jinja2.Environment(loader=template_loader(str(tmp_path)))
        source, _, _ = env.loader.get_source(env, "index_funcs.go.j2")
        assert "idx.legacy_func_name if legacy else idx.func_name" in source
