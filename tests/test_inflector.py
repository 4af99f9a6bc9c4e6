"""
tests/test_inflector.py
Unit tests for yogen.inflector.

Tests cover:
- Regular plural / singular rules
- yogen's irregular pairs (round trips in both directions)
- User-supplied inflection rules and their isolation per instance
- Identifier singularization (last ``_`` word only, camel-cased result)
"""

from __future__ import annotations

import pytest

from yogen.inflector import DEFAULT_IRREGULARS, InflectionRule, Inflector


@pytest.fixture()
def inflector() -> Inflector:
    return Inflector()


# ===========================================================================
class TestRegularRules:
    """Rails-style regex rules."""

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("Simple", "Simples"),
            ("FullType", "FullTypes"),
            ("box", "boxes"),
            ("category", "categories"),
            ("status", "statuses"),
            ("matrix", "matrices"),
            ("index", "indices"),
            ("knife", "knives"),
        ],
    )
    def test_pluralize(self, inflector: Inflector, singular: str, plural: str) -> None:
        assert inflector.pluralize(singular) == plural

    @pytest.mark.parametrize(
        "plural, singular",
        [
            ("FullTypes", "FullType"),
            ("Items", "Item"),
            ("categories", "category"),
            ("slaves", "slave"),
            ("drives", "drive"),
            ("news", "news"),
            ("indices", "index"),
        ],
    )
    def test_singularize(self, inflector: Inflector, plural: str, singular: str) -> None:
        assert inflector.singularize(plural) == singular

    def test_uncountable_is_unchanged(self, inflector: Inflector) -> None:
        assert inflector.pluralize("equipment") == "equipment"
        assert inflector.singularize("Sheep") == "Sheep"

    def test_word_without_rule_is_unchanged(self, inflector: Inflector) -> None:
        assert inflector.singularize("Simple") == "Simple"


# ===========================================================================
class TestIrregulars:
    """Built-in irregular pairs."""

    @pytest.mark.parametrize("singular, plural", DEFAULT_IRREGULARS)
    def test_round_trip(self, inflector: Inflector, singular: str, plural: str) -> None:
        assert inflector.pluralize(singular) == plural
        assert inflector.singularize(plural) == singular
        assert inflector.singularize(inflector.pluralize(singular)) == singular

    @pytest.mark.parametrize(
        "singular, plural",
        [("person", "people"), ("Person", "People"), ("PERSON", "PEOPLE"), ("goose", "geese")],
    )
    def test_casing_follows_input(self, inflector: Inflector, singular: str, plural: str) -> None:
        assert inflector.pluralize(singular) == plural
        assert inflector.singularize(plural) == singular

    def test_irregular_matches_word_suffix(self, inflector: Inflector) -> None:
        assert inflector.pluralize("SalesPerson") == "SalesPeople"


# ===========================================================================
class TestUserRules:
    """Rules from an inflection-rule file."""

    def test_user_rule_applies(self) -> None:
        inf = Inflector([InflectionRule("staff", "staffz")])
        assert inf.pluralize("staff") == "staffz"
        assert inf.singularize("staffz") == "staff"

    def test_rules_are_per_instance(self) -> None:
        Inflector([InflectionRule("staff", "staffz")])
        assert Inflector().pluralize("staff") == "staffs"

    def test_builtin_pair_overrides_user_plural(self) -> None:
        inf = Inflector([InflectionRule("goose", "gooses")])
        assert inf.pluralize("goose") == "geese"


# ===========================================================================
class TestSingularizeIdentifier:
    """Type-name derivation from table names."""

    @pytest.mark.parametrize(
        "table, type_name",
        [
            ("FullTypes", "FullType"),
            ("Simple", "Simple"),
            ("user_accounts", "UserAccount"),
            ("ForeignItems", "ForeignItem"),
            ("people", "Person"),
        ],
    )
    def test_table_names(self, inflector: Inflector, table: str, type_name: str) -> None:
        assert inflector.singularize_identifier(table) == type_name

    def test_only_last_word_is_singularized(self, inflector: Inflector) -> None:
        assert inflector.singularize_identifier("news_items") == "NewsItem"
