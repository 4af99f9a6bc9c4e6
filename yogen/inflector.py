# File: yogen/inflector.py
"""
yogen - English Inflector
==========================
Singular / plural transformations for table and type names.

The rule tables follow the classic Rails inflector: a list of regex
substitutions for plurals, one for singulars, a list of irregular pairs
and a set of uncountable words.  On top of those, yogen registers its own
irregulars (``foot/feet``, ``goose/geese``, ``media/media`` ...) and any
pairs the user supplies through an inflection-rule file.

Rules are compiled once per ``Inflector`` instance.  There is no
process-wide registry: two generators with different rule files never see
each other's irregulars.

Lookup order when inflecting a word:
    1. uncountables (case-insensitive, whole word)
    2. irregular pairs, in registration order (UPPER, Title, lower variants)
    3. regex rules, most recently added first (UPPER, as-is, ignore-case)

The first matching rule wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from yogen.utils import snake_to_camel

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("yogen.inflector")


# ---------------------------------------------------------------------------
# Base rule tables
# ---------------------------------------------------------------------------

_BASE_PLURALS: Tuple[Tuple[str, str], ...] = (
    (r"([a-z])$", r"\1s"),
    (r"s$", r"s"),
    (r"^(ax|test)is$", r"\1es"),
    (r"(octop|vir)us$", r"\1i"),
    (r"(octop|vir)i$", r"\1i"),
    (r"(alias|status|campus)$", r"\1es"),
    (r"(bu)s$", r"\1ses"),
    (r"(buffal|tomat)o$", r"\1oes"),
    (r"([ti])um$", r"\1a"),
    (r"([ti])a$", r"\1a"),
    (r"sis$", r"ses"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"(hive)$", r"\1s"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"^(m|l)ouse$", r"\1ice"),
    (r"^(m|l)ice$", r"\1ice"),
    (r"^(ox)$", r"\1en"),
    (r"^(oxen)$", r"\1"),
    (r"(quiz)$", r"\1zes"),
    (r"(drive)$", r"\1s"),
)

_BASE_SINGULARS: Tuple[Tuple[str, str], ...] = (
    (r"s$", r""),
    (r"(ss)$", r"\1"),
    (r"(n)ews$", r"\1ews"),
    (r"([ti])a$", r"\1um"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"(^analy)(sis|ses)$", r"\1sis"),
    (r"([^f])ves$", r"\1fe"),
    (r"(hive)s$", r"\1"),
    (r"(tive)s$", r"\1"),
    (r"([lr])ves$", r"\1f"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"(s)eries$", r"\1eries"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(c)ookies$", r"\1ookie"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"^(m|l)ice$", r"\1ouse"),
    (r"(bus)(es)?$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(shoe)s$", r"\1"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"(alias|status)(es)?$", r"\1"),
    (r"^(ox)en", r"\1"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"(matr)ices$", r"\1ix"),
    (r"(quiz)zes$", r"\1"),
    (r"(database)s$", r"\1"),
)

_BASE_IRREGULARS: Tuple[Tuple[str, str], ...] = (
    ("person", "people"),
    ("man", "men"),
    ("child", "children"),
    ("sex", "sexes"),
    ("move", "moves"),
    ("mombie", "mombies"),
)

_UNCOUNTABLES: Tuple[str, ...] = (
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "jeans",
    "police",
)

# ---------------------------------------------------------------------------
# yogen additions (registered after the caller's rules)
# ---------------------------------------------------------------------------

DEFAULT_SINGULAR_RULES: Tuple[Tuple[str, str], ...] = (
    (r"(slave)s$", r"\1"),
    (r"(drive)s$", r"\1"),
)

DEFAULT_PLURAL_RULES: Tuple[Tuple[str, str], ...] = (
    (r"^people$", r"people"),
)

DEFAULT_IRREGULARS: Tuple[Tuple[str, str], ...] = (
    ("foot", "feet"),
    ("tooth", "teeth"),
    ("mythos", "mythoi"),
    ("genie", "genies"),
    ("genus", "genera"),
    ("graffito", "graffiti"),
    ("mongoose", "mongooses"),
    ("goose", "geese"),
    ("niche", "niches"),
    ("numen", "numina"),
    ("occiput", "occiputs"),
    ("trilby", "trilbys"),
    ("testis", "testes"),
    ("corpus", "corpuses"),
    ("octopus", "octopuses"),
    ("opus", "opuses"),
    ("atlas", "atlases"),
    ("move", "moves"),
    ("wave", "waves"),
    ("curve", "curves"),
    ("glove", "gloves"),
    ("loaf", "loaves"),
    ("thief", "thieves"),
    ("belief", "beliefs"),
    ("chief", "chiefs"),
    ("chef", "chefs"),
    ("turf", "turfs"),
    ("beef", "beefs"),
    ("hoof", "hoofs"),
    ("cafe", "cafes"),
    ("photo", "photos"),
    ("piano", "pianos"),
    ("halo", "halos"),
    ("hero", "heroes"),
    ("potato", "potatoes"),
    ("foe", "foes"),
    ("media", "media"),
)


# ---------------------------------------------------------------------------
# Rule records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InflectionRule:
    """A user-supplied irregular pair."""

    singular: str
    plural: str


@dataclass(frozen=True, slots=True)
class _Compiled:
    pattern: re.Pattern[str]
    replace: str


def _title(word: str) -> str:
    return word[:1].upper() + word[1:]


def _upsert(rules: List[List[str]], find: str, replace: str) -> None:
    """Replace the rule whose find matches, or append a new one."""
    for rule in rules:
        if rule[0] == find:
            rule[1] = replace
            return
    rules.append([find, replace])


# ---------------------------------------------------------------------------
# Inflector
# ---------------------------------------------------------------------------


class Inflector:
    """
    Per-run singularize / pluralize engine.

    Args:
        rules: Extra irregular pairs, registered ahead of yogen's default
               irregulars.  A default pair with the same singular replaces
               the user's plural in place.

    Example::

        >>> inf = Inflector()
        >>> inf.pluralize("goose")
        'geese'
        >>> inf.singularize("FullTypes")
        'FullType'
    """

    def __init__(self, rules: Optional[Iterable[InflectionRule]] = None) -> None:
        self._plurals: List[List[str]] = [list(r) for r in _BASE_PLURALS]
        self._singulars: List[List[str]] = [list(r) for r in _BASE_SINGULARS]
        self._irregulars: List[List[str]] = [list(r) for r in _BASE_IRREGULARS]

        user_rules: List[InflectionRule] = list(rules or [])
        for rule in user_rules:
            _upsert(self._irregulars, rule.singular, rule.plural)
        for find, replace in DEFAULT_SINGULAR_RULES:
            _upsert(self._singulars, find, replace)
        for find, replace in DEFAULT_PLURAL_RULES:
            _upsert(self._plurals, find, replace)
        for singular, plural in DEFAULT_IRREGULARS:
            _upsert(self._irregulars, singular, plural)

        self._compiled_plurals: List[_Compiled] = []
        self._compiled_singulars: List[_Compiled] = []
        self._compile()

        logger.debug(
            "Inflector ready: %d user rule(s), %d irregular(s).",
            len(user_rules),
            len(self._irregulars),
        )

    # -----------------------------------------------------------------
    # Compilation
    # -----------------------------------------------------------------

    def _compile(self) -> None:
        plurals: List[_Compiled] = []
        singulars: List[_Compiled] = []

        for word in _UNCOUNTABLES:
            rule = _Compiled(re.compile(rf"^({word})$", re.IGNORECASE), r"\1")
            plurals.append(rule)
            singulars.append(rule)

        for singular, plural in self._irregulars:
            plurals.extend(self._irregular_variants(singular, plural))
        for singular, plural in self._irregulars:
            singulars.extend(self._irregular_variants(plural, singular))

        for find, replace in reversed(self._plurals):
            plurals.extend(self._regex_variants(find, replace))
        for find, replace in reversed(self._singulars):
            singulars.extend(self._regex_variants(find, replace))

        self._compiled_plurals = plurals
        self._compiled_singulars = singulars

    @staticmethod
    def _irregular_variants(find: str, replace: str) -> List[_Compiled]:
        return [
            _Compiled(re.compile(re.escape(find.upper()) + "$"), replace.upper()),
            _Compiled(re.compile(re.escape(_title(find)) + "$"), _title(replace)),
            _Compiled(re.compile(re.escape(find) + "$"), replace),
        ]

    @staticmethod
    def _regex_variants(find: str, replace: str) -> List[_Compiled]:
        return [
            _Compiled(re.compile(find.upper()), replace.upper()),
            _Compiled(re.compile(find), replace),
            _Compiled(re.compile(find, re.IGNORECASE), replace),
        ]

    @staticmethod
    def _apply(rules: Sequence[_Compiled], word: str) -> str:
        for rule in rules:
            if rule.pattern.search(word):
                return rule.pattern.sub(rule.replace, word)
        return word

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def pluralize(self, word: str) -> str:
        """Return the plural form of *word*."""
        return self._apply(self._compiled_plurals, word)

    def singularize(self, word: str) -> str:
        """Return the singular form of *word*."""
        return self._apply(self._compiled_singulars, word)

    def singularize_identifier(self, name: str) -> str:
        """
        Singularize the last ``_``-separated word of *name* and camel-case it.

        ``user_accounts`` → ``UserAccount``; ``FullTypes`` → ``FullType``.
        """
        head, sep, tail = name.rpartition("_")
        if sep:
            name = f"{head}_{self.singularize(tail)}"
        else:
            name = self.singularize(name)
        return snake_to_camel(name)


__all__: List[str] = [
    "DEFAULT_IRREGULARS",
    "DEFAULT_PLURAL_RULES",
    "DEFAULT_SINGULAR_RULES",
    "InflectionRule",
    "Inflector",
]

logger.debug("yogen.inflector loaded.")
