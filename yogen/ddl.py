# File: yogen/ddl.py
"""
yogen - Spanner DDL Parser
===========================
A small tokenizer and recursive-descent parser for the subset of Cloud
Spanner DDL that matters to code generation.

Fully parsed statements:
    - ``CREATE TABLE``: columns (type text, NOT NULL, DEFAULT, generated
      ``AS (...) [STORED]``, HIDDEN, OPTIONS), table constraints
      (FOREIGN KEY, CHECK), PRIMARY KEY, INTERLEAVE IN [PARENT], ROW
      DELETION POLICY.
    - ``CREATE [UNIQUE] [NULL_FILTERED] INDEX``: key parts, STORING,
      INTERLEAVE IN.
    - ``ALTER TABLE ... ADD [CONSTRAINT x] FOREIGN KEY``; any other ALTER
      TABLE is returned with its alteration kind only.

Recognised but not parsed (``OtherStatement`` / ``ChangeStreamStatement``):
    CREATE/ALTER/DROP CHANGE STREAM, CREATE VIEW, DROP ..., GRANT, REVOKE,
    ALTER DATABASE, ALTER INDEX, CREATE ROLE / SEQUENCE / MODEL / SCHEMA,
    RENAME, ANALYZE.

Anything else raises ``DDLParseError``.  Expressions (defaults, checks,
generated columns, options) are kept as raw source text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from yogen.errors import DDLParseError
from yogen.separator import separate_input

logger: logging.Logger = logging.getLogger("yogen.ddl")

# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

IDENT: str = "IDENT"
NUMBER: str = "NUMBER"
STRING: str = "STRING"
SYMBOL: str = "SYMBOL"
EOF: str = "EOF"

_SCALAR_TYPES = frozenset({
    "BOOL", "INT64", "FLOAT32", "FLOAT64", "NUMERIC", "STRING", "BYTES",
    "DATE", "TIMESTAMP", "JSON", "TOKENLIST", "INTERVAL", "UUID",
})

_STATEMENT_VERBS = frozenset({
    "CREATE", "ALTER", "DROP", "GRANT", "REVOKE", "RENAME", "ANALYZE",
})


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    value: str
    pos: int
    end: int
    quoted: bool = False

    def is_keyword(self, *words: str) -> bool:
        return self.kind == IDENT and not self.quoted and self.value.upper() in words

    def is_symbol(self, symbol: str) -> bool:
        return self.kind == SYMBOL and self.value == symbol


def tokenize(sql: str) -> List[Token]:
    """Split one statement into tokens; comments are dropped."""
    tokens: List[Token] = []
    i: int = 0
    n: int = len(sql)
    while i < n:
        ch: str = sql[i]
        if ch.isspace():
            i += 1
            continue
        if ch == "#" or sql.startswith("--", i):
            end: int = sql.find("\n", i)
            i = n if end < 0 else end + 1
            continue
        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            if end < 0:
                raise DDLParseError("unterminated comment", sql, i)
            i = end + 2
            continue
        if ch == "`":
            end = sql.find("`", i + 1)
            if end < 0:
                raise DDLParseError("unterminated quoted identifier", sql, i)
            tokens.append(Token(IDENT, sql[i + 1:end], i, end + 1, quoted=True))
            i = end + 1
            continue
        if ch.isalpha() or ch == "_":
            j: int = i + 1
            while j < n and (sql[j].isalnum() or sql[j] == "_"):
                j += 1
            word: str = sql[i:j]
            if j < n and sql[j] in "\"'" and word.lower() in ("r", "b", "rb", "br"):
                end = _scan_string(sql, j, raw="r" in word.lower())
                tokens.append(Token(STRING, sql[i:end], i, end))
                i = end
                continue
            tokens.append(Token(IDENT, word, i, j))
            i = j
            continue
        if ch.isdigit():
            j = i + 1
            while j < n and (sql[j].isalnum() or sql[j] == "."):
                j += 1
            tokens.append(Token(NUMBER, sql[i:j], i, j))
            i = j
            continue
        if ch in "\"'":
            end = _scan_string(sql, i, raw=False)
            tokens.append(Token(STRING, sql[i:end], i, end))
            i = end
            continue
        tokens.append(Token(SYMBOL, ch, i, i + 1))
        i += 1
    tokens.append(Token(EOF, "", n, n))
    return tokens


def _scan_string(sql: str, start: int, raw: bool) -> int:
    quote: str = sql[start]
    delim: str = quote * 3 if sql.startswith(quote * 3, start) else quote
    i: int = start + len(delim)
    while i < len(sql):
        if sql.startswith(delim, i):
            return i + len(delim)
        if sql[i] == "\\" and not raw:
            i += 2
            continue
        i += 1
    raise DDLParseError("unterminated string literal", sql, start)


# ---------------------------------------------------------------------------
# Statement tree
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Path:
    """A possibly dotted name such as ``Singers`` or ``sch.Singers``."""

    idents: List[str]

    def simple_name(self) -> str:
        if len(self.idents) != 1:
            raise DDLParseError(f"path isn't simple ident: {self}")
        return self.idents[0]

    def __str__(self) -> str:
        return ".".join(self.idents)


@dataclass(slots=True)
class ColumnDef:
    name: str
    type: str
    not_null: bool = False
    default_expr: Optional[str] = None
    generated_expr: Optional[str] = None
    stored: bool = False
    hidden: bool = False
    options: Optional[str] = None


@dataclass(slots=True)
class KeyPart:
    name: str
    desc: bool = False


@dataclass(slots=True)
class ForeignKey:
    columns: List[str]
    ref_table: Path
    ref_columns: List[str]
    name: str = ""
    on_delete: str = ""


@dataclass(slots=True)
class Check:
    expr: str
    name: str = ""


@dataclass(slots=True)
class Interleave:
    parent: Path
    on_delete: str = ""
    in_parent: bool = True


@dataclass(slots=True)
class CreateTable:
    name: Path
    columns: List[ColumnDef] = field(default_factory=list)
    primary_key: List[KeyPart] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    checks: List[Check] = field(default_factory=list)
    interleave: Optional[Interleave] = None
    row_deletion_policy: Optional[str] = None
    if_not_exists: bool = False
    sql: str = ""


@dataclass(slots=True)
class CreateIndex:
    name: Path
    table_name: Path
    keys: List[KeyPart] = field(default_factory=list)
    storing: List[str] = field(default_factory=list)
    unique: bool = False
    null_filtered: bool = False
    interleave_in: Optional[Path] = None
    if_not_exists: bool = False
    sql: str = ""


@dataclass(slots=True)
class AlterTable:
    name: Path
    alteration: str
    foreign_key: Optional[ForeignKey] = None
    sql: str = ""

    @property
    def is_add_foreign_key(self) -> bool:
        return self.foreign_key is not None


@dataclass(slots=True)
class ChangeStreamStatement:
    sql: str


@dataclass(slots=True)
class OtherStatement:
    kind: str
    sql: str


Statement = Union[CreateTable, CreateIndex, AlterTable, ChangeStreamStatement, OtherStatement]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class Parser:
    """Parses exactly one DDL statement."""

    def __init__(self, sql: str) -> None:
        self.sql: str = sql
        self.tokens: List[Token] = tokenize(sql)
        self.index: int = 0

    # -----------------------------------------------------------------
    # Token helpers
    # -----------------------------------------------------------------

    def peek(self, ahead: int = 0) -> Token:
        idx: int = min(self.index + ahead, len(self.tokens) - 1)
        return self.tokens[idx]

    def advance(self) -> Token:
        tok: Token = self.peek()
        if tok.kind != EOF:
            self.index += 1
        return tok

    def error(self, message: str, tok: Optional[Token] = None) -> DDLParseError:
        tok = tok or self.peek()
        found: str = "end of statement" if tok.kind == EOF else repr(tok.value)
        return DDLParseError(f"{message}, found {found}", self.sql, tok.pos)

    def accept_keyword(self, *words: str) -> bool:
        if self.peek().is_keyword(*words):
            self.advance()
            return True
        return False

    def accept_keywords(self, *sequence: str) -> bool:
        for offset, word in enumerate(sequence):
            if not self.peek(offset).is_keyword(word):
                return False
        self.index += len(sequence)
        return True

    def expect_keyword(self, *words: str) -> Token:
        tok: Token = self.peek()
        if not tok.is_keyword(*words):
            raise self.error(f"expected {' or '.join(words)}")
        return self.advance()

    def accept_symbol(self, symbol: str) -> bool:
        if self.peek().is_symbol(symbol):
            self.advance()
            return True
        return False

    def expect_symbol(self, symbol: str) -> Token:
        if not self.peek().is_symbol(symbol):
            raise self.error(f"expected {symbol!r}")
        return self.advance()

    def expect_ident(self) -> str:
        tok: Token = self.peek()
        if tok.kind != IDENT:
            raise self.error("expected identifier")
        self.advance()
        return tok.value

    def expect_end(self) -> None:
        if self.peek().kind != EOF:
            raise self.error("unexpected trailing tokens")

    def parse_path(self) -> Path:
        idents: List[str] = [self.expect_ident()]
        while self.accept_symbol("."):
            idents.append(self.expect_ident())
        return Path(idents)

    def parse_balanced(self, open_: str = "(", close: str = ")") -> str:
        """Consume a bracketed group and return the raw text inside it."""
        start: Token = self.expect_symbol(open_)
        depth: int = 1
        while depth:
            tok: Token = self.advance()
            if tok.kind == EOF:
                raise self.error(f"unbalanced {open_!r}", start)
            if tok.is_symbol(open_):
                depth += 1
            elif tok.is_symbol(close):
                depth -= 1
        end_tok: Token = self.tokens[self.index - 1]
        return self.sql[start.end:end_tok.pos].strip()

    def parse_ident_list(self) -> List[str]:
        self.expect_symbol("(")
        names: List[str] = []
        if self.accept_symbol(")"):
            return names
        while True:
            names.append(self.expect_ident())
            if self.accept_symbol(")"):
                return names
            self.expect_symbol(",")

    def parse_key_parts(self) -> List[KeyPart]:
        self.expect_symbol("(")
        keys: List[KeyPart] = []
        if self.accept_symbol(")"):
            return keys
        while True:
            name: str = self.expect_ident()
            desc: bool = False
            if self.accept_keyword("DESC"):
                desc = True
            else:
                self.accept_keyword("ASC")
            keys.append(KeyPart(name, desc))
            if self.accept_symbol(")"):
                return keys
            self.expect_symbol(",")

    # -----------------------------------------------------------------
    # Types
    # -----------------------------------------------------------------

    def parse_type(self) -> str:
        """Return the canonical SQL text of a column type."""
        tok: Token = self.peek()
        if tok.kind != IDENT:
            raise self.error("expected column type")
        upper: str = tok.value.upper()

        if tok.is_keyword("ARRAY"):
            self.advance()
            self.expect_symbol("<")
            element: str = self.parse_type()
            self.expect_symbol(">")
            if self.peek().is_symbol("("):
                # vector_length => N
                self.parse_balanced()
            return f"ARRAY<{element}>"

        if tok.is_keyword("STRUCT"):
            self.advance()
            return f"STRUCT<{self.parse_balanced('<', '>')}>"

        if not tok.quoted and upper in _SCALAR_TYPES:
            self.advance()
            if self.peek().is_symbol("("):
                self.advance()
                size_tok: Token = self.advance()
                if size_tok.is_keyword("MAX"):
                    size: str = "MAX"
                elif size_tok.kind == NUMBER and size_tok.value.isdigit():
                    size = size_tok.value
                else:
                    raise self.error("expected length or MAX", size_tok)
                self.expect_symbol(")")
                return f"{upper}({size})"
            return upper

        # proto / enum types are referenced by (dotted) name
        return str(self.parse_path())

    # -----------------------------------------------------------------
    # Constraints
    # -----------------------------------------------------------------

    def parse_foreign_key(self, name: str = "") -> ForeignKey:
        self.expect_keyword("FOREIGN")
        self.expect_keyword("KEY")
        columns: List[str] = self.parse_ident_list()
        self.expect_keyword("REFERENCES")
        ref_table: Path = self.parse_path()
        ref_columns: List[str] = self.parse_ident_list()
        on_delete: str = ""
        if self.accept_keywords("ON", "DELETE"):
            if self.accept_keyword("CASCADE"):
                on_delete = "CASCADE"
            else:
                self.expect_keyword("NO")
                self.expect_keyword("ACTION")
                on_delete = "NO ACTION"
        if not self.accept_keywords("NOT", "ENFORCED"):
            self.accept_keyword("ENFORCED")
        return ForeignKey(columns, ref_table, ref_columns, name, on_delete)

    def parse_check(self, name: str = "") -> Check:
        self.expect_keyword("CHECK")
        return Check(self.parse_balanced(), name)

    # -----------------------------------------------------------------
    # CREATE TABLE
    # -----------------------------------------------------------------

    def parse_column(self) -> ColumnDef:
        name: str = self.expect_ident()
        column: ColumnDef = ColumnDef(name=name, type=self.parse_type())
        while True:
            if self.accept_keywords("NOT", "NULL"):
                column.not_null = True
            elif self.accept_keyword("DEFAULT"):
                column.default_expr = self.parse_balanced()
            elif self.accept_keyword("AS"):
                column.generated_expr = self.parse_balanced()
                column.stored = self.accept_keyword("STORED")
            elif self.accept_keyword("HIDDEN"):
                column.hidden = True
            elif self.accept_keyword("OPTIONS"):
                column.options = self.parse_balanced()
            else:
                return column

    def parse_table_element(self, table: CreateTable) -> None:
        if self.peek().is_keyword("CONSTRAINT"):
            self.advance()
            name: str = self.expect_ident()
            if self.peek().is_keyword("FOREIGN"):
                table.foreign_keys.append(self.parse_foreign_key(name))
            else:
                table.checks.append(self.parse_check(name))
            return
        if self.peek().is_keyword("FOREIGN") and self.peek(1).is_keyword("KEY"):
            table.foreign_keys.append(self.parse_foreign_key())
            return
        if self.peek().is_keyword("CHECK") and self.peek(1).is_symbol("("):
            table.checks.append(self.parse_check())
            return
        table.columns.append(self.parse_column())

    def parse_create_table(self) -> CreateTable:
        if_not_exists: bool = self.accept_keywords("IF", "NOT", "EXISTS")
        table: CreateTable = CreateTable(
            name=self.parse_path(), if_not_exists=if_not_exists, sql=self.sql
        )
        self.expect_symbol("(")
        if not self.accept_symbol(")"):
            while True:
                self.parse_table_element(table)
                if self.accept_symbol(")"):
                    break
                self.expect_symbol(",")
                # trailing comma before ')'
                if self.accept_symbol(")"):
                    break

        if self.accept_keywords("PRIMARY", "KEY"):
            table.primary_key = self.parse_key_parts()

        while self.accept_symbol(","):
            if self.accept_keyword("INTERLEAVE"):
                self.expect_keyword("IN")
                in_parent: bool = self.accept_keyword("PARENT")
                parent: Path = self.parse_path()
                on_delete: str = ""
                if self.accept_keywords("ON", "DELETE"):
                    if self.accept_keyword("CASCADE"):
                        on_delete = "CASCADE"
                    else:
                        self.expect_keyword("NO")
                        self.expect_keyword("ACTION")
                        on_delete = "NO ACTION"
                table.interleave = Interleave(parent, on_delete, in_parent)
            elif self.accept_keywords("ROW", "DELETION", "POLICY"):
                table.row_deletion_policy = self.parse_balanced()
            else:
                raise self.error("expected INTERLEAVE or ROW DELETION POLICY")
        self.expect_end()
        return table

    # -----------------------------------------------------------------
    # CREATE INDEX
    # -----------------------------------------------------------------

    def parse_create_index(self, unique: bool, null_filtered: bool) -> CreateIndex:
        if_not_exists: bool = self.accept_keywords("IF", "NOT", "EXISTS")
        name: Path = self.parse_path()
        self.expect_keyword("ON")
        index: CreateIndex = CreateIndex(
            name=name,
            table_name=self.parse_path(),
            unique=unique,
            null_filtered=null_filtered,
            if_not_exists=if_not_exists,
            sql=self.sql,
        )
        index.keys = self.parse_key_parts()
        if self.accept_keyword("STORING"):
            index.storing = self.parse_ident_list()
        if self.accept_symbol(","):
            self.expect_keyword("INTERLEAVE")
            self.expect_keyword("IN")
            index.interleave_in = self.parse_path()
        if self.accept_keyword("OPTIONS"):
            self.parse_balanced()
        self.expect_end()
        return index

    # -----------------------------------------------------------------
    # ALTER TABLE
    # -----------------------------------------------------------------

    def parse_alter_table(self) -> AlterTable:
        name: Path = self.parse_path()
        start: Token = self.peek()
        if start.is_keyword("ADD"):
            self.advance()
            constraint: str = ""
            if self.accept_keyword("CONSTRAINT"):
                constraint = self.expect_ident()
            if self.peek().is_keyword("FOREIGN"):
                fk: ForeignKey = self.parse_foreign_key(constraint)
                self.expect_end()
                return AlterTable(name, "ADD FOREIGN KEY", fk, self.sql)
        words: List[str] = []
        for tok in self.tokens[self.index - (1 if start.is_keyword("ADD") else 0):]:
            if tok.kind != IDENT or tok.quoted or len(words) == 2:
                break
            words.append(tok.value.upper())
        return AlterTable(name, " ".join(words) or start.value, None, self.sql)

    # -----------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------

    def parse(self) -> Statement:
        verb: Token = self.peek()
        if not verb.is_keyword(*_STATEMENT_VERBS):
            raise self.error("expected a DDL statement")
        self.advance()

        if verb.is_keyword("CREATE"):
            if self.accept_keyword("TABLE"):
                return self.parse_create_table()
            unique: bool = self.accept_keyword("UNIQUE")
            null_filtered: bool = self.accept_keyword("NULL_FILTERED")
            if self.accept_keyword("INDEX"):
                return self.parse_create_index(unique, null_filtered)
            if unique or null_filtered:
                raise self.error("expected INDEX")
            if self.peek().is_keyword("CHANGE") and self.peek(1).is_keyword("STREAM"):
                return ChangeStreamStatement(self.sql)
            return OtherStatement(self._kind(verb), self.sql)

        if verb.is_keyword("ALTER") and self.accept_keyword("TABLE"):
            return self.parse_alter_table()

        if verb.is_keyword("ALTER", "DROP") and self.peek().is_keyword("CHANGE"):
            return ChangeStreamStatement(self.sql)

        return OtherStatement(self._kind(verb), self.sql)

    def _kind(self, verb: Token) -> str:
        words: List[str] = [verb.value.upper()]
        for tok in self.tokens[self.index:self.index + 2]:
            if tok.kind != IDENT or tok.quoted:
                break
            words.append(tok.value.upper())
        return " ".join(words)


def parse_statement(sql: str) -> Statement:
    """Parse a single DDL statement."""
    return Parser(sql).parse()


def parse_ddl(text: str) -> List[Statement]:
    """Split *text* into statements and parse each one."""
    statements: List[Statement] = []
    for item in separate_input(text):
        if not item.statement:
            continue
        statements.append(parse_statement(item.statement))
    logger.debug("Parsed %d DDL statement(s).", len(statements))
    return statements


__all__: List[str] = [
    "AlterTable",
    "ChangeStreamStatement",
    "Check",
    "ColumnDef",
    "CreateIndex",
    "CreateTable",
    "ForeignKey",
    "Interleave",
    "KeyPart",
    "OtherStatement",
    "Parser",
    "Path",
    "Statement",
    "Token",
    "parse_ddl",
    "parse_statement",
    "tokenize",
]

logger.debug("yogen.ddl loaded.")
