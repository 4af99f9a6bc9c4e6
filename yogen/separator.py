# File: yogen/separator.py
"""
yogen - DDL Statement Separator
================================
Splits a DDL file into individual statements without parsing them.

Statement delimiters are ``;`` and ``\\G``.  A delimiter is ignored inside:
    - comments: ``# ...``, ``-- ...`` (to end of line) and ``/* ... */``;
    - string and bytes literals, with optional ``r`` / ``b`` / ``rb``
      prefixes, single or triple quoted;
    - back-quoted identifiers.

Comments are dropped from the output; everything else is kept verbatim
and each statement is stripped of surrounding whitespace.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List

logger: logging.Logger = logging.getLogger("yogen.separator")


class Delimiter(str, enum.Enum):
    """How a statement was terminated."""

    UNDEFINED = ""
    HORIZONTAL = ";"
    VERTICAL = "\\G"


@dataclass(frozen=True, slots=True)
class InputStatement:
    statement: str
    delim: Delimiter


class Separator:
    """Single-pass scanner over the input text."""

    def __init__(self, text: str) -> None:
        self.text: str = text
        self.pos: int = 0
        self._buf: List[str] = []

    # -----------------------------------------------------------------
    # Scanning helpers
    # -----------------------------------------------------------------

    @property
    def remaining(self) -> str:
        return self.text[self.pos:]

    @property
    def consumed(self) -> str:
        return "".join(self._buf)

    def _emit(self, chunk: str) -> None:
        self._buf.append(chunk)

    def _take(self, count: int = 1) -> None:
        self._emit(self.text[self.pos:self.pos + count])
        self.pos += count

    def skip_comments(self) -> None:
        """Skip any run of comments at the current position."""
        text: str = self.text
        while self.pos < len(text):
            if text.startswith("#", self.pos):
                terminator, start = "\n", self.pos + 1
            elif text.startswith("--", self.pos):
                terminator, start = "\n", self.pos + 2
            elif text.startswith("/*", self.pos):
                # Spanner has no nested block comments.
                terminator, start = "*/", self.pos + 2
            else:
                return
            end: int = text.find(terminator, start)
            if end < 0:
                self.pos = len(text)
                return
            self.pos = end + len(terminator)

    def consume_string_delimiter(self) -> str:
        quote: str = self.text[self.pos]
        if self.text.startswith(quote * 3, self.pos):
            self._take(3)
            return quote * 3
        self._take(1)
        return quote

    def consume_string_content(self, delim: str, raw: bool) -> None:
        text: str = self.text
        while self.pos < len(text):
            if text.startswith(delim, self.pos):
                self._take(len(delim))
                return
            if text[self.pos] == "\\":
                if raw:
                    self._take(1)
                    continue
                if self.pos + 1 >= len(text):
                    self._take(1)
                    return
                self._take(2)
                continue
            self._take(1)

    def consume_string(self, prefix_len: int = 0, raw: bool = False) -> None:
        """Consume an optional ``r``/``b`` prefix and a quoted literal."""
        if prefix_len:
            self._take(prefix_len)
        delim: str = self.consume_string_delimiter()
        self.consume_string_content(delim, raw)

    def _string_prefix(self) -> tuple:
        """Return ``(prefix_len, raw)`` if a literal starts here, else ``(-1, False)``."""
        raw: bool = False
        is_bytes: bool = False
        for offset in range(3):
            idx: int = self.pos + offset
            if idx >= len(self.text):
                break
            ch: str = self.text[idx]
            if not raw and ch in "rR":
                raw = True
                continue
            if not is_bytes and ch in "bB":
                is_bytes = True
                continue
            if ch in "\"'":
                return offset, raw
            break
        return -1, False

    # -----------------------------------------------------------------
    # Main loop
    # -----------------------------------------------------------------

    def _flush(self, statements: List[InputStatement], delim: Delimiter) -> None:
        statements.append(InputStatement(self.consumed.strip(), delim))
        self._buf = []

    def separate(self) -> List[InputStatement]:
        statements: List[InputStatement] = []
        text: str = self.text
        while self.pos < len(text):
            self.skip_comments()
            if self.pos >= len(text):
                break

            ch: str = text[self.pos]
            if ch in "\"'rRbB":
                prefix_len, raw = self._string_prefix()
                if prefix_len >= 0:
                    self.consume_string(prefix_len, raw)
                else:
                    self._take(1)
            elif ch == "`":
                self._take(1)
                self.consume_string_content("`", False)
            elif ch == ";":
                self._flush(statements, Delimiter.HORIZONTAL)
                self.pos += 1
            elif ch == "\\" and text.startswith("\\G", self.pos):
                self._flush(statements, Delimiter.VERTICAL)
                self.pos += 2
            else:
                self._take(1)

        rest: str = self.consumed.strip()
        if rest:
            statements.append(InputStatement(rest, Delimiter.UNDEFINED))
        self._buf = []
        return statements


def separate_input(text: str) -> List[InputStatement]:
    """Split *text* into statements."""
    statements: List[InputStatement] = Separator(text).separate()
    logger.debug("Separated %d statement(s).", len(statements))
    return statements


__all__: List[str] = ["Delimiter", "InputStatement", "Separator", "separate_input"]

logger.debug("yogen.separator loaded.")
