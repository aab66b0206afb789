# -*- encoding: utf-8 -*-
# @File   : reader.py
# @Time   : 2026/10/19 14:10:37
# @Author : Kariko Lin

"""INI lexer.

Works on decoded codepoints rather than lines, so that a value may hold
anything but a newline and a key anything but `<` or `=`:

    ```ini
    ; full line comment
    global = value        ; <- the comment here belongs to the value.

    [section]
    key = val
    key < item1           ; `<` appends to a list.
    key < item2
    ```

The reader never raises on bad input. It just stops emitting tokens.
"""

from enum import Enum
from typing import Callable

__all__ = ['TokenType', 'TokenHandler', 'RuneCursor', 'Reader', 'tokenize']


class TokenType(int, Enum):
    SECTION = 0
    KEY = 1
    KEY_LIST = 2
    VALUE = 3


TokenHandler = Callable[[TokenType, str], None]


class RuneCursor:
    """A cursor over decoded text with a pending span `[start, pos)`.

    `rewind()` steps back over the codepoint returned by the last `next()`,
    and is valid only once per successful `next()`.
    """

    def __init__(self, data: str) -> None:
        self.data = data
        self.start = 0
        self.pos = 0
        # width of the last decoded codepoint, 0 once rewound or at EOF.
        self._width = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def next(self) -> str | None:
        """Decode the next codepoint, `None` at end of input."""
        if self.pos >= len(self.data):
            self._width = 0
            return None
        rune = self.data[self.pos]
        self._width = len(rune)
        self.pos += self._width
        return rune

    def rewind(self) -> None:
        assert self._width > 0, 'rewind() twice without next() in between'
        self.pos -= self._width
        self._width = 0

    def ignore(self) -> None:
        """Drop the pending span."""
        self.start = self.pos

    def skip(self) -> None:
        self.next()
        self.ignore()

    def span(self) -> str:
        return self.data[self.start:self.pos]

    def __repr__(self) -> str:
        return '<RuneCursor start=%d pos=%d len=%d>' % (
            self.start, self.pos, len(self.data))


class Reader:
    """Single pass lexer. Reusable, but not reentrant."""

    def __init__(self) -> None:
        self._cur = RuneCursor('')
        self._out: TokenHandler = lambda tt, span: None

    @property
    def cursor(self) -> RuneCursor:
        return self._cur

    def read(self, data: bytes | str, handler: TokenHandler) -> int:
        """Read ini elements until nothing more can be recognized.

        Tokens are passed to `handler` as `(TokenType, span)`, the spans
        are *not* stripped.

        Returns:
            Offset (in codepoints) where the last, failed attempt began.
            Anything but whitespace from there on is a fragment
            the reader could not make sense of.
        """
        if isinstance(data, (bytes, bytearray, memoryview)):
            data = bytes(data).decode('utf-8', errors='replace')
        if not data.endswith('\n'):
            data += '\n'

        self._cur = RuneCursor(data)
        self._out = handler
        while True:
            mark = self._cur.pos
            if not (self._comment() or self._section() or self._key()):
                return mark

    def location(self, pos: int) -> tuple[int, int]:
        """1-based `(line, column)` of an offset in the last read data."""
        data = self._cur.data
        line = data.count('\n', 0, pos) + 1
        column = pos - (data.rfind('\n', 0, pos) + 1) + 1
        return line, column

    def _emit(self, tt: TokenType) -> None:
        self._out(tt, self._cur.span())

    def _comment(self) -> bool:
        self._accept_space()
        self._cur.ignore()
        if not self._accept(';'):
            return False
        self._accept_until('\n')
        self._cur.skip()
        return True

    def _section(self) -> bool:
        cur = self._cur
        self._accept_space()
        cur.ignore()
        if not self._accept('['):
            return False
        cur.ignore()
        if self._accept_until(']') is None:
            return False
        self._emit(TokenType.SECTION)
        cur.ignore()
        cur.skip()  # ']'
        return True

    def _key(self) -> bool:
        cur = self._cur
        self._accept_space()
        cur.ignore()
        delim = self._accept_until('<', '=')
        if delim is None or cur.pos == cur.start:
            return False
        self._emit(TokenType.KEY_LIST if delim == '<' else TokenType.KEY)
        cur.ignore()
        cur.skip()
        return self._value()

    def _value(self) -> bool:
        if self._accept_until('\n') is None:
            return False
        self._emit(TokenType.VALUE)
        self._cur.ignore()
        return True

    def _accept(self, rune: str) -> bool:
        """Consume the next codepoint only if it is `rune`."""
        nxt = self._cur.next()
        if nxt is None:
            return False
        if nxt != rune:
            self._cur.rewind()
            return False
        return True

    def _accept_until(self, *stops: str) -> str | None:
        """Consume codepoints until one of `stops`, which is left unread.

        Returns the stop met, or `None` if input ran out first.
        """
        while (nxt := self._cur.next()) is not None:
            if nxt in stops:
                self._cur.rewind()
                return nxt
        return None

    def _accept_space(self) -> bool:
        pos = self._cur.pos
        while (nxt := self._cur.next()) is not None:
            if not nxt.isspace():
                self._cur.rewind()
                break
        return self._cur.pos > pos


def tokenize(data: bytes | str) -> list[tuple[TokenType, str]]:
    """Collect the whole token stream of `data`."""
    tokens: list[tuple[TokenType, str]] = []
    Reader().read(data, lambda tt, span: tokens.append((tt, span)))
    return tokens
