# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2026/10/19 15:08:20
# @Author : Kariko Lin

"""Note: This parser **does not report syntax errors** by default.

Reading simply stops at the first thing the lexer cannot recognize,
and whatever was read until then is kept.
Pass `strict=True` if you'd rather get an `IniSyntaxError`.

Keys are expected to keep one form within a file:

    ```ini
    [keys]
    auth = aaa   ; a plain value
    auth < bbb   ; replaces `aaa` with ['bbb'], and warns.
    ```

The last form always wins, a `UserWarning` is shown on every switch.
"""

import logging
import os
from io import StringIO
from os import PathLike
from typing import TextIO
from warnings import warn

from chardet import detect as guess_codec

from .abstract import FileHandler
from .model import IniDocument, IniSection
from .reader import Reader, TokenType

__all__ = ['IniError', 'IniSyntaxError', 'IniParser']

logger = logging.getLogger(__name__)


class IniError(Exception):
    """Base of errors raised by this package."""
    pass


class IniSyntaxError(IniError, ValueError):
    """Only raised in strict mode."""

    def __init__(self, msg: str, line: int, column: int) -> None:
        super().__init__(f'{msg} (line {line}, column {column})')
        self.line = line
        self.column = column


class _Reconciler:
    """Turns tokens into document mutations."""

    def __init__(
        self, reader: Reader, doc: IniDocument, strict: bool
    ) -> None:
        self._reader = reader
        self._doc = doc
        self._strict = strict
        self._section: IniSection = doc.header
        self._key: str | None = None

    def __call__(self, tt: TokenType, span: str) -> None:
        text = span.strip()
        if tt is TokenType.VALUE:
            self._value(text)
            return

        if self._strict and '\n' in text:
            raise IniSyntaxError(
                'unterminated section header' if tt is TokenType.SECTION
                else 'line without "=" or "<"',
                *self._reader.location(self._reader.cursor.start))

        if tt is TokenType.SECTION:
            self._section = self._doc.section(text)
            self._key = None
        elif tt is TokenType.KEY:
            if isinstance(self._section.get(text), list):
                self.__warn_mixed(text, '=')
            self._key = text
            self._section[text] = ''
        elif tt is TokenType.KEY_LIST:
            cur = self._section.get(text)
            if isinstance(cur, str):
                self.__warn_mixed(text, '<')
            self._key = text
            if not isinstance(cur, list):
                self._section[text] = []

    def _value(self, text: str) -> None:
        if self._key is None:
            return
        cur = self._section[self._key]
        if isinstance(cur, list):
            cur.append(text)
        else:
            self._section[self._key] = text
        self._key = None

    def __warn_mixed(self, key: str, form: str) -> None:
        line, _ = self._reader.location(self._reader.cursor.start)
        warn(
            f'{self._section}: "{key}" switched to "{form}" form '
            f'at line {line}, previous value dropped.')


class IniParser(FileHandler[IniDocument]):
    def __init__(
        self, filename: str | PathLike[str],
        encoding: str | None = None, *, strict: bool = False
    ) -> None:
        super().__init__(filename)
        self._codec = encoding
        self._strict = strict

    @staticmethod
    def readstream(
        data: bytes | str,
        instance: IniDocument | None = None,
        *, strict: bool = False
    ) -> IniDocument:
        """读取整块 INI 数据（`bytes`按 UTF-8 解码）。

        `instance`不为`None`时合并进去，而不是先清空。
        如没有特殊需求，直接调用`self.read()`便是。
        """
        if instance is None:
            instance = IniDocument()
        reader = Reader()
        stop = reader.read(data, _Reconciler(reader, instance, strict))

        rest = reader.cursor.data[stop:]
        if rest and not rest.isspace():
            stop += len(rest) - len(rest.lstrip())
            line, column = reader.location(stop)
            if strict:
                raise IniSyntaxError(
                    'unrecognized trailing content', line, column)
            logger.debug(
                'INI reading stopped at line %d, column %d, '
                'ignoring: %.40r', line, column, rest)
        return instance

    @staticmethod
    def writestream(
        instance: IniDocument, fp: TextIO, *, blank_lines: int = 1
    ) -> None:
        """Write sections in order, the global one first and headerless."""
        for name, sect in [(IniDocument.GLOBAL, instance.header)] + [
            (k, v) for k, v in instance.items() if k != IniDocument.GLOBAL
        ]:
            if name != IniDocument.GLOBAL:
                fp.write(f'[{name}]\n')
            for key, val in sect.items():
                if isinstance(val, list):
                    # empty lists write nothing and get lost on reloads.
                    for item in val:
                        fp.write(f'{key} < {item}\n')
                else:
                    fp.write(f'{key} = {val}\n')
            fp.write('\n' * blank_lines)

    @staticmethod
    def dumps(instance: IniDocument, *, blank_lines: int = 1) -> str:
        buf = StringIO()
        IniParser.writestream(instance, buf, blank_lines=blank_lines)
        return buf.getvalue()

    def _decode(self, raw: bytes) -> str:
        try:
            return raw.decode(self._codec or 'utf-8-sig')
        except UnicodeDecodeError:
            pass

        codec = guess_codec(raw)
        if codec['encoding'] is not None and codec['confidence'] >= 0.8:
            logger.info(
                '%s is not %s, decoding as %s.',
                self._fn, self._codec or 'UTF-8', codec['encoding'])
            try:
                return raw.decode(codec['encoding'])
            except (UnicodeDecodeError, LookupError):
                pass
        # fallbacks
        logger.warning(
            'Unable to tell the encoding of %s, '
            'undecodable bytes get replaced.', self._fn)
        return raw.decode('utf-8', errors='replace')

    def read(self, instance: IniDocument | None = None) -> IniDocument:
        """读取`IniParser`实例指定的文件。

        注：`OSError`（找不到文件、无权限等）原样抛出。
        """
        with open(self._fn, 'rb') as fp:
            raw = fp.read()
        logger.debug('Read %d bytes from %s.', len(raw), self._fn)
        return self.readstream(
            self._decode(raw), instance, strict=self._strict)

    def write(
        self, instance: IniDocument, *, blank_lines: int = 1
    ) -> None:
        """保存到 INI 文件。新建的文件权限为`0o600`。"""
        data = self.dumps(instance, blank_lines=blank_lines)
        fd = os.open(self._fn, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with open(fd, 'w', encoding=self._codec or 'utf-8') as fp:
            fp.write(data)
        logger.debug('Wrote %d sections to %s.', len(instance), self._fn)

    def __str__(self) -> str:
        return 'INI file: ' + super().__str__() + f'({self._codec})'
