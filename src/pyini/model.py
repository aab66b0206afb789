# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2026/10/19 14:31:52
# @Author : Kariko Lin

"""
Basically INI Structure, with `<` lists support.

A value is either a plain `str` (`key = val`),
or a `list[str]` accumulated by `key < val` lines.
Nothing else gets stored, type conversions only happen in getters.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from math import isinf
from os import PathLike
from struct import pack, unpack

__all__ = ['IniValue', 'IniSection', 'IniDocument']

IniValue = str | list[str]

_TRUTHY = frozenset(('1', 't', 'T', 'TRUE', 'true', 'True'))
_FALSY = frozenset(('0', 'f', 'F', 'FALSE', 'false', 'False'))
_INT_BITS = (8, 16, 32, 64)


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _check_value(value: object) -> IniValue:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)) and all(
        isinstance(i, str) for i in value
    ):
        return list(value)
    raise TypeError(
        'INI values are `str` or a list of `str`, got %r. '
        'Try `set()` or `setlist()` to store other types.' % (value,))


class IniSection(MutableMapping[str, IniValue]):
    """INI 小节字典。按插入顺序维护键值对。

    值只可能是`str`（`=`）或`list[str]`（`<`），其余类型一律`TypeError`。
    `get*()`系列按需转换类型，失败时返回默认值而不抛异常。
    """

    def __init__(
        self, name: str = '',
        pairs: Mapping[str, IniValue] | Iterable[tuple[str, IniValue]]
        | None = None
    ) -> None:
        self._name = name
        self.__raw: dict[str, IniValue] = {}
        if pairs:
            self.update(pairs)

    @property
    def name(self) -> str:
        return self._name

    def __getitem__(self, key: str) -> IniValue:
        return self.__raw[key]

    def __setitem__(self, key: str, value: IniValue) -> None:
        if not isinstance(key, str):
            raise TypeError('INI keys are `str`, got %r.' % (key,))
        self.__raw[key] = _check_value(value)

    def __delitem__(self, key: str) -> None:
        del self.__raw[key]

    def __contains__(self, key: object) -> bool:
        return key in self.__raw

    def __len__(self) -> int:
        return len(self.__raw)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__raw)

    def __str__(self) -> str:
        return f'[{self._name}]'

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self._name, len(self.__raw))

    def set(self, key: str, value: object) -> None:
        """Store the text form of any scalar."""
        self[key] = _stringify(value)

    def setlist(self, key: str, *values: object) -> None:
        """Replace `key` with a list, each element in text form.

            ```python
            sect.setlist('foo', 'a', 'b', 'c')
            sect.setlist('bar')  # writes nothing at all.
            ```
        """
        self[key] = [_stringify(i) for i in values]

    def append(self, key: str, value: object) -> None:
        """Same as a `key < value` line. Scalars get replaced by a new list."""
        cur = self.__raw.get(key)
        if isinstance(cur, list):
            cur.append(_stringify(value))
        else:
            self.__raw[key] = [_stringify(value)]

    def getlist(self, key: str) -> list[str]:
        """Copy of a list value. `[]` when absent or not a list."""
        value = self.__raw.get(key)
        return list(value) if isinstance(value, list) else []

    def getstr(self, key: str, default: str = '') -> str:
        value = self.__raw.get(key)
        return value if isinstance(value, str) else default

    def getbool(self, key: str, default: bool = False) -> bool:
        value = self.getstr(key)
        if value in _TRUTHY:
            return True
        if value in _FALSY:
            return False
        return default

    def getint(self, key: str, default: int = 0, *, bits: int = 64) -> int:
        """Signed integer fitting in `bits` (8, 16, 32 or 64).

        Literals like `0x1F`, `0o17`, `0b101` and `1_000` are accepted.
        """
        value = self.__parse_int(self.getstr(key), bits, signed=True)
        return default if value is None else value

    def getuint(self, key: str, default: int = 0, *, bits: int = 64) -> int:
        value = self.__parse_int(self.getstr(key), bits, signed=False)
        return default if value is None else value

    def getfloat(
        self, key: str, default: float = 0.0, *, bits: int = 64
    ) -> float:
        """`bits=32` rounds the value to single precision."""
        if bits not in (32, 64):
            raise ValueError(f'unsupported float width: {bits}')
        text = self.getstr(key)
        try:
            value = float(text)
        except ValueError:
            return default
        if isinf(value) and 'inf' not in text.lower():
            return default  # out of range, not a literal infinity
        if bits == 32:
            try:
                value = unpack('<f', pack('<f', value))[0]
            except OverflowError:
                return default
        return value

    @staticmethod
    def __parse_int(text: str, bits: int, signed: bool) -> int | None:
        if bits not in _INT_BITS:
            raise ValueError(f'unsupported integer width: {bits}')
        if not signed and text.startswith(('+', '-')):
            return None
        try:
            value = int(text, 0)
        except ValueError:
            return None
        if signed:
            lo, hi = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            lo, hi = 0, (1 << bits) - 1
        return value if lo <= value <= hi else None


class IniDocument(MutableMapping[str, IniSection]):
    """INI 文件表示。

        ```ini
        key = val    ; 游离键值对，位于全局小节`""`，用`self.header`访问。

        [section]
        key233 = val666
        auth < aaa   ; `<`追加成列表。
        auth < bbb
        ```

    全局小节从构造起便存在。`self.section(name)`在小节不存在时会自动创建，
    `self[name]`则与普通字典一样抛`KeyError`。
    """

    GLOBAL = ''

    def __init__(self) -> None:
        self.__raw: dict[str, IniSection] = {self.GLOBAL: IniSection()}

    @property
    def header(self) -> IniSection:
        """The global section, holding pairs not under any `[...]`."""
        return self.section(self.GLOBAL)

    def section(self, name: str) -> IniSection:
        """Get a section, creating an empty one if needed."""
        if name not in self.__raw:
            self.__raw[name] = IniSection(name)
        return self.__raw[name]

    def __getitem__(self, key: str) -> IniSection:
        return self.__raw[key]

    def __setitem__(
        self, key: str, value: IniSection | Mapping[str, IniValue]
    ) -> None:
        # shouldn't keep ptr to external dict in key setting operation.
        self.__raw[key] = IniSection(key, value)

    def __delitem__(self, key: str) -> None:
        del self.__raw[key]

    def __contains__(self, key: object) -> bool:
        return key in self.__raw

    def __len__(self) -> int:
        return len(self.__raw)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__raw)

    def __repr__(self) -> str:
        return '<IniDocument sections=%r>' % list(self.__raw)

    def clear(self) -> None:
        self.__raw = {self.GLOBAL: IniSection()}

    def load(
        self, filename: str | PathLike[str], *,
        encoding: str | None = None, strict: bool = False
    ) -> 'IniDocument':
        """Merge a file into self, see `IniParser`."""
        from .parser import IniParser
        return IniParser(filename, encoding, strict=strict).read(self)

    def save(
        self, filename: str | PathLike[str], *,
        encoding: str | None = None, blank_lines: int = 1
    ) -> None:
        from .parser import IniParser
        IniParser(filename, encoding).write(self, blank_lines=blank_lines)

    def loads(
        self, data: bytes | str, *, strict: bool = False
    ) -> 'IniDocument':
        from .parser import IniParser
        return IniParser.readstream(data, self, strict=strict)

    def dumps(self, *, blank_lines: int = 1) -> str:
        from .parser import IniParser
        return IniParser.dumps(self, blank_lines=blank_lines)
