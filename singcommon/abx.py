"""Reader for ABX, a compact binary encoding of XML documents."""

from __future__ import annotations

import base64
import io
import math
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterator, Optional, Union

MAGIC_VERSION_0 = b"ABX\x00"
MAX_UNSIGNED_SHORT = 0xFFFF


class _Token(IntEnum):
    START_DOCUMENT = 0
    END_DOCUMENT = 1
    START_TAG = 2
    END_TAG = 3
    TEXT = 4
    CDSECT = 5
    ENTITY_REF = 6
    IGNORABLE_WHITESPACE = 7
    PROCESSING_INSTRUCTION = 8
    COMMENT = 9
    DOCDECL = 10
    ATTRIBUTE = 15


class _Type(IntEnum):
    NULL = 1 << 4
    STRING = 2 << 4
    STRING_INTERNED = 3 << 4
    BYTES_HEX = 4 << 4
    BYTES_BASE64 = 5 << 4
    INT = 6 << 4
    INT_HEX = 7 << 4
    LONG = 8 << 4
    LONG_HEX = 9 << 4
    FLOAT = 10 << 4
    DOUBLE = 11 << 4
    BOOLEAN_TRUE = 12 << 4
    BOOLEAN_FALSE = 13 << 4


_SKIPPED = frozenset(
    {
        _Token.PROCESSING_INSTRUCTION,
        _Token.DOCDECL,
        _Token.IGNORABLE_WHITESPACE,
        _Token.ENTITY_REF,
    }
)


class AbxError(ValueError):
    """The ABX data is malformed."""


@dataclass(frozen=True)
class StartElement:
    name: str
    attrs: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class EndElement:
    name: str


@dataclass(frozen=True)
class CharData:
    data: str


@dataclass(frozen=True)
class Directive:
    data: str


@dataclass(frozen=True)
class Comment:
    data: str


Token = Union[StartElement, EndElement, CharData, Directive, Comment]


def _to_float32(value: float) -> float:
    return struct.unpack(">f", struct.pack(">f", value))[0]


def _shortest_digits(value: float, single: bool) -> tuple[str, int]:
    """Shortest decimal digits that read back as value, and the decimal point position."""
    text = repr(value)
    for precision in range(1, 18):
        text = f"{value:.{precision - 1}e}"
        candidate = float(text)
        if single:
            try:
                candidate = _to_float32(candidate)
            except OverflowError:
                continue
        if candidate == value:
            break
    mantissa, exponent = text.split("e")
    digits = mantissa.replace(".", "").rstrip("0")
    return digits, int(exponent) + 1


def _format_float(value: float, single: bool) -> str:
    """Format like the shortest general ('g') form: exponent form beyond 1e6 or below 1e-4."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    value = abs(value)
    if value == 0:
        return sign + "0"
    digits, point = _shortest_digits(value, single)
    exp = point - 1
    if exp < -4 or exp >= 6:
        body = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exp < 0 else "+"
        return f"{sign}{body}e{exp_sign}{abs(exp):02d}"
    whole = digits[:point].ljust(point, "0") if point > 0 else "0"
    fraction_len = max(len(digits) - point, 0)
    fraction = "".join(
        digits[point + i] if 0 <= point + i < len(digits) else "0"
        for i in range(fraction_len)
    )
    return f"{sign}{whole}.{fraction}" if fraction else sign + whole


def _format_hex(value: int) -> str:
    if value < 0:
        return "0x-" + format(-value, "x")
    return "0x" + format(value, "x")


class Reader:
    """Produces XML tokens from an ABX document."""

    def __init__(self, content: bytes) -> None:
        content = bytes(content)
        if content[:4] != MAGIC_VERSION_0:
            raise AbxError("missing ABX magic")
        self._stream = io.BytesIO(content[4:])
        self._string_refs: list[str] = []
        self._attribute_readers: dict[int, Callable[[], str]] = {
            _Type.NULL: lambda: "",
            _Type.BOOLEAN_TRUE: lambda: "true",
            _Type.BOOLEAN_FALSE: lambda: "false",
            _Type.STRING: self._read_utf,
            _Type.STRING_INTERNED: self._read_interned_utf,
            _Type.BYTES_HEX: lambda: self._read_bytes().hex(),
            _Type.BYTES_BASE64: lambda: base64.b64encode(self._read_bytes()).decode("ascii"),
            _Type.INT: lambda: str(self._unpack(">i")),
            _Type.INT_HEX: lambda: _format_hex(self._unpack(">i")),
            _Type.LONG: lambda: str(self._unpack(">q")),
            _Type.LONG_HEX: lambda: _format_hex(self._unpack(">q")),
            _Type.FLOAT: lambda: _format_float(self._unpack(">f"), True),
            _Type.DOUBLE: lambda: _format_float(self._unpack(">d"), False),
        }

    def __iter__(self) -> Iterator[Token]:
        """Yield every token up to the end of the document."""
        while True:
            try:
                token = self.token()
            except EOFError:
                return
            if token is not None:
                yield token

    def token(self) -> Optional[Token]:
        """Read the next event.

        Returns None for events that carry no token, and raises EOFError at
        the end of the document or of the data.
        """
        event = self._stream.read(1)
        if not event:
            raise EOFError("EOF")
        kind = event[0] & 0x0F
        value_type = event[0] & 0xF0
        if kind == _Token.START_DOCUMENT:
            return None
        if kind == _Token.END_DOCUMENT:
            raise EOFError("end of document")
        if kind == _Token.START_TAG:
            name = self._read_interned_utf()
            return StartElement(name, self._pull_attributes())
        if kind == _Token.END_TAG:
            return EndElement(self._read_interned_utf())
        if kind == _Token.TEXT:
            return CharData(self._read_utf())
        if kind == _Token.CDSECT:
            return Directive("<![CDATA[" + self._read_utf() + "]]>")
        if kind == _Token.COMMENT:
            return Comment(self._read_utf())
        if kind in _SKIPPED:
            self._read_utf()
            return None
        if kind == _Token.ATTRIBUTE:
            raise AbxError("unexpected attribute")
        raise AbxError(f"unknown token type {kind} with type {value_type}")

    def _pull_attributes(self) -> tuple[tuple[str, str], ...]:
        attrs: list[tuple[str, str]] = []
        while True:
            event = self._stream.read(1)
            if not event:
                break
            if event[0] & 0x0F != _Token.ATTRIBUTE:
                self._stream.seek(-1, io.SEEK_CUR)
                break
            value_type = event[0] & 0xF0
            name = self._read_interned_utf()
            reader = self._attribute_readers.get(value_type)
            if reader is None:
                raise AbxError(f"unexpected attribute type, {value_type}")
            attrs.append((name, reader()))
        return tuple(attrs)

    def _read_exact(self, n: int) -> bytes:
        data = self._stream.read(n)
        if len(data) == n:
            return data
        if not data:
            raise EOFError("EOF")
        raise AbxError("unexpected EOF")

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self._read_exact(struct.calcsize(fmt)))[0]

    def _read_bytes(self) -> bytes:
        return self._read_exact(self._unpack(">H"))

    def _read_utf(self) -> str:
        return self._read_bytes().decode("utf-8", "surrogateescape")

    def _read_interned_utf(self) -> str:
        ref = self._unpack(">H")
        if ref == MAX_UNSIGNED_SHORT:
            text = self._read_utf()
            if len(self._string_refs) < MAX_UNSIGNED_SHORT:
                self._string_refs.append(text)
            return text
        if ref >= len(self._string_refs):
            raise AbxError(
                f"invalid interned reference: {ref}, exists: {len(self._string_refs)}"
            )
        return self._string_refs[ref]


def new_reader(content: bytes) -> Optional[Reader]:
    """A Reader for content, or None when it does not start with the ABX magic."""
    if bytes(content[:4]) != MAGIC_VERSION_0:
        return None
    return Reader(content)