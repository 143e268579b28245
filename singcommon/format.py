"""Rendering of mixed values into plain strings for messages."""

from __future__ import annotations

from typing import Any, Iterable

_REJECTED = (float, complex, bytes, bytearray, memoryview)


def _format_one(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, _REJECTED) or type(value).__str__ is object.__str__:
        raise TypeError("unknown value")
    return str(value)


def to_string(*args: Any) -> str:
    """Concatenate the string forms of strings, booleans, integers, errors and stringers.

    Values of any other kind raise TypeError.
    """
    return "".join(_format_one(arg) for arg in args)


def map_to_string(items: Iterable[Any]) -> list[str]:
    """Render every item with to_string."""
    return [to_string(item) for item in items]


def _trunc_divmod(a: int, b: int) -> tuple[int, int]:
    quotient, remainder = divmod(abs(a), b)
    if a < 0:
        return -quotient, -remainder
    return quotient, remainder


def seconds(value: float) -> str:
    """Render a duration in seconds from its hundredths."""
    hundredths = int(value * 100)
    whole, fraction = _trunc_divmod(hundredths, 100)
    _, last = _trunc_divmod(hundredths, 10)
    return to_string(whole, ".", fraction, last)