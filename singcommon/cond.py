"""Small collection helpers and lifecycle helpers for closing and starting objects."""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Optional, TypeVar

T = TypeVar("T")
N = TypeVar("N")


class CloseWrapper:
    """An object whose close() calls the given function."""

    def __init__(self, closer: Callable[[], Any]) -> None:
        self._closer = closer

    def close(self) -> Any:
        return self._closer()

    def __enter__(self) -> "CloseWrapper":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def closer(fn: Optional[Callable[[], Any]]) -> Optional[CloseWrapper]:
    """Wrap a function as a closable object; None gives None."""
    if fn is None:
        return None
    return CloseWrapper(fn)


def find(items: Iterable[T], predicate: Callable[[T], bool]) -> Optional[T]:
    """Return the first item matching predicate, or None."""
    return next((item for item in items if predicate(item)), None)


def flat_map(items: Iterable[T], block: Callable[[T], Iterable[N]]) -> list[N]:
    """Map every item to a sequence and concatenate the results."""
    return [result for item in items for result in block(item)]


def filter_not_none(items: Iterable[Optional[T]]) -> list[T]:
    """Drop None items."""
    return [item for item in items if item is not None]


def filter_not_default(items: Iterable[T]) -> list[T]:
    """Drop items equal to their type's zero value (None, 0, '', False, empty)."""
    return [item for item in items if item]


def uniq(items: Iterable[T]) -> list[T]:
    """Drop repeated items, keeping the first occurrence."""
    return list(dict.fromkeys(items))


def uniq_by(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Drop items whose key was already seen, keeping the first occurrence."""
    seen: set = set()
    result: list[T] = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        result.append(item)
    return result


def sort_by(items: list[T], key: Callable[[T], Any]) -> None:
    """Sort the list in place by key."""
    items.sort(key=key)


def min_by(items: Iterable[T], key: Callable[[T], Any]) -> Optional[T]:
    """Return the first item with the smallest key, or None if empty."""
    return min(items, key=key, default=None)


def max_by(items: Iterable[T], key: Callable[[T], Any]) -> Optional[T]:
    """Return the first item with the largest key, or None if empty."""
    return max(items, key=key, default=None)


def reverse(items: list[T]) -> list[T]:
    """Reverse the list in place and return it."""
    items.reverse()
    return items


def close_all(*args: Any) -> None:
    """Close every object given, following upstream() where there is no close().

    All objects are attempted; the last error raised is re-raised at the end.
    """
    last_error: Optional[BaseException] = None
    for obj in args:
        if obj is None:
            continue
        try:
            close = getattr(obj, "close", None)
            if callable(close):
                close()
                continue
            upstream = getattr(obj, "upstream", None)
            if callable(upstream):
                close_all(upstream())
        except Exception as exc:
            last_error = exc
    if last_error is not None:
        raise last_error


def start_all(*args: Any) -> None:
    """Call start() on every object that has one, stopping at the first failure."""
    for obj in args:
        if obj is None:
            continue
        start = getattr(obj, "start", None)
        if callable(start):
            start()