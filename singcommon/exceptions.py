"""Error wrapping, joining and classification helpers."""

from __future__ import annotations

import asyncio
import concurrent.futures
import errno
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

from .cond import filter_not_none, flat_map, uniq_by
from .format import map_to_string, to_string

E = TypeVar("E")


class CauseError(Exception):
    """An error described by a message followed by its cause."""

    def __init__(self, message: str, cause: Optional[BaseException]) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ExtendedError(Exception):
    """An error described by its cause followed by a message."""

    def __init__(self, message: str, cause: Optional[BaseException]) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.cause}: {self.message}"


class MultiError(Exception):
    """Several errors reported together."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors = list(errors)
        super().__init__(*self.errors)

    def __str__(self) -> str:
        return " | ".join(map_to_string(self.errors))


_TIMEOUT_TYPES = (TimeoutError, asyncio.TimeoutError, concurrent.futures.TimeoutError)

_CLOSED_TARGETS: tuple = (
    EOFError,
    BrokenPipeError,
    ConnectionResetError,
    errno.EPIPE,
    errno.ECONNRESET,
    errno.EBADF,
)

_CANCELED_TARGETS: tuple = (
    asyncio.CancelledError,
    concurrent.futures.CancelledError,
) + _TIMEOUT_TYPES


def new_error(*args: Any) -> Exception:
    """Build an error whose message is the concatenation of args."""
    return Exception(to_string(*args))


def cause(err: Optional[BaseException], *args: Any) -> CauseError:
    """Wrap err under a message: 'message: err'."""
    return CauseError(to_string(*args), err)


def extend(err: Optional[BaseException], *args: Any) -> ExtendedError:
    """Wrap err with a trailing message: 'err: message'."""
    return ExtendedError(to_string(*args), err)


def expand(err: BaseException) -> list[BaseException]:
    """Flatten a MultiError into its members; other errors give a one-item list."""
    if isinstance(err, MultiError):
        return expand_all(err.errors)
    return [err]


def expand_all(errs: Iterable[BaseException]) -> list[BaseException]:
    """Flatten every error with expand."""
    return flat_map(errs, expand)


def join_errors(*args: Optional[BaseException]) -> Optional[BaseException]:
    """Combine errors, dropping None and duplicate messages.

    Returns None for no errors, the error itself for one, else a MultiError.
    """
    errs = uniq_by(expand_all(filter_not_none(args)), str)
    if not errs:
        return None
    if len(errs) == 1:
        return errs[0]
    return MultiError(errs)


def append_error(
    err: Optional[BaseException],
    other: Optional[BaseException],
    block: Callable[[BaseException], BaseException],
) -> Optional[BaseException]:
    """Join err with block(other) when other is not None."""
    if other is None:
        return err
    return join_errors(err, block(other))


def unwrap(err: Optional[BaseException]) -> Optional[BaseException]:
    """Follow single causes down to the innermost error."""
    seen: set[int] = set()
    while err is not None and not isinstance(err, MultiError):
        inner = err.__cause__
        if inner is None or id(inner) in seen:
            break
        seen.add(id(err))
        err = inner
    return err


def _find(
    err: Optional[BaseException], predicate: Callable[[BaseException], bool]
) -> Optional[BaseException]:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        if predicate(err):
            return err
        if isinstance(err, MultiError):
            for inner in err.errors:
                found = _find(inner, predicate)
                if found is not None:
                    return found
            return None
        err = err.__cause__
    return None


def cast(err: Optional[BaseException], kind: Type[E]) -> Optional[E]:
    """Return the first error of the given kind in err's chain, or None."""
    return _find(err, lambda e: isinstance(e, kind))  # type: ignore[return-value]


def _matches(err: BaseException, target: Any) -> bool:
    if isinstance(target, type):
        return isinstance(err, target)
    if isinstance(target, int):
        return isinstance(err, OSError) and err.errno == target
    return err is target


def is_multi(err: Optional[BaseException], *args: Any) -> bool:
    """Tell whether err matches any target.

    Targets are exception classes, exception instances or errno numbers.
    A MultiError matches when every member matches.
    """
    if err is None:
        return False
    for target in args:
        if _find(err, lambda e, t=target: _matches(e, t)) is not None:
            return True
    err = unwrap(err)
    if not isinstance(err, MultiError):
        return False
    return all(is_multi(inner, *args) for inner in err.errors)


def _timeout_capable(err: BaseException) -> bool:
    return isinstance(err, _TIMEOUT_TYPES) or callable(getattr(err, "timeout", None))


def is_timeout(err: Optional[BaseException]) -> bool:
    """Tell whether err, or an error it wraps, reports a timeout."""
    found = _find(err, _timeout_capable)
    if found is None:
        return False
    method = getattr(found, "timeout", None)
    if callable(method):
        return bool(method())
    return True


def is_closed(err: Optional[BaseException]) -> bool:
    """Tell whether err means the connection or stream was closed."""
    return is_multi(err, *_CLOSED_TARGETS)


def is_canceled(err: Optional[BaseException]) -> bool:
    """Tell whether err means the operation was cancelled or timed out."""
    return is_multi(err, *_CANCELED_TARGETS)


def is_closed_or_canceled(err: Optional[BaseException]) -> bool:
    """Tell whether err means closed, cancelled or timed out."""
    return is_multi(err, *_CLOSED_TARGETS, *_CANCELED_TARGETS)