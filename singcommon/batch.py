"""Run keyed tasks on threads with an optional concurrency limit, like an error group."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """The outcome of one task: its value, or the error it raised."""

    value: Optional[T]
    err: Optional[BaseException]


class BatchError(Exception):
    """The first task failure, with the key of the task."""

    def __init__(self, key: str, err: BaseException) -> None:
        super().__init__(f"{key}: {err}")
        self.key = key
        self.err = err
        self.__cause__ = err


class Batch(Generic[T]):
    """Runs tasks concurrently, records every result, and cancels on the first failure."""

    def __init__(self, concurrency: Optional[int] = None) -> None:
        if concurrency is not None and concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        self._slots = threading.Semaphore(concurrency) if concurrency else None
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._results: dict[str, Result[T]] = {}
        self._pending = 0
        self._error: Optional[BatchError] = None
        self._cancel = threading.Event()

    def go(self, key: str, fn: Callable[[], T]) -> None:
        """Start fn on its own thread; its result is stored under key."""
        with self._lock:
            self._pending += 1
        threading.Thread(target=self._run, args=(key, fn), daemon=True).start()

    @staticmethod
    def _call(fn: Callable[[], T]) -> tuple[Optional[T], Optional[BaseException]]:
        try:
            return fn(), None
        except Exception as exc:
            return None, exc

    def _run(self, key: str, fn: Callable[[], T]) -> None:
        try:
            if self._slots is not None:
                with self._slots:
                    value, err = self._call(fn)
            else:
                value, err = self._call(fn)
            with self._lock:
                if err is not None and self._error is None:
                    self._error = BatchError(key, err)
                    self._cancel.set()
                self._results[key] = Result(value, err)
        finally:
            with self._lock:
                self._pending -= 1
                self._idle.notify_all()

    def _join(self) -> Optional[BatchError]:
        with self._idle:
            self._idle.wait_for(lambda: self._pending == 0)
        self._cancel.set()
        return self._error

    def wait(self) -> None:
        """Wait for every task; raise the first failure as BatchError."""
        err = self._join()
        if err is not None:
            raise err

    def wait_and_get_result(self) -> tuple[dict[str, Result[T]], Optional[BatchError]]:
        """Wait for every task and return all results with the first failure, if any."""
        err = self._join()
        return self.result(), err

    def result(self) -> dict[str, Result[T]]:
        """A snapshot of the results recorded so far."""
        with self._lock:
            return dict(self._results)

    def cancelled(self) -> bool:
        """True once a task has failed or wait has returned."""
        return self._cancel.is_set()

    def __enter__(self) -> "Batch[T]":
        return self

    def __exit__(self, *args: Any) -> None:
        self._join()