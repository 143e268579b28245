"""An idle timer that calls a cancel function when not kept alive in time."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable


class Instance:
    """Calls cancel once timeout seconds pass without update(), or on close()."""

    def __init__(self, cancel: Callable[[], Any], timeout: float) -> None:
        self._cancel = cancel
        self._timeout = timeout
        self._cond = threading.Condition()
        self._deadline = time.monotonic() + timeout
        self._fired = False
        self._closed = False
        self._cancelled = False
        self._thread = threading.Thread(target=self._wait, daemon=True)
        self._thread.start()

    def _wait(self) -> None:
        with self._cond:
            while not self._closed:
                remaining = self._deadline - time.monotonic()
                if remaining <= 0:
                    self._fired = True
                    break
                self._cond.wait(remaining)
        self.close()

    def update(self) -> bool:
        """Restart the timer; False once it has fired or been closed."""
        with self._cond:
            if self._fired or self._closed:
                return False
            self._deadline = time.monotonic() + self._timeout
            self._cond.notify_all()
            return True

    def timeout(self) -> float:
        return self._timeout

    def set_timeout(self, timeout: float) -> None:
        """Change the timeout and restart the timer with it."""
        self._timeout = timeout
        self.update()

    def close(self) -> None:
        """Stop the timer and call cancel, once."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()
            if self._cancelled:
                return
            self._cancelled = True
        self._cancel()

    def __enter__(self) -> "Instance":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()