"""A byte buffer with reserved head room, read and write cursors, and pooled storage."""

from __future__ import annotations

import os
import threading
from typing import Any, Iterable, Optional, Union

from .alloc import get, put

LOW_MEMORY = False

if LOW_MEMORY:
    BUFFER_SIZE = 16 * 1024
    UDP_BUFFER_SIZE = 8 * 1024
else:
    BUFFER_SIZE = 32 * 1024
    UDP_BUFFER_SIZE = 16 * 1024

RESERVED_HEADER = 1024

_LARGE = 65535

Data = Union[bytes, bytearray, memoryview]


class ShortBufferError(BufferError):
    """The buffer has no room for the data."""


def _as_view(data: Data) -> memoryview:
    if isinstance(data, memoryview):
        view = data
    elif isinstance(data, bytearray):
        view = memoryview(data)
    else:
        view = memoryview(bytearray(data))
    if view.readonly:
        view = memoryview(bytearray(view))
    return view


def _read_into(reader: Any, view: memoryview) -> int:
    readinto = getattr(reader, "readinto", None)
    if readinto is not None:
        return readinto(view) or 0
    chunk = reader.read(len(view))
    if not chunk:
        return 0
    view[: len(chunk)] = chunk
    return len(chunk)


class Buffer:
    """A window [start, end) over a byte block, with room before start for headers."""

    def __init__(self, data: Data, start: int = 0, end: int = 0, managed: bool = False) -> None:
        self._data = _as_view(data)
        self._start = start
        self._end = end
        self._managed = managed
        self._closed = False
        self._refs = 0
        self._ref_lock = threading.Lock()

    @classmethod
    def new(cls) -> "Buffer":
        """A pooled buffer of BUFFER_SIZE with RESERVED_HEADER bytes of head room."""
        return cls(get(BUFFER_SIZE), RESERVED_HEADER, RESERVED_HEADER, True)

    @classmethod
    def new_packet(cls) -> "Buffer":
        """A pooled buffer of UDP_BUFFER_SIZE with RESERVED_HEADER bytes of head room."""
        return cls(get(UDP_BUFFER_SIZE), RESERVED_HEADER, RESERVED_HEADER, True)

    @classmethod
    def new_size(cls, size: int) -> "Buffer":
        """An empty buffer of the given capacity; pooled unless larger than 65535."""
        if size > _LARGE:
            return cls(bytearray(size))
        return cls(get(size), managed=True)

    @classmethod
    def wrap(cls, data: Data) -> "Buffer":
        """A buffer whose content is all of data."""
        return cls(data, end=len(data))

    @classmethod
    def with_data(cls, data: Data) -> "Buffer":
        """An empty buffer writing into data."""
        return cls(data)

    def __enter__(self) -> "Buffer":
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def start(self) -> int:
        return self._start

    @property
    def cap(self) -> int:
        return len(self._data)

    @property
    def free_len(self) -> int:
        return self.cap - self._end

    def byte(self, index: int) -> int:
        return self._data[self._start + index]

    def set_byte(self, index: int, value: int) -> None:
        self._data[self._start + index] = value

    def extend(self, n: int) -> memoryview:
        """Grow the content by n bytes and return a view of the new tail."""
        end = self._end + n
        if end > self.cap:
            raise OverflowError(f"buffer overflow: cap {self.cap},end {self._end}, need {n}")
        tail = self._data[self._end:end]
        self._end = end
        return tail

    def advance(self, n: int) -> None:
        self._start += n

    def truncate(self, to: int) -> None:
        self._end = self._start + to

    def write(self, data: Data) -> int:
        """Copy as much of data as fits; raise ShortBufferError when already full."""
        if len(data) == 0:
            return 0
        if self.is_full():
            raise ShortBufferError("short buffer")
        n = min(len(data), self.free_len)
        self._data[self._end:self._end + n] = memoryview(data)[:n]
        self._end += n
        return n

    def extend_header(self, n: int) -> memoryview:
        """Grow the content by n bytes in front and return a view of them."""
        if self._start < n:
            raise OverflowError(f"buffer overflow: cap {self.cap},start {self._start}, need {n}")
        self._start -= n
        return self._data[self._start:self._start + n]

    def write_random(self, size: int) -> memoryview:
        tail = self.extend(size)
        tail[:] = os.urandom(size)
        return tail

    def write_byte(self, value: int) -> None:
        if self.is_full():
            raise ShortBufferError("short buffer")
        self._data[self._end] = value
        self._end += 1

    def read_once_from(self, reader: Any) -> int:
        """Read once from reader into the free space; returns the count (0 at end of stream)."""
        if self.is_full():
            raise ShortBufferError("short buffer")
        n = _read_into(reader, self.free_bytes())
        self._end += n
        return n

    def read_at_least_from(self, reader: Any, minimum: int) -> int:
        """Read until at least minimum bytes have arrived; EOFError if the stream ends first."""
        if minimum <= 0:
            return self.read_once_from(reader)
        if self.is_full() or self.free_len < minimum:
            raise ShortBufferError("short buffer")
        total = 0
        while total < minimum:
            n = _read_into(reader, self.free_bytes())
            if n == 0:
                raise EOFError("unexpected EOF" if total else "EOF")
            self._end += n
            total += n
        return total

    def read_full_from(self, reader: Any, size: int) -> int:
        """Read exactly size bytes; EOFError if the stream ends first."""
        if self._end + size > self.cap:
            raise ShortBufferError("short buffer")
        total = 0
        while total < size:
            n = _read_into(reader, self._data[self._end:self._end + size - total])
            if n == 0:
                raise EOFError("unexpected EOF" if total else "EOF")
            self._end += n
            total += n
        return total

    def read_from(self, reader: Any) -> int:
        """Read until the end of the stream; ShortBufferError if the buffer fills first."""
        total = 0
        while True:
            if self.is_full():
                raise ShortBufferError("short buffer")
            n = _read_into(reader, self.free_bytes())
            self._end += n
            total += n
            if n == 0:
                return total

    def write_string(self, text: str) -> int:
        return self.write(text.encode())

    def write_zero(self) -> None:
        self.write_byte(0)

    def write_zero_n(self, n: int) -> None:
        if self._end + n > self.cap:
            raise ShortBufferError("short buffer")
        self._data[self._end:self._end + n] = bytes(n)
        self._end += n

    def read_byte(self) -> int:
        if self.is_empty():
            raise EOFError("EOF")
        value = self._data[self._start]
        self._start += 1
        return value

    def read_bytes(self, n: int) -> bytes:
        if len(self) < n:
            raise EOFError("EOF")
        chunk = bytes(self._data[self._start:self._start + n])
        self._start += n
        return chunk

    def read(self, size: int = -1) -> bytes:
        """Consume up to size bytes (all when negative); b'' when empty."""
        n = len(self) if size < 0 else min(size, len(self))
        chunk = bytes(self._data[self._start:self._start + n])
        self._start += n
        return chunk

    def write_to(self, writer: Any) -> int:
        """Write the content to writer without consuming it."""
        data = bytes(self.bytes())
        n = writer.write(data)
        return len(data) if n is None else n

    def resize(self, start: int, end: int) -> None:
        self._start = start
        self._end = start + end

    def reset(self) -> None:
        self._start = RESERVED_HEADER
        self._end = RESERVED_HEADER

    def full_reset(self) -> None:
        self._start = 0
        self._end = 0

    def inc_ref(self) -> None:
        with self._ref_lock:
            self._refs += 1

    def dec_ref(self) -> None:
        with self._ref_lock:
            self._refs -= 1

    def release(self) -> None:
        """Give pooled storage back unless referenced; the buffer is then closed."""
        if self._closed or not self._managed:
            return
        with self._ref_lock:
            if self._refs > 0:
                return
        put(self._data)
        self._data = memoryview(bytearray())
        self._start = 0
        self._end = 0
        self._managed = False
        self._closed = True

    def cut(self, start: int, end: int) -> "Buffer":
        """Trim start bytes in front and end bytes from the block's tail; return an empty buffer over what remains."""
        self._start += start
        self._end = len(self._data) - end
        return Buffer(self._data[self._start:self._end])

    def __len__(self) -> int:
        return self._end - self._start

    def bytes(self) -> memoryview:
        return self._data[self._start:self._end]

    def slice(self) -> memoryview:
        return self._data

    def data_from(self, n: int) -> memoryview:
        return self._data[self._start + n:self._end]

    def data_to(self, n: int) -> memoryview:
        return self._data[self._start:self._start + n]

    def data_range(self, start: int, end: int) -> memoryview:
        return self._data[self._start + start:self._start + end]

    def free_bytes(self) -> memoryview:
        return self._data[self._end:]

    def is_empty(self) -> bool:
        return self._end == self._start

    def is_full(self) -> bool:
        return self._end == self.cap

    def to_owned(self) -> "Buffer":
        """A copy with its own storage, same capacity and cursors."""
        owned = Buffer.new_size(len(self._data))
        owned._data[self._start:self._end] = self._data[self._start:self._end]
        owned._start = self._start
        owned._end = self._end
        return owned


def len_multi(buffers: Iterable[Buffer]) -> int:
    return sum(len(buffer) for buffer in buffers)


def to_slice_multi(buffers: Iterable[Buffer]) -> list[memoryview]:
    return [buffer.bytes() for buffer in buffers]


def copy_multi(target: Union[bytearray, memoryview], buffers: Iterable[Buffer]) -> int:
    """Copy the buffers' content one after another into target, as far as it fits."""
    view = memoryview(target)
    n = 0
    for buffer in buffers:
        chunk = buffer.bytes()
        k = min(len(chunk), len(view) - n)
        view[n:n + k] = chunk[:k]
        n += k
    return n


def release_multi(buffers: Iterable[Optional[Buffer]]) -> None:
    for buffer in buffers:
        if buffer is not None:
            buffer.release()


def encode_hex_string(data: Data) -> str:
    return bytes(data).hex()