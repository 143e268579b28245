"""Pooled byte blocks in power-of-two size classes."""

from __future__ import annotations

import threading
from typing import Union

MAX_SIZE = 65536
_CLASS_COUNT = 17
_POOL_LIMIT = 64
_MAKE_CLASSES = (
    2, 4, 8, 16, 32, 64, 128, 256, 512,
    1024, 2048, 4096, 8192, 16384, 32768, 65535,
)

BytesLike = Union[bytearray, memoryview]


def _msb(size: int) -> int:
    return size.bit_length() - 1


def _backing(buf: BytesLike) -> object:
    if isinstance(buf, memoryview):
        return buf.obj
    return buf


class Allocator:
    """Hands out views over blocks of 2**n bytes, up to 64 KiB, and takes them back.

    The capacity of a view handed out is the length of its backing block,
    so no more than half of a block is ever wasted.
    """

    def __init__(self) -> None:
        self._pools: list[list[bytearray]] = [[] for _ in range(_CLASS_COUNT)]
        self._lock = threading.Lock()

    def get(self, size: int) -> memoryview:
        """Return a writable view of exactly size bytes over a pooled block."""
        if size <= 0 or size > MAX_SIZE:
            raise ValueError(f"alloc bad size: {size}")
        bits = _msb(size)
        if size != 1 << bits:
            bits += 1
        with self._lock:
            pool = self._pools[bits]
            block = pool.pop() if pool else None
        if block is None:
            block = bytearray(1 << bits)
        return memoryview(block)[:size]

    def put(self, buf: BytesLike) -> None:
        """Return a block to its pool; its capacity must be exactly 2**n."""
        block = _backing(buf)
        capacity = len(block) if isinstance(block, bytearray) else 0
        if capacity == 0 or capacity > MAX_SIZE or capacity != 1 << _msb(capacity):
            raise ValueError("allocator Put() incorrect buffer size")
        with self._lock:
            pool = self._pools[_msb(capacity)]
            if len(pool) < _POOL_LIMIT:
                pool.append(block)


DEFAULT_ALLOCATOR = Allocator()


def get(size: int) -> memoryview:
    """Take a view of size bytes from the default allocator."""
    return DEFAULT_ALLOCATOR.get(size)


def put(buf: BytesLike) -> None:
    """Give a block back to the default allocator."""
    DEFAULT_ALLOCATOR.put(buf)


def make(size: int) -> memoryview:
    """Allocate a fresh view of size bytes whose backing block is rounded up to a size class."""
    if size < 0:
        raise ValueError(f"make bad size: {size}")
    for capacity in _MAKE_CLASSES:
        if size <= capacity:
            return memoryview(bytearray(capacity))[:size]
    return memoryview(bytearray(size))