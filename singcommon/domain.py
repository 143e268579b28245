"""Domain matching over a compact trie of reversed names."""

from __future__ import annotations

from collections import deque
from itertools import accumulate
from typing import Iterable, Union

PREFIX_LABEL = ord("\r")

Key = Union[str, bytes]


def _as_bytes(key: Key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8", "surrogateescape")
    return bytes(key)


class SuccinctSet:
    """A set of byte strings stored as a level-ordered trie with bit-vector navigation.

    A key ending in the prefix label (carriage return) matches every key that
    starts with what precedes it.
    """

    def __init__(self, keys: Iterable[Key]) -> None:
        sorted_keys = sorted({_as_bytes(key) for key in keys})
        self._leaves: set[int] = set()
        labels = bytearray()
        bitmap: list[bool] = []
        if sorted_keys:
            pending = deque([(0, len(sorted_keys), 0)])
            node = 0
            while pending:
                start, end, col = pending.popleft()
                if col == len(sorted_keys[start]):
                    start += 1
                    self._leaves.add(node)
                j = start
                while j < end:
                    first = j
                    label = sorted_keys[first][col]
                    while j < end and sorted_keys[j][col] == label:
                        j += 1
                    pending.append((first, j, col + 1))
                    labels.append(label)
                    bitmap.append(False)
                bitmap.append(True)
                node += 1
        self._labels = bytes(labels)
        self._bitmap = bitmap
        self._ones = [index for index, bit in enumerate(bitmap) if bit]
        self._rank = [0, *accumulate(int(bit) for bit in bitmap)]

    def has(self, key: Key) -> bool:
        """Tell whether key is in the set or starts with a prefix key."""
        if not self._bitmap:
            return False
        node = 0
        position = 0
        for char in _as_bytes(key):
            while True:
                if self._bitmap[position]:
                    return False
                label = self._labels[position - node]
                if label == PREFIX_LABEL:
                    return True
                if label == char:
                    break
                position += 1
            node = position + 1 - self._rank[position + 1]
            position = self._ones[node - 1] + 1
        if node in self._leaves:
            return True
        while not self._bitmap[position]:
            if self._labels[position - node] == PREFIX_LABEL:
                return True
            position += 1
        return False


def _reverse_domain(domain: str) -> bytes:
    return _as_bytes(domain[::-1])


def _reverse_domain_suffix(domain: str) -> bytes:
    return _reverse_domain(domain) + bytes([PREFIX_LABEL])


class Matcher:
    """Matches names exactly against domains or by ending against domain suffixes."""

    def __init__(self, domains: Iterable[str], domain_suffix: Iterable[str]) -> None:
        seen: set[str] = set()
        keys: list[bytes] = []
        for domain in domain_suffix:
            if domain in seen:
                continue
            seen.add(domain)
            keys.append(_reverse_domain_suffix(domain))
        for domain in domains:
            if domain in seen:
                continue
            seen.add(domain)
            keys.append(_reverse_domain(domain))
        self._set = SuccinctSet(keys)

    def match(self, domain: str) -> bool:
        return self._set.has(_reverse_domain(domain))