# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Bloom filter for quick rejection of unknown words"""
from __future__ import annotations

from typing import Iterable, Sequence

import math
import xxhash


def get_size(expected_item_count: int, fp_prob: float) -> int:
    """Number of bits needed to hold `expected_item_count` items at false positive rate `fp_prob`"""
    return math.ceil(-(expected_item_count * math.log(fp_prob)) / (math.log(2) ** 2))


def get_hash_count(size: int, expected_item_count: int) -> int:
    return math.ceil((size / expected_item_count) * math.log(2))


def seeded_hash(item: str, seed: int) -> int:
    return xxhash.xxh64_intdigest(item.encode("utf-8"), seed=seed)


class BloomFilter:
    """Probabilistic set membership

    `lookup` never returns False for an inserted item. Inserting more than the
    expected number of items only raises the false positive rate above
    `fp_prob`; the size and number of probes never change after construction.
    """

    def __init__(self, expected_item_count: int, fp_prob: float) -> None:
        if expected_item_count <= 0:
            raise ValueError("expected_item_count must be positive, got {}".format(expected_item_count))
        if not 0 < fp_prob < 1:
            raise ValueError("fp_prob must be between 0 and 1, got {}".format(fp_prob))
        self.fp_prob = fp_prob
        self.size = get_size(expected_item_count, fp_prob)
        self.hash_count = get_hash_count(self.size, expected_item_count)
        self.bits = bytearray((self.size + 7) // 8)

    @classmethod
    def from_words(cls, words: Sequence[str], fp_prob: float = 0.01) -> BloomFilter:
        bloom = cls(len(words), fp_prob)
        bloom.update(words)
        return bloom

    @classmethod
    def from_state(cls, fp_prob: float, size: int, hash_count: int, bits: bytes) -> BloomFilter:
        """Recreate a filter from its persisted fields"""
        bloom = cls.__new__(cls)
        bloom.fp_prob = fp_prob
        bloom.size = size
        bloom.hash_count = hash_count
        bloom.bits = bytearray(bits)
        return bloom

    def _probes(self, item: str) -> Iterable[int]:
        for seed in range(self.hash_count):
            yield seeded_hash(item, seed) % self.size

    def insert(self, item: str) -> None:
        for bit in self._probes(item):
            self.bits[bit >> 3] |= 1 << (bit & 7)

    def update(self, items: Iterable[str]) -> None:
        for item in items:
            self.insert(item)

    def lookup(self, item: str) -> bool:
        for bit in self._probes(item):
            if not self.bits[bit >> 3] & (1 << (bit & 7)):
                return False
        return True

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and self.lookup(item)

    def bits_set(self) -> int:
        return sum(bin(byte).count("1") for byte in self.bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return (
            self.fp_prob == other.fp_prob
            and self.size == other.size
            and self.hash_count == other.hash_count
            and self.bits == other.bits
        )

    def __repr__(self) -> str:
        return "BloomFilter(fp_prob={!r}, size={}, hash_count={})".format(self.fp_prob, self.size, self.hash_count)
