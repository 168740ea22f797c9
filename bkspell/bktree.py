# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""BK-tree over Damerau-Levenshtein distance

The tree lives in a preallocated list of nodes and children refer to each
other by list index, so a built tree has no object references to follow when
it is written to disk. Slot 0 is the root.
"""
from __future__ import annotations

from .distance import damerau_levenshtein, max_distance
from .errors import CapacityError
from typing import Iterator, Optional

import logging

log = logging.getLogger("BKTree")

# bounds of the persisted u16 child keys and u32 header fields
MAX_WORD_LENGTH = 0x7FFF
MAX_ALPHABET_LENGTH = 0xFFFFFFFF
MAX_CAPACITY = 0xFFFFFFFF


class Node:
    __slots__ = ("word", "children")

    def __init__(self, width: int, word: str | None = None) -> None:
        # None marks an unused slot, including the root before the first insert
        self.word = word
        self.children: list[Optional[int]] = [None] * width

    @property
    def is_absent(self) -> bool:
        return self.word is None

    def iter_children(self) -> Iterator[tuple[int, int]]:
        """Yield (distance, node index) for every linked child"""
        for key, index in enumerate(self.children):
            if index is not None:
                yield key, index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.word == other.word and self.children == other.children

    def __repr__(self) -> str:
        return "Node(word={!r}, children={!r})".format(self.word, dict(self.iter_children()))


class BKTree:
    def __init__(self, max_word_length: int, alphabet_length: int, capacity: int) -> None:
        if (
            not 0 <= max_word_length <= MAX_WORD_LENGTH
            or not 0 <= alphabet_length <= MAX_ALPHABET_LENGTH
            or not 0 <= capacity <= MAX_CAPACITY
        ):
            raise CapacityError(
                "Invalid tree parameters: max_word_length={}, alphabet_length={}, capacity={}".format(
                    max_word_length, alphabet_length, capacity
                )
            )
        self.max_word_length = max_word_length
        self.alphabet_length = alphabet_length
        self.width = max_distance(max_word_length) + 1
        self.nodes = [Node(self.width) for _ in range(capacity)]
        self.size = 0

    @property
    def capacity(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> Node | None:
        return self.nodes[0] if self.nodes else None

    def __len__(self) -> int:
        return self.size

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BKTree):
            return NotImplemented
        return (
            self.max_word_length == other.max_word_length
            and self.alphabet_length == other.alphabet_length
            and self.size == other.size
            and self.nodes == other.nodes
        )

    def __repr__(self) -> str:
        return "BKTree(max_word_length={}, alphabet_length={}, capacity={}, size={})".format(
            self.max_word_length, self.alphabet_length, self.capacity, self.size
        )

    def _check_word(self, word: str) -> None:
        if len(word) > self.max_word_length:
            raise CapacityError(
                "Word {!r} is longer than the maximum word length {}".format(word, self.max_word_length)
            )
        for char in word:
            if ord(char) >= self.alphabet_length:
                raise CapacityError(
                    "Word {!r} has character {!r} outside the alphabet of {} symbols".format(
                        word, char, self.alphabet_length
                    )
                )

    def _allocate(self, word: str) -> int:
        if self.size >= self.capacity:
            raise CapacityError("All {} preallocated tree nodes are in use".format(self.capacity))
        index = self.size
        self.nodes[index].word = word
        self.size += 1
        return index

    def plant_root(self, word: str) -> None:
        """Store the first word of the tree in the root slot"""
        root = self.root
        if root is None or not root.is_absent:
            raise CapacityError("Tree root is not available")
        self._check_word(word)
        self._allocate(word)

    def insert(self, word: str) -> None:
        """Add `word`, doing nothing if it is already present"""
        root = self.root
        if root is None:
            raise CapacityError("Tree has no preallocated nodes")
        if root.is_absent:
            self.plant_root(word)
            return

        self._check_word(word)
        current = 0
        while True:
            node = self.nodes[current]
            assert node.word is not None
            distance = damerau_levenshtein(node.word, word)
            if distance == 0:
                return
            if distance >= self.width:
                raise CapacityError(
                    "Distance {} between {!r} and {!r} does not fit the child width {}".format(
                        distance, node.word, word, self.width
                    )
                )
            child = node.children[distance]
            if child is None:
                node.children[distance] = self._allocate(word)
                return
            current = child

    def contains(self, word: str) -> bool:
        root = self.root
        if root is None or root.is_absent:
            return False

        current = 0
        while True:
            node = self.nodes[current]
            assert node.word is not None
            distance = damerau_levenshtein(node.word, word)
            if distance == 0:
                return True
            if distance >= self.width:
                return False
            child = node.children[distance]
            if child is None:
                return False
            current = child

    def query_range(self, word: str, tolerance: int) -> set[str]:
        """Return every word within `tolerance` edits of `word`"""
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative, got {}".format(tolerance))

        result: set[str] = set()
        root = self.root
        if root is None or root.is_absent:
            return result

        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            assert node.word is not None
            distance = damerau_levenshtein(node.word, word)
            if distance <= tolerance:
                result.add(node.word)

            # distance 0 is never an edge key, the window starts at 1
            low = max(distance - tolerance, 1)
            high = min(distance + tolerance, self.width - 1)
            for key in range(low, high + 1):
                child = node.children[key]
                if child is not None:
                    stack.append(child)

        return result

    def words(self) -> Iterator[str]:
        for node in self.nodes[: self.size]:
            if node.word is not None:
                yield node.word

    @classmethod
    def from_words(cls, words: list[str], alphabet_length: int) -> BKTree:
        tree = cls(max((len(word) for word in words), default=0), alphabet_length, len(words))
        for word in words:
            tree.insert(word)
        log.debug("Built tree of %d words from %d entries", tree.size, len(words))
        return tree
