# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Binary persistence of the spell checker indexes

Both formats start with a four byte magic and a format version and end with a
CRC-32 over all preceding bytes. Integers are little-endian. The tree format
stores every preallocated node, used or not, so a decoded tree is equal field
for field to the encoded one.
"""
from __future__ import annotations

from .bktree import BKTree, MAX_WORD_LENGTH, Node
from .bloom import BloomFilter
from .distance import damerau_levenshtein
from .errors import DecodeError
from os import PathLike
from typing import Union

import logging
import os
import struct
import tempfile
import zlib

StrPath = Union[str, "PathLike[str]"]

FORMAT_VERSION = 1
TREE_MAGIC = b"BKTR"
BLOOM_MAGIC = b"BLMF"

_HEADER = struct.Struct("<4sB")
_CHECKSUM = struct.Struct("<I")
_TREE_FIELDS = struct.Struct("<IIII")
_BLOOM_FIELDS = struct.Struct("<dQII")
_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_CHILD = struct.Struct("<HI")

log = logging.getLogger("bkspell.codec")


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def unpack(self, fmt: struct.Struct) -> tuple:
        if self.offset + fmt.size > len(self.data):
            raise DecodeError("Truncated data at offset {}".format(self.offset))
        values = fmt.unpack_from(self.data, self.offset)
        self.offset += fmt.size
        return values

    def read(self, length: int) -> bytes:
        if self.offset + length > len(self.data):
            raise DecodeError("Truncated data at offset {}".format(self.offset))
        chunk = self.data[self.offset : self.offset + length]
        self.offset += length
        return chunk

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise DecodeError("{} unexpected trailing bytes".format(len(self.data) - self.offset))


def _seal(payload: bytes) -> bytes:
    return payload + _CHECKSUM.pack(zlib.crc32(payload))


def _open(blob: bytes, magic: bytes) -> _Reader:
    if len(blob) < _HEADER.size + _CHECKSUM.size:
        raise DecodeError("Data is too short ({} bytes)".format(len(blob)))
    payload = blob[: -_CHECKSUM.size]
    (checksum,) = _CHECKSUM.unpack(blob[-_CHECKSUM.size :])
    if zlib.crc32(payload) != checksum:
        raise DecodeError("Checksum mismatch")

    reader = _Reader(payload)
    found_magic, version = reader.unpack(_HEADER)
    if found_magic != magic:
        raise DecodeError("Unexpected magic {!r}, expected {!r}".format(found_magic, magic))
    if version != FORMAT_VERSION:
        raise DecodeError("Unsupported format version {}".format(version))
    return reader


def encode_tree(tree: BKTree) -> bytes:
    parts = [
        _HEADER.pack(TREE_MAGIC, FORMAT_VERSION),
        _TREE_FIELDS.pack(tree.max_word_length, tree.alphabet_length, tree.capacity, tree.size),
    ]
    for node in tree.nodes:
        if node.word is None:
            parts.append(_U8.pack(0))
        else:
            word = node.word.encode("utf-8")
            parts.append(_U8.pack(1))
            parts.append(_U32.pack(len(word)))
            parts.append(word)
        children = list(node.iter_children())
        parts.append(_U16.pack(len(children)))
        parts.extend(_CHILD.pack(key, index) for key, index in children)
    return _seal(b"".join(parts))


def decode_tree(blob: bytes) -> BKTree:
    reader = _open(blob, TREE_MAGIC)
    max_word_length, alphabet_length, capacity, size = reader.unpack(_TREE_FIELDS)
    if max_word_length > MAX_WORD_LENGTH:
        raise DecodeError("Maximum word length {} exceeds {}".format(max_word_length, MAX_WORD_LENGTH))
    if size > capacity:
        raise DecodeError("Tree size {} exceeds its capacity {}".format(size, capacity))
    # every node takes at least a presence flag and a child count
    remaining = len(reader.data) - reader.offset
    if capacity * (_U8.size + _U16.size) > remaining:
        raise DecodeError("Capacity {} does not fit in {} bytes of node data".format(capacity, remaining))

    tree = BKTree(max_word_length, alphabet_length, 0)
    tree.size = size
    for _ in range(capacity):
        node = Node(tree.width)
        (present,) = reader.unpack(_U8)
        if present == 1:
            (length,) = reader.unpack(_U32)
            try:
                node.word = reader.read(length).decode("utf-8")
            except UnicodeDecodeError as ex:
                raise DecodeError("Invalid word encoding in node {}".format(len(tree.nodes))) from ex
        elif present != 0:
            raise DecodeError("Invalid presence flag {} in node {}".format(present, len(tree.nodes)))
        # used slots come first
        if (node.word is not None) != (len(tree.nodes) < size):
            raise DecodeError("Node {} presence does not match tree size {}".format(len(tree.nodes), size))

        (child_count,) = reader.unpack(_U16)
        for _ in range(child_count):
            key, index = reader.unpack(_CHILD)
            if not 0 < key < tree.width:
                raise DecodeError("Child key {} outside 1..{}".format(key, tree.width - 1))
            if index >= capacity:
                raise DecodeError("Child index {} outside capacity {}".format(index, capacity))
            node.children[key] = index
        tree.nodes.append(node)
    reader.finish()
    _check_links(tree)
    return tree


def _check_links(tree: BKTree) -> None:
    """Every used node except the root hangs under exactly one earlier node, keyed by their distance"""
    linked: set[int] = set()
    for parent_index, parent in enumerate(tree.nodes):
        for key, index in parent.iter_children():
            # nodes are allocated in insertion order so a child always comes after its parent
            if not parent_index < index < tree.size:
                raise DecodeError(
                    "Child index {} of node {} outside {}..{}".format(index, parent_index, parent_index + 1, tree.size - 1)
                )
            if index in linked:
                raise DecodeError("Node {} is linked more than once".format(index))
            linked.add(index)

            child = tree.nodes[index]
            assert parent.word is not None and child.word is not None
            distance = damerau_levenshtein(parent.word, child.word)
            if key != distance:
                raise DecodeError(
                    "Node {} is linked under key {} but is at distance {} from node {}".format(
                        index, key, distance, parent_index
                    )
                )
    if len(linked) != max(tree.size - 1, 0):
        raise DecodeError("{} of {} nodes are not reachable from the root".format(tree.size - 1 - len(linked), tree.size))


def encode_bloom(bloom: BloomFilter) -> bytes:
    payload = b"".join(
        [
            _HEADER.pack(BLOOM_MAGIC, FORMAT_VERSION),
            _BLOOM_FIELDS.pack(bloom.fp_prob, bloom.size, bloom.hash_count, len(bloom.bits)),
            bytes(bloom.bits),
        ]
    )
    return _seal(payload)


def decode_bloom(blob: bytes) -> BloomFilter:
    reader = _open(blob, BLOOM_MAGIC)
    fp_prob, size, hash_count, length = reader.unpack(_BLOOM_FIELDS)
    # also rejects NaN
    if not 0 < fp_prob < 1:
        raise DecodeError("False positive rate {} is not between 0 and 1".format(fp_prob))
    if size == 0 or hash_count == 0:
        raise DecodeError("Invalid filter parameters: size={}, hash_count={}".format(size, hash_count))
    if length != (size + 7) // 8:
        raise DecodeError("Bit array of {} bytes does not match size {}".format(length, size))
    bits = reader.read(length)
    reader.finish()
    return BloomFilter.from_state(fp_prob, size, hash_count, bits)


def _read_file(path: StrPath) -> bytes:
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as ex:
        raise DecodeError("Failed to read {!r}: {}: {}".format(os.fspath(path), ex.__class__.__name__, ex)) from ex


def _write_file(path: StrPath, data: bytes) -> None:
    directory = os.path.dirname(os.fspath(path)) or "."
    os.makedirs(directory, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".bkspell-")
    try:
        with os.fdopen(fd, "wb") as fp:
            fp.write(data)
        os.replace(temp_path, path)
    except BaseException:
        os.unlink(temp_path)
        raise
    log.debug("Wrote %d bytes to %r", len(data), os.fspath(path))


def save_tree(tree: BKTree, path: StrPath) -> None:
    _write_file(path, encode_tree(tree))


def load_tree(path: StrPath) -> BKTree:
    blob = _read_file(path)
    try:
        return decode_tree(blob)
    except DecodeError as ex:
        raise DecodeError("Invalid tree file {!r}: {}".format(os.fspath(path), ex)) from ex


def save_bloom(bloom: BloomFilter, path: StrPath) -> None:
    _write_file(path, encode_bloom(bloom))


def load_bloom(path: StrPath) -> BloomFilter:
    blob = _read_file(path)
    try:
        return decode_bloom(blob)
    except DecodeError as ex:
        raise DecodeError("Invalid filter file {!r}: {}".format(os.fspath(path), ex)) from ex
