# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations

from .bktree import BKTree
from .bloom import BloomFilter
from .codec import load_bloom, load_tree, save_bloom, save_tree, StrPath
from .dictionary import DEFAULT_ALPHABET_LENGTH, Vocabulary
from .errors import DecodeError, VocabularyError
from .tokenizer import iter_lines, iter_tokens, Token
from typing import Callable, NamedTuple, Optional, Sequence

import logging
import os

DEFAULT_FP_PROB = 0.01
DEFAULT_TOLERANCE = 1

TREE_FILE = "bk_tree.bin"
BLOOM_FILE = "bloom_filter.bin"

# Given a misspelled word and its candidates, return the replacement or None to keep the word
Chooser = Callable[[str, Sequence[str]], Optional[str]]


class Misspelling(NamedTuple):
    line: int
    position: int
    raw: str
    word: str
    suggestions: frozenset[str]


def match_case(original: str, replacement: str) -> str:
    if len(original) > 1 and original.isupper():
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _is_fresh(cache_path: str, source_path: StrPath) -> bool:
    try:
        source_mtime = os.stat(source_path).st_mtime
    except OSError:
        # the cache is all there is
        return True
    try:
        return os.stat(cache_path).st_mtime >= source_mtime
    except OSError:
        return False


class SpellChecker:
    def __init__(self, tree: BKTree, bloom: BloomFilter, tolerance: int = DEFAULT_TOLERANCE) -> None:
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative, got {}".format(tolerance))
        self.log = logging.getLogger("SpellChecker")
        self.tree = tree
        self.bloom = bloom
        self.tolerance = tolerance

    @classmethod
    def build(
        cls, vocabulary: Vocabulary, fp_prob: float = DEFAULT_FP_PROB, tolerance: int = DEFAULT_TOLERANCE
    ) -> SpellChecker:
        """Build both indexes from `vocabulary`"""
        if not len(vocabulary):
            raise VocabularyError("Dictionary has no words")
        tree = BKTree(vocabulary.max_word_length, vocabulary.alphabet_length, len(vocabulary))
        for word in vocabulary:
            tree.insert(word)
        bloom = BloomFilter.from_words(vocabulary.words, fp_prob)
        return cls(tree, bloom, tolerance=tolerance)

    @classmethod
    def open(
        cls,
        dictionary_path: StrPath,
        cache_dir: StrPath,
        *,
        alphabet_length: int = DEFAULT_ALPHABET_LENGTH,
        fp_prob: float = DEFAULT_FP_PROB,
        tolerance: int = DEFAULT_TOLERANCE,
        rebuild: bool = False,
    ) -> SpellChecker:
        """Load the indexes cached in `cache_dir`, building them from the dictionary when needed

        The cache is rebuilt when it is missing, unreadable, older than the
        dictionary or was built with different parameters.
        """
        log = logging.getLogger("SpellChecker")
        tree_path = os.path.join(cache_dir, TREE_FILE)
        bloom_path = os.path.join(cache_dir, BLOOM_FILE)

        if rebuild:
            log.info("Rebuilding indexes on request")
        elif not (_is_fresh(tree_path, dictionary_path) and _is_fresh(bloom_path, dictionary_path)):
            log.info("Cached indexes in %r are missing or older than %r", os.fspath(cache_dir), os.fspath(dictionary_path))
        else:
            try:
                tree = load_tree(tree_path)
                bloom = load_bloom(bloom_path)
            except DecodeError as ex:
                log.warning("Discarding cached indexes: %s", ex)
            else:
                if tree.alphabet_length == alphabet_length and bloom.fp_prob == fp_prob:
                    log.debug("Using cached indexes from %r", os.fspath(cache_dir))
                    return cls(tree, bloom, tolerance=tolerance)
                log.info("Cached indexes were built with different parameters")

        vocabulary = Vocabulary.from_file(dictionary_path, alphabet_length=alphabet_length)
        log.info("Building indexes for %d words", len(vocabulary))
        checker = cls.build(vocabulary, fp_prob=fp_prob, tolerance=tolerance)
        checker.save(cache_dir)
        return checker

    def save(self, cache_dir: StrPath) -> None:
        save_tree(self.tree, os.path.join(cache_dir, TREE_FILE))
        save_bloom(self.bloom, os.path.join(cache_dir, BLOOM_FILE))
        self.log.info("Saved indexes to %r", os.fspath(cache_dir))

    def is_known(self, word: str) -> bool:
        word = word.lower()
        # the filter answers "no" for certain, a "yes" needs confirming
        return self.bloom.lookup(word) and self.tree.contains(word)

    def suggest(self, word: str, tolerance: int | None = None) -> set[str]:
        if tolerance is None:
            tolerance = self.tolerance
        return self.tree.query_range(word.lower(), tolerance)

    def _needs_check(self, token: Token) -> bool:
        return bool(token.core) and not token.core.isdigit()

    def check_text(self, text: str) -> list[Misspelling]:
        misspellings = []
        for token in iter_tokens(text):
            if not self._needs_check(token) or self.is_known(token.core):
                continue
            word = token.core.lower()
            misspellings.append(Misspelling(token.line, token.position, token.raw, word, frozenset(self.suggest(word))))
        self.log.debug("Found %d misspelled words", len(misspellings))
        return misspellings

    def correct_text(self, text: str, chooser: Chooser) -> str:
        """Return `text` with misspelled words replaced by what `chooser` picks

        Words keep their surrounding punctuation and capitalization. Words on a
        line are joined by single spaces.
        """
        lines = []
        for tokens in iter_lines(text):
            words = []
            for token in tokens:
                if self._needs_check(token) and not self.is_known(token.core):
                    candidates = sorted(self.suggest(token.core))
                    replacement = chooser(token.core, candidates)
                    if replacement:
                        words.append(token.rebuild(match_case(token.core, replacement)))
                        continue
                words.append(token.raw)
            lines.append(" ".join(words))

        corrected = "\n".join(lines)
        if text.endswith("\n"):
            corrected += "\n"
        return corrected
