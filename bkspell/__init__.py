# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from bkspell.bktree import BKTree
from bkspell.bloom import BloomFilter
from bkspell.checker import Misspelling, SpellChecker
from bkspell.dictionary import Vocabulary
from bkspell.distance import damerau_levenshtein
from bkspell.errors import CapacityError, DecodeError, Error, VocabularyError

try:
    from .version import __version__
except ImportError:
    __version__ = "UNKNOWN"

__all__ = [
    "BKTree",
    "BloomFilter",
    "CapacityError",
    "damerau_levenshtein",
    "DecodeError",
    "Error",
    "Misspelling",
    "SpellChecker",
    "Vocabulary",
    "VocabularyError",
]
