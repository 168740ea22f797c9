# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations

from .errors import VocabularyError
from .session import get_requests_session
from os import PathLike
from requests import Session
from typing import Iterable, Iterator, Union

import logging
import os

StrPath = Union[str, "PathLike[str]"]

DEFAULT_ALPHABET_LENGTH = 255

log = logging.getLogger("bkspell.dictionary")


def normalize_words(words: Iterable[str]) -> Iterator[str]:
    """Lowercase and strip `words`, skipping blanks and repeats"""
    seen: set[str] = set()
    for word in words:
        word = word.strip().lower()
        if word and word not in seen:
            seen.add(word)
            yield word


class Vocabulary:
    """Ordered list of distinct lowercase words"""

    def __init__(self, words: Iterable[str], alphabet_length: int = DEFAULT_ALPHABET_LENGTH) -> None:
        if alphabet_length <= 0:
            raise VocabularyError("Alphabet length must be positive, got {}".format(alphabet_length))
        self.alphabet_length = alphabet_length
        self.words = list(normalize_words(words))
        for word in self.words:
            for char in word:
                if ord(char) >= alphabet_length:
                    raise VocabularyError(
                        "Word {!r} has character {!r} outside the alphabet of {} symbols".format(
                            word, char, alphabet_length
                        )
                    )
        self.max_word_length = max((len(word) for word in self.words), default=0)

    @classmethod
    def from_file(cls, path: StrPath, alphabet_length: int = DEFAULT_ALPHABET_LENGTH) -> Vocabulary:
        try:
            with open(path, encoding="utf-8") as fp:
                vocabulary = cls(fp, alphabet_length=alphabet_length)
        except OSError as ex:
            raise VocabularyError(
                "Failed to load dictionary {!r}: {}: {}".format(os.fspath(path), ex.__class__.__name__, ex)
            ) from ex
        except UnicodeDecodeError as ex:
            raise VocabularyError("Dictionary {!r} is not valid UTF-8".format(os.fspath(path))) from ex
        log.debug("Loaded %d words from %r", len(vocabulary), os.fspath(path))
        return vocabulary

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[str]:
        return iter(self.words)

    def __repr__(self) -> str:
        return "Vocabulary(words={}, max_word_length={}, alphabet_length={})".format(
            len(self.words), self.max_word_length, self.alphabet_length
        )


def fetch_word_list(
    url: str,
    destination: StrPath,
    *,
    timeout: int | None = None,
    session: Session | None = None,
) -> int:
    """Download a newline separated word list from `url` into `destination`

    Returns the number of distinct words written.
    """
    if session is None:
        session = get_requests_session(timeout=timeout)

    log.info("Downloading word list from %s", url)
    response = session.get(url)
    if not str(response.status_code).startswith("2"):
        raise VocabularyError("Failed to download {!r}: HTTP {} {}".format(url, response.status_code, response.reason))

    if "charset" not in response.headers.get("content-type", ""):
        # requests falls back to ISO-8859-1 for text/plain without a charset
        response.encoding = "utf-8"
    words = list(normalize_words(response.text.splitlines()))
    if not words:
        raise VocabularyError("Word list at {!r} is empty".format(url))

    directory = os.path.dirname(os.fspath(destination))
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(destination, "w", encoding="utf-8") as fp:
        for word in words:
            fp.write(word + "\n")

    log.info("Wrote %d words to %r", len(words), os.fspath(destination))
    return len(words)
