# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Split text into words and their surrounding punctuation"""
from __future__ import annotations

from typing import Iterator, NamedTuple


class Token(NamedTuple):
    line: int  # 1-based
    position: int  # 0-based index of the word on its line
    raw: str
    leading: str
    core: str
    trailing: str

    def rebuild(self, core: str) -> str:
        return self.leading + core + self.trailing


def get_words(text: str) -> list[str]:
    return text.split()


def split_word(word: str) -> tuple[str, str, str]:
    """Split `word` into leading punctuation, alphanumeric core and trailing punctuation

    >>> split_word("!!!Hello,")
    ('!!!', 'Hello', ',')
    """
    start = 0
    while start < len(word) and not word[start].isalnum():
        start += 1
    end = len(word)
    while end > start and not word[end - 1].isalnum():
        end -= 1
    return word[:start], word[start:end], word[end:]


def iter_lines(text: str) -> Iterator[list[Token]]:
    """Yield the tokens of each line of `text`, empty lists for blank lines"""
    for line_number, line in enumerate(text.splitlines(), start=1):
        tokens = []
        for position, raw in enumerate(get_words(line)):
            leading, core, trailing = split_word(raw)
            tokens.append(Token(line_number, position, raw, leading, core, trailing))
        yield tokens


def iter_tokens(text: str) -> Iterator[Token]:
    for tokens in iter_lines(text):
        yield from tokens
