# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Damerau-Levenshtein edit distance"""
from __future__ import annotations


def damerau_levenshtein(a: str, b: str) -> int:
    """Unrestricted Damerau-Levenshtein distance between `a` and `b`.

    Insertions, deletions, substitutions and transpositions of adjacent
    characters all cost one. Unlike the "optimal string alignment" variant a
    substring may be edited again after a transposition, so
    ``damerau_levenshtein("ca", "abc") == 2``.

    The table carries an extra border row and column seeded with a value no
    real edit sequence can reach, which makes transposition lookups for
    characters not seen yet cost more than any alternative.
    """
    m = len(a)
    n = len(b)
    infinity = m + n + 1

    dp = [[0] * (n + 2) for _ in range(m + 2)]
    dp[0][0] = infinity
    for i in range(m + 1):
        dp[i + 1][0] = infinity
        dp[i + 1][1] = i
    for j in range(n + 1):
        dp[0][j + 1] = infinity
        dp[1][j + 1] = j

    # last row where each character of `a` was seen
    da: dict[str, int] = {}

    for i in range(1, m + 1):
        db = 0
        char_a = a[i - 1]
        for j in range(1, n + 1):
            char_b = b[j - 1]
            k = da.get(char_b, 0)
            l = db
            if char_a == char_b:
                cost = 0
                db = j
            else:
                cost = 1
            dp[i + 1][j + 1] = min(
                dp[i][j] + cost,  # substitution
                dp[i + 1][j] + 1,  # insertion
                dp[i][j + 1] + 1,  # deletion
                dp[k][l] + (i - k - 1) + 1 + (j - l - 1),  # transposition
            )
        da[char_a] = i

    return dp[m + 1][n + 1]


def max_distance(max_word_length: int) -> int:
    """Upper bound of the distance between two words of at most `max_word_length` characters"""
    return 2 * max_word_length
