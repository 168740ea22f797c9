# Copyright 2019, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations

from bkspell.pretty import CustomJsonEncoder, format_value, layout_fields, print_table, ResultType, TableLayout, yield_table
from pathlib import Path
from typing import Any, Collection

import io
import json
import pytest
import re


@pytest.mark.parametrize(
    "value,expected",
    [
        (1, "1"),
        (0.01, "0.01"),
        ("a_string", "a_string"),
        ("tab\there", '"tab\\there"'),
        (["hello", "help"], "hello, help"),
        (frozenset({"help", "hell", "hello"}), "hell, hello, help"),
        (set(), ""),
        ({"b": 2, "a": frozenset({"y", "x"})}, '{"a": ["x", "y"], "b": 2}'),
        (None, "null"),
    ],
)
def test_format_value(value: Any, expected: str) -> None:
    assert format_value(value) == expected


def test_json_encoder() -> None:
    encoded = json.dumps({"words": {"b", "a"}, "path": Path("/tmp/cache")}, sort_keys=True, cls=CustomJsonEncoder)
    assert encoded == '{"path": "/tmp/cache", "words": ["a", "b"]}'


def test_layout_fields() -> None:
    original_list: TableLayout = [["line", "position", "word"], "suggestions", "raw"]
    flat_list = layout_fields(original_list)
    assert original_list == [["line", "position", "word"], "suggestions", "raw"]  # ensure it doesn't have side effects
    assert flat_list == ["line", "position", "word", "suggestions", "raw"]


def get_output(
    rows: ResultType | None,
    *,
    drop_fields: Collection[str] | None = None,
    table_layout: TableLayout | None = None,
) -> str:
    temp_io = io.StringIO()
    print_table(rows, drop_fields=drop_fields, table_layout=table_layout, file=temp_io)
    temp_io.seek(0)
    return temp_io.read()


def fuzzy_compare_assert(actual: str, expected: str) -> None:
    cleanup_actual = re.sub(r" +$", "", actual.strip(), flags=re.MULTILINE)
    cleanup_expected = re.sub(r" +$", "", expected.strip(), flags=re.MULTILINE)
    assert cleanup_actual == cleanup_expected


def test_print_table() -> None:
    """Print table, ensure we don't try to format non-visible field"""
    rows = [
        {
            "line": 1,
            "position": 0,
            "word": "teh",
            "raw": "Teh",
            "suggestions": frozenset({"the", "ten"}),
            "function1": test_print_table,
        },
        {
            "line": 12,
            "position": 3,
            "word": "helo",
            "raw": "helo!",
            "suggestions": frozenset({"hello", "help", "hell"}),
            "function2": test_print_table,
        },
    ]

    actual = get_output(rows, drop_fields=["function1", "function2"])
    expected = """
LINE  POSITION  RAW    SUGGESTIONS        WORD
====  ========  =====  =================  ====
1     0         Teh    ten, the           teh
12    3         helo!  hell, hello, help  helo
"""
    fuzzy_compare_assert(actual, expected)

    actual = get_output(rows, table_layout=["word", "line"])
    expected = """
WORD  LINE
====  ====
teh   1
helo  12
"""
    fuzzy_compare_assert(actual, expected)

    actual = get_output(rows, table_layout=[["line", "position", "word"], "suggestions", "raw"])
    expected = """
LINE  POSITION  WORD
====  ========  ====
1     0         teh
    suggestions = ten, the
    raw         = Teh

12    3         helo
    suggestions = hell, hello, help
    raw         = helo!
"""
    fuzzy_compare_assert(actual, expected)

    with pytest.raises(TypeError):
        get_output(rows)


def test_print_table_plain_values() -> None:
    fuzzy_compare_assert(get_output(["hell", "hello"]), "hell\nhello")
    assert get_output([]) == ""
    assert get_output(None) == ""


def test_yield_table() -> None:
    rows = [
        {"line": 1, "position": 0, "word": "wrld", "suggestions": frozenset({"world"})},
        {"line": 2, "position": 5, "word": "zzzz", "suggestions": frozenset()},
    ]

    result = yield_table(rows, table_layout=[["line", "position", "word"]])
    assert list(result) == [
        "LINE  POSITION  WORD",
        "====  ========  ====",
        "1     0         wrld",
        "2     5         zzzz",
    ]

    # empty values are left out of the vertical fields
    result = yield_table(rows, table_layout=[["word"], "suggestions"])
    assert list(result) == [
        "WORD",
        "====",
        "wrld",
        "    suggestions = world",
        "",
        "zzzz",
    ]

    result = yield_table(rows, table_layout=[["word", "line"]], header=False)
    assert list(result) == ["wrld  1", "zzzz  2"]
