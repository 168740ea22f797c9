# Copyright 2015, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Render command results as plain text tables"""
from __future__ import annotations

from typing import Any, Collection, Iterator, List, Mapping, TextIO, Tuple, Union

import json
import os
import sys

ResultType = Collection[Mapping[str, Any]]
# a flat list of columns, or a list of columns followed by fields shown one per line
TableLayout = Collection[Union[List[str], Tuple[str], str]]


class CustomJsonEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        if isinstance(o, os.PathLike):
            return os.fspath(o)

        return json.JSONEncoder.default(self, o)


def format_value(value: Any) -> str:
    """Text of a table cell: JSON, unless JSON would only add quotes"""
    if isinstance(value, (set, frozenset)):
        return ", ".join(format_value(entry) for entry in sorted(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(entry) for entry in value)
    encoded = json.dumps(value, sort_keys=True, cls=CustomJsonEncoder)
    if encoded == '"{}"'.format(value):
        return str(value)
    return encoded


def layout_fields(table_layout: TableLayout | None) -> list[str]:
    fields: list[str] = []
    for entry in table_layout or []:
        if isinstance(entry, (list, tuple)):
            fields.extend(layout_fields(entry))
        else:
            fields.append(entry)
    return fields


def yield_table(
    result: ResultType,
    drop_fields: Collection[str] | None = None,
    table_layout: TableLayout | None = None,
    header: bool = True,
) -> Iterator[str]:
    """
    format a list of dicts as a table yielding string rows

    :param list result: List of dicts to be printed.
    :param list drop_fields: Fields to be ignored.
    :param list table_layout: Fields to be printed, 1D or 2D list. Examples:
        ["line", "word"] or
        [["line", "word"]] or
        [["line", "word"], "suggestions"]
    :param bool header: True to print the field names
    """
    dropped = set(drop_fields or [])
    wanted = set(layout_fields(table_layout)) if table_layout is not None else None

    widths: dict[str, int] = {}
    formatted: list[dict[str, str]] = []
    for item in result:
        cells = {
            key: format_value(value)
            for key, value in item.items()
            if key not in dropped and (wanted is None or key in wanted)
        }
        for key, text in cells.items():
            widths[key] = max(widths.get(key, len(key)), len(text))
        formatted.append(cells)

    # without a layout every field gets a column, in name order
    layout = list(table_layout) if table_layout is not None else sorted(widths)
    if layout and isinstance(layout[0], (list, tuple)):
        columns, details = list(layout[0]), [str(field) for field in layout[1:]]
    else:
        columns, details = [str(field) for field in layout], []

    def join(texts: Iterator[str]) -> str:
        return "  ".join(texts).rstrip()

    if header:
        yield join(column.upper().ljust(widths.get(column, len(column))) for column in columns)
        yield join("=" * widths.get(column, len(column)) for column in columns)
    for number, cells in enumerate(formatted):
        if details and number:
            yield ""
        yield join(cells.get(column, "").ljust(widths.get(column, len(column))) for column in columns)
        shown = [(field, cells[field]) for field in details if cells.get(field)]
        if shown:
            key_width = max(len(field) for field, _ in shown)
            for field, text in shown:
                yield "    {:{}} = {}".format(field, key_width, text)


def print_table(
    result: Collection[Any] | ResultType | None,
    drop_fields: Collection[str] | None = None,
    table_layout: TableLayout | None = None,
    header: bool = True,
    file: TextIO | None = None,
) -> None:
    """print a list of dicts as a table, or a list of plain values one per line"""
    if not result:
        return
    rows = list(result)
    if isinstance(rows[0], Mapping):
        lines = yield_table(rows, drop_fields=drop_fields, table_layout=table_layout, header=header)
    else:
        lines = (format_value(row) for row in rows)
    for line in lines:
        print(line, file=file or sys.stdout)
