"""
A1 notation helpers.

Downstream read/write code turns a detected column map into ranges such as
``'Balance Summary'!C3:C``.
"""

from __future__ import annotations

from typing import Optional

from sheet_structure.schema import ColumnMap, DetectedTab


def col_index_to_letter(index: int) -> str:
    """Zero-based column index → column letters (0 → A, 26 → AA, 701 → ZZ)."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")

    letters = ""
    n = index
    while n >= 0:
        letters = chr(ord("A") + n % 26) + letters
        n = n // 26 - 1
    return letters


def quote_tab_title(title: str) -> str:
    """Quote a tab title for A1 notation, doubling embedded quotes."""
    return "'" + title.replace("'", "''") + "'"


def build_range(
    tab_title: str,
    field_name: str,
    column_map: ColumnMap,
    start_row: int = 2,
    end_row: Optional[int] = None,
) -> str:
    """Single-column range for *field_name*, open-ended unless *end_row*.

    Raises
    ------
    KeyError
        If *field_name* is not in *column_map*.
    """
    if field_name not in column_map:
        raise KeyError(f"Column {field_name!r} not found in column map")

    letter = col_index_to_letter(column_map[field_name])
    end = f"{letter}{end_row}" if end_row is not None else letter
    return f"{quote_tab_title(tab_title)}!{letter}{start_row}:{end}"


def data_range(tab: DetectedTab, end_row: Optional[int] = None) -> str:
    """Range covering every data row of a detected tab.

    Starts in column A on the row after the header row and ends at the
    right-most mapped column.
    """
    if not tab.column_map:
        raise ValueError(f"Tab {tab.title!r} has an empty column map")

    first_data_row = tab.header_row_index + 2  # next row, 1-based
    last = col_index_to_letter(max(tab.column_map.values()))
    end = f"{last}{end_row}" if end_row is not None else last
    return f"{quote_tab_title(tab.title)}!A{first_data_row}:{end}"
