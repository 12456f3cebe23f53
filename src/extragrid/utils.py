"""
Utility functions for extragrid.

Provides A1 coordinate conversion, native cell-key handling, and the tolerant
pixel/number parsing shared by the codec and the writers.
"""

from __future__ import annotations

import math
import re

_A1_RE = re.compile(r"^([A-Za-z]+)(\d+)$")
_LETTERS_RE = re.compile(r"^[A-Za-z]+$")
_CELL_KEY_RE = re.compile(r"^c\s*(\d+)\s*r\s*(\d+)$", re.IGNORECASE)
_PX_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(?:px)?$", re.IGNORECASE)


def column_index_to_letter(index: int) -> str:
    """Convert a zero-based column index to A1 notation letter(s).

    Examples:
        0 -> A, 1 -> B, 25 -> Z, 26 -> AA, 27 -> AB, 702 -> AAA
    """
    result = ""
    while True:
        result = chr(ord("A") + (index % 26)) + result
        index = index // 26 - 1
        if index < 0:
            break
    return result


def letter_to_column_index(letter: str) -> int:
    """Convert A1 notation letter(s) to a zero-based column index.

    Case-insensitive. Empty or non-alphabetic input yields 0.

    Examples:
        A -> 0, b -> 1, Z -> 25, AA -> 26, AB -> 27, AAA -> 702
    """
    text = str(letter or "").strip()
    if not _LETTERS_RE.match(text):
        return 0
    result = 0
    for char in text.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def cell_to_a1(row_index: int, col_index: int) -> str:
    """Convert zero-based row and column indices to A1 notation.

    Examples:
        (0, 0) -> A1, (0, 1) -> B1, (9, 2) -> C10
    """
    return f"{column_index_to_letter(col_index)}{row_index + 1}"


def a1_to_cell(a1: str) -> tuple[int, int]:
    """Convert A1 notation to zero-based (row_index, col_index).

    Surrounding whitespace is ignored and letters are case-insensitive.

    Examples:
        A1 -> (0, 0), b1 -> (0, 1), C10 -> (9, 2)

    Raises:
        ValueError: If the string is not letters followed by digits
    """
    if not isinstance(a1, str):
        raise ValueError(f"Invalid A1 notation: {a1!r}")
    match = _A1_RE.match(a1.strip())
    if not match:
        raise ValueError(f"Invalid A1 notation: {a1}")
    col_letter, row_str = match.groups()
    return int(row_str) - 1, letter_to_column_index(col_letter)


def parse_a1_range(a1_range: str) -> tuple[tuple[int, int], tuple[int, int]]:
    """Parse "B2:D5" (or a single address) into ((row, col), (row, col)).

    A single address parses as a degenerate range whose start equals its end.
    The string is split once on ":"; corner order is preserved as written.

    Raises:
        ValueError: If either half is not a valid address
    """
    if not isinstance(a1_range, str):
        raise ValueError(f"Invalid A1 range: {a1_range!r}")
    start, sep, end = a1_range.partition(":")
    start_cell = a1_to_cell(start)
    if not sep:
        return start_cell, start_cell
    return start_cell, a1_to_cell(end)


def range_to_a1(start: tuple[int, int], end: tuple[int, int]) -> str:
    """Convert two inclusive (row, col) corners to "A1:B2" notation.

    Corners are ordered component-wise first. Both halves are always written,
    even for a single cell.
    """
    start_row, end_row = sorted((start[0], end[0]))
    start_col, end_col = sorted((start[1], end[1]))
    return f"{cell_to_a1(start_row, start_col)}:{cell_to_a1(end_row, end_col)}"


def cell_key(row_index: int, col_index: int) -> str:
    """Native JSON key for a cell style: C{col+1}R{row+1}."""
    return f"C{col_index + 1}R{row_index + 1}"


def parse_cell_key(key: str) -> tuple[int, int] | None:
    """Parse a native cell-style key back into (row, col).

    Accepts any case and inner whitespace ("c2 r3"). Returns None if the key is
    not recognised.
    """
    if not isinstance(key, str):
        return None
    match = _CELL_KEY_RE.match(key.strip())
    if not match:
        return None
    return int(match.group(2)) - 1, int(match.group(1)) - 1


def round_half_up(value: float) -> int:
    """Round like a spreadsheet UI does: halves go up, not to even."""
    return math.floor(value + 0.5)


def to_finite_number(value: object) -> float | None:
    """Coerce a number or numeric string to a finite float, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_index(value: object) -> int | None:
    """Coerce a sparse row/cell index to a non-negative int, else None."""
    number = to_finite_number(value)
    if number is None or number < 0 or number != int(number):
        return None
    return int(number)


def px_to_number(value: object) -> int | None:
    """Parse a CSS pixel size tolerantly.

    Accepts "12px", "12", " 12.4 PX " or the number 12 and returns the rounded
    integer. Anything else (including the empty string) yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return round_half_up(value) if math.isfinite(value) else None
    match = _PX_RE.match(str(value).strip())
    if not match:
        return None
    return round_half_up(float(match.group(1)))


def format_px(value: float) -> str:
    """Format a pixel size as the canonical "<n>px" string."""
    return f"{round_half_up(value)}px"


def format_json_number(value: float) -> str | float | int:
    """Format a number for JSON, converting integers to int type.

    This prevents numbers like 1.0 from appearing in JSON output.
    """
    if value == int(value):
        return int(value)
    return value


def stringify_value(value: object) -> str:
    """Coerce an ingested cell or style value to text.

    None becomes the empty string, booleans use their JSON spelling and
    integral floats lose their trailing ".0".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value):
        return str(format_json_number(value))
    return str(value)
