"""
Dense grid model.

GridModel owns the rows x cols matrix of cell text, the four style layers
(grid default, per-column, per-row, per-cell) and the merge list. Structural
edits keep all of them consistent.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from loguru import logger

from extragrid.cascade import effective_style
from extragrid.exceptions import InvalidDimensionError
from extragrid.merges import (
    MergeCoverage,
    MergeRange,
    build_coverage,
    normalize_merges,
    reindex_merges_after_remove_col,
    reindex_merges_after_remove_row,
)
from extragrid.style_keys import Style, sanitize_style
from extragrid.utils import parse_cell_key, stringify_value, to_finite_number, to_index

DEFAULT_ROWS = 2
DEFAULT_COLS = 2

# Sizing properties stay on their row/column layer and are never copied into cells.
SIZING_KEYS = frozenset({"width", "height"})


@dataclass(frozen=True)
class CellSelection:
    row: int
    col: int


@dataclass(frozen=True)
class RowSelection:
    row: int


@dataclass(frozen=True)
class ColumnSelection:
    col: int


Selection = Union[CellSelection, RowSelection, ColumnSelection, None]


@dataclass(frozen=True)
class GridSnapshot:
    """Read-only copy of a GridModel's state."""

    rows: int
    cols: int
    data: tuple[tuple[str, ...], ...]
    default_style: Mapping[str, str] | None
    column_styles: tuple[Mapping[str, str] | None, ...]
    row_styles: tuple[Mapping[str, str] | None, ...]
    cell_styles: Mapping[tuple[int, int], Mapping[str, str]]
    merges: tuple[MergeRange, ...]


def _frozen(style: Style | None) -> Mapping[str, str] | None:
    return MappingProxyType(dict(style)) if style else None


def _coerce_dimension(value: Any, default: int, *, strict: bool) -> int:
    number = to_finite_number(value)
    if number is None:
        return default
    if number < 0:
        if strict:
            raise ValueError(value)
        return 0
    return int(number)


class GridModel:
    """Dense rows x cols grid of text with layered styles and merges."""

    def __init__(self, rows: Any = DEFAULT_ROWS, cols: Any = DEFAULT_COLS) -> None:
        """Create an all-empty grid.

        Args:
            rows: Row count (>= 0). Non-numeric or non-finite input means 2.
            cols: Column count (>= 0). Non-numeric or non-finite input means 2.

        Raises:
            InvalidDimensionError: If rows or cols is negative
        """
        try:
            self.rows = _coerce_dimension(rows, DEFAULT_ROWS, strict=True)
            self.cols = _coerce_dimension(cols, DEFAULT_COLS, strict=True)
        except ValueError:
            raise InvalidDimensionError(rows, cols) from None
        self.data: list[list[str]] = [["" for _ in range(self.cols)] for _ in range(self.rows)]
        self.default_style: Style | None = None
        self.column_styles: list[Style | None] = [None] * self.cols
        self.row_styles: list[Style | None] = [None] * self.rows
        self.cell_styles: dict[tuple[int, int], Style] = {}
        self.merges: list[MergeRange] = []

    @classmethod
    def create(cls, rows: Any = DEFAULT_ROWS, cols: Any = DEFAULT_COLS) -> GridModel:
        return cls(rows, cols)

    def __repr__(self) -> str:
        return f"GridModel(rows={self.rows}, cols={self.cols}, merges={len(self.merges)})"

    # ------------------------------------------------------------------
    # Cell values
    # ------------------------------------------------------------------

    def get_value(self, row: int, col: int) -> str:
        if not self._cell_in_bounds(row, col):
            return ""
        return self.data[row][col]

    def set_value(self, row: int, col: int, value: Any) -> None:
        if not self._cell_in_bounds(row, col):
            return
        self.data[row][col] = stringify_value(value)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def insert_row(self) -> None:
        """Append one empty row at the end."""
        self.data.append(["" for _ in range(self.cols)])
        self.row_styles.append(None)
        self.rows += 1
        logger.debug("Inserted row; grid is now {}x{}", self.rows, self.cols)

    def insert_column(self) -> None:
        """Append one empty column to every row."""
        for row in self.data:
            row.append("")
        self.column_styles.append(None)
        self.cols += 1
        logger.debug("Inserted column; grid is now {}x{}", self.rows, self.cols)

    def remove_row(self, index: Any) -> None:
        """Remove a row, re-keying cell styles and merges below it.

        No-op when the index is out of range or when only one row is left.
        """
        position = to_index(index)
        if self.rows <= 1 or position is None or position >= self.rows:
            return
        del self.data[position]
        del self.row_styles[position]
        self.rows -= 1
        self.cell_styles = {
            (r - 1 if r > position else r, c): style
            for (r, c), style in self.cell_styles.items()
            if r != position
        }
        self.merges = reindex_merges_after_remove_row(self.merges, position)
        logger.debug("Removed row {}; grid is now {}x{}", position, self.rows, self.cols)

    def remove_column(self, index: Any) -> None:
        """Remove a column, re-keying cell styles and merges right of it.

        No-op when the index is out of range or when only one column is left.
        """
        position = to_index(index)
        if self.cols <= 1 or position is None or position >= self.cols:
            return
        for row in self.data:
            del row[position]
        del self.column_styles[position]
        self.cols -= 1
        self.cell_styles = {
            (r, c - 1 if c > position else c): style
            for (r, c), style in self.cell_styles.items()
            if c != position
        }
        self.merges = reindex_merges_after_remove_col(self.merges, position)
        logger.debug("Removed column {}; grid is now {}x{}", position, self.rows, self.cols)

    # ------------------------------------------------------------------
    # Style layers
    # ------------------------------------------------------------------

    def set_cell_style(self, row: int, col: int, style: Mapping[str, Any] | None) -> None:
        """Replace a cell's own style; None or empty clears it."""
        if not self._cell_in_bounds(row, col):
            logger.debug("Ignoring cell style for out-of-range cell ({}, {})", row, col)
            return
        sanitized = sanitize_style(style)
        if sanitized:
            self.cell_styles[(row, col)] = sanitized
        else:
            self.cell_styles.pop((row, col), None)

    def get_cell_style(self, row: int, col: int) -> Style | None:
        if not self._cell_in_bounds(row, col):
            return None
        style = self.cell_styles.get((row, col))
        return dict(style) if style else None

    def set_row_style(
        self, index: int, style: Mapping[str, Any] | None, *, propagate: bool = True
    ) -> None:
        """Replace a row's style layer.

        With ``propagate`` the new properties (except sizing keys) are also
        written into every cell of the row as per-cell overrides.
        """
        if not self._row_in_bounds(index):
            return
        sanitized = sanitize_style(style)
        self.row_styles[index] = sanitized
        if propagate and sanitized:
            for col in range(self.cols):
                self._patch_cell_style(index, col, sanitized)

    def get_row_style(self, index: int) -> Style | None:
        if not self._row_in_bounds(index):
            return None
        style = self.row_styles[index]
        return dict(style) if style else None

    def set_column_style(
        self, index: int, style: Mapping[str, Any] | None, *, propagate: bool = True
    ) -> None:
        """Replace a column's style layer.

        With ``propagate`` the new properties (except sizing keys) are also
        written into every cell of the column as per-cell overrides.
        """
        if not self._col_in_bounds(index):
            return
        sanitized = sanitize_style(style)
        self.column_styles[index] = sanitized
        if propagate and sanitized:
            for row in range(self.rows):
                self._patch_cell_style(row, index, sanitized)

    def get_column_style(self, index: int) -> Style | None:
        if not self._col_in_bounds(index):
            return None
        style = self.column_styles[index]
        return dict(style) if style else None

    def set_default_style(self, style: Mapping[str, Any] | None) -> None:
        self.default_style = sanitize_style(style)

    def get_default_style(self) -> Style | None:
        return dict(self.default_style) if self.default_style else None

    def get_effective_style(self, row: int, col: int) -> Style | None:
        return effective_style(self, row, col)

    def patch_cell_style(self, row: int, col: int, patch: Mapping[str, Any]) -> None:
        """Merge ``patch`` into a cell style; None or "" values delete keys."""
        if self._cell_in_bounds(row, col):
            self._patch_cell_style(row, col, patch)

    def _patch_cell_style(self, row: int, col: int, patch: Mapping[str, Any]) -> None:
        current = dict(self.cell_styles.get((row, col)) or {})
        for key, value in patch.items():
            if key in SIZING_KEYS:
                continue
            if value is None or value == "":
                current.pop(key, None)
            else:
                current[key] = value
        sanitized = sanitize_style(current)
        if sanitized:
            self.cell_styles[(row, col)] = sanitized
        else:
            self.cell_styles.pop((row, col), None)

    # ------------------------------------------------------------------
    # Merges
    # ------------------------------------------------------------------

    def set_merges(self, raw_ranges: Any) -> None:
        """Replace the merge list, sanitized against the current grid."""
        self.merges = normalize_merges(raw_ranges, self.rows, self.cols)

    def coverage(self) -> MergeCoverage:
        return build_coverage(self.merges)

    # ------------------------------------------------------------------
    # Snapshots and normalization
    # ------------------------------------------------------------------

    def to_dense_model(self) -> GridSnapshot:
        """Return an immutable snapshot of the whole model."""
        return GridSnapshot(
            rows=self.rows,
            cols=self.cols,
            data=tuple(tuple(row) for row in self.data),
            default_style=_frozen(self.default_style),
            column_styles=tuple(_frozen(s) for s in self.column_styles),
            row_styles=tuple(_frozen(s) for s in self.row_styles),
            cell_styles=MappingProxyType(
                {key: MappingProxyType(dict(style)) for key, style in self.cell_styles.items()}
            ),
            merges=tuple(self.merges),
        )

    @classmethod
    def normalize(cls, candidate: Any) -> GridModel:
        """Build a dense, bounds-consistent model from a loosely typed mapping.

        Dimensions come from explicit ``rows``/``cols`` or, failing that, from
        the shape of ``data``, defaulting to 2x2. Every style array is resized
        to the final dimensions; cell styles and merges outside the grid are
        dropped silently.
        """
        source: Mapping[str, Any] = candidate if isinstance(candidate, Mapping) else {}
        data = source.get("data")
        data_rows: Sequence[Any] = data if isinstance(data, list) else []

        if source.get("rows") is not None:
            rows = _coerce_dimension(source["rows"], DEFAULT_ROWS, strict=False)
        elif isinstance(data, list):
            rows = len(data)
        else:
            rows = DEFAULT_ROWS

        if source.get("cols") is not None:
            cols = _coerce_dimension(source["cols"], DEFAULT_COLS, strict=False)
        elif data_rows and isinstance(data_rows[0], list):
            cols = len(data_rows[0])
        else:
            cols = DEFAULT_COLS

        model = cls(rows, cols)
        for r in range(min(rows, len(data_rows))):
            src_row = data_rows[r] if isinstance(data_rows[r], list) else []
            for c in range(min(cols, len(src_row))):
                model.data[r][c] = stringify_value(src_row[c])

        model.column_styles = _resize_styles(source.get("columnStyles"), cols)
        model.row_styles = _resize_styles(source.get("rowStyles"), rows)

        cell_styles = source.get("cellStyles")
        if isinstance(cell_styles, Mapping):
            for key, value in cell_styles.items():
                coord = _parse_style_key(key)
                if coord is None:
                    continue
                r, c = coord
                if not (0 <= r < rows and 0 <= c < cols):
                    continue
                raw = value.get("style") if isinstance(value, Mapping) and "style" in value else value
                sanitized = sanitize_style(raw)
                if sanitized:
                    model.cell_styles[(r, c)] = sanitized

        default = source.get("defaultStyle", source.get("defaultCellStyle"))
        model.default_style = sanitize_style(default)
        model.merges = normalize_merges(source.get("mergedCells"), rows, cols)
        return model

    # ------------------------------------------------------------------
    # Bounds helpers
    # ------------------------------------------------------------------

    def _row_in_bounds(self, index: Any) -> bool:
        return isinstance(index, int) and 0 <= index < self.rows

    def _col_in_bounds(self, index: Any) -> bool:
        return isinstance(index, int) and 0 <= index < self.cols

    def _cell_in_bounds(self, row: Any, col: Any) -> bool:
        return self._row_in_bounds(row) and self._col_in_bounds(col)

    def selection_fits(self, selection: Selection) -> bool:
        """Whether a selection still addresses an existing cell, row or column."""
        if isinstance(selection, CellSelection):
            return self._cell_in_bounds(selection.row, selection.col)
        if isinstance(selection, RowSelection):
            return self._row_in_bounds(selection.row)
        if isinstance(selection, ColumnSelection):
            return self._col_in_bounds(selection.col)
        return selection is None


def _resize_styles(raw: Any, length: int) -> list[Style | None]:
    source = raw if isinstance(raw, list) else []
    return [sanitize_style(source[i]) if i < len(source) else None for i in range(length)]


def _parse_style_key(key: Any) -> tuple[int, int] | None:
    if isinstance(key, tuple) and len(key) == 2:
        row, col = to_index(key[0]), to_index(key[1])
        if row is None or col is None:
            return None
        return row, col
    return parse_cell_key(key)
