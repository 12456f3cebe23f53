"""
Interchange JSON codec.

Converts a dense GridModel into the sparse spreadsheet-style interchange
document and back. The interchange document looks like::

    {
      "activeSheet": "Sheet1",
      "sheets": [{
        "name": "Sheet1",
        "columns": [{"width": 160}, {}],
        "rows": [{"index": 0, "height": 30, "cells": [{"index": 0, "value": "Name", "style": {...}}]}],
        "defaultCellStyle": {...},
        "mergedCells": ["A1:B1"],
        "activeCell": "A1",
        "selection": "A1"
      }],
      "columnWidth": 64,
      "rowHeight": 21
    }

Export sparsifies by diffing against the grid-wide default style; import
densifies by inferring the grid extent from every index and address present.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger

from extragrid.cascade import export_overrides
from extragrid.exceptions import EmptySpreadsheetError
from extragrid.merges import normalize_merges, parse_merge_range
from extragrid.model import (
    CellSelection,
    ColumnSelection,
    GridModel,
    RowSelection,
    Selection,
)
from extragrid.style_keys import from_interchange_style, sanitize_style, to_interchange_style
from extragrid.utils import (
    a1_to_cell,
    cell_key,
    cell_to_a1,
    column_index_to_letter,
    format_px,
    parse_a1_range,
    px_to_number,
    stringify_value,
    to_index,
)

DEFAULT_COLUMN_WIDTH = 64
DEFAULT_ROW_HEIGHT = 21
DEFAULT_SHEET_NAME = "Sheet1"
MIN_IMPORT_ROWS = 2
MIN_IMPORT_COLS = 2

# Cell text keys in priority order.
VALUE_KEYS = ("value", "text", "displayText", "v")


@dataclass
class ImportedSheet:
    """Result of loading a document: the new model plus restored selection."""

    model: GridModel
    selection: Selection = None
    sheet_name: str | None = None


# =============================================================================
# Export
# =============================================================================


def selection_to_a1(selection: Selection) -> str:
    """Serialize a selection as a single cell address.

    Rows map to their first column, columns to their first row, and no
    selection to "A1".
    """
    if isinstance(selection, CellSelection):
        return cell_to_a1(selection.row, selection.col)
    if isinstance(selection, ColumnSelection):
        return f"{column_index_to_letter(selection.col)}1"
    if isinstance(selection, RowSelection):
        return f"A{selection.row + 1}"
    return "A1"


def to_spreadsheet_json(
    model: GridModel,
    selection: Selection = None,
    *,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> dict[str, Any]:
    """Serialize a model to the sparse interchange document.

    Args:
        model: The grid to export
        selection: Current selection, written as the active cell
        sheet_name: Name of the single exported sheet

    Returns:
        JSON-serializable interchange document
    """
    columns: list[dict[str, Any]] = []
    for col in range(model.cols):
        width = px_to_number((model.column_styles[col] or {}).get("width"))
        columns.append({"width": width} if width is not None else {})

    rows: list[dict[str, Any]] = []
    for row in range(model.rows):
        height = px_to_number((model.row_styles[row] or {}).get("height"))
        cells: list[dict[str, Any]] = []
        for col in range(model.cols):
            value = model.data[row][col]
            style = to_interchange_style(export_overrides(model, row, col))
            if not value and not style:
                continue
            cell: dict[str, Any] = {"index": col}
            if value:
                cell["value"] = value
            if style:
                cell["style"] = style
            cells.append(cell)
        if cells or height is not None:
            row_entry: dict[str, Any] = {"index": row}
            if height is not None:
                row_entry["height"] = height
            row_entry["cells"] = cells
            rows.append(row_entry)

    active_cell = selection_to_a1(selection)
    sheet: dict[str, Any] = {
        "name": sheet_name,
        "columns": columns,
        "rows": rows,
        "selection": active_cell,
        "activeCell": active_cell,
        "frozenRows": 0,
        "frozenColumns": 0,
        "mergedCells": [merge.to_a1() for merge in model.merges],
        "hyperlinks": [],
        "drawings": [],
    }
    default_style = to_interchange_style(model.default_style)
    if default_style:
        sheet["defaultCellStyle"] = default_style

    logger.info(
        "Exported {}x{} grid: {} sparse rows, {} merges",
        model.rows,
        model.cols,
        len(rows),
        len(model.merges),
    )
    return {
        "activeSheet": sheet_name,
        "sheets": [sheet],
        "names": [],
        "columnWidth": DEFAULT_COLUMN_WIDTH,
        "rowHeight": DEFAULT_ROW_HEIGHT,
        "images": {},
    }


def to_native_json(model: GridModel) -> dict[str, Any]:
    """Serialize a model to the dense native document.

    Cell styles are keyed "C{col+1}R{row+1}" and wrapped as {"style": ...}.
    """
    out: dict[str, Any] = {
        "rows": model.rows,
        "cols": model.cols,
        "data": [list(row) for row in model.data],
        "columnStyles": [dict(s) if s else None for s in model.column_styles],
        "rowStyles": [dict(s) if s else None for s in model.row_styles],
        "cellStyles": {
            cell_key(r, c): {"style": dict(style)}
            for (r, c), style in sorted(model.cell_styles.items())
        },
        "mergedCells": [merge.to_dict() for merge in model.merges],
    }
    if model.default_style:
        out["defaultStyle"] = dict(model.default_style)
    return out


# =============================================================================
# Import
# =============================================================================


def _cell_index(cell: Mapping[str, Any]) -> int | None:
    for key in ("index", "col", "c"):
        if cell.get(key) is not None:
            return to_index(cell[key])
    return None


def _cell_text(cell: Mapping[str, Any]) -> str:
    for key in VALUE_KEYS:
        if cell.get(key) is not None:
            return stringify_value(cell[key])
    return ""


def _iter_cells(sheet: Mapping[str, Any]) -> Iterator[tuple[int, int, Mapping[str, Any]]]:
    """Yield (row, col, cell_record) for every well-formed sparse cell."""
    for row_entry in _as_list(sheet.get("rows")):
        if not isinstance(row_entry, Mapping):
            continue
        row = to_index(row_entry.get("index"))
        if row is None:
            continue
        for cell in _as_list(row_entry.get("cells")):
            if not isinstance(cell, Mapping):
                continue
            col = _cell_index(cell)
            if col is None:
                continue
            yield row, col, cell


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _select_sheet(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise EmptySpreadsheetError()
    sheets = [s for s in _as_list(payload.get("sheets")) if isinstance(s, Mapping)]
    if not sheets:
        raise EmptySpreadsheetError()
    active_name = payload.get("activeSheet") or sheets[0].get("name")
    for sheet in sheets:
        if sheet.get("name") == active_name:
            return sheet
    return sheets[0]


def _infer_extent(sheet: Mapping[str, Any]) -> tuple[int, int]:
    """Infer (rows, cols) from every index and address the sheet references."""
    max_row = -1
    max_col = -1

    def bump(row: int, col: int) -> None:
        nonlocal max_row, max_col
        max_row = max(max_row, row)
        max_col = max(max_col, col)

    for row_entry in _as_list(sheet.get("rows")):
        if isinstance(row_entry, Mapping):
            row = to_index(row_entry.get("index"))
            if row is not None:
                max_row = max(max_row, row)
    for _row, col, _cell in _iter_cells(sheet):
        max_col = max(max_col, col)

    columns = sheet.get("columns")
    if isinstance(columns, list):
        max_col = max(max_col, len(columns) - 1)

    active_cell = sheet.get("activeCell")
    if isinstance(active_cell, str) and active_cell.strip():
        try:
            bump(*a1_to_cell(active_cell))
        except ValueError:
            logger.debug("Ignoring malformed activeCell {!r}", active_cell)

    selection = sheet.get("selection")
    if isinstance(selection, str) and selection.strip():
        try:
            start, end = parse_a1_range(selection.strip())
            bump(*start)
            bump(*end)
        except ValueError:
            logger.debug("Ignoring malformed selection {!r}", selection)

    for raw in _as_list(sheet.get("mergedCells")):
        corners = parse_merge_range(raw)
        if corners is not None:
            bump(*corners[0])
            bump(*corners[1])

    return max(MIN_IMPORT_ROWS, max_row + 1), max(MIN_IMPORT_COLS, max_col + 1)


def _restore_selection(sheet: Mapping[str, Any], rows: int, cols: int) -> Selection:
    def clamp(value: int, upper: int) -> int:
        return max(0, min(upper, value))

    selection = sheet.get("selection")
    if isinstance(selection, str) and selection.strip():
        try:
            (r1, c1), (r2, c2) = parse_a1_range(selection.strip())
        except ValueError:
            pass
        else:
            start_row, end_row = clamp(r1, rows - 1), clamp(r2, rows - 1)
            start_col, end_col = clamp(c1, cols - 1), clamp(c2, cols - 1)
            if start_row == end_row and start_col == 0 and end_col == cols - 1:
                return RowSelection(start_row)
            if start_col == end_col and start_row == 0 and end_row == rows - 1:
                return ColumnSelection(start_col)
            return CellSelection(start_row, start_col)

    active_cell = sheet.get("activeCell")
    if isinstance(active_cell, str) and active_cell.strip():
        try:
            row, col = a1_to_cell(active_cell)
        except ValueError:
            return None
        return CellSelection(clamp(row, rows - 1), clamp(col, cols - 1))
    return None


def from_spreadsheet_json(payload: Any) -> ImportedSheet:
    """Parse an interchange document into a new model.

    The active sheet is chosen by name, else the first sheet is used. Grid
    extent is inferred from row/cell indices, column descriptors, the active
    cell, the selection and merges, with a 2x2 floor.

    Raises:
        EmptySpreadsheetError: If the document has no sheets
    """
    sheet = _select_sheet(payload)
    rows, cols = _infer_extent(sheet)
    model = GridModel(rows, cols)

    for row, col, cell in _iter_cells(sheet):
        if row < rows and col < cols:
            model.data[row][col] = _cell_text(cell)

    columns = _as_list(sheet.get("columns"))
    default_width = px_to_number(payload.get("columnWidth"))
    for col in range(cols):
        descriptor = columns[col] if col < len(columns) else None
        width = px_to_number(descriptor.get("width")) if isinstance(descriptor, Mapping) else None
        if width is None:
            width = default_width
        model.column_styles[col] = {"width": format_px(width)} if width is not None else None

    row_heights: dict[int, int] = {}
    for row_entry in _as_list(sheet.get("rows")):
        if not isinstance(row_entry, Mapping):
            continue
        row = to_index(row_entry.get("index"))
        height = px_to_number(row_entry.get("height"))
        if row is not None and height is not None:
            row_heights[row] = height
    default_height = px_to_number(payload.get("rowHeight"))
    for row in range(rows):
        height = row_heights.get(row, default_height)
        model.row_styles[row] = {"height": format_px(height)} if height is not None else None

    default_style = from_interchange_style(
        sheet.get("defaultCellStyle") or payload.get("defaultCellStyle")
    )
    model.default_style = sanitize_style(default_style)

    for row, col, cell in _iter_cells(sheet):
        if row >= rows or col >= cols:
            continue
        nested = from_interchange_style(cell.get("style") or cell.get("s")) or {}
        inline = from_interchange_style(cell) or {}
        combined = {**nested, **inline}
        sanitized = sanitize_style({**(default_style or {}), **combined})
        if sanitized:
            model.cell_styles[(row, col)] = sanitized

    model.merges = normalize_merges(_as_list(sheet.get("mergedCells")), rows, cols)
    selection = _restore_selection(sheet, rows, cols)

    logger.info(
        "Imported sheet {!r}: {}x{} grid, {} merges",
        sheet.get("name"),
        rows,
        cols,
        len(model.merges),
    )
    return ImportedSheet(model=model, selection=selection, sheet_name=sheet.get("name"))


def load_json(payload: Any) -> ImportedSheet:
    """Load either an interchange document or a native model document.

    A mapping with a "sheets" list is treated as interchange JSON; anything
    else is normalized as a native model.
    """
    if isinstance(payload, Mapping) and isinstance(payload.get("sheets"), list):
        return from_spreadsheet_json(payload)
    return ImportedSheet(model=GridModel.normalize(payload))
