"""
Editable grid engine.

GridTable is what a rendering layer talks to: it owns one GridModel and the
transient selection, forwards edits to the model and asks its host to
re-render after every change.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Protocol

from loguru import logger

from extragrid.codec import ImportedSheet, load_json, to_native_json, to_spreadsheet_json
from extragrid.config import Settings, get_settings
from extragrid.exceptions import InvalidContainerError
from extragrid.file_reader import read_spreadsheet_file
from extragrid.model import (
    CellSelection,
    ColumnSelection,
    GridModel,
    GridSnapshot,
    RowSelection,
    Selection,
)
from extragrid.style_keys import Style
from extragrid.writer import (
    CsvWriter,
    OpenpyxlWriter,
    WorkbookWriter,
    build_workbook_payload,
    export_workbook,
)


class TableHost(Protocol):
    """The rendering side of a table (DOM, terminal, test double...)."""

    def render(self, snapshot: GridSnapshot, selection: Selection) -> None: ...

    def clear(self) -> None: ...


def _apply_patch(current: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(current or {})
    for key, value in patch.items():
        if value is None or value == "":
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


class GridTable:
    """Grid engine bound to a rendering host."""

    def __init__(
        self,
        host: TableHost | None,
        *,
        rows: int | None = None,
        cols: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Create a table and render it once.

        Args:
            host: Receives a snapshot after every change (required)
            rows: Initial row count, defaults to settings.default_rows
            cols: Initial column count, defaults to settings.default_cols
            settings: Engine settings, defaults to get_settings()

        Raises:
            InvalidContainerError: If host is None
            InvalidDimensionError: If rows or cols is negative
        """
        if host is None:
            raise InvalidContainerError()
        self.host = host
        self.settings = settings or get_settings()
        self.model = GridModel(
            self.settings.default_rows if rows is None else rows,
            self.settings.default_cols if cols is None else cols,
        )
        self.selection: Selection = None
        self._render()

    # Structural edits

    def add_row(self) -> None:
        self.model.insert_row()
        self._render()

    def add_column(self) -> None:
        self.model.insert_column()
        self._render()

    def remove_row(self, index: int) -> None:
        self.model.remove_row(index)
        self._drop_stale_selection()
        self._render()

    def remove_column(self, index: int) -> None:
        self.model.remove_column(index)
        self._drop_stale_selection()
        self._render()

    # Values and styles

    def set_value(self, row: int, col: int, value: Any) -> None:
        self.model.set_value(row, col, value)
        self._render()

    def get_value(self, row: int, col: int) -> str:
        return self.model.get_value(row, col)

    def set_cell_style(self, row: int, col: int, style: Mapping[str, Any] | None) -> None:
        self.model.set_cell_style(row, col, style)
        self._render()

    def get_cell_style(self, row: int, col: int) -> Style | None:
        return self.model.get_cell_style(row, col)

    def set_row_style(self, index: int, style: Mapping[str, Any] | None) -> None:
        self.model.set_row_style(index, style)
        self._render()

    def get_row_style(self, index: int) -> Style | None:
        return self.model.get_row_style(index)

    def set_column_style(self, index: int, style: Mapping[str, Any] | None) -> None:
        self.model.set_column_style(index, style)
        self._render()

    def get_column_style(self, index: int) -> Style | None:
        return self.model.get_column_style(index)

    def get_effective_style(self, row: int, col: int) -> Style | None:
        return self.model.get_effective_style(row, col)

    # Selection

    def set_selection(self, selection: Selection) -> None:
        """Select a cell, row or column; selections outside the grid clear it."""
        self.selection = selection if self.model.selection_fits(selection) else None
        self._render()

    def apply_style_to_selection(self, patch: Mapping[str, Any] | Literal["clear"]) -> None:
        """Apply a toolbar edit to the current selection.

        ``patch`` values of None or "" remove that property. Row and column
        patches also update every cell of the row or column. Width is a
        column-only property. ``"clear"`` clears the selected layer only.
        """
        selection = self.selection
        if selection is None:
            return
        model = self.model

        if patch == "clear":
            if isinstance(selection, CellSelection):
                model.set_cell_style(selection.row, selection.col, None)
            elif isinstance(selection, ColumnSelection):
                model.set_column_style(selection.col, None)
            elif isinstance(selection, RowSelection):
                model.set_row_style(selection.row, None)
            self._render()
            return

        if not isinstance(patch, Mapping):
            return

        if isinstance(selection, CellSelection):
            cell_patch = {k: v for k, v in patch.items() if k != "width"}
            current = model.get_cell_style(selection.row, selection.col)
            model.set_cell_style(selection.row, selection.col, _apply_patch(current, cell_patch))
        elif isinstance(selection, ColumnSelection):
            current = model.get_column_style(selection.col)
            model.set_column_style(selection.col, _apply_patch(current, patch), propagate=False)
            for row in range(model.rows):
                model.patch_cell_style(row, selection.col, patch)
        elif isinstance(selection, RowSelection):
            row_patch = {k: v for k, v in patch.items() if k != "width"}
            current = model.get_row_style(selection.row)
            model.set_row_style(selection.row, _apply_patch(current, row_patch), propagate=False)
            for col in range(model.cols):
                model.patch_cell_style(selection.row, col, row_patch)
        self._render()

    # Whole-model access

    def get_model(self) -> GridModel:
        return self.model

    def set_model(self, candidate: Any) -> None:
        """Replace the model with a normalized copy of ``candidate``."""
        self.model = GridModel.normalize(candidate)
        self.selection = None
        self._render()

    def to_json(self) -> dict[str, Any]:
        return to_native_json(self.model)

    def to_spreadsheet_json(self) -> dict[str, Any]:
        return to_spreadsheet_json(
            self.model, self.selection, sheet_name=self.settings.sheet_name
        )

    def from_json(self, payload: Any) -> None:
        """Load an interchange or native document.

        The current model is only replaced once the document has been fully
        parsed; on error it is left untouched.

        Raises:
            EmptySpreadsheetError: If an interchange document has no sheets
        """
        self._replace(load_json(payload))

    def import_file(self, path: str | Path) -> None:
        """Load a JSON document from disk, atomically.

        Raises:
            InvalidFileError: If the file is missing or not valid JSON
            EmptySpreadsheetError: If an interchange document has no sheets
        """
        self._replace(load_json(read_spreadsheet_file(Path(path))))

    # Export

    def export_to_excel(
        self, path: str | Path = "table.xlsx", writer: WorkbookWriter | None = None
    ) -> Path:
        """Write an .xlsx workbook, falling back to CSV if that is not possible."""
        return export_workbook(
            self.model,
            path,
            writer if writer is not None else OpenpyxlWriter(),
            sheet_name=self.settings.sheet_name,
        )

    def export_to_csv(self, path: str | Path = "table.csv") -> Path:
        payload = build_workbook_payload(self.model, sheet_name=self.settings.sheet_name)
        return CsvWriter().write(payload, Path(path))

    def destroy(self) -> None:
        self.host.clear()

    # Internals

    def _replace(self, imported: ImportedSheet) -> None:
        self.model = imported.model
        self.selection = imported.selection
        logger.debug("Replaced model: {!r}", self.model)
        self._render()

    def _drop_stale_selection(self) -> None:
        if not self.model.selection_fits(self.selection):
            self.selection = None

    def _render(self) -> None:
        self.host.render(self.model.to_dense_model(), self.selection)
