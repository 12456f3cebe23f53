"""Tests for extragrid.table module."""

import json
from pathlib import Path
from typing import Any

import pytest

from extragrid.config import Settings
from extragrid.exceptions import EmptySpreadsheetError, InvalidContainerError, InvalidFileError
from extragrid.model import CellSelection, ColumnSelection, RowSelection
from extragrid.table import GridTable

from conftest import RecordingHost


class TestConstruction:
    """Tests for GridTable construction and teardown."""

    def test_requires_host(self) -> None:
        with pytest.raises(InvalidContainerError) as exc_info:
            GridTable(None)
        assert "host is required" in str(exc_info.value)

    def test_renders_on_creation(self, host: RecordingHost) -> None:
        GridTable(host, rows=3, cols=4)
        assert len(host.renders) == 1
        snapshot, selection = host.renders[0]
        assert (snapshot.rows, snapshot.cols) == (3, 4)
        assert selection is None

    def test_dimensions_from_settings(self, host: RecordingHost) -> None:
        table = GridTable(host, settings=Settings(default_rows=5, default_cols=6))
        assert (table.model.rows, table.model.cols) == (5, 6)

    def test_destroy_clears_host(self, table: GridTable, host: RecordingHost) -> None:
        table.destroy()
        assert host.cleared


class TestEdits:
    """Tests for edits forwarded to the model."""

    def test_every_edit_renders(self, table: GridTable, host: RecordingHost) -> None:
        table.set_value(0, 0, "x")
        table.add_row()
        table.add_column()
        assert len(host.renders) == 4
        snapshot, _ = host.renders[-1]
        assert (snapshot.rows, snapshot.cols) == (4, 4)
        assert snapshot.data[0][0] == "x"

    def test_values_and_styles(self, table: GridTable) -> None:
        table.set_value(1, 1, 7)
        table.set_cell_style(1, 1, {"color": "red"})
        table.set_column_style(2, {"width": "90px"})
        assert table.get_value(1, 1) == "7"
        assert table.get_cell_style(1, 1) == {"color": "red"}
        assert table.get_column_style(2) == {"width": "90px"}
        assert table.get_effective_style(1, 2) == {"width": "90px"}

    def test_row_style_reaches_cells(self, table: GridTable) -> None:
        table.set_row_style(0, {"color": "red"})
        assert table.get_row_style(0) == {"color": "red"}
        assert table.get_cell_style(0, 2) == {"color": "red"}

    def test_removal_drops_stale_selection(self, table: GridTable) -> None:
        table.set_selection(CellSelection(2, 2))
        table.remove_row(0)
        assert table.selection is None

    def test_removal_keeps_valid_selection(self, table: GridTable) -> None:
        table.set_selection(CellSelection(0, 0))
        table.remove_column(2)
        assert table.selection == CellSelection(0, 0)

    def test_selection_outside_grid_is_cleared(self, table: GridTable) -> None:
        table.set_selection(RowSelection(9))
        assert table.selection is None


class TestApplyStyleToSelection:
    """Tests for toolbar style edits."""

    def test_without_selection_is_noop(self, table: GridTable, host: RecordingHost) -> None:
        table.apply_style_to_selection({"color": "red"})
        assert len(host.renders) == 1
        assert table.model.cell_styles == {}

    def test_cell_patch(self, table: GridTable) -> None:
        table.set_cell_style(0, 0, {"color": "red", "fontStyle": "italic"})
        table.set_selection(CellSelection(0, 0))
        table.apply_style_to_selection({"fontWeight": "bold", "fontStyle": None, "width": "50px"})
        assert table.get_cell_style(0, 0) == {"color": "red", "fontWeight": "bold"}

    def test_column_patch_updates_cells(self, table: GridTable) -> None:
        table.set_selection(ColumnSelection(1))
        table.apply_style_to_selection({"background": "#eee", "width": "120px"})
        assert table.get_column_style(1) == {"background": "#eee", "width": "120px"}
        for row in range(3):
            assert table.get_cell_style(row, 1) == {"background": "#eee"}
        assert table.get_cell_style(0, 0) is None

    def test_row_patch_ignores_width(self, table: GridTable) -> None:
        table.set_selection(RowSelection(2))
        table.apply_style_to_selection({"textAlign": "right", "width": "120px"})
        assert table.get_row_style(2) == {"textAlign": "right"}
        assert table.get_cell_style(2, 0) == {"textAlign": "right"}
        assert table.get_column_style(0) is None

    def test_row_patch_removes_property_from_cells(self, table: GridTable) -> None:
        table.set_selection(RowSelection(0))
        table.apply_style_to_selection({"color": "red"})
        table.apply_style_to_selection({"color": None})
        assert table.get_row_style(0) is None
        assert table.get_cell_style(0, 1) is None

    def test_clear_resets_layer_only(self, table: GridTable) -> None:
        table.set_selection(RowSelection(0))
        table.apply_style_to_selection({"color": "red"})
        table.apply_style_to_selection("clear")
        assert table.get_row_style(0) is None
        assert table.get_cell_style(0, 0) == {"color": "red"}

    def test_clear_cell(self, table: GridTable) -> None:
        table.set_cell_style(1, 1, {"color": "red"})
        table.set_selection(CellSelection(1, 1))
        table.apply_style_to_selection("clear")
        assert table.get_cell_style(1, 1) is None


class TestDocuments:
    """Tests for whole-model import and export."""

    def test_set_model_normalizes(self, table: GridTable) -> None:
        table.set_selection(CellSelection(0, 0))
        table.set_model({"data": [["a", "b"]]})
        assert (table.get_model().rows, table.get_model().cols) == (1, 2)
        assert table.selection is None

    def test_json_roundtrip(self, table: GridTable, host: RecordingHost) -> None:
        table.set_value(0, 0, "a")
        table.set_cell_style(0, 0, {"color": "red"})
        document = table.to_json()

        other = GridTable(RecordingHost())
        other.from_json(document)
        assert other.get_value(0, 0) == "a"
        assert other.get_cell_style(0, 0) == {"color": "red"}

    def test_spreadsheet_json_uses_selection(self, table: GridTable) -> None:
        table.set_selection(CellSelection(2, 1))
        document = table.to_spreadsheet_json()
        assert document["sheets"][0]["activeCell"] == "B3"

    def test_from_json_restores_selection(
        self, table: GridTable, interchange_doc: dict[str, Any]
    ) -> None:
        table.from_json(interchange_doc)
        assert (table.model.rows, table.model.cols) == (4, 3)
        assert table.selection == CellSelection(1, 1)

    def test_from_json_without_sheets_keeps_model(self, table: GridTable) -> None:
        table.set_value(0, 0, "keep")
        with pytest.raises(EmptySpreadsheetError):
            table.from_json({"sheets": []})
        assert table.get_value(0, 0) == "keep"

    def test_import_file(
        self, table: GridTable, interchange_doc: dict[str, Any], tmp_path: Path
    ) -> None:
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(interchange_doc), encoding="utf-8")
        table.import_file(path)
        assert table.get_value(0, 0) == "Name"

    def test_import_bad_file_keeps_model(self, table: GridTable, tmp_path: Path) -> None:
        table.set_value(0, 0, "keep")
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidFileError):
            table.import_file(path)
        with pytest.raises(InvalidFileError):
            table.import_file(tmp_path / "missing.json")
        assert table.get_value(0, 0) == "keep"
        assert (table.model.rows, table.model.cols) == (3, 3)


class TestExport:
    """Tests for file export from the table."""

    def test_export_to_excel(self, table: GridTable, tmp_path: Path) -> None:
        table.set_value(0, 0, "x")
        result = table.export_to_excel(tmp_path / "grid.xlsx")
        assert result == tmp_path / "grid.xlsx"
        assert result.exists()

    def test_export_to_csv(self, table: GridTable, tmp_path: Path) -> None:
        table.set_value(0, 0, "x")
        result = table.export_to_csv(tmp_path / "grid.csv")
        assert result.read_text(encoding="utf-8-sig") == "x,,\r\n,,\r\n,,\r\n"
