"""Shared test fixtures for extragrid."""

from __future__ import annotations

from typing import Any

import pytest

from extragrid.model import GridModel, GridSnapshot, Selection
from extragrid.table import GridTable


class RecordingHost:
    """Table host that records every render instead of drawing."""

    def __init__(self) -> None:
        self.renders: list[tuple[GridSnapshot, Selection]] = []
        self.cleared = False

    def render(self, snapshot: GridSnapshot, selection: Selection) -> None:
        self.renders.append((snapshot, selection))

    def clear(self) -> None:
        self.cleared = True


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def table(host: RecordingHost) -> GridTable:
    return GridTable(host, rows=3, cols=3)


@pytest.fixture
def sample_model() -> GridModel:
    """3x3 grid with a header row, a wide column and one merge."""
    model = GridModel(3, 3)
    model.set_value(0, 0, "Name")
    model.set_value(0, 1, "Value")
    model.set_value(1, 0, "Alice")
    model.set_value(1, 1, "100")
    model.set_cell_style(0, 0, {"textAlign": "center"})
    model.set_column_style(1, {"width": "160px"})
    model.set_merges(["A3:C3"])
    return model


@pytest.fixture
def interchange_doc() -> dict[str, Any]:
    return {
        "activeSheet": "Data",
        "sheets": [
            {"name": "Other", "rows": [{"index": 0, "cells": [{"index": 0, "value": "x"}]}]},
            {
                "name": "Data",
                "columns": [{"width": 120}, {}, {"width": 80.6}],
                "rows": [
                    {
                        "index": 0,
                        "height": 30,
                        "cells": [
                            {"index": 0, "value": "Name", "style": {"bold": True}},
                            {"index": 1, "text": 42},
                        ],
                    },
                    {"index": 2, "cells": [{"col": 1, "displayText": "late"}]},
                ],
                "defaultCellStyle": {"fontFamily": "Arial", "fontSize": 13},
                "mergedCells": ["A4:B4"],
                "activeCell": "B2",
            },
        ],
        "columnWidth": 64,
        "rowHeight": 21,
    }
