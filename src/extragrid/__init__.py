"""extragrid - data and style engine for an editable grid widget.

Keeps a dense grid, layered styles and merged regions consistent under
structural edits, and converts to and from a sparse spreadsheet-style JSON
interchange format.
"""

__version__ = "0.1.0"

from extragrid.codec import (
    ImportedSheet,
    from_spreadsheet_json,
    load_json,
    to_native_json,
    to_spreadsheet_json,
)
from extragrid.exceptions import (
    EmptySpreadsheetError,
    GridError,
    InvalidContainerError,
    InvalidDimensionError,
    InvalidFileError,
    WriterUnavailableError,
)
from extragrid.merges import MergeRange
from extragrid.model import (
    CellSelection,
    ColumnSelection,
    GridModel,
    GridSnapshot,
    RowSelection,
)
from extragrid.table import GridTable
from extragrid.writer import CsvWriter, OpenpyxlWriter

__all__ = [
    "CellSelection",
    "ColumnSelection",
    "CsvWriter",
    "EmptySpreadsheetError",
    "GridError",
    "GridModel",
    "GridSnapshot",
    "GridTable",
    "ImportedSheet",
    "InvalidContainerError",
    "InvalidDimensionError",
    "InvalidFileError",
    "MergeRange",
    "OpenpyxlWriter",
    "RowSelection",
    "WriterUnavailableError",
    "__version__",
    "from_spreadsheet_json",
    "load_json",
    "to_native_json",
    "to_spreadsheet_json",
]
