"""Custom exceptions for extragrid."""

from __future__ import annotations


class GridError(Exception):
    """Base exception for grid engine errors."""

    pass


class InvalidDimensionError(GridError):
    """Raised when a grid is created with a negative row or column count."""

    def __init__(self, rows: object, cols: object) -> None:
        self.rows = rows
        self.cols = cols
        super().__init__(
            f"Invalid grid dimensions {rows}x{cols}: rows and cols must be >= 0"
        )


class InvalidContainerError(GridError):
    """Raised when the engine is constructed without a host to render into."""

    def __init__(self) -> None:
        super().__init__("GridTable: a host is required")


class EmptySpreadsheetError(GridError):
    """Raised when an interchange payload contains no sheets.

    No reasonable grid size can be inferred from nothing, so the caller has to
    decide which model to keep.
    """

    def __init__(self) -> None:
        super().__init__("Spreadsheet payload contains no sheets")


class InvalidFileError(GridError):
    """Raised when an import file is missing or is not a JSON document."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Invalid file '{file_path}': {reason}")


class WriterUnavailableError(GridError):
    """Raised by a workbook writer that cannot produce a file.

    Callers fall back to the values-only CSV writer.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Workbook writer unavailable: {reason}")
