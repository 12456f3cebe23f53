"""Read import documents from disk."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from extragrid.exceptions import InvalidFileError


def read_spreadsheet_file(path: Path) -> Any:
    """Read and parse a JSON document for import.

    Args:
        path: Path to an interchange or native JSON file

    Returns:
        The decoded JSON value

    Raises:
        InvalidFileError: If the file is missing, unreadable or not valid JSON
    """
    if not path.exists():
        raise InvalidFileError(str(path), "File not found")
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidFileError(str(path), f"Cannot read file: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidFileError(str(path), f"Invalid JSON: {e}") from e
