"""
Style cascade resolution.

A cell's presentation is resolved from four layers, later layers overriding
earlier ones per property: grid default -> column -> row -> cell.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from extragrid.style_keys import Style, sanitize_style

if TYPE_CHECKING:
    from extragrid.model import GridModel


def layered_style(*layers: Mapping[str, Any] | None) -> Style:
    """Merge style layers in order; None layers and empty values are skipped."""
    out: Style = {}
    for layer in layers:
        if not isinstance(layer, Mapping):
            continue
        for key, value in layer.items():
            if value is None or value == "":
                continue
            out[key] = value
    return out


def _in_bounds(model: GridModel, row: int, col: int) -> bool:
    return 0 <= row < model.rows and 0 <= col < model.cols


def effective_style(model: GridModel, row: int, col: int) -> Style | None:
    """Resolve the effective style of a cell.

    Returns None for out-of-range coordinates or when no layer contributes.
    """
    if not _in_bounds(model, row, col):
        return None
    merged = layered_style(
        model.default_style,
        model.column_styles[col],
        model.row_styles[row],
        model.cell_styles.get((row, col)),
    )
    return sanitize_style(merged)


def export_overrides(model: GridModel, row: int, col: int) -> Style:
    """Properties of a cell that differ from the grid-wide default.

    The column, row and cell layers are merged (cell wins), then every
    property whose value equals the default style's value is dropped. These
    are the only properties written to the sparse interchange format.
    """
    if not _in_bounds(model, row, col):
        return {}
    layered = layered_style(
        model.column_styles[col],
        model.row_styles[row],
        model.cell_styles.get((row, col)),
    )
    default = model.default_style or {}
    return {key: value for key, value in layered.items() if default.get(key) != value}
