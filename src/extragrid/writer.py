"""
Workbook export.

Builds the dense value + style + merge + sizing description of a grid and
hands it to a workbook writer. The binary writer (openpyxl) can signal that
it is unavailable, in which case a values-only CSV file is written instead.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from extragrid.codec import DEFAULT_SHEET_NAME
from extragrid.exceptions import WriterUnavailableError
from extragrid.merges import MergeRange
from extragrid.model import GridModel
from extragrid.style_keys import is_bold
from extragrid.utils import px_to_number, round_half_up

_HEX_RE = re.compile(r"^#([0-9a-f]{3,8})$", re.IGNORECASE)
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})(?:\s*,\s*([0-9.]+))?\s*\)$",
    re.IGNORECASE,
)

NAMED_COLORS = {
    "black": "000000",
    "white": "FFFFFF",
    "red": "FF0000",
    "green": "008000",
    "lime": "00FF00",
    "blue": "0000FF",
    "yellow": "FFFF00",
    "gray": "808080",
    "grey": "808080",
    "silver": "C0C0C0",
    "maroon": "800000",
    "navy": "000080",
    "teal": "008080",
    "purple": "800080",
    "fuchsia": "FF00FF",
    "aqua": "00FFFF",
    "orange": "FFA500",
}

HORIZONTAL_ALIGNMENTS = frozenset({"left", "center", "right", "justify"})
VERTICAL_ALIGNMENTS = frozenset({"top", "center", "bottom", "justify", "distributed"})

# Excel measures fonts in points and row heights in points; 1px ~= 0.75pt.
PX_TO_PT = 0.75
# Approximate pixel width of one character unit in an xlsx column width.
PX_PER_CHAR = 7


@dataclass
class WorkbookCell:
    value: str
    style: dict[str, Any] | None = None


@dataclass
class WorkbookPayload:
    """Dense description of one sheet for a workbook writer."""

    sheet_name: str
    cells: list[list[WorkbookCell]]
    merges: list[MergeRange] = field(default_factory=list)
    column_widths: list[int | None] = field(default_factory=list)
    row_heights: list[int | None] = field(default_factory=list)


def css_color_to_rgb(value: Any) -> str | None:
    """Convert a CSS color to an upper-case RRGGBB hex string.

    Supports #rgb, #rrggbb, #rrggbbaa (alpha dropped), rgb()/rgba() and a
    small set of named colors. Returns None for anything else, including
    "transparent".
    """
    if not value:
        return None
    text = str(value).strip().lower()
    if not text:
        return None

    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        elif len(digits) == 8:
            digits = digits[:6]
        elif len(digits) != 6:
            return None
        return digits.upper()

    match = _RGB_RE.match(text)
    if match:
        channels = (max(0, min(255, int(match.group(i)))) for i in (1, 2, 3))
        return "".join(f"{channel:02X}" for channel in channels)

    return NAMED_COLORS.get(text)


def to_xlsx_cell_style(style: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Map a canonical style to an xlsx-style record.

    The record has optional ``alignment`` (horizontal, vertical, wrapText),
    ``font`` (name, sz in points, bold, italic, underline, strike,
    color.rgb) and ``fill`` (solid pattern with fgColor.rgb) sections.
    """
    if not isinstance(style, Mapping):
        return None
    out: dict[str, Any] = {}

    alignment: dict[str, Any] = {}
    if style.get("textAlign"):
        horizontal = str(style["textAlign"]).lower()
        if horizontal in HORIZONTAL_ALIGNMENTS:
            alignment["horizontal"] = horizontal
    if style.get("verticalAlign"):
        vertical = str(style["verticalAlign"]).lower()
        vertical = "center" if vertical == "middle" else vertical
        if vertical in VERTICAL_ALIGNMENTS:
            alignment["vertical"] = vertical
    if style.get("whiteSpace"):
        white_space = str(style["whiteSpace"]).lower()
        if white_space == "normal":
            alignment["wrapText"] = True
        elif white_space == "nowrap":
            alignment["wrapText"] = False
    if alignment:
        out["alignment"] = alignment

    font: dict[str, Any] = {}
    if style.get("fontFamily"):
        font["name"] = str(style["fontFamily"])
    size = px_to_number(style.get("fontSize"))
    if size is not None:
        font["sz"] = round_half_up(size * PX_TO_PT * 10) / 10
    if style.get("fontWeight") and is_bold(style["fontWeight"]):
        font["bold"] = True
    if style.get("fontStyle") and str(style["fontStyle"]).lower() == "italic":
        font["italic"] = True
    if style.get("textDecoration"):
        decoration = str(style["textDecoration"]).lower()
        if "underline" in decoration:
            font["underline"] = True
        if "line-through" in decoration:
            font["strike"] = True
    color = css_color_to_rgb(style.get("color"))
    if color:
        font["color"] = {"rgb": color}
    if font:
        out["font"] = font

    background = css_color_to_rgb(style.get("background") or style.get("backgroundColor"))
    if background:
        out["fill"] = {"patternType": "solid", "fgColor": {"rgb": background}}

    return out or None


def build_workbook_payload(
    model: GridModel, *, sheet_name: str = DEFAULT_SHEET_NAME
) -> WorkbookPayload:
    """Describe a model densely for a workbook writer.

    Cells covered by a merge (other than its top-left anchor) are blanked and
    carry no style. Every other cell carries its effective style.
    """
    coverage = model.coverage()
    cells: list[list[WorkbookCell]] = []
    for row in range(model.rows):
        out_row: list[WorkbookCell] = []
        for col in range(model.cols):
            if coverage.is_covered(row, col):
                out_row.append(WorkbookCell(value=""))
                continue
            style = to_xlsx_cell_style(model.get_effective_style(row, col))
            out_row.append(WorkbookCell(value=model.data[row][col], style=style))
        cells.append(out_row)

    return WorkbookPayload(
        sheet_name=sheet_name,
        cells=cells,
        merges=list(model.merges),
        column_widths=[px_to_number((s or {}).get("width")) for s in model.column_styles],
        row_heights=[px_to_number((s or {}).get("height")) for s in model.row_styles],
    )


class WorkbookWriter(Protocol):
    """Something that renders a WorkbookPayload to a file."""

    def write(self, payload: WorkbookPayload, path: Path) -> Path: ...


class OpenpyxlWriter:
    """Writes a payload as an .xlsx workbook using openpyxl."""

    def write(self, payload: WorkbookPayload, path: Path) -> Path:
        workbook = Workbook()
        sheet = workbook.active
        if sheet is None:
            raise WriterUnavailableError("workbook has no active sheet")
        sheet.title = payload.sheet_name

        for r, row in enumerate(payload.cells, start=1):
            for c, cell in enumerate(row, start=1):
                text = ILLEGAL_CHARACTERS_RE.sub("", cell.value) if cell.value else None
                target = sheet.cell(row=r, column=c, value=text or None)
                # Cells hold text only; never let a leading "=" become a formula.
                if target.data_type == "f":
                    target.data_type = "s"
                if cell.style:
                    _apply_xlsx_style(target, cell.style)

        for merge in payload.merges:
            sheet.merge_cells(
                start_row=merge.start_row + 1,
                start_column=merge.start_col + 1,
                end_row=merge.end_row + 1,
                end_column=merge.end_col + 1,
            )

        for c, width in enumerate(payload.column_widths, start=1):
            if width is not None:
                sheet.column_dimensions[get_column_letter(c)].width = round(width / PX_PER_CHAR, 2)
        for r, height in enumerate(payload.row_heights, start=1):
            if height is not None:
                sheet.row_dimensions[r].height = round(height * PX_TO_PT, 2)

        workbook.save(path)
        logger.info("Wrote workbook {} ({} rows)", path, len(payload.cells))
        return Path(path)


def _apply_xlsx_style(target: Any, style: Mapping[str, Any]) -> None:
    alignment = style.get("alignment")
    if alignment:
        target.alignment = Alignment(
            horizontal=alignment.get("horizontal"),
            vertical=alignment.get("vertical"),
            wrap_text=alignment.get("wrapText"),
        )
    font = style.get("font")
    if font:
        target.font = Font(
            name=font.get("name"),
            size=font.get("sz"),
            bold=font.get("bold"),
            italic=font.get("italic"),
            underline="single" if font.get("underline") else None,
            strike=font.get("strike"),
            color=(font.get("color") or {}).get("rgb"),
        )
    fill = style.get("fill")
    if fill:
        target.fill = PatternFill(fill_type="solid", fgColor=fill["fgColor"]["rgb"])


class CsvWriter:
    """Values-only comma-separated writer.

    Fields containing a comma, a double quote or a line break are quoted,
    quotes are doubled, lines end with CRLF and the file starts with a UTF-8
    byte order mark so spreadsheet applications detect the encoding.
    """

    def render(self, payload: WorkbookPayload) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\r\n")
        for row in payload.cells:
            values = [cell.value for cell in row]
            if values == [""]:
                # csv writes a lone empty field as '""'; keep the line blank.
                buffer.write("\r\n")
                continue
            writer.writerow(values)
        return buffer.getvalue()

    def write(self, payload: WorkbookPayload, path: Path) -> Path:
        target = Path(path)
        target.write_text(self.render(payload), encoding="utf-8-sig", newline="")
        logger.info("Wrote CSV {} ({} rows)", target, len(payload.cells))
        return target


def export_workbook(
    model: GridModel,
    path: str | Path,
    writer: WorkbookWriter | None = None,
    *,
    sheet_name: str = DEFAULT_SHEET_NAME,
) -> Path:
    """Export a model through ``writer``, falling back to CSV.

    If no writer is given, or the writer raises WriterUnavailableError or an
    OSError, the values are written as CSV next to ``path`` with a ".csv"
    suffix.

    Returns:
        Path of the file actually written
    """
    payload = build_workbook_payload(model, sheet_name=sheet_name)
    target = Path(path)
    if writer is not None:
        try:
            return writer.write(payload, target)
        except (WriterUnavailableError, OSError) as e:
            logger.warning("Workbook export failed ({}). Falling back to CSV export.", e)
    else:
        logger.warning("No workbook writer available. Falling back to CSV export.")
    return CsvWriter().write(payload, target.with_suffix(".csv"))
