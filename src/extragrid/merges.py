"""
Merged-cell region bookkeeping.

Merge regions are stored as inclusive rectangles. This module sanitizes raw
merge input, derives render coverage (top-left spans and covered cells) and
re-targets regions after a row or column is removed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from extragrid.utils import parse_a1_range, range_to_a1, to_finite_number

Coord = tuple[int, int]


@dataclass(frozen=True)
class MergeRange:
    """A rectangular merge region; both corners inclusive, start <= end."""

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def start(self) -> Coord:
        return (self.start_row, self.start_col)

    @property
    def end(self) -> Coord:
        return (self.end_row, self.end_col)

    @property
    def row_span(self) -> int:
        return self.end_row - self.start_row + 1

    @property
    def col_span(self) -> int:
        return self.end_col - self.start_col + 1

    def cells(self) -> set[Coord]:
        return {
            (r, c)
            for r in range(self.start_row, self.end_row + 1)
            for c in range(self.start_col, self.end_col + 1)
        }

    def to_a1(self) -> str:
        """Convert to "A1:B2" notation."""
        return range_to_a1(self.start, self.end)

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Native JSON shape: {"start": {"r", "c"}, "end": {"r", "c"}}."""
        return {
            "start": {"r": self.start_row, "c": self.start_col},
            "end": {"r": self.end_row, "c": self.end_col},
        }


@dataclass
class MergeCoverage:
    """Render lookup built from a list of merge ranges."""

    top_left: dict[Coord, tuple[int, int]] = field(default_factory=dict)
    covered: set[Coord] = field(default_factory=set)

    def span_at(self, row: int, col: int) -> tuple[int, int] | None:
        """(row_span, col_span) if (row, col) anchors a merge, else None."""
        return self.top_left.get((row, col))

    def is_covered(self, row: int, col: int) -> bool:
        return (row, col) in self.covered


def _parse_corner(corner: Any) -> Coord | None:
    if isinstance(corner, Mapping):
        row = corner.get("r", corner.get("row"))
        col = corner.get("c", corner.get("col"))
    elif isinstance(corner, Sequence) and not isinstance(corner, str) and len(corner) == 2:
        row, col = corner
    else:
        return None
    row_num = to_finite_number(row)
    col_num = to_finite_number(col)
    if row_num is None or col_num is None:
        return None
    return int(row_num), int(col_num)


def parse_merge_range(raw: Any) -> tuple[Coord, Coord] | None:
    """Parse one raw merge entry into its two corners, as written, or None."""
    if isinstance(raw, MergeRange):
        return raw.start, raw.end
    if isinstance(raw, str):
        try:
            return parse_a1_range(raw.strip())
        except ValueError:
            return None
    if isinstance(raw, Mapping) and "start" in raw and "end" in raw:
        start = _parse_corner(raw["start"])
        end = _parse_corner(raw["end"])
        if start is None or end is None:
            return None
        return start, end
    return None


def normalize_merges(raw_ranges: Any, rows: int, cols: int) -> list[MergeRange]:
    """Sanitize raw merge input against a rows x cols grid.

    Each entry may be an A1 range string ("A1:B2"), a MergeRange, or a mapping
    with "start"/"end" corners given as {"r", "c"}, {"row", "col"} or pairs.
    Corners are ordered, clamped into the grid, and degenerate (1x1) or
    inverted results are discarded. Malformed entries are skipped.
    """
    if not isinstance(raw_ranges, Iterable) or isinstance(raw_ranges, (str, Mapping)):
        return []
    if rows <= 0 or cols <= 0:
        return []

    out: list[MergeRange] = []
    for raw in raw_ranges:
        parsed = parse_merge_range(raw)
        if parsed is None:
            logger.debug("Skipping malformed merge range {!r}", raw)
            continue
        (r1, c1), (r2, c2) = parsed
        start_row = min(max(0, min(r1, r2)), rows - 1)
        end_row = min(max(0, max(r1, r2)), rows - 1)
        start_col = min(max(0, min(c1, c2)), cols - 1)
        end_col = min(max(0, max(c1, c2)), cols - 1)
        if end_row < start_row or end_col < start_col:
            continue
        if start_row == end_row and start_col == end_col:
            continue
        out.append(MergeRange(start_row, start_col, end_row, end_col))
    return out


def build_coverage(ranges: Iterable[MergeRange]) -> MergeCoverage:
    """Build top-left span and covered-cell indexes.

    Overlapping ranges are neither rejected nor deduplicated: ranges are
    applied in order and, for every cell, the last range containing it
    decides whether it is an anchor or covered.
    """
    coverage = MergeCoverage()
    for rng in ranges:
        if rng.row_span <= 1 and rng.col_span <= 1:
            continue
        anchor = rng.start
        for cell in rng.cells():
            if cell == anchor:
                coverage.top_left[cell] = (rng.row_span, rng.col_span)
                coverage.covered.discard(cell)
            else:
                coverage.covered.add(cell)
                coverage.top_left.pop(cell, None)
    return coverage


def reindex_merges_after_remove_row(
    ranges: Iterable[MergeRange], removed_row: int
) -> list[MergeRange]:
    """Re-target merges after a row removal.

    A merge that contains the removed row is dropped entirely rather than
    shrunk. Merges below it shift up by one.
    """
    out: list[MergeRange] = []
    for rng in ranges:
        if rng.start_row <= removed_row <= rng.end_row:
            continue
        shift = 1 if removed_row < rng.start_row else 0
        out.append(
            MergeRange(
                rng.start_row - shift, rng.start_col, rng.end_row - shift, rng.end_col
            )
        )
    return out


def reindex_merges_after_remove_col(
    ranges: Iterable[MergeRange], removed_col: int
) -> list[MergeRange]:
    """Column counterpart of reindex_merges_after_remove_row."""
    out: list[MergeRange] = []
    for rng in ranges:
        if rng.start_col <= removed_col <= rng.end_col:
            continue
        shift = 1 if removed_col < rng.start_col else 0
        out.append(
            MergeRange(
                rng.start_row, rng.start_col - shift, rng.end_row, rng.end_col - shift
            )
        )
    return out
