"""Occupancy grid — a boolean bitmap over a bounded area.

The grid origin is world (0, 0).  Column ``c`` covers world x in
``[c * cell_size, (c + 1) * cell_size)``, rows likewise along y.  Reads
outside the grid report *occupied* so legality checks fail closed at the
edges instead of assuming free space.
"""

from __future__ import annotations

import math

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.layout.models import Rect


FREE = 0
OCCUPIED = 1


def _extent(value: float) -> float:
    """Non-finite or non-positive extents collapse to an empty axis."""
    if value is None or not math.isfinite(value) or value <= 0:
        return 0.0
    return float(value)


class OccupancyGrid:
    """A 2-D occupancy bitmap at a fixed cell resolution (metres)."""

    def __init__(
        self,
        cell_size: float,
        width: float,
        height: float,
    ) -> None:
        if cell_size is None or not math.isfinite(cell_size):
            cell_size = LAYOUT_RULES.cell_size_m
        self.cell_size = max(LAYOUT_RULES.min_cell_size_m, float(cell_size))
        self.width = _extent(width)
        self.height = _extent(height)
        self.cols = int(math.ceil(self.width / self.cell_size))
        self.rows = int(math.ceil(self.height / self.cell_size))
        self._cells = bytearray(self.cols * self.rows)

    # ── Cell queries ───────────────────────────────────────────────

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def get(self, col: int, row: int) -> bool:
        if not self.in_bounds(col, row):
            return True
        return self._cells[row * self.cols + col] != FREE

    def occupied_count(self) -> int:
        return self.cols * self.rows - self._cells.count(FREE)

    # ── Cell mutation ──────────────────────────────────────────────

    def set(self, col: int, row: int, value: bool = True) -> None:
        if self.in_bounds(col, row):
            self._cells[row * self.cols + col] = OCCUPIED if value else FREE

    # ── Area operations ────────────────────────────────────────────

    def cell_range(self, rect: Rect) -> tuple[int, int, int, int]:
        """Half-open index range ``(c0, r0, c1, r1)`` covered by *rect*."""
        cs = self.cell_size
        return (
            math.floor(rect.x / cs),
            math.floor(rect.y / cs),
            math.ceil((rect.x + rect.w) / cs),
            math.ceil((rect.y + rect.h) / cs),
        )

    def fill_rect(self, rect: Rect, value: bool = True) -> None:
        """Mark every cell the rectangle touches."""
        c0, r0, c1, r1 = self.cell_range(rect)
        # Out-of-bounds writes are no-ops, so clip first.
        c0, r0 = max(0, c0), max(0, r0)
        c1, r1 = min(self.cols, c1), min(self.rows, r1)
        if c0 >= c1 or r0 >= r1:
            return
        fill = bytes([OCCUPIED if value else FREE]) * (c1 - c0)
        for r in range(r0, r1):
            start = r * self.cols
            self._cells[start + c0:start + c1] = fill

    def any_occupied(self, rect: Rect) -> bool:
        """True if any cell in the rectangle's range is occupied or off-grid."""
        c0, r0, c1, r1 = self.cell_range(rect)
        if c0 >= c1 or r0 >= r1:
            return False
        if c0 < 0 or r0 < 0 or c1 > self.cols or r1 > self.rows:
            return True
        cols = self.cols
        cells = self._cells
        for r in range(r0, r1):
            start = r * cols
            if any(cells[start + c0:start + c1]):
                return True
        return False

    # ── Snapshot ───────────────────────────────────────────────────

    def clone(self) -> OccupancyGrid:
        """Return a copy whose bitmap can be mutated independently."""
        g = self.__class__.__new__(self.__class__)
        g.cell_size = self.cell_size
        g.width = self.width
        g.height = self.height
        g.cols = self.cols
        g.rows = self.rows
        g._cells = bytearray(self._cells)
        return g
