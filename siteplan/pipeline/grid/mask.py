"""Path mask — reserved corridor cells that blocks may never occupy.

Corridors are rasterised as axis-aligned rectangles.  A diagonal
polyline segment marks its whole (inflated) bounding box, so tight
diagonal corridors over-reserve space.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.layout.models import Block, Rect, Walkway
from .occupancy import OccupancyGrid


log = logging.getLogger(__name__)


class PathMask(OccupancyGrid):
    """Occupancy grid whose occupied cells are reserved aisles/walkways."""

    def add_polyline(
        self,
        points: Sequence[tuple[float, float]],
        width: float,
    ) -> None:
        """Reserve a corridor of *width* metres along a polyline."""
        if len(points) < 2:
            return
        half = max(0.0, width / 2)
        for (x0, y0), (x1, y1) in zip(points, points[1:]):
            min_x = min(x0, x1) - half
            max_x = max(x0, x1) + half
            min_y = min(y0, y1) - half
            max_y = max(y0, y1) + half
            self.fill_rect(Rect(min_x, min_y, max_x - min_x, max_y - min_y))

    def add_rect(self, rect: Rect) -> None:
        """Reserve a rectangular corridor (e.g. an aisle block)."""
        self.fill_rect(rect)


def build_path_mask(
    site: Rect,
    *,
    blocks: Iterable[Block] = (),
    walkways: Iterable[Walkway] = (),
    cell_size: float = LAYOUT_RULES.cell_size_m,
    walkway_width: float = LAYOUT_RULES.default_aisle_m,
    reserved_keys: Iterable[str] = LAYOUT_RULES.reserved_keys,
) -> PathMask:
    """Build a mask covering the site from corridor blocks and walkways.

    The mask spans world ``[0, site.right) × [0, site.bottom)`` so grid
    indices line up with world coordinates.  Blocks whose key is in
    *reserved_keys* are filled as-is; each walkway polyline is reserved
    with *walkway_width*.
    """
    mask = PathMask(cell_size, site.right, site.bottom)
    reserved = set(reserved_keys)

    n_blocks = 0
    for b in blocks:
        if b.key in reserved:
            mask.add_rect(b.rect)
            n_blocks += 1

    n_walkways = 0
    for w in walkways:
        mask.add_polyline(w.polyline, walkway_width)
        n_walkways += 1

    log.debug(
        "Path mask %dx%d @ %.2fm: %d corridor blocks, %d walkways, %d cells reserved",
        mask.cols, mask.rows, mask.cell_size, n_blocks, n_walkways,
        mask.occupied_count(),
    )
    return mask
