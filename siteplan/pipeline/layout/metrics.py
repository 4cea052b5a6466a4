"""Footprint metrics — area use and compactness of a block arrangement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from shapely.geometry import box as shapely_box
from shapely.ops import unary_union

from .models import Block, Rect


@dataclass
class PlanMetrics:
    block_count: int
    block_area: float           # m², union of footprints (overlaps counted once)
    site_area: float            # m²
    utilization: float          # block_area / site_area
    bbox_compactness: float     # block_area / area of the blocks' bounding box
    hull_compactness: float     # block_area / area of the blocks' convex hull


def plan_metrics(blocks: Sequence[Block], site: Rect) -> PlanMetrics:
    """Compute footprint KPIs for a set of blocks on a site.

    Zero-area blocks are ignored.  Ratios are 0 when their denominator
    is empty.
    """
    footprints = [
        shapely_box(b.x, b.y, b.x + b.w, b.y + b.h)
        for b in blocks if b.w > 0 and b.h > 0
    ]
    site_area = max(0.0, site.w) * max(0.0, site.h)
    if not footprints:
        return PlanMetrics(len(blocks), 0.0, site_area, 0.0, 0.0, 0.0)

    union = unary_union(footprints)
    block_area = union.area
    xmin, ymin, xmax, ymax = union.bounds
    bbox_area = (xmax - xmin) * (ymax - ymin)
    hull_area = union.convex_hull.area

    return PlanMetrics(
        block_count=len(blocks),
        block_area=block_area,
        site_area=site_area,
        utilization=block_area / site_area if site_area > 0 else 0.0,
        bbox_compactness=block_area / bbox_area if bbox_area > 0 else 0.0,
        hull_compactness=block_area / hull_area if hull_area > 0 else 0.0,
    )
