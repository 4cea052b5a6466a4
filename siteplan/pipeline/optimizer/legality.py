"""Hard placement constraints — site containment, corridors, clearance.

``check_placement_legality`` validates a single candidate rectangle for
interactive placement.  ``is_layout_legal`` applies the same tests to a
whole block list and is the optimizer's hard gate.

Clearance is asymmetric here: only the candidate is inflated by
``min_aisle`` when compared against other blocks.  The score engine's
clearance term inflates both sides of each pair instead.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.grid.occupancy import OccupancyGrid
from siteplan.pipeline.layout.models import Block, Rect
from .geometry import aabb_overlap, inflate, rect_inside, rect_of
from .models import LegalityOptions, LegalityResult, ScoreContext


log = logging.getLogger(__name__)

_OK = LegalityResult(ok=True)

# Neighbour order for the nudge search: right, left, down, up.
_STEPS = ((1, 0), (-1, 0), (0, 1), (0, -1))


def check_placement_legality(
    candidate: Rect,
    others: Sequence[Rect],
    path_mask: OccupancyGrid,
    opts: LegalityOptions,
) -> LegalityResult:
    """Validate one rectangle against site, corridors and other blocks.

    Checks run in a fixed order and the first failure is reported; the
    ``reason`` strings are meant for direct display.
    """
    if not rect_inside(candidate, opts.site):
        return LegalityResult(False, "outside site bounds")

    if path_mask.any_occupied(candidate):
        return LegalityResult(False, "overlaps path")

    expanded = inflate(candidate, opts.min_aisle)
    if path_mask.any_occupied(expanded):
        return LegalityResult(
            False, f"violates aisle clearance {opts.min_aisle:g} m")

    for other in others:
        if aabb_overlap(expanded, other):
            return LegalityResult(
                False, f"too close to another block (< {opts.min_aisle:g} m)")

    return _OK


def nudge_to_nearest_legal(
    start: Rect,
    others: Sequence[Rect],
    path_mask: OccupancyGrid,
    opts: LegalityOptions,
    max_radius: float = LAYOUT_RULES.nudge_radius_m,
) -> Rect:
    """Breadth-first search for the closest legal position.

    Explores unit steps of ``path_mask.cell_size`` in the four cardinal
    directions, keeping only positions within Manhattan distance
    *max_radius* of *start*.  Returns *start* unchanged when no legal
    position is reachable.
    """
    step = path_mask.cell_size
    visited: set[tuple[float, float]] = set()
    queue: deque[Rect] = deque([start])

    while queue:
        cur = queue.popleft()
        key = (round(cur.x, 3), round(cur.y, 3))
        if key in visited:
            continue
        visited.add(key)

        if check_placement_legality(cur, others, path_mask, opts).ok:
            if cur is not start:
                log.debug("Nudged (%.2f, %.2f) -> (%.2f, %.2f) after %d probes",
                          start.x, start.y, cur.x, cur.y, len(visited))
            return cur

        for dx, dy in _STEPS:
            nx = cur.x + dx * step
            ny = cur.y + dy * step
            if abs(nx - start.x) + abs(ny - start.y) <= max_radius:
                queue.append(cur.moved_to(nx, ny))

    return start


# ── Whole-layout gate ──────────────────────────────────────────────


def is_layout_legal(blocks: Sequence[Block], ctx: ScoreContext) -> bool:
    """True if every block passes the placement checks.

    Each block is tested against the blocks after it, so every pair is
    compared exactly once with the earlier block inflated.
    """
    rects = [rect_of(b) for b in blocks]
    opts = ctx.legality
    for i, rect in enumerate(rects):
        if not check_placement_legality(rect, rects[i + 1:], ctx.path_mask, opts).ok:
            return False
    return True


def layout_violations(blocks: Sequence[Block], ctx: ScoreContext) -> list[str]:
    """Human-readable legality findings, one per offending block."""
    rects = [rect_of(b) for b in blocks]
    opts = ctx.legality
    findings: list[str] = []
    for i, block in enumerate(blocks):
        others = rects[:i] + rects[i + 1:]
        res = check_placement_legality(rects[i], others, ctx.path_mask, opts)
        if not res.ok:
            findings.append(f"Block '{block.id}' ({block.key}): {res.reason}")
    return findings
