"""Scoring-context assembly — turn a plan plus site settings into a ScoreContext.

Corridor blocks (reserved keys such as ``"aisle"``) are fixed
infrastructure: they are rasterised into the path mask and taken out of
the block list the optimizer moves.  ``merge_reserved`` puts them back
once optimization is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from siteplan.config import rules
from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.grid import build_path_mask
from siteplan.pipeline.layout.models import Block, Plan, Rect, clone_blocks
from siteplan.pipeline.optimizer.models import (
    AdjacencyWeights, FlowMatrix, ScoreContext,
)


log = logging.getLogger(__name__)

# Minimum extent of an inferred site, matching an empty canvas.
_MIN_SITE_W = 100.0
_MIN_SITE_H = 60.0


@dataclass
class SiteSetup:
    ctx: ScoreContext
    movable: Plan               # plan without reserved blocks, ready to optimize
    reserved: list[Block]       # corridor blocks burnt into the mask


def split_reserved(
    plan: Plan,
    reserved_keys: Iterable[str] = LAYOUT_RULES.reserved_keys,
) -> tuple[Plan, list[Block]]:
    """Separate corridor blocks from movable ones (both deep-copied)."""
    keys = set(reserved_keys)
    movable = [b.clone() for b in plan.blocks if b.key not in keys]
    reserved = [b.clone() for b in plan.blocks if b.key in keys]
    return plan.with_blocks(movable), reserved


def merge_reserved(plan: Plan, reserved: list[Block]) -> Plan:
    """Return *plan* with the corridor blocks prepended again."""
    merged = plan.with_blocks(clone_blocks(reserved) + clone_blocks(plan.blocks))
    merged.score = plan.score
    merged.score_breakdown = plan.score_breakdown
    return merged


def infer_site(
    blocks: Iterable[Block],
    margin: float = LAYOUT_RULES.site_margin_m,
) -> Rect:
    """Site rectangle anchored at the origin that encloses every block plus *margin*."""
    max_x, max_y = _MIN_SITE_W, _MIN_SITE_H
    for b in blocks:
        max_x = max(max_x, b.x + b.w)
        max_y = max(max_y, b.y + b.h)
    return Rect(0.0, 0.0, max_x + margin, max_y + margin)


def resolve_min_aisle(
    min_aisle: float | None = None,
    forklift_class: str | None = None,
) -> float:
    """Explicit clearance wins, then the forklift lookup, then the default."""
    if min_aisle is not None:
        return max(0.0, min_aisle)
    if forklift_class:
        return rules.aisle_width_m(forklift_class)
    return LAYOUT_RULES.default_aisle_m


def build_context(
    plan: Plan,
    *,
    site: Rect | None = None,
    cell_size: float = LAYOUT_RULES.cell_size_m,
    min_aisle: float | None = None,
    forklift_class: str | None = None,
    walkway_width: float | None = None,
    flows: FlowMatrix | None = None,
    adjacency: AdjacencyWeights | None = None,
    weight_overrides: dict[str, float] | None = None,
    reserved_keys: Iterable[str] = LAYOUT_RULES.reserved_keys,
) -> SiteSetup:
    """Build the ScoreContext for optimizing or checking *plan*.

    The path mask covers the site and reserves every corridor block and
    every walkway polyline (walkways default to the aisle width).
    """
    keys = tuple(reserved_keys)
    movable, reserved = split_reserved(plan, keys)
    if site is None:
        site = infer_site(plan.blocks)
    aisle = resolve_min_aisle(min_aisle, forklift_class)

    mask = build_path_mask(
        site,
        blocks=reserved,
        walkways=plan.walkways,
        cell_size=cell_size,
        walkway_width=walkway_width if walkway_width is not None else aisle,
        reserved_keys=keys,
    )
    ctx = ScoreContext(
        cell_size=mask.cell_size,
        min_aisle=aisle,
        site=site,
        path_mask=mask,
        flows=flows,
        adjacency=adjacency,
        weight_overrides=weight_overrides,
    )
    log.info(
        "Context for plan %s: site %.1fx%.1fm, aisle %.2fm, %d movable / %d reserved blocks",
        plan.id, site.w, site.h, aisle, len(movable.blocks), len(reserved),
    )
    return SiteSetup(ctx=ctx, movable=movable, reserved=reserved)
