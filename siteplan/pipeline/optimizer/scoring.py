"""Layout cost — material handling, corridor penalties, adjacency reward.

``total = mhc + λ_path·overlap + λ_clear·clearance − λ_adj·adjacency``

Lower is better.  The default penalty weights dwarf any realistic flow
cost, so ``total`` alone already ranks every legal layout ahead of every
illegal one.
"""

from __future__ import annotations

from typing import Sequence

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.layout.models import Block, ScoreBreakdown
from .geometry import aabb_overlap, inflate, manhattan_distance, rect_of
from .models import AdjacencyWeights, FlowMatrix, ScoreContext


def material_handling_cost(blocks: Sequence[Block], flows: FlowMatrix | None) -> float:
    """Sum of flow × centre Manhattan distance over directed block pairs.

    Self-flows and entries naming unknown block ids are ignored.
    """
    if not flows:
        return 0.0
    by_id = {b.id: b for b in blocks}
    mhc = 0.0
    for i, row in flows.items():
        bi = by_id.get(i)
        if bi is None:
            continue
        for j, rate in row.items():
            if i == j:
                continue
            bj = by_id.get(j)
            if bj is None:
                continue
            mhc += (rate or 0.0) * manhattan_distance(bi, bj)
    return mhc


def adjacency_hits(
    blocks: Sequence[Block],
    adjacency: AdjacencyWeights | None,
    near_factor: float = LAYOUT_RULES.adjacency_near_factor,
) -> float:
    """Sum the weights of category pairs whose blocks sit near each other.

    Only the first block of each category is considered.  Keys split at
    the first ``-``; ``parse_adjacency`` rejects keys with more than one.
    """
    if not adjacency:
        return 0.0
    hits = 0.0
    for pair_key, weight in adjacency.items():
        ka, sep, kb = pair_key.partition("-")
        if not sep:
            continue
        a = next((b for b in blocks if b.key == ka), None)
        b = next((b for b in blocks if b.key == kb), None)
        if a is None or b is None:
            continue
        reach = max(a.w, a.h, b.w, b.h) * near_factor
        if manhattan_distance(a, b) <= reach:
            hits += weight or 0.0
    return hits


def score_layout(blocks: Sequence[Block], ctx: ScoreContext) -> ScoreBreakdown:
    """Score a block arrangement.  Never mutates *blocks* or *ctx*."""
    weights = ctx.weights
    mask = ctx.path_mask
    margin = ctx.min_aisle

    mhc = material_handling_cost(blocks, ctx.flows)

    rects = [rect_of(b) for b in blocks]
    expanded = [inflate(r, margin) for r in rects]

    overlap = sum(1 for r in rects if mask.any_occupied(r))

    clearance = sum(1 for e in expanded if mask.any_occupied(e))
    n = len(expanded)
    for i in range(n):
        for j in range(i + 1, n):
            if aabb_overlap(expanded[i], expanded[j]):
                clearance += 1

    adj = adjacency_hits(blocks, ctx.adjacency)

    total = (
        mhc
        + weights.lambda_path * overlap
        + weights.lambda_clear * clearance
        - weights.lambda_adj * adj
    )
    return ScoreBreakdown(
        mhc=mhc,
        overlap_with_path=overlap,
        clearance_violations=clearance,
        adjacency_hits=adj,
        total=total,
    )
