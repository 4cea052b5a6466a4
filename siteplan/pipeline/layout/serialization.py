"""Plan serialization — JSON conversion."""

from __future__ import annotations

from .models import Block, Plan, ScoreBreakdown


def breakdown_to_dict(sb: ScoreBreakdown) -> dict:
    return {
        "mhc": sb.mhc,
        "overlapWithPath": sb.overlap_with_path,
        "clearanceViolations": sb.clearance_violations,
        "adjacencyHits": sb.adjacency_hits,
        "total": sb.total,
    }


def block_to_dict(b: Block) -> dict:
    meta: dict = {"kpis": dict(b.meta.kpis)}
    if b.meta.notes is not None:
        meta["notes"] = list(b.meta.notes)
    return {
        "id": b.id,
        "key": b.key,
        "x": b.x,
        "y": b.y,
        "w": b.w,
        "h": b.h,
        **({"rot": b.rotation} if b.rotation is not None else {}),
        "meta": meta,
    }


def plan_to_dict(plan: Plan) -> dict:
    """Serialize a Plan to a JSON-safe dict."""
    return {
        "id": plan.id,
        "blocks": [block_to_dict(b) for b in plan.blocks],
        "walkways": [
            {"polyline": [[x, y] for x, y in w.polyline]}
            for w in plan.walkways
        ],
        "score": plan.score,
        **({"scoreBreakdown": breakdown_to_dict(plan.score_breakdown)}
           if plan.score_breakdown is not None else {}),
        "ruleFindings": list(plan.rule_findings),
    }
