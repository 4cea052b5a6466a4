"""Optimizer result serialization — JSON conversion."""

from __future__ import annotations

from siteplan.pipeline.layout.serialization import breakdown_to_dict, plan_to_dict

from .models import LegalityResult, OptimizeResult


def result_to_dict(result: OptimizeResult, *, include_snapshots: bool = True) -> dict:
    """Serialize an OptimizeResult to a JSON-safe dict.

    With ``include_snapshots=False`` history entries carry only the
    score, move label and iteration index.
    """
    return {
        "bestPlan": plan_to_dict(result.best_plan),
        "bestScore": result.best_score,
        "breakdown": breakdown_to_dict(result.breakdown),
        "history": [
            {
                **({"plan": plan_to_dict(h.plan)} if include_snapshots else {}),
                "score": h.score,
                "move": h.move,
                "iteration": h.iteration,
            }
            for h in result.history
        ],
    }


def legality_to_dict(res: LegalityResult) -> dict:
    return {"ok": res.ok, **({"reason": res.reason} if res.reason else {})}
