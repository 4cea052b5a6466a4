"""Plan review — rule findings for display next to a plan."""

from __future__ import annotations

import logging
from typing import Sequence

from siteplan.config import FEET_TO_METERS, rules
from siteplan.pipeline.layout.models import Block, Plan
from siteplan.pipeline.layout.validation import validate_plan
from siteplan.pipeline.optimizer.legality import layout_violations
from siteplan.pipeline.optimizer.models import ScoreContext


log = logging.getLogger(__name__)


def aisle_width_findings(
    corridors: Sequence[Block],
    forklift_class: str,
) -> list[str]:
    """Flag corridor blocks narrower than the forklift class requires.

    A corridor's width is its shorter side.
    """
    req_ft = rules.aisle_width_ft(forklift_class)
    req_m = req_ft * FEET_TO_METERS
    findings = []
    for c in corridors:
        width = min(c.w, c.h)
        if width < req_m:
            findings.append(
                f"Aisle '{c.id}' is {width:.2f} m wide; increase to "
                f"{req_ft:.1f} ft ({req_m:.2f} m) for {forklift_class} forklifts"
            )
    return findings


def review_plan(
    plan: Plan,
    ctx: ScoreContext,
    *,
    corridors: Sequence[Block] = (),
    forklift_class: str | None = None,
) -> list[str]:
    """Collect rule findings for the movable blocks of *plan*.

    Structural problems come first, then per-block legality failures
    (each block against all others), then corridor width findings when
    a forklift class is known.
    """
    findings = validate_plan(plan)
    findings += layout_violations(plan.blocks, ctx)
    if forklift_class:
        findings += aisle_width_findings(corridors, forklift_class)
    log.info("Review of plan %s: %d findings", plan.id, len(findings))
    return findings
