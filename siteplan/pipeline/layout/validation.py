"""Plan validation — structural checks before a plan enters the optimizer."""

from __future__ import annotations

import math

from .models import Plan


def validate_plan(plan: Plan) -> list[str]:
    """Validate a Plan's structure. Returns error messages (empty = valid)."""
    errors: list[str] = []

    # ── Block IDs must be unique ──
    seen_ids: set[str] = set()
    for b in plan.blocks:
        if b.id in seen_ids:
            errors.append(f"Duplicate block id '{b.id}'")
        seen_ids.add(b.id)

    # ── Geometry must be finite, sizes non-negative ──
    for b in plan.blocks:
        for name in ("x", "y", "w", "h"):
            value = getattr(b, name)
            if not math.isfinite(value):
                errors.append(f"Block '{b.id}': {name} is not a finite number ({value})")
        if b.w < 0 or b.h < 0:
            errors.append(f"Block '{b.id}': negative size {b.w}×{b.h}")
        elif b.w == 0 or b.h == 0:
            errors.append(f"Block '{b.id}': zero-area footprint {b.w}×{b.h}")
        if b.rotation not in (None, 0, 90):
            errors.append(f"Block '{b.id}': rotation must be 0 or 90, got {b.rotation}")

    # ── Walkways need at least one segment ──
    for i, w in enumerate(plan.walkways):
        if len(w.polyline) < 2:
            errors.append(f"Walkway {i}: polyline needs at least 2 points")

    return errors
