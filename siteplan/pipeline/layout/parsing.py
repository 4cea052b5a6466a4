"""Plan parsing — convert raw dicts/JSON into Plan objects.

Numeric fields are sanitised here so the optimizer core never has to
re-validate coordinates: missing, non-numeric or non-finite values fall
back to a default and a warning is logged.  Only structurally unusable
input raises ``PlanParseError``.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from siteplan.config import rules

from .models import (
    Block, BlockMeta, Plan, PlanParseError, ScoreBreakdown, Walkway,
)


log = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE_M = 10.0


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def coalesce_number(value: Any, fallback: float, field: str = "") -> float:
    """Return *value* as a float, or *fallback* if it is not a finite number."""
    if _is_number(value):
        return float(value)
    if field:
        log.warning("Field '%s': invalid number %r, using %g", field, value, fallback)
    return fallback


def _parse_meta(data: Any, field: str) -> BlockMeta:
    if not isinstance(data, dict):
        return BlockMeta()
    kpis: dict[str, float] = {}
    for k, v in (data.get("kpis") or {}).items():
        if _is_number(v):
            kpis[str(k)] = float(v)
        else:
            log.debug("Field '%s.kpis.%s': dropping non-numeric KPI %r", field, k, v)
    notes = data.get("notes")
    return BlockMeta(
        kpis=kpis,
        notes=[str(n) for n in notes] if isinstance(notes, list) else None,
    )


def parse_block(data: dict, index: int = 0) -> Block:
    """Parse one block, defaulting invalid numbers.

    Invalid sizes fall back to the module's catalogue size for its key
    (or a 10 m square), invalid positions to 0.
    """
    field = f"blocks[{index}]"
    if not isinstance(data, dict):
        raise PlanParseError(field, "expected an object")
    key = data.get("key")
    if not isinstance(key, str) or not key:
        raise PlanParseError(f"{field}.key", "missing category key")

    block_id = data.get("id")
    if not isinstance(block_id, str) or not block_id:
        block_id = f"block-{index + 1}"
        log.warning("Field '%s.id': missing, using '%s'", field, block_id)

    default_w, default_h = rules.module_size(key) or (DEFAULT_BLOCK_SIZE_M, DEFAULT_BLOCK_SIZE_M)
    w = data.get("w")
    h = data.get("h")
    if _is_number(w) and w < 0:
        w = None
    if _is_number(h) and h < 0:
        h = None

    rot = data.get("rot", data.get("rotation"))
    return Block(
        id=block_id,
        key=key,
        x=coalesce_number(data.get("x"), 0.0, f"{field}.x"),
        y=coalesce_number(data.get("y"), 0.0, f"{field}.y"),
        w=coalesce_number(w, default_w, f"{field}.w"),
        h=coalesce_number(h, default_h, f"{field}.h"),
        rotation=rot if rot in (0, 90) else None,
        meta=_parse_meta(data.get("meta"), field),
    )


def _parse_walkways(data: Any) -> list[Walkway]:
    """Parse walkways from a list of polyline objects.

    Format:
        [{"polyline": [[0, 30], [100, 30]]}, ...]
    """
    walkways: list[Walkway] = []
    for i, w in enumerate(data or []):
        pts = w.get("polyline") if isinstance(w, dict) else None
        if not isinstance(pts, list):
            raise PlanParseError(f"walkways[{i}].polyline", "expected a list of points")
        polyline = []
        for j, p in enumerate(pts):
            if not (isinstance(p, (list, tuple)) and len(p) == 2
                    and _is_number(p[0]) and _is_number(p[1])):
                raise PlanParseError(f"walkways[{i}].polyline[{j}]", "expected [x, y]")
            polyline.append((float(p[0]), float(p[1])))
        walkways.append(Walkway(polyline=polyline))
    return walkways


def _parse_breakdown(data: Any) -> ScoreBreakdown | None:
    if not isinstance(data, dict):
        return None
    return ScoreBreakdown(
        mhc=coalesce_number(data.get("mhc"), 0.0),
        overlap_with_path=int(coalesce_number(data.get("overlapWithPath"), 0)),
        clearance_violations=int(coalesce_number(data.get("clearanceViolations"), 0)),
        adjacency_hits=coalesce_number(data.get("adjacencyHits"), 0.0),
        total=coalesce_number(data.get("total"), 0.0),
    )


def _parse_findings(data: Any) -> list[str]:
    findings = []
    for f in data or []:
        if isinstance(f, dict):
            f = f.get("message")
        if f:
            findings.append(str(f))
    return findings


def parse_plan(data: dict) -> Plan:
    """Parse a raw dict (from JSON / API input) into a Plan."""
    if not isinstance(data, dict):
        raise PlanParseError("plan", "expected an object")
    blocks_data = data.get("blocks")
    if not isinstance(blocks_data, list):
        raise PlanParseError("blocks", "expected a list")

    return Plan(
        id=str(data.get("id") or "plan"),
        blocks=[parse_block(b, i) for i, b in enumerate(blocks_data)],
        walkways=_parse_walkways(data.get("walkways")),
        score=coalesce_number(data.get("score"), 0.0),
        score_breakdown=_parse_breakdown(data.get("scoreBreakdown")),
        rule_findings=_parse_findings(data.get("ruleFindings")),
    )


# ── Scoring tables ─────────────────────────────────────────────────


def parse_flows(data: Any) -> dict[str, dict[str, float]]:
    """Parse a sparse flow matrix ``{from_id: {to_id: moves_per_hour}}``.

    Non-numeric or negative rates are dropped.
    """
    if not isinstance(data, dict):
        raise PlanParseError("flows", "expected an object")
    flows: dict[str, dict[str, float]] = {}
    for src, row in data.items():
        if not isinstance(row, dict):
            raise PlanParseError(f"flows.{src}", "expected an object")
        clean = {
            str(dst): float(rate) for dst, rate in row.items()
            if _is_number(rate) and rate >= 0
        }
        if len(clean) != len(row):
            log.warning("Field 'flows.%s': dropped %d invalid rates",
                        src, len(row) - len(clean))
        if clean:
            flows[str(src)] = clean
    return flows


def parse_adjacency(data: Any) -> dict[str, float]:
    """Parse ``{"catA-catB": weight}``, clamping weights to [-1, 1].

    Each key names exactly two categories joined by a single ``-``.
    """
    if not isinstance(data, dict):
        raise PlanParseError("adjacency", "expected an object")
    adjacency: dict[str, float] = {}
    for key, weight in data.items():
        if key.count("-") != 1:
            raise PlanParseError(f"adjacency.{key}", "expected 'categoryA-categoryB'")
        if not _is_number(weight):
            log.warning("Field 'adjacency.%s': invalid weight %r, skipped", key, weight)
            continue
        adjacency[key] = max(-1.0, min(1.0, float(weight)))
    return adjacency
