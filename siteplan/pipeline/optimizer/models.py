"""Optimizer dataclasses, context and configuration."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from siteplan.pipeline.config import LAYOUT_RULES, ScoreWeights
from siteplan.pipeline.grid.mask import PathMask
from siteplan.pipeline.layout.models import Plan, Rect, ScoreBreakdown


log = logging.getLogger(__name__)


FlowMatrix = dict[str, dict[str, float]]       # from_id -> to_id -> moves/hour
AdjacencyWeights = dict[str, float]             # "catA-catB" -> [-1, 1]


# ── Legality ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class LegalityOptions:
    min_aisle: float        # clearance to paths and other blocks (m)
    site: Rect


@dataclass(frozen=True)
class LegalityResult:
    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok


# ── Scoring context ────────────────────────────────────────────────


@dataclass
class ScoreContext:
    """Everything the legality gate and score engine need about the site."""

    cell_size: float
    min_aisle: float
    site: Rect
    path_mask: PathMask
    flows: FlowMatrix | None = None
    adjacency: AdjacencyWeights | None = None
    weight_overrides: dict[str, float] | None = None

    def __post_init__(self) -> None:
        known = {f.name for f in dataclasses.fields(ScoreWeights)}
        for k in self.weight_overrides or {}:
            if k not in known:
                log.warning("Weight override '%s' is not one of %s, ignored",
                            k, ", ".join(sorted(known)))

    @property
    def weights(self) -> ScoreWeights:
        """Default weights with any overrides applied."""
        base = LAYOUT_RULES.weights
        if not self.weight_overrides:
            return base
        known = {f.name for f in dataclasses.fields(ScoreWeights)}
        return dataclasses.replace(base, **{
            k: float(v) for k, v in self.weight_overrides.items() if k in known
        })

    @property
    def legality(self) -> LegalityOptions:
        return LegalityOptions(min_aisle=self.min_aisle, site=self.site)


# ── Search ─────────────────────────────────────────────────────────


@dataclass
class OptimizeOptions:
    """Tuneable search parameters.

    ``grid_step`` defaults to ``max(min_grid_step, ctx.cell_size)`` when
    left as None.  ``seed`` only applies when no explicit ``rng`` is
    handed to the optimizer.
    """

    iterations: int = LAYOUT_RULES.iterations
    grid_step: float | None = None
    cooling: float = LAYOUT_RULES.cooling
    seed: int | None = None


@dataclass
class HistoryEntry:
    """One accepted optimizer step."""

    plan: Plan              # snapshot, never aliased with later steps
    score: float
    move: str
    iteration: int


@dataclass
class OptimizeResult:
    best_plan: Plan
    best_score: float
    breakdown: ScoreBreakdown
    history: list[HistoryEntry] = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return len(self.history)


class OptimizerInputError(Exception):
    """Raised when optimizer input cannot be normalised at the boundary."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid optimizer input: {reason}")
