"""Optimizer — legality gate, layout cost, and local search.

Submodules:
  models        Context, options and result dataclasses.
  geometry      Rectangle helpers (inflate, overlap, containment, distance).
  legality      Hard constraints and nearest-legal-position search.
  scoring       Multi-term layout cost (flow, corridor, clearance, adjacency).
  moves         Neighbourhood move generators.
  engine        Main search loop with annealing-style acceptance.
  serialization JSON conversion (result_to_dict, legality_to_dict).
"""

from .models import (
    ScoreContext, LegalityOptions, LegalityResult,
    OptimizeOptions, OptimizeResult, HistoryEntry, OptimizerInputError,
)
from .geometry import inflate, aabb_overlap, rect_inside, manhattan_distance
from .legality import (
    check_placement_legality, nudge_to_nearest_legal,
    is_layout_legal, layout_violations,
)
from .scoring import score_layout
from .engine import optimize_heuristic
from .serialization import result_to_dict, legality_to_dict

__all__ = [
    # Models
    "ScoreContext", "LegalityOptions", "LegalityResult",
    "OptimizeOptions", "OptimizeResult", "HistoryEntry", "OptimizerInputError",
    # Geometry
    "inflate", "aabb_overlap", "rect_inside", "manhattan_distance",
    # Legality
    "check_placement_legality", "nudge_to_nearest_legal",
    "is_layout_legal", "layout_violations",
    # Scoring / search
    "score_layout", "optimize_heuristic",
    # Serialization
    "result_to_dict", "legality_to_dict",
]
