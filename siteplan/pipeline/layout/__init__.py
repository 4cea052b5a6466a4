"""Layout — plan data model, JSON conversion, validation and metrics."""

from .models import (
    Rect, Block, BlockMeta, Walkway, Plan, ScoreBreakdown, PlanParseError,
    clone_blocks,
)
from .parsing import parse_plan, parse_block, parse_flows, parse_adjacency
from .serialization import plan_to_dict, block_to_dict, breakdown_to_dict
from .validation import validate_plan
from .metrics import PlanMetrics, plan_metrics

__all__ = [
    # Models
    "Rect", "Block", "BlockMeta", "Walkway", "Plan", "ScoreBreakdown",
    "PlanParseError", "clone_blocks",
    # Parsing
    "parse_plan", "parse_block", "parse_flows", "parse_adjacency",
    # Serialization
    "plan_to_dict", "block_to_dict", "breakdown_to_dict",
    # Validation
    "validate_plan",
    # Metrics
    "PlanMetrics", "plan_metrics",
]
