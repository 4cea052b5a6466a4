"""Shared layout constants for the planning pipeline.

Both the **legality checker** (hard constraints) and the **optimizer**
(soft objective + search schedule) derive their defaults from this single
source of truth.  All distances are in metres.

Change a value here and every stage stays in sync automatically.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreWeights:
    """Penalty / reward multipliers for the layout cost.

    The penalty weights are large enough that any constraint-violating
    layout scores worse than any legal one regardless of flow magnitude.
    """

    lambda_path: float = 1e6
    """Cost per block whose footprint intersects a reserved path cell."""

    lambda_clear: float = 5e5
    """Cost per aisle-clearance violation (block-to-path or block pair)."""

    lambda_adj: float = 1e3
    """Reward multiplier for satisfied adjacency preferences."""


@dataclass(frozen=True)
class LayoutRules:
    """Geometric rules and optimizer schedule defaults."""

    min_cell_size_m: float = 0.05
    """Occupancy grids never go finer than this."""

    cell_size_m: float = 0.25
    """Default occupancy / path-mask resolution."""

    min_grid_step_m: float = 0.25
    """Lower bound on the optimizer's shift step."""

    iterations: int = 40
    cooling: float = 0.95
    initial_temperature: float = 1.0

    adjacency_near_factor: float = 3.0
    """Two blocks are 'near' when their centre distance is within this
    multiple of the largest side of either block."""

    pull_together_gap_m: float = 0.1
    """Gap left between the two blocks of a pull-together move."""

    nudge_radius_m: float = 10.0
    """Default Manhattan search radius for nudging a block to legality."""

    default_aisle_m: float = 3.0
    """Minimum clearance used when no forklift class is given."""

    site_margin_m: float = 10.0
    """Padding around block bounds when a site must be inferred."""

    reserved_keys: tuple[str, ...] = ("aisle",)
    """Block categories that represent fixed corridor infrastructure."""

    weights: ScoreWeights = ScoreWeights()


# Module-level singleton, importable everywhere.
LAYOUT_RULES = LayoutRules()
