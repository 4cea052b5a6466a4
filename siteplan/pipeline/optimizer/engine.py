"""Layout optimizer — bounded local search with annealing-style acceptance."""

from __future__ import annotations

import logging
import math
import random
from typing import Sequence

from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.layout.models import Plan, clone_blocks
from .legality import is_layout_legal
from .models import (
    HistoryEntry, OptimizeOptions, OptimizeResult, OptimizerInputError,
    ScoreContext,
)
from .moves import Move, default_moves
from .scoring import score_layout


log = logging.getLogger(__name__)


def _check_inputs(initial: Plan, opts: OptimizeOptions, grid_step: float) -> None:
    seen: set[str] = set()
    for b in initial.blocks:
        if b.id in seen:
            raise OptimizerInputError(f"duplicate block id '{b.id}' in plan '{initial.id}'")
        seen.add(b.id)
    if opts.iterations < 0:
        raise OptimizerInputError(f"iterations must be >= 0, got {opts.iterations}")
    if not (0 < opts.cooling <= 1):
        raise OptimizerInputError(f"cooling must be in (0, 1], got {opts.cooling}")
    if not (grid_step > 0 and math.isfinite(grid_step)):
        raise OptimizerInputError(f"grid_step must be a positive number, got {grid_step}")


def acceptance_probability(
    candidate_total: float,
    best_total: float,
    temperature: float,
) -> float:
    """Chance of taking a candidate that is not a strict improvement.

    The temperature scales the Boltzmann-like term linearly rather than
    sitting in the exponent.
    """
    delta = candidate_total - best_total
    return math.exp(-delta / max(1.0, best_total)) * temperature


def optimize_heuristic(
    initial: Plan,
    ctx: ScoreContext,
    options: OptimizeOptions | None = None,
    *,
    rng: random.Random | None = None,
    moves: Sequence[Move] | None = None,
) -> OptimizeResult:
    """Refine a plan's block arrangement.

    Each iteration perturbs the best arrangement found so far with a
    uniformly chosen move, drops candidates that fail the legality gate,
    and accepts the rest when they strictly improve the score or pass an
    annealing-style random draw.  The temperature decays every
    iteration, including rejected ones.  The run always consumes the
    full iteration budget.

    Parameters
    ----------
    initial : Plan
        Starting layout.  Never mutated.
    ctx : ScoreContext
        Site, path mask, clearance and scoring tables.  Never mutated.
    options : OptimizeOptions, optional
        Iteration budget, shift step, cooling factor and seed.
    rng : random.Random, optional
        Random source for move choice, in-move draws and acceptance.
        Defaults to ``random.Random(options.seed)``.
    moves : sequence of Move, optional
        Move generators to draw from (defaults to swap / shift / rotate /
        pull-together).

    Returns
    -------
    OptimizeResult
        Best plan (same id, new block list, score filled in), its total
        and breakdown, and one history entry per accepted step.

    Raises
    ------
    OptimizerInputError
        If the plan has duplicate block ids or the options are unusable.
    """
    opts = options or OptimizeOptions()
    grid_step = opts.grid_step
    if grid_step is None:
        grid_step = max(LAYOUT_RULES.min_grid_step_m, ctx.cell_size)
    _check_inputs(initial, opts, grid_step)

    if rng is None:
        rng = random.Random(opts.seed)
    gens = list(moves) if moves is not None else default_moves(grid_step)
    if not gens:
        raise OptimizerInputError("at least one move generator is required")

    # ── 1. Working state ───────────────────────────────────────────

    best_blocks = clone_blocks(initial.blocks)
    best = score_layout(best_blocks, ctx)
    temperature = LAYOUT_RULES.initial_temperature
    history: list[HistoryEntry] = []
    rejected_illegal = 0

    log.info(
        "Optimizing plan %s: %d blocks, %d iterations, step=%.2fm, cooling=%.3f, "
        "initial score=%.2f",
        initial.id, len(best_blocks), opts.iterations, grid_step,
        opts.cooling, best.total,
    )

    # ── 2. Search ──────────────────────────────────────────────────

    for it in range(opts.iterations):
        gen = gens[rng.randrange(len(gens))]
        candidate, move = gen(best_blocks, rng)

        if not is_layout_legal(candidate, ctx):
            rejected_illegal += 1
            temperature *= opts.cooling
            continue

        score = score_layout(candidate, ctx)

        accepted = score.total < best.total or (
            rng.random() < acceptance_probability(score.total, best.total, temperature)
        )
        if accepted:
            best_blocks = candidate
            best = score
            history.append(HistoryEntry(
                plan=initial.with_blocks(
                    clone_blocks(candidate), plan_id=f"{initial.id}-iter-{it}",
                ),
                score=score.total,
                move=move,
                iteration=it,
            ))
            log.debug("iter %d: accepted %s -> %.2f (T=%.3f)",
                      it, move, score.total, temperature)

        temperature *= opts.cooling

    # ── 3. Build output ────────────────────────────────────────────

    best_plan = initial.with_blocks(clone_blocks(best_blocks))
    best_plan.score = best.total
    best_plan.score_breakdown = best

    log.info(
        "Plan %s: final score=%.2f after %d accepted / %d illegal of %d iterations",
        initial.id, best.total, len(history), rejected_illegal, opts.iterations,
    )

    return OptimizeResult(
        best_plan=best_plan,
        best_score=best.total,
        breakdown=best,
        history=history,
    )
