"""Tests for the move generators and the layout optimizer.

Validates:
  - Moves return deep copies and never touch their input
  - Every accepted layout passes the legality gate (100 seeds)
  - Runs are reproducible from a seed or an injected random source
  - Strict improvements are always accepted, illegal candidates never
  - History snapshots are independent of each other and of the result
  - Unusable input raises OptimizerInputError
"""

from __future__ import annotations

import math
import random
import unittest

from siteplan.pipeline.grid import PathMask
from siteplan.pipeline.layout import Block, BlockMeta, Plan, Rect, clone_blocks, plan_to_dict
from siteplan.pipeline.optimizer import (
    OptimizeOptions, OptimizerInputError, ScoreContext,
    is_layout_legal, optimize_heuristic, result_to_dict, score_layout,
)
from siteplan.pipeline.optimizer.engine import acceptance_probability
from siteplan.pipeline.optimizer.moves import (
    NOOP, default_moves, make_pull_together, make_shift, rotate, swap,
)
from tests.warehouse_fixture import make_warehouse_setup


def _open_ctx(**kwargs) -> ScoreContext:
    """100 × 100 m site with no corridors and 0.5 m clearance."""
    return ScoreContext(
        cell_size=1.0,
        min_aisle=0.5,
        site=Rect(0, 0, 100, 100),
        path_mask=PathMask(1.0, 100, 100),
        **kwargs,
    )


def _two_block_plan() -> Plan:
    return Plan(id="p", blocks=[
        Block(id="A", key="inbound", x=10, y=10, w=5, h=5),
        Block(id="B", key="outbound", x=60, y=10, w=5, h=5),
    ])


def _approach(blocks, rng):
    """Move the second block 1 m towards the first."""
    nb = clone_blocks(blocks)
    nb[1].x -= 1
    return nb, "approach"


def _escape(blocks, rng):
    """Push the first block off the site."""
    nb = clone_blocks(blocks)
    nb[0].x = -50
    return nb, "escape"


def _stay(blocks, rng):
    """Same arrangement, same score."""
    return clone_blocks(blocks), "stay"


def _retreat(blocks, rng):
    """Move the second block far from the first."""
    nb = clone_blocks(blocks)
    nb[1].x = 90
    return nb, "retreat"


def _in_order(*steps):
    """A move that plays *steps* one per call."""
    it = iter(steps)

    def move(blocks, rng):
        return next(it)(blocks, rng)

    return move


class _FixedDraw(random.Random):
    """Random source whose acceptance draw is always *draw*."""

    def __init__(self, draw: float) -> None:
        super().__init__(0)
        self.draw = draw

    def random(self) -> float:
        return self.draw


class TestMoves(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(3)
        self.blocks = [
            Block(id="a", key="qc", x=10, y=10, w=8, h=4,
                  meta=BlockMeta(kpis={"throughput": 1.0}, notes=["n"])),
            Block(id="b", key="qc", x=40, y=20, w=6, h=6),
            Block(id="c", key="qc", x=70, y=30, w=4, h=12),
        ]

    def test_swap_exchanges_positions(self):
        nb, label = swap(self.blocks, self.rng)
        self.assertTrue(label.startswith("swap("))
        moved = [i for i in range(3) if (nb[i].x, nb[i].y) != (self.blocks[i].x, self.blocks[i].y)]
        self.assertEqual(len(moved), 2)
        i, j = moved
        self.assertEqual((nb[i].x, nb[i].y), (self.blocks[j].x, self.blocks[j].y))
        self.assertEqual((nb[i].w, nb[i].h), (self.blocks[i].w, self.blocks[i].h))

    def test_shift_moves_one_block_one_step(self):
        for _ in range(20):
            nb, label = make_shift(2.5)(self.blocks, self.rng)
            self.assertTrue(label.startswith("shift("))
            deltas = [abs(n.x - b.x) + abs(n.y - b.y) for n, b in zip(nb, self.blocks)]
            self.assertEqual(sorted(deltas), [0, 0, 2.5])

    def test_shift_clamps_at_origin(self):
        blocks = [Block(id="a", key="qc", x=0, y=0, w=1, h=1)]
        for _ in range(20):
            nb, _ = make_shift(1.0)(blocks, self.rng)
            self.assertGreaterEqual(nb[0].x, 0)
            self.assertGreaterEqual(nb[0].y, 0)

    def test_rotate_swaps_dimensions(self):
        nb, label = rotate(self.blocks[:1], self.rng)
        self.assertEqual(label, "rotate(0)")
        self.assertEqual((nb[0].x, nb[0].y, nb[0].w, nb[0].h), (10, 10, 4, 8))
        self.assertEqual(nb[0].rotation, 90)
        nb2, _ = rotate(nb, self.rng)
        self.assertEqual((nb2[0].w, nb2[0].h), (8, 4))
        self.assertEqual(nb2[0].rotation, 0)

    def test_pull_together(self):
        blocks = [
            Block(id="a", key="qc", x=0, y=0, w=10, h=5),
            Block(id="b", key="qc", x=30, y=20, w=4, h=4),
        ]
        nb, label = make_pull_together()(blocks, self.rng)
        self.assertEqual(label, "pullTogether(0,1)")
        self.assertEqual(nb[0].x, 5)
        self.assertAlmostEqual(nb[1].x, 15.1)
        self.assertEqual(nb[0].y, 10)
        self.assertEqual(nb[1].y, 10)

    def test_short_lists_are_noops(self):
        single = self.blocks[:1]
        for move in (swap, make_pull_together()):
            nb, label = move(single, self.rng)
            self.assertIs(nb, single)
            self.assertEqual(label, NOOP)
        for move in (make_shift(1.0), rotate):
            nb, label = move([], self.rng)
            self.assertEqual((nb, label), ([], NOOP))

    def test_moves_never_mutate_input(self):
        before = [(b.x, b.y, b.w, b.h, b.rotation) for b in self.blocks]
        for move in default_moves(1.0):
            for _ in range(10):
                nb, _ = move(self.blocks, self.rng)
                self.assertIsNot(nb, self.blocks)
                self.assertIsNot(nb[0].meta, self.blocks[0].meta)
                nb[0].meta.kpis["throughput"] = 99.0
        self.assertEqual([(b.x, b.y, b.w, b.h, b.rotation) for b in self.blocks], before)
        self.assertEqual(self.blocks[0].meta.kpis, {"throughput": 1.0})


class TestAcceptanceProbability(unittest.TestCase):

    def test_equal_score_is_temperature(self):
        self.assertEqual(acceptance_probability(10, 10, 0.5), 0.5)

    def test_large_regression_near_zero(self):
        self.assertLess(acceptance_probability(1e6, 10, 1.0), 1e-9)

    def test_small_best_score_normalised_by_one(self):
        self.assertAlmostEqual(acceptance_probability(1.5, 0.5, 1.0), math.exp(-1))


class TestOptimizeWarehouse(unittest.TestCase):

    def test_every_result_is_legal(self):
        setup = make_warehouse_setup()
        for seed in range(100):
            res = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(seed=seed))
            self.assertTrue(is_layout_legal(res.best_plan.blocks, setup.ctx), f"seed {seed}")
            for h in res.history:
                self.assertTrue(is_layout_legal(h.plan.blocks, setup.ctx), f"seed {seed}")

    def test_reproducible_from_seed(self):
        setup = make_warehouse_setup()
        a = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(seed=11))
        b = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(seed=11))
        c = optimize_heuristic(setup.movable, setup.ctx, rng=random.Random(11))
        self.assertEqual(result_to_dict(a), result_to_dict(b))
        self.assertEqual(result_to_dict(a), result_to_dict(c))

    def test_initial_plan_untouched(self):
        setup = make_warehouse_setup()
        before = plan_to_dict(setup.movable)
        res = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(seed=5, iterations=60))
        self.assertEqual(plan_to_dict(setup.movable), before)
        for b in res.best_plan.blocks:
            self.assertIsNot(b, setup.movable.block(b.id))

    def test_best_plan_carries_score(self):
        setup = make_warehouse_setup()
        res = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(seed=2))
        self.assertEqual(res.best_plan.id, "warehouse")
        self.assertEqual(res.best_plan.score, res.best_score)
        self.assertIs(res.best_plan.score_breakdown, res.breakdown)
        self.assertEqual(score_layout(res.best_plan.blocks, setup.ctx).total, res.best_score)
        self.assertEqual(len(res.best_plan.walkways), 1)

    def test_zero_iterations(self):
        setup = make_warehouse_setup()
        res = optimize_heuristic(setup.movable, setup.ctx, OptimizeOptions(iterations=0))
        self.assertEqual(res.history, [])
        self.assertEqual(
            [(b.id, b.x, b.y) for b in res.best_plan.blocks],
            [(b.id, b.x, b.y) for b in setup.movable.blocks],
        )
        self.assertEqual(res.best_score, score_layout(setup.movable.blocks, setup.ctx).total)


class TestOptimizeSearch(unittest.TestCase):

    def test_strict_improvements_always_accepted(self):
        ctx = _open_ctx(flows={"A": {"B": 1}})
        res = optimize_heuristic(_two_block_plan(), ctx, OptimizeOptions(iterations=10),
                                 moves=[_approach])
        self.assertEqual(res.accepted, 10)
        self.assertEqual([h.iteration for h in res.history], list(range(10)))
        self.assertEqual([h.plan.id for h in res.history], [f"p-iter-{i}" for i in range(10)])
        scores = [h.score for h in res.history]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(res.best_plan.block("B").x, 50)
        self.assertEqual(res.best_score, 40)

    def test_history_snapshots_not_aliased(self):
        ctx = _open_ctx(flows={"A": {"B": 1}})
        res = optimize_heuristic(_two_block_plan(), ctx, OptimizeOptions(iterations=3),
                                 moves=[_approach])
        res.history[0].plan.blocks[1].x = 0
        self.assertEqual(res.history[1].plan.blocks[1].x, 58)
        self.assertEqual(res.history[2].plan.blocks[1].x, 57)
        self.assertEqual(res.best_plan.blocks[1].x, 57)

    def test_illegal_candidates_rejected(self):
        plan = _two_block_plan()
        res = optimize_heuristic(plan, _open_ctx(), OptimizeOptions(iterations=25),
                                 moves=[_escape])
        self.assertEqual(res.history, [])
        self.assertEqual(res.best_plan.blocks[0].x, 10)

    def test_temperature_decays_on_illegal_iterations(self):
        """Illegal step cools T to 0.4, so an equal score fails a 0.5 draw."""
        res = optimize_heuristic(
            _two_block_plan(), _open_ctx(flows={"A": {"B": 1}}),
            OptimizeOptions(iterations=2, cooling=0.4),
            rng=_FixedDraw(0.5), moves=[_in_order(_escape, _stay)],
        )
        self.assertEqual(res.history, [])

    def test_equal_score_accepted_while_hot(self):
        res = optimize_heuristic(
            _two_block_plan(), _open_ctx(flows={"A": {"B": 1}}),
            OptimizeOptions(iterations=1, cooling=0.4),
            rng=_FixedDraw(0.5), moves=[_stay],
        )
        self.assertEqual([h.move for h in res.history], ["stay"])

    def test_equal_score_accepted_without_cooling(self):
        res = optimize_heuristic(
            _two_block_plan(), _open_ctx(flows={"A": {"B": 1}}),
            OptimizeOptions(iterations=2, cooling=1.0),
            rng=_FixedDraw(0.5), moves=[_in_order(_escape, _stay)],
        )
        self.assertEqual([(h.move, h.iteration) for h in res.history], [("stay", 1)])
        self.assertEqual(res.best_score, 50)

    def test_large_regression_rejected(self):
        plan = _two_block_plan()
        plan.blocks[1].x = 20            # centres 10 m apart
        res = optimize_heuristic(
            plan, _open_ctx(flows={"A": {"B": 1}}),
            OptimizeOptions(iterations=3, cooling=1.0),
            rng=_FixedDraw(0.5), moves=[_retreat],
        )
        self.assertEqual(res.history, [])
        self.assertEqual(res.best_plan.block("B").x, 20)
        self.assertEqual(res.best_score, 10)

    def test_empty_plan(self):
        res = optimize_heuristic(Plan(id="empty", blocks=[]), _open_ctx(),
                                 OptimizeOptions(seed=1))
        self.assertEqual(res.best_plan.blocks, [])
        self.assertEqual(res.best_score, 0)

    def test_single_block_stays_legal(self):
        plan = Plan(id="one", blocks=[Block(id="A", key="qc", x=40, y=40, w=8, h=4)])
        ctx = _open_ctx()
        res = optimize_heuristic(plan, ctx, OptimizeOptions(seed=4, iterations=100))
        self.assertTrue(is_layout_legal(res.best_plan.blocks, ctx))

    def test_result_to_dict(self):
        ctx = _open_ctx(flows={"A": {"B": 1}})
        res = optimize_heuristic(_two_block_plan(), ctx, OptimizeOptions(iterations=2),
                                 moves=[_approach])
        d = result_to_dict(res)
        self.assertEqual(set(d), {"bestPlan", "bestScore", "breakdown", "history"})
        self.assertEqual(d["bestPlan"]["scoreBreakdown"]["mhc"], 48)
        self.assertEqual(d["history"][0]["plan"]["id"], "p-iter-0")
        slim = result_to_dict(res, include_snapshots=False)
        self.assertEqual(slim["history"][1], {"score": 48, "move": "approach", "iteration": 1})


class TestOptimizerInputErrors(unittest.TestCase):

    def test_duplicate_ids(self):
        plan = _two_block_plan()
        plan.blocks[1].id = "A"
        with self.assertRaises(OptimizerInputError) as ctx:
            optimize_heuristic(plan, _open_ctx())
        self.assertIn("duplicate block id 'A'", str(ctx.exception))

    def test_bad_options(self):
        for opts in (
            OptimizeOptions(iterations=-1),
            OptimizeOptions(cooling=0),
            OptimizeOptions(cooling=1.5),
            OptimizeOptions(grid_step=0),
            OptimizeOptions(grid_step=float("nan")),
        ):
            with self.assertRaises(OptimizerInputError, msg=str(opts)):
                optimize_heuristic(_two_block_plan(), _open_ctx(), opts)

    def test_no_moves(self):
        with self.assertRaises(OptimizerInputError):
            optimize_heuristic(_two_block_plan(), _open_ctx(), moves=[])


if __name__ == "__main__":
    unittest.main()
