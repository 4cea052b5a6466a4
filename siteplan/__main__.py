"""
siteplan — command line entry point.

Usage:
    python -m siteplan optimize plan.json --forklift NA --seed 7 --out result.json
    python -m siteplan check plan.json block-3 --nudge 10
    python -m siteplan review plan.json --forklift WA
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from siteplan.config import rules
from siteplan.pipeline.config import LAYOUT_RULES
from siteplan.pipeline.context import SiteSetup, build_context, merge_reserved
from siteplan.pipeline.layout import (
    PlanParseError, Rect, parse_adjacency, parse_flows, parse_plan,
    plan_metrics, plan_to_dict, validate_plan,
)
from siteplan.pipeline.optimizer import (
    OptimizeOptions, OptimizerInputError,
    check_placement_legality, nudge_to_nearest_legal,
    optimize_heuristic, result_to_dict,
)
from siteplan.pipeline.optimizer.geometry import rect_of
from siteplan.pipeline.review import review_plan


def _load_json(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _add_context_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("plan", help="Path to plan.json")
    p.add_argument("--site-width", type=float, default=None, help="Site width (m); inferred from blocks if omitted")
    p.add_argument("--site-height", type=float, default=None, help="Site height (m); inferred from blocks if omitted")
    p.add_argument("--cell-size", type=float, default=LAYOUT_RULES.cell_size_m, help="Path-mask resolution (m)")
    p.add_argument("--min-aisle", type=float, default=None, help="Minimum clearance (m); overrides --forklift")
    p.add_argument("--forklift", choices=rules.forklift_classes, default=None, help="Forklift class for aisle width lookup")
    p.add_argument("--flows", default=None, help="Path to flows.json ({from_id: {to_id: moves_per_hour}})")
    p.add_argument("--adjacency", default=None, help="Path to adjacency.json; defaults to the built-in table")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="siteplan", description="Facility block layout legality, scoring and optimization")
    sub = p.add_subparsers(dest="cmd", required=True)

    o = sub.add_parser("optimize", help="Refine a plan's block arrangement")
    _add_context_args(o)
    o.add_argument("--iterations", type=int, default=LAYOUT_RULES.iterations, help="Iteration budget")
    o.add_argument("--cooling", type=float, default=LAYOUT_RULES.cooling, help="Temperature multiplier per iteration")
    o.add_argument("--grid-step", type=float, default=None, help="Shift step (m); defaults to max(0.25, cell size)")
    o.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    o.add_argument("--out", default=None, help="Write the result JSON here")
    o.add_argument("--no-history", action="store_true", help="Omit plan snapshots from history in the output")

    c = sub.add_parser("check", help="Check one block's placement legality")
    _add_context_args(c)
    c.add_argument("block_id", help="Id of the block to check")
    c.add_argument("--nudge", type=float, nargs="?", default=None,
                   const=LAYOUT_RULES.nudge_radius_m, metavar="RADIUS",
                   help="Search for the nearest legal position within RADIUS metres "
                        f"(default {LAYOUT_RULES.nudge_radius_m:g})")

    r = sub.add_parser("review", help="List rule findings and footprint metrics")
    _add_context_args(r)

    return p


def _setup(args: argparse.Namespace) -> SiteSetup:
    plan = parse_plan(_load_json(args.plan))
    site = None
    if args.site_width is not None and args.site_height is not None:
        site = Rect(0.0, 0.0, args.site_width, args.site_height)
    flows = parse_flows(_load_json(args.flows)) if args.flows else None
    adjacency = (parse_adjacency(_load_json(args.adjacency)) if args.adjacency
                 else rules.default_adjacency())
    return build_context(
        plan,
        site=site,
        cell_size=args.cell_size,
        min_aisle=args.min_aisle,
        forklift_class=args.forklift,
        flows=flows,
        adjacency=adjacency,
    )


def _cmd_optimize(args: argparse.Namespace) -> int:
    setup = _setup(args)
    errors = validate_plan(setup.movable)
    if errors:
        for e in errors:
            print(f"❌ {e}", file=sys.stderr)
        return 1

    result = optimize_heuristic(
        setup.movable,
        setup.ctx,
        OptimizeOptions(
            iterations=args.iterations,
            grid_step=args.grid_step,
            cooling=args.cooling,
            seed=args.seed,
        ),
    )
    result.best_plan = merge_reserved(result.best_plan, setup.reserved)

    b = result.breakdown
    print(f"✅ Plan {result.best_plan.id}: score {result.best_score:.2f} "
          f"({result.accepted} accepted of {args.iterations} iterations)")
    print(f"   mhc={b.mhc:.2f}  path overlaps={b.overlap_with_path}  "
          f"clearance violations={b.clearance_violations}  adjacency={b.adjacency_hits:.2f}")

    if args.out:
        out = Path(args.out).resolve()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(
            result_to_dict(result, include_snapshots=not args.no_history), indent=2,
        ), encoding="utf-8")
        print(f"✅ Wrote result to: {out}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    setup = _setup(args)
    block = setup.movable.block(args.block_id)
    if block is None:
        print(f"❌ No movable block '{args.block_id}' in plan", file=sys.stderr)
        return 1

    others = [rect_of(b) for b in setup.movable.blocks if b.id != block.id]
    opts = setup.ctx.legality
    res = check_placement_legality(block.rect, others, setup.ctx.path_mask, opts)
    if res.ok:
        print(f"✅ {block.id} at ({block.x:.2f}, {block.y:.2f}) is legal")
        return 0

    print(f"⚠️  {block.id} at ({block.x:.2f}, {block.y:.2f}): {res.reason}")
    if args.nudge is not None:
        moved = nudge_to_nearest_legal(block.rect, others, setup.ctx.path_mask, opts, args.nudge)
        if moved == block.rect:
            print(f"   no legal position within {args.nudge:g} m")
        else:
            print(f"   nearest legal position: ({moved.x:.2f}, {moved.y:.2f})")
    return 2


def _cmd_review(args: argparse.Namespace) -> int:
    setup = _setup(args)
    findings = review_plan(
        setup.movable, setup.ctx,
        corridors=setup.reserved, forklift_class=args.forklift,
    )
    m = plan_metrics(setup.movable.blocks, setup.ctx.site)

    print(f"Plan {setup.movable.id}: {m.block_count} blocks, {m.block_area:.1f} m² "
          f"on {m.site_area:.1f} m² site ({m.utilization:.1%} used)")
    print(f"   compactness: bbox {m.bbox_compactness:.2f}, hull {m.hull_compactness:.2f}")
    if not findings:
        print("✅ No findings")
        return 0
    for f in findings:
        print(f"⚠️  {f}")
    return 2


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if (args.site_width is None) != (args.site_height is None):
        parser.error("--site-width and --site-height must be given together")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {"optimize": _cmd_optimize, "check": _cmd_check, "review": _cmd_review}
    try:
        return handlers[args.cmd](args)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Cannot read input: {e}", file=sys.stderr)
        return 1
    except (PlanParseError, OptimizerInputError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
