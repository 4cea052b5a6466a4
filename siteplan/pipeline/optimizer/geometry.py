"""Low-level rectangle helpers for the legality gate and score engine."""

from __future__ import annotations

from siteplan.pipeline.layout.models import Block, Rect


def rect_of(block: Block) -> Rect:
    return Rect(block.x, block.y, block.w, block.h)


def inflate(rect: Rect, margin: float) -> Rect:
    """Grow a rectangle by *margin* on every side."""
    return Rect(
        rect.x - margin, rect.y - margin,
        rect.w + 2 * margin, rect.h + 2 * margin,
    )


def aabb_overlap(a: Rect, b: Rect) -> bool:
    """True if two rectangles share interior area.

    Rectangles that only touch along an edge do not overlap.
    """
    return not (
        a.x + a.w <= b.x or b.x + b.w <= a.x
        or a.y + a.h <= b.y or b.y + b.h <= a.y
    )


def rect_inside(rect: Rect, bounds: Rect) -> bool:
    """True if *rect* lies fully within *bounds* (edges may coincide)."""
    return (
        rect.x >= bounds.x
        and rect.y >= bounds.y
        and rect.x + rect.w <= bounds.x + bounds.w
        and rect.y + rect.h <= bounds.y + bounds.h
    )


def manhattan_distance(a: Block | Rect, b: Block | Rect) -> float:
    """Manhattan distance between the centres of two rectangles."""
    ax, ay = a.x + a.w / 2, a.y + a.h / 2
    bx, by = b.x + b.w / 2, b.y + b.h / 2
    return abs(ax - bx) + abs(ay - by)
