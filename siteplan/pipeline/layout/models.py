"""Layout dataclasses — the plan structure shared by every stage."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in metres, (x, y) is the top-left corner."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def moved_to(self, x: float, y: float) -> Rect:
        return Rect(x, y, self.w, self.h)


@dataclass
class BlockMeta:
    kpis: dict[str, float] = field(default_factory=dict)
    notes: list[str] | None = None

    def clone(self) -> BlockMeta:
        return BlockMeta(
            kpis=dict(self.kpis),
            notes=list(self.notes) if self.notes is not None else None,
        )


@dataclass
class Block:
    """A placed facility module tagged with a category key."""

    id: str
    key: str                    # category, e.g. "pallet_asrs", "aisle"
    x: float
    y: float
    w: float
    h: float
    rotation: int | None = None     # 0 or 90 when known
    meta: BlockMeta = field(default_factory=BlockMeta)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)

    def clone(self) -> Block:
        """Deep copy, including the metadata maps."""
        return Block(
            id=self.id, key=self.key,
            x=self.x, y=self.y, w=self.w, h=self.h,
            rotation=self.rotation,
            meta=self.meta.clone(),
        )


def clone_blocks(blocks: list[Block]) -> list[Block]:
    return [b.clone() for b in blocks]


@dataclass
class Walkway:
    polyline: list[tuple[float, float]]


@dataclass
class ScoreBreakdown:
    """Per-term layout cost.  Lower ``total`` is better."""

    mhc: float = 0.0
    overlap_with_path: int = 0
    clearance_violations: int = 0
    adjacency_hits: float = 0.0
    total: float = 0.0


@dataclass
class Plan:
    """A full layout: its blocks plus aggregate score and findings."""

    id: str
    blocks: list[Block]
    walkways: list[Walkway] = field(default_factory=list)
    score: float = 0.0
    score_breakdown: ScoreBreakdown | None = None
    rule_findings: list[str] = field(default_factory=list)

    def block(self, block_id: str) -> Block | None:
        return next((b for b in self.blocks if b.id == block_id), None)

    def with_blocks(self, blocks: list[Block], *, plan_id: str | None = None) -> Plan:
        """Return a new Plan with the block list replaced.

        Walkways and findings are copied so the new plan never aliases
        the source plan's lists.
        """
        return Plan(
            id=plan_id or self.id,
            blocks=blocks,
            walkways=[Walkway(polyline=list(w.polyline)) for w in self.walkways],
            score=self.score,
            score_breakdown=self.score_breakdown,
            rule_findings=list(self.rule_findings),
        )


class PlanParseError(Exception):
    """Raised when raw plan input is structurally unusable."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Cannot parse plan field '{field}': {reason}")
