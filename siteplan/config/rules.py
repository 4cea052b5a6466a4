"""
Site rules — single source of truth for externally tunable planning tables.

Loads siteplan/config/rules.json once and exposes typed accessors.
"""

from __future__ import annotations
import json
from pathlib import Path
from functools import lru_cache


_RULES_PATH = Path(__file__).resolve().parent / "rules.json"

FEET_TO_METERS = 0.3048
DEFAULT_AISLE_FT = 13.0


@lru_cache(maxsize=1)
def _load() -> dict:
    return json.loads(_RULES_PATH.read_text(encoding="utf-8"))


class _Rules:
    """Typed accessor for the site rules file."""

    # ── raw section accessors ───────────────────────────────────────
    @property
    def forklift_aisles(self) -> dict:
        return _load()["forklift_aisles"]

    @property
    def adjacency(self) -> dict:
        return _load()["adjacency"]

    @property
    def module_sizes(self) -> dict:
        return _load()["module_sizes"]

    # ── aisles ──────────────────────────────────────────────────────
    @property
    def forklift_classes(self) -> list[str]:
        return sorted(self.forklift_aisles)

    def aisle_width_ft(self, forklift_class: str | None) -> float:
        """Required aisle width in feet; unknown classes get the wide-aisle default."""
        return float(self.forklift_aisles.get(forklift_class or "", DEFAULT_AISLE_FT))

    def aisle_width_m(self, forklift_class: str | None) -> float:
        """Required aisle width in metres, never narrower than the pedestrian minimum."""
        feet = max(self.aisle_width_ft(forklift_class), float(_load()["min_aisle_ft"]))
        return feet * FEET_TO_METERS

    # ── modules ─────────────────────────────────────────────────────
    def default_adjacency(self) -> dict[str, float]:
        """A fresh copy of the category desirability table."""
        return {k: float(v) for k, v in self.adjacency.items()}

    def module_size(self, key: str) -> tuple[float, float] | None:
        size = self.module_sizes.get(key)
        if size is None:
            return None
        return (float(size[0]), float(size[1]))


rules = _Rules()
