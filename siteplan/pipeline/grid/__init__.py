"""Grid — occupancy indexing for legality checks.

Submodules:
  occupancy     Boolean occupancy bitmap with fail-closed bounds.
  mask          Path mask (reserved corridors) and its builder.
"""

from .occupancy import OccupancyGrid
from .mask import PathMask, build_path_mask

__all__ = ["OccupancyGrid", "PathMask", "build_path_mask"]
