"""Terrain containers and grid algorithms."""

from .grid import CostMatrix, TerrainGrid
from .helpers import (
    PathResult,
    chebyshev,
    distance_transform,
    flood_fill,
    render_plan_overlay,
    search_path,
    tiles_in_range,
)

__all__ = [
    "CostMatrix",
    "TerrainGrid",
    "PathResult",
    "chebyshev",
    "distance_transform",
    "flood_fill",
    "render_plan_overlay",
    "search_path",
    "tiles_in_range",
]
