"""Grid algorithms used by the planner: distance field, flood fill, path search.

All helpers are pure functions of terrain plus their arguments. Matrices are
returned as ``List[List[int]]`` indexed ``[y][x]``.
"""

from __future__ import annotations

import heapq
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from ..constants import IMPASSABLE, PLAIN_COST, SWAMP_COST, StructureType, Terrain
from .grid import CostMatrix, TerrainGrid

if TYPE_CHECKING:  # pragma: no cover
    from ..schemas import BasePlan

Coord = Tuple[int, int]
Matrix = List[List[int]]

# Four-directional moves for flood fill; eight for path search.
_ORTHOGONAL: Tuple[Coord, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
_ALL_DIRECTIONS: Tuple[Coord, ...] = (
    (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1),
)


def chebyshev(a: Coord, b: Coord) -> int:
    """Range between two tiles (diagonal steps count as one)."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def distance_transform(terrain: TerrainGrid) -> Matrix:
    """Distance from every tile to the nearest wall or room edge.

    Two-pass erosion: walls and edge tiles start at 0, everything else at a
    large sentinel. The forward pass pulls from up/left/up-left/up-right, the
    backward pass from down/right/down-left/down-right.
    """
    width, height = terrain.width, terrain.height
    unset = width + height + 1
    matrix: Matrix = [[unset] * width for _ in range(height)]

    for x, y in terrain.tiles():
        if terrain.is_wall(x, y) or terrain.is_edge(x, y):
            matrix[y][x] = 0

    for y in range(height):
        for x in range(width):
            if matrix[y][x] == 0:
                continue
            top = matrix[y - 1][x] if y > 0 else unset
            left = matrix[y][x - 1] if x > 0 else unset
            top_left = matrix[y - 1][x - 1] if y > 0 and x > 0 else unset
            top_right = matrix[y - 1][x + 1] if y > 0 and x < width - 1 else unset
            matrix[y][x] = min(matrix[y][x], min(top, left, top_left, top_right) + 1)

    for y in range(height - 1, -1, -1):
        for x in range(width - 1, -1, -1):
            if matrix[y][x] == 0:
                continue
            bottom = matrix[y + 1][x] if y < height - 1 else unset
            right = matrix[y][x + 1] if x < width - 1 else unset
            bottom_left = matrix[y + 1][x - 1] if y < height - 1 and x > 0 else unset
            bottom_right = matrix[y + 1][x + 1] if y < height - 1 and x < width - 1 else unset
            matrix[y][x] = min(matrix[y][x], min(bottom, right, bottom_left, bottom_right) + 1)

    return matrix


def flood_fill(terrain: TerrainGrid, seeds: Iterable[Coord]) -> Matrix:
    """Multi-source BFS distance over walkable tiles; ``-1`` marks unreached."""
    matrix: Matrix = [[-1] * terrain.width for _ in range(terrain.height)]
    queue: Deque[Coord] = deque()

    for x, y in seeds:
        if not terrain.in_bounds(x, y) or terrain.is_wall(x, y) or matrix[y][x] == 0:
            continue
        matrix[y][x] = 0
        queue.append((x, y))

    while queue:
        x, y = queue.popleft()
        step = matrix[y][x] + 1
        for dx, dy in _ORTHOGONAL:
            nx, ny = x + dx, y + dy
            if not terrain.in_bounds(nx, ny) or terrain.is_wall(nx, ny):
                continue
            current = matrix[ny][nx]
            if current != -1 and current <= step:
                continue
            matrix[ny][nx] = step
            queue.append((nx, ny))

    return matrix


@dataclass
class PathResult:
    """Outcome of a path search. ``path`` excludes the origin tile."""

    path: List[Coord] = field(default_factory=list)
    ops: int = 0
    cost: int = 0
    incomplete: bool = False


def _step_cost(terrain: TerrainGrid, costs: Optional[CostMatrix], x: int, y: int) -> int:
    if costs is not None:
        override = costs.get(x, y)
        if override:
            return override
    kind = terrain.get(x, y)
    if kind == Terrain.WALL:
        return IMPASSABLE
    if kind == Terrain.SWAMP:
        return SWAMP_COST
    return PLAIN_COST


def search_path(
    terrain: TerrainGrid,
    origin: Coord,
    goal: Coord,
    *,
    range: int = 0,
    costs: Optional[CostMatrix] = None,
    max_ops: int = 4000,
) -> PathResult:
    """Cheapest 8-connected path from ``origin`` to any tile within ``range`` of ``goal``.

    Each node expansion consumes one op. When the budget runs out or the goal
    cannot be reached, the result is flagged ``incomplete`` and carries the path
    to the explored tile that got closest to the goal.
    """
    if chebyshev(origin, goal) <= range:
        return PathResult()

    best_cost: Dict[Coord, int] = {origin: 0}
    came_from: Dict[Coord, Coord] = {}
    heap: List[Tuple[int, int, Coord]] = [(0, 0, origin)]
    counter = 0
    ops = 0
    closest = origin
    closest_key = (chebyshev(origin, goal), 0)

    while heap:
        cost, _, current = heapq.heappop(heap)
        if cost > best_cost.get(current, cost):
            continue
        if chebyshev(current, goal) <= range:
            return PathResult(
                path=_rebuild(came_from, origin, current), ops=ops, cost=cost
            )
        ops += 1
        if ops > max_ops:
            break

        key = (chebyshev(current, goal), cost)
        if key < closest_key:
            closest, closest_key = current, key

        x, y = current
        for dx, dy in _ALL_DIRECTIONS:
            nx, ny = x + dx, y + dy
            if not terrain.in_bounds(nx, ny) or (costs is not None and costs.is_blocked(nx, ny)):
                continue
            step = _step_cost(terrain, costs, nx, ny)
            if step >= IMPASSABLE:
                continue
            candidate = cost + step
            if candidate < best_cost.get((nx, ny), candidate + 1):
                best_cost[(nx, ny)] = candidate
                came_from[(nx, ny)] = current
                counter += 1
                heapq.heappush(heap, (candidate, counter, (nx, ny)))

    return PathResult(
        path=_rebuild(came_from, origin, closest),
        ops=ops,
        cost=best_cost.get(closest, 0),
        incomplete=True,
    )


def _rebuild(came_from: Dict[Coord, Coord], origin: Coord, end: Coord) -> List[Coord]:
    path: List[Coord] = []
    node = end
    while node != origin:
        path.append(node)
        node = came_from[node]
    path.reverse()
    return path


_PLAN_SYMBOLS: Dict[StructureType, str] = {
    StructureType.SPAWN: "S",
    StructureType.EXTENSION: "E",
    StructureType.STORAGE: "s",
    StructureType.TERMINAL: "T",
    StructureType.LAB: "L",
    StructureType.TOWER: "t",
    StructureType.LINK: "l",
    StructureType.FACTORY: "F",
    StructureType.POWER_SPAWN: "P",
    StructureType.NUKER: "N",
    StructureType.OBSERVER: "O",
    StructureType.CONTAINER: "C",
    StructureType.EXTRACTOR: "X",
    StructureType.RAMPART: "R",
}


def render_plan_overlay(
    terrain: TerrainGrid,
    plan: "BasePlan",
    *,
    radius: int = 12,
    symbols: Optional[Dict[StructureType, str]] = None,
) -> str:
    """Render a text window of the plan around its anchor.

    Purely cosmetic: ``#`` walls, ``@`` anchor, ``·`` roads, ``u`` upgrade pad
    tiles and one character per structure kind. Unknown kinds use their first
    letter.
    """
    mapping = {**_PLAN_SYMBOLS}
    if symbols:
        mapping.update(symbols)

    layer: Dict[Coord, str] = {}
    for tile in plan.upgrade_positions:
        layer[(tile.x, tile.y)] = "u"
    for road in plan.roads:
        layer[(road.x, road.y)] = "·"
    for entry in plan.structures:
        layer[(entry.x, entry.y)] = mapping.get(entry.kind, entry.kind.value[:1].upper())
    layer[(plan.anchor.x, plan.anchor.y)] = "@"

    ax, ay = plan.anchor.x, plan.anchor.y
    radius = max(radius, 0)
    lines: List[str] = []
    for y in range(max(0, ay - radius), min(terrain.height, ay + radius + 1)):
        row: List[str] = []
        for x in range(max(0, ax - radius), min(terrain.width, ax + radius + 1)):
            if (x, y) in layer:
                row.append(layer[(x, y)])
            elif terrain.is_wall(x, y):
                row.append("#")
            else:
                row.append(" ")
        lines.append("".join(row))
    return "\n".join(lines)


def tiles_in_range(terrain: TerrainGrid, center: Coord, radius: int) -> Sequence[Coord]:
    """Interior, non-wall tiles within ``radius`` of ``center`` (dx-major order)."""
    cx, cy = center
    found: List[Coord] = []
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            x, y = cx + dx, cy + dy
            if not terrain.is_interior(x, y) or terrain.is_wall(x, y):
                continue
            found.append((x, y))
    return found
