"""Room terrain and cost-matrix containers.

Terrain is immutable per room and stored row-major (``cells[y][x]``) so the
sweeps in ``helpers`` walk it in the same order the host reports it. Anything
outside the grid reads as wall.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

from ..constants import IMPASSABLE, ROOM_SIZE, Terrain


_TERRAIN_CHARS: Dict[str, Terrain] = {
    "#": Terrain.WALL,
    ".": Terrain.PLAIN,
    " ": Terrain.PLAIN,
    "~": Terrain.SWAMP,
}


@dataclass(frozen=True)
class TerrainGrid:
    """Per-tile wall/plain/swamp classification for one room."""

    width: int
    height: int
    cells: Tuple[Tuple[Terrain, ...], ...]

    def __post_init__(self) -> None:
        if len(self.cells) != self.height or any(len(row) != self.width for row in self.cells):
            raise ValueError(
                f"Terrain cells do not match declared size {self.width}x{self.height}"
            )

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "TerrainGrid":
        """Build terrain from text rows (``#`` wall, ``.`` plain, ``~`` swamp)."""
        if not rows:
            raise ValueError("Terrain needs at least one row")
        width = len(rows[0])
        cells: List[Tuple[Terrain, ...]] = []
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Terrain row {y} has length {len(row)}, expected {width}")
            try:
                cells.append(tuple(_TERRAIN_CHARS[char] for char in row))
            except KeyError as exc:
                raise ValueError(f"Unknown terrain symbol {exc.args[0]!r} in row {y}") from None
        return cls(width=width, height=len(rows), cells=tuple(cells))

    @classmethod
    def bordered(cls, size: int = ROOM_SIZE) -> "TerrainGrid":
        """Plain room of ``size`` x ``size`` enclosed by a one-tile wall border."""
        rows = []
        for y in range(size):
            if y in (0, size - 1):
                rows.append("#" * size)
            else:
                rows.append("#" + "." * (size - 2) + "#")
        return cls.from_rows(rows)

    def with_walls(self, tiles: Sequence[Tuple[int, int]]) -> "TerrainGrid":
        """Return a copy with the given ``(x, y)`` tiles turned into walls."""
        mutable = [list(row) for row in self.cells]
        for x, y in tiles:
            if self.in_bounds(x, y):
                mutable[y][x] = Terrain.WALL
        return TerrainGrid(
            width=self.width,
            height=self.height,
            cells=tuple(tuple(row) for row in mutable),
        )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Terrain:
        if not self.in_bounds(x, y):
            return Terrain.WALL
        return self.cells[y][x]

    def is_wall(self, x: int, y: int) -> bool:
        return self.get(x, y) == Terrain.WALL

    def is_edge(self, x: int, y: int) -> bool:
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def is_interior(self, x: int, y: int) -> bool:
        """True for tiles strictly inside the room edge."""
        return 0 < x < self.width - 1 and 0 < y < self.height - 1

    def tiles(self) -> Iterator[Tuple[int, int]]:
        for y in range(self.height):
            for x in range(self.width):
                yield x, y


@dataclass
class CostMatrix:
    """Sparse traversal-cost overrides for path search.

    A value of 0 (the default) defers to terrain cost; ``IMPASSABLE`` blocks the
    tile outright.
    """

    costs: Dict[Tuple[int, int], int] = field(default_factory=dict)

    def get(self, x: int, y: int) -> int:
        return self.costs.get((x, y), 0)

    def set(self, x: int, y: int, cost: int) -> None:
        self.costs[(x, y)] = max(0, min(int(cost), IMPASSABLE))

    def block(self, x: int, y: int) -> None:
        self.set(x, y, IMPASSABLE)

    def is_blocked(self, x: int, y: int) -> bool:
        return self.get(x, y) >= IMPASSABLE
