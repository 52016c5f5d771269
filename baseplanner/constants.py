"""
Host-world constants shared by the planner.

Structure identifiers, terrain masks and controller caps mirror the values the
host world publishes, so persisted plans and live structures can be compared
directly by kind.
"""

from enum import Enum, IntEnum
from typing import Dict, FrozenSet


ROOM_SIZE = 50

# Host-enforced ceiling on pending construction sites across all rooms.
MAX_CONSTRUCTION_SITES = 100

# Road search traversal costs. 0 in a cost matrix means "use terrain cost".
PLAIN_COST = 2
SWAMP_COST = 5
IMPASSABLE = 255


class Terrain(IntEnum):
    """Terrain masks as reported by the host terrain query."""

    PLAIN = 0
    WALL = 1
    SWAMP = 2


class StructureType(str, Enum):
    """Buildable structure kinds."""

    SPAWN = "spawn"
    EXTENSION = "extension"
    ROAD = "road"
    WALL = "constructedWall"
    RAMPART = "rampart"
    LINK = "link"
    STORAGE = "storage"
    TOWER = "tower"
    OBSERVER = "observer"
    POWER_SPAWN = "powerSpawn"
    EXTRACTOR = "extractor"
    LAB = "lab"
    TERMINAL = "terminal"
    CONTAINER = "container"
    NUKER = "nuker"
    FACTORY = "factory"


def _caps(*values: int) -> Dict[int, int]:
    return {level: value for level, value in enumerate(values)}


# Per-kind structure caps for controller levels 0..8.
CONTROLLER_STRUCTURES: Dict[StructureType, Dict[int, int]] = {
    StructureType.SPAWN: _caps(0, 1, 1, 1, 1, 1, 1, 2, 3),
    StructureType.EXTENSION: _caps(0, 0, 5, 10, 20, 30, 40, 50, 60),
    StructureType.LINK: _caps(0, 0, 0, 0, 0, 2, 3, 4, 6),
    StructureType.ROAD: _caps(2500, 2500, 2500, 2500, 2500, 2500, 2500, 2500, 2500),
    StructureType.WALL: _caps(0, 0, 2500, 2500, 2500, 2500, 2500, 2500, 2500),
    StructureType.RAMPART: _caps(0, 0, 2500, 2500, 2500, 2500, 2500, 2500, 2500),
    StructureType.STORAGE: _caps(0, 0, 0, 0, 1, 1, 1, 1, 1),
    StructureType.TOWER: _caps(0, 0, 0, 1, 1, 2, 2, 3, 6),
    StructureType.OBSERVER: _caps(0, 0, 0, 0, 0, 0, 0, 0, 1),
    StructureType.POWER_SPAWN: _caps(0, 0, 0, 0, 0, 0, 0, 0, 1),
    StructureType.EXTRACTOR: _caps(0, 0, 0, 0, 0, 0, 1, 1, 1),
    StructureType.LAB: _caps(0, 0, 0, 0, 0, 0, 3, 6, 10),
    StructureType.TERMINAL: _caps(0, 0, 0, 0, 0, 0, 1, 1, 1),
    StructureType.CONTAINER: _caps(5, 5, 5, 5, 5, 5, 5, 5, 5),
    StructureType.NUKER: _caps(0, 0, 0, 0, 0, 0, 0, 0, 1),
    StructureType.FACTORY: _caps(0, 0, 0, 0, 0, 0, 0, 1, 1),
}

MAX_LEVEL = 8

# Kinds the maintenance pass may demolish when they sit on a planned tile.
REMOVABLE_STRUCTURES: FrozenSet[StructureType] = frozenset(
    {
        StructureType.EXTENSION,
        StructureType.ROAD,
        StructureType.CONTAINER,
        StructureType.LINK,
        StructureType.LAB,
        StructureType.OBSERVER,
        StructureType.FACTORY,
        StructureType.POWER_SPAWN,
    }
)

# Kinds that exist without an owner (roads, containers, walls).
OWNERLESS_STRUCTURES: FrozenSet[StructureType] = frozenset(
    {StructureType.ROAD, StructureType.CONTAINER, StructureType.WALL}
)


def structure_cap(kind: StructureType, level: int) -> int:
    """Return how many structures of ``kind`` a room may hold at ``level``."""
    table = CONTROLLER_STRUCTURES.get(kind)
    if table is None:
        return 0
    level = max(0, min(level, MAX_LEVEL))
    return table[level]
