"""
Relative building templates for the base layout.

Every entry is an offset from the anchor tile plus the controller level at
which it becomes buildable. The static stamps (core, fast-fill, labs, support)
never put two non-road structures on the same offset; ``validate_templates``
checks this when the module is imported.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple, Tuple

from .constants import StructureType


class Offset(NamedTuple):
    dx: int
    dy: int


@dataclass(frozen=True)
class TemplateEntry:
    """One structure in a stamp."""

    kind: StructureType
    offset: Offset
    level: int


@dataclass(frozen=True)
class RoadEntry:
    """One road tile in a stamp."""

    offset: Offset
    level: int


# Minimum distance between a from-scratch anchor and the room edge.
ANCHOR_BUFFER = 6

# Chebyshev radius of the extension checkerboard and of the core it skips.
EXTENSION_GRID_RADIUS = 4
CORE_RADIUS = 2


def _entries(kind: StructureType, rows: Iterable[Tuple[int, int, int]]) -> List[TemplateEntry]:
    return [TemplateEntry(kind, Offset(dx, dy), level) for dx, dy, level in rows]


CORE_STAMP: List[TemplateEntry] = [
    *_entries(StructureType.SPAWN, [(0, 0, 1), (-1, -1, 7), (1, -1, 8)]),
    TemplateEntry(StructureType.STORAGE, Offset(0, 1), 4),
    TemplateEntry(StructureType.TERMINAL, Offset(0, -2), 6),
    TemplateEntry(StructureType.LINK, Offset(1, 1), 5),
    *_entries(StructureType.TOWER, [(-1, 0, 5), (1, 0, 5), (-1, 1, 6), (1, -2, 7)]),
]

FAST_FILL_EXTENSIONS: List[TemplateEntry] = _entries(
    StructureType.EXTENSION,
    [(-2, 0, 2), (-2, 1, 2), (2, 0, 2), (2, 1, 2), (-2, -1, 3), (2, -1, 3)],
)

LAB_STAMP: List[TemplateEntry] = _entries(
    StructureType.LAB,
    [
        (-1, 3, 6), (0, 3, 6), (1, 3, 6),
        (-1, 4, 7), (0, 4, 7), (1, 4, 7),
        (-1, 5, 8), (0, 5, 8), (1, 5, 8), (2, 4, 8),
    ],
)

SUPPORT_STRUCTURES: List[TemplateEntry] = [
    TemplateEntry(StructureType.FACTORY, Offset(-2, 3), 7),
    TemplateEntry(StructureType.NUKER, Offset(2, 3), 8),
    TemplateEntry(StructureType.OBSERVER, Offset(3, 1), 8),
    TemplateEntry(StructureType.POWER_SPAWN, Offset(-3, 1), 8),
]

# Ring of roads around the core at Chebyshev radius 2.
CORE_ROADS: List[RoadEntry] = [
    RoadEntry(Offset(dx, dy), 2)
    for dy in range(-CORE_RADIUS, CORE_RADIUS + 1)
    for dx in range(-CORE_RADIUS, CORE_RADIUS + 1)
    if max(abs(dx), abs(dy)) == CORE_RADIUS
]


def _extension_grid() -> List[TemplateEntry]:
    grid: List[TemplateEntry] = []
    for dx in range(-EXTENSION_GRID_RADIUS, EXTENSION_GRID_RADIUS + 1):
        for dy in range(-EXTENSION_GRID_RADIUS, EXTENSION_GRID_RADIUS + 1):
            if abs(dx) <= CORE_RADIUS and abs(dy) <= CORE_RADIUS:
                continue
            # checkerboard keeps every other tile free for walking
            if (abs(dx) + abs(dy)) % 2 == 0:
                grid.append(TemplateEntry(StructureType.EXTENSION, Offset(dx, dy), 4))
    return grid


EXTENSION_GRID: List[TemplateEntry] = _extension_grid()

# Stamps used to recognise an existing base and to count alignment.
REFERENCE_ANCHOR_STRUCTURES: List[TemplateEntry] = [
    *CORE_STAMP,
    *FAST_FILL_EXTENSIONS,
    *SUPPORT_STRUCTURES,
]

# Every static stamp whose kinds can identify an anchor.
ANCHOR_TEMPLATE_ENTRIES: List[TemplateEntry] = [*REFERENCE_ANCHOR_STRUCTURES, *LAB_STAMP]

# Full footprint a from-scratch anchor must fit.
FOOTPRINT: List[TemplateEntry] = [*ANCHOR_TEMPLATE_ENTRIES, *EXTENSION_GRID]


def entries_by_kind(
    entries: Iterable[TemplateEntry] = ANCHOR_TEMPLATE_ENTRIES,
) -> Dict[StructureType, List[TemplateEntry]]:
    """Group template entries by structure kind, preserving template order."""
    grouped: Dict[StructureType, List[TemplateEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.kind, []).append(entry)
    return grouped


def validate_templates(stamps: Iterable[Iterable[TemplateEntry]] = (
    CORE_STAMP, FAST_FILL_EXTENSIONS, LAB_STAMP, SUPPORT_STRUCTURES,
)) -> None:
    """Raise ``ValueError`` if two non-road, non-rampart entries share an offset."""
    seen: Dict[Offset, TemplateEntry] = {}
    for stamp in stamps:
        for entry in stamp:
            if entry.kind in (StructureType.ROAD, StructureType.RAMPART):
                continue
            previous = seen.get(entry.offset)
            if previous is not None:
                raise ValueError(
                    f"Template collision at offset {tuple(entry.offset)}: "
                    f"{previous.kind.value} and {entry.kind.value}"
                )
            seen[entry.offset] = entry


validate_templates()
