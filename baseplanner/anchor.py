"""
Anchor selection: the single tile every template offset is translated from.

Two strategies, tried in order by ``AnchorSelector.select``:

1. derive_from_existing_base - back-project owned structures and sites through
   every template offset of their kind and keep the best-supported anchor.
   Rebuilding around a base that was started by hand (or by an older planner
   version) preserves what is already standing.
2. select_from_scratch - scan the interior for the deepest tile whose whole
   footprint fits, nudged toward the controller and the energy sources.

The scoring constants are tuned heuristics. What matters is the shape: deep
interior, close to objectives, aligned with existing structures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from .constants import StructureType
from .environment.helpers import Matrix
from .layouts import (
    ANCHOR_BUFFER,
    ANCHOR_TEMPLATE_ENTRIES,
    FOOTPRINT,
    REFERENCE_ANCHOR_STRUCTURES,
    entries_by_kind,
)
from .schemas import Position
from .world import RoomView


# How strongly a matching structure of each kind votes for an anchor.
ANCHOR_WEIGHTS: Dict[StructureType, int] = {
    StructureType.SPAWN: 12,
    StructureType.STORAGE: 8,
    StructureType.TERMINAL: 7,
    StructureType.TOWER: 5,
    StructureType.LINK: 4,
    StructureType.EXTENSION: 2,
    StructureType.FACTORY: 3,
    StructureType.OBSERVER: 2,
    StructureType.POWER_SPAWN: 3,
    StructureType.LAB: 2,
    StructureType.NUKER: 1,
}

# Kinds that make a candidate "primary" (derived from the heart of a base).
PRIMARY_KINDS = frozenset({StructureType.SPAWN, StructureType.STORAGE})
PRIMARY_BONUS = 5
ALIGNMENT_WEIGHT = 3

# Candidates this close to the room edge are rejected.
DERIVED_BORDER = 2

MIN_ANCHOR_DEPTH = 3


@dataclass
class AnchorCandidate:
    x: int
    y: int
    score: int = 0
    primary: bool = False


class AnchorSelector:
    """Chooses the anchor for a room from its live state and terrain."""

    def __init__(self, room: RoomView):
        self.room = room
        self.terrain = room.terrain

    def select(self, distance: Matrix) -> Optional[Position]:
        return self.derive_from_existing_base() or self.select_from_scratch(distance)

    def derive_from_existing_base(self) -> Optional[Position]:
        """Infer the anchor from structures and sites that already match templates.

        Returns None when nothing in the room matches a template kind, or no
        candidate survives the border, wall and alignment filters.
        """
        by_kind = entries_by_kind(ANCHOR_TEMPLATE_ENTRIES)
        candidates: Dict[Tuple[int, int], AnchorCandidate] = {}
        width, height = self.terrain.width, self.terrain.height

        def register(x: int, y: int, kind: StructureType) -> None:
            weight = ANCHOR_WEIGHTS.get(kind, 1)
            for entry in by_kind.get(kind, []):
                ax, ay = x - entry.offset.dx, y - entry.offset.dy
                if not (
                    DERIVED_BORDER <= ax < width - DERIVED_BORDER
                    and DERIVED_BORDER <= ay < height - DERIVED_BORDER
                ):
                    continue
                if self.terrain.is_wall(ax, ay):
                    continue
                candidate = candidates.setdefault((ax, ay), AnchorCandidate(ax, ay))
                candidate.score += weight
                if kind in PRIMARY_KINDS:
                    candidate.primary = True

        for structure in self.room.structures():
            if structure.my is False or structure.kind not in by_kind:
                continue
            register(structure.x, structure.y, structure.kind)

        for site in self.room.construction_sites():
            if not site.my or site.kind not in by_kind:
                continue
            register(site.x, site.y, site.kind)

        owned = self._owned_kinds()
        best: Optional[AnchorCandidate] = None
        best_score: Optional[int] = None
        for candidate in candidates.values():
            alignment = self.count_alignment(candidate.x, candidate.y, owned)
            if alignment == 0 and not candidate.primary:
                continue
            total = (
                candidate.score
                + alignment * ALIGNMENT_WEIGHT
                + (PRIMARY_BONUS if candidate.primary else 0)
            )
            if best_score is None or total > best_score:
                best, best_score = candidate, total

        if best is None:
            return None
        return Position(x=best.x, y=best.y)

    def count_alignment(
        self, ax: int, ay: int, owned: Optional[Dict[Tuple[int, int], Set[StructureType]]] = None
    ) -> int:
        """How many reference template tiles already hold a matching structure or site."""
        if owned is None:
            owned = self._owned_kinds()

        matches = 0
        for entry in REFERENCE_ANCHOR_STRUCTURES:
            x, y = ax + entry.offset.dx, ay + entry.offset.dy
            if not self.terrain.in_bounds(x, y):
                continue
            if entry.kind in owned.get((x, y), ()):
                matches += 1
        return matches

    def _owned_kinds(self) -> Dict[Tuple[int, int], Set[StructureType]]:
        owned: Dict[Tuple[int, int], Set[StructureType]] = {}
        for structure in self.room.structures():
            if structure.my is False:
                continue
            owned.setdefault((structure.x, structure.y), set()).add(structure.kind)
        for site in self.room.construction_sites():
            if site.my:
                owned.setdefault((site.x, site.y), set()).add(site.kind)
        return owned

    def select_from_scratch(self, distance: Matrix) -> Optional[Position]:
        """Grid search for the deepest interior tile that fits the whole footprint."""
        controller = self.room.controller
        sources: List[Position] = self.room.sources()
        width, height = self.terrain.width, self.terrain.height

        best: Optional[Position] = None
        best_score: Optional[int] = None
        for y in range(ANCHOR_BUFFER, height - ANCHOR_BUFFER):
            for x in range(ANCHOR_BUFFER, width - ANCHOR_BUFFER):
                depth = distance[y][x]
                if depth < MIN_ANCHOR_DEPTH or self.terrain.is_wall(x, y):
                    continue
                if not self.footprint_fits(x, y):
                    continue

                score = depth * 5
                if controller is not None:
                    score -= controller.range_to(x, y) * 2
                for source in sources:
                    score -= source.range_to(x, y)

                if best_score is None or score > best_score:
                    best, best_score = Position(x=x, y=y), score

        return best

    def footprint_fits(self, ax: int, ay: int) -> bool:
        for entry in FOOTPRINT:
            x, y = ax + entry.offset.dx, ay + entry.offset.dy
            if not self.terrain.is_interior(x, y) or self.terrain.is_wall(x, y):
                return False
        return True
