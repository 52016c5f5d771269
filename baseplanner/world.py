"""
RoomView interface for reading and mutating the live world.

The planner never reaches for globals: everything it knows about a room
(terrain, controller, structures, pending sites) and every side effect it
issues goes through a ``RoomView``. Hosts wrap their native API in a subclass;
``InMemoryRoom`` is the deterministic implementation used by tests and the
example driver.

Mutations return an ``ActionResult`` instead of raising. Rejections are normal
(tile occupied, global site limit reached, controller too low) and the planner
simply re-evaluates on the next tick.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from itertools import count
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    MAX_CONSTRUCTION_SITES,
    OWNERLESS_STRUCTURES,
    StructureType,
    structure_cap,
)
from .environment import CostMatrix, PathResult, TerrainGrid, search_path
from .schemas import ConstructionSiteState, Position, StructureState


class ActionResult(str, Enum):
    """Outcome of a world mutation."""

    OK = "ok"
    NOT_OWNER = "not_owner"
    NOT_FOUND = "not_found"
    INVALID_TARGET = "invalid_target"
    FULL = "full"
    RCL_NOT_ENOUGH = "rcl_not_enough"


class RoomView(ABC):
    """Read/write access to one room of the live world."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Room name."""

    @property
    @abstractmethod
    def is_owned(self) -> bool:
        """Whether the controlling entity owns the room's controller."""

    @property
    @abstractmethod
    def level(self) -> int:
        """Controller level (0 when unowned or missing)."""

    @property
    @abstractmethod
    def controller(self) -> Optional[Position]:
        """Position of the upgrade objective, if the room has one."""

    @property
    @abstractmethod
    def terrain(self) -> TerrainGrid:
        """Immutable terrain grid."""

    @abstractmethod
    def sources(self) -> List[Position]:
        """Energy source positions."""

    @abstractmethod
    def minerals(self) -> List[Position]:
        """Mineral deposit positions."""

    @abstractmethod
    def structures(self) -> List[StructureState]:
        """All built structures in the room, any owner."""

    @abstractmethod
    def construction_sites(self) -> List[ConstructionSiteState]:
        """Own pending construction sites in the room."""

    @abstractmethod
    def global_site_count(self) -> int:
        """Own pending construction sites across every room."""

    @abstractmethod
    def create_construction_site(self, x: int, y: int, kind: StructureType) -> ActionResult:
        """Request a new placement."""

    @abstractmethod
    def remove_construction_site(self, site: ConstructionSiteState) -> ActionResult:
        """Cancel a pending placement."""

    @abstractmethod
    def destroy_structure(self, structure: StructureState) -> ActionResult:
        """Demolish a built structure."""

    def structures_at(self, x: int, y: int) -> List[StructureState]:
        return [s for s in self.structures() if s.x == x and s.y == y]

    def sites_at(self, x: int, y: int) -> List[ConstructionSiteState]:
        return [s for s in self.construction_sites() if s.x == x and s.y == y]

    def find_path(
        self,
        origin: Tuple[int, int],
        goal: Tuple[int, int],
        *,
        range: int,
        costs: CostMatrix,
        max_ops: int,
    ) -> PathResult:
        """Pathfinding primitive; hosts with a native pathfinder override this."""
        return search_path(self.terrain, origin, goal, range=range, costs=costs, max_ops=max_ops)


class InMemoryRoom(RoomView):
    """Dict-backed room used for tests, scenarios and offline simulation.

    Placement rules follow the host closely enough for the planner's purposes:
    no building on walls or the room edge, one site per tile, no site on a tile
    already holding a non-road/non-rampart structure (roads and ramparts stack
    with anything), per-kind caps counted over structures plus sites, and a
    global ceiling on pending sites. Every successful or rejected mutation is
    appended to ``calls`` as ``(action, kind, x, y, result)``.
    """

    def __init__(
        self,
        name: str,
        terrain: TerrainGrid,
        *,
        level: int = 1,
        owned: bool = True,
        controller: Optional[Tuple[int, int]] = None,
        sources: Sequence[Tuple[int, int]] = (),
        minerals: Sequence[Tuple[int, int]] = (),
        extra_global_sites: int = 0,
    ):
        self._name = name
        self._terrain = terrain
        self._level = level
        self._owned = owned
        self._controller = Position(x=controller[0], y=controller[1]) if controller else None
        self._sources = [Position(x=x, y=y) for x, y in sources]
        self._minerals = [Position(x=x, y=y) for x, y in minerals]
        # Sites held in other rooms; counts toward the global ceiling.
        self.extra_global_sites = extra_global_sites
        self._structures: Dict[str, StructureState] = {}
        self._sites: Dict[str, ConstructionSiteState] = {}
        self._ids = count(1)
        self.calls: List[Tuple[str, str, int, int, ActionResult]] = []

    # -- RoomView reads -----------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_owned(self) -> bool:
        return self._owned

    @property
    def level(self) -> int:
        return self._level if self._owned else 0

    @property
    def controller(self) -> Optional[Position]:
        return self._controller

    @property
    def terrain(self) -> TerrainGrid:
        return self._terrain

    def sources(self) -> List[Position]:
        return list(self._sources)

    def minerals(self) -> List[Position]:
        return list(self._minerals)

    def structures(self) -> List[StructureState]:
        return list(self._structures.values())

    def construction_sites(self) -> List[ConstructionSiteState]:
        return list(self._sites.values())

    def global_site_count(self) -> int:
        return len(self._sites) + self.extra_global_sites

    # -- Scenario setup -----------------------------------------------------

    def set_level(self, level: int) -> None:
        self._level = level

    def set_owned(self, owned: bool) -> None:
        self._owned = owned

    def add_structure(
        self, kind: StructureType, x: int, y: int, *, my: Optional[bool] = None
    ) -> StructureState:
        """Place a finished structure directly, bypassing placement rules."""
        if my is None and kind not in OWNERLESS_STRUCTURES:
            my = True
        structure = StructureState(id=f"s{next(self._ids)}", kind=kind, x=x, y=y, my=my)
        self._structures[structure.id] = structure
        return structure

    def add_site(self, kind: StructureType, x: int, y: int) -> ConstructionSiteState:
        """Place a pending site directly, bypassing placement rules."""
        site = ConstructionSiteState(id=f"c{next(self._ids)}", kind=kind, x=x, y=y)
        self._sites[site.id] = site
        return site

    def complete_construction_sites(self, limit: Optional[int] = None) -> int:
        """Turn pending sites into structures, oldest first. Returns how many."""
        finished = 0
        for site in list(self._sites.values()):
            if limit is not None and finished >= limit:
                break
            del self._sites[site.id]
            self.add_structure(site.kind, site.x, site.y)
            finished += 1
        return finished

    def clear_calls(self) -> None:
        self.calls.clear()

    # -- RoomView mutations -------------------------------------------------

    def create_construction_site(self, x: int, y: int, kind: StructureType) -> ActionResult:
        result = self._check_placement(x, y, kind)
        if result == ActionResult.OK:
            self.add_site(kind, x, y)
        self.calls.append(("create", kind.value, x, y, result))
        return result

    def remove_construction_site(self, site: ConstructionSiteState) -> ActionResult:
        result = ActionResult.OK if self._sites.pop(site.id, None) else ActionResult.NOT_FOUND
        self.calls.append(("remove_site", site.kind.value, site.x, site.y, result))
        return result

    def destroy_structure(self, structure: StructureState) -> ActionResult:
        if structure.id not in self._structures:
            result = ActionResult.NOT_FOUND
        elif not self._owned or structure.my is False:
            result = ActionResult.NOT_OWNER
        else:
            del self._structures[structure.id]
            result = ActionResult.OK
        self.calls.append(("destroy", structure.kind.value, structure.x, structure.y, result))
        return result

    def _check_placement(self, x: int, y: int, kind: StructureType) -> ActionResult:
        if not self._owned:
            return ActionResult.NOT_OWNER
        if not self._terrain.is_interior(x, y):
            return ActionResult.INVALID_TARGET
        if kind == StructureType.EXTRACTOR:
            if not any(m.x == x and m.y == y for m in self._minerals):
                return ActionResult.INVALID_TARGET
        elif self._terrain.is_wall(x, y) or self._occupied_by_object(x, y):
            return ActionResult.INVALID_TARGET
        if self.sites_at(x, y):
            return ActionResult.INVALID_TARGET
        if any(not _stacks(kind, s.kind) for s in self.structures_at(x, y)):
            return ActionResult.INVALID_TARGET
        if self.global_site_count() >= MAX_CONSTRUCTION_SITES:
            return ActionResult.FULL
        existing = self._count(kind, self.structures()) + self._count(kind, self.construction_sites())
        if existing >= structure_cap(kind, self.level):
            return ActionResult.RCL_NOT_ENOUGH
        return ActionResult.OK

    def _occupied_by_object(self, x: int, y: int) -> bool:
        objects: Iterable[Position] = [*self._sources, *self._minerals]
        if self._controller is not None:
            objects = [*objects, self._controller]
        return any(obj.x == x and obj.y == y for obj in objects)

    @staticmethod
    def _count(kind: StructureType, items: Iterable) -> int:
        return sum(1 for item in items if item.kind == kind and item.my is not False)


def _stacks(new: StructureType, existing: StructureType) -> bool:
    """Whether ``new`` may share a tile with ``existing``."""
    if new == existing:
        return False
    if StructureType.RAMPART in (new, existing):
        return True
    return {new, existing} == {StructureType.ROAD, StructureType.CONTAINER}
