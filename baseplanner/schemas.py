"""
Pydantic schemas for plans and live-world snapshots.

The ``BasePlan`` is what gets persisted per room. Role coordinators read it to
find the anchor, the upgrade pad and the relay container/link, so the
auxiliary point sets are stored explicitly rather than re-derived.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from .constants import StructureType


# ============================================================================
# Plan Schemas
# ============================================================================


class Position(BaseModel):
    """A tile inside the room."""

    x: int = Field(..., ge=0, description="Column")
    y: int = Field(..., ge=0, description="Row")

    @property
    def key(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def range_to(self, x: int, y: int) -> int:
        """Chebyshev range to another tile."""
        return max(abs(self.x - x), abs(self.y - y))


class PlannedStructure(BaseModel):
    """A structure the plan wants at an absolute tile once ``level`` is reached."""

    kind: StructureType
    x: int
    y: int
    level: int = Field(1, ge=0, description="Minimum controller level")


class PlannedRoad(BaseModel):
    """A road tile; plans stored before road gating existed default to level 1."""

    x: int
    y: int
    level: int = Field(1, ge=0, description="Minimum controller level")


class BasePlan(BaseModel):
    """Persisted base layout for one room.

    Created once per planner version; afterwards only read by the maintenance
    pass. ``version`` forces a full recomputation whenever the template library
    changes incompatibly.
    """

    version: int = Field(..., description="Planner version that produced the plan")
    room: str = Field(..., description="Room name")
    anchor: Position = Field(..., description="Reference tile for every template offset")
    generated: int = Field(0, ge=0, description="Tick at which the plan was assembled")
    structures: List[PlannedStructure] = Field(default_factory=list)
    roads: List[PlannedRoad] = Field(default_factory=list)
    # Auxiliary point sets consumed by role coordinators.
    upgrade_positions: List[Position] = Field(
        default_factory=list, description="Work pad tiles around the controller"
    )
    lab_positions: List[Position] = Field(default_factory=list)
    upgrade_container: Optional[Position] = None
    upgrade_link: Optional[Position] = None
    source_containers: List[Position] = Field(default_factory=list)
    source_links: List[Position] = Field(default_factory=list)
    mineral_container: Optional[Position] = None
    extractor: Optional[Position] = None

    def desired_structures(self, level: int) -> List[PlannedStructure]:
        return [entry for entry in self.structures if entry.level <= level]

    def desired_roads(self, level: int) -> List[PlannedRoad]:
        return [road for road in self.roads if road.level <= level]

    def structures_of(self, kind: StructureType) -> List[PlannedStructure]:
        return [entry for entry in self.structures if entry.kind == kind]


# ============================================================================
# Live World Schemas
# ============================================================================


class StructureState(BaseModel):
    """A built structure as reported by the room view.

    ``my`` is ``None`` for ownerless kinds (roads, containers, walls).
    """

    id: str
    kind: StructureType
    x: int
    y: int
    my: Optional[bool] = None


class ConstructionSiteState(BaseModel):
    """A pending placement request."""

    id: str
    kind: StructureType
    x: int
    y: int
    my: bool = True


@dataclass
class MaintenanceReport:
    """Side effects issued by one planner invocation."""

    planned: bool = False
    sites_removed: int = 0
    roads_removed: int = 0
    structures_evicted: int = 0
    structure_sites_placed: int = 0
    road_sites_placed: int = 0

    @property
    def placements(self) -> int:
        return self.structure_sites_placed + self.road_sites_placed

    @property
    def removals(self) -> int:
        return self.sites_removed + self.roads_removed + self.structures_evicted

    @property
    def total_calls(self) -> int:
        return self.placements + self.removals
