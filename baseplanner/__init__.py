"""
Baseplanner - automated base layout planning for grid-based rooms.

Chooses an anchor, stamps a templated layout onto the terrain, persists the
result as a versioned plan, and then keeps the live room converging toward
that plan a few placements per tick.

No global world access: terrain, structures and side effects go through an
injected RoomView; plans go through an injected PlanStore.
"""

__version__ = "0.1.0"

# Main planner
from .planner import BasePlanner, PlanBuilder, PLANNER_VERSION

# Core interfaces
from .world import RoomView, InMemoryRoom, ActionResult
from .persistence import PlanStore, InMemoryPlanStore, JsonPlanStore
from .anchor import AnchorSelector
from .config import Config, PlannerLimits
from .constants import StructureType, Terrain

# Schemas
from .schemas import (
    BasePlan,
    PlannedStructure,
    PlannedRoad,
    Position,
    StructureState,
    ConstructionSiteState,
    MaintenanceReport,
)

# Grid helpers
from .environment import (
    TerrainGrid,
    CostMatrix,
    PathResult,
    distance_transform,
    flood_fill,
    search_path,
    render_plan_overlay,
)

# Scenario helpers
from .scenario import RoomScenarioLoader, load_room

__all__ = [
    # Main class
    "BasePlanner",
    "PlanBuilder",
    "PLANNER_VERSION",
    # Core interfaces
    "RoomView",
    "InMemoryRoom",
    "ActionResult",
    "PlanStore",
    "InMemoryPlanStore",
    "JsonPlanStore",
    "AnchorSelector",
    "Config",
    "PlannerLimits",
    "StructureType",
    "Terrain",
    # Schemas
    "BasePlan",
    "PlannedStructure",
    "PlannedRoad",
    "Position",
    "StructureState",
    "ConstructionSiteState",
    "MaintenanceReport",
    # Grid helpers
    "TerrainGrid",
    "CostMatrix",
    "PathResult",
    "distance_transform",
    "flood_fill",
    "search_path",
    "render_plan_overlay",
    # Scenario helpers
    "RoomScenarioLoader",
    "load_room",
]
