"""
BasePlanner - assembles a room's base layout once and then keeps the live room
converging toward it, a few placements per tick.

Execution flow per invocation:
1. Room not owned → drop the stored plan and stop.
2. No stored plan, or one from an older PLANNER_VERSION → assemble a new plan
   (anchor selection, stamping, extension lattice, upgrade pad, roads to
   objectives) and persist it. If no anchor exists, try again next tick.
3. Maintenance: cancel stray construction sites, demolish misplaced roads,
   place missing structures, place missing roads, all within per-tick and
   global quotas.

Everything is idempotent: maintenance compares desired state against what the
room reports right now and never remembers past attempts, so a rejected call
is simply re-evaluated on the next tick.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .anchor import AnchorSelector
from .config import PlannerLimits
from .constants import (
    MAX_LEVEL,
    REMOVABLE_STRUCTURES,
    StructureType,
    structure_cap,
)
from .environment import (
    CostMatrix,
    TerrainGrid,
    distance_transform,
    flood_fill,
    render_plan_overlay,
    tiles_in_range,
)
from .layouts import (
    CORE_ROADS,
    CORE_STAMP,
    EXTENSION_GRID,
    FAST_FILL_EXTENSIONS,
    LAB_STAMP,
    SUPPORT_STRUCTURES,
    Offset,
    RoadEntry,
    TemplateEntry,
)
from .logging_utils import log_debug, log_deterministic, log_error, log_info, log_success
from .persistence import PlanStore
from .schemas import (
    BasePlan,
    MaintenanceReport,
    PlannedRoad,
    PlannedStructure,
    Position,
    StructureState,
)
from .world import ActionResult, RoomView

# Bump whenever the template library changes incompatibly; stored plans with a
# different version are discarded and recomputed.
PLANNER_VERSION = 2

Coord = Tuple[int, int]

# Upgrade work pad around the controller.
UPGRADE_RANGE = 3
UPGRADE_PAD_SIZE = 5
UPGRADE_LINK_ANCHOR_RANGE = 6

# Level gates for auxiliary structures.
UPGRADE_CONTAINER_LEVEL = 2
UPGRADE_LINK_LEVEL = 5
SOURCE_ROAD_LEVEL = 2
CONTROLLER_ROAD_LEVEL = 3
SOURCE_CONTAINER_LEVEL = 2
SOURCE_LINK_LEVEL = 6
MINERAL_LEVEL = 6


class PlanBuilder:
    """Accumulates plan entries under the stamp-then-evict rule.

    * A structure evicts a road reservation on its tile.
    * A road never displaces a structure; it is skipped instead.
    * Ramparts neither evict nor block anything.
    * Tiles on walls or outside the room interior are skipped.
    """

    def __init__(self, terrain: TerrainGrid, anchor: Position):
        self.terrain = terrain
        self.anchor = anchor
        self.structures: List[PlannedStructure] = []
        self.blocked: Set[Coord] = set()
        self.roads: Dict[Coord, PlannedRoad] = {}
        self._ramparts: Set[Coord] = set()

    def translate(self, offset: Offset) -> Optional[Coord]:
        x, y = self.anchor.x + offset.dx, self.anchor.y + offset.dy
        if not self.terrain.in_bounds(x, y):
            return None
        return x, y

    def accepts(self, x: int, y: int) -> bool:
        return self.terrain.is_interior(x, y) and not self.terrain.is_wall(x, y)

    def add_structure(self, kind: StructureType, x: int, y: int, level: int) -> bool:
        """Reserve a tile for a structure. Returns False if the tile was refused."""
        if not self.accepts(x, y):
            return False
        key = (x, y)
        if kind == StructureType.RAMPART:
            if key in self._ramparts:
                return False
            self._ramparts.add(key)
        elif kind == StructureType.ROAD:
            return self.add_road(x, y, level)
        else:
            if key in self.blocked:
                return False
            self.roads.pop(key, None)
            self.blocked.add(key)
        self.structures.append(PlannedStructure(kind=kind, x=x, y=y, level=level))
        return True

    def add_road(self, x: int, y: int, level: int = 1) -> bool:
        if not self.accepts(x, y):
            return False
        key = (x, y)
        if key in self.roads or key in self.blocked:
            return False
        self.roads[key] = PlannedRoad(x=x, y=y, level=level)
        return True

    def stamp_structures(self, stamp: Iterable[TemplateEntry]) -> List[Coord]:
        """Translate and add a stamp; returns the tiles actually reserved."""
        placed: List[Coord] = []
        for entry in stamp:
            tile = self.translate(entry.offset)
            if tile is None:
                continue
            if self.add_structure(entry.kind, tile[0], tile[1], entry.level):
                placed.append(tile)
        return placed

    def stamp_roads(self, roads: Iterable[RoadEntry]) -> None:
        for entry in roads:
            tile = self.translate(entry.offset)
            if tile is not None:
                self.add_road(tile[0], tile[1], entry.level)

    def count(self, kind: StructureType) -> int:
        return sum(1 for entry in self.structures if entry.kind == kind)

    def first(self, kind: StructureType) -> Optional[PlannedStructure]:
        return next((entry for entry in self.structures if entry.kind == kind), None)


class BasePlanner:
    """Plans and maintains the base layout of owned rooms.

    Stateless between calls apart from the injected ``PlanStore``; one planner
    instance can serve any number of rooms.
    """

    def __init__(self, store: PlanStore, limits: Optional[PlannerLimits] = None):
        self.store = store
        self.limits = limits or PlannerLimits.from_config()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, room: RoomView, tick: int) -> Optional[MaintenanceReport]:
        """Plan (if needed) and maintain one room for this tick.

        Returns None when the room is not owned or no plan could be made yet.
        """
        if not room.is_owned:
            if self.store.get_plan(room.name) is not None:
                log_info(f"[Planner] {room.name} lost; clearing stored plan")
                self.store.delete_plan(room.name)
            return None

        planned = False
        plan = self.store.get_plan(room.name)
        if plan is not None and plan.version != PLANNER_VERSION:
            log_info(
                f"[Planner] {room.name} plan version {plan.version} is stale "
                f"(current {PLANNER_VERSION}); replanning"
            )
            plan = None

        if plan is None:
            plan = self.compute_plan(room, tick)
            if plan is None:
                log_error(f"[Planner] {room.name}: no valid anchor; will retry")
                return None
            self.store.save_plan(plan)
            planned = True
            log_success(
                f"[Planner] {room.name}: plan v{plan.version} anchored at "
                f"({plan.anchor.x}, {plan.anchor.y}) with {len(plan.structures)} structures "
                f"and {len(plan.roads)} roads"
            )
            log_debug(render_plan_overlay(room.terrain, plan))

        report = self.maintain(room, plan)
        report.planned = planned

        interval = self.limits.visualize_interval
        if not planned and interval and tick % interval == 0:
            log_debug(render_plan_overlay(room.terrain, plan))

        return report

    # ------------------------------------------------------------------
    # Plan assembly
    # ------------------------------------------------------------------

    def compute_plan(self, room: RoomView, tick: int = 0) -> Optional[BasePlan]:
        """Assemble a full plan, or None when the room offers no anchor."""
        terrain = room.terrain
        distance = distance_transform(terrain)
        anchor = AnchorSelector(room).select(distance)
        if anchor is None:
            return None
        log_deterministic(f"[Planner] {room.name}: anchor ({anchor.x}, {anchor.y})")

        builder = PlanBuilder(terrain, anchor)
        builder.stamp_structures(CORE_STAMP)
        builder.stamp_structures(FAST_FILL_EXTENSIONS)
        builder.stamp_structures(SUPPORT_STRUCTURES)
        builder.stamp_roads(CORE_ROADS)
        lab_tiles = builder.stamp_structures(LAB_STAMP)

        self._place_extension_lattice(builder, terrain)

        plan = BasePlan(
            version=PLANNER_VERSION,
            room=room.name,
            anchor=anchor,
            generated=tick,
            lab_positions=[Position(x=x, y=y) for x, y in lab_tiles],
        )
        self._plan_upgrade_site(builder, room, plan)
        self._plan_objective_roads(builder, room, plan)

        plan.structures = builder.structures
        plan.roads = list(builder.roads.values())
        return plan

    def _place_extension_lattice(self, builder: PlanBuilder, terrain: TerrainGrid) -> None:
        """Fill the checkerboard lattice nearest-first until the extension cap."""
        flood = flood_fill(terrain, [builder.anchor.key])
        unreachable = terrain.width * terrain.height

        def reach(entry: TemplateEntry) -> int:
            tile = builder.translate(entry.offset)
            if tile is None:
                return unreachable
            value = flood[tile[1]][tile[0]]
            return unreachable if value < 0 else value

        cap = structure_cap(StructureType.EXTENSION, MAX_LEVEL)
        placed = builder.count(StructureType.EXTENSION)
        for entry in sorted(EXTENSION_GRID, key=reach):
            if placed >= cap:
                break
            tile = builder.translate(entry.offset)
            if tile is None:
                continue
            if builder.add_structure(entry.kind, tile[0], tile[1], entry.level):
                placed += 1

    def _plan_upgrade_site(self, builder: PlanBuilder, room: RoomView, plan: BasePlan) -> None:
        """Work pad, relay container and relay link around the controller."""
        controller = room.controller
        if controller is None:
            return

        occupied = {p.key for p in [*room.sources(), *room.minerals(), controller]}
        candidates = [
            tile
            for tile in tiles_in_range(room.terrain, controller.key, UPGRADE_RANGE)
            if tile not in occupied and tile not in builder.blocked
        ]
        if not candidates:
            return

        candidates.sort(key=lambda tile: plan.anchor.range_to(*tile))
        pad = candidates[:UPGRADE_PAD_SIZE]
        container = pad[0]
        # relay link stays within link range of the anchor
        link = next(
            (
                tile
                for tile in pad
                if controller.range_to(*tile) <= UPGRADE_RANGE
                and plan.anchor.range_to(*tile) <= UPGRADE_LINK_ANCHOR_RANGE
            ),
            None,
        )
        if link == container:
            link = next(
                (tile for tile in pad[1:] if controller.range_to(*tile) <= UPGRADE_RANGE), None
            )

        plan.upgrade_positions = [Position(x=x, y=y) for x, y in pad]
        if builder.add_structure(StructureType.CONTAINER, *container, UPGRADE_CONTAINER_LEVEL):
            plan.upgrade_container = Position(x=container[0], y=container[1])
        if link is not None and builder.add_structure(StructureType.LINK, *link, UPGRADE_LINK_LEVEL):
            plan.upgrade_link = Position(x=link[0], y=link[1])

    def _plan_objective_roads(self, builder: PlanBuilder, room: RoomView, plan: BasePlan) -> None:
        """Roads from storage to sources, controller and mineral, with endpoint structures.

        A goal whose search comes back incomplete contributes nothing.
        """
        storage = builder.first(StructureType.STORAGE)
        if storage is None:
            return

        costs = CostMatrix()
        for x, y in builder.blocked:
            costs.block(x, y)
        for obj in [*room.sources(), *room.minerals()]:
            costs.block(obj.x, obj.y)
        if room.controller is not None:
            costs.block(room.controller.x, room.controller.y)
        costs.set(storage.x, storage.y, 1)

        goals: List[Tuple[str, Position, int]] = [("source", source, 1) for source in room.sources()]
        if room.controller is not None:
            goals.append(("controller", room.controller, UPGRADE_RANGE))
        minerals = room.minerals()
        if minerals:
            goals.append(("mineral", minerals[0], 1))

        for kind, target, goal_range in goals:
            result = room.find_path(
                (storage.x, storage.y),
                target.key,
                range=goal_range,
                costs=costs,
                max_ops=self.limits.path_max_ops,
            )
            if result.incomplete or not result.path:
                if result.incomplete:
                    log_error(
                        f"[Planner] {room.name}: no road to {kind} at ({target.x}, {target.y})"
                    )
                continue

            road_level = CONTROLLER_ROAD_LEVEL if kind == "controller" else SOURCE_ROAD_LEVEL
            for x, y in result.path:
                builder.add_road(x, y, road_level)

            end = result.path[-1]
            if kind == "source":
                if builder.add_structure(StructureType.CONTAINER, *end, SOURCE_CONTAINER_LEVEL):
                    plan.source_containers.append(Position(x=end[0], y=end[1]))
                    costs.block(*end)
                if len(result.path) >= 2:
                    retreat = result.path[-2]
                    if builder.add_structure(StructureType.LINK, *retreat, SOURCE_LINK_LEVEL):
                        plan.source_links.append(Position(x=retreat[0], y=retreat[1]))
                        costs.block(*retreat)
            elif kind == "mineral":
                if builder.add_structure(StructureType.CONTAINER, *end, MINERAL_LEVEL):
                    plan.mineral_container = Position(x=end[0], y=end[1])
                    costs.block(*end)
                if builder.add_structure(StructureType.EXTRACTOR, target.x, target.y, MINERAL_LEVEL):
                    plan.extractor = Position(x=target.x, y=target.y)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def maintain(self, room: RoomView, plan: BasePlan) -> MaintenanceReport:
        """Reconcile the live room against ``plan`` for the current level."""
        report = MaintenanceReport()
        level = room.level
        if level <= 0:
            return report

        desired_structures = plan.desired_structures(level)
        desired_roads = plan.desired_roads(level)
        desired_kinds: Dict[Coord, StructureType] = {
            (entry.x, entry.y): entry.kind for entry in desired_structures
        }
        desired_road_tiles: Set[Coord] = {(road.x, road.y) for road in desired_roads}

        self._clean_construction_sites(room, plan, desired_kinds, desired_road_tiles, report)
        budget = self._remove_misplaced_roads(
            room, plan, desired_road_tiles, self.limits.max_removals_per_tick, report
        )

        global_sites = room.global_site_count()
        global_sites, budget = self._build_missing_structures(
            room, plan, desired_structures, level, global_sites, budget, report
        )
        self._build_missing_roads(room, desired_roads, global_sites, report)

        if report.total_calls:
            log_debug(
                f"[Planner] {room.name}: placed {report.structure_sites_placed} structure "
                f"and {report.road_sites_placed} road sites, removed {report.removals}"
            )
        return report

    def within_cleanup_bounds(self, x: int, y: int, anchor: Position) -> bool:
        return anchor.range_to(x, y) <= self.limits.cleanup_radius

    def _clean_construction_sites(
        self,
        room: RoomView,
        plan: BasePlan,
        desired_kinds: Dict[Coord, StructureType],
        desired_road_tiles: Set[Coord],
        report: MaintenanceReport,
    ) -> None:
        for site in room.construction_sites():
            if not site.my or not self.within_cleanup_bounds(site.x, site.y, plan.anchor):
                continue
            if site.kind == StructureType.ROAD:
                wanted = (site.x, site.y) in desired_road_tiles
            else:
                wanted = desired_kinds.get((site.x, site.y)) == site.kind
            if wanted:
                continue
            if room.remove_construction_site(site) == ActionResult.OK:
                report.sites_removed += 1

    def _remove_misplaced_roads(
        self,
        room: RoomView,
        plan: BasePlan,
        desired_road_tiles: Set[Coord],
        budget: int,
        report: MaintenanceReport,
    ) -> int:
        if budget <= 0:
            return budget
        for road in room.structures():
            if road.kind != StructureType.ROAD:
                continue
            if not self.within_cleanup_bounds(road.x, road.y, plan.anchor):
                continue
            if (road.x, road.y) in desired_road_tiles:
                continue
            if room.destroy_structure(road) == ActionResult.OK:
                report.roads_removed += 1
                budget -= 1
                if budget <= 0:
                    break
        return budget

    def _build_missing_structures(
        self,
        room: RoomView,
        plan: BasePlan,
        desired: List[PlannedStructure],
        level: int,
        global_sites: int,
        budget: int,
        report: MaintenanceReport,
    ) -> Tuple[int, int]:
        ceiling = self.limits.global_site_ceiling
        if global_sites >= ceiling:
            return global_sites, budget

        built: Counter = Counter(s.kind for s in room.structures() if s.my is not False)
        pending: Counter = Counter(s.kind for s in room.construction_sites() if s.my)
        placements = 0

        for entry in desired:
            if placements >= self.limits.max_structure_sites_per_tick or global_sites >= ceiling:
                break
            if self._has_structure(room, entry.x, entry.y, entry.kind):
                continue
            if self._has_site(room, entry.x, entry.y, entry.kind):
                continue

            blocking = self._blockers(room, entry.x, entry.y, entry.kind)
            if blocking and budget > 0 and self.within_cleanup_bounds(entry.x, entry.y, plan.anchor):
                for structure in blocking:
                    if structure.kind not in REMOVABLE_STRUCTURES:
                        continue
                    if room.destroy_structure(structure) == ActionResult.OK:
                        budget -= 1
                        report.structures_evicted += 1
                        if structure.my is not False:
                            built[structure.kind] -= 1
                        break
                if self._has_structure(room, entry.x, entry.y, entry.kind):
                    continue
                if self._has_site(room, entry.x, entry.y, entry.kind):
                    continue
                blocking = self._blockers(room, entry.x, entry.y, entry.kind)
            if blocking:
                continue

            if built[entry.kind] + pending[entry.kind] >= structure_cap(entry.kind, level):
                continue

            result = room.create_construction_site(entry.x, entry.y, entry.kind)
            if result == ActionResult.OK:
                placements += 1
                global_sites += 1
                pending[entry.kind] += 1
                report.structure_sites_placed += 1
            else:
                log_debug(
                    f"[Planner] {room.name}: {entry.kind.value} at ({entry.x}, {entry.y}) "
                    f"rejected ({result.value})"
                )

        return global_sites, budget

    def _build_missing_roads(
        self,
        room: RoomView,
        desired: List[PlannedRoad],
        global_sites: int,
        report: MaintenanceReport,
    ) -> int:
        ceiling = self.limits.global_site_ceiling
        limit = self.limits.max_road_sites_per_tick
        if global_sites >= ceiling or limit <= 0:
            return global_sites

        placements = 0
        for road in desired:
            if placements >= limit or global_sites >= ceiling:
                break
            if self._has_structure(room, road.x, road.y, StructureType.ROAD):
                continue
            if self._has_site(room, road.x, road.y, StructureType.ROAD):
                continue
            if self._blockers(room, road.x, road.y, StructureType.ROAD):
                continue

            result = room.create_construction_site(road.x, road.y, StructureType.ROAD)
            if result == ActionResult.OK:
                placements += 1
                global_sites += 1
                report.road_sites_placed += 1
            else:
                log_debug(f"[Planner] {room.name}: road at ({road.x}, {road.y}) rejected ({result.value})")

        return global_sites

    @staticmethod
    def _has_structure(room: RoomView, x: int, y: int, kind: StructureType) -> bool:
        return any(s.kind == kind for s in room.structures_at(x, y))

    @staticmethod
    def _has_site(room: RoomView, x: int, y: int, kind: StructureType) -> bool:
        return any(s.kind == kind for s in room.sites_at(x, y))

    @staticmethod
    def _blockers(room: RoomView, x: int, y: int, kind: StructureType) -> List[StructureState]:
        return [
            s for s in room.structures_at(x, y)
            if s.kind not in (StructureType.RAMPART, kind)
        ]
