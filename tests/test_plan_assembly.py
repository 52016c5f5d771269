"""Tests for assembling a plan from templates, terrain and objectives."""

from collections import Counter

from baseplanner.constants import StructureType
from baseplanner.environment import TerrainGrid
from baseplanner.planner import PLANNER_VERSION, BasePlanner, PlanBuilder
from baseplanner.config import PlannerLimits
from baseplanner.persistence import InMemoryPlanStore
from baseplanner.schemas import Position
from baseplanner.world import InMemoryRoom


def make_plains(terrain=None) -> InMemoryRoom:
    return InMemoryRoom(
        "W1N1",
        terrain or TerrainGrid.bordered(50),
        level=4,
        controller=(25, 9),
        sources=[(9, 30), (40, 36)],
        minerals=[(38, 8)],
    )


def compute(room):
    planner = BasePlanner(InMemoryPlanStore(), PlannerLimits(visualize_interval=0))
    return planner.compute_plan(room, tick=7)


# ---------------------------------------------------------------------------
# PlanBuilder rules
# ---------------------------------------------------------------------------


def test_structure_evicts_road_reservation():
    builder = PlanBuilder(TerrainGrid.bordered(10), Position(x=5, y=5))

    assert builder.add_road(4, 4, 2)
    assert builder.add_structure(StructureType.EXTENSION, 4, 4, 3)

    assert (4, 4) not in builder.roads
    assert (4, 4) in builder.blocked


def test_road_never_displaces_a_structure():
    builder = PlanBuilder(TerrainGrid.bordered(10), Position(x=5, y=5))
    builder.add_structure(StructureType.TOWER, 4, 4, 3)

    assert not builder.add_road(4, 4)
    assert not builder.add_structure(StructureType.ROAD, 4, 4, 1)
    assert not builder.add_structure(StructureType.LAB, 4, 4, 6)
    assert builder.count(StructureType.TOWER) == 1
    assert builder.count(StructureType.LAB) == 0


def test_ramparts_neither_evict_nor_block():
    builder = PlanBuilder(TerrainGrid.bordered(10), Position(x=5, y=5))
    builder.add_road(3, 3, 1)

    assert builder.add_structure(StructureType.RAMPART, 3, 3, 2)
    assert (3, 3) in builder.roads
    assert builder.add_structure(StructureType.SPAWN, 3, 3, 1)
    assert not builder.add_structure(StructureType.RAMPART, 3, 3, 2)


def test_walls_and_edges_are_refused():
    terrain = TerrainGrid.bordered(10).with_walls([(3, 3)])
    builder = PlanBuilder(terrain, Position(x=5, y=5))

    assert not builder.add_structure(StructureType.SPAWN, 3, 3, 1)
    assert not builder.add_structure(StructureType.SPAWN, 0, 5, 1)
    assert not builder.add_road(9, 9)
    assert builder.structures == []


# ---------------------------------------------------------------------------
# Full plans
# ---------------------------------------------------------------------------


def test_plan_metadata_and_core():
    plan = compute(make_plains())

    assert plan.version == PLANNER_VERSION
    assert plan.room == "W1N1"
    assert plan.generated == 7
    assert plan.anchor.key == (24, 24)

    spawns = plan.structures_of(StructureType.SPAWN)
    assert (spawns[0].x, spawns[0].y, spawns[0].level) == (24, 24, 1)
    storage = plan.structures_of(StructureType.STORAGE)[0]
    assert (storage.x, storage.y) == (24, 25)


def test_no_tile_holds_two_structures_or_a_structure_and_a_road():
    room = make_plains()
    plan = compute(room)

    tiles = Counter(
        (entry.x, entry.y) for entry in plan.structures if entry.kind != StructureType.RAMPART
    )
    assert all(count == 1 for count in tiles.values())

    road_tiles = {(road.x, road.y) for road in plan.roads}
    assert len(road_tiles) == len(plan.roads)
    assert not road_tiles & set(tiles)

    for x, y in [*tiles, *road_tiles]:
        assert room.terrain.is_interior(x, y)
        assert not room.terrain.is_wall(x, y)


def test_core_ring_keeps_only_free_tiles():
    plan = compute(make_plains())
    ax, ay = plan.anchor.key
    roads = {(road.x, road.y): road.level for road in plan.roads}

    # terminal and tower sit on the ring, so no road there
    assert (ax, ay - 2) not in roads
    assert (ax + 1, ay - 2) not in roads
    for dx, dy in [(-2, -2), (-1, -2), (2, -2), (-2, 2), (-1, 2), (0, 2), (1, 2), (2, 2)]:
        assert roads[(ax + dx, ay + dy)] == 2


def test_labs_and_extension_lattice():
    plan = compute(make_plains())

    assert len(plan.lab_positions) == 10
    assert {p.key for p in plan.lab_positions} == {
        (e.x, e.y) for e in plan.structures_of(StructureType.LAB)
    }
    # 6 fast-fill + 22 lattice tiles not taken by labs or support structures
    extensions = plan.structures_of(StructureType.EXTENSION)
    assert len(extensions) == 28
    assert sum(1 for e in extensions if e.level == 4) == 22


def test_upgrade_pad_and_container():
    room = make_plains()
    plan = compute(room)
    controller = room.controller

    assert len(plan.upgrade_positions) == 5
    assert all(controller.range_to(p.x, p.y) <= 3 for p in plan.upgrade_positions)
    assert controller.key not in {p.key for p in plan.upgrade_positions}

    # closest pad tile to the anchor holds the container
    assert plan.upgrade_container.key == (22, 12)
    container = [e for e in plan.structures if (e.x, e.y) == (22, 12)][0]
    assert (container.kind, container.level) == (StructureType.CONTAINER, 2)


def test_distant_controller_gets_no_relay_link():
    room = InMemoryRoom("W1N1", TerrainGrid.bordered(50), level=5, controller=(45, 45))
    plan = compute(room)

    assert plan.upgrade_container is not None
    assert min(plan.anchor.range_to(p.x, p.y) for p in plan.upgrade_positions) > 6
    assert plan.upgrade_link is None

    plains = compute(make_plains())
    assert plains.upgrade_link is None
    assert len(plains.structures_of(StructureType.LINK)) == 1 + len(plains.source_links)


def test_relay_link_moves_off_the_container_tile():
    room = InMemoryRoom("W1N1", TerrainGrid.bordered(50), level=5, controller=(20, 12))
    room.add_structure(StructureType.SPAWN, 20, 20)
    plan = compute(room)

    assert plan.anchor.key == (20, 20)
    assert plan.upgrade_container.key == (17, 15)
    assert plan.upgrade_link.key == (18, 15)
    link = [e for e in plan.structures if (e.x, e.y) == (18, 15)][0]
    assert (link.kind, link.level) == (StructureType.LINK, 5)


def test_objective_roads_and_endpoint_structures():
    room = make_plains()
    plan = compute(room)

    assert len(plan.source_containers) == 2
    for container, source in zip(plan.source_containers, room.sources()):
        assert source.range_to(container.x, container.y) == 1
    assert len(plan.source_links) == 2
    assert all(link.key not in {c.key for c in plan.source_containers} for link in plan.source_links)

    mineral = room.minerals()[0]
    assert plan.extractor.key == mineral.key
    assert mineral.range_to(plan.mineral_container.x, plan.mineral_container.y) == 1
    extractor = plan.structures_of(StructureType.EXTRACTOR)[0]
    assert extractor.level == 6

    levels = {road.level for road in plan.roads}
    assert 3 in levels  # controller road
    object_tiles = {room.controller.key, *(s.key for s in room.sources()), mineral.key}
    assert not object_tiles & {(road.x, road.y) for road in plan.roads}


def test_unreachable_source_contributes_nothing():
    walls = [
        (9 + dx, 30 + dy)
        for dx in (-1, 0, 1)
        for dy in (-1, 0, 1)
        if (dx, dy) != (0, 0)
    ]
    room = make_plains(TerrainGrid.bordered(50).with_walls(walls))
    plan = compute(room)

    assert len(plan.source_containers) == 1
    assert room.sources()[1].range_to(*plan.source_containers[0].key) == 1
    assert len(plan.source_links) == 1


def test_room_without_objectives_still_plans_core():
    room = InMemoryRoom("W2N2", TerrainGrid.bordered(50), level=1)
    plan = compute(room)

    assert plan is not None
    assert plan.upgrade_positions == []
    assert plan.source_containers == []
    assert plan.extractor is None
