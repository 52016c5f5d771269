"""Tests for loading room scenarios."""

from pathlib import Path

import pytest

from baseplanner.constants import StructureType, Terrain
from baseplanner.scenario import RoomScenarioLoader, load_room

ROOMS_DIR = Path(__file__).resolve().parent.parent / "examples" / "rooms"


def test_load_bundled_plains():
    room = load_room("plains", ROOMS_DIR)

    assert room.name == "W1N1"
    assert room.level == 4
    assert room.is_owned
    assert room.controller.key == (25, 9)
    assert [s.key for s in room.sources()] == [(9, 30), (40, 36)]
    assert room.terrain.width == room.terrain.height == 50
    assert room.structures() == []


def test_load_bundled_outpost():
    room = RoomScenarioLoader(ROOMS_DIR).load("outpost")

    assert room.terrain.is_wall(5, 5)
    assert room.terrain.is_wall(32, 30)
    assert not room.terrain.is_wall(20, 24)
    kinds = sorted(s.kind.value for s in room.structures())
    assert kinds == ["extension", "extension", "road", "road", "spawn"]
    assert [(s.kind, s.x, s.y) for s in room.construction_sites()] == [
        (StructureType.EXTENSION, 18, 25)
    ]
    roads = [s for s in room.structures() if s.kind == StructureType.ROAD]
    assert all(road.my is None for road in roads)


def test_missing_scenario(tmp_path):
    with pytest.raises(FileNotFoundError):
        RoomScenarioLoader(tmp_path).load("nowhere")


def test_terrain_rows_and_walls():
    room = RoomScenarioLoader().from_dict(
        {
            "name": "sim",
            "terrain": ["#####", "#.~.#", "#...#", "#####"],
            "walls": [[3, 2, 3, 2]],
            "level": 0,
        }
    )

    assert room.terrain.width == 5
    assert room.terrain.get(2, 1) == Terrain.SWAMP
    assert room.terrain.is_wall(3, 2)
    assert room.level == 0


def test_hostile_structures_keep_their_owner():
    room = RoomScenarioLoader().from_dict(
        {"name": "sim", "structures": [{"kind": "tower", "x": 5, "y": 5, "my": False}]}
    )

    assert room.structures()[0].my is False


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"level": 2}, "missing required fields"),
        ({"name": "sim", "level": 9}, "between 0 and 8"),
        ({"name": "sim", "walls": [[1, 2, 3]]}, "x1, y1, x2, y2"),
        ({"name": "sim", "controller": [1]}, "pairs"),
        ({"name": "sim", "structures": [{"kind": "castle", "x": 1, "y": 1}]}, "Invalid"),
    ],
)
def test_malformed_scenarios(payload, message):
    with pytest.raises(ValueError, match=message):
        RoomScenarioLoader().from_dict(payload)
