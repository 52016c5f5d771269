"""Tests for plan storage backends."""

import json

from baseplanner.constants import StructureType
from baseplanner.persistence import InMemoryPlanStore, JsonPlanStore
from baseplanner.schemas import BasePlan, PlannedRoad, PlannedStructure, Position


def make_plan(room: str = "W1N1") -> BasePlan:
    return BasePlan(
        version=2,
        room=room,
        anchor=Position(x=24, y=24),
        generated=12,
        structures=[
            PlannedStructure(kind=StructureType.SPAWN, x=24, y=24, level=1),
            PlannedStructure(kind=StructureType.STORAGE, x=24, y=25, level=4),
        ],
        roads=[PlannedRoad(x=22, y=26, level=2)],
        upgrade_positions=[Position(x=22, y=12), Position(x=23, y=12)],
        upgrade_container=Position(x=22, y=12),
    )


def test_in_memory_round_trip():
    store = InMemoryPlanStore()
    plan = make_plan()

    assert store.get_plan("W1N1") is None
    store.save_plan(plan)
    assert store.get_plan("W1N1") == plan

    store.delete_plan("W1N1")
    assert store.get_plan("W1N1") is None
    store.delete_plan("W1N1")


def test_in_memory_store_hands_out_copies():
    store = InMemoryPlanStore()
    plan = make_plan()
    store.save_plan(plan)

    plan.structures.clear()
    fetched = store.get_plan("W1N1")
    fetched.roads.clear()

    assert len(store.get_plan("W1N1").structures) == 2
    assert len(store.get_plan("W1N1").roads) == 1


def test_json_round_trip(tmp_path):
    store = JsonPlanStore(tmp_path / "plans")
    plan = make_plan()

    store.save_plan(plan)

    path = tmp_path / "plans" / "W1N1.json"
    assert path.exists()
    payload = json.loads(path.read_text())
    assert payload["structures"][0]["kind"] == "spawn"
    assert JsonPlanStore(tmp_path / "plans").get_plan("W1N1") == plan


def test_json_delete(tmp_path):
    store = JsonPlanStore(tmp_path)
    store.save_plan(make_plan("W1N1"))
    store.save_plan(make_plan("W2N2"))

    store.delete_plan("W1N1")
    store.delete_plan("W5N5")

    assert store.get_plan("W1N1") is None
    assert store.get_plan("W2N2") is not None


def test_json_unreadable_plan_is_treated_as_missing(tmp_path, capsys):
    (tmp_path / "W1N1.json").write_text("{not json")
    (tmp_path / "W2N2.json").write_text(json.dumps({"room": "W2N2"}))
    store = JsonPlanStore(tmp_path)

    assert store.get_plan("W1N1") is None
    assert store.get_plan("W2N2") is None
    assert "unreadable plan" in capsys.readouterr().out


def test_roads_without_level_default_to_one(tmp_path):
    payload = make_plan().model_dump(mode="json")
    for road in payload["roads"]:
        del road["level"]
    (tmp_path / "W1N1.json").write_text(json.dumps(payload))

    plan = JsonPlanStore(tmp_path).get_plan("W1N1")

    assert [road.level for road in plan.roads] == [1]


def test_json_undecodable_plan_is_treated_as_missing(tmp_path, capsys):
    (tmp_path / "W1N1.json").write_bytes(b"\xff\xfe{garbage")
    (tmp_path / "W2N2.json").mkdir()
    store = JsonPlanStore(tmp_path)

    assert store.get_plan("W1N1") is None
    assert store.get_plan("W2N2") is None
    assert capsys.readouterr().out.count("unreadable plan") == 2
