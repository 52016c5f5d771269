"""Tests for the relative building templates."""

import pytest

from baseplanner.constants import StructureType
from baseplanner.layouts import (
    CORE_RADIUS,
    CORE_ROADS,
    CORE_STAMP,
    EXTENSION_GRID,
    EXTENSION_GRID_RADIUS,
    FAST_FILL_EXTENSIONS,
    LAB_STAMP,
    SUPPORT_STRUCTURES,
    Offset,
    TemplateEntry,
    entries_by_kind,
    validate_templates,
)


def test_static_stamps_never_share_an_offset():
    validate_templates()

    offsets = [
        entry.offset
        for stamp in (CORE_STAMP, FAST_FILL_EXTENSIONS, LAB_STAMP, SUPPORT_STRUCTURES)
        for entry in stamp
    ]
    assert len(offsets) == len(set(offsets))


def test_validate_templates_reports_collisions():
    clashing = [
        [TemplateEntry(StructureType.LAB, Offset(0, 0), 6)],
        [TemplateEntry(StructureType.SPAWN, Offset(0, 0), 1)],
    ]
    with pytest.raises(ValueError, match="collision"):
        validate_templates(clashing)


def test_roads_and_ramparts_may_share_offsets():
    validate_templates(
        [
            [TemplateEntry(StructureType.SPAWN, Offset(0, 0), 1)],
            [TemplateEntry(StructureType.RAMPART, Offset(0, 0), 2)],
        ]
    )


def test_core_road_ring():
    assert len(CORE_ROADS) == 16
    for road in CORE_ROADS:
        assert max(abs(road.offset.dx), abs(road.offset.dy)) == CORE_RADIUS
        assert road.level == 2


def test_extension_lattice_is_a_checkerboard_outside_the_core():
    assert len(EXTENSION_GRID) == 28
    for entry in EXTENSION_GRID:
        dx, dy = entry.offset
        assert entry.kind == StructureType.EXTENSION
        assert entry.level == 4
        assert (abs(dx) + abs(dy)) % 2 == 0
        assert max(abs(dx), abs(dy)) > CORE_RADIUS
        assert max(abs(dx), abs(dy)) <= EXTENSION_GRID_RADIUS


def test_levels_are_valid_controller_levels():
    for stamp in (CORE_STAMP, FAST_FILL_EXTENSIONS, LAB_STAMP, SUPPORT_STRUCTURES, EXTENSION_GRID):
        for entry in stamp:
            assert 1 <= entry.level <= 8


def test_entries_by_kind_keeps_template_order():
    grouped = entries_by_kind()

    spawns = grouped[StructureType.SPAWN]
    assert [entry.offset for entry in spawns] == [Offset(0, 0), Offset(-1, -1), Offset(1, -1)]
    assert len(grouped[StructureType.LAB]) == 10
    assert len(grouped[StructureType.EXTENSION]) == len(FAST_FILL_EXTENSIONS)
    assert StructureType.ROAD not in grouped
