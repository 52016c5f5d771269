"""
Room scenario loading for offline planning and tests.

ScenarioLoader converts a JSON room description into an ``InMemoryRoom``:
terrain, controller, sources, minerals, and any structures or construction
sites already standing.

Scenario file structure:
```json
{
  "name": "W1N1",
  "level": 3,
  "owned": true,
  "size": 50,
  "terrain": ["#####...", "#....#..", ...],
  "walls": [[20, 5, 24, 9]],
  "controller": [25, 8],
  "sources": [[10, 40], [38, 12]],
  "minerals": [[42, 42]],
  "structures": [{"kind": "spawn", "x": 25, "y": 25}],
  "sites": [{"kind": "extension", "x": 23, "y": 25}],
  "extra_global_sites": 0
}
```

``terrain`` rows are optional; without them the room is a plain square of
``size`` tiles with a one-tile wall border. ``walls`` adds inclusive
``[x1, y1, x2, y2]`` wall rectangles on top of either.

Usage:
    loader = RoomScenarioLoader()
    room = loader.load("plains")
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import Config
from .constants import ROOM_SIZE, StructureType
from .environment import TerrainGrid
from .world import InMemoryRoom


class RoomScenarioLoader:
    """Load and validate room scenarios from JSON files.

    Directory structure:
    - Default: {PROJECT_ROOT}/examples/rooms/
    - Override via constructor: RoomScenarioLoader(Path("/custom/rooms"))
    - Scenario files: {room_name}.json

    Raises ValueError for malformed scenarios so mistakes surface at load time
    rather than as odd plans later.
    """

    REQUIRED_FIELDS = ("name",)

    def __init__(self, rooms_dir: Optional[Path] = None):
        self.rooms_dir = rooms_dir or Config.ROOMS_DIR

    def load(self, scenario_name: str) -> InMemoryRoom:
        """Load a scenario by file name (without the ``.json`` extension).

        Raises:
            FileNotFoundError: If the scenario file doesn't exist
            ValueError: If required fields are missing or malformed
            json.JSONDecodeError: If the file contains invalid JSON
        """
        scenario_path = self.rooms_dir / f"{scenario_name}.json"

        if not scenario_path.exists():
            raise FileNotFoundError(
                f"Room scenario '{scenario_name}' not found at {scenario_path}"
            )

        data = json.loads(scenario_path.read_text())
        return self.from_dict(data)

    def from_dict(self, data: Dict[str, Any]) -> InMemoryRoom:
        """Build a room from an already-parsed scenario payload."""
        self._validate_scenario(data)

        terrain = self._parse_terrain(data)
        room = InMemoryRoom(
            data["name"],
            terrain,
            level=int(data.get("level", 1)),
            owned=bool(data.get("owned", True)),
            controller=self._point(data.get("controller"), "controller"),
            sources=[self._point(p, "sources") for p in data.get("sources", [])],
            minerals=[self._point(p, "minerals") for p in data.get("minerals", [])],
            extra_global_sites=int(data.get("extra_global_sites", 0)),
        )

        for entry in data.get("structures", []):
            kind, x, y = self._placement(entry, "structures")
            room.add_structure(kind, x, y, my=entry.get("my"))
        for entry in data.get("sites", []):
            kind, x, y = self._placement(entry, "sites")
            room.add_site(kind, x, y)

        return room

    def _validate_scenario(self, data: Dict[str, Any]) -> None:
        missing = [name for name in self.REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Room scenario missing required fields: {missing}")

        level = data.get("level", 1)
        if not isinstance(level, int) or not 0 <= level <= 8:
            raise ValueError(f"Room level must be an integer between 0 and 8, got {level!r}")

    def _parse_terrain(self, data: Dict[str, Any]) -> TerrainGrid:
        rows = data.get("terrain")
        if rows:
            terrain = TerrainGrid.from_rows(rows)
        else:
            terrain = TerrainGrid.bordered(int(data.get("size", ROOM_SIZE)))

        walls: List[Tuple[int, int]] = []
        for rect in data.get("walls", []):
            if len(rect) != 4:
                raise ValueError(f"Wall rectangles need [x1, y1, x2, y2], got {rect!r}")
            x1, y1, x2, y2 = rect
            walls.extend(
                (x, y) for x in range(min(x1, x2), max(x1, x2) + 1)
                for y in range(min(y1, y2), max(y1, y2) + 1)
            )
        return terrain.with_walls(walls) if walls else terrain

    @staticmethod
    def _point(value: Any, field: str) -> Optional[Tuple[int, int]]:
        if value is None:
            return None
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"'{field}' entries must be [x, y] pairs, got {value!r}")
        return int(value[0]), int(value[1])

    @staticmethod
    def _placement(entry: Dict[str, Any], field: str) -> Tuple[StructureType, int, int]:
        try:
            return StructureType(entry["kind"]), int(entry["x"]), int(entry["y"])
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Invalid '{field}' entry {entry!r}: {exc}") from exc


def load_room(scenario_name: str, rooms_dir: Optional[Path] = None) -> InMemoryRoom:
    """Convenience wrapper around ``RoomScenarioLoader.load``."""
    return RoomScenarioLoader(rooms_dir).load(scenario_name)
