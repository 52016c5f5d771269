"""
PlanStore interface for pluggable plan storage.

A plan is a small, versioned document per room that must survive across
ticks. Storage is OPTIONAL in the sense that the planner works against any
backend implementing ``PlanStore``; two are included:

1. InMemoryPlanStore - Dict-based storage, lost on exit (tests, single process)
2. JsonPlanStore - One JSON file per room, human-readable (offline runs, debugging)

Key responsibilities:
- Return the stored plan for a room, or None when absent/unreadable
- Save a freshly assembled plan
- Delete the plan when the room is lost

Version checks are the planner's job: stores hand back whatever they hold and
the planner decides whether it is stale.

Usage pattern:
    store = JsonPlanStore("plans")
    planner = BasePlanner(store)
    planner.run(room, tick)
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from .config import Config
from .logging_utils import log_error
from .schemas import BasePlan


class PlanStore(ABC):
    """Abstract base class for per-room plan persistence.

    All calls are synchronous: planning runs to completion inside one tick and
    has no suspension points.
    """

    @abstractmethod
    def get_plan(self, room: str) -> Optional[BasePlan]:
        """
        Retrieve the stored plan for a room.

        Args:
            room: Room name

        Returns:
            BasePlan if one is stored and readable, None otherwise
        """
        pass

    @abstractmethod
    def save_plan(self, plan: BasePlan) -> None:
        """
        Store a plan, replacing any previous plan for the same room.

        Args:
            plan: Plan to save (keyed by ``plan.room``)
        """
        pass

    @abstractmethod
    def delete_plan(self, room: str) -> None:
        """
        Remove the plan for a room. Safe to call when none is stored.

        Args:
            room: Room name
        """
        pass


class InMemoryPlanStore(PlanStore):
    """In-memory plan storage using a Python dict.

    Plans are stored as deep copies so callers mutating a plan they were
    handed cannot silently change what the store holds.
    """

    def __init__(self):
        self.plans: Dict[str, BasePlan] = {}

    def get_plan(self, room: str) -> Optional[BasePlan]:
        plan = self.plans.get(room)
        return plan.model_copy(deep=True) if plan is not None else None

    def save_plan(self, plan: BasePlan) -> None:
        self.plans[plan.room] = plan.model_copy(deep=True)

    def delete_plan(self, room: str) -> None:
        self.plans.pop(room, None)


class JsonPlanStore(PlanStore):
    """File-based plan storage, one pretty-printed JSON document per room.

    Directory structure:
    ```
    {base_path}/
      W1N1.json
      W2N3.json
    ```

    Files that cannot be read, decoded or parsed, or no longer match the schema,
    are reported and treated as missing, which makes the planner assemble a
    fresh plan.
    """

    def __init__(self, base_path: Optional[Path | str] = None):
        self.base_path = Path(base_path) if base_path is not None else Config.PLANS_DIR

    def get_plan(self, room: str) -> Optional[BasePlan]:
        path = self._path(room)
        if not path.exists():
            return None

        try:
            payload = json.loads(path.read_text("utf-8"))
            return BasePlan.model_validate(payload)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            log_error(f"[Store] Ignoring unreadable plan for {room}: {exc}")
            return None

    def save_plan(self, plan: BasePlan) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)
        payload = plan.model_dump(mode="json")
        self._path(plan.room).write_text(json.dumps(payload, indent=2), "utf-8")

    def delete_plan(self, room: str) -> None:
        path = self._path(room)
        if path.exists():
            path.unlink()

    def _path(self, room: str) -> Path:
        return self.base_path / f"{room}.json"
