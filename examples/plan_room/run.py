"""
Example: Plan a Room and Watch It Build
=======================================

WHAT THIS SHOWS:
- Loading a room scenario from examples/rooms/
- One BasePlanner driving construction tick by tick
- Construction sites "finishing" between ticks
- Controller levels rising so new template entries unlock

RUN:
    uv run python -m examples.plan_room.run plains --ticks 120
"""

import argparse
from pathlib import Path

from baseplanner import (
    BasePlanner,
    InMemoryPlanStore,
    PlannerLimits,
    load_room,
    render_plan_overlay,
)
from baseplanner.logging_utils import log_info, log_success

ROOMS_DIR = Path(__file__).resolve().parent.parent / "rooms"


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate base construction in one room")
    parser.add_argument("scenario", nargs="?", default="plains", help="Room scenario name")
    parser.add_argument("--ticks", type=int, default=120, help="Ticks to simulate")
    parser.add_argument(
        "--level-every", type=int, default=15, help="Raise the controller level every N ticks"
    )
    parser.add_argument(
        "--build-rate", type=int, default=4, help="Construction sites finished per tick"
    )
    args = parser.parse_args()

    room = load_room(args.scenario, ROOMS_DIR)
    store = InMemoryPlanStore()
    planner = BasePlanner(store, PlannerLimits(visualize_interval=0))

    for tick in range(1, args.ticks + 1):
        if args.level_every and tick % args.level_every == 0 and room.level < 8:
            room.set_level(room.level + 1)
            log_info(f"Tick {tick}: controller reached level {room.level}")

        report = planner.run(room, tick)
        if report is not None and report.total_calls:
            print(
                f"Tick {tick:>4}: +{report.structure_sites_placed} structures, "
                f"+{report.road_sites_placed} roads, -{report.removals} removed"
            )
        room.complete_construction_sites(args.build_rate)

    plan = store.get_plan(room.name)
    if plan is None:
        print("No plan could be made for this room.")
        return

    log_success(
        f"{room.name}: {len(room.structures())} structures standing, "
        f"{len(room.construction_sites())} sites pending"
    )
    print(render_plan_overlay(room.terrain, plan))


if __name__ == "__main__":
    main()
