"""
Baseplanner Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Placement quotas
    MAX_STRUCTURE_SITES_PER_TICK: int = int(os.getenv("BASEPLANNER_MAX_STRUCTURE_SITES_PER_TICK", "3"))
    MAX_ROAD_SITES_PER_TICK: int = int(os.getenv("BASEPLANNER_MAX_ROAD_SITES_PER_TICK", "5"))
    # Stay under the host's hard limit of 100 pending sites
    GLOBAL_SITE_CEILING: int = int(os.getenv("BASEPLANNER_GLOBAL_SITE_CEILING", "95"))

    # Demolition
    CLEANUP_RADIUS: int = int(os.getenv("BASEPLANNER_CLEANUP_RADIUS", "12"))
    MAX_REMOVALS_PER_TICK: int = int(os.getenv("BASEPLANNER_MAX_REMOVALS_PER_TICK", "2"))

    # Road search
    PATH_MAX_OPS: int = int(os.getenv("BASEPLANNER_PATH_MAX_OPS", "4000"))

    # Debug overlay cadence (ticks); 0 disables periodic overlays
    VISUALIZE_INTERVAL: int = int(os.getenv("BASEPLANNER_VISUALIZE_INTERVAL", "10"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    PLANS_DIR: Path = Path(os.getenv("BASEPLANNER_PLANS_DIR", str(PROJECT_ROOT / "plans")))
    ROOMS_DIR: Path = PROJECT_ROOT / "examples" / "rooms"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors on inconsistent values."""
        for name in (
            "MAX_STRUCTURE_SITES_PER_TICK",
            "MAX_ROAD_SITES_PER_TICK",
            "GLOBAL_SITE_CEILING",
            "CLEANUP_RADIUS",
            "MAX_REMOVALS_PER_TICK",
            "PATH_MAX_OPS",
            "VISUALIZE_INTERVAL",
        ):
            if getattr(cls, name) < 0:
                raise ValueError(f"{name} must be non-negative")

        if cls.GLOBAL_SITE_CEILING > 100:
            raise ValueError(
                "GLOBAL_SITE_CEILING cannot exceed the host limit of 100 construction sites"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Baseplanner Configuration:",
            f"  Structure sites/tick: {cls.MAX_STRUCTURE_SITES_PER_TICK}",
            f"  Road sites/tick: {cls.MAX_ROAD_SITES_PER_TICK}",
            f"  Global site ceiling: {cls.GLOBAL_SITE_CEILING}",
            f"  Cleanup radius: {cls.CLEANUP_RADIUS}",
            f"  Removals/tick: {cls.MAX_REMOVALS_PER_TICK}",
            f"  Path max ops: {cls.PATH_MAX_OPS}",
            f"  Plans dir: {cls.PLANS_DIR}",
        ]
        return "\n".join(lines)


class PlannerLimits(BaseModel):
    """Quotas injected into a ``BasePlanner`` instance."""

    max_structure_sites_per_tick: int = Field(3, ge=0)
    max_road_sites_per_tick: int = Field(5, ge=0)
    global_site_ceiling: int = Field(95, ge=0, le=100)
    cleanup_radius: int = Field(12, ge=0)
    max_removals_per_tick: int = Field(2, ge=0)
    path_max_ops: int = Field(4000, ge=1)
    visualize_interval: int = Field(10, ge=0)

    @classmethod
    def from_config(cls) -> "PlannerLimits":
        return cls(
            max_structure_sites_per_tick=Config.MAX_STRUCTURE_SITES_PER_TICK,
            max_road_sites_per_tick=Config.MAX_ROAD_SITES_PER_TICK,
            global_site_ceiling=Config.GLOBAL_SITE_CEILING,
            cleanup_radius=Config.CLEANUP_RADIUS,
            max_removals_per_tick=Config.MAX_REMOVALS_PER_TICK,
            path_max_ops=max(Config.PATH_MAX_OPS, 1),
            visualize_interval=Config.VISUALIZE_INTERVAL,
        )
