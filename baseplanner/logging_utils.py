"""Logging utilities for the base planner.

Provides color-coded output to distinguish planning, maintenance and failures.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Deterministic planning steps
    MAGENTA = "\033[95m"   # Debug detail (rejected actions, overlays)
    RED = "\033[91m"       # Errors and skipped planning
    GREEN = "\033[92m"     # Plan created / placements issued
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if BASEPLANNER_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("BASEPLANNER_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def debug_enabled() -> bool:
    return os.getenv("LOG_LEVEL", Config.LOG_LEVEL).upper() == "DEBUG"


def log_deterministic(message: str) -> None:
    """Log a planning step (blue)."""
    print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_error(message: str) -> None:
    """Log an error or skipped step (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


def log_debug(message: str) -> None:
    """Log debug detail (magenta), only when LOG_LEVEL=DEBUG."""
    if debug_enabled():
        print(colored(f"{LOG_TAG_DEBUG} {message}", Color.MAGENTA))


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_DEBUG = "[..]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"
