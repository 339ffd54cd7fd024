from __future__ import annotations

from pathlib import Path
import time
import math

# Default path to the bundled SQLite database
DEFAULT_DB_PATH = Path(__file__).resolve().parent / "data" / "workout.db"

# Length of the automatic warm-up rest started with every session (seconds)
WARMUP_REST_SECONDS = 300

# Amount added to the running rest countdown by the "+30s" control (seconds)
REST_EXTEND_SECONDS = 30

# Clock intervals for the session duration and rest countdown displays
DURATION_TICK_INTERVAL = 1.0
REST_TICK_INTERVAL = 0.1

REST_LABEL = "Rest"
WARMUP_LABEL = "Warm-up"

# Category names used by the program catalog
PROGRAM_CATEGORIES = ("push", "pull", "legs")
CATEGORY_LABELS = {"push": "Push", "pull": "Pull", "legs": "Legs"}

EXERCISE_TYPES = ("power", "hypertrophy", "compound", "flexibility", "cardio")


def now() -> float:
    """Return the current wall-clock time in seconds."""

    return time.time()


def format_clock(ms: int | float | None, *, round_up: bool = False) -> str:
    """Return ``ms`` formatted as ``MM:SS``.

    Countdowns pass ``round_up`` so that ``00:00`` is only shown once the
    time has fully elapsed.
    """

    if not ms or ms < 0:
        return "00:00"
    seconds = ms / 1000
    total = math.ceil(seconds) if round_up else int(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def whole_minutes(ms: int | float) -> int:
    """Return ``ms`` as whole minutes, never negative."""

    return max(0, int(ms // 60000))


def parse_reps(value) -> int | str:
    """Return ``value`` as an int when it is a plain number of reps.

    Target reps may also be ranges or free text such as ``"8-10"`` or
    ``"15 each arm"``; those are returned unchanged as strings.
    """

    if isinstance(value, bool):
        raise ValueError("Reps must be a number or text")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    if not text:
        raise ValueError("Reps must not be empty")
    return text


__all__ = [
    "DEFAULT_DB_PATH",
    "WARMUP_REST_SECONDS",
    "REST_EXTEND_SECONDS",
    "DURATION_TICK_INTERVAL",
    "REST_TICK_INTERVAL",
    "REST_LABEL",
    "WARMUP_LABEL",
    "PROGRAM_CATEGORIES",
    "CATEGORY_LABELS",
    "EXERCISE_TYPES",
    "now",
    "format_clock",
    "whole_minutes",
    "parse_reps",
]
