"""Screens used during an active workout session."""

from .live_workout_screen import LiveWorkoutScreen

__all__ = [
    "LiveWorkoutScreen",
]
