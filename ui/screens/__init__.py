"""UI screen modules for the live workout tracker."""

from .session import LiveWorkoutScreen
from .general import EditProgramScreen, ProgramsScreen, SettingsScreen

__all__ = [
    "EditProgramScreen",
    "LiveWorkoutScreen",
    "ProgramsScreen",
    "SettingsScreen",
]
