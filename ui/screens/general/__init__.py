"""Screens not directly part of the workout session loop."""

from .edit_program_screen import EditProgramScreen
from .programs_screen import ProgramsScreen
from .settings_screen import SettingsScreen

__all__ = [
    "EditProgramScreen",
    "ProgramsScreen",
    "SettingsScreen",
]
