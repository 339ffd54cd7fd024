"""In-memory editing of programs before they are written to the catalog."""

from __future__ import annotations

import copy
import logging
import time

from backend.exercises import LibraryExercise
from backend.programs import ExerciseTemplate, ProgramCatalog, ProgramTemplate
from core import CATEGORY_LABELS, PROGRAM_CATEGORIES, parse_reps

DEFAULT_SETS = 3
DEFAULT_REPS = 10
DEFAULT_REST_SECONDS = 75


class ProgramEditor:
    """Helper for creating or editing a program in memory."""

    def __init__(self, catalog: ProgramCatalog, program_id: str | None = None):
        self.catalog = catalog
        self.program_id: str | None = None
        self.category: str = PROGRAM_CATEGORIES[0]
        self.display_name: str = ""
        self.exercises: list[dict] = []
        self._original: dict | None = None

        if program_id:
            self.load(program_id)
        else:
            self._original = self.to_dict()

    def load(self, program_id: str) -> None:
        program = self.catalog.get_program(program_id)
        if program is None:
            raise ValueError(f"Program '{program_id}' does not exist")
        self.program_id = program.id
        self.category = program.category
        self.display_name = program.display_name
        self.exercises = [
            {
                "id": ex.id,
                "name": ex.name,
                "sets": ex.target_sets,
                "reps": ex.target_reps,
                "rest": ex.rest_seconds,
                "notes": ex.notes,
                "exercise_type": ex.exercise_type,
            }
            for ex in program.exercises
        ]
        self._original = self.to_dict()

    # ------------------------------------------------------------------
    # Exercise helpers
    # ------------------------------------------------------------------
    def _unique_id(self, ex_id: str) -> str:
        taken = {ex["id"] for ex in self.exercises}
        if ex_id not in taken:
            return ex_id
        candidate = f"{ex_id}-{int(time.time() * 1000)}"
        suffix = 1
        while candidate in taken:
            candidate = f"{ex_id}-{int(time.time() * 1000)}-{suffix}"
            suffix += 1
        return candidate

    def add_exercise(
        self,
        ex_id: str,
        name: str,
        sets: int = DEFAULT_SETS,
        reps: int | str = DEFAULT_REPS,
        rest: int = DEFAULT_REST_SECONDS,
        *,
        notes: str | None = None,
        exercise_type: str = "compound",
    ) -> dict:
        """Append an exercise and return its editable entry."""

        ex = {
            "id": self._unique_id(ex_id),
            "name": name,
            "sets": max(1, int(sets)),
            "reps": parse_reps(reps),
            "rest": max(0, int(rest)),
            "notes": notes,
            "exercise_type": exercise_type,
        }
        self.exercises.append(ex)
        return ex

    def add_from_library(self, library_exercise: LibraryExercise) -> dict:
        """Append ``library_exercise`` using its planned sets, reps and rest."""

        return self.add_exercise(
            library_exercise.id,
            library_exercise.name,
            library_exercise.sets or DEFAULT_SETS,
            library_exercise.reps or DEFAULT_REPS,
            library_exercise.rest_seconds or DEFAULT_REST_SECONDS,
            notes=library_exercise.notes,
            exercise_type=library_exercise.exercise_type,
        )

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.exercises):
            raise IndexError("Exercise index out of range")

    def update_exercise(
        self,
        index: int,
        *,
        sets: int | None = None,
        reps: int | str | None = None,
        rest: int | None = None,
    ) -> None:
        """Update sets, reps or rest time for the exercise at ``index``.

        Sets never drop below one and rest never below zero.
        """

        self._check_index(index)
        exercise = self.exercises[index]
        if sets is not None:
            exercise["sets"] = max(1, int(sets))
        if reps is not None:
            exercise["reps"] = parse_reps(reps)
        if rest is not None:
            exercise["rest"] = max(0, int(rest))

    def remove_exercise(self, index: int) -> None:
        self._check_index(index)
        self.exercises.pop(index)

    def move_exercise(self, old_index: int, new_index: int) -> None:
        """Move the exercise at ``old_index`` to ``new_index``."""

        self._check_index(old_index)
        self._check_index(new_index)
        ex = self.exercises.pop(old_index)
        self.exercises.insert(new_index, ex)

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------
    def resolved_name(self) -> str:
        """Return the program name, defaulting to ``"<Category> Session"``."""

        name = self.display_name.strip()
        if name:
            return name
        return f"{CATEGORY_LABELS.get(self.category, self.category.title())} Session"

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "display_name": self.display_name,
            "exercises": copy.deepcopy(self.exercises),
        }

    def is_modified(self) -> bool:
        return self._original != self.to_dict()

    def mark_saved(self) -> None:
        self._original = self.to_dict()

    def _templates(self) -> tuple[ExerciseTemplate, ...]:
        return tuple(
            ExerciseTemplate(
                id=ex["id"],
                name=ex["name"],
                target_sets=ex["sets"],
                target_reps=ex["reps"],
                rest_seconds=ex["rest"],
                notes=ex["notes"],
                exercise_type=ex["exercise_type"],
            )
            for ex in self.exercises
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def validate(self) -> list[str]:
        """Return the problems that would stop :meth:`save`."""

        errors = []
        if self.category not in PROGRAM_CATEGORIES:
            errors.append(f"Unknown program category '{self.category}'")
        if not self.exercises:
            errors.append("Add at least one exercise before saving")
        for ex in self._templates():
            try:
                ex.validate()
            except ValueError as exc:
                errors.append(str(exc))
        return errors

    def save(self) -> ProgramTemplate:
        """Write the program to the catalog and return the stored copy.

        Raises :class:`ValueError` when :meth:`validate` reports problems or
        the edited program no longer exists.
        """

        errors = self.validate()
        if errors:
            raise ValueError(errors[0])

        if self.program_id is not None:
            saved = self.catalog.update_program(
                self.program_id,
                category=self.category,
                display_name=self.resolved_name(),
                exercises=self._templates(),
            )
            if saved is None:
                raise ValueError("This program no longer exists")
        else:
            saved = self.catalog.add_program(
                ProgramTemplate(
                    id="",
                    category=self.category,
                    display_name=self.resolved_name(),
                    exercises=self._templates(),
                )
            )
            self.program_id = saved.id
        logging.info("Saved program %s (%s)", saved.display_name, saved.id)
        self.display_name = saved.display_name
        self.mark_saved()
        return saved
