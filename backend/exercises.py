"""Exercise library used by the program editor.

The library is built from :data:`backend.programs.DEFAULT_PROGRAMS`. Each
exercise appears once (matched by name, case-insensitive) and is tagged with
the category of the first program that uses it along with the muscles and
equipment it needs.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend.programs import DEFAULT_PROGRAMS, ExerciseTemplate


@dataclass(frozen=True)
class LibraryExercise:
    id: str
    name: str
    category: str
    exercise_type: str
    muscles: tuple[str, ...] = ()
    equipment: str = ""
    sets: int = 3
    reps: int | str = 10
    rest_seconds: int = 75
    notes: str | None = None

    def to_template(self, ex_id: str | None = None) -> ExerciseTemplate:
        """Return a program exercise planned with the library defaults."""

        return ExerciseTemplate(
            id=ex_id or self.id,
            name=self.name,
            target_sets=self.sets,
            target_reps=self.reps,
            rest_seconds=self.rest_seconds,
            notes=self.notes,
            exercise_type=self.exercise_type,
        )


# name -> (muscles, equipment)
EXERCISE_DETAILS: dict[str, tuple[tuple[str, ...], str]] = {
    "Dumbbell External Rotations": (("Rotator Cuff",), "Light Dumbbells"),
    "Bench Press": (("Chest", "Triceps", "Shoulders"), "Barbell, Bench"),
    "Incline Dumbbell Press": (("Chest", "Shoulders"), "Dumbbells, Bench"),
    "Dumbbell Overhead Press (Standing)": (("Shoulders", "Triceps"), "Dumbbells"),
    "Incline Dumbbell Reverse Fly": (("Rear Delts", "Upper Back"), "Dumbbells, Bench"),
    "Weighted Dips": (("Chest", "Triceps", "Shoulders"), "Dip Bars/Bench, Weight Belt"),
    "Scapular Pull-ups (or Hangs)": (("Upper Back", "Scapular Stabilizers"), "Pull-up Bar"),
    "Deadlift (Conventional or Sumo)": (("Back", "Glutes", "Hamstrings"), "Barbell or Dumbbells"),
    "Weighted Pull-ups (or Band-Assisted)": (("Back", "Biceps"), "Pull-up Bar, Weight/Band"),
    "Single-Arm Dumbbell Rows": (("Lats", "Back", "Core"), "Dumbbells, Bench"),
    "Dumbbell Bicep Curl": (("Biceps",), "Dumbbells"),
    "Dumbbell Farmer's Carries": (("Grip", "Traps", "Core"), "Heavy Dumbbells"),
    "Active Straight Leg Raise & 90/90 Hip Rotations": (("Hips", "Hamstrings"), "Floor"),
    "Goblet Squat (or Box Squat)": (("Quads", "Glutes"), "Dumbbell, Low Box"),
    "Reverse Lunges (or Split Squats)": (("Quads", "Glutes"), "Dumbbells"),
    "Dumbbell RDL (Romanian Deadlift)": (("Hamstrings", "Glutes"), "Dumbbells"),
    "Low Box Jumps/Step-ups": (("Quads", "Glutes", "Calves"), "Low Box"),
    "Calves/Core Circuit": (("Calves", "Core"), "Dumbbells, Bodyweight"),
}


def _build_library() -> tuple[LibraryExercise, ...]:
    seen: dict[str, LibraryExercise] = {}
    for program in DEFAULT_PROGRAMS:
        for ex in program.exercises:
            key = ex.name.lower()
            if key in seen:
                continue
            muscles, equipment = EXERCISE_DETAILS.get(ex.name, ((), ""))
            seen[key] = LibraryExercise(
                id=ex.id,
                name=ex.name,
                category=program.category,
                exercise_type=ex.exercise_type,
                muscles=muscles,
                equipment=equipment,
                sets=ex.target_sets,
                reps=ex.target_reps,
                rest_seconds=ex.rest_seconds,
                notes=ex.notes,
            )
    return tuple(seen.values())


EXERCISE_LIBRARY: tuple[LibraryExercise, ...] = _build_library()


def get_all_exercises(
    category: str | None = None,
    exercise_type: str | None = None,
    search: str = "",
) -> list[LibraryExercise]:
    """Return library exercises matching every given filter.

    ``search`` is matched case-insensitively against the name, the muscles
    and the equipment.
    """

    term = search.strip().lower()
    result = []
    for ex in EXERCISE_LIBRARY:
        if category and ex.category != category:
            continue
        if exercise_type and ex.exercise_type != exercise_type:
            continue
        if term:
            haystack = " ".join((ex.name, ex.equipment, *ex.muscles)).lower()
            if term not in haystack:
                continue
        result.append(ex)
    return result


def get_exercise(exercise_id: str) -> LibraryExercise | None:
    for ex in EXERCISE_LIBRARY:
        if ex.id == exercise_id:
            return ex
    return None


def group_by_category() -> dict[str, list[LibraryExercise]]:
    """Return the library keyed by program category in catalog order."""

    groups: dict[str, list[LibraryExercise]] = {}
    for ex in EXERCISE_LIBRARY:
        groups.setdefault(ex.category, []).append(ex)
    return groups
