from __future__ import annotations


import sqlite3
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

from core import (
    DEFAULT_DB_PATH,
    EXERCISE_TYPES,
    PROGRAM_CATEGORIES,
    parse_reps,
)


@dataclass(frozen=True)
class ExerciseTemplate:
    """A single planned exercise inside a :class:`ProgramTemplate`."""

    id: str
    name: str
    target_sets: int
    target_reps: int | str
    rest_seconds: int = 0
    notes: str | None = None
    exercise_type: str = "compound"

    def validate(self) -> None:
        if not self.id:
            raise ValueError("Exercise id is required")
        if not self.name:
            raise ValueError("Exercise name is required")
        if self.target_sets < 1:
            raise ValueError(f"'{self.name}' needs at least one set")
        if self.rest_seconds < 0:
            raise ValueError(f"'{self.name}' has a negative rest time")
        if self.exercise_type not in EXERCISE_TYPES:
            raise ValueError(f"Unknown exercise type '{self.exercise_type}'")


@dataclass(frozen=True)
class ProgramTemplate:
    """An ordered list of exercises that a live session is created from."""

    id: str
    category: str
    display_name: str
    exercises: tuple[ExerciseTemplate, ...] = field(default_factory=tuple)
    created_at: str = ""

    def validate(self) -> None:
        if self.category not in PROGRAM_CATEGORIES:
            raise ValueError(f"Unknown program category '{self.category}'")
        if not self.display_name:
            raise ValueError("Program name is required")
        if not self.exercises:
            raise ValueError("Add at least one exercise before saving")
        for exercise in self.exercises:
            exercise.validate()


def _iso_now() -> str:
    return datetime.fromtimestamp(time.time(), tz=timezone.utc).isoformat()


def _exercise(
    ex_id: str,
    name: str,
    sets: int,
    reps: int | str,
    rest: int,
    notes: str,
    exercise_type: str,
) -> ExerciseTemplate:
    return ExerciseTemplate(ex_id, name, sets, reps, rest, notes, exercise_type)


# Programs created on first run so a fresh install can start a session.
DEFAULT_PROGRAMS: tuple[ProgramTemplate, ...] = (
    ProgramTemplate(
        id="program-default-push",
        category="push",
        display_name="Push: Power + Shoulder Care",
        exercises=(
            _exercise("push-warmup-external-rotations", "Dumbbell External Rotations", 2, "15 each arm", 45, "Rotator cuff rehab; control, not strength.", "flexibility"),
            _exercise("push-a-bench-press", "Bench Press", 4, 5, 150, "Power/Strength; heavy focus.", "power"),
            _exercise("push-b-incline-dumbbell-press", "Incline Dumbbell Press", 3, "8-10", 90, "Hypertrophy; shoulder-friendly ROM.", "hypertrophy"),
            _exercise("push-c-stand-ohp", "Dumbbell Overhead Press (Standing)", 3, "8-10", 90, "Shoulders; controlled tempo.", "compound"),
            _exercise("push-d1-reverse-fly", "Incline Dumbbell Reverse Fly", 3, "12-15", 60, "Rear delt/cuff health; squeeze shoulder blades.", "hypertrophy"),
            _exercise("push-d2-weighted-dips", "Weighted Dips", 3, "8-12", 90, "Compound triceps/chest; control depth to avoid shoulder pain.", "compound"),
        ),
    ),
    ProgramTemplate(
        id="program-default-pull",
        category="pull",
        display_name="Pull: Strength + Grip",
        exercises=(
            _exercise("pull-warmup-scapular-pullups", "Scapular Pull-ups (or Hangs)", 2, 10, 45, "Shoulder blade control; depress shoulders fully.", "flexibility"),
            _exercise("pull-a-deadlift", "Deadlift (Conventional or Sumo)", 4, "3-5", 180, "Power/full-body strength; prioritize form.", "power"),
            _exercise("pull-b-weighted-pullups", "Weighted Pull-ups (or Band-Assisted)", 4, "5-8", 120, "Strength/back width; progress weight or assistance.", "power"),
            _exercise("pull-c-single-arm-rows", "Single-Arm Dumbbell Rows", 3, "10-12 each arm", 90, "Unilateral back; stability.", "compound"),
            _exercise("pull-d1-bicep-curl", "Dumbbell Bicep Curl", 3, "10-12", 60, "Biceps focus.", "hypertrophy"),
            _exercise("pull-d2-farmers-carries", "Dumbbell Farmer's Carries", 3, "40-60 sec", 75, "Grip/core/traps; walk for time or distance.", "compound"),
        ),
    ),
    ProgramTemplate(
        id="program-default-legs",
        category="legs",
        display_name="Legs: Mobility + Strength",
        exercises=(
            _exercise("legs-warmup-straight-leg-raise", "Active Straight Leg Raise & 90/90 Hip Rotations", 1, "5 mins", 30, "Leg mobility; gentle ROM increase.", "flexibility"),
            _exercise("legs-a-goblet-squat", "Goblet Squat (or Box Squat)", 4, "8-12", 120, "Mobility-friendly; box limits depth safely.", "compound"),
            _exercise("legs-b-reverse-lunge", "Reverse Lunges (or Split Squats)", 3, "10-12 each leg", 90, "Unilateral/stability; knee/hip friendly.", "compound"),
            _exercise("legs-c1-dumbbell-rdl", "Dumbbell RDL (Romanian Deadlift)", 3, "10-12", 90, "Hamstrings/hips; slow, controlled hinge.", "hypertrophy"),
            _exercise("legs-c2-low-box-jumps", "Low Box Jumps/Step-ups", 3, "8-10", 75, "Plyometric/quads; soft landings or quick step-ups.", "power"),
            _exercise("legs-d-calves-core", "Calves/Core Circuit", 3, "Calf raises + plank 30-60s", 45, "Standing calf raises (with DBs) plus plank (30-60 sec).", "compound"),
        ),
    ),
)


def _load_exercises(cursor: sqlite3.Cursor, program_id: str) -> tuple[ExerciseTemplate, ...]:
    cursor.execute(
        """
        SELECT exercise_id, name, number_of_sets, reps, rest_time, notes, exercise_type
          FROM program_exercises
         WHERE program_id = ? AND deleted = 0
         ORDER BY position
        """,
        (program_id,),
    )
    return tuple(
        ExerciseTemplate(
            id=ex_id,
            name=name,
            target_sets=sets,
            target_reps=parse_reps(reps),
            rest_seconds=rest or 0,
            notes=notes,
            exercise_type=ex_type or "compound",
        )
        for ex_id, name, sets, reps, rest, notes, ex_type in cursor.fetchall()
    )


def _insert_exercises(
    cursor: sqlite3.Cursor, program_id: str, exercises: tuple[ExerciseTemplate, ...]
) -> None:
    for position, ex in enumerate(exercises):
        cursor.execute(
            """
            INSERT INTO program_exercises
                (program_id, exercise_id, name, number_of_sets, reps, rest_time,
                 notes, exercise_type, position)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                program_id,
                ex.id,
                ex.name,
                ex.target_sets,
                str(ex.target_reps),
                ex.rest_seconds,
                ex.notes,
                ex.exercise_type,
                position,
            ),
        )


def get_program(program_id: str, db_path: Path = DEFAULT_DB_PATH) -> ProgramTemplate | None:
    """Return the program stored under ``program_id`` or ``None``."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, category, display_name, created_at FROM program_programs"
            " WHERE id = ? AND deleted = 0",
            (program_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        pid, category, display_name, created_at = row
        return ProgramTemplate(
            id=pid,
            category=category,
            display_name=display_name,
            exercises=_load_exercises(cursor, pid),
            created_at=created_at,
        )


def load_programs(db_path: Path = DEFAULT_DB_PATH) -> list[ProgramTemplate]:
    """Return all programs that have not been deleted, oldest first."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, category, display_name, created_at FROM program_programs"
            " WHERE deleted = 0 ORDER BY created_at, rowid"
        )
        rows = cursor.fetchall()
        return [
            ProgramTemplate(
                id=pid,
                category=category,
                display_name=display_name,
                exercises=_load_exercises(cursor, pid),
                created_at=created_at,
            )
            for pid, category, display_name, created_at in rows
        ]


def add_program(program: ProgramTemplate, db_path: Path = DEFAULT_DB_PATH) -> ProgramTemplate:
    """Persist ``program`` and return the stored copy.

    A program without an id gets a freshly generated one.
    """

    if not program.id:
        program = replace(program, id=f"program-{uuid.uuid4().hex[:12]}")
    if not program.created_at:
        program = replace(program, created_at=_iso_now())
    program.validate()

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO program_programs (id, category, display_name, created_at)"
            " VALUES (?, ?, ?, ?)",
            (program.id, program.category, program.display_name, program.created_at),
        )
        _insert_exercises(cursor, program.id, program.exercises)
    return program


def update_program(
    program_id: str,
    *,
    category: str | None = None,
    display_name: str | None = None,
    exercises: tuple[ExerciseTemplate, ...] | list[ExerciseTemplate] | None = None,
    db_path: Path = DEFAULT_DB_PATH,
) -> ProgramTemplate | None:
    """Apply the given changes to ``program_id``.

    Returns the updated program or ``None`` if it does not exist. Exercise
    rows are replaced wholesale, keeping the soft-deleted ones for history.
    """

    current = get_program(program_id, db_path=db_path)
    if current is None:
        return None
    updated = replace(
        current,
        category=category if category is not None else current.category,
        display_name=display_name if display_name is not None else current.display_name,
        exercises=tuple(exercises) if exercises is not None else current.exercises,
    )
    updated.validate()

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE program_programs SET category = ?, display_name = ?, updated_at = ?"
            " WHERE id = ?",
            (updated.category, updated.display_name, _iso_now(), program_id),
        )
        if exercises is not None:
            cursor.execute(
                "UPDATE program_exercises SET deleted = 1 WHERE program_id = ?",
                (program_id,),
            )
            _insert_exercises(cursor, program_id, updated.exercises)
    return updated


def delete_program(program_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Soft delete ``program_id``. Returns ``True`` if a program was removed."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE program_programs SET deleted = 1, updated_at = ? WHERE id = ? AND deleted = 0",
            (_iso_now(), program_id),
        )
        removed = cursor.rowcount > 0
        if removed:
            cursor.execute(
                "UPDATE program_exercises SET deleted = 1 WHERE program_id = ?",
                (program_id,),
            )
    return removed


def clone_program(program_id: str, db_path: Path = DEFAULT_DB_PATH) -> ProgramTemplate | None:
    """Copy ``program_id`` into a new program named ``"<name> (Copy)"``."""

    source = get_program(program_id, db_path=db_path)
    if source is None:
        return None
    copy = replace(
        source,
        id="",
        display_name=f"{source.display_name} (Copy)",
        created_at="",
    )
    return add_program(copy, db_path=db_path)


def ensure_default_programs(db_path: Path = DEFAULT_DB_PATH) -> list[ProgramTemplate]:
    """Seed :data:`DEFAULT_PROGRAMS` when the catalog is empty."""

    programs = load_programs(db_path)
    if programs:
        return programs
    return [add_program(p, db_path=db_path) for p in DEFAULT_PROGRAMS]


class ProgramCatalog:
    """Program lookup bound to a database path.

    The session controller only needs :meth:`get_program`; the remaining
    methods back the program list screen.
    """

    def __init__(self, db_path: Path = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def get_program(self, program_id: str) -> ProgramTemplate | None:
        return get_program(program_id, db_path=self.db_path)

    def list_programs(self) -> list[ProgramTemplate]:
        return load_programs(self.db_path)

    def add_program(self, program: ProgramTemplate) -> ProgramTemplate:
        return add_program(program, db_path=self.db_path)

    def update_program(self, program_id: str, **changes) -> ProgramTemplate | None:
        return update_program(program_id, db_path=self.db_path, **changes)

    def delete_program(self, program_id: str) -> bool:
        return delete_program(program_id, db_path=self.db_path)

    def clone_program(self, program_id: str) -> ProgramTemplate | None:
        return clone_program(program_id, db_path=self.db_path)

    def ensure_default_programs(self) -> list[ProgramTemplate]:
        return ensure_default_programs(self.db_path)
