"""Persistence of finished live sessions as training records.

Adapted from the completed-session helpers of the old ``core`` module.  A
finished session is converted into a :class:`TrainingRecord` by
:func:`backend.workout_session.build_training_record` and handed to
:class:`TrainingSink` which writes it to the ``training_*`` tables.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from core import DEFAULT_DB_PATH, parse_reps


@dataclass
class TrainingSetEntry:
    set_number: int
    weight: float | None
    reps: int | str | None
    completed: bool
    completed_at: float | None
    partial: bool = False
    actual_reps: int | None = None


@dataclass
class TrainingExerciseEntry:
    exercise_id: str
    name: str
    notes: str | None
    elapsed_ms: int | None
    sets: list[TrainingSetEntry] = field(default_factory=list)


@dataclass
class TrainingRecord:
    """Structured training entry produced when a live session finishes."""

    program_name: str
    date: str
    duration_minutes: int
    active_duration_minutes: int
    active_duration_ms: int
    notes: str
    started_at: float
    exercises: list[TrainingExerciseEntry] = field(default_factory=list)
    type: str = "strength"

    @property
    def completed_sets(self) -> int:
        return sum(1 for ex in self.exercises for s in ex.sets if s.completed)

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises)

    def to_dict(self) -> dict:
        return asdict(self)


def validate_training_record(record: TrainingRecord) -> list[str]:
    """Return a list of validation errors for ``record``."""

    errors = []
    if not record.program_name:
        errors.append("Training has no program name")
    if not record.date:
        errors.append("Training has no date")
    if record.duration_minutes < 0 or record.active_duration_ms < 0:
        errors.append("Training duration cannot be negative")
    if not record.exercises:
        errors.append("Training has no exercises")
    return errors


def save_training(record: TrainingRecord, db_path: Path = DEFAULT_DB_PATH) -> int:
    """Persist ``record`` and return the new training id.

    Raises :class:`ValueError` for invalid records; database errors are
    propagated so callers can keep the live session for a retry.
    """

    errors = validate_training_record(record)
    if errors:
        raise ValueError("; ".join(errors))

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO training_trainings
                (date, type, duration_minutes, active_duration_minutes, active_duration_ms,
                 program_name, notes, started_at, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.date,
                record.type,
                record.duration_minutes,
                record.active_duration_minutes,
                record.active_duration_ms,
                record.program_name,
                record.notes,
                record.started_at,
                time.time(),
            ),
        )
        training_id = cursor.lastrowid

        for ex_pos, ex in enumerate(record.exercises, 1):
            cursor.execute(
                """
                INSERT INTO training_exercises
                    (training_id, exercise_id, name, notes, elapsed_ms, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (training_id, ex.exercise_id, ex.name, ex.notes, ex.elapsed_ms, ex_pos),
            )
            training_ex_id = cursor.lastrowid
            for entry in ex.sets:
                cursor.execute(
                    """
                    INSERT INTO training_sets
                        (training_exercise_id, set_number, weight, reps, completed,
                         completed_at, partial, actual_reps)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        training_ex_id,
                        entry.set_number,
                        entry.weight,
                        None if entry.reps is None else str(entry.reps),
                        int(entry.completed),
                        entry.completed_at,
                        int(entry.partial),
                        entry.actual_reps,
                    ),
                )
    logging.info("Saved training %s for %s", training_id, record.program_name)
    return training_id


def get_training_history(limit: int | None = None, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return saved trainings, most recent first.

    Each item contains ``id``, ``date``, ``program_name`` and
    ``duration_minutes``.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        query = (
            "SELECT id, date, program_name, duration_minutes FROM training_trainings "
            "WHERE deleted = 0 ORDER BY started_at DESC, id DESC"
        )
        if limit is not None:
            cursor.execute(query + " LIMIT ?", (limit,))
        else:
            cursor.execute(query)
        rows = cursor.fetchall()
    return [
        {"id": tid, "date": date, "program_name": name, "duration_minutes": minutes}
        for tid, date, name, minutes in rows
    ]


def get_training_details(training_id: int, db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Return the full stored record for ``training_id`` or ``{}``."""

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            """
            SELECT date, type, duration_minutes, active_duration_minutes,
                   active_duration_ms, program_name, notes, started_at
              FROM training_trainings
             WHERE id = ? AND deleted = 0
            """,
            (training_id,),
        )
        row = cur.fetchone()
        if row is None:
            return {}
        (date, kind, minutes, active_minutes, active_ms, program_name, notes, started) = row

        cur.execute(
            """
            SELECT id, exercise_id, name, notes, elapsed_ms
              FROM training_exercises
             WHERE training_id = ?
             ORDER BY position
            """,
            (training_id,),
        )
        exercises: list[dict] = []
        for ex_row_id, ex_id, name, ex_notes, elapsed in cur.fetchall():
            cur.execute(
                """
                SELECT set_number, weight, reps, completed, completed_at, partial, actual_reps
                  FROM training_sets
                 WHERE training_exercise_id = ?
                 ORDER BY set_number
                """,
                (ex_row_id,),
            )
            sets = [
                {
                    "set_number": num,
                    "weight": weight,
                    "reps": parse_reps(reps) if reps else None,
                    "completed": bool(done),
                    "completed_at": done_at,
                    "partial": bool(partial),
                    "actual_reps": actual,
                }
                for num, weight, reps, done, done_at, partial, actual in cur.fetchall()
            ]
            exercises.append(
                {
                    "exercise_id": ex_id,
                    "name": name,
                    "notes": ex_notes,
                    "elapsed_ms": elapsed,
                    "sets": sets,
                }
            )

    return {
        "id": training_id,
        "date": date,
        "type": kind,
        "duration_minutes": minutes,
        "active_duration_minutes": active_minutes,
        "active_duration_ms": active_ms,
        "program_name": program_name,
        "notes": notes,
        "started_at": started,
        "exercises": exercises,
    }


class TrainingSink:
    """Receiver for finished sessions bound to a database path."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def create(self, record: TrainingRecord) -> int:
        return save_training(record, db_path=self.db_path)

    def history(self, limit: int | None = None) -> list[dict]:
        return get_training_history(limit, db_path=self.db_path)

    def details(self, training_id: int) -> dict:
        return get_training_details(training_id, db_path=self.db_path)
