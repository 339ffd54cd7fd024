from __future__ import annotations

import copy
import math
import time
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime

from backend.programs import ExerciseTemplate, ProgramTemplate
from backend.trainings import TrainingExerciseEntry, TrainingRecord, TrainingSetEntry
from core import REST_LABEL, WARMUP_LABEL, WARMUP_REST_SECONDS, whole_minutes


@dataclass
class SetRecord:
    """State of one planned set. ``set_number`` is 1-based."""

    set_number: int
    completed: bool = False
    completed_at: float | None = None
    weight: float | None = None
    partial: bool = False
    actual_reps: int | None = None


@dataclass
class ExerciseProgress:
    """Completion state of one exercise within a :class:`Session`.

    ``current_set_index`` points at the first incomplete set. Once every set
    is complete it equals ``len(sets)``.
    """

    exercise_id: str
    sets: list[SetRecord] = field(default_factory=list)
    current_set_index: int = 0

    def first_incomplete(self) -> int:
        for idx, record in enumerate(self.sets):
            if not record.completed:
                return idx
        return len(self.sets)

    @property
    def exhausted(self) -> bool:
        return self.first_incomplete() >= len(self.sets)

    @property
    def completed_count(self) -> int:
        return sum(1 for record in self.sets if record.completed)


@dataclass(frozen=True)
class RestWindow:
    """A countdown covering ``[started_at, started_at + duration_ms)``."""

    started_at: float
    duration_ms: int
    label: str = REST_LABEL
    kind: str = "rest"

    @property
    def ends_at(self) -> float:
        return self.started_at + self.duration_ms / 1000

    def remaining_ms(self, now: float) -> int:
        return max(0, math.ceil((self.ends_at - now) * 1000))

    def elapsed(self, now: float) -> bool:
        return self.remaining_ms(now) <= 0


@dataclass
class Session:
    """The single in-progress training run bound to a program.

    Instances are treated as values: every transition in this module
    returns a new object (or the very same object when the event was
    rejected or changed nothing).
    """

    program_id: str
    program_name: str
    started_at: float
    exercises: list[ExerciseProgress] = field(default_factory=list)
    current_exercise_index: int = 0
    rest: RestWindow | None = None
    paused: bool = False
    pause_started_at: float | None = None
    total_paused_ms: int = 0

    @property
    def all_complete(self) -> bool:
        return all(ex.exhausted for ex in self.exercises)

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def to_dict(self) -> dict:
        """Return a JSON-serialisable representation of the session."""

        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Reconstruct a :class:`Session` from ``data``."""

        exercises = [
            ExerciseProgress(
                exercise_id=ex["exercise_id"],
                sets=[
                    SetRecord(
                        set_number=s["set_number"],
                        completed=bool(s.get("completed", False)),
                        completed_at=s.get("completed_at"),
                        weight=s.get("weight"),
                        partial=bool(s.get("partial", False)),
                        actual_reps=s.get("actual_reps"),
                    )
                    for s in ex.get("sets", [])
                ],
                current_set_index=ex.get("current_set_index", 0),
            )
            for ex in data.get("exercises", [])
        ]
        rest = data.get("rest")
        return cls(
            program_id=data["program_id"],
            program_name=data.get("program_name", ""),
            started_at=data["started_at"],
            exercises=exercises,
            current_exercise_index=data.get("current_exercise_index", 0),
            rest=(
                RestWindow(
                    started_at=rest["started_at"],
                    duration_ms=int(rest["duration_ms"]),
                    label=rest.get("label", REST_LABEL),
                    kind=rest.get("kind", "rest"),
                )
                if rest
                else None
            ),
            paused=bool(data.get("paused", False)),
            pause_started_at=data.get("pause_started_at"),
            total_paused_ms=int(data.get("total_paused_ms", 0)),
        )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _now(now: float | None) -> float:
    return time.time() if now is None else now


def _first_incomplete_exercise(exercises: list[ExerciseProgress], start: int = 0) -> int | None:
    for idx in range(start, len(exercises)):
        if not exercises[idx].exhausted:
            return idx
    return None


def _current_exercise_pointer(exercises: list[ExerciseProgress]) -> int:
    idx = _first_incomplete_exercise(exercises)
    if idx is None:
        return max(0, len(exercises) - 1)
    return idx


def template_at(
    program: ProgramTemplate, index: int, exercise_id: str | None = None
) -> ExerciseTemplate | None:
    """Return the template for exercise ``index`` of ``program``.

    When ``exercise_id`` is given the lookup is done by id first so a
    record stays correct even if the program was reordered meanwhile.
    """

    if exercise_id is not None:
        for template in program.exercises:
            if template.id == exercise_id:
                return template
    if 0 <= index < len(program.exercises):
        return program.exercises[index]
    return None


def is_actionable(session: Session, exercise_index: int, set_index: int) -> bool:
    """Return ``True`` if the given set is the one that may be completed now."""

    if exercise_index != session.current_exercise_index:
        return False
    if not 0 <= exercise_index < len(session.exercises):
        return False
    progress = session.exercises[exercise_index]
    if set_index != progress.current_set_index:
        return False
    if not 0 <= set_index < len(progress.sets):
        return False
    return not progress.sets[set_index].completed


def set_counts(session: Session) -> tuple[int, int]:
    """Return ``(completed, total)`` set counts across all exercises."""

    completed = sum(ex.completed_count for ex in session.exercises)
    total = sum(len(ex.sets) for ex in session.exercises)
    return completed, total


# ------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------


def create_session(
    program: ProgramTemplate,
    now: float | None = None,
    warmup_seconds: int = WARMUP_REST_SECONDS,
) -> Session:
    """Materialise a fresh :class:`Session` from ``program``.

    A warm-up rest window of ``warmup_seconds`` is started immediately; pass
    ``0`` to start without one.
    """

    if not program.exercises:
        raise ValueError(f"Program '{program.display_name}' has no exercises")
    now = _now(now)
    exercises = [
        ExerciseProgress(
            exercise_id=template.id,
            sets=[SetRecord(set_number=i + 1) for i in range(template.target_sets)],
        )
        for template in program.exercises
    ]
    for progress in exercises:
        progress.current_set_index = progress.first_incomplete()
    session = Session(
        program_id=program.id,
        program_name=program.display_name,
        started_at=now,
        exercises=exercises,
        current_exercise_index=_current_exercise_pointer(exercises),
    )
    if warmup_seconds > 0:
        session.rest = RestWindow(now, warmup_seconds * 1000, WARMUP_LABEL, "warmup")
    return session


def resume_session(session: Session, now: float | None = None) -> Session:
    """Normalise a session re-hydrated from storage.

    Repairs timing fields that can only be inconsistent after a bad write
    and drops a rest window that ran out while the app was closed.
    """

    now = _now(now)
    updated = copy.deepcopy(session)
    if updated.paused and updated.pause_started_at is None:
        updated.pause_started_at = now
    if not updated.paused and updated.pause_started_at is not None:
        updated.pause_started_at = None
    if updated.total_paused_ms < 0:
        updated.total_paused_ms = 0
    if updated.rest is not None and updated.rest.elapsed(now):
        updated.rest = None
    for progress in updated.exercises:
        progress.current_set_index = progress.first_incomplete()
    updated.current_exercise_index = _current_exercise_pointer(updated.exercises)
    return session if updated == session else updated


# ------------------------------------------------------------------
# Set completion
# ------------------------------------------------------------------


def complete_set(
    session: Session,
    program: ProgramTemplate,
    exercise_index: int,
    set_index: int,
    weight: float | None = None,
    partial: bool = False,
    actual_reps: int | None = None,
    now: float | None = None,
) -> Session:
    """Complete the current set and schedule the following rest.

    Only the current set of the current exercise is actionable; for any
    other target ``session`` itself is returned untouched.
    """

    if not is_actionable(session, exercise_index, set_index):
        return session
    if partial and actual_reps is not None and actual_reps < 0:
        raise ValueError("Actual reps cannot be negative")
    now = _now(now)

    updated = copy.deepcopy(session)
    progress = updated.exercises[exercise_index]
    record = progress.sets[set_index]
    record.completed = True
    record.completed_at = now
    record.weight = None if weight is None else float(weight)
    record.partial = bool(partial)
    record.actual_reps = actual_reps if partial else None

    progress.current_set_index = progress.first_incomplete()
    updated.current_exercise_index = _current_exercise_pointer(updated.exercises)

    # a completed set always ends the previous countdown
    updated.rest = None
    more_sets = not progress.exhausted
    next_exercise = _first_incomplete_exercise(updated.exercises, exercise_index + 1)
    template = template_at(program, exercise_index, progress.exercise_id)
    rest_seconds = template.rest_seconds if template else 0
    if (more_sets or next_exercise is not None) and rest_seconds > 0:
        label = REST_LABEL
        if not more_sets and next_exercise is not None:
            upcoming = template_at(program, next_exercise, updated.exercises[next_exercise].exercise_id)
            name = upcoming.name if upcoming else f"Exercise {next_exercise + 1}"
            label = f"Next: {name}"
        updated.rest = RestWindow(now, rest_seconds * 1000, label)
    return updated


# ------------------------------------------------------------------
# Rest timer
# ------------------------------------------------------------------


def skip_rest(session: Session) -> Session:
    if session.rest is None:
        return session
    updated = copy.deepcopy(session)
    updated.rest = None
    return updated


def extend_rest(session: Session, seconds: int, now: float | None = None) -> Session:
    """Add ``seconds`` to the active rest window.

    A window that already ran out is extended from ``now``. Negative values
    shorten the window but never below the time already rested.
    """

    rest = session.rest
    if rest is None:
        return session
    now = _now(now)
    rested_ms = max(0, math.ceil((now - rest.started_at) * 1000))
    base = rest.duration_ms if not rest.elapsed(now) else rested_ms
    duration = max(rested_ms, base + int(seconds * 1000))
    updated = copy.deepcopy(session)
    updated.rest = replace(rest, duration_ms=duration)
    return updated


def expire_rest(session: Session, now: float | None = None) -> Session:
    """Clear the rest window if its countdown has reached zero."""

    if session.rest is None or not session.rest.elapsed(_now(now)):
        return session
    return skip_rest(session)


# ------------------------------------------------------------------
# Pause / duration accounting
# ------------------------------------------------------------------


def toggle_pause(session: Session, now: float | None = None) -> Session:
    """Pause a running session or resume a paused one.

    Resuming folds the finished pause interval into ``total_paused_ms``. A
    rest window is kept across a pause; it is only dropped on resume if it
    ran out in the meantime.
    """

    now = _now(now)
    updated = copy.deepcopy(session)
    if not updated.paused:
        updated.paused = True
        updated.pause_started_at = now
        return updated

    started = updated.pause_started_at if updated.pause_started_at is not None else now
    updated.total_paused_ms += max(0, int(round((now - started) * 1000)))
    updated.paused = False
    updated.pause_started_at = None
    if updated.rest is not None and updated.rest.elapsed(now):
        updated.rest = None
    return updated


def in_flight_pause_ms(session: Session, now: float | None = None) -> int:
    if not session.paused or session.pause_started_at is None:
        return 0
    return max(0, int(round((_now(now) - session.pause_started_at) * 1000)))


def total_duration_ms(session: Session, now: float | None = None) -> int:
    """Wall-clock time since the session started, pauses included."""

    return max(0, int(round((_now(now) - session.started_at) * 1000)))


def active_duration_ms(session: Session, now: float | None = None) -> int:
    """Time since the session started, excluding every pause."""

    end = _now(now)
    if session.paused and session.pause_started_at is not None:
        end = min(end, session.pause_started_at)
    elapsed = int(round((end - session.started_at) * 1000))
    return max(0, elapsed - session.total_paused_ms)


# ------------------------------------------------------------------
# Finalisation
# ------------------------------------------------------------------


def exercise_elapsed_ms(progress: ExerciseProgress) -> int | None:
    """Return the span between the first and last completed set.

    ``None`` when the exercise has no completed set.
    """

    stamps = [
        record.completed_at
        for record in progress.sets
        if record.completed and record.completed_at is not None
    ]
    if not stamps:
        return None
    return max(0, int(round((max(stamps) - min(stamps)) * 1000)))


def summary_text(session: Session, now: float | None = None) -> str:
    """Return the one-line summary stored with the training record."""

    now = _now(now)
    completed, total = set_counts(session)
    started = time.strftime("%H:%M", time.localtime(session.started_at))
    duration = whole_minutes(total_duration_ms(session, now))
    active = whole_minutes(active_duration_ms(session, now))
    text = (
        f"Live training - {started} | {session.program_name} | "
        f"Duration: {duration} min | Active: {active} min | Sets: {completed}/{total}"
    )
    partial = sum(1 for ex in session.exercises for s in ex.sets if s.completed and s.partial)
    if partial:
        text += f" | Partial sets: {partial}"
    return text


def build_training_record(
    session: Session, program: ProgramTemplate, now: float | None = None
) -> TrainingRecord:
    """Convert ``session`` into the record handed to the training sink."""

    now = _now(now)
    active_ms = active_duration_ms(session, now)
    exercises = []
    for idx, progress in enumerate(session.exercises):
        template = template_at(program, idx, progress.exercise_id)
        exercises.append(
            TrainingExerciseEntry(
                exercise_id=progress.exercise_id,
                name=template.name if template else f"Exercise {idx + 1}",
                notes=template.notes if template else None,
                elapsed_ms=exercise_elapsed_ms(progress),
                sets=[
                    TrainingSetEntry(
                        set_number=record.set_number,
                        weight=record.weight,
                        reps=template.target_reps if template else None,
                        completed=record.completed,
                        completed_at=record.completed_at,
                        partial=record.partial,
                        actual_reps=record.actual_reps,
                    )
                    for record in progress.sets
                ],
            )
        )
    return TrainingRecord(
        program_name=session.program_name,
        date=datetime.fromtimestamp(session.started_at).date().isoformat(),
        duration_minutes=whole_minutes(total_duration_ms(session, now)),
        active_duration_minutes=whole_minutes(active_ms),
        active_duration_ms=active_ms,
        notes=summary_text(session, now),
        started_at=session.started_at,
        exercises=exercises,
    )
