"""Glue between the live session engine, its collaborators and the screen.

The controller owns the two clock events that drive the display (session
duration and rest countdown). Every user action re-reads the session from
the :class:`~backend.session_store.SessionStore`, applies one transition
from :mod:`backend.workout_session`, writes the new snapshot back and asks
the view to re-render.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable

from kivy.clock import Clock

import core
from backend import settings as app_settings
from backend import workout_session as engine
from backend.programs import ProgramCatalog, ProgramTemplate
from backend.session_store import SessionStore
from backend.trainings import TrainingSink
from backend.weight_memory import WeightMemory
from backend.workout_session import RestWindow, Session


class SessionView:
    """Render hooks used by :class:`SessionController`.

    The default implementation ignores every call so the controller can run
    without a screen attached.
    """

    def render_session(self, session: Session, program: ProgramTemplate) -> None:
        pass

    def render_rest(self, remaining_ms: int | None, label: str) -> None:
        """``remaining_ms`` is ``None`` when no countdown should be shown."""

    def render_duration(self, active_ms: int, total_ms: int) -> None:
        pass

    def render_pause(self, label: str) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def rest_complete(self) -> None:
        pass


class SessionController:
    def __init__(
        self,
        store: SessionStore,
        catalog: ProgramCatalog,
        weights: WeightMemory,
        sink: TrainingSink,
        *,
        clock=Clock,
        view: SessionView | None = None,
        cue: Callable[[], object] | None = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.weights = weights
        self.sink = sink
        self.clock = clock
        self.view = view or SessionView()
        self.cue = cue
        self._program: ProgramTemplate | None = None
        self._duration_event = None
        self._rest_event = None
        self._cued_window: RestWindow | None = None
        self._recovery_offered = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, program_id: str) -> Session | None:
        """Start a fresh session for ``program_id``, replacing any other."""
        program = self.catalog.get_program(program_id)
        if program is None:
            logging.warning("Cannot start session: program %s not found", program_id)
            return None
        self._stop_timers()
        self.weights.forget_session_weights()
        warmup = app_settings.get_int("warmup_rest_seconds", core.WARMUP_REST_SECONDS)
        session = engine.create_session(program, core.now(), warmup)
        self._program = program
        self._cued_window = None
        self.store.put(session)
        logging.info("Started live session for %s", program.display_name)
        self._sync(session)
        return session

    def recovery_candidate(self) -> Session | None:
        """Return the stored session the first time this is asked, else ``None``.

        The programs screen offers recovery once per app start, not every
        time it is shown.
        """
        if self._recovery_offered:
            return None
        self._recovery_offered = True
        return self.store.get()

    def resume(self) -> Session | None:
        """Pick up the stored session after a restart, if there is one."""
        session = self.store.get()
        if session is None:
            return None
        program = self._program_for(session)
        if program is None:
            logging.warning(
                "Discarding session bound to missing program %s", session.program_id
            )
            self.discard()
            return None
        resumed = engine.resume_session(session, core.now())
        if resumed is not session:
            self.store.put(resumed)
        logging.info("Resumed live session for %s", program.display_name)
        self._sync(resumed)
        return resumed

    def reset(self) -> Session | None:
        """Throw away progress and start over with the same program."""
        session = self.store.get()
        if session is None:
            return None
        if self._program_for(session) is None:
            logging.warning(
                "Discarding session bound to missing program %s", session.program_id
            )
            self.discard()
            return None
        return self.start(session.program_id)

    def discard(self) -> None:
        self._stop_timers()
        self.store.clear()
        self._program = None
        self._cued_window = None
        self.view.render_rest(None, "")
        logging.info("Discarded live session")

    def delete_program(self, program_id: str) -> bool:
        """Delete ``program_id`` and drop the active session bound to it."""
        removed = self.catalog.delete_program(program_id)
        session = self.store.get()
        if session is not None and session.program_id == program_id:
            self.discard()
        return removed

    def dispose(self) -> None:
        """Stop all clock events; the stored session is left untouched."""
        self._stop_timers()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def complete_set(
        self,
        exercise_index: int,
        set_index: int,
        weight: float | None = None,
        partial: bool = False,
        actual_reps: int | None = None,
    ) -> bool:
        """Complete a set. Returns ``False`` if the target was not actionable."""
        session = self.store.get()
        if session is None:
            return False
        program = self._program_for(session)
        if program is None:
            self.discard()
            return False
        updated = engine.complete_set(
            session,
            program,
            exercise_index,
            set_index,
            weight=weight,
            partial=partial,
            actual_reps=actual_reps,
            now=core.now(),
        )
        if updated is session:
            logging.debug(
                "Ignored completion of exercise %s set %s", exercise_index, set_index
            )
            return False
        if weight is not None:
            self.weights.set_last_weight(
                updated.exercises[exercise_index].exercise_id, weight
            )
        self.store.put(updated)
        self._sync(updated)
        return True

    def suggest_weight(self, exercise_index: int) -> float | None:
        session = self.store.get()
        if session is None or not 0 <= exercise_index < len(session.exercises):
            return None
        return self.weights.suggest_weight(session.exercises[exercise_index].exercise_id)

    def toggle_pause(self) -> bool | None:
        """Pause or resume. Returns the new paused state."""
        session = self.store.get()
        if session is None:
            return None
        updated = engine.toggle_pause(session, core.now())
        self.store.put(updated)
        logging.info("Session %s", "paused" if updated.paused else "resumed")
        self._sync(updated)
        return updated.paused

    def skip_rest(self) -> bool:
        session = self.store.get()
        if session is None or session.rest is None:
            return False
        updated = engine.skip_rest(session)
        self.store.put(updated)
        self._sync(updated)
        return True

    def extend_rest(self, seconds: int | None = None) -> bool:
        session = self.store.get()
        if session is None or session.rest is None:
            return False
        if seconds is None:
            seconds = app_settings.get_int("rest_extend_seconds", core.REST_EXTEND_SECONDS)
        updated = engine.extend_rest(session, seconds, core.now())
        self.store.put(updated)
        self._sync(updated)
        return True

    def finish(self) -> int | None:
        """Save the session as a training record.

        The stored session is only cleared after the record was saved. On
        failure the error is shown and the session stays available for
        another attempt.
        """
        session = self.store.get()
        if session is None:
            return None
        program = self._program_for(session) or ProgramTemplate(
            session.program_id, "", session.program_name
        )
        record = engine.build_training_record(session, program, core.now())
        try:
            training_id = self.sink.create(record)
        except (sqlite3.Error, ValueError, OSError) as exc:
            logging.exception("Failed to save training for %s", session.program_name)
            self.view.show_error(f"Could not save training: {exc}")
            return None
        self._stop_timers()
        self.store.clear()
        self._program = None
        self._cued_window = None
        logging.info("Finished live session as training %s", training_id)
        return training_id

    # ------------------------------------------------------------------
    # Rendering and timers
    # ------------------------------------------------------------------
    def _program_for(self, session: Session) -> ProgramTemplate | None:
        if self._program is None or self._program.id != session.program_id:
            self._program = self.catalog.get_program(session.program_id)
        return self._program

    def _sync(self, session: Session) -> None:
        now = core.now()
        program = self._program_for(session)
        if program is not None:
            self.view.render_session(session, program)
        self.view.render_pause("Resume" if session.paused else "Pause")
        self.view.render_duration(
            engine.active_duration_ms(session, now), engine.total_duration_ms(session, now)
        )
        if session.rest is None:
            self.view.render_rest(None, "")
        else:
            self.view.render_rest(session.rest.remaining_ms(now), session.rest.label)

        if session.paused:
            self._stop_timers()
            return
        if self._duration_event is None:
            self._duration_event = self.clock.schedule_interval(
                self._on_duration_tick, core.DURATION_TICK_INTERVAL
            )
        if session.rest is not None:
            if self._rest_event is None:
                self._rest_event = self.clock.schedule_interval(
                    self._on_rest_tick, core.REST_TICK_INTERVAL
                )
        else:
            self._cancel_rest_timer()

    def _cancel_rest_timer(self) -> None:
        if self._rest_event is not None:
            self._rest_event.cancel()
            self._rest_event = None

    def _stop_timers(self) -> None:
        if self._duration_event is not None:
            self._duration_event.cancel()
            self._duration_event = None
        self._cancel_rest_timer()

    def _on_duration_tick(self, dt) -> None:
        session = self.store.get()
        if session is None:
            self._stop_timers()
            return
        now = core.now()
        self.view.render_duration(
            engine.active_duration_ms(session, now), engine.total_duration_ms(session, now)
        )

    def _on_rest_tick(self, dt) -> None:
        session = self.store.get()
        if session is None or session.rest is None or session.paused:
            self._cancel_rest_timer()
            if session is None or session.rest is None:
                self.view.render_rest(None, "")
            return
        rest = session.rest
        now = core.now()
        remaining = rest.remaining_ms(now)
        if remaining > 0:
            self.view.render_rest(remaining, rest.label)
            return
        if self._cued_window != rest:
            self._cued_window = rest
            self.view.rest_complete()
            if self.cue is not None:
                self.cue()
        self.store.put(engine.expire_rest(session, now))
        self._cancel_rest_timer()
        self.view.render_rest(None, "")
