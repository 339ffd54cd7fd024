import os
from pathlib import Path
import sys
import pytest

# Keep Kivy from parsing pytest's arguments or writing log files
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend import settings as app_settings  # noqa: E402
from backend.database import init_database  # noqa: E402
from backend.programs import ExerciseTemplate, ProgramTemplate, add_program  # noqa: E402


SCENARIO_PROGRAM = ProgramTemplate(
    id="program-scenario",
    category="push",
    display_name="Scenario Day",
    exercises=(
        ExerciseTemplate("ex-a", "Bench Press", 2, 8, 60, "Heavy", "power"),
        ExerciseTemplate("ex-b", "Cable Fly", 1, "12-15", 90, None, "hypertrophy"),
    ),
    created_at="2024-01-01T00:00:00+00:00",
)


@pytest.fixture
def program() -> ProgramTemplate:
    return SCENARIO_PROGRAM


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    """Create a temporary database holding the 'Scenario Day' program."""
    db_path = init_database(tmp_path / "workout.db")
    add_program(SCENARIO_PROGRAM, db_path=db_path)
    return db_path


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch):
    """Point the settings module at a throwaway file."""
    monkeypatch.setattr(app_settings, "SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr(app_settings, "_settings_cache", None)
    yield


class FakeEvent:
    def __init__(self, clock, callback, interval):
        self.clock = clock
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Stand-in for ``kivy.clock.Clock`` that only fires when told to."""

    def __init__(self):
        self.events: list[FakeEvent] = []

    def schedule_interval(self, callback, interval):
        event = FakeEvent(self, callback, interval)
        self.events.append(event)
        return event

    def active(self, interval=None) -> list[FakeEvent]:
        return [
            e
            for e in self.events
            if not e.cancelled and (interval is None or e.interval == interval)
        ]

    def tick(self, interval) -> None:
        for event in self.active(interval):
            event.callback(interval)


class RecordingView:
    """Collects every render call made by the controller."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.errors: list[str] = []
        self.rest_completions = 0

    def render_session(self, session, program):
        self.calls.append(("session", session, program))

    def render_rest(self, remaining_ms, label):
        self.calls.append(("rest", remaining_ms, label))

    def render_duration(self, active_ms, total_ms):
        self.calls.append(("duration", active_ms, total_ms))

    def render_pause(self, label):
        self.calls.append(("pause", label))

    def show_error(self, message):
        self.errors.append(message)

    def rest_complete(self):
        self.rest_completions += 1

    def last(self, kind):
        for call in reversed(self.calls):
            if call[0] == kind:
                return call
        return None


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_view() -> RecordingView:
    return RecordingView()


class WallClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def wall_clock(monkeypatch) -> WallClock:
    clock = WallClock()
    import core

    monkeypatch.setattr(core.time, "time", clock)
    return clock
