import sqlite3

import pytest

from backend import trainings
from backend import workout_session as ws
from backend.trainings import TrainingRecord, TrainingSink

T0 = 1_700_000_000.0


def _finished_record(program):
    session = ws.create_session(program, now=T0, warmup_seconds=0)
    session = ws.complete_set(session, program, 0, 0, weight=100, now=T0 + 60)
    session = ws.complete_set(
        session, program, 0, 1, weight=100, partial=True, actual_reps=5, now=T0 + 200
    )
    return ws.build_training_record(session, program, now=T0 + 1800)


def test_save_training_and_details(sample_db, program):
    record = _finished_record(program)
    training_id = trainings.save_training(record, db_path=sample_db)

    details = trainings.get_training_details(training_id, db_path=sample_db)
    assert details["program_name"] == "Scenario Day"
    assert details["duration_minutes"] == 30
    assert details["active_duration_ms"] == 1_800_000
    assert details["notes"] == record.notes
    assert details["started_at"] == T0
    assert [e["name"] for e in details["exercises"]] == ["Bench Press", "Cable Fly"]

    bench_sets = details["exercises"][0]["sets"]
    assert bench_sets[0]["completed"] is True
    assert bench_sets[0]["reps"] == 8
    assert bench_sets[1]["partial"] is True
    assert bench_sets[1]["actual_reps"] == 5
    assert details["exercises"][0]["elapsed_ms"] == 140_000
    assert details["exercises"][1]["sets"][0]["completed"] is False
    assert details["exercises"][1]["elapsed_ms"] is None


def test_history_is_most_recent_first(sample_db, program):
    sink = TrainingSink(sample_db)
    first = sink.create(_finished_record(program))
    later = _finished_record(program)
    later.started_at = T0 + 86_400
    second = sink.create(later)

    history = sink.history()
    assert [h["id"] for h in history] == [second, first]
    assert sink.history(limit=1)[0]["id"] == second
    assert sink.details(first)["id"] == first
    assert sink.details(9999) == {}


def test_invalid_record_is_rejected(sample_db):
    record = TrainingRecord(
        program_name="",
        date="2024-01-01",
        duration_minutes=-1,
        active_duration_minutes=0,
        active_duration_ms=0,
        notes="",
        started_at=T0,
    )
    assert len(trainings.validate_training_record(record)) == 3
    with pytest.raises(ValueError):
        trainings.save_training(record, db_path=sample_db)
    with sqlite3.connect(sample_db) as conn:
        assert conn.execute("SELECT COUNT(*) FROM training_trainings").fetchone()[0] == 0


def test_database_errors_propagate(tmp_path, program):
    sink = TrainingSink(tmp_path / "missing_tables.db")
    with pytest.raises(sqlite3.Error):
        sink.create(_finished_record(program))


def test_details_return_reps_as_saved_by_the_sink(sample_db, program):
    sink = TrainingSink(sample_db)
    training_id = sink.create(_finished_record(program))

    details = sink.details(training_id)
    bench, fly = details["exercises"]
    assert bench["sets"][0]["reps"] == 8
    assert isinstance(bench["sets"][0]["reps"], int)
    assert fly["sets"][0]["reps"] == "12-15"
