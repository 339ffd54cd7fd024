import json
import logging

from backend import workout_session as ws
from backend.session_store import SessionStore

T0 = 1_700_000_000.0


def test_store_round_trip_and_clear(tmp_path, program):
    base = tmp_path / "session_recovery"
    store = SessionStore(base)
    assert store.get() is None

    session = ws.complete_set(
        ws.create_session(program, now=T0), program, 0, 0, weight=60, now=T0 + 30
    )
    store.put(session)
    f1 = base.with_name(base.name + "_1.json")
    f2 = base.with_name(base.name + "_2.json")
    assert f1.exists() and f2.exists()
    with f1.open() as fh:
        data1 = json.load(fh)
    with f2.open() as fh:
        data2 = json.load(fh)
    assert data1 == data2 == session.to_dict()
    assert store.get() == session
    assert store.has_session()

    store.clear()
    assert not f1.exists() and not f2.exists()
    assert store.get() is None
    store.clear()


def test_put_replaces_previous_session(tmp_path, program):
    store = SessionStore(tmp_path / "recovery")
    first = ws.create_session(program, now=T0)
    second = ws.toggle_pause(first, now=T0 + 5)
    store.put(first)
    store.put(second)
    assert store.get().paused


def test_backup_file_used_when_primary_missing(tmp_path, program):
    base = tmp_path / "session_recovery"
    store = SessionStore(base)
    session = ws.create_session(program, now=T0)
    store.put(session)

    base.with_name(base.name + "_1.json").unlink()
    assert store.get() == session


def test_corrupted_primary_falls_back(tmp_path, program, caplog):
    caplog.set_level(logging.WARNING)
    base = tmp_path / "session_recovery"
    store = SessionStore(base)
    session = ws.create_session(program, now=T0)
    store.put(session)

    base.with_name(base.name + "_1.json").write_text("{not json")
    assert store.get() == session
    assert "Unreadable session recovery file" in caplog.text


def test_both_files_unreadable(tmp_path):
    base = tmp_path / "session_recovery"
    store = SessionStore(base)
    base.with_name(base.name + "_1.json").write_text("")
    base.with_name(base.name + "_2.json").write_text('{"program_name": "x"}')
    assert store.get() is None
