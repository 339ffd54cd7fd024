import pytest

from backend import exercises
from backend.program_editor import ProgramEditor
from backend.programs import ProgramCatalog


@pytest.fixture
def catalog(sample_db):
    return ProgramCatalog(sample_db)


def test_new_program_is_saved_to_catalog(catalog):
    editor = ProgramEditor(catalog)
    assert not editor.is_modified()
    editor.add_from_library(exercises.get_exercise("push-a-bench-press"))
    editor.add_from_library(exercises.get_exercise("pull-d1-bicep-curl"))
    editor.update_exercise(0, sets="5", reps="3", rest=180)
    assert editor.is_modified()

    saved = editor.save()

    assert saved.id.startswith("program-")
    assert saved.display_name == "Push Session"
    assert editor.program_id == saved.id
    assert not editor.is_modified()
    stored = catalog.get_program(saved.id)
    assert stored == saved
    bench, curl = stored.exercises
    assert (bench.target_sets, bench.target_reps, bench.rest_seconds) == (5, 3, 180)
    assert bench.exercise_type == "power"
    assert curl.target_reps == "10-12"
    assert len(catalog.list_programs()) == 2


def test_empty_program_is_not_saved(catalog):
    editor = ProgramEditor(catalog)
    editor.display_name = "Nothing"
    assert editor.validate() == ["Add at least one exercise before saving"]
    with pytest.raises(ValueError, match="at least one exercise"):
        editor.save()
    assert [p.id for p in catalog.list_programs()] == ["program-scenario"]


def test_edit_existing_program(catalog):
    editor = ProgramEditor(catalog, "program-scenario")
    assert editor.display_name == "Scenario Day"
    assert [ex["name"] for ex in editor.exercises] == ["Bench Press", "Cable Fly"]

    editor.move_exercise(1, 0)
    editor.add_exercise("ex-c", "Plank", sets=2, reps="45 sec", rest=30)
    editor.remove_exercise(1)
    editor.category = "pull"
    editor.display_name = "Renamed Day"
    saved = editor.save()

    assert saved.id == "program-scenario"
    stored = catalog.get_program("program-scenario")
    assert stored.display_name == "Renamed Day"
    assert stored.category == "pull"
    assert [ex.name for ex in stored.exercises] == ["Cable Fly", "Plank"]
    assert stored.exercises[1].target_reps == "45 sec"
    assert len(catalog.list_programs()) == 1


def test_sets_and_rest_are_clamped(catalog):
    editor = ProgramEditor(catalog)
    editor.add_exercise("ex-a", "Row")
    assert editor.exercises[0]["sets"] == 3
    assert editor.exercises[0]["reps"] == 10
    assert editor.exercises[0]["rest"] == 75
    editor.update_exercise(0, sets=0, rest=-10)
    assert editor.exercises[0]["sets"] == 1
    assert editor.exercises[0]["rest"] == 0
    with pytest.raises(IndexError):
        editor.update_exercise(3, sets=2)
    with pytest.raises(IndexError):
        editor.move_exercise(0, 1)


def test_duplicate_library_exercise_gets_unique_id(catalog):
    editor = ProgramEditor(catalog)
    squat = exercises.get_exercise("legs-a-goblet-squat")
    first = editor.add_from_library(squat)
    second = editor.add_from_library(squat)
    assert first["id"] == "legs-a-goblet-squat"
    assert second["id"].startswith("legs-a-goblet-squat-")
    assert second["id"] != first["id"]
    saved = editor.save()
    assert len({ex.id for ex in saved.exercises}) == 2


def test_missing_program(catalog):
    with pytest.raises(ValueError):
        ProgramEditor(catalog, "missing")

    editor = ProgramEditor(catalog, "program-scenario")
    catalog.delete_program("program-scenario")
    with pytest.raises(ValueError, match="no longer exists"):
        editor.save()
