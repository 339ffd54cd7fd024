from backend import exercises
from backend.programs import DEFAULT_PROGRAMS


def test_library_holds_each_default_exercise_once():
    names = [ex.name for ex in exercises.EXERCISE_LIBRARY]
    expected = {ex.name for p in DEFAULT_PROGRAMS for ex in p.exercises}
    assert len(names) == len(set(n.lower() for n in names))
    assert set(names) == expected
    assert len(names) == 18


def test_library_entries_carry_muscles_and_equipment():
    bench = exercises.get_exercise("push-a-bench-press")
    assert bench.name == "Bench Press"
    assert bench.category == "push"
    assert bench.muscles == ("Chest", "Triceps", "Shoulders")
    assert bench.equipment == "Barbell, Bench"
    assert bench.exercise_type == "power"
    assert (bench.sets, bench.reps, bench.rest_seconds) == (4, 5, 150)
    assert all(ex.muscles and ex.equipment for ex in exercises.EXERCISE_LIBRARY)
    assert exercises.get_exercise("missing") is None


def test_filters_combine():
    pull = exercises.get_all_exercises(category="pull")
    assert len(pull) == 6
    assert {ex.category for ex in pull} == {"pull"}

    power = exercises.get_all_exercises(exercise_type="power")
    assert [ex.name for ex in power] == [
        "Bench Press",
        "Deadlift (Conventional or Sumo)",
        "Weighted Pull-ups (or Band-Assisted)",
        "Low Box Jumps/Step-ups",
    ]
    assert [ex.name for ex in exercises.get_all_exercises("legs", "power")] == [
        "Low Box Jumps/Step-ups"
    ]


def test_search_matches_name_muscles_and_equipment():
    assert [ex.name for ex in exercises.get_all_exercises(search="  bicep curl ")] == [
        "Dumbbell Bicep Curl"
    ]
    grip = exercises.get_all_exercises(search="GRIP")
    assert [ex.name for ex in grip] == ["Dumbbell Farmer's Carries"]
    bar = exercises.get_all_exercises(search="pull-up bar")
    assert len(bar) == 2
    assert exercises.get_all_exercises(search="zzz") == []


def test_group_by_category_and_template():
    groups = exercises.group_by_category()
    assert list(groups) == ["push", "pull", "legs"]
    assert sum(len(v) for v in groups.values()) == 18

    template = groups["push"][0].to_template("custom-id")
    assert template.id == "custom-id"
    assert template.name == "Dumbbell External Rotations"
    assert template.target_reps == "15 each arm"
    template.validate()
