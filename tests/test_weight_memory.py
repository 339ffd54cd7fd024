from backend.weight_memory import WeightMemory


def test_unknown_exercise_has_no_weight(sample_db):
    memory = WeightMemory(sample_db)
    assert memory.get_last_weight("ex-a") is None
    assert memory.get_last_session_weight("ex-a") is None
    assert memory.suggest_weight("ex-a") is None


def test_set_last_weight_updates_both_values(sample_db):
    memory = WeightMemory(sample_db)
    memory.set_last_weight("ex-a", 100)
    memory.set_last_weight("ex-a", 102.5)
    assert memory.get_last_weight("ex-a") == 102.5
    assert memory.get_last_session_weight("ex-a") == 102.5


def test_session_weight_takes_precedence_until_forgotten(sample_db):
    memory = WeightMemory(sample_db)
    memory.set_last_weight("ex-a", 80)
    memory.forget_session_weights()
    assert memory.suggest_weight("ex-a") == 80
    assert memory.get_last_session_weight("ex-a") is None

    memory.set_last_weight("ex-a", 85)
    assert memory.suggest_weight("ex-a") == 85
    memory.forget_session_weights()
    assert memory.get_last_weight("ex-a") == 85
