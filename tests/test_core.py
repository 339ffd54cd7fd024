import pytest

import core


@pytest.mark.parametrize(
    "ms, expected",
    [(None, "00:00"), (0, "00:00"), (-500, "00:00"), (999, "00:00"), (61_000, "01:01"), (3_600_000, "60:00")],
)
def test_format_clock(ms, expected):
    assert core.format_clock(ms) == expected


def test_format_clock_rounds_countdowns_up():
    assert core.format_clock(1, round_up=True) == "00:01"
    assert core.format_clock(59_001, round_up=True) == "01:00"
    assert core.format_clock(60_000, round_up=True) == "01:00"


def test_whole_minutes():
    assert core.whole_minutes(59_999) == 0
    assert core.whole_minutes(120_000) == 2
    assert core.whole_minutes(-10) == 0


def test_parse_reps():
    assert core.parse_reps(8) == 8
    assert core.parse_reps(" 12 ") == 12
    assert core.parse_reps("8-10") == "8-10"
    with pytest.raises(ValueError):
        core.parse_reps("")
    with pytest.raises(ValueError):
        core.parse_reps(True)


def test_now_uses_wall_clock(wall_clock):
    assert core.now() == wall_clock.now
    wall_clock.advance(2.5)
    assert core.now() == wall_clock.now
