import pytest

import assets.sounds as sounds
from backend import settings as app_settings


class FakeSound:
    def __init__(self):
        self.volume = None
        self.plays = 0

    def stop(self):
        pass

    def play(self):
        self.plays += 1


@pytest.fixture
def sound_system(tmp_path, monkeypatch):
    (tmp_path / "rest_complete.wav").write_bytes(b"")
    fake = FakeSound()
    monkeypatch.setattr(sounds.SoundLoader, "load", staticmethod(lambda path: fake))
    system = sounds.SoundSystem(base=tmp_path)
    system.fake = fake
    return system


def test_rest_complete_cue_uses_volume(sound_system):
    app_settings.set_value("sound_level", 0.4)
    assert sound_system.rest_complete()
    assert sound_system.fake.plays == 1
    assert sound_system.fake.volume == 0.4


def test_cue_muted_when_sound_off(sound_system):
    app_settings.set_value("sound_on", False)
    assert not sound_system.rest_complete()
    assert sound_system.fake.plays == 0


def test_missing_file_is_ignored(tmp_path):
    system = sounds.SoundSystem(base=tmp_path / "none")
    assert not system.play("rest_complete")
