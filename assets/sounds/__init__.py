from pathlib import Path
from kivy.core.audio import SoundLoader

from backend import settings as app_settings


class SoundSystem:
    """Play short workout cues.

    Sounds are loaded lazily from the ``assets/sounds`` directory and cached.
    Playback honours the ``sound_on`` and ``sound_level`` settings.
    """

    def __init__(self, base: Path | None = None):
        self._base = base or Path(__file__).resolve().parent
        self._cache: dict[str, object] = {}

    def _load(self, name: str):
        snd = self._cache.get(name)
        if snd is None:
            path = self._base / f"{name}.wav"
            if not path.exists():
                return None
            snd = SoundLoader.load(str(path))
            self._cache[name] = snd
        return snd

    def play(self, name: str) -> bool:
        """Play a named sound if available and enabled."""
        sound_on = app_settings.get_value("sound_on")
        if sound_on is not None and not sound_on:
            return False
        snd = self._load(name)
        if not snd:
            return False
        level = app_settings.get_value("sound_level")
        snd.volume = 1.0 if level is None else max(0.0, min(1.0, float(level)))
        snd.stop()
        snd.play()
        return True

    def rest_complete(self) -> bool:
        """Cue played once when a rest countdown runs out."""
        return self.play("rest_complete")
